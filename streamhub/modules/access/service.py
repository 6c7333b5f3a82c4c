import logging
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core.timeutils import utcnow, utctoday
from streamhub.modules.access import models, schemas
from streamhub.modules.catalog import service as catalog_service
from streamhub.modules.catalog.models import ContentStatus
from streamhub.modules.subscriptions import service as subscriptions_service
from streamhub.modules.subscriptions.models import SubscriptionStatus
from streamhub.modules.users import service as users_service
from streamhub.modules.users.models import UserStatus

logger = logging.getLogger(__name__)

def add_access_log(db: AsyncSession, log_in: schemas.AccessLogCreate) -> models.AccessControlLog:
    log = models.AccessControlLog(**log_in.model_dump(), timestamp=utcnow())
    db.add(log)
    return log

async def record_access(db: AsyncSession, log_in: schemas.AccessLogCreate) -> models.AccessControlLog:
    """
    Appends one access attempt. There is no business rule that rejects a
    log row; only storage errors surface from here.
    """
    log = add_access_log(db, log_in)
    await db.commit()
    logger.info(f"[Access] {log.access_status.value} user={log.user_id} content={log.content_id}")
    return log

async def check_access(
    db: AsyncSession,
    content_id: UUID,
    request: schemas.AccessRequest,
    today: Optional[date] = None,
) -> schemas.AccessDecision:
    today = today or utctoday()
    content = await catalog_service.get_content_or_404(db, content_id)
    user = await users_service.get_user_or_404(db, request.user_id)

    subscription = None
    if user.status != UserStatus.ACTIVE:
        decision = models.AccessStatus.DENIED_USER_INACTIVE
    elif content.status != ContentStatus.ACTIVE or not content.is_available:
        decision = models.AccessStatus.DENIED_UNAVAILABLE
    elif content.is_premium:
        subscription = await subscriptions_service.get_live_subscription(db, user.id)
        if subscription is not None:
            subscriptions_service.expire_if_due(db, subscription, today)
        # A subscription whose period has not started yet does not cover today.
        if (
            subscription is None
            or subscription.status == SubscriptionStatus.EXPIRED
            or subscription.start_date > today
        ):
            decision = models.AccessStatus.DENIED_NO_SUBSCRIPTION
        elif subscription.status == SubscriptionStatus.PAST_DUE:
            decision = models.AccessStatus.DENIED_PAST_DUE
        else:
            decision = models.AccessStatus.GRANTED
    else:
        decision = models.AccessStatus.GRANTED

    view_count = None
    if decision == models.AccessStatus.GRANTED:
        counters = await catalog_service.increment_view_count(db, content.id, commit=False)
        view_count = counters.view_count

    log = add_access_log(db, schemas.AccessLogCreate(
        content_id=content.id,
        user_id=user.id,
        access_status=decision,
        ip_address=request.ip_address,
        user_agent=request.user_agent,
        content_title_snapshot=content.title,
    ))
    if subscription is not None:
        await subscriptions_service.commit_or_conflict(db, subscription)
    else:
        await db.commit()

    logger.info(f"[Access] {decision.value} user={user.id} content={content.id}")
    return schemas.AccessDecision(
        content_id=content.id,
        user_id=user.id,
        access_status=decision,
        granted=decision == models.AccessStatus.GRANTED,
        subscription_id=subscription.id if subscription is not None else None,
        view_count=view_count,
        log_id=log.id,
    )

async def list_access_logs(
    db: AsyncSession,
    user_id: Optional[UUID] = None,
    content_id: Optional[UUID] = None,
    access_status: Optional[models.AccessStatus] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    page: int = 0,
    size: int = 50,
) -> dict:
    filters = []
    if user_id:
        filters.append(models.AccessControlLog.user_id == user_id)
    if content_id:
        filters.append(models.AccessControlLog.content_id == content_id)
    if access_status:
        filters.append(models.AccessControlLog.access_status == access_status)
    if since:
        filters.append(models.AccessControlLog.timestamp >= since)
    if until:
        filters.append(models.AccessControlLog.timestamp <= until)

    total = (await db.execute(
        select(func.count(models.AccessControlLog.id)).where(*filters)
    )).scalar() or 0
    items = (await db.execute(
        select(models.AccessControlLog)
        .where(*filters)
        .order_by(models.AccessControlLog.timestamp.desc(), models.AccessControlLog.id)
        .offset(page * size)
        .limit(size)
    )).scalars().all()
    return {"items": items, "total": total, "page": page, "size": size}
