import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from streamhub.core.exceptions import (
    ActiveSubscriptionExists,
    ConcurrentUpdate,
    InvalidStateTransition,
    NotFound,
    ValidationError,
)
from streamhub.core.timeutils import later_than, utcnow, utctoday
from streamhub.modules.audit import service as audit_service
from streamhub.modules.audit.models import AuditAction
from streamhub.modules.payments.models import PaymentTransaction, TransactionStatus
from streamhub.modules.plans import service as plans_service
from streamhub.modules.subscriptions import models, schemas
from streamhub.modules.users import service as users_service
from streamhub.modules.users.models import UserStatus

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"

def _snapshot(sub: models.Subscription) -> dict:
    return schemas.SubscriptionRead.model_validate(sub).model_dump(mode="json")

def transition(
    db: AsyncSession,
    sub: models.Subscription,
    new_status: models.SubscriptionStatus,
    performed_by: Optional[str] = None,
    reason: Optional[str] = None,
) -> None:
    """
    Moves `sub` to `new_status` and queues the audit row.

    The caller commits. A status the transitions table does not allow
    raises InvalidStateTransition and leaves the row untouched.
    """
    if new_status not in models.TRANSITIONS[sub.status]:
        raise InvalidStateTransition("Subscription", sub.status, new_status)

    old_status = sub.status
    sub.status = new_status
    sub.updated_by = performed_by
    sub.updated_at = later_than(sub.updated_at)

    new_value = {"status": new_status.value}
    if reason:
        new_value["reason"] = reason
    audit_service.record_change(
        db,
        table_name=models.Subscription.__tablename__,
        action=AuditAction.STATUS_CHANGE,
        record_id=sub.id,
        old_value={"status": old_status.value},
        new_value=new_value,
        performed_by=performed_by,
    )
    logger.info(f"[Subscriptions] {sub.id}: {old_status.value} -> {new_status.value}")

async def commit_or_conflict(db: AsyncSession, sub: models.Subscription) -> None:
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        logger.warning(f"[Subscriptions] Version conflict on {sub.id}")
        raise ConcurrentUpdate("Subscription", sub.id)

async def get_subscription(db: AsyncSession, subscription_id: UUID) -> Optional[models.Subscription]:
    return await db.get(models.Subscription, subscription_id)

async def get_subscription_or_404(db: AsyncSession, subscription_id: UUID) -> models.Subscription:
    sub = await get_subscription(db, subscription_id)
    if not sub:
        raise NotFound("Subscription", subscription_id)
    return sub

async def get_live_subscription(db: AsyncSession, user_id: UUID) -> Optional[models.Subscription]:
    result = await db.execute(
        select(models.Subscription).where(
            models.Subscription.user_id == user_id,
            models.Subscription.status.in_(models.LIVE_STATUSES),
        )
    )
    return result.scalars().first()

async def list_subscriptions(
    db: AsyncSession,
    user_id: Optional[UUID] = None,
    status: Optional[models.SubscriptionStatus] = None,
    page: int = 0,
    size: int = 50,
) -> List[models.Subscription]:
    stmt = select(models.Subscription)
    if user_id:
        stmt = stmt.where(models.Subscription.user_id == user_id)
    if status:
        stmt = stmt.where(models.Subscription.status == status)
    result = await db.execute(
        stmt.order_by(models.Subscription.created_at.desc(), models.Subscription.id)
        .offset(page * size)
        .limit(size)
    )
    return list(result.scalars().all())

def expire_if_due(
    db: AsyncSession, sub: models.Subscription, today: Optional[date] = None
) -> bool:
    """Check-on-read expiry. Returns True when `sub` was moved to EXPIRED."""
    today = today or utctoday()
    if sub.status == models.SubscriptionStatus.ACTIVE and sub.end_date < today:
        transition(db, sub, models.SubscriptionStatus.EXPIRED, performed_by=SYSTEM_ACTOR, reason="end_date passed")
        return True
    return False

async def expire_due_subscriptions(db: AsyncSession, today: Optional[date] = None) -> schemas.ExpirySweepResult:
    today = today or utctoday()
    result = await db.execute(
        select(models.Subscription).where(
            models.Subscription.status == models.SubscriptionStatus.ACTIVE,
            models.Subscription.end_date < today,
        )
    )
    due = list(result.scalars().all())
    for sub in due:
        expire_if_due(db, sub, today)

    if due:
        try:
            await db.commit()
        except StaleDataError:
            await db.rollback()
            logger.warning("[Subscriptions] Expiry sweep hit a concurrent update, will retry next run")
            raise ConcurrentUpdate("Subscription")
    logger.info(f"[Subscriptions] Expiry sweep as of {today}: {len(due)} expired")
    return schemas.ExpirySweepResult(as_of=today, expired_count=len(due), expired_ids=[s.id for s in due])

async def create_subscription(
    db: AsyncSession, sub_in: schemas.SubscriptionCreate, today: Optional[date] = None
) -> models.Subscription:
    today = today or utctoday()
    user = await users_service.get_user_or_404(db, sub_in.user_id)
    if user.status != UserStatus.ACTIVE:
        raise ValidationError(
            "Only active users can subscribe",
            context={"user_id": str(user.id), "status": user.status.value},
        )

    plan = await plans_service.get_plan_or_404(db, sub_in.plan_id)
    if not plan.is_active:
        raise ValidationError("Plan is not available for new subscriptions", context={"plan_id": str(plan.id)})

    live = await get_live_subscription(db, user.id)
    if live and not expire_if_due(db, live, today):
        raise ActiveSubscriptionExists(user.id)
    if live:
        # The lapsed row has to reach the database before the new live one.
        await db.flush()

    start_date = sub_in.start_date or today
    now = utcnow()
    sub = models.Subscription(
        user_id=user.id,
        plan_id=plan.id,
        start_date=start_date,
        end_date=start_date + timedelta(days=plan.duration_days),
        status=models.SubscriptionStatus.ACTIVE,
        created_by=sub_in.created_by,
        updated_by=sub_in.created_by,
        created_at=now,
        updated_at=now,
    )
    db.add(sub)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"[Subscriptions] Concurrent subscribe for user {user.id} rejected by storage")
        raise ActiveSubscriptionExists(user.id)

    audit_service.record_change(
        db,
        table_name=models.Subscription.__tablename__,
        action=AuditAction.INSERT,
        record_id=sub.id,
        new_value=_snapshot(sub),
        performed_by=sub_in.created_by,
    )
    await db.commit()
    logger.info(f"[Subscriptions] User {user.id} subscribed to {plan.plan_name} until {sub.end_date}")
    return sub

async def cancel_subscription(
    db: AsyncSession, subscription_id: UUID, cancel_in: schemas.SubscriptionCancel
) -> models.Subscription:
    sub = await get_subscription_or_404(db, subscription_id)
    transition(db, sub, models.SubscriptionStatus.CANCELLED, cancel_in.performed_by, cancel_in.reason)
    await commit_or_conflict(db, sub)
    return sub

async def amount_since_last_failure(db: AsyncSession, subscription_id: UUID) -> Decimal:
    """Sum of SUCCESS payments that come after the latest FAILED one in the ledger."""
    last_failure = (await db.execute(
        select(func.max(PaymentTransaction.sequence)).where(
            PaymentTransaction.subscription_id == subscription_id,
            PaymentTransaction.transaction_status == TransactionStatus.FAILED,
        )
    )).scalar()

    stmt = select(func.sum(PaymentTransaction.amount)).where(
        PaymentTransaction.subscription_id == subscription_id,
        PaymentTransaction.transaction_status == TransactionStatus.SUCCESS,
    )
    if last_failure is not None:
        stmt = stmt.where(PaymentTransaction.sequence > last_failure)
    total = (await db.execute(stmt)).scalar()
    return Decimal(str(total or 0)).quantize(Decimal("0.01"))

async def apply_payment_outcome(
    db: AsyncSession,
    sub: models.Subscription,
    payment: PaymentTransaction,
    performed_by: Optional[str] = None,
) -> bool:
    """
    Applies a freshly recorded payment to its subscription.

    FAILED on ACTIVE moves to PAST_DUE. SUCCESS on PAST_DUE moves back to
    ACTIVE once the successful amounts since the latest failure cover the
    plan price. Everything else is recorded without a transition.
    Returns True when the status changed. The caller commits.
    """
    status = payment.transaction_status

    if status == TransactionStatus.FAILED and sub.status == models.SubscriptionStatus.ACTIVE:
        transition(db, sub, models.SubscriptionStatus.PAST_DUE, performed_by, reason=f"payment {payment.id} failed")
        return True

    if status == TransactionStatus.SUCCESS and sub.status == models.SubscriptionStatus.PAST_DUE:
        plan = await plans_service.get_plan_or_404(db, sub.plan_id)
        covered = await amount_since_last_failure(db, sub.id)
        if covered >= plan.price:
            transition(db, sub, models.SubscriptionStatus.ACTIVE, performed_by, reason=f"payment {payment.id} settled arrears")
            return True
        logger.info(f"[Subscriptions] {sub.id} still PAST_DUE: covered {covered} of {plan.price}")

    return False
