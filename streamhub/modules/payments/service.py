import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core.exceptions import ConcurrentUpdate, NotFound, ValidationError
from streamhub.core.timeutils import utcnow
from streamhub.modules.audit import service as audit_service
from streamhub.modules.audit.models import AuditAction
from streamhub.modules.payments import models, schemas
from streamhub.modules.subscriptions import service as subscriptions_service

logger = logging.getLogger(__name__)

async def next_sequence(db: AsyncSession, subscription_id: UUID) -> int:
    current = (await db.execute(
        select(func.max(models.PaymentTransaction.sequence)).where(
            models.PaymentTransaction.subscription_id == subscription_id
        )
    )).scalar()
    return (current or 0) + 1

async def record_payment(
    db: AsyncSession, payment_in: schemas.PaymentCreate, today: Optional[date] = None
) -> schemas.PaymentOutcome:
    """
    Appends a transaction and applies its outcome to the subscription.

    Ledger row, subscription status and audit rows share one commit, so a
    reader never sees a successful payment next to a stale PAST_DUE.
    """
    sub = await subscriptions_service.get_subscription_or_404(db, payment_in.subscription_id)
    if sub.user_id != payment_in.user_id:
        raise ValidationError(
            "Payment user does not own the subscription",
            context={"subscription_id": str(sub.id), "user_id": str(payment_in.user_id)},
        )

    # A lapsed subscription takes the payment as a plain ledger entry.
    subscriptions_service.expire_if_due(db, sub, today)
    previous_status = sub.status

    sequence = await next_sequence(db, sub.id)
    payment = models.PaymentTransaction(**payment_in.model_dump(), sequence=sequence, created_at=utcnow())
    db.add(payment)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"[Payments] Ledger position {sequence} on subscription {payment_in.subscription_id} taken concurrently")
        raise ConcurrentUpdate("Subscription", payment_in.subscription_id)
    payment_view = schemas.PaymentRead.model_validate(payment)

    audit_service.record_change(
        db,
        table_name=models.PaymentTransaction.__tablename__,
        action=AuditAction.INSERT,
        record_id=payment.id,
        new_value=payment_view.model_dump(mode="json"),
        performed_by=payment_in.created_by,
    )
    transitioned = await subscriptions_service.apply_payment_outcome(
        db, sub, payment, performed_by=payment_in.created_by
    )
    await subscriptions_service.commit_or_conflict(db, sub)

    logger.info(
        f"[Payments] {payment.transaction_status.value} {payment.amount} {payment.currency} "
        f"on subscription {sub.id} ({previous_status.value} -> {sub.status.value})"
    )
    return schemas.PaymentOutcome(
        payment=payment_view,
        subscription_status=sub.status,
        previous_subscription_status=previous_status,
        transitioned=transitioned,
    )

async def get_payment_or_404(db: AsyncSession, payment_id: UUID) -> models.PaymentTransaction:
    payment = await db.get(models.PaymentTransaction, payment_id)
    if not payment:
        raise NotFound("PaymentTransaction", payment_id)
    return payment

async def list_payments(
    db: AsyncSession,
    user_id: Optional[UUID] = None,
    subscription_id: Optional[UUID] = None,
    status: Optional[models.TransactionStatus] = None,
    page: int = 0,
    size: int = 50,
) -> dict:
    filters = []
    if user_id:
        filters.append(models.PaymentTransaction.user_id == user_id)
    if subscription_id:
        filters.append(models.PaymentTransaction.subscription_id == subscription_id)
    if status:
        filters.append(models.PaymentTransaction.transaction_status == status)

    total = (await db.execute(
        select(func.count(models.PaymentTransaction.id)).where(*filters)
    )).scalar() or 0
    items = (await db.execute(
        select(models.PaymentTransaction)
        .where(*filters)
        .order_by(models.PaymentTransaction.created_at.desc(), models.PaymentTransaction.id)
        .offset(page * size)
        .limit(size)
    )).scalars().all()
    return {"items": items, "total": total, "page": page, "size": size}
