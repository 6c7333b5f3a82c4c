import uuid
from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import select

from streamhub.core.exceptions import AppendOnlyViolation, NotFound, ValidationError
from streamhub.modules.payments import models, schemas, service
from streamhub.modules.subscriptions import schemas as subscription_schemas
from streamhub.modules.subscriptions import service as subscriptions_service
from streamhub.modules.subscriptions.models import SubscriptionStatus

TODAY = date(2026, 1, 10)


def payment(sub, status, amount="9.99", **fields):
    return schemas.PaymentCreate(
        subscription_id=sub.id,
        user_id=sub.user_id,
        amount=Decimal(amount),
        payment_method="CARD",
        transaction_status=status,
        **fields,
    )


@pytest.fixture
async def subscription(make_user, make_plan, make_subscription):
    user = await make_user()
    plan = await make_plan(price="9.99")
    return await make_subscription(user, plan)


async def test_failed_then_success_restores_active(db, subscription):
    failed = await service.record_payment(
        db, payment(subscription, models.TransactionStatus.FAILED, error_message="card declined"), today=TODAY
    )
    assert failed.previous_subscription_status == SubscriptionStatus.ACTIVE
    assert failed.subscription_status == SubscriptionStatus.PAST_DUE
    assert failed.transitioned is True

    retried = await service.record_payment(
        db, payment(subscription, models.TransactionStatus.SUCCESS, gateway_reference="ch_123"), today=TODAY
    )
    assert retried.subscription_status == SubscriptionStatus.ACTIVE
    assert retried.transitioned is True

    rows = (await db.execute(
        select(models.PaymentTransaction).where(models.PaymentTransaction.subscription_id == subscription.id)
    )).scalars().all()
    assert sorted(r.transaction_status.value for r in rows) == ["FAILED", "SUCCESS"]
    failed_row = next(r for r in rows if r.transaction_status == models.TransactionStatus.FAILED)
    assert failed_row.error_message == "card declined"


async def test_partial_payment_stays_past_due_until_covered(db, subscription):
    await service.record_payment(db, payment(subscription, models.TransactionStatus.FAILED), today=TODAY)

    first = await service.record_payment(
        db, payment(subscription, models.TransactionStatus.SUCCESS, amount="5.00"), today=TODAY
    )
    assert first.subscription_status == SubscriptionStatus.PAST_DUE
    assert first.transitioned is False

    second = await service.record_payment(
        db, payment(subscription, models.TransactionStatus.SUCCESS, amount="4.99"), today=TODAY
    )
    assert second.subscription_status == SubscriptionStatus.ACTIVE


async def test_payments_before_the_failure_do_not_count(db, subscription):
    await service.record_payment(db, payment(subscription, models.TransactionStatus.SUCCESS), today=TODAY)
    await service.record_payment(db, payment(subscription, models.TransactionStatus.FAILED), today=TODAY)

    assert await subscriptions_service.amount_since_last_failure(db, subscription.id) == Decimal("0.00")

    partial = await service.record_payment(
        db, payment(subscription, models.TransactionStatus.SUCCESS, amount="1.00"), today=TODAY
    )
    assert partial.subscription_status == SubscriptionStatus.PAST_DUE


async def test_failure_cutoff_holds_when_timestamps_collide(db, subscription, monkeypatch):
    frozen = datetime(2026, 1, 10, 12, 0, 0)
    monkeypatch.setattr(service, "utcnow", lambda: frozen)

    paid = await service.record_payment(db, payment(subscription, models.TransactionStatus.SUCCESS), today=TODAY)
    failed = await service.record_payment(db, payment(subscription, models.TransactionStatus.FAILED), today=TODAY)
    assert failed.subscription_status == SubscriptionStatus.PAST_DUE
    assert paid.payment.created_at == failed.payment.created_at
    assert failed.payment.sequence == paid.payment.sequence + 1

    assert await subscriptions_service.amount_since_last_failure(db, subscription.id) == Decimal("0.00")

    partial = await service.record_payment(
        db, payment(subscription, models.TransactionStatus.SUCCESS, amount="1.00"), today=TODAY
    )
    assert partial.subscription_status == SubscriptionStatus.PAST_DUE

    settled = await service.record_payment(
        db, payment(subscription, models.TransactionStatus.SUCCESS, amount="8.99"), today=TODAY
    )
    assert settled.subscription_status == SubscriptionStatus.ACTIVE


async def test_ledger_positions_are_per_subscription(db, subscription, make_user, make_plan, make_subscription):
    other = await make_subscription(await make_user("other"), await make_plan(plan_name="Other", price="4.99"))

    first = await service.record_payment(db, payment(subscription, models.TransactionStatus.PENDING), today=TODAY)
    second = await service.record_payment(db, payment(subscription, models.TransactionStatus.SUCCESS), today=TODAY)
    elsewhere = await service.record_payment(db, payment(other, models.TransactionStatus.SUCCESS), today=TODAY)

    assert [first.payment.sequence, second.payment.sequence] == [1, 2]
    assert elsewhere.payment.sequence == 1


async def test_pending_changes_nothing(db, subscription):
    outcome = await service.record_payment(db, payment(subscription, models.TransactionStatus.PENDING), today=TODAY)
    assert outcome.subscription_status == SubscriptionStatus.ACTIVE
    assert outcome.transitioned is False


async def test_payment_on_cancelled_subscription_is_only_recorded(db, subscription):
    await subscriptions_service.cancel_subscription(db, subscription.id, subscription_schemas.SubscriptionCancel())

    outcome = await service.record_payment(db, payment(subscription, models.TransactionStatus.FAILED), today=TODAY)

    assert outcome.subscription_status == SubscriptionStatus.CANCELLED
    assert outcome.transitioned is False
    assert (await service.list_payments(db, subscription_id=subscription.id))["total"] == 1


async def test_payment_on_lapsed_subscription_expires_it_first(db, subscription):
    outcome = await service.record_payment(
        db, payment(subscription, models.TransactionStatus.FAILED), today=date(2026, 6, 1)
    )
    assert outcome.previous_subscription_status == SubscriptionStatus.EXPIRED
    assert outcome.subscription_status == SubscriptionStatus.EXPIRED


async def test_payer_must_own_the_subscription(db, subscription):
    payment_in = payment(subscription, models.TransactionStatus.SUCCESS)
    payment_in.user_id = uuid.uuid4()

    with pytest.raises(ValidationError):
        await service.record_payment(db, payment_in, today=TODAY)
    assert (await service.list_payments(db))["total"] == 0


async def test_unknown_subscription(db):
    payment_in = schemas.PaymentCreate(
        subscription_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        amount=Decimal("1.00"),
        payment_method="CARD",
        transaction_status=models.TransactionStatus.SUCCESS,
    )
    with pytest.raises(NotFound):
        await service.record_payment(db, payment_in)


async def test_ledger_rows_cannot_be_changed(db, subscription):
    outcome = await service.record_payment(db, payment(subscription, models.TransactionStatus.PENDING), today=TODAY)
    row = await service.get_payment_or_404(db, outcome.payment.id)

    row.transaction_status = models.TransactionStatus.SUCCESS
    with pytest.raises(AppendOnlyViolation):
        await db.flush()
    await db.rollback()

    row = await service.get_payment_or_404(db, outcome.payment.id)
    await db.delete(row)
    with pytest.raises(AppendOnlyViolation):
        await db.flush()


def test_currency_is_normalised():
    payment_in = schemas.PaymentCreate(
        subscription_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        amount=Decimal("3.50"),
        currency="eur",
        payment_method="PAYPAL",
        transaction_status=models.TransactionStatus.SUCCESS,
    )
    assert payment_in.currency == "EUR"
