from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import update

from streamhub.core.exceptions import ValidationError
from streamhub.modules.payments import models as payment_models
from streamhub.modules.payments import schemas as payment_schemas
from streamhub.modules.payments import service as payments_service
from streamhub.modules.reports import schemas, service


async def pay(db, sub, status, amount, currency="USD", method="CARD"):
    return await payments_service.record_payment(db, payment_schemas.PaymentCreate(
        subscription_id=sub.id,
        user_id=sub.user_id,
        amount=Decimal(amount),
        currency=currency,
        payment_method=method,
        transaction_status=status,
    ), today=date(2026, 1, 10))


async def backdate(db, payment_id, when: datetime):
    # Ledger rows are immutable through the ORM; fixtures move them with plain SQL.
    await db.execute(
        update(payment_models.PaymentTransaction.__table__)
        .where(payment_models.PaymentTransaction.__table__.c.id == payment_id)
        .values(created_at=when)
    )
    await db.commit()


async def test_revenue_report_aggregates_window(db, make_user, make_plan, make_subscription):
    plan = await make_plan(price="10.00")
    alice = await make_subscription(await make_user("alice"), plan, start_date=date(2026, 1, 1))
    bob = await make_subscription(await make_user("bob"), plan, start_date=date(2026, 1, 1))

    s1 = await pay(db, alice, payment_models.TransactionStatus.SUCCESS, "10.00")
    s2 = await pay(db, bob, payment_models.TransactionStatus.SUCCESS, "12.50", currency="EUR", method="PAYPAL")
    f1 = await pay(db, bob, payment_models.TransactionStatus.FAILED, "12.50")
    outside = await pay(db, alice, payment_models.TransactionStatus.SUCCESS, "99.00")

    await backdate(db, s1.payment.id, datetime(2026, 1, 5, 9, 0))
    await backdate(db, s2.payment.id, datetime(2026, 1, 31, 23, 59))
    await backdate(db, f1.payment.id, datetime(2026, 1, 20, 12, 0))
    await backdate(db, outside.payment.id, datetime(2026, 2, 1, 0, 0))

    report = await service.generate_revenue_report(db, schemas.RevenueReportCreate(
        period_start=date(2026, 1, 1), period_end=date(2026, 1, 31), created_by="finance"
    ))

    assert report.total_revenue == Decimal("22.50")
    # bob is PAST_DUE after the failed payment
    assert report.active_users_count == 1
    assert report.metrics["transactions_by_status"] == {"PENDING": 0, "SUCCESS": 2, "FAILED": 1}
    assert report.metrics["revenue_by_currency"] == {"USD": "10.00", "EUR": "12.50"}
    assert report.metrics["revenue_by_payment_method"] == {"CARD": "10.00", "PAYPAL": "12.50"}

    listed = await service.list_revenue_reports(db)
    assert [r.id for r in listed] == [report.id]


async def test_empty_window(db):
    report = await service.generate_revenue_report(db, schemas.RevenueReportCreate(
        period_start=date(2025, 1, 1), period_end=date(2025, 1, 1)
    ))
    assert report.total_revenue == Decimal("0.00")
    assert report.active_users_count == 0


async def test_inverted_window_is_rejected(db):
    with pytest.raises(ValidationError):
        await service.generate_revenue_report(db, schemas.RevenueReportCreate(
            period_start=date(2026, 2, 1), period_end=date(2026, 1, 1)
        ))


async def test_revenue_routes(client):
    response = await client.post(
        "/api/v1/reports/revenue", json={"period_start": "2026-01-01", "period_end": "2026-01-31"}
    )
    assert response.status_code == 201
    assert response.json()["total_revenue"] == "0.00"

    bad = await client.post("/api/v1/reports/revenue", json={"period_start": "2026-02-01", "period_end": "2026-01-01"})
    assert bad.status_code == 400

    assert len((await client.get("/api/v1/reports/revenue")).json()) == 1
