import logging
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import List

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core.exceptions import ValidationError
from streamhub.core.timeutils import utcnow
from streamhub.modules.payments.models import PaymentTransaction, TransactionStatus
from streamhub.modules.reports import models, schemas
from streamhub.modules.subscriptions.models import Subscription, SubscriptionStatus

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS)

async def generate_revenue_report(
    db: AsyncSession, report_in: schemas.RevenueReportCreate
) -> models.RevenueReport:
    if report_in.period_start > report_in.period_end:
        raise ValidationError(
            "period_start must not be after period_end",
            context={"period_start": str(report_in.period_start), "period_end": str(report_in.period_end)},
        )

    # Whole days on both ends.
    window_start = datetime.combine(report_in.period_start, time.min)
    window_end = datetime.combine(report_in.period_end + timedelta(days=1), time.min)
    in_window = (
        PaymentTransaction.created_at >= window_start,
        PaymentTransaction.created_at < window_end,
    )
    succeeded = PaymentTransaction.transaction_status == TransactionStatus.SUCCESS

    revenue_res = await db.execute(select(func.sum(PaymentTransaction.amount)).where(succeeded, *in_window))
    total_revenue = _money(revenue_res.scalar())

    status_res = await db.execute(
        select(PaymentTransaction.transaction_status, func.count(PaymentTransaction.id))
        .where(*in_window)
        .group_by(PaymentTransaction.transaction_status)
    )
    status_counts = {row[0].value: row[1] for row in status_res.all()}

    currency_res = await db.execute(
        select(PaymentTransaction.currency, func.sum(PaymentTransaction.amount))
        .where(succeeded, *in_window)
        .group_by(PaymentTransaction.currency)
    )
    method_res = await db.execute(
        select(PaymentTransaction.payment_method, func.sum(PaymentTransaction.amount))
        .where(succeeded, *in_window)
        .group_by(PaymentTransaction.payment_method)
    )

    active_res = await db.execute(
        select(func.count(distinct(Subscription.user_id))).where(
            Subscription.status == SubscriptionStatus.ACTIVE,
            Subscription.start_date <= report_in.period_end,
            Subscription.end_date >= report_in.period_start,
        )
    )

    metrics = {
        "transactions_by_status": {s.value: status_counts.get(s.value, 0) for s in TransactionStatus},
        "revenue_by_currency": {row[0]: str(_money(row[1])) for row in currency_res.all()},
        "revenue_by_payment_method": {row[0]: str(_money(row[1])) for row in method_res.all()},
    }

    report = models.RevenueReport(
        report_period_start=report_in.period_start,
        report_period_end=report_in.period_end,
        total_revenue=total_revenue,
        active_users_count=active_res.scalar() or 0,
        metrics=metrics,
        generated_date=utcnow(),
        created_by=report_in.created_by,
    )
    db.add(report)
    await db.commit()
    logger.info(
        f"[Reports] Revenue {report.report_period_start}..{report.report_period_end}: "
        f"{report.total_revenue}, {report.active_users_count} active users"
    )
    return report

async def list_revenue_reports(db: AsyncSession, page: int = 0, size: int = 50) -> List[models.RevenueReport]:
    result = await db.execute(
        select(models.RevenueReport)
        .order_by(models.RevenueReport.generated_date.desc(), models.RevenueReport.id)
        .offset(page * size)
        .limit(size)
    )
    return list(result.scalars().all())
