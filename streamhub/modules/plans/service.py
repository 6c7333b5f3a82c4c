import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core.exceptions import NotFound, ValidationError
from streamhub.core.timeutils import later_than, utcnow
from streamhub.modules.audit import service as audit_service
from streamhub.modules.audit.models import AuditAction
from streamhub.modules.plans import models, schemas

logger = logging.getLogger(__name__)

async def list_plans(db: AsyncSession, active_only: bool = True) -> List[models.SubscriptionPlan]:
    stmt = select(models.SubscriptionPlan)
    if active_only:
        stmt = stmt.where(models.SubscriptionPlan.is_active.is_(True))
    result = await db.execute(stmt.order_by(models.SubscriptionPlan.price.asc(), models.SubscriptionPlan.plan_name))
    return list(result.scalars().all())

async def get_plan(db: AsyncSession, plan_id: UUID) -> Optional[models.SubscriptionPlan]:
    return await db.get(models.SubscriptionPlan, plan_id)

async def get_plan_or_404(db: AsyncSession, plan_id: UUID) -> models.SubscriptionPlan:
    plan = await get_plan(db, plan_id)
    if not plan:
        raise NotFound("SubscriptionPlan", plan_id)
    return plan

async def create_plan(db: AsyncSession, plan_in: schemas.PlanCreate) -> models.SubscriptionPlan:
    existing = await db.execute(
        select(models.SubscriptionPlan.id).where(models.SubscriptionPlan.plan_name == plan_in.plan_name)
    )
    if existing.first():
        raise ValidationError("Plan with this name already exists", context={"plan_name": plan_in.plan_name})

    now = utcnow()
    plan = models.SubscriptionPlan(**plan_in.model_dump(), created_at=now, updated_at=now)
    db.add(plan)
    await db.flush()
    audit_service.record_change(
        db,
        table_name=models.SubscriptionPlan.__tablename__,
        action=AuditAction.INSERT,
        record_id=plan.id,
        new_value=schemas.PlanRead.model_validate(plan).model_dump(mode="json"),
        performed_by=plan_in.created_by,
    )
    await db.commit()
    logger.info(f"[Plans] Plan created: {plan.plan_name} ({plan.price} / {plan.duration_days}d)")
    return plan

async def set_plan_active(db: AsyncSession, plan_id: UUID, update_in: schemas.PlanActiveUpdate) -> models.SubscriptionPlan:
    plan = await get_plan_or_404(db, plan_id)
    if plan.is_active == update_in.is_active:
        return plan
    plan.is_active = update_in.is_active
    plan.updated_by = update_in.updated_by
    plan.updated_at = later_than(plan.updated_at)
    audit_service.record_change(
        db,
        table_name=models.SubscriptionPlan.__tablename__,
        action=AuditAction.UPDATE,
        record_id=plan.id,
        old_value={"is_active": not update_in.is_active},
        new_value={"is_active": update_in.is_active},
        performed_by=update_in.updated_by,
    )
    await db.commit()
    return plan
