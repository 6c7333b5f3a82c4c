from typing import Any, List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core.db import get_db
from streamhub.modules.plans import schemas, service

router = APIRouter()

@router.get("/", response_model=List[schemas.PlanRead])
async def list_plans(
    active_only: bool = True,
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_plans(db, active_only=active_only)

@router.post("/", response_model=schemas.PlanRead, status_code=status.HTTP_201_CREATED)
async def create_plan(plan_in: schemas.PlanCreate, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.create_plan(db, plan_in)

@router.get("/{plan_id}", response_model=schemas.PlanRead)
async def get_plan(plan_id: UUID, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.get_plan_or_404(db, plan_id)

@router.patch("/{plan_id}", response_model=schemas.PlanRead)
async def set_plan_active(
    plan_id: UUID,
    update_in: schemas.PlanActiveUpdate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.set_plan_active(db, plan_id, update_in)
