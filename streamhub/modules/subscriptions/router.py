from datetime import date
from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core import deps
from streamhub.core.db import get_db
from streamhub.modules.payments import schemas as payment_schemas
from streamhub.modules.payments import service as payments_service
from streamhub.modules.subscriptions import models, schemas, service

router = APIRouter()

@router.post("/", response_model=schemas.SubscriptionRead, status_code=status.HTTP_201_CREATED)
async def create_subscription(sub_in: schemas.SubscriptionCreate, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.create_subscription(db, sub_in)

@router.get("/", response_model=List[schemas.SubscriptionRead])
async def list_subscriptions(
    user_id: Optional[UUID] = None,
    sub_status: Optional[models.SubscriptionStatus] = Query(None, alias="status"),
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_subscriptions(db, user_id=user_id, status=sub_status, page=params.page, size=params.size)

@router.post("/expire", response_model=schemas.ExpirySweepResult)
async def expire_subscriptions(
    as_of: Optional[date] = None,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """Manual run of the expiry sweep the background worker performs."""
    return await service.expire_due_subscriptions(db, today=as_of)

@router.get("/{subscription_id}", response_model=schemas.SubscriptionRead)
async def get_subscription(subscription_id: UUID, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.get_subscription_or_404(db, subscription_id)

@router.post("/{subscription_id}/cancel", response_model=schemas.SubscriptionRead)
async def cancel_subscription(
    subscription_id: UUID,
    cancel_in: Optional[schemas.SubscriptionCancel] = None,
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.cancel_subscription(db, subscription_id, cancel_in or schemas.SubscriptionCancel())

@router.get("/{subscription_id}/payments", response_model=payment_schemas.PaymentListResponse)
async def list_subscription_payments(
    subscription_id: UUID,
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(get_db)
) -> Any:
    await service.get_subscription_or_404(db, subscription_id)
    return await payments_service.list_payments(
        db, subscription_id=subscription_id, page=params.page, size=params.size
    )
