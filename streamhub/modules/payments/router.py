from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core import deps
from streamhub.core.db import get_db
from streamhub.modules.payments import models, schemas, service

router = APIRouter()

@router.post("/", response_model=schemas.PaymentOutcome, status_code=status.HTTP_201_CREATED)
async def record_payment(payment_in: schemas.PaymentCreate, db: AsyncSession = Depends(get_db)) -> Any:
    """
    Record a payment attempt.
    A retry after a failure is a new call; existing transactions never change.
    """
    return await service.record_payment(db, payment_in)

@router.get("/", response_model=schemas.PaymentListResponse)
async def list_payments(
    user_id: Optional[UUID] = None,
    subscription_id: Optional[UUID] = None,
    transaction_status: Optional[models.TransactionStatus] = Query(None, alias="status"),
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_payments(
        db,
        user_id=user_id,
        subscription_id=subscription_id,
        status=transaction_status,
        page=params.page,
        size=params.size,
    )

@router.get("/{payment_id}", response_model=schemas.PaymentRead)
async def get_payment(payment_id: UUID, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.get_payment_or_404(db, payment_id)
