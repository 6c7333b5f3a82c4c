from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from streamhub.modules.payments.models import TransactionStatus
from streamhub.modules.subscriptions.models import SubscriptionStatus

class PaymentCreate(BaseModel):
    subscription_id: UUID
    user_id: UUID
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    currency: str = Field("USD", min_length=3, max_length=3)
    payment_method: str = Field(..., min_length=1, max_length=50)
    transaction_status: TransactionStatus
    gateway_reference: Optional[str] = None
    error_message: Optional[str] = None
    created_by: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def currency_code(cls, v: str) -> str:
        if not v.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return v.upper()

class PaymentRead(BaseModel):
    id: UUID
    subscription_id: UUID
    user_id: UUID
    sequence: int
    amount: Decimal
    currency: str
    payment_method: str
    transaction_status: TransactionStatus
    gateway_reference: Optional[str] = None
    error_message: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class PaymentOutcome(BaseModel):
    payment: PaymentRead
    subscription_status: SubscriptionStatus
    previous_subscription_status: SubscriptionStatus
    transitioned: bool

class PaymentListResponse(BaseModel):
    items: List[PaymentRead]
    total: int
    page: int
    size: int
