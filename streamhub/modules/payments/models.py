import enum
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from streamhub.core.db import Base
from streamhub.modules.audit.models import forbid_mutation

class TransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

class PaymentTransaction(Base):
    """Ledger row. Written once; a retry is a new row against the same subscription."""
    __tablename__ = "payment_transaction"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
        UniqueConstraint("subscription_id", "sequence", name="uq_payment_subscription_sequence"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subscription_id = Column(UUID(as_uuid=True), ForeignKey("subscription.id"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("app_user.id"), nullable=False, index=True)
    # Position in the subscription's ledger, 1-based
    sequence = Column(Integer, nullable=False)

    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    payment_method = Column(String(50), nullable=False) # e.g. 'CARD', 'PAYPAL'
    transaction_status = Column(Enum(TransactionStatus), nullable=False)
    gateway_reference = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)

    created_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, index=True)


forbid_mutation(PaymentTransaction)
