import uuid

from sqlalchemy import JSON, Boolean, CheckConstraint, Column, DateTime, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB, UUID

from streamhub.core.db import Base

class SubscriptionPlan(Base):
    __tablename__ = "subscription_plan"
    __table_args__ = (
        CheckConstraint("duration_days > 0", name="ck_plan_duration_positive"),
        CheckConstraint("price >= 0", name="ck_plan_price_non_negative"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    plan_name = Column(String(100), unique=True, nullable=False) # e.g. 'Basic', 'Premium'
    price = Column(Numeric(10, 2), nullable=False)
    duration_days = Column(Integer, default=30, nullable=False)
    features = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True) # e.g. {"hd": true, "screens": 4}
    is_active = Column(Boolean, default=True, nullable=False)

    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
