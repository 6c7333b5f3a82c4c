import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, String
from sqlalchemy.dialects.postgresql import UUID

from streamhub.core.db import Base
from streamhub.modules.audit.models import forbid_mutation

class AccessStatus(str, enum.Enum):
    GRANTED = "GRANTED"
    DENIED_USER_INACTIVE = "DENIED_USER_INACTIVE"
    DENIED_UNAVAILABLE = "DENIED_UNAVAILABLE"
    DENIED_NO_SUBSCRIPTION = "DENIED_NO_SUBSCRIPTION"
    DENIED_PAST_DUE = "DENIED_PAST_DUE"

class AccessControlLog(Base):
    __tablename__ = "access_control_log"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # No FKs: the log outlives deleted content, the title snapshot keeps it readable.
    content_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    access_status = Column(Enum(AccessStatus), nullable=False)
    ip_address = Column(String(45), nullable=True) # fits IPv6
    user_agent = Column(String(512), nullable=True)
    content_title_snapshot = Column(String(255), nullable=True)
    timestamp = Column(DateTime, nullable=False, index=True)


forbid_mutation(AccessControlLog)
