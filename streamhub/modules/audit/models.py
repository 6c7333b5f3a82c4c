import enum
import uuid

from sqlalchemy import JSON, Column, DateTime, Enum, String, event
from sqlalchemy.dialects.postgresql import JSONB, UUID

from streamhub.core.db import Base
from streamhub.core.exceptions import AppendOnlyViolation

JSONType = JSON().with_variant(JSONB(), "postgresql")

class AuditAction(str, enum.Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    STATUS_CHANGE = "STATUS_CHANGE"

class SystemAuditLog(Base):
    __tablename__ = "system_audit_log"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    table_name = Column(String(100), nullable=False, index=True) # e.g. "content", "subscription"
    action = Column(Enum(AuditAction), nullable=False)
    record_id = Column(String(64), nullable=False) # UUID as string, no FK so rows outlive their record

    old_value = Column(JSONType, nullable=True)
    new_value = Column(JSONType, nullable=True)
    performed_by = Column(String(255), nullable=True)
    timestamp = Column(DateTime, nullable=False, index=True)


def forbid_mutation(model) -> None:
    """Registers mapper guards making `model` append-only at the ORM level."""

    @event.listens_for(model, "before_update")
    def _no_update(mapper, connection, target):
        raise AppendOnlyViolation(f"{model.__tablename__} rows are append-only")

    @event.listens_for(model, "before_delete")
    def _no_delete(mapper, connection, target):
        raise AppendOnlyViolation(f"{model.__tablename__} rows are append-only")


forbid_mutation(SystemAuditLog)
