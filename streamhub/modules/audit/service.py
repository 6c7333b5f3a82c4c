import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core.timeutils import utcnow
from streamhub.modules.audit import models

logger = logging.getLogger(__name__)

def record_change(
    db: AsyncSession,
    table_name: str,
    action: models.AuditAction,
    record_id: Any,
    old_value: Optional[Dict[str, Any]] = None,
    new_value: Optional[Dict[str, Any]] = None,
    performed_by: Optional[str] = None,
) -> models.SystemAuditLog:
    """
    Adds an audit row to the caller's unit of work.

    Nothing is committed here: the row is written by the same commit as the
    change it describes, so a rolled back change leaves no trail.
    """
    log = models.SystemAuditLog(
        table_name=table_name,
        action=action,
        record_id=str(record_id),
        old_value=old_value,
        new_value=new_value,
        performed_by=performed_by,
        timestamp=utcnow(),
    )
    db.add(log)
    logger.debug(f"[Audit] {action.value} {table_name}:{record_id}")
    return log

async def list_audit_logs(
    db: AsyncSession,
    table_name: Optional[str] = None,
    record_id: Optional[str] = None,
    action: Optional[models.AuditAction] = None,
    page: int = 0,
    size: int = 50,
) -> dict:
    filters = []
    if table_name:
        filters.append(models.SystemAuditLog.table_name == table_name)
    if record_id:
        filters.append(models.SystemAuditLog.record_id == record_id)
    if action:
        filters.append(models.SystemAuditLog.action == action)

    total = (await db.execute(
        select(func.count(models.SystemAuditLog.id)).where(*filters)
    )).scalar() or 0

    items = (await db.execute(
        select(models.SystemAuditLog)
        .where(*filters)
        .order_by(models.SystemAuditLog.timestamp.desc(), models.SystemAuditLog.id)
        .offset(page * size)
        .limit(size)
    )).scalars().all()

    return {"items": items, "total": total, "page": page, "size": size}
