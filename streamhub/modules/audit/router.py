from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core import deps
from streamhub.core.db import get_db
from streamhub.modules.audit import models, schemas, service

router = APIRouter()

@router.get("/", response_model=schemas.AuditLogListResponse)
async def list_audit_logs(
    table_name: Optional[str] = None,
    record_id: Optional[str] = None,
    action: Optional[models.AuditAction] = None,
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_audit_logs(
        db, table_name=table_name, record_id=record_id, action=action, page=params.page, size=params.size
    )
