from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core import deps
from streamhub.core.db import get_db
from streamhub.modules.access import models, schemas, service

router = APIRouter()

@router.post("/content/{content_id}/access", response_model=schemas.AccessDecision)
async def check_access(
    content_id: UUID,
    access_in: schemas.AccessRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> Any:
    """
    Evaluate whether the user may play the content and log the attempt.
    Denials are a normal response, not an error.
    """
    if access_in.ip_address is None and request.client:
        access_in.ip_address = request.client.host
    if access_in.user_agent is None:
        access_in.user_agent = (request.headers.get("user-agent") or "")[:512] or None
    return await service.check_access(db, content_id, access_in)

@router.post("/access-logs", response_model=schemas.AccessLogRead, status_code=status.HTTP_201_CREATED)
async def record_access(log_in: schemas.AccessLogCreate, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.record_access(db, log_in)

@router.get("/access-logs", response_model=schemas.AccessLogListResponse)
async def list_access_logs(
    user_id: Optional[UUID] = None,
    content_id: Optional[UUID] = None,
    access_status: Optional[models.AccessStatus] = Query(None, alias="status"),
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_access_logs(
        db,
        user_id=user_id,
        content_id=content_id,
        access_status=access_status,
        since=since,
        until=until,
        page=params.page,
        size=params.size,
    )
