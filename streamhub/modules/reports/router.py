from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core import deps
from streamhub.core.db import get_db
from streamhub.modules.reports import schemas, service

router = APIRouter()

@router.post("/revenue", response_model=schemas.RevenueReportRead, status_code=status.HTTP_201_CREATED)
async def generate_revenue_report(
    report_in: schemas.RevenueReportCreate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.generate_revenue_report(db, report_in)

@router.get("/revenue", response_model=List[schemas.RevenueReportRead])
async def list_revenue_reports(
    params: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_revenue_reports(db, page=params.page, size=params.size)
