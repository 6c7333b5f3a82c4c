from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core import deps
from streamhub.core.db import get_db
from streamhub.modules.catalog import query as catalog_query
from streamhub.modules.catalog import schemas, service

router = APIRouter()

def _catalog_query(params: deps.CatalogParams, **filters) -> schemas.CatalogQuery:
    return schemas.CatalogQuery(
        page=params.page,
        page_size=params.page_size,
        sort_by=params.sort_by,
        sort_direction=params.sort_direction,
        **filters,
    )

@router.get("/catalog", response_model=schemas.CatalogResponse, response_model_exclude_none=True)
async def get_catalog(
    params: deps.CatalogParams = Depends(deps.catalog_params),
    content_type: Optional[str] = Query(None, alias="type"),
    genre: Optional[str] = None,
    keyword: Optional[str] = None,
    content_status: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db)
) -> Any:
    query = _catalog_query(params, content_type=content_type, genre=genre, keyword=keyword, status=content_status)
    return await catalog_query.build_catalog_response(db, query)

@router.get("/content/type/{content_type}", response_model=schemas.CatalogResponse, response_model_exclude_none=True)
async def get_content_by_type(
    content_type: str,
    params: deps.CatalogParams = Depends(deps.catalog_params),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await catalog_query.build_catalog_response(db, _catalog_query(params, content_type=content_type))

@router.get("/content/genre/{genre}", response_model=schemas.CatalogResponse, response_model_exclude_none=True)
async def get_content_by_genre(
    genre: str,
    params: deps.CatalogParams = Depends(deps.catalog_params),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await catalog_query.build_catalog_response(db, _catalog_query(params, genre=genre))

@router.get("/search", response_model=schemas.CatalogResponse, response_model_exclude_none=True)
async def search_content(
    keyword: str,
    params: deps.CatalogParams = Depends(deps.catalog_params),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await catalog_query.build_catalog_response(db, _catalog_query(params, keyword=keyword))

@router.get("/stats", response_model=schemas.ContentStats)
async def get_statistics(db: AsyncSession = Depends(get_db)) -> Any:
    return await service.get_statistics(db)

@router.get("/content/{content_id}", response_model=schemas.ContentRead)
async def get_content(content_id: UUID, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.get_content_or_404(db, content_id)

@router.post("/content", response_model=schemas.ContentRead, status_code=status.HTTP_201_CREATED)
async def create_content(
    content_in: schemas.ContentCreate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.create_content(db, content_in)

@router.put("/content/{content_id}", response_model=schemas.ContentRead)
async def update_content(
    content_id: UUID,
    content_in: schemas.ContentUpdate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.update_content(db, content_id, content_in)

@router.delete("/content/{content_id}")
async def delete_content(
    content_id: UUID,
    performed_by: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
) -> Any:
    await service.delete_content(db, content_id, performed_by=performed_by)
    return {"message": "Content deleted successfully"}

@router.post("/content/{content_id}/like", response_model=schemas.CounterRead)
async def like_content(content_id: UUID, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.increment_likes(db, content_id)

@router.get("/content/{content_id}/video", response_model=schemas.ContentWithVideo)
async def get_content_with_video(content_id: UUID, db: AsyncSession = Depends(get_db)) -> Any:
    content, video = await service.get_content_with_video(db, content_id)
    return {"content": content, "video": video}

@router.put("/content/{content_id}/video", response_model=schemas.VideoMetadataRead)
async def upsert_video_metadata(
    content_id: UUID,
    video_in: schemas.VideoMetadataUpsert,
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.upsert_video_metadata(db, content_id, video_in)
