from dataclasses import dataclass

from fastapi import Query

from streamhub.core.config import settings

@dataclass
class PageParams:
    page: int
    size: int

def page_params(
    page: int = Query(0, ge=0),
    size: int = Query(50, gt=0, le=200),
) -> PageParams:
    return PageParams(page=page, size=size)

@dataclass
class CatalogParams:
    page: int
    page_size: int
    sort_by: str
    sort_direction: str

def catalog_params(
    page: int = Query(0, ge=0),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, gt=0, alias="pageSize"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_direction: str = Query("desc", alias="sortDirection"),
) -> CatalogParams:
    return CatalogParams(page=page, page_size=page_size, sort_by=sort_by, sort_direction=sort_direction)
