"""
Catalog query engine.

Composes filter, sort and offset pagination over the content table and
shapes the page into the catalog envelope::

    {"status": "success", "count": 2, "page": 0, "total": 7,
     "categories": {"media": [...]}}

Read failures never reach the caller as faults: anything that goes wrong
while querying is logged and answered with the error envelope
``{"status": "error", "count": 0, "page": <page>, "total": 0}``.
"""
import logging
import re
from typing import List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core.exceptions import ValidationError
from streamhub.modules.catalog import models, schemas

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "id": models.Content.id,
    "title": models.Content.title,
    "content_type": models.Content.content_type,
    "genre": models.Content.genre,
    "language": models.Content.language,
    "rating": models.Content.rating,
    "status": models.Content.status,
    "duration_minutes": models.Content.duration_minutes,
    "release_date": models.Content.release_date,
    "view_count": models.Content.view_count,
    "likes_count": models.Content.likes_count,
    "created_at": models.Content.created_at,
    "updated_at": models.Content.updated_at,
}

# Names used by the media item shape
SORT_ALIASES = {
    "type": "content_type",
    "duration": "duration_minutes",
}

def is_ascending(sort_direction: str) -> bool:
    """Only a case-insensitive "asc" sorts ascending; everything else is descending."""
    return (sort_direction or "").strip().lower() == "asc"

def resolve_sort_column(sort_by: str):
    name = (sort_by or "").strip()
    if name.isupper():
        name = name.lower()
    name = re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()
    name = SORT_ALIASES.get(name, name)
    if name not in SORTABLE_FIELDS:
        raise ValidationError(f"Cannot sort by '{sort_by}'", context={"sort_by": sort_by})
    return SORTABLE_FIELDS[name]

def parse_content_type(value: str) -> models.ContentType:
    try:
        return models.ContentType(value.strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown content type '{value}'", context={"content_type": value})

def parse_status(value: str) -> models.ContentStatus:
    try:
        return models.ContentStatus(value.strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown content status '{value}'", context={"status": value})

def build_filters(query: schemas.CatalogQuery) -> list:
    filters = []
    if query.content_type:
        filters.append(models.Content.content_type == parse_content_type(query.content_type))
    if query.genre:
        filters.append(models.Content.genre == query.genre)
    if query.keyword:
        filters.append(models.Content.title.icontains(query.keyword, autoescape=True))
    if query.status:
        filters.append(models.Content.status == parse_status(query.status))
    return filters

async def fetch_page(db: AsyncSession, query: schemas.CatalogQuery) -> Tuple[List[models.Content], int]:
    filters = build_filters(query)
    sort_column = resolve_sort_column(query.sort_by)
    order = sort_column.asc() if is_ascending(query.sort_direction) else sort_column.desc()

    total = (await db.execute(
        select(func.count(models.Content.id)).where(*filters)
    )).scalar() or 0

    # id breaks ties so equal sort keys keep their place across pages
    items = (await db.execute(
        select(models.Content)
        .where(*filters)
        .order_by(order, models.Content.id.asc())
        .offset(query.page * query.page_size)
        .limit(query.page_size)
    )).scalars().all()

    return list(items), total

def to_media_item(content: models.Content) -> schemas.MediaItem:
    return schemas.MediaItem(
        id=content.id,
        title=content.title,
        description=content.description,
        genre=content.genre,
        language=content.language,
        type=content.content_type,
        rating=content.rating,
        thumbnail_url=content.thumbnail_url,
        duration=content.duration_minutes,
    )

def error_envelope(page: int) -> schemas.CatalogResponse:
    return schemas.CatalogResponse(status="error", count=0, page=page, total=0)

async def build_catalog_response(db: AsyncSession, query: schemas.CatalogQuery) -> schemas.CatalogResponse:
    logger.info(
        f"[Catalog] page={query.page} pageSize={query.page_size} sortBy={query.sort_by} "
        f"sortDirection={query.sort_direction} type={query.content_type} genre={query.genre} "
        f"keyword={query.keyword}"
    )
    try:
        items, total = await fetch_page(db, query)
    except Exception as e:
        logger.error(f"[Catalog] Query failed, returning error envelope: {e}", exc_info=True)
        return error_envelope(query.page)

    media = [to_media_item(item) for item in items]
    return schemas.CatalogResponse(
        status="success",
        count=len(media),
        page=query.page,
        total=total,
        categories={"media": media},
    )
