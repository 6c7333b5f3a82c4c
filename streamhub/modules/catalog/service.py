import logging
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core.exceptions import DuplicateTitle, InvalidStateTransition, NotFound
from streamhub.core.timeutils import later_than, utcnow
from streamhub.modules.audit import service as audit_service
from streamhub.modules.audit.models import AuditAction
from streamhub.modules.catalog import models, schemas

logger = logging.getLogger(__name__)

# Fields an update may touch. Anything else the caller sends is ignored.
MUTABLE_FIELDS = (
    "title",
    "description",
    "content_type",
    "genre",
    "language",
    "status",
    "metadata_json",
    "updated_by",
)

def snapshot(content: models.Content) -> dict:
    return schemas.ContentRead.model_validate(content).model_dump(mode="json")

def check_status_transition(current: models.ContentStatus, requested: models.ContentStatus) -> None:
    if models.STATUS_RANK[requested] < models.STATUS_RANK[current]:
        raise InvalidStateTransition("Content", current, requested)

async def title_exists(db: AsyncSession, title: str, exclude_id: Optional[UUID] = None) -> bool:
    stmt = select(models.Content.id).where(models.Content.title == title)
    if exclude_id is not None:
        stmt = stmt.where(models.Content.id != exclude_id)
    return (await db.execute(stmt)).first() is not None

async def get_content(db: AsyncSession, content_id: UUID) -> Optional[models.Content]:
    return await db.get(models.Content, content_id)

async def get_content_or_404(db: AsyncSession, content_id: UUID) -> models.Content:
    content = await get_content(db, content_id)
    if not content:
        logger.warning(f"[Catalog] Content with ID {content_id} not found")
        raise NotFound("Content", content_id)
    return content

async def create_content(db: AsyncSession, content_in: schemas.ContentCreate) -> models.Content:
    logger.info(f"[Catalog] Creating new content: {content_in.title}")

    # Fast path only; the unique constraint decides races below.
    if await title_exists(db, content_in.title):
        logger.warning(f"[Catalog] Content with title '{content_in.title}' already exists")
        raise DuplicateTitle(content_in.title)

    now = utcnow()
    content = models.Content(
        **content_in.model_dump(),
        view_count=0,
        likes_count=0,
        created_at=now,
        updated_at=now,
    )
    db.add(content)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"[Catalog] Concurrent create lost the race for title '{content_in.title}'")
        raise DuplicateTitle(content_in.title)

    audit_service.record_change(
        db,
        table_name=models.Content.__tablename__,
        action=AuditAction.INSERT,
        record_id=content.id,
        new_value=snapshot(content),
        performed_by=content.created_by,
    )
    await db.commit()
    logger.info(f"[Catalog] Content created successfully with ID: {content.id}")
    return content

async def update_content(db: AsyncSession, content_id: UUID, content_in: schemas.ContentUpdate) -> models.Content:
    logger.info(f"[Catalog] Updating content with ID: {content_id}")
    content = await get_content_or_404(db, content_id)

    supplied = content_in.model_dump(exclude_unset=True)
    ignored = sorted(set(supplied) - set(MUTABLE_FIELDS))
    if ignored:
        logger.info(f"[Catalog] Ignoring non-mutable fields on update: {ignored}")
    changes = {field: supplied[field] for field in MUTABLE_FIELDS if field in supplied}

    if "title" in changes and changes["title"] != content.title:
        if await title_exists(db, changes["title"], exclude_id=content.id):
            logger.warning(f"[Catalog] Content with title '{changes['title']}' already exists")
            raise DuplicateTitle(changes["title"])
    if "status" in changes:
        check_status_transition(content.status, changes["status"])

    old_value = snapshot(content)
    for field, value in changes.items():
        setattr(content, field, value)
    # Strictly after the previous value, even on a stalled clock.
    content.updated_at = later_than(content.updated_at)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateTitle(changes.get("title", content_in.title))

    audit_service.record_change(
        db,
        table_name=models.Content.__tablename__,
        action=AuditAction.UPDATE,
        record_id=content.id,
        old_value=old_value,
        new_value=snapshot(content),
        performed_by=content.updated_by,
    )
    await db.commit()
    logger.info(f"[Catalog] Content with ID {content_id} updated successfully")
    return content

async def delete_content(db: AsyncSession, content_id: UUID, performed_by: Optional[str] = None) -> None:
    logger.info(f"[Catalog] Deleting content with ID: {content_id}")
    content = await get_content_or_404(db, content_id)
    old_value = snapshot(content)

    # Video metadata goes with the content; access and audit logs stay.
    await db.execute(delete(models.VideoMetadata).where(models.VideoMetadata.content_id == content.id))
    await db.delete(content)

    audit_service.record_change(
        db,
        table_name=models.Content.__tablename__,
        action=AuditAction.DELETE,
        record_id=content_id,
        old_value=old_value,
        performed_by=performed_by,
    )
    await db.commit()
    logger.info(f"[Catalog] Content with ID {content_id} deleted successfully")

async def _increment(db: AsyncSession, content_id: UUID, column) -> schemas.CounterRead:
    # Single UPDATE statement, no read-modify-write in Python.
    result = await db.execute(
        update(models.Content)
        .where(models.Content.id == content_id)
        .values({column.key: column + 1})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound("Content", content_id)
    row = (await db.execute(
        select(models.Content.id, models.Content.view_count, models.Content.likes_count)
        .where(models.Content.id == content_id)
    )).one()
    return schemas.CounterRead(id=row.id, view_count=row.view_count, likes_count=row.likes_count)

async def increment_view_count(db: AsyncSession, content_id: UUID, commit: bool = True) -> schemas.CounterRead:
    counters = await _increment(db, content_id, models.Content.view_count)
    if commit:
        await db.commit()
    return counters

async def increment_likes(db: AsyncSession, content_id: UUID) -> schemas.CounterRead:
    counters = await _increment(db, content_id, models.Content.likes_count)
    await db.commit()
    return counters

async def get_content_with_video(
    db: AsyncSession, content_id: UUID
) -> Tuple[models.Content, Optional[models.VideoMetadata]]:
    row = (await db.execute(
        select(models.Content, models.VideoMetadata)
        .outerjoin(models.VideoMetadata, models.VideoMetadata.content_id == models.Content.id)
        .where(models.Content.id == content_id)
    )).first()
    if row is None:
        raise NotFound("Content", content_id)
    return row[0], row[1]

async def upsert_video_metadata(
    db: AsyncSession, content_id: UUID, video_in: schemas.VideoMetadataUpsert
) -> models.VideoMetadata:
    await get_content_or_404(db, content_id)
    result = await db.execute(
        select(models.VideoMetadata).where(models.VideoMetadata.content_id == content_id)
    )
    video = result.scalars().first()
    if video:
        for field, value in video_in.model_dump(exclude_unset=True).items():
            setattr(video, field, value)
    else:
        video = models.VideoMetadata(
            content_id=content_id,
            duration=video_in.duration,
            stream_url=video_in.stream_url,
            created_at=utcnow(),
        )
        db.add(video)
    await db.commit()
    return video

async def get_statistics(db: AsyncSession) -> schemas.ContentStats:
    logger.info("[Catalog] Fetching content statistics")
    async def count(*filters) -> int:
        return (await db.execute(select(func.count(models.Content.id)).where(*filters))).scalar() or 0

    return schemas.ContentStats(
        total_content=await count(),
        active_content=await count(models.Content.status == models.ContentStatus.ACTIVE),
        available_content=await count(models.Content.is_available.is_(True)),
        premium_content=await count(models.Content.is_premium.is_(True)),
    )
