import enum
import uuid

from sqlalchemy import (
    JSON, BigInteger, Boolean, Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID

from streamhub.core.db import Base

class ContentType(str, enum.Enum):
    MOVIE = "MOVIE"
    MUSIC = "MUSIC"
    EBOOK = "EBOOK"
    SERIES = "SERIES"
    PODCAST = "PODCAST"
    DOCUMENTARY = "DOCUMENTARY"
    STAND_UP = "STAND_UP"

class ContentStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"

# Lifecycle order; a status may only stay put or move forward.
STATUS_RANK = {
    ContentStatus.DRAFT: 0,
    ContentStatus.ACTIVE: 1,
    ContentStatus.ARCHIVED: 2,
}

class Content(Base):
    __tablename__ = "content"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # The unique constraint is what settles concurrent creates with one title.
    title = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    content_type = Column(Enum(ContentType), nullable=False, index=True)
    content_url = Column(String(500), nullable=True)

    genre = Column(String(100), nullable=True, index=True)
    language = Column(String(50), nullable=True)
    rating = Column(Float, nullable=True) # 0-10
    thumbnail_url = Column(String(500), nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    release_date = Column(DateTime, nullable=True)
    director = Column(String(255), nullable=True)
    cast_members = Column(Text, nullable=True)

    status = Column(Enum(ContentStatus), default=ContentStatus.DRAFT, nullable=False, index=True)
    is_available = Column(Boolean, default=True, nullable=False)
    is_premium = Column(Boolean, default=False, nullable=False) # True = Requires Subscription

    view_count = Column(BigInteger, default=0, nullable=False)
    likes_count = Column(BigInteger, default=0, nullable=False)

    metadata_json = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)

    created_by = Column(String(255), nullable=True)
    updated_by = Column(String(255), nullable=True)
    # Stamped by the service on create/update, never by the database.
    created_at = Column(DateTime, nullable=False, index=True)
    updated_at = Column(DateTime, nullable=False)

class VideoMetadata(Base):
    __tablename__ = "video_metadata"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    content_id = Column(UUID(as_uuid=True), ForeignKey("content.id"), nullable=False, unique=True)

    duration = Column(Integer, nullable=True) # seconds
    stream_url = Column(String(255), nullable=True)

    created_at = Column(DateTime, nullable=False)
