from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from streamhub.modules.catalog.models import ContentStatus, ContentType

class ContentCreate(BaseModel):
    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    content_type: ContentType
    content_url: Optional[str] = None
    genre: Optional[str] = None
    language: Optional[str] = None
    rating: Optional[float] = Field(None, ge=0, le=10)
    thumbnail_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=0)
    release_date: Optional[datetime] = None
    director: Optional[str] = None
    cast_members: Optional[str] = None
    status: ContentStatus = ContentStatus.DRAFT
    is_available: bool = True
    is_premium: bool = False
    metadata_json: Optional[Dict[str, Any]] = None
    created_by: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

class ContentUpdate(BaseModel):
    # Accepts the full field set, only the mutable subset is merged by the service.
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    content_type: Optional[ContentType] = None
    content_url: Optional[str] = None
    genre: Optional[str] = None
    language: Optional[str] = None
    rating: Optional[float] = None
    thumbnail_url: Optional[str] = None
    duration_minutes: Optional[int] = None
    release_date: Optional[datetime] = None
    director: Optional[str] = None
    cast_members: Optional[str] = None
    status: Optional[ContentStatus] = None
    is_available: Optional[bool] = None
    is_premium: Optional[bool] = None
    metadata_json: Optional[Dict[str, Any]] = None
    updated_by: Optional[str] = None

    @field_validator("title", "content_type", "status")
    @classmethod
    def not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        if info.field_name == "title":
            v = v.strip()
            if not v:
                raise ValueError("title must not be empty")
        return v

class ContentRead(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    content_type: ContentType
    content_url: Optional[str]
    genre: Optional[str]
    language: Optional[str]
    rating: Optional[float]
    thumbnail_url: Optional[str]
    duration_minutes: Optional[int]
    release_date: Optional[datetime]
    director: Optional[str]
    cast_members: Optional[str]
    status: ContentStatus
    is_available: bool
    is_premium: bool
    view_count: int
    likes_count: int
    metadata_json: Optional[Dict[str, Any]]
    created_by: Optional[str]
    updated_by: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class MediaItem(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    genre: Optional[str] = None
    language: Optional[str] = None
    type: ContentType
    rating: Optional[float] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[int] = None

class CatalogResponse(BaseModel):
    status: str
    count: int
    page: int
    total: int
    categories: Optional[Dict[str, List[MediaItem]]] = None

class CatalogQuery(BaseModel):
    page: int = Field(0, ge=0)
    page_size: int = Field(10, gt=0)
    sort_by: str = "createdAt"
    sort_direction: str = "desc"
    content_type: Optional[str] = None
    genre: Optional[str] = None
    keyword: Optional[str] = None
    status: Optional[str] = None

class ContentStats(BaseModel):
    total_content: int
    active_content: int
    available_content: int
    premium_content: int

class VideoMetadataUpsert(BaseModel):
    duration: Optional[int] = Field(None, ge=0)
    stream_url: Optional[str] = Field(None, max_length=255)

class VideoMetadataRead(BaseModel):
    id: UUID
    content_id: UUID
    duration: Optional[int]
    stream_url: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True

class ContentWithVideo(BaseModel):
    content: ContentRead
    video: Optional[VideoMetadataRead] = None

class CounterRead(BaseModel):
    id: UUID
    view_count: int
    likes_count: int
