from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from streamhub.modules.users.models import UserStatus

class RoleCreate(BaseModel):
    role_name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None

class RoleRead(BaseModel):
    id: UUID
    role_name: str
    description: Optional[str]

    class Config:
        from_attributes = True

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    status: UserStatus = UserStatus.ACTIVE
    roles: List[str] = []
    created_by: Optional[str] = None

class UserStatusUpdate(BaseModel):
    status: UserStatus
    updated_by: Optional[str] = None

class UserRolesUpdate(BaseModel):
    roles: List[str]
    updated_by: Optional[str] = None

class UserRead(BaseModel):
    id: UUID
    username: str
    email: str
    status: UserStatus
    roles: List[str] = []
    created_at: datetime
    updated_at: datetime

    @field_validator("roles", mode="before")
    @classmethod
    def role_names(cls, v):
        return sorted(getattr(r, "role_name", r) for r in v or [])

    class Config:
        from_attributes = True
