from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from streamhub.core import deps
from streamhub.core.db import get_db
from streamhub.modules.users import models, schemas, service

router = APIRouter()

@router.post("/users", response_model=schemas.UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(user_in: schemas.UserCreate, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.create_user(db, user_in)

@router.get("/users", response_model=List[schemas.UserRead])
async def list_users(
    user_status: Optional[models.UserStatus] = Query(None, alias="status"),
    paging: deps.PageParams = Depends(deps.page_params),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_users(db, status=user_status, page=paging.page, size=paging.size)

@router.get("/users/{user_id}", response_model=schemas.UserRead)
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.get_user_or_404(db, user_id)

@router.patch("/users/{user_id}/status", response_model=schemas.UserRead)
async def update_user_status(
    user_id: UUID,
    status_in: schemas.UserStatusUpdate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.update_user_status(db, user_id, status_in)

@router.put("/users/{user_id}/roles", response_model=schemas.UserRead)
async def set_user_roles(
    user_id: UUID,
    roles_in: schemas.UserRolesUpdate,
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.set_user_roles(db, user_id, roles_in)

@router.post("/roles", response_model=schemas.RoleRead, status_code=status.HTTP_201_CREATED)
async def create_role(role_in: schemas.RoleCreate, db: AsyncSession = Depends(get_db)) -> Any:
    return await service.create_role(db, role_in)

@router.get("/roles", response_model=List[schemas.RoleRead])
async def list_roles(db: AsyncSession = Depends(get_db)) -> Any:
    return await service.list_roles(db)
