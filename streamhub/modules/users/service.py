import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from streamhub.core import security
from streamhub.core.exceptions import DuplicateUser, InvalidStateTransition, NotFound, ValidationError
from streamhub.core.timeutils import later_than, utcnow
from streamhub.modules.audit import service as audit_service
from streamhub.modules.audit.models import AuditAction
from streamhub.modules.users import models, schemas

logger = logging.getLogger(__name__)

def _audit_view(user: models.AppUser) -> dict:
    # password_hash never enters the audit trail
    return {
        "username": user.username,
        "email": user.email,
        "status": user.status.value,
        "roles": sorted(r.role_name for r in user.roles),
    }

async def _resolve_roles(db: AsyncSession, role_names: List[str]) -> List[models.Role]:
    if not role_names:
        return []
    wanted = set(role_names)
    result = await db.execute(select(models.Role).where(models.Role.role_name.in_(wanted)))
    roles = list(result.scalars().all())
    missing = wanted - {r.role_name for r in roles}
    if missing:
        raise ValidationError(f"Unknown roles: {', '.join(sorted(missing))}", context={"roles": sorted(missing)})
    return roles

async def create_role(db: AsyncSession, role_in: schemas.RoleCreate) -> models.Role:
    existing = await db.execute(select(models.Role).where(models.Role.role_name == role_in.role_name))
    if existing.scalars().first():
        raise ValidationError("Role already exists", context={"role_name": role_in.role_name})
    role = models.Role(role_name=role_in.role_name, description=role_in.description, created_at=utcnow())
    db.add(role)
    await db.commit()
    return role

async def list_roles(db: AsyncSession) -> List[models.Role]:
    result = await db.execute(select(models.Role).order_by(models.Role.role_name))
    return list(result.scalars().all())

async def get_user(db: AsyncSession, user_id: UUID) -> Optional[models.AppUser]:
    result = await db.execute(
        select(models.AppUser)
        .where(models.AppUser.id == user_id)
        .options(selectinload(models.AppUser.roles))
    )
    return result.scalars().first()

async def get_user_or_404(db: AsyncSession, user_id: UUID) -> models.AppUser:
    user = await get_user(db, user_id)
    if not user:
        raise NotFound("User", user_id)
    return user

async def list_users(db: AsyncSession, status: Optional[models.UserStatus] = None, page: int = 0, size: int = 50):
    stmt = select(models.AppUser).options(selectinload(models.AppUser.roles))
    if status:
        stmt = stmt.where(models.AppUser.status == status)
    result = await db.execute(
        stmt.order_by(models.AppUser.created_at.desc(), models.AppUser.id).offset(page * size).limit(size)
    )
    return list(result.scalars().all())

async def create_user(db: AsyncSession, user_in: schemas.UserCreate) -> models.AppUser:
    existing = await db.execute(
        select(models.AppUser.username, models.AppUser.email).where(
            or_(models.AppUser.username == user_in.username, models.AppUser.email == user_in.email)
        )
    )
    if existing.first():
        logger.warning(f"[Users] User '{user_in.username}' <{user_in.email}> already exists")
        raise DuplicateUser("A user with this username or email already exists")

    roles = await _resolve_roles(db, user_in.roles)
    now = utcnow()
    user = models.AppUser(
        username=user_in.username,
        email=user_in.email,
        password_hash=security.get_password_hash(user_in.password),
        status=user_in.status,
        created_by=user_in.created_by,
        created_at=now,
        updated_at=now,
    )
    user.roles = roles
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateUser("A user with this username or email already exists")

    audit_service.record_change(
        db,
        table_name=models.AppUser.__tablename__,
        action=AuditAction.INSERT,
        record_id=user.id,
        new_value=_audit_view(user),
        performed_by=user_in.created_by,
    )
    await db.commit()
    logger.info(f"[Users] User created: {user.id} ({user.username})")
    return user

async def update_user_status(db: AsyncSession, user_id: UUID, status_in: schemas.UserStatusUpdate) -> models.AppUser:
    user = await get_user_or_404(db, user_id)
    old_status = user.status
    if old_status == models.UserStatus.DELETED and status_in.status != old_status:
        raise InvalidStateTransition("User", old_status, status_in.status)
    if old_status == status_in.status:
        return user

    user.status = status_in.status
    user.updated_by = status_in.updated_by
    user.updated_at = later_than(user.updated_at)
    audit_service.record_change(
        db,
        table_name=models.AppUser.__tablename__,
        action=AuditAction.STATUS_CHANGE,
        record_id=user.id,
        old_value={"status": old_status.value},
        new_value={"status": user.status.value},
        performed_by=status_in.updated_by,
    )
    await db.commit()
    return user

async def set_user_roles(db: AsyncSession, user_id: UUID, roles_in: schemas.UserRolesUpdate) -> models.AppUser:
    user = await get_user_or_404(db, user_id)
    old_value = _audit_view(user)
    user.roles = await _resolve_roles(db, roles_in.roles)
    user.updated_by = roles_in.updated_by
    user.updated_at = later_than(user.updated_at)
    audit_service.record_change(
        db,
        table_name=models.AppUser.__tablename__,
        action=AuditAction.UPDATE,
        record_id=user.id,
        old_value=old_value,
        new_value=_audit_view(user),
        performed_by=roles_in.updated_by,
    )
    await db.commit()
    return user
