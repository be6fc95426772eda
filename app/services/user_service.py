import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AlreadyExistsError
from app.core.identity import normalize, validate_identity
from app.core.security import hash_password, verify_password
from app.models.user import User
from app.schemas.user import UserCreate

logger = logging.getLogger(__name__)


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_handle(db: AsyncSession, handle: str) -> User | None:
    """Look up a user by any raw form of their handle."""
    result = await db.execute(select(User).where(User.handle == normalize(handle)))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, data: UserCreate, is_admin: bool = False) -> User:
    """Register a new user. The stored handle is the normalized identity."""
    handle = validate_identity(data.handle, field="handle")

    if await get_user_by_handle(db, handle):
        raise AlreadyExistsError("Handle already registered", field="handle")

    user = User(
        handle=handle,
        display_name=(data.display_name or "").strip() or None,
        password_hash=hash_password(data.password),
        is_admin=is_admin,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise AlreadyExistsError("Handle already registered", field="handle")
    await db.refresh(user)
    logger.info("Registered user %s", handle)
    return user


async def authenticate_user(db: AsyncSession, handle: str, password: str) -> User | None:
    user = await get_user_by_handle(db, handle)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
