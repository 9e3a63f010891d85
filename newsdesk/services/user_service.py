"""
User service: storage access for the User collection.

Email uniqueness is enforced by the unique index on ``users.email``.
The operation layer checks for an existing address first so the common
case gets a friendly error; the index catches the race where two
registrations for the same address interleave, and the resulting
``IntegrityError`` is reported the same way.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.derivations import normalize_email
from newsdesk.errors import ValidationFailed
from newsdesk.models import Role, User, UserProfile

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User already exists with this email"


async def _flush_unique(db: AsyncSession) -> None:
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.info("Rejected duplicate email: %s", exc.orig)
        raise ValidationFailed(DUPLICATE_EMAIL, field="email") from exc


async def find_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def get_users_by_ids(db: AsyncSession, user_ids: Iterable[int]) -> dict[int, User]:
    """
    Load every user in *user_ids* with one query, keyed by id.

    Ids with no matching row (deleted accounts) are simply absent.
    """
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {user.id: user for user in result.scalars().all()}


async def create_user(db: AsyncSession, fields: dict) -> User:
    user = User(**fields)
    db.add(user)
    await _flush_unique(db)
    logger.info("Registered user id=%s role=%s", user.id, user.role.value)
    return user


async def update_user(db: AsyncSession, user: User, fields: dict) -> User:
    for name, value in fields.items():
        setattr(user, name, value)
    await _flush_unique(db)
    return user


async def delete_user(db: AsyncSession, user_id: int) -> bool:
    """
    Hard-delete the account together with its profile record.  Comments
    written by the user are not touched and keep pointing at the
    removed id.
    """
    user = await db.get(User, user_id)
    if user is None:
        return False
    await db.execute(delete(UserProfile).where(UserProfile.user_id == user_id))
    await db.delete(user)
    await db.flush()
    logger.info("Deleted user id=%s", user_id)
    return True


async def set_role(db: AsyncSession, user: User, role: Role, updated_at) -> User:
    """Change an account's role.  Only reachable from the admin scripts."""
    user.role = role
    user.updated_at = updated_at
    await db.flush()
    logger.warning("Role of user id=%s set to %s", user.id, role.value)
    return user


async def create_profile(db: AsyncSession, fields: dict) -> UserProfile:
    profile = UserProfile(**fields)
    db.add(profile)
    await db.flush()
    return profile


async def count_users(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(User))).scalar_one()
