"""Credential store access: look up and insert rows of the users table."""
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.models.user import User


class UsernameTaken(Exception):
    pass


async def get_user(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, username: str, password_hash: str) -> User:
    """Insert a user; the primary key rejects duplicates with UsernameTaken."""
    user = User(username=username, password_hash=password_hash)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise UsernameTaken(username) from exc
    return user
