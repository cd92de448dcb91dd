"""Read-only access to accounts owned by the identity service."""
from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
from ..models import User


def get_user(db: Session, user_id: UUID) -> User:
    """Return the user with ``user_id`` or raise :class:`NotFoundError`."""

    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_username(db: Session, username: str) -> User:
    candidate = username.strip().lower()
    if not candidate:
        raise ValidationError("Username required")
    user = db.scalar(select(User).where(func.lower(User.username) == candidate))
    if user is None:
        raise NotFoundError("User not found")
    return user


def search_users(db: Session, *, query: str, limit: int, offset: int) -> tuple[list[User], int]:
    """Match ``query`` against usernames and full names, alphabetically."""

    pattern = f"%{query.strip()}%"
    condition = or_(User.username.ilike(pattern), User.full_name.ilike(pattern))
    total = db.scalar(select(func.count()).select_from(User).where(condition)) or 0
    stmt = select(User).where(condition).order_by(User.username.asc()).limit(limit).offset(offset)
    return list(db.scalars(stmt)), int(total)


__all__ = ["get_user", "get_user_by_username", "search_users"]
