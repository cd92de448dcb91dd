"""Timestamp columns shared by the social graph tables."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.sql import func


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CreatedAtMixin:
    """Creation time stamped by the application.

    SQLite's ``CURRENT_TIMESTAMP`` only resolves to the second, and list
    endpoints order newest first on this column.
    """

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False)


class TimestampMixin(CreatedAtMixin):
    updated_at = Column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        nullable=False,
    )


__all__ = ["CreatedAtMixin", "TimestampMixin", "utc_now"]
