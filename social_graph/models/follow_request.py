"""ORM model representing follow requests sent to private accounts."""
from __future__ import annotations

import uuid
from enum import StrEnum

from sqlalchemy import CheckConstraint, Column, Enum, ForeignKey, Index, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from social_graph.database import Base
from .base import TimestampMixin


class FollowRequestStatus(StrEnum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


_PENDING_ONLY = text("status = 'PENDING'")


class FollowRequest(TimestampMixin, Base):
    __tablename__ = "follow_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(
        Enum(*[item.value for item in FollowRequestStatus], name="follow_request_status"),
        nullable=False,
        default=FollowRequestStatus.PENDING.value,
    )

    sender = relationship("User", foreign_keys=[sender_id], back_populates="follow_requests_sent")
    receiver = relationship("User", foreign_keys=[receiver_id], back_populates="follow_requests_received")

    # Settled rows are kept for audit, so uniqueness only covers the live request.
    __table_args__ = (
        Index(
            "uq_follow_request_pending_pair",
            "sender_id",
            "receiver_id",
            unique=True,
            postgresql_where=_PENDING_ONLY,
            sqlite_where=_PENDING_ONLY,
        ),
        CheckConstraint("sender_id <> receiver_id", name="ck_follow_request_not_self"),
    )

    @property
    def is_pending(self) -> bool:
        return self.status == FollowRequestStatus.PENDING


__all__ = ["FollowRequest", "FollowRequestStatus"]
