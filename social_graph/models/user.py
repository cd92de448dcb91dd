"""SQLAlchemy ORM model mirroring accounts owned by the identity service."""
from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from social_graph.database import Base
from .base import TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(150), unique=True, nullable=False, index=True)
    full_name = Column(String(150), nullable=False, default="")
    email = Column(String(255), unique=True, nullable=True)
    bio = Column(String(500), nullable=True)
    profile_picture_url = Column(String(1024), nullable=True)
    instagram_username = Column(String(150), nullable=True)
    is_private = Column(Boolean, nullable=False, server_default=expression.false(), default=False)

    follower_relations = relationship(
        "Follow",
        foreign_keys="Follow.following_id",
        back_populates="following",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    following_relations = relationship(
        "Follow",
        foreign_keys="Follow.follower_id",
        back_populates="follower",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    follow_requests_sent = relationship(
        "FollowRequest",
        foreign_keys="FollowRequest.sender_id",
        back_populates="sender",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    follow_requests_received = relationship(
        "FollowRequest",
        foreign_keys="FollowRequest.receiver_id",
        back_populates="receiver",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


__all__ = ["User"]
