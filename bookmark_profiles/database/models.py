"""
Database models for the bookmark profile store.

This module defines the SQLAlchemy model that backs the live profile store.
Each row is one user profile; its bookmark tree, styles, settings and
activity log are stored as JSON documents so the exported slices can be
copied out and written back without reshaping.
"""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class TimestampMixin:
    """
    Mixin class providing created_at and updated_at timestamp fields.

    These are row bookkeeping only; the profile's own creation and update
    times travel inside exports as epoch milliseconds.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when the record was created",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Timestamp when the record was last updated",
    )


class UserProfile(Base, TimestampMixin):
    """
    Model for storing one user profile of the bookmark manager.

    Exactly one profile is expected to be active at a time; imports of
    partial categories merge into that profile, imports of whole profiles
    add inactive rows.

    Attributes:
        id: Primary key
        user_id: Public profile identifier carried in exports
        name: Display name
        image: Avatar image (base64 data URL or empty)
        active: Whether this is the profile currently in use
        timestamp_creation: Profile creation time (epoch milliseconds)
        timestamp_update: Last profile update time (epoch milliseconds)
        bookmarks: Bookmark tree, root folder first
        folder_style: Default folder style
        bookmark_style: Default bookmark style
        main_settings: Main user settings
        activity_log: Activity log entries
    """

    __tablename__ = "user_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, doc="Primary key")
    user_id: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        doc="Public profile identifier",
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False, doc="Display name")
    image: Mapped[str] = mapped_column(Text, nullable=False, default="", doc="Avatar image")
    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, doc="Profile currently in use"
    )
    timestamp_creation: Mapped[int] = mapped_column(
        BigInteger, nullable=False, doc="Creation time in epoch milliseconds"
    )
    timestamp_update: Mapped[int] = mapped_column(
        BigInteger, nullable=False, doc="Last update time in epoch milliseconds"
    )
    bookmarks: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list, doc="Bookmark tree"
    )
    folder_style: Mapped[Dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict, doc="Default folder style"
    )
    bookmark_style: Mapped[Dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict, doc="Default bookmark style"
    )
    main_settings: Mapped[Dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict, doc="Main user settings"
    )
    activity_log: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list, doc="Activity log entries"
    )

    __table_args__ = (
        Index("idx_user_profile_active", "active"),
    )

    def __repr__(self) -> str:
        return f"<UserProfile(id={self.id}, user_id='{self.user_id}', name='{self.name}', active={self.active})>"
