"""User profile system for the bookmark manager.

This package exposes the high-level profile object, its defaults and the
SQLAlchemy-backed live profile store.
"""

from .store import ProfileStore, ProfileStoreError, ProfileStoreProtocol
from .user_profile import (
    ProfileSnapshot,
    UserProfileData,
    default_bookmarks,
    generate_random_id,
    get_default_user_profile,
    now_ms,
)

__all__ = [
    "ProfileSnapshot",
    "ProfileStore",
    "ProfileStoreError",
    "ProfileStoreProtocol",
    "UserProfileData",
    "default_bookmarks",
    "generate_random_id",
    "get_default_user_profile",
    "now_ms",
]
