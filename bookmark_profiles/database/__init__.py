"""Profile store persistence: SQLAlchemy models, sessions and repositories."""

from bookmark_profiles.database.models import Base, UserProfile
from bookmark_profiles.database.repositories import UserProfileRepository

__all__ = [
    "Base",
    "UserProfile",
    "UserProfileRepository",
]
