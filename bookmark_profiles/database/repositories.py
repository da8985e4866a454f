"""
Repository pattern implementation for profile store operations.

This module provides repository classes that abstract database operations,
offering clean interfaces for data access with common CRUD operations and
profile-specific query methods.
"""

from typing import Any, Generic, List, Optional, TypeVar

from sqlalchemy.orm import Session

from bookmark_profiles.database.models import UserProfile

# Type variable for generic repository
T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository class providing common operations.

    Type Parameters:
        T: The SQLAlchemy model type this repository works with

    Attributes:
        session: SQLAlchemy session for database operations
        model: The model class this repository manages
    """

    def __init__(self, session: Session, model: type[T]) -> None:
        self.session = session
        self.model = model

    def create(self, instance: T) -> T:
        """
        Create a new record in the database.

        Note:
            Does not commit - caller must commit the session
        """
        self.session.add(instance)
        self.session.flush()  # Get ID without committing
        return instance

    def count(self) -> int:
        return self.session.query(self.model).count()

    def query(self) -> Any:
        """
        Get base query object for custom queries.

        Example:
            ```python
            query = repo.query().filter(Model.field == value)
            results = query.all()
            ```
        """
        return self.session.query(self.model)


class UserProfileRepository(BaseRepository[UserProfile]):
    """
    Repository for user profile operations.

    Provides lookups by public id, access to the active profile and the
    ordered profile list used by whole-profile exports.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session, UserProfile)

    def get_by_user_id(self, user_id: str) -> Optional[UserProfile]:
        return self.query().filter(UserProfile.user_id == user_id).first()

    def get_active(self) -> Optional[UserProfile]:
        """
        Get the profile currently in use.

        Returns:
            The active profile with the lowest primary key, or None
        """
        return (
            self.query()
            .filter(UserProfile.active.is_(True))
            .order_by(UserProfile.id.asc())
            .first()
        )

    def list_ordered(self) -> List[UserProfile]:
        """Get all profiles in creation order."""
        return self.query().order_by(UserProfile.id.asc()).all()

    def user_id_exists(self, user_id: str) -> bool:
        return self.get_by_user_id(user_id) is not None

    def deactivate_all(self) -> int:
        """
        Mark every profile inactive.

        Returns:
            Number of profiles that were active

        Note:
            Does not commit - caller must commit the session
        """
        changed = 0
        for profile in self.query().filter(UserProfile.active.is_(True)).all():
            profile.active = False
            changed += 1
        self.session.flush()
        return changed
