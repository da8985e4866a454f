"""
SQLAlchemy-backed live profile store.

The export/import subsystem treats the store as an external collaborator
with a small contract: create a profile, get the active profile, persist,
and discard pending changes. Mutations stay pending in the session until
`persist()` commits them, so a failed merge can be thrown away whole.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookmark_profiles.database.models import UserProfile
from bookmark_profiles.database.repositories import UserProfileRepository
from bookmark_profiles.profiles.user_profile import (
    ProfileSnapshot,
    UserProfileData,
    generate_random_id,
    get_default_user_profile,
    now_ms,
)

logger = logging.getLogger(__name__)


class ProfileStoreError(RuntimeError):
    """Raised when the store cannot provide the data an operation needs."""


class ProfileStoreProtocol(Protocol):
    """Contract the merge engine and assembler rely on."""

    def create_profile(self, data: UserProfileData) -> str: ...

    def get_active_profile(self) -> UserProfile: ...

    def persist(self) -> bool: ...

    def discard(self) -> None: ...

    def snapshot(self) -> ProfileSnapshot: ...

    def touch(self, profile: UserProfile) -> None: ...


class ProfileStore:
    """
    Live profile store backed by a SQLAlchemy session.

    Attributes:
        session: Session holding pending changes until persist()
        repository: Repository used for lookups
        profile_id_length: Length of generated public profile ids
    """

    def __init__(self, session: Session, profile_id_length: int = 20) -> None:
        self.session = session
        self.repository = UserProfileRepository(session)
        self.profile_id_length = profile_id_length

    def _unique_user_id(self, wanted: str = "") -> str:
        if wanted and not self.repository.user_id_exists(wanted):
            return wanted
        for _ in range(5):
            candidate = generate_random_id(self.profile_id_length, include_uppercase=True)
            if not self.repository.user_id_exists(candidate):
                return candidate
        raise ProfileStoreError("Could not generate a unique profile id")

    def create_profile(self, data: UserProfileData, fresh_id: bool = True) -> str:
        """
        Add a profile to the store.

        Args:
            data: Profile to add. It is copied, never aliased.
            fresh_id: Always generate a new public id instead of reusing data.user_id

        Returns:
            The public id of the created profile

        Note:
            Does not commit - call persist()
        """
        user_id = self._unique_user_id("" if fresh_id else data.user_id)
        instance = data.to_db_model()
        instance.user_id = user_id
        if instance.active:
            self.repository.deactivate_all()
        self.repository.create(instance)
        logger.info(f"Profile staged for creation: user_id={user_id}, active={instance.active}")
        return user_id

    def ensure_active_profile(self, name: str | None = None) -> UserProfile:
        """
        Return the active profile, creating and committing a default one when
        the store is empty.
        """
        active = self.repository.get_active()
        if active is not None:
            return active

        profiles = self.repository.list_ordered()
        if profiles:
            profiles[0].active = True
            self.persist()
            return profiles[0]

        default = get_default_user_profile(
            user_id=generate_random_id(self.profile_id_length, include_uppercase=True),
            name=name,
        )
        self.create_profile(default, fresh_id=False)
        self.persist()
        return self.get_active_profile()

    def get_active_profile(self) -> UserProfile:
        """
        Raises:
            ProfileStoreError: If no profile is active
        """
        active = self.repository.get_active()
        if active is None:
            raise ProfileStoreError("No active profile in the store")
        return active

    def snapshot(self) -> ProfileSnapshot:
        """Detached copy of the active profile and all stored profiles."""
        active = UserProfileData.from_db_model(self.get_active_profile())
        profiles = [UserProfileData.from_db_model(p) for p in self.repository.list_ordered()]
        return ProfileSnapshot(active=active, profiles=profiles)

    def touch(self, profile: UserProfile) -> None:
        profile.timestamp_update = now_ms()

    def persist(self) -> bool:
        """
        Commit pending changes.

        Returns:
            True on success; False after rolling back on a database error
        """
        try:
            self.session.commit()
            logger.info("Profile store persisted")
            return True
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Failed to persist profile store, rolled back: {e}")
            return False

    def discard(self) -> None:
        """Drop every pending change since the last persist()."""
        self.session.rollback()
        logger.debug("Pending profile store changes discarded")
