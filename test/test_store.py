"""
Tests for the SQLAlchemy-backed profile store and configuration.
"""

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from bookmark_profiles.config import TransferConfig
from bookmark_profiles.profiles.store import ProfileStore, ProfileStoreError
from bookmark_profiles.profiles.user_profile import UserProfileData, get_default_user_profile

from conftest import SEED_USER_ID


def test_empty_store_gets_a_default_profile(db_session):
    store = ProfileStore(db_session)
    with pytest.raises(ProfileStoreError):
        store.get_active_profile()

    profile = store.ensure_active_profile("Carol")
    assert profile.name == "Carol"
    assert profile.active
    assert profile.bookmarks[0]["id"] == "root"
    assert store.ensure_active_profile() is profile


def test_new_active_profile_deactivates_others(store):
    user_id = store.create_profile(get_default_user_profile("ignored", name="Dave"))
    assert store.persist()

    assert store.get_active_profile().user_id == user_id
    assert store.repository.get_by_user_id(SEED_USER_ID).active is False


def test_fresh_ids_never_collide(store):
    data = UserProfileData(name="Copy", user_id=SEED_USER_ID)
    assert store.create_profile(data, fresh_id=False) != SEED_USER_ID


def test_snapshot_is_detached(store):
    snapshot = store.snapshot()
    snapshot.active.bookmarks[0]["title"] = "changed"

    assert store.get_active_profile().bookmarks[0]["title"] == "Home"
    assert [p.user_id for p in snapshot.profiles] == [SEED_USER_ID]


def test_persist_failure_rolls_back(store, monkeypatch):
    def fail_commit():
        raise SQLAlchemyError("locked")

    store.get_active_profile().name = "Mallory"
    monkeypatch.setattr(store.session, "commit", fail_commit)

    assert store.persist() is False
    assert store.get_active_profile().name == "Alice"


def test_export_dict_round_trip_keeps_slices(store):
    data = store.snapshot().active
    wire = data.to_export_dict()

    assert set(wire) == {
        "active", "name", "userId", "image", "timestampUpdate", "timestampCreation",
        "currentUserBookmarks", "defaultUserFolderStyle", "defaultUserBookmarkStyle",
        "mainUserSettings", "userActivityLog",
    }
    assert UserProfileData.from_export_dict(wire) == data


@pytest.mark.parametrize(
    "overrides",
    [{"file_name_max_length": 0}, {"encrypted_marker": "UU"}, {"profile_id_length": -1}],
)
def test_transfer_config_rejects_bad_values(overrides):
    with pytest.raises(ValidationError):
        TransferConfig(**overrides)


def test_transfer_config_normalizes_extension():
    assert TransferConfig(extension=".json").extension == "json"
