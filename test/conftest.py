"""
Shared fixtures: an in-memory profile store seeded with one active profile.
"""

import copy

import pytest
from sqlalchemy.orm import sessionmaker

from bookmark_profiles.config import AppConfig, DatabaseConfig, EnvironmentConfig, TransferConfig
from bookmark_profiles.database.models import Base
from bookmark_profiles.database.session import create_engine_from_config
from bookmark_profiles.profiles.store import ProfileStore
from bookmark_profiles.profiles.user_profile import (
    DEFAULT_MAIN_SETTINGS,
    default_bookmarks,
    get_default_user_profile,
)
from bookmark_profiles.services.transfer_service import ProfileTransferService

SEED_USER_ID = "seedUser000000000001"
SEED_TIMESTAMP = 1700000000000


def seed_bookmarks():
    tree = default_bookmarks(SEED_TIMESTAMP)
    tree[0]["children"] = [
        {
            "id": "f1",
            "parentId": "root",
            "index": 0,
            "title": "Work",
            "type": "folder",
            "url": "",
            "children": [
                {
                    "id": "b1",
                    "parentId": "f1",
                    "index": 0,
                    "title": "Docs",
                    "type": "bookmark",
                    "url": "https://docs.python.org/3/",
                    "children": [],
                }
            ],
        },
        {
            "id": "b2",
            "parentId": "root",
            "index": 1,
            "title": "News",
            "type": "bookmark",
            "url": "https://news.ycombinator.com/",
            "children": [],
        },
    ]
    return tree


@pytest.fixture
def config():
    return AppConfig(
        database=DatabaseConfig(DATABASE_URL="sqlite:///:memory:"),
        transfer=TransferConfig(),
        environment=EnvironmentConfig(
            browser_name="Firefox",
            browser_version="128.0",
            user_agent="Mozilla/5.0",
            os_name="linux",
            os_platform="x86-64",
            extension_version="2.4.1",
        ),
    )


@pytest.fixture
def engine(config):
    engine = create_engine_from_config(config.database)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = factory()
    yield session
    session.close()


@pytest.fixture
def store(db_session, config):
    store = ProfileStore(db_session, profile_id_length=config.transfer.profile_id_length)
    profile = get_default_user_profile(user_id=SEED_USER_ID, name="Alice")
    profile.timestamp_creation = SEED_TIMESTAMP
    profile.bookmarks = seed_bookmarks()
    profile.main_settings = copy.deepcopy(DEFAULT_MAIN_SETTINGS)
    profile.main_settings["main"]["theme"] = "dark"
    profile.activity_log = [{"action": "createProfile", "timestamp": SEED_TIMESTAMP}]
    store.create_profile(profile, fresh_id=False)
    assert store.persist()
    return store


@pytest.fixture
def service(config, db_session, store):
    return ProfileTransferService(config, db_session, store=store)


@pytest.fixture
def snapshot(store):
    return store.snapshot()
