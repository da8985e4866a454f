"""
User profile data and defaults for the bookmark manager.

This module defines the high-level profile object (`UserProfileData`) used
by the export/import subsystem instead of working directly with the
SQLAlchemy model, the default slices a fresh profile starts with, and the
conversions between the database row and the camelCase export form.
"""

from __future__ import annotations

import copy
import secrets
import string
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List

from bookmark_profiles.database.models import UserProfile

ROOT_FOLDER_ID = "root"

DEFAULT_BOOKMARK_STYLE: Dict[str, Any] = {
    "border": {
        "top": {"color": "#2af0f0", "style": "double", "width": "10", "radius": "0"},
        "right": {"color": "#0d4949", "style": "double", "width": "5", "radius": "20"},
        "bottom": {"color": "#0d4949", "style": "double", "width": "5", "radius": "0"},
        "left": {"color": "#2af0f0", "style": "double", "width": "10", "radius": "30"},
    },
    "color": {"display": "flex", "width": "100", "height": "80", "backgroundColor": "#00b4db", "angle": "0"},
    "image": {"display": "flex", "width": "100", "height": "80", "backgroundBase64": "", "angle": "0"},
    "text": {"display": "flex", "width": "100", "height": "20", "backgroundColor": "#0083b0", "top": "80"},
    "font": {
        "color": "#eca05e",
        "fontWeight": "400",
        "fontSize": "12",
        "fontStyle": "normal",
        "fontFamily": "DejaVu Serif",
        "textAlign": "flex-start",
    },
}

DEFAULT_FOLDER_STYLE: Dict[str, Any] = {
    "grid": {"gridAutoFlow": "row"},
    "bookmarksBox": {"width": "200px", "height": "200px"},
    "background": {
        "backgroundType": "gradient",
        "colorType": {"backgroundColor": "#af5d00"},
        "gradientType": {"backgroundColorArray": ["#182b49", "#05961c", "#adde1b"], "angle": 25},
    },
    "addressBar": {
        "text": {"color": "#000000", "fontSize": 18, "fontFamily": "inherit"},
        "icon": {"content": "/", "color": "#000000", "fontSize": 21},
    },
}

DEFAULT_MAIN_SETTINGS: Dict[str, Any] = {
    "main": {
        "testingInternet": {"allowToCheckInternetStatus": True},
        "onlineRadio": {"allowed": True, "lastUserSelectedStationuuid": ""},
        "allowUserActivity": [
            {"action": "createProfile", "status": True, "title": "Create profile"},
            {"action": "deleteProfile", "status": True, "title": "Delete profile"},
        ],
    },
}


def generate_random_id(length: int = 10, include_uppercase: bool = False) -> str:
    """Random id of digits and lowercase letters, optionally uppercase too."""
    alphabet = string.digits + string.ascii_lowercase
    if include_uppercase:
        alphabet += string.ascii_uppercase
    return "".join(secrets.choice(alphabet) for _ in range(length))


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def default_bookmarks(timestamp: int | None = None) -> List[Dict[str, Any]]:
    """
    Build the bookmark tree of a fresh profile: a single empty root folder.

    Args:
        timestamp: Epoch milliseconds stamped on the root; defaults to now.
    """
    stamp = now_ms() if timestamp is None else timestamp
    return [
        {
            "dateAdded": stamp,
            "dateGroupModified": stamp,
            "lastEdited": stamp,
            "id": ROOT_FOLDER_ID,
            "count": 0,
            "index": 0,
            "parentId": ROOT_FOLDER_ID,
            "title": "Home",
            "type": "folder",
            "url": "",
            "style": {
                "folder": copy.deepcopy(DEFAULT_FOLDER_STYLE),
                "bookmark": copy.deepcopy(DEFAULT_BOOKMARK_STYLE),
            },
            "children": [],
        }
    ]


@dataclass
class UserProfileData:
    """
    High-level profile object used by the export/import subsystem.

    Field names are snake_case here; `to_export_dict` produces the camelCase
    wire form that appears inside exported documents.
    """

    name: str
    user_id: str
    image: str = ""
    active: bool = False
    timestamp_creation: int = field(default_factory=now_ms)
    timestamp_update: int = field(default_factory=now_ms)
    bookmarks: List[Dict[str, Any]] = field(default_factory=default_bookmarks)
    folder_style: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_FOLDER_STYLE))
    bookmark_style: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_BOOKMARK_STYLE))
    main_settings: Dict[str, Any] = field(default_factory=lambda: copy.deepcopy(DEFAULT_MAIN_SETTINGS))
    activity_log: List[Dict[str, Any]] = field(default_factory=list)

    def to_db_model(self, existing: UserProfile | None = None) -> UserProfile:
        """
        Convert to a UserProfile SQLAlchemy model instance.

        JSON columns receive deep copies so later edits to this object never
        reach the session's state.

        Args:
            existing: Optional existing UserProfile to update. If not provided,
                      a new instance is created.
        """
        instance = existing or UserProfile()

        instance.user_id = self.user_id
        instance.name = self.name
        instance.image = self.image
        instance.active = self.active
        instance.timestamp_creation = self.timestamp_creation
        instance.timestamp_update = self.timestamp_update
        instance.bookmarks = copy.deepcopy(self.bookmarks)
        instance.folder_style = copy.deepcopy(self.folder_style)
        instance.bookmark_style = copy.deepcopy(self.bookmark_style)
        instance.main_settings = copy.deepcopy(self.main_settings)
        instance.activity_log = copy.deepcopy(self.activity_log)

        return instance

    @classmethod
    def from_db_model(cls, model: UserProfile) -> "UserProfileData":
        """Create a detached copy of a UserProfile row."""
        return cls(
            name=model.name,
            user_id=model.user_id,
            image=model.image or "",
            active=bool(model.active),
            timestamp_creation=model.timestamp_creation,
            timestamp_update=model.timestamp_update,
            bookmarks=copy.deepcopy(model.bookmarks or []),
            folder_style=copy.deepcopy(model.folder_style or {}),
            bookmark_style=copy.deepcopy(model.bookmark_style or {}),
            main_settings=copy.deepcopy(model.main_settings or {}),
            activity_log=copy.deepcopy(model.activity_log or []),
        )

    def to_export_dict(self) -> Dict[str, Any]:
        """Full profile object in wire form."""
        return {
            "active": self.active,
            "name": self.name,
            "userId": self.user_id,
            "image": self.image,
            "timestampUpdate": self.timestamp_update,
            "timestampCreation": self.timestamp_creation,
            "currentUserBookmarks": copy.deepcopy(self.bookmarks),
            "defaultUserFolderStyle": copy.deepcopy(self.folder_style),
            "defaultUserBookmarkStyle": copy.deepcopy(self.bookmark_style),
            "mainUserSettings": copy.deepcopy(self.main_settings),
            "userActivityLog": copy.deepcopy(self.activity_log),
        }

    @classmethod
    def from_export_dict(cls, data: Dict[str, Any]) -> "UserProfileData":
        """
        Build a profile from its wire form.

        Missing slices fall back to the defaults of a fresh profile.
        """
        stamp = now_ms()
        return cls(
            name=str(data.get("name") or "User"),
            user_id=str(data.get("userId") or ""),
            image=str(data.get("image") or ""),
            active=bool(data.get("active", False)),
            timestamp_creation=int(data.get("timestampCreation") or stamp),
            timestamp_update=int(data.get("timestampUpdate") or stamp),
            bookmarks=copy.deepcopy(data.get("currentUserBookmarks") or default_bookmarks(stamp)),
            folder_style=copy.deepcopy(data.get("defaultUserFolderStyle") or DEFAULT_FOLDER_STYLE),
            bookmark_style=copy.deepcopy(data.get("defaultUserBookmarkStyle") or DEFAULT_BOOKMARK_STYLE),
            main_settings=copy.deepcopy(data.get("mainUserSettings") or DEFAULT_MAIN_SETTINGS),
            activity_log=copy.deepcopy(data.get("userActivityLog") or []),
        )

    def detail(self) -> Dict[str, Any]:
        """The `profileDetail` block stamped into every export."""
        return {
            "name": self.name,
            "userId": self.user_id,
            "timestampCreation": self.timestamp_creation,
            "image": self.image,
        }


@dataclass
class ProfileSnapshot:
    """
    Detached view of the profile store taken at export time.

    Attributes:
        active: The profile currently in use
        profiles: Every stored profile, in creation order
    """

    active: UserProfileData
    profiles: List[UserProfileData] = field(default_factory=list)


def get_default_user_profile(user_id: str, name: str | None = None) -> UserProfileData:
    """
    Create a default, active profile.

    Args:
        user_id: Public identifier of the profile.
        name: Optional display name.
    """
    return UserProfileData(name=name or "User", user_id=user_id, active=True)
