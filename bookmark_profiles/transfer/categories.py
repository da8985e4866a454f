"""
Category table for profile exports.

Each exportable slice of a profile is a category. The table keyed by tag
holds its placement class, a title and the function that extracts the
slice from a profile snapshot; the assembler, validator and merge engine
all iterate this one table.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List

from bookmark_profiles.profiles.user_profile import ProfileSnapshot


class Category(str, Enum):
    """Tags of the exportable profile slices, in table order."""

    ALL_PROFILES = "allProfiles"
    CURRENT_ALL_PROFILE = "currentAllProfile"
    CURRENT_BOOKMARKS = "currentBookmarks"
    DEFAULT_FOLDER_STYLE = "defaultFolderStyle"
    DEFAULT_BOOKMARKS_STYLE = "defaultBookmarksStyle"
    USER_SETTINGS = "userSettings"
    CURRENT_USER_ACTIVITY_LOG = "currentUserActivityLog"


class PlacementClass(str, Enum):
    """
    Where imported data of a category may land.

    WHOLE_PROFILE categories only create new profiles; PARTIAL categories
    only merge into the active profile.
    """

    WHOLE_PROFILE = "wholeProfile"
    PARTIAL = "partial"


@dataclass(frozen=True)
class CategorySpec:
    tag: Category
    title: str
    placement: PlacementClass
    extract: Callable[[ProfileSnapshot], Any]

    @property
    def is_whole_profile(self) -> bool:
        return self.placement is PlacementClass.WHOLE_PROFILE


PROFILE_DETAIL_KEY = "profileDetail"

CATEGORY_TABLE: Dict[Category, CategorySpec] = {
    spec.tag: spec
    for spec in (
        CategorySpec(
            Category.ALL_PROFILES,
            "All Profiles",
            PlacementClass.WHOLE_PROFILE,
            lambda snap: [p.to_export_dict() for p in snap.profiles],
        ),
        CategorySpec(
            Category.CURRENT_ALL_PROFILE,
            "Current Profile",
            PlacementClass.WHOLE_PROFILE,
            lambda snap: snap.active.to_export_dict(),
        ),
        CategorySpec(
            Category.CURRENT_BOOKMARKS,
            "Bookmarks",
            PlacementClass.PARTIAL,
            lambda snap: copy.deepcopy(snap.active.bookmarks),
        ),
        CategorySpec(
            Category.DEFAULT_FOLDER_STYLE,
            "Default Folder Style",
            PlacementClass.PARTIAL,
            lambda snap: copy.deepcopy(snap.active.folder_style),
        ),
        CategorySpec(
            Category.DEFAULT_BOOKMARKS_STYLE,
            "Default Bookmark Style",
            PlacementClass.PARTIAL,
            lambda snap: copy.deepcopy(snap.active.bookmark_style),
        ),
        CategorySpec(
            Category.USER_SETTINGS,
            "User Settings",
            PlacementClass.PARTIAL,
            lambda snap: copy.deepcopy(snap.active.main_settings),
        ),
        CategorySpec(
            Category.CURRENT_USER_ACTIVITY_LOG,
            "Activity Log",
            PlacementClass.PARTIAL,
            lambda snap: copy.deepcopy(snap.active.activity_log),
        ),
    )
}

WHOLE_PROFILE_CATEGORIES: List[Category] = [
    tag for tag, spec in CATEGORY_TABLE.items() if spec.is_whole_profile
]
PARTIAL_CATEGORIES: List[Category] = [
    tag for tag, spec in CATEGORY_TABLE.items() if not spec.is_whole_profile
]


def parse_category(value: Any) -> Category | None:
    """Return the Category for a tag string, or None if it is not one."""
    try:
        return Category(value)
    except (TypeError, ValueError):
        return None
