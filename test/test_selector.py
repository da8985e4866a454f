"""
Tests for export type selection and its mutual exclusion rules.
"""

import random

from bookmark_profiles.transfer.categories import (
    CATEGORY_TABLE,
    PARTIAL_CATEGORIES,
    WHOLE_PROFILE_CATEGORIES,
    Category,
)
from bookmark_profiles.transfer.selector import ExportSession, ExportTypeSelector


def _classes_mixed(selector: ExportTypeSelector) -> bool:
    selected = selector.selected()
    has_whole = any(CATEGORY_TABLE[t].is_whole_profile for t in selected)
    has_partial = any(not CATEGORY_TABLE[t].is_whole_profile for t in selected)
    return has_whole and has_partial


def test_whole_profile_implies_and_locks_partials():
    selector = ExportTypeSelector()
    assert selector.set_category(Category.ALL_PROFILES, True)

    for partial in PARTIAL_CATEGORIES:
        toggle = selector.toggles[partial]
        assert toggle.checked and toggle.locked and toggle.implied
    assert selector.selected() == [Category.ALL_PROFILES]


def test_whole_profile_clears_the_other_whole_profile():
    selector = ExportTypeSelector()
    selector.set_category(Category.ALL_PROFILES, True)
    selector.set_category(Category.CURRENT_ALL_PROFILE, True)

    assert selector.selected() == [Category.CURRENT_ALL_PROFILE]
    assert not selector.toggles[Category.ALL_PROFILES].checked


def test_turning_whole_profile_off_unlocks_partials():
    selector = ExportTypeSelector()
    selector.set_category(Category.CURRENT_ALL_PROFILE, True)
    selector.set_category(Category.CURRENT_ALL_PROFILE, False)

    assert selector.selected() == []
    for partial in PARTIAL_CATEGORIES:
        assert selector.toggles[partial].checked is False
        assert selector.toggles[partial].locked is False


def test_partial_locks_whole_profiles():
    selector = ExportTypeSelector()
    selector.set_category(Category.CURRENT_BOOKMARKS, True)

    for whole in WHOLE_PROFILE_CATEGORIES:
        assert selector.toggles[whole].locked
        assert selector.set_category(whole, True) is False
    assert selector.selected() == [Category.CURRENT_BOOKMARKS]


def test_last_partial_off_unlocks_whole_profiles():
    selector = ExportTypeSelector()
    selector.set_category(Category.CURRENT_BOOKMARKS, True)
    selector.set_category(Category.USER_SETTINGS, True)
    selector.set_category(Category.CURRENT_BOOKMARKS, False)
    assert selector.toggles[Category.ALL_PROFILES].locked

    selector.set_category(Category.USER_SETTINGS, False)
    for whole in WHOLE_PROFILE_CATEGORIES:
        assert not selector.toggles[whole].locked


def test_locked_toggle_is_a_no_op():
    selector = ExportTypeSelector()
    selector.set_category(Category.ALL_PROFILES, True)

    assert selector.set_category(Category.USER_SETTINGS, False) is False
    assert selector.toggles[Category.USER_SETTINGS].checked


def test_selection_keeps_the_order_categories_were_chosen():
    selector = ExportTypeSelector()
    selector.set_category("userSettings", True)
    selector.set_category("currentBookmarks", True)
    selector.set_category("defaultFolderStyle", True)

    assert list(selector.selection()) == [
        Category.USER_SETTINGS,
        Category.CURRENT_BOOKMARKS,
        Category.DEFAULT_FOLDER_STYLE,
    ]


def test_random_toggling_never_mixes_placement_classes():
    rng = random.Random(1234)
    tags = list(CATEGORY_TABLE)
    selector = ExportTypeSelector()

    for _ in range(500):
        selector.set_category(rng.choice(tags), rng.random() < 0.6)
        assert not _classes_mixed(selector)
        whole_on = [t for t in WHOLE_PROFILE_CATEGORIES if selector.is_selected(t)]
        assert len(whole_on) <= 1


def test_reset_clears_everything():
    selector = ExportTypeSelector()
    selector.set_category(Category.ALL_PROFILES, True)
    selector.reset()

    assert selector.selected() == []
    assert not any(t.locked for t in selector.toggles.values())


def test_export_session_hides_and_clears_password():
    session = ExportSession(file_name="backup", password="hunter2")

    assert "hunter2" not in repr(session)
    session.clear_password()
    assert session.password == ""
