"""
Export type selection with whole-profile / partial mutual exclusion.

The selector keeps one toggle per category. Turning on a whole-profile
category shows every partial category checked and locked (they are implied
by the whole profile) and clears the other whole-profile toggle; turning on
a partial category locks both whole-profile toggles off. The export
selection therefore never mixes the two placement classes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from bookmark_profiles.transfer.categories import (
    CATEGORY_TABLE,
    PARTIAL_CATEGORIES,
    WHOLE_PROFILE_CATEGORIES,
    Category,
)

logger = logging.getLogger(__name__)


@dataclass
class ToggleState:
    """
    Mirrored state of one category toggle.

    Attributes:
        checked: Toggle shows as on
        locked: Toggle is disabled; set_category calls on it are no-ops
        implied: Checked only because a whole-profile category is on
    """

    checked: bool = False
    locked: bool = False
    implied: bool = False


class ExportTypeSelector:
    """Tracks which categories are requested for export."""

    def __init__(self) -> None:
        self.toggles: Dict[Category, ToggleState] = {tag: ToggleState() for tag in CATEGORY_TABLE}
        self._order: List[Category] = []

    def set_category(self, tag: Category | str, enabled: bool) -> bool:
        """
        Turn a category on or off, applying the exclusion rules.

        Returns:
            False when the toggle is locked or already in the requested
            state, True otherwise
        """
        tag = Category(tag)
        toggle = self.toggles[tag]
        if toggle.locked:
            logger.debug(f"Ignoring change of locked category {tag.value}")
            return False
        if toggle.checked == enabled and not toggle.implied:
            return False

        toggle.checked = enabled
        toggle.implied = False
        self._record(tag, enabled)

        if CATEGORY_TABLE[tag].is_whole_profile:
            self._on_whole_profile(tag, enabled)
        else:
            self._on_partial(enabled)
        return True

    def _record(self, tag: Category, enabled: bool) -> None:
        if tag in self._order:
            self._order.remove(tag)
        if enabled:
            self._order.append(tag)

    def _on_whole_profile(self, tag: Category, enabled: bool) -> None:
        for other in WHOLE_PROFILE_CATEGORIES:
            if other is not tag:
                self.toggles[other] = ToggleState()
                self._record(other, False)
        for partial in PARTIAL_CATEGORIES:
            self.toggles[partial] = ToggleState(checked=enabled, locked=enabled, implied=enabled)
            self._record(partial, False)

    def _on_partial(self, enabled: bool) -> None:
        if enabled:
            for whole in WHOLE_PROFILE_CATEGORIES:
                self.toggles[whole] = ToggleState(checked=False, locked=True)
                self._record(whole, False)
        elif not any(self.toggles[p].checked for p in PARTIAL_CATEGORIES):
            for whole in WHOLE_PROFILE_CATEGORIES:
                self.toggles[whole].locked = False

    def is_selected(self, tag: Category | str) -> bool:
        toggle = self.toggles[Category(tag)]
        return toggle.checked and not toggle.implied

    def selected(self) -> List[Category]:
        """Selected categories in the order they were turned on."""
        return [tag for tag in self._order if self.is_selected(tag)]

    def selection(self) -> Dict[Category, bool]:
        """Ordered mapping of the selected categories, as the assembler takes it."""
        return {tag: True for tag in self.selected()}

    def reset(self) -> None:
        self.toggles = {tag: ToggleState() for tag in CATEGORY_TABLE}
        self._order.clear()


@dataclass
class ExportSession:
    """
    Draft state of one export action.

    The password is held only here, for the life of the export.
    """

    selector: ExportTypeSelector = field(default_factory=ExportTypeSelector)
    file_name: str = ""
    password: str = field(default="", repr=False)

    def clear_password(self) -> None:
        self.password = ""
