"""
Builds the canonical export document from the live profile snapshot.

The assembler walks the category table once for the selected tags, so the
keys of `export` and the entries of `details.exportType` are produced by
the same loop and always match. Slices are deep copies; the live profile is
never aliased into a document.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Mapping

from bookmark_profiles.config import EnvironmentConfig, TransferConfig
from bookmark_profiles.profiles.user_profile import ProfileSnapshot
from bookmark_profiles.transfer.categories import CATEGORY_TABLE, PROFILE_DETAIL_KEY, Category
from bookmark_profiles.transfer.document import (
    BrowserInfo,
    ExportDetails,
    ExportDocument,
    ExtensionInfo,
    OsInfo,
)
from bookmark_profiles.transfer.exceptions import ExportValidationError

logger = logging.getLogger(__name__)

FORBIDDEN_FILE_NAME_CHARS = "<>:{}'\"/\\|?*"
MAX_FILE_NAME_LENGTH = 150


def sanitize_file_name(hint: str, forbidden: str = FORBIDDEN_FILE_NAME_CHARS) -> str:
    """
    Strip forbidden characters and surrounding whitespace from a file name.

    Example:
        >>> sanitize_file_name("My:Export*2024")
        'MyExport2024'
    """
    table = str.maketrans("", "", forbidden)
    return (hint or "").translate(table).strip()


class ExportAssembler:
    """
    Assembles ExportDocuments.

    Attributes:
        environment: Metadata copied verbatim into `details`
        transfer: Naming rules for the artifact
    """

    def __init__(
        self,
        environment: EnvironmentConfig | None = None,
        transfer: TransferConfig | None = None,
    ) -> None:
        self.environment = environment or EnvironmentConfig()
        self.transfer = transfer or TransferConfig()

    def validate_file_name(self, file_name_hint: str) -> str:
        """
        Returns:
            The sanitized file name

        Raises:
            ExportValidationError: If the name is empty or too long after stripping
        """
        name = sanitize_file_name(file_name_hint, self.transfer.forbidden_file_name_chars)
        if not name:
            raise ExportValidationError("Enter a file name for the export")
        if len(name) > self.transfer.file_name_max_length:
            raise ExportValidationError(
                f"The file name must be at most {self.transfer.file_name_max_length} characters"
            )
        return name

    def _details(self) -> ExportDetails:
        env = self.environment
        return ExportDetails(
            export_type=[],
            timestamp_creation=datetime.now(timezone.utc).isoformat(),
            browser=BrowserInfo(name=env.browser_name, version=env.browser_version, user_agent=env.user_agent),
            os=OsInfo(name=env.os_name, platform=env.os_platform),
            extension=ExtensionInfo(version=env.extension_version),
        )

    def assemble(
        self,
        snapshot: ProfileSnapshot,
        selection: Mapping[Category | str, bool],
        file_name_hint: str,
    ) -> ExportDocument:
        """
        Build a fresh export document.

        Args:
            snapshot: Detached view of the profile store
            selection: Category -> selected, iterated in selection order
            file_name_hint: Name the artifact will be written under

        Raises:
            ExportValidationError: If nothing is selected, a whole-profile
                category is combined with another category, or the file name
                is invalid
        """
        tags = [Category(tag) for tag, enabled in selection.items() if enabled]
        if not tags:
            raise ExportValidationError("Select at least one category to export")
        whole = [tag for tag in tags if CATEGORY_TABLE[tag].is_whole_profile]
        if whole and len(set(tags)) > 1:
            raise ExportValidationError("A whole-profile category must be exported on its own")
        self.validate_file_name(file_name_hint)

        document = ExportDocument(details=self._details())
        for tag in dict.fromkeys(tags):
            document.include(tag, CATEGORY_TABLE[tag].extract(snapshot))
        document.export[PROFILE_DETAIL_KEY] = snapshot.active.detail()

        logger.info(f"Export document assembled: categories={document.details.export_type}")
        return document
