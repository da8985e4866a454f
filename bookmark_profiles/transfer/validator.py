"""
Structural validation of decoded profile exports.

The validator receives whatever JSON value an artifact decoded to and
decides whether it is a profile export. Recoverable problems (unknown tags,
broken metadata) are repaired and counted as errors; a category whose slice
does not match its schema is dropped and counted as a critical error. If no
category survives, the candidate is not a recognized export and the result
is None. The validator never raises.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from pydantic import ValidationError

from bookmark_profiles.transfer.categories import (
    CATEGORY_TABLE,
    PROFILE_DETAIL_KEY,
    Category,
    parse_category,
)
from bookmark_profiles.transfer.document import (
    BrowserInfo,
    ExportDetails,
    ExportDocument,
    ExtensionInfo,
    OsInfo,
    ProfileDetail,
    ValidationResult,
    ValidationStatus,
)
from bookmark_profiles.transfer.schemas import SLICE_SCHEMAS

logger = logging.getLogger(__name__)

PROFILE_SCHEMA_NAME = "userProfileObject"


class StructuralValidator(Protocol):
    """Contract of the structural validator."""

    def validate(self, candidate: Any, schema_name: str = PROFILE_SCHEMA_NAME) -> Optional[ValidationResult]: ...


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid')}" if location else first.get("msg", "invalid")


def _non_empty_slice(tag: Category, value: Any) -> bool:
    if tag in (Category.ALL_PROFILES, Category.CURRENT_BOOKMARKS):
        return bool(value)
    return True


class ProfileExportValidator:
    """Default StructuralValidator built on pydantic schemas."""

    def validate(self, candidate: Any, schema_name: str = PROFILE_SCHEMA_NAME) -> Optional[ValidationResult]:
        """
        Validate a decoded candidate.

        Returns:
            ValidationResult with the repaired document, or None when the
            candidate is not a recognized profile export
        """
        try:
            return self._validate(candidate, schema_name)
        except Exception:  # the validator contract forbids raising
            logger.exception("Unexpected error while validating import candidate")
            return None

    def _validate(self, candidate: Any, schema_name: str) -> Optional[ValidationResult]:
        if schema_name != PROFILE_SCHEMA_NAME:
            logger.warning(f"Unknown schema requested: {schema_name}")
            return None
        if not isinstance(candidate, dict):
            return None
        raw_details = candidate.get("details")
        raw_export = candidate.get("export")
        if not isinstance(raw_details, dict) or not isinstance(raw_export, dict):
            return None

        status = ValidationStatus()
        tags = self._collect_tags(raw_details, raw_export, status)
        if not tags:
            logger.info("Import candidate has no known categories")
            return None

        document = ExportDocument(details=self._details(raw_details, status))
        for tag in tags:
            value = raw_export.get(tag.value)
            try:
                SLICE_SCHEMAS[tag].validate_python(value)
            except ValidationError as e:
                status.critical_error += 1
                status.messages.append(f"{tag.value} dropped: {_first_error(e)}")
                continue
            if not _non_empty_slice(tag, value):
                status.critical_error += 1
                status.messages.append(f"{tag.value} dropped: slice is empty")
                continue
            document.include(tag, copy.deepcopy(value))
            status.success += 1

        if not document.categories():
            logger.info("No category of the import candidate passed validation")
            return None

        document.export[PROFILE_DETAIL_KEY] = self._profile_detail(raw_export.get(PROFILE_DETAIL_KEY), status)
        logger.info(
            f"Import candidate validated: success={status.success}, "
            f"error={status.error}, criticalError={status.critical_error}"
        )
        return ValidationResult(valid_object=document, status=status)

    def _collect_tags(
        self, raw_details: Dict[str, Any], raw_export: Dict[str, Any], status: ValidationStatus
    ) -> List[Category]:
        """Reconcile `exportType` with the keys of `export`."""
        raw_types = raw_details.get("exportType")
        if not isinstance(raw_types, list):
            status.error += 1
            status.messages.append("exportType is missing or not a list")
            raw_types = []

        tags: List[Category] = []
        for value in raw_types:
            tag = parse_category(value)
            if tag is None:
                status.error += 1
                status.messages.append(f"Unknown export type removed: {value!r}")
            elif tag not in tags:
                tags.append(tag)

        present: List[Category] = []
        for tag in tags:
            if tag.value in raw_export:
                present.append(tag)
            else:
                status.error += 1
                status.messages.append(f"{tag.value} listed in exportType but missing from export")

        for tag in CATEGORY_TABLE:
            if tag.value in raw_export and tag not in present:
                status.error += 1
                status.messages.append(f"{tag.value} found in export but missing from exportType")
                present.append(tag)
        return self._exclusive_classes(present, status)

    def _exclusive_classes(self, tags: List[Category], status: ValidationStatus) -> List[Category]:
        """Keep one whole-profile category, or only partial categories."""
        whole = [tag for tag, spec in CATEGORY_TABLE.items() if tag in tags and spec.is_whole_profile]
        if not whole:
            return tags
        for tag in tags:
            if tag is not whole[0]:
                status.error += 1
                status.messages.append(f"{tag.value} removed: cannot be combined with {whole[0].value}")
        return [whole[0]]

    def _details(self, raw_details: Dict[str, Any], status: ValidationStatus) -> ExportDetails:
        details = ExportDetails(timestamp_creation=self._timestamp(raw_details.get("timestampCreation"), status))
        for key, model in (("browser", BrowserInfo), ("os", OsInfo), ("extension", ExtensionInfo)):
            try:
                setattr(details, key, model.model_validate(raw_details.get(key, {})))
            except ValidationError as e:
                status.error += 1
                status.messages.append(f"details.{key} replaced with defaults: {_first_error(e)}")
        return details

    def _timestamp(self, value: Any, status: ValidationStatus) -> str:
        if isinstance(value, str):
            try:
                datetime.fromisoformat(value.replace("Z", "+00:00"))
                return value
            except ValueError:
                pass
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        status.error += 1
        status.messages.append("details.timestampCreation is not a valid date")
        return "unknown"

    def _profile_detail(self, value: Any, status: ValidationStatus) -> Dict[str, Any]:
        try:
            detail = ProfileDetail.model_validate(value if value is not None else {})
        except ValidationError as e:
            status.error += 1
            status.messages.append(f"profileDetail replaced with defaults: {_first_error(e)}")
            detail = ProfileDetail()
        return detail.model_dump(by_alias=True)
