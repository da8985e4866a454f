"""
Wire models of the profile export artifact.

`ExportDocument` is the canonical payload written to an artifact; field
names are snake_case in Python and camelCase on the wire. Category slices
stay plain JSON values so they survive a round trip untouched.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bookmark_profiles.transfer.categories import PROFILE_DETAIL_KEY, Category, parse_category


class WireModel(BaseModel):
    """Base for camelCase wire models."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BrowserInfo(WireModel):
    name: str = "unknown"
    version: str = "unknown"
    user_agent: str = "unknown"


class OsInfo(WireModel):
    name: str = "unknown"
    platform: str = "unknown"


class ExtensionInfo(WireModel):
    version: str = "unknown"


class ExportDetails(WireModel):
    """
    The `details` block of an export.

    Attributes:
        export_type: Category tags included, in selection order
        timestamp_creation: ISO-8601 creation time of the export
        browser: Browser the export was made in
        os: Operating system the export was made on
        extension: Version of the bookmark manager
    """

    export_type: List[str] = Field(default_factory=list)
    timestamp_creation: str = "unknown"
    browser: BrowserInfo = Field(default_factory=BrowserInfo)
    os: OsInfo = Field(default_factory=OsInfo)
    extension: ExtensionInfo = Field(default_factory=ExtensionInfo)


class ProfileDetail(WireModel):
    name: str = "unknown"
    user_id: str = ""
    timestamp_creation: int | str = "unknown"
    image: str = ""


class ExportDocument(WireModel):
    """
    Canonical export payload.

    Attributes:
        details: Export metadata
        export: Category tag -> profile slice, plus `profileDetail`
    """

    details: ExportDetails = Field(default_factory=ExportDetails)
    export: Dict[str, Any] = Field(default_factory=dict)

    def categories(self) -> List[Category]:
        """Known category tags of `details.exportType`, in document order."""
        tags = []
        for value in self.details.export_type:
            tag = parse_category(value)
            if tag is not None and tag not in tags:
                tags.append(tag)
        return tags

    def slice(self, tag: Category | str) -> Any:
        return self.export.get(Category(tag).value)

    def include(self, tag: Category | str, value: Any) -> None:
        """Set a category slice and its `exportType` entry together."""
        key = Category(tag).value
        self.export[key] = value
        if key not in self.details.export_type:
            self.details.export_type.append(key)

    def exclude(self, tag: Category | str) -> None:
        """Remove a category slice and its `exportType` entry together."""
        key = Category(tag).value
        self.export.pop(key, None)
        self.details.export_type = [t for t in self.details.export_type if t != key]

    def category_keys(self) -> set[str]:
        """Keys of `export` other than `profileDetail`."""
        return {key for key in self.export if key != PROFILE_DETAIL_KEY}

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ValidationStatus(BaseModel):
    success: int = 0
    error: int = 0
    critical_error: int = Field(default=0, alias="criticalError")
    messages: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ValidationResult(BaseModel):
    """
    Classified outcome of structural validation.

    Attributes:
        valid_object: The accepted, repaired document
        status: Counters and diagnostic messages
    """

    valid_object: ExportDocument = Field(alias="validObject")
    status: ValidationStatus = Field(default_factory=ValidationStatus)

    model_config = ConfigDict(populate_by_name=True)
