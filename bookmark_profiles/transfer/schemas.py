"""
Pydantic schemas for the category slices of a profile export.

Each schema checks the shape of one slice as the bookmark manager writes
it: required sections, value types, enumerated CSS keywords, hex colours and
the bounded numeric strings the style editor produces. Unknown keys are
allowed so newer exports still validate; a slice that fails its schema is
dropped by the validator instead of replacing live data.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from bookmark_profiles.transfer.categories import Category

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$"
HEX_COLOR_OR_EMPTY = r"^(?:#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8}))?$"
PIXEL_SIZE = re.compile(r"^(\d+)px$")

BORDER_STYLES = Literal["dotted", "dashed", "solid", "double", "groove", "ridge", "inset", "outset"]
FONT_WEIGHTS = Literal[
    "normal", "lighter", "bold", "bolder", "unset", "inherit",
    "100", "200", "300", "400", "500", "600", "700", "800", "900",
]


def _numeric_string(value: Optional[str], low: int, high: int) -> Optional[str]:
    """
    Check a whole number written as a string, e.g. "80".

    Raises:
        ValueError: If the value is not digits or is out of range
    """
    if value is None:
        return value
    if not value.isdigit() or not low <= int(value) <= high:
        raise ValueError(f"must be a whole number between {low} and {high}")
    return value


class _SliceModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


# -- bookmark style -----------------------------------------------------------


class BorderSideSchema(_SliceModel):
    color: str = Field(pattern=HEX_COLOR)
    style: BORDER_STYLES
    width: str
    radius: str

    @field_validator("width")
    @classmethod
    def validate_width(cls, v: str) -> str:
        return _numeric_string(v, 0, 10)

    @field_validator("radius")
    @classmethod
    def validate_radius(cls, v: str) -> str:
        return _numeric_string(v, 0, 40)


class BorderSchema(_SliceModel):
    top: BorderSideSchema
    right: BorderSideSchema
    bottom: BorderSideSchema
    left: BorderSideSchema


class StyleBoxSchema(_SliceModel):
    """Shared fields of the colour, image and text layers of a bookmark tile."""

    display: Literal["flex"]
    width: str
    height: str
    angle: Optional[str] = None
    left: Optional[str] = None
    top: Optional[str] = None

    @field_validator("width", "left", "top")
    @classmethod
    def validate_percent(cls, v: Optional[str]) -> Optional[str]:
        return _numeric_string(v, 0, 100)

    @field_validator("height")
    @classmethod
    def validate_height(cls, v: str) -> str:
        return _numeric_string(v, 0, 80)

    @field_validator("angle")
    @classmethod
    def validate_angle(cls, v: Optional[str]) -> Optional[str]:
        return _numeric_string(v, 0, 360)


class ColorLayerSchema(StyleBoxSchema):
    background_color: str = Field(pattern=HEX_COLOR_OR_EMPTY)


class ImageLayerSchema(StyleBoxSchema):
    background_base64: str = ""


class TextLayerSchema(StyleBoxSchema):
    background_color: str = Field(pattern=HEX_COLOR)


class FontSchema(_SliceModel):
    color: str = Field(pattern=HEX_COLOR)
    font_weight: FONT_WEIGHTS
    font_size: str
    font_style: Literal["normal", "italic", "inherit"]
    font_family: str
    text_align: str

    @field_validator("font_size")
    @classmethod
    def validate_font_size(cls, v: str) -> str:
        return _numeric_string(v, 0, 100)


class BookmarkStyleSchema(_SliceModel):
    border: BorderSchema
    color: ColorLayerSchema
    image: ImageLayerSchema
    text: TextLayerSchema
    font: FontSchema


# -- folder style -------------------------------------------------------------


class GridSchema(_SliceModel):
    grid_auto_flow: Literal["row", "column"]


class BookmarksBoxSchema(_SliceModel):
    width: str
    height: str

    @field_validator("width", "height")
    @classmethod
    def validate_pixels(cls, v: str) -> str:
        match = PIXEL_SIZE.match(v)
        if not match or not 100 <= int(match.group(1)) <= 200:
            raise ValueError("must be between 100px and 200px")
        return v


class ColorTypeSchema(_SliceModel):
    background_color: str = Field(pattern=HEX_COLOR)


class GradientTypeSchema(_SliceModel):
    background_color_array: List[str] = Field(min_length=1)
    angle: float = Field(ge=0, le=360)

    @field_validator("background_color_array")
    @classmethod
    def validate_colors(cls, v: List[str]) -> List[str]:
        for color in v:
            if not re.match(HEX_COLOR, color):
                raise ValueError(f"{color!r} is not a hex colour")
        return v


class FolderBackgroundSchema(_SliceModel):
    background_type: Literal["color", "gradient", "image"]
    color_type: ColorTypeSchema
    gradient_type: GradientTypeSchema
    image_type: Optional[Dict[str, Any]] = None


class AddressTextSchema(_SliceModel):
    color: str = Field(pattern=HEX_COLOR)
    font_size: float = Field(ge=10, le=40)
    font_family: str


class AddressIconSchema(_SliceModel):
    content: str = Field(max_length=1)
    color: str = Field(pattern=HEX_COLOR)
    font_size: float = Field(ge=10, le=40)


class AddressBarSchema(_SliceModel):
    text: AddressTextSchema
    icon: AddressIconSchema
    background: Optional[Dict[str, Any]] = None


class FolderStyleSchema(_SliceModel):
    grid: GridSchema
    bookmarks_box: BookmarksBoxSchema
    background: FolderBackgroundSchema
    address_bar: AddressBarSchema


# -- main settings ------------------------------------------------------------


class InternetCheckSchema(_SliceModel):
    allow_to_check_internet_status: bool


class ActivityToggleSchema(_SliceModel):
    action: str = Field(min_length=1)
    status: bool
    title: str


class OnlineRadioSchema(_SliceModel):
    allowed: bool
    last_user_selected_stationuuid: str = Field(default="", max_length=36)


class MainSectionSchema(_SliceModel):
    testing_internet: InternetCheckSchema
    allow_user_activity: List[ActivityToggleSchema]
    online_radio: Optional[OnlineRadioSchema] = None


class MainSettingsSchema(_SliceModel):
    main: MainSectionSchema


# -- bookmarks and profiles ---------------------------------------------------


class BookmarkNodeSchema(_SliceModel):
    id: str = Field(min_length=1)
    parent_id: str
    index: int = Field(ge=0)
    title: str
    type: Literal["folder", "bookmark"]
    url: str = ""
    children: List["BookmarkNodeSchema"] = Field(default_factory=list)


class ProfileSchema(_SliceModel):
    name: str = Field(max_length=50)
    user_id: str = Field(max_length=50)
    image: str = ""
    active: bool = False
    timestamp_creation: int
    timestamp_update: int
    current_user_bookmarks: List[BookmarkNodeSchema] = Field(min_length=1)
    default_user_folder_style: FolderStyleSchema
    default_user_bookmark_style: BookmarkStyleSchema
    main_user_settings: MainSettingsSchema
    user_activity_log: List[Dict[str, Any]] = Field(default_factory=list)


SLICE_SCHEMAS: Dict[Category, TypeAdapter] = {
    Category.ALL_PROFILES: TypeAdapter(List[ProfileSchema]),
    Category.CURRENT_ALL_PROFILE: TypeAdapter(ProfileSchema),
    Category.CURRENT_BOOKMARKS: TypeAdapter(List[BookmarkNodeSchema]),
    Category.DEFAULT_FOLDER_STYLE: TypeAdapter(FolderStyleSchema),
    Category.DEFAULT_BOOKMARKS_STYLE: TypeAdapter(BookmarkStyleSchema),
    Category.USER_SETTINGS: TypeAdapter(MainSettingsSchema),
    Category.CURRENT_USER_ACTIVITY_LOG: TypeAdapter(List[Dict[str, Any]]),
}
