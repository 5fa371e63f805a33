"""
Pydantic schemas for watermark requests and service error responses.

These schemas define the contract between the client and the watermarking
service. Optional parameters default to None and a None parameter is left
out of the outgoing request entirely; presence, not value, decides whether
a field is sent.
"""
from __future__ import annotations

from enum import Enum, IntEnum, IntFlag
from typing import Any, ClassVar, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

HEX_COLOR_PATTERN = r"^[0-9A-Fa-f]{6}$"
NO_CONTROL_CHARS_PATTERN = r"^[^\x00-\x1f\x7f]*$"


class DensityLevel(IntEnum):
    """How densely the watermark is tiled over the picture."""
    MIN = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    MAX = 5


class FontWeight(IntEnum):
    W100 = 100
    W200 = 200
    W300 = 300
    W400 = 400
    W500 = 500
    W600 = 600
    W700 = 700
    W800 = 800
    W900 = 900


class FontDecoration(IntFlag):
    """Independent text decoration flags."""
    NONE = 0
    UNDERLINE = 1 << 0
    LINE_THROUGH = 1 << 1

    def to_form_value(self) -> str:
        """
        Render the flag set as the service's decoration string.

        Each present flag contributes one character, in declaration order:
        "u" for underline, "t" for line-through. No flags renders "".
        """
        return "".join(
            code for flag, code in _DECORATION_CODES if flag in self
        )


_DECORATION_CODES: Tuple[Tuple[FontDecoration, str], ...] = (
    (FontDecoration.UNDERLINE, "u"),
    (FontDecoration.LINE_THROUGH, "t"),
)


def format_form_value(value: Any) -> str:
    """
    Convert a parameter value to its multipart text form.

    Booleans are "true"/"false", enums their integer value, floats their
    shortest round-trip representation.
    """
    if isinstance(value, FontDecoration):
        return value.to_form_value()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float):
        return repr(value)
    return str(value)


class WatermarkBaseModel(BaseModel):
    """Base model for watermark schemas."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )


class ImagePayload(WatermarkBaseModel):
    """
    Encoded image as sent to the service.

    Immutable once created. The bytes are passed through untouched; the
    client never decodes them.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    data: bytes = Field(..., repr=False, description="Encoded image bytes")
    mime_type: str = Field(
        ...,
        pattern=NO_CONTROL_CHARS_PATTERN,
        description="MIME type, e.g. image/png; written verbatim into a part header",
    )
    name: str = Field(..., description="File name reported in the multipart part")

    @classmethod
    def empty(cls) -> "ImagePayload":
        """Placeholder used before a watermark image has been picked."""
        return cls(data=b"", mime_type="", name="")

    @property
    def is_empty(self) -> bool:
        return not self.data


class WatermarkParams(WatermarkBaseModel):
    """
    Common behaviour of the text and custom parameter sets.

    Field declaration order is the order fields are written to the request.
    """

    FILE_FIELDS: ClassVar[FrozenSet[str]] = frozenset()

    def form_fields(self) -> List[Tuple[str, str]]:
        """
        Text fields to send, in declaration order.

        Returns:
            (name, value) pairs for every field that is not None
        """
        fields = []
        for name in type(self).model_fields:
            if name in self.FILE_FIELDS:
                continue
            value = getattr(self, name)
            if value is None:
                continue
            fields.append((name, format_form_value(value)))
        return fields


class TextWatermarkParams(WatermarkParams):
    """Parameters for a text watermark."""

    text: str = Field(..., description="Watermark text; the service rejects empty text")
    font_size: Optional[int] = Field(default=None, ge=1)
    font_family: Optional[str] = None
    density_level: Optional[DensityLevel] = None
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    opacity: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    rotation_angle: Optional[int] = Field(default=None, description="Degrees")
    font_italic: Optional[bool] = None
    font_weight: Optional[FontWeight] = None
    shadow_opacity: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    shadow_blur_radius: Optional[int] = Field(default=None, ge=0)
    shadow_offset_x: Optional[int] = None
    shadow_offset_y: Optional[int] = None
    shadow_color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    font_decorations: Optional[FontDecoration] = None
    stroke_color: Optional[str] = Field(default=None, pattern=HEX_COLOR_PATTERN)
    stroke_opacity: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class CustomWatermarkParams(WatermarkParams):
    """Parameters for an image ("custom") watermark."""

    FILE_FIELDS: ClassVar[FrozenSet[str]] = frozenset({"watermark"})

    watermark: ImagePayload = Field(..., description="Watermark image")
    opacity: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    rotation_angle: Optional[int] = Field(default=None, description="Degrees")
    density_level: Optional[DensityLevel] = None


# =============================================================================
# Error responses
# =============================================================================


class ApiErrorCode(IntEnum):
    """Error codes the service reports in a non-200 response."""
    GENERIC = 1
    INVALID_WATERMARK_TEXT = 2
    INVALID_IMAGE_BUFFER = 3
    INVALID_WATERMARK_IMAGE_BUFFER = 4
    TOO_MANY_FIELDS = 5
    TOO_MANY_FILES = 6
    FILE_TOO_LARGE = 7
    FIELD_NAME_TOO_LONG = 8
    FIELD_VALUE_TOO_LONG = 9
    INVALID_FILE_TYPE = 10
    NO_PICTURE_PROVIDED = 11
    NO_WATERMARK_DATA_PROVIDED = 12


class ApiErrorEntry(BaseModel):
    code: int
    data: Optional[str] = None


class ApiErrorResponse(BaseModel):
    """Body of a non-200 response: {"errorCodes": [{"code": 11}, ...]}."""

    model_config = ConfigDict(populate_by_name=True)

    error_codes: List[ApiErrorEntry] = Field(..., alias="errorCodes")

    @property
    def codes(self) -> List[int]:
        return [entry.code for entry in self.error_codes]
