"""
Unit tests for the watermark parameter model.

Tests field presence, wire order, value text forms and validation.
"""
import pytest
from pydantic import ValidationError

from watermark_builder.api.schemas import (
    ApiErrorResponse,
    CustomWatermarkParams,
    DensityLevel,
    FontDecoration,
    FontWeight,
    ImagePayload,
    TextWatermarkParams,
    format_form_value,
)

TEXT_FIELD_ORDER = [
    "text",
    "font_size",
    "font_family",
    "density_level",
    "color",
    "opacity",
    "rotation_angle",
    "font_italic",
    "font_weight",
    "shadow_opacity",
    "shadow_blur_radius",
    "shadow_offset_x",
    "shadow_offset_y",
    "shadow_color",
    "font_decorations",
    "stroke_color",
    "stroke_opacity",
]


def full_text_params() -> TextWatermarkParams:
    return TextWatermarkParams(
        text="Sample",
        font_size=24,
        font_family="Roboto",
        density_level=DensityLevel.HIGH,
        color="ff0000",
        opacity=0.5,
        rotation_angle=45,
        font_italic=True,
        font_weight=FontWeight.W700,
        shadow_opacity=0.25,
        shadow_blur_radius=3,
        shadow_offset_x=-2,
        shadow_offset_y=4,
        shadow_color="00ff00",
        font_decorations=FontDecoration.UNDERLINE | FontDecoration.LINE_THROUGH,
        stroke_color="0000ff",
        stroke_opacity=1.0,
    )


class TestFieldPresence:
    """Absent optional fields never become form fields."""

    def test_text_only(self):
        params = TextWatermarkParams(text="Hello")
        assert params.form_fields() == [("text", "Hello")]

    def test_every_field_in_declaration_order(self):
        names = [name for name, _ in full_text_params().form_fields()]
        assert names == TEXT_FIELD_ORDER

    def test_unset_after_assignment_is_dropped(self):
        params = full_text_params()
        params.color = None
        params.font_italic = None
        names = [name for name, _ in params.form_fields()]
        assert "color" not in names
        assert "font_italic" not in names
        assert len(names) == len(TEXT_FIELD_ORDER) - 2

    def test_zero_values_are_still_sent(self):
        params = TextWatermarkParams(text="x", opacity=0.0, rotation_angle=0, font_italic=False)
        assert params.form_fields() == [
            ("text", "x"),
            ("opacity", "0.0"),
            ("rotation_angle", "0"),
            ("font_italic", "false"),
        ]

    def test_custom_params_exclude_watermark_file(self, watermark_image):
        params = CustomWatermarkParams(watermark=watermark_image)
        assert params.form_fields() == []

    def test_custom_params_order(self, watermark_image):
        params = CustomWatermarkParams(
            watermark=watermark_image,
            density_level=DensityLevel.MIN,
            rotation_angle=90,
            opacity=0.75,
        )
        assert params.form_fields() == [
            ("opacity", "0.75"),
            ("rotation_angle", "90"),
            ("density_level", "1"),
        ]


class TestValueFormatting:
    """Tests for the text form of parameter values."""

    def test_full_text_values(self):
        assert dict(full_text_params().form_fields()) == {
            "text": "Sample",
            "font_size": "24",
            "font_family": "Roboto",
            "density_level": "4",
            "color": "ff0000",
            "opacity": "0.5",
            "rotation_angle": "45",
            "font_italic": "true",
            "font_weight": "700",
            "shadow_opacity": "0.25",
            "shadow_blur_radius": "3",
            "shadow_offset_x": "-2",
            "shadow_offset_y": "4",
            "shadow_color": "00ff00",
            "font_decorations": "ut",
            "stroke_color": "0000ff",
            "stroke_opacity": "1.0",
        }

    def test_integer_opacity_is_sent_as_float(self):
        params = TextWatermarkParams(text="x", opacity=1)
        assert params.form_fields()[1] == ("opacity", "1.0")

    @pytest.mark.parametrize("flags,expected", [
        (FontDecoration.NONE, ""),
        (FontDecoration.UNDERLINE, "u"),
        (FontDecoration.LINE_THROUGH, "t"),
        (FontDecoration.LINE_THROUGH | FontDecoration.UNDERLINE, "ut"),
    ])
    def test_decoration_codes(self, flags, expected):
        assert flags.to_form_value() == expected

    def test_empty_decorations_present_as_empty_string(self):
        params = TextWatermarkParams(text="x", font_decorations=FontDecoration.NONE)
        assert params.form_fields() == [("text", "x"), ("font_decorations", "")]

    def test_format_form_value(self):
        assert format_form_value(False) == "false"
        assert format_form_value(DensityLevel.MAX) == "5"
        assert format_form_value(FontWeight.W100) == "100"
        assert format_form_value(0.1) == "0.1"
        assert format_form_value(7) == "7"


class TestValidation:
    """Tests for parameter validation."""

    def test_text_is_required(self):
        with pytest.raises(ValidationError):
            TextWatermarkParams()

    @pytest.mark.parametrize("color", ["fff", "gggggg", "#ff0000", "ff00001"])
    def test_invalid_color_rejected(self, color):
        with pytest.raises(ValidationError):
            TextWatermarkParams(text="x", color=color)

    def test_opacity_bounds(self):
        with pytest.raises(ValidationError):
            TextWatermarkParams(text="x", opacity=1.5)
        with pytest.raises(ValidationError):
            TextWatermarkParams(text="x", stroke_opacity=-0.1)

    def test_assignment_is_validated(self):
        params = TextWatermarkParams(text="x")
        with pytest.raises(ValidationError):
            params.shadow_color = "nothex"

    def test_density_level_out_of_range(self):
        with pytest.raises(ValidationError):
            TextWatermarkParams(text="x", density_level=6)

    def test_font_weight_must_be_hundreds(self):
        assert TextWatermarkParams(text="x", font_weight=300).font_weight is FontWeight.W300
        with pytest.raises(ValidationError):
            TextWatermarkParams(text="x", font_weight=350)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            TextWatermarkParams(text="x", font_colour="000000")


class TestDensityLevel:
    """Density level is a closed enumeration without clamping."""

    @pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
    def test_valid_values(self, value):
        assert DensityLevel(value).value == value

    @pytest.mark.parametrize("value", [0, 6, -1])
    def test_out_of_range_fails(self, value):
        with pytest.raises(ValueError):
            DensityLevel(value)


class TestImagePayload:

    def test_is_immutable(self, picture):
        with pytest.raises(ValidationError):
            picture.name = "other.png"

    def test_repr_hides_bytes(self, picture):
        assert "data=" not in repr(picture)

    def test_empty_placeholder(self):
        assert ImagePayload.empty().is_empty

    @pytest.mark.parametrize("mime_type", ["image/png\r\nX-Injected: 1", "image/png\n", "image/\x00png"])
    def test_control_characters_in_mime_type_rejected(self, mime_type):
        with pytest.raises(ValidationError):
            ImagePayload(data=b"x", mime_type=mime_type, name="p.png")


class TestApiErrorResponse:

    def test_parse_codes(self):
        response = ApiErrorResponse.model_validate_json(
            b'{"errorCodes": [{"code": 11}, {"code": 2, "data": "text"}]}'
        )
        assert response.codes == [11, 2]
        assert response.error_codes[1].data == "text"

    def test_missing_key_rejected(self):
        with pytest.raises(ValidationError):
            ApiErrorResponse.model_validate_json(b'{"errors": []}')
