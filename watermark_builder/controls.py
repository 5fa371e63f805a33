"""
Conversions between UI control values and watermark parameters.

All functions are pure. Colour pickers work on RGB float triples, the
service on 6-digit hex strings; sliders produce floats that are rounded to
the parameter's integer domain.
"""
from __future__ import annotations

import math
import re
from typing import Optional, Tuple

from watermark_builder.api.schemas import DensityLevel

RGB = Tuple[float, float, float]

_HEX6 = re.compile(r"[0-9A-Fa-f]{6}")


def round_half_away_from_zero(value: float) -> int:
    """
    round() as UI toolkits do it: 2.5 -> 3, -2.5 -> -3.

    Raises:
        ValueError: If value is infinite or NaN
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite value: {value!r}")
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def rgb_to_hex(rgb: RGB) -> str:
    """
    Convert an RGB float triple to a lowercase 6-digit hex string.

    Each component is clamped to [0, 1] and quantised with
    round(component * 255). Alpha is not represented.
    """
    channels = []
    for component in rgb:
        component = min(max(float(component), 0.0), 1.0)
        channels.append(round_half_away_from_zero(component * 255))
    red, green, blue = channels
    return f"{red:02x}{green:02x}{blue:02x}"


def hex_to_rgb(value: str) -> RGB:
    """
    Convert a 6-digit hex string to an RGB float triple in [0, 1].

    Raises:
        ValueError: If value is not exactly six hex digits
    """
    if not _HEX6.fullmatch(value):
        raise ValueError(f"Not a 6-digit hex colour: {value!r}")
    color = int(value, 16)
    return (
        ((color >> 16) & 0xFF) / 255,
        ((color >> 8) & 0xFF) / 255,
        (color & 0xFF) / 255,
    )


def density_level_from_slider(value: float) -> DensityLevel:
    """
    Map a continuous slider value to a density level.

    Raises:
        ValueError: If the rounded value is outside 1..5
    """
    return DensityLevel(round_half_away_from_zero(value))


def density_level_to_slider(level: Optional[DensityLevel]) -> float:
    return float(level if level is not None else DensityLevel.MEDIUM)


def rotation_from_slider(fraction: float) -> int:
    """Slider fraction of a full turn to whole degrees."""
    return round_half_away_from_zero(fraction * 360)


def rotation_to_slider(angle: Optional[int]) -> float:
    return (angle or 0) / 360


def opacity_percent(opacity: Optional[float]) -> int:
    """Opacity as the whole percentage shown next to its slider."""
    return round_half_away_from_zero((opacity or 0.0) * 100)
