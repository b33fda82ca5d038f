"""Gamut conversion between NTSC-J and sRGB.

Both directions share the sRGB piecewise transfer curve; only the 3x3 matrix
applied in linear light differs. The matrices were precomputed offline with the
Bradford chromatic adaptation method and are never recomputed here.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence, Tuple

RGB = Tuple[float, float, float]
Matrix3 = Tuple[RGB, RGB, RGB]

# NTSC-J (D93 white) to sRGB (D65 white), Bradford method.
NTSCJ_TO_SRGB: Matrix3 = (
    (1.42849423843304, -0.343794575385404, -0.084699613295359),
    (-0.028230868456879, 0.937886666562635, 0.09034421347425),
    (-0.026451048534459, -0.04977408617468, 1.07622507193376),
)

# sRGB (D65 white) to NTSC-J (D93 white), Bradford method.
SRGB_TO_NTSCJ: Matrix3 = (
    (0.7058098463, 0.2605111529, 0.0336789762),
    (0.0194874166, 1.0686906232, -0.0881780606),
    (0.0182483937, 0.0558283706, 0.9259232918),
)


class GamutMode(Enum):
    """Conversion direction, named by its command line token."""

    NTSCJ_TO_SRGB = "ntscj-to-srgb"
    SRGB_TO_NTSCJ = "srgb-to-ntscj"

    @classmethod
    def from_token(cls, token: str) -> "GamutMode":
        for mode in cls:
            if mode.value == token:
                return mode
        choices = ", ".join(mode.value for mode in cls)
        raise ValueError(f"Unknown mode {token!r} (expected one of: {choices})")

    @property
    def matrix(self) -> Matrix3:
        if self is GamutMode.NTSCJ_TO_SRGB:
            return NTSCJ_TO_SRGB
        return SRGB_TO_NTSCJ

    @property
    def description(self) -> str:
        if self is GamutMode.NTSCJ_TO_SRGB:
            return "from NTSC-J color gamut to sRGB color gamut"
        return "from sRGB color gamut to NTSC-J color gamut"


def clamp_unit(value: float) -> float:
    if value < 0.0:
        return 0.0
    if value > 1.0:
        return 1.0
    return value


def to_linear(value: float) -> float:
    """Decode an sRGB gamma-encoded value to linear light, clamped to [0, 1]."""

    value = clamp_unit(value)
    if value <= 0.04045:
        return clamp_unit(value / 12.92)
    return clamp_unit(((value + 0.055) / 1.055) ** 2.4)


def to_gamma(value: float) -> float:
    """Encode a linear-light value with the sRGB curve, clamped to [0, 1]."""

    value = clamp_unit(value)
    if value <= 0.0031308:
        return clamp_unit(value * 12.92)
    if value == 1.0:
        # 1.055 - 0.055 rounds to one ulp below 1.0
        return 1.0
    return clamp_unit(1.055 * value ** (1.0 / 2.4) - 0.055)


def apply_matrix(rgb: Sequence[float], matrix: Matrix3) -> RGB:
    r, g, b = rgb
    return (
        matrix[0][0] * r + matrix[0][1] * g + matrix[0][2] * b,
        matrix[1][0] * r + matrix[1][1] * g + matrix[1][2] * b,
        matrix[2][0] * r + matrix[2][1] * g + matrix[2][2] * b,
    )


def transform(rgb: Sequence[float], matrix: Matrix3) -> RGB:
    """Map a gamma-encoded RGB triple through ``matrix`` in linear light.

    The order is fixed: linearize, multiply, clamp, re-encode. Clamping happens
    after the multiply because the adaptation can overshoot [0, 1] and the
    transfer curve is only defined inside that range.
    """

    linear = [to_linear(component) for component in rgb]
    mixed = apply_matrix(linear, matrix)
    r, g, b = (to_gamma(clamp_unit(component)) for component in mixed)
    return r, g, b
