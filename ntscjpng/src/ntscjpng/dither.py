"""Quantizers that turn [0, 1] channel values into 8-bit samples.

Input images may be swizzled textures, where raster neighbours are not real
neighbours. The quasirandom quantizer only looks at the pixel's own coordinate,
so reordering tiles cannot bias it; it is the default. The Bayer quantizer is
periodic and goes locally unbalanced at tile seams. Floyd-Steinberg carries
error between pixels and is only correct for naturally ordered images.
"""

from __future__ import annotations

import math
import warnings
from enum import Enum
from typing import List

RED, GREEN, BLUE = 0, 1, 2

# 8x8 Bayer threshold matrix, indexed [y][x].
BAYER_MATRIX = (
    (0, 32, 8, 40, 2, 34, 10, 42),
    (48, 16, 56, 24, 50, 18, 58, 26),
    (12, 44, 4, 36, 14, 46, 6, 38),
    (60, 28, 52, 20, 62, 30, 54, 22),
    (3, 35, 11, 43, 1, 33, 9, 41),
    (51, 19, 59, 27, 49, 17, 57, 25),
    (15, 47, 7, 39, 13, 45, 5, 37),
    (63, 31, 55, 23, 61, 29, 53, 21),
)

# Additive recurrence steps for the 2D low-discrepancy sequence.
QUASIRANDOM_X_STEP = 0.7548776662
QUASIRANDOM_Y_STEP = 0.56984029

FLOYD_STEINBERG_WEIGHTS = (
    # dx, dy, weight
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)


class DitherMode(Enum):
    QUASIRANDOM = "quasirandom"
    BAYER = "bayer"
    FLOYD_STEINBERG = "floyd-steinberg"

    @classmethod
    def from_token(cls, token: str) -> "DitherMode":
        for mode in cls:
            if mode.value == token:
                return mode
        choices = ", ".join(mode.value for mode in cls)
        raise ValueError(f"Unknown dither mode {token!r} (expected one of: {choices})")


def clamp_byte(value: int) -> int:
    if value < 0:
        return 0
    if value > 255:
        return 255
    return value


def quasirandom_offset(x: int, y: int) -> float:
    """Return the dither offset in [0, 1] for 0-based pixel coordinates.

    The fractional part of the recurrence is folded into a triangle wave so the
    offset stays uniformly distributed. An exact 0.5 is returned unchanged.
    """

    f = ((x + 1) * QUASIRANDOM_X_STEP + (y + 1) * QUASIRANDOM_Y_STEP) % 1.0
    if f < 0.5:
        return 2.0 * f
    if f > 0.5:
        return 2.0 - 2.0 * f
    return f


def bayer_quantize(value: float, x: int, y: int) -> int:
    threshold = BAYER_MATRIX[y % 8][x % 8] / 64.0
    return clamp_byte(int(math.floor(value * 255.0 + threshold)))


def quasirandom_quantize(value: float, x: int, y: int) -> int:
    return clamp_byte(int(math.floor(value * 255.0 + quasirandom_offset(x, y))))


class Quantizer:
    """Base class for quantizers bound to one raster's dimensions.

    ``quantize`` is called once per channel per pixel. ``channel`` is one of
    ``RED``, ``GREEN`` or ``BLUE``; alpha is never quantized.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Raster dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height

    def quantize(self, value: float, x: int, y: int, channel: int) -> int:
        raise NotImplementedError


class CoordinateQuantizer(Quantizer):
    """Stateless quantizer whose output depends only on value and coordinate.

    Red uses a horizontally mirrored coordinate and blue a vertically mirrored
    one so the dither patterns of the three channels do not line up.
    """

    def channel_coordinates(self, x: int, y: int, channel: int) -> tuple[int, int]:
        if channel == RED:
            return self.width - 1 - x, y
        if channel == BLUE:
            return x, self.height - 1 - y
        return x, y

    def quantize(self, value: float, x: int, y: int, channel: int) -> int:
        cx, cy = self.channel_coordinates(x, y, channel)
        return self.quantize_at(value, cx, cy)

    def quantize_at(self, value: float, x: int, y: int) -> int:
        raise NotImplementedError


class BayerQuantizer(CoordinateQuantizer):
    def quantize_at(self, value: float, x: int, y: int) -> int:
        return bayer_quantize(value, x, y)


class QuasirandomQuantizer(CoordinateQuantizer):
    def quantize_at(self, value: float, x: int, y: int) -> int:
        return quasirandom_quantize(value, x, y)


class FloydSteinbergQuantizer(Quantizer):
    """Error diffusion quantizer.

    Owns a flat per-pixel, per-channel error buffer for the lifetime of one
    conversion. Pixels must be visited in row-major order; error sent to a
    pixel that was already visited is lost.
    """

    def __init__(self, width: int, height: int):
        super().__init__(width, height)
        warnings.warn(
            "floyd-steinberg dithering diffuses error across tile boundaries; "
            "use it only for images that are not swizzled",
            RuntimeWarning,
            stacklevel=2,
        )
        self.errors: List[float] = [0.0] * (width * height * 3)

    def _index(self, x: int, y: int, channel: int) -> int:
        return (y * self.width + x) * 3 + channel

    def quantize(self, value: float, x: int, y: int, channel: int) -> int:
        exact = value + self.errors[self._index(x, y, channel)]
        quantized = clamp_byte(int(math.floor(exact * 255.0 + 0.5)))
        error = exact - quantized / 255.0

        for dx, dy, weight in FLOYD_STEINBERG_WEIGHTS:
            nx = x + dx
            ny = y + dy
            if 0 <= nx < self.width and ny < self.height:
                self.errors[self._index(nx, ny, channel)] += error * weight

        return quantized


def make_quantizer(mode: DitherMode, width: int, height: int) -> Quantizer:
    if mode is DitherMode.QUASIRANDOM:
        return QuasirandomQuantizer(width, height)
    if mode is DitherMode.BAYER:
        return BayerQuantizer(width, height)
    if mode is DitherMode.FLOYD_STEINBERG:
        return FloydSteinbergQuantizer(width, height)
    raise ValueError(f"Unsupported dither mode: {mode}")
