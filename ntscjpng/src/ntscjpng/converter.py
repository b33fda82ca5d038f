"""Core conversion logic for ntscjpng.

The PNG is decoded into an 8-bit RGBA raster, every pixel's RGB is mapped
through the gamut matrix for the selected direction and re-quantized with the
selected dither, and the raster is written back out. Alpha is passed through.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

from PIL import Image

from .dither import BLUE, GREEN, RED, DitherMode, make_quantizer
from .gamut import RGB, GamutMode, transform

Color = Tuple[int, int, int]

BYTES_PER_PIXEL = 4

# Modes Pillow uses for 16-bit grayscale PNGs. Converting these straight to
# RGBA clips at 255 instead of scaling.
SIXTEEN_BIT_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")


class ConversionError(Exception):
    """Base class for errors that end a single conversion."""


class UsageError(ConversionError):
    """Bad argument count or unrecognized mode token."""


class DecodeError(ConversionError):
    """The input could not be read or is not a valid PNG."""


class EncodeError(ConversionError):
    """The output could not be encoded or written."""


class AllocationError(ConversionError):
    """Not enough memory for the raster buffer."""

    def __init__(self, required_bytes: int):
        super().__init__(f"out of memory: {required_bytes} bytes")
        self.required_bytes = required_bytes


@dataclass
class Raster:
    """Row-major 8-bit RGBA pixels without stride padding."""

    width: int
    height: int
    pixels: bytearray

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Raster dimensions must be positive, got {self.width}x{self.height}")
        expected = self.width * self.height * BYTES_PER_PIXEL
        if len(self.pixels) != expected:
            raise ValueError(
                f"Raster buffer holds {len(self.pixels)} bytes, expected {expected}"
            )

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "Raster":
        required = width * height * BYTES_PER_PIXEL
        try:
            buffer = bytearray(required)
        except MemoryError as exc:
            raise AllocationError(required) from exc
        buffer[:] = data
        return cls(width, height, buffer)

    @classmethod
    def from_image(cls, image: Image.Image) -> "Raster":
        width, height = image.size
        try:
            if image.mode in SIXTEEN_BIT_MODES:
                image = image.convert("I").point(lambda v: v * (1 / 257) + 0.5).convert("L")
            data = image.convert("RGBA").tobytes()
        except MemoryError as exc:
            raise AllocationError(width * height * BYTES_PER_PIXEL) from exc
        return cls.from_bytes(width, height, data)

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), bytes(self.pixels))

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        offset = (y * self.width + x) * BYTES_PER_PIXEL
        r, g, b, a = self.pixels[offset : offset + BYTES_PER_PIXEL]
        return r, g, b, a


@dataclass
class ConvertOptions:
    """Options for a single conversion."""

    mode: GamutMode
    dither: DitherMode = DitherMode.QUASIRANDOM


def convert_raster(
    raster: Raster,
    mode: GamutMode,
    dither: DitherMode = DitherMode.QUASIRANDOM,
) -> Raster:
    """Convert ``raster`` in place and return it.

    Pixels are visited row by row, left to right; error diffusion depends on
    that order. The transform is memoized per distinct input color for the
    duration of the call.
    """

    matrix = mode.matrix
    quantizer = make_quantizer(dither, raster.width, raster.height)
    pixels = raster.pixels
    converted: Dict[Color, RGB] = {}

    offset = 0
    for y in range(raster.height):
        for x in range(raster.width):
            key = (pixels[offset], pixels[offset + 1], pixels[offset + 2])
            rgb = converted.get(key)
            if rgb is None:
                rgb = transform((key[0] / 255.0, key[1] / 255.0, key[2] / 255.0), matrix)
                converted[key] = rgb
            pixels[offset] = quantizer.quantize(rgb[0], x, y, RED)
            pixels[offset + 1] = quantizer.quantize(rgb[1], x, y, GREEN)
            pixels[offset + 2] = quantizer.quantize(rgb[2], x, y, BLUE)
            offset += BYTES_PER_PIXEL

    return raster


def convert_image(image: Image.Image, options: ConvertOptions) -> Image.Image:
    """Convert an in-memory image and return a new RGBA image."""

    raster = Raster.from_image(image)
    convert_raster(raster, options.mode, options.dither)
    return raster.to_image()


def decode_png(path: str | Path) -> Raster:
    path = Path(path)
    try:
        with Image.open(path) as img:
            if img.format != "PNG":
                raise DecodeError(f"{path}: not a PNG file (found {img.format})")
            img.load()
            return Raster.from_image(img)
    except FileNotFoundError as exc:
        raise DecodeError(f"{path}: input file not found") from exc
    except (OSError, SyntaxError, Image.DecompressionBombError) as exc:
        # Pillow reports broken chunks after the first IDAT as SyntaxError
        raise DecodeError(f"read {path}: {exc}") from exc


def encode_png(raster: Raster, path: str | Path) -> None:
    """Write ``raster`` as an 8-bit RGBA PNG.

    The file is encoded in memory first so a codec failure never leaves a
    partial file behind.
    """

    path = Path(path)
    buffer = io.BytesIO()
    try:
        raster.to_image().save(buffer, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodeError(f"write {path}: {exc}") from exc
    try:
        path.write_bytes(buffer.getvalue())
    except OSError as exc:
        raise EncodeError(f"write {path}: {exc}") from exc


def convert_png(
    input_path: str | Path,
    output_path: str | Path,
    options: ConvertOptions,
) -> Raster:
    raster = decode_png(input_path)
    convert_raster(raster, options.mode, options.dither)
    encode_png(raster, output_path)
    return raster
