"""NTSC-J / sRGB gamut correction for PNG images.

Remaps 8-bit RGBA pixels that were authored for one gamut but tagged as the
other. It can be invoked through the CLI (``python -m ntscjpng``) or imported
to convert a raster, a Pillow image, or a PNG file.
"""

from .converter import (
    AllocationError,
    ConversionError,
    ConvertOptions,
    DecodeError,
    EncodeError,
    Raster,
    UsageError,
    convert_image,
    convert_png,
    convert_raster,
    decode_png,
    encode_png,
)
from .dither import DitherMode, make_quantizer
from .gamut import NTSCJ_TO_SRGB, SRGB_TO_NTSCJ, GamutMode, to_gamma, to_linear, transform

__all__ = [
    "AllocationError",
    "ConversionError",
    "ConvertOptions",
    "DecodeError",
    "DitherMode",
    "EncodeError",
    "GamutMode",
    "NTSCJ_TO_SRGB",
    "Raster",
    "SRGB_TO_NTSCJ",
    "UsageError",
    "convert_image",
    "convert_png",
    "convert_raster",
    "decode_png",
    "encode_png",
    "make_quantizer",
    "to_gamma",
    "to_linear",
    "transform",
]
