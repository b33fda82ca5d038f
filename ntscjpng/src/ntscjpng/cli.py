"""Command line interface for ntscjpng."""

from __future__ import annotations

import argparse
import sys
import warnings

from .converter import ConversionError, ConvertOptions, UsageError, convert_png
from .dither import DitherMode
from .gamut import GamutMode

PROG = "ntscjpng"


def build_parser() -> argparse.ArgumentParser:
    mode_tokens = ", ".join(mode.value for mode in GamutMode)
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=(
            "Convert a PNG whose pixels are tagged sRGB but were authored for the NTSC-J\n"
            "color gamut (or the reverse) using a precomputed Bradford matrix.\n"
            "Input is read as 8-bit RGBA; output is always written as 8-bit RGBA.\n"
            f"Modes: {mode_tokens}"
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("input", help="Input PNG file")
    parser.add_argument("output", help="Output PNG file")
    parser.add_argument("mode", help=f"Conversion direction ({mode_tokens})")
    parser.add_argument(
        "--dither",
        choices=[mode.value for mode in DitherMode],
        default=DitherMode.QUASIRANDOM.value,
        help=(
            "Dithering used when quantizing back to 8 bits. quasirandom is safe for\n"
            "swizzled textures; bayer is locally unbalanced at tile seams;\n"
            "floyd-steinberg is only correct for images that are not swizzled."
        ),
    )
    return parser


def parse_options(parser: argparse.ArgumentParser, args: argparse.Namespace) -> ConvertOptions:
    try:
        mode = GamutMode.from_token(args.mode)
    except ValueError as exc:
        raise UsageError(f"{exc}\n{parser.format_usage().strip()}") from exc
    return ConvertOptions(mode=mode, dither=DitherMode.from_token(args.dither))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = parse_options(parser, args)
        print(
            f"{PROG}: converting {args.input} {options.mode.description} "
            f"and saving output to {args.output}..."
        )
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            convert_png(args.input, args.output, options)
        for warning in caught:
            print(f"Warning: {warning.message}")
        print("done.")
        return 0
    except UsageError as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        return 2
    except ConversionError as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
