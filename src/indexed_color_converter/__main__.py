"""エントリーポイント: uv run python -m indexed_color_converter"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from indexed_color_converter.application.indexed_color_converter import IndexedColorConverter
from indexed_color_converter.domain.color import RGB
from indexed_color_converter.domain.errors import ValidationError
from indexed_color_converter.domain.image_model import (
    DEFAULT_DITHER_AMOUNT,
    ColorMetric,
    ConversionSettings,
    ImageSpec,
)
from indexed_color_converter.infrastructure.palette_io import (
    BUILTIN_PALETTES,
    get_builtin_palette,
    load_palette,
    parse_palette,
)

logger = logging.getLogger("indexed_color_converter")

EXIT_IO_ERROR = 1
EXIT_VALIDATION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="indexed-color-converter",
        description="Convert an image to a fixed palette with Floyd-Steinberg dithering.",
    )
    parser.add_argument("input", help="input image path")
    parser.add_argument("output", help="output image path")

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--palette",
        help=f"built-in palette name ({', '.join(sorted(BUILTIN_PALETTES))})",
    )
    source.add_argument("--palette-file", help="palette file (.gpl, .hex, .txt)")
    source.add_argument(
        "--color",
        action="append",
        dest="colors",
        metavar="COLOR",
        help="palette color as #rrggbb or r,g,b (repeatable)",
    )

    parser.add_argument(
        "--dither",
        type=float,
        default=DEFAULT_DITHER_AMOUNT,
        help="error diffusion amount, 0-1 (default: %(default)s)",
    )
    parser.add_argument(
        "--no-dither",
        action="store_true",
        help="map each pixel to its nearest color without diffusion",
    )
    parser.add_argument(
        "--metric",
        choices=[m.value for m in ColorMetric],
        default=ColorMetric.RGB.value,
        help="color space for nearest-color matching (default: %(default)s)",
    )
    parser.add_argument("--width", type=int, help="resize to this width before converting")
    parser.add_argument("--height", type=int, help="resize to this height before converting")
    parser.add_argument(
        "--stretch",
        action="store_true",
        help="ignore the aspect ratio when resizing",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only log errors")
    return parser


def _resolve_palette(args: argparse.Namespace) -> list[RGB]:
    if args.palette:
        return list(get_builtin_palette(args.palette))
    if args.palette_file:
        return load_palette(args.palette_file)
    return parse_palette(args.colors)


def _resolve_spec(args: argparse.Namespace) -> Optional[ImageSpec]:
    if args.width is None and args.height is None:
        return None
    if args.width is None or args.height is None:
        raise ValidationError("--width and --height must be given together")
    if args.width <= 0 or args.height <= 0:
        raise ValidationError("--width and --height must be positive")
    return ImageSpec(args.width, args.height, keep_aspect_ratio=not args.stretch)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = ConversionSettings(
        dither_amount=0.0 if args.no_dither else args.dither,
        metric=ColorMetric(args.metric),
    )
    converter = IndexedColorConverter()

    try:
        palette = _resolve_palette(args)
        spec = _resolve_spec(args)
        converter.convert_file(
            args.input,
            args.output,
            palette,
            settings=settings,
            spec=spec,
            progress=lambda stage, p: logger.debug("%s (%.0f%%)", stage, p * 100),
        )
    except ValidationError as e:
        logger.error("%s", e)
        return EXIT_VALIDATION_ERROR
    except OSError as e:
        logger.error("%s", e)
        return EXIT_IO_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
