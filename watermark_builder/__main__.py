#!/usr/bin/env python3
"""
Command line front-end for the watermarking service.

Usage:
    # Text watermark
    python -m watermark_builder text \
        --image photo.jpg \
        --text "Hello" \
        --color ff0000 \
        --opacity 0.5 \
        --decoration underline \
        --output photo_wm.png

    # Image watermark
    python -m watermark_builder custom \
        --image photo.jpg \
        --watermark logo.png \
        --density-level 4 \
        --output photo_wm.png

    # Without --output the result is exported to a fresh directory
    # under EXPORT_DIR (or the system temp dir) and the path is printed.

Environment Variables:
    WATERMARK_ENDPOINT_URL: Service endpoint
    LANGUAGE: "lv" (default) or "en" error messages
    LOG_LEVEL / LOG_FORMAT / USE_STRUCTURED_LOGGING: Logging
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from watermark_builder.api.client import create_client
from watermark_builder.api.schemas import (
    CustomWatermarkParams,
    FontDecoration,
    FontWeight,
    TextWatermarkParams,
)
from watermark_builder.controls import density_level_from_slider
from watermark_builder.infra.logging import configure_logging, get_logger
from watermark_builder.infra.settings import Settings, get_settings
from watermark_builder.picker import IMAGE_READ_ERRORS, image_size, load_image_file
from watermark_builder.session import (
    DEFAULT_FONT_SIZE,
    FONT_SIZES,
    SUPPORTED_FONT_FAMILIES,
    ControlsType,
    RequestState,
    WatermarkSession,
)

logger = get_logger(__name__)

DECORATIONS = {
    "underline": FontDecoration.UNDERLINE,
    "line-through": FontDecoration.LINE_THROUGH,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="watermark_builder",
        description="Watermark a picture using the remote watermarking service",
    )
    subparsers = parser.add_subparsers(dest="mode", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--endpoint", type=str, default=None, help="Override WATERMARK_ENDPOINT_URL")
    common.add_argument("--output", "-o", type=Path, default=None, help="Where to write the result")
    common.add_argument("--image", type=Path, required=True, help="Picture to watermark")
    common.add_argument("--opacity", type=float, default=None, help="0.0 - 1.0")
    common.add_argument("--rotation-angle", type=int, default=None, help="Degrees")
    common.add_argument("--density-level", type=float, default=None, help="1 - 5")

    text = subparsers.add_parser("text", parents=[common], help="Text watermark")
    text.add_argument("--text", type=str, required=True)
    text.add_argument("--font-family", type=str, default=None, choices=SUPPORTED_FONT_FAMILIES)
    text.add_argument(
        "--font-size", type=int, default=None, choices=FONT_SIZES,
        help=f"Point size (editor default: {DEFAULT_FONT_SIZE})",
    )
    text.add_argument("--color", type=str, default=None, help="6-digit hex")
    text.add_argument("--italic", action=argparse.BooleanOptionalAction, default=None)
    text.add_argument(
        "--font-weight", type=int, default=None,
        choices=[weight.value for weight in FontWeight],
    )
    text.add_argument("--shadow-opacity", type=float, default=None)
    text.add_argument("--shadow-blur-radius", type=int, default=None)
    text.add_argument("--shadow-offset-x", type=int, default=None)
    text.add_argument("--shadow-offset-y", type=int, default=None)
    text.add_argument("--shadow-color", type=str, default=None)
    text.add_argument(
        "--decoration", action="append", default=None,
        choices=sorted(DECORATIONS),
        help="May be repeated",
    )
    text.add_argument("--stroke-color", type=str, default=None)
    text.add_argument("--stroke-opacity", type=float, default=None)

    custom = subparsers.add_parser("custom", parents=[common], help="Image watermark")
    custom.add_argument("--watermark", type=Path, required=True, help="Watermark image")

    return parser


def configure_session(session: WatermarkSession, args: argparse.Namespace) -> None:
    """
    Copy command line values into the session.

    Only flags that were given are set; everything else is left out of the
    request.

    Raises:
        OSError: If a picture cannot be read
        Image.DecompressionBombError: If a picture is too large to decode
        ValueError: If a value is out of range
    """
    session.image = load_image_file(args.image)
    density_level = (
        density_level_from_slider(args.density_level)
        if args.density_level is not None else None
    )

    if args.mode == "text":
        session.controls_type = ControlsType.TEXT_WATERMARK
        decorations = None
        if args.decoration is not None:
            decorations = FontDecoration.NONE
            for name in args.decoration:
                decorations |= DECORATIONS[name]
        session.text_params = TextWatermarkParams.model_validate({
            "text": args.text,
            "font_size": args.font_size,
            "font_family": args.font_family,
            "density_level": density_level,
            "color": args.color,
            "opacity": args.opacity,
            "rotation_angle": args.rotation_angle,
            "font_italic": args.italic,
            "font_weight": FontWeight(args.font_weight) if args.font_weight is not None else None,
            "shadow_opacity": args.shadow_opacity,
            "shadow_blur_radius": args.shadow_blur_radius,
            "shadow_offset_x": args.shadow_offset_x,
            "shadow_offset_y": args.shadow_offset_y,
            "shadow_color": args.shadow_color,
            "font_decorations": decorations,
            "stroke_color": args.stroke_color,
            "stroke_opacity": args.stroke_opacity,
        })
    else:
        session.controls_type = ControlsType.CUSTOM_WATERMARK
        session.custom_params = CustomWatermarkParams.model_validate({
            "watermark": load_image_file(args.watermark),
            "opacity": args.opacity,
            "rotation_angle": args.rotation_angle,
            "density_level": density_level,
        })


async def run(args: argparse.Namespace, settings: Settings) -> int:
    async with create_client(settings) as client:
        session = WatermarkSession(client, export_dir=settings.EXPORT_DIR)
        try:
            configure_session(session, args)
        except (*IMAGE_READ_ERRORS, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            print(f"error: {e}", file=sys.stderr)
            return 2

        submission = session.submit()
        await submission.wait()

    status = session.status
    if status.state is not RequestState.SUCCESS:
        print(status.message, file=sys.stderr)
        return 1

    if args.output is not None:
        try:
            args.output.write_bytes(status.data)
        except OSError as e:
            print(f"error: could not write {args.output}: {e}", file=sys.stderr)
            return 1
        destination: Optional[Path] = args.output
    else:
        destination = session.export_result()
        if destination is None:
            print("error: could not export the result", file=sys.stderr)
            return 1

    try:
        width, height = image_size(status.data)
        logger.info("result_preview", extra={"width": width, "height": height})
    except IMAGE_READ_ERRORS:
        logger.warning("result_not_an_image", extra={"size": len(status.data)})

    print(destination)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.endpoint:
            settings = Settings(WATERMARK_ENDPOINT_URL=args.endpoint)
        else:
            settings = get_settings()
    except ValidationError as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        return 2

    configure_logging(
        log_level=settings.LOG_LEVEL,
        json_format=settings.use_json_logs(sys.stderr.isatty()),
        use_structured_logging=settings.USE_STRUCTURED_LOGGING,
    )
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
