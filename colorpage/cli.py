"""
Command-line interface for the coloring page engine.

Usage:
    python -m colorpage page <photo> --output-dir DIR [--max-dimension 1400]
    python -m colorpage fill <photo> --x X --y Y --color #rrggbb --output PATH
    python -m colorpage --help
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import cv2

from .config.engine_config import EngineConfig
from .models import RGBA, Tool
from .processing.worker import ColoringPageWorker
from .render import to_export_image
from .session import PaintSession

logger = logging.getLogger(__name__)


def setup_argparse() -> argparse.ArgumentParser:
    """Set up argument parser."""
    parser = argparse.ArgumentParser(
        prog="colorpage",
        description="Photo to coloring page tools",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="YAML configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # page command
    page_parser = subparsers.add_parser(
        "page",
        help="Generate a coloring page and boundary mask from a photo",
    )
    page_parser.add_argument(
        "photo",
        type=str,
        help="Path to the input photo",
    )
    page_parser.add_argument(
        "--output-dir",
        type=str,
        required=True,
        help="Directory for <stem>_page.png and <stem>_mask.png",
    )
    page_parser.add_argument(
        "--max-dimension",
        type=int,
        default=None,
        help="Longest side of the output (default: from config, 1400)",
    )

    # fill command
    fill_parser = subparsers.add_parser(
        "fill",
        help="Generate a coloring page and bucket-fill one region",
    )
    fill_parser.add_argument(
        "photo",
        type=str,
        help="Path to the input photo",
    )
    fill_parser.add_argument("--x", type=float, required=True, help="Fill start x (pixels)")
    fill_parser.add_argument("--y", type=float, required=True, help="Fill start y (pixels)")
    fill_parser.add_argument(
        "--color",
        type=str,
        default="#ff0000",
        help="Fill color as #rrggbb or #rrggbbaa (default: #ff0000)",
    )
    fill_parser.add_argument(
        "--opacity",
        type=float,
        default=1.0,
        help="Fill opacity 0.05-1.0 (default: 1.0)",
    )
    fill_parser.add_argument(
        "--output",
        type=str,
        required=True,
        help="Output image path",
    )
    fill_parser.add_argument(
        "--max-dimension",
        type=int,
        default=None,
        help="Longest side of the coloring page",
    )

    return parser


def _load_config(args) -> EngineConfig:
    if args.config:
        return EngineConfig.from_yaml(args.config)
    return EngineConfig.default()


def _write_image(path: Path, image) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(path), image):
        raise OSError(f"Could not write image: {path}")


def cmd_page(args, config: EngineConfig) -> int:
    """Handle page command."""
    photo_path = Path(args.photo)
    if not photo_path.exists():
        print(f"Error: Photo not found: {photo_path}", file=sys.stderr)
        return 1

    with ColoringPageWorker(config) as worker:
        page = worker.submit(photo_path, args.max_dimension).result()

    if page.mask.is_empty:
        print(f"Error: Could not load photo: {photo_path}", file=sys.stderr)
        return 1

    output_dir = Path(args.output_dir)
    page_path = output_dir / f"{photo_path.stem}_page.png"
    mask_path = output_dir / f"{photo_path.stem}_mask.png"
    _write_image(page_path, to_export_image(page.display_image))
    _write_image(mask_path, page.mask.to_image())

    output = page.to_dict()
    output["page_path"] = str(page_path)
    output["mask_path"] = str(mask_path)
    print(json.dumps(output, indent=2))
    return 0


def cmd_fill(args, config: EngineConfig) -> int:
    """Handle fill command."""
    photo_path = Path(args.photo)
    if not photo_path.exists():
        print(f"Error: Photo not found: {photo_path}", file=sys.stderr)
        return 1

    try:
        color = RGBA.from_hex(args.color)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with ColoringPageWorker(config) as worker:
        page = worker.prepare(photo_path, args.max_dimension)

    if page.mask.is_empty:
        print(f"Error: Could not load photo: {photo_path}", file=sys.stderr)
        return 1

    session = PaintSession.from_coloring_page(page, config)
    session.tool = Tool.BUCKET
    session.color = color
    session.opacity = args.opacity
    session.begin((args.x, args.y))
    session.end()

    if session.overlay is None or session.overlay.is_transparent():
        logger.warning(f"Nothing was filled at ({args.x}, {args.y})")

    _write_image(Path(args.output), to_export_image(session.composite()))
    print(json.dumps({
        "output_path": args.output,
        "width": page.display_image.width,
        "height": page.display_image.height,
        "filled": session.history.can_undo,
    }, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = setup_argparse()
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = _load_config(args)
    except (OSError, ValueError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == "page":
            return cmd_page(args, config)
        if args.command == "fill":
            return cmd_fill(args, config)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
