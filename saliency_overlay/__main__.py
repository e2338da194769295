"""Command line entry point: render a saliency overlay for one image."""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from .core.logger import log
from .core.session import OverlaySession
from .utils.file_utils import load_source_image
from .vision.debug import save_overlay
from .vision.models import DisplayState, Rect, SaliencyMode

MODES = {
    "none": None,
    "objectness": SaliencyMode.OBJECTNESS,
    "attention": SaliencyMode.ATTENTION,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="saliency-overlay",
        description="Overlay objectness or attention saliency on a photo",
    )
    parser.add_argument("image_path", help="Path to the image file")
    parser.add_argument("--mode", "-m", choices=sorted(MODES), default="objectness",
                        help="Saliency analysis to overlay (default: objectness)")
    parser.add_argument("--width", type=float, default=None,
                        help="Display width in points (default: image width)")
    parser.add_argument("--height", type=float, default=None,
                        help="Display height in points (default: image height)")
    parser.add_argument("--scale", type=float, default=1.0,
                        help="Display scale of the image (default: 1.0)")
    parser.add_argument("--output", "-o", default="overlay.png",
                        help="Where to write the rendered overlay")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    image = load_source_image(args.image_path, scale=args.scale)
    if image is None:
        log.error(f"Could not load image: {args.image_path}")
        return 1

    size = image.size
    display_rect = Rect(0, 0, args.width or size.width, args.height or size.height)

    with OverlaySession() as session:
        session.select_image(image)
        session.update_layout(display_rect)

        future = session.select_mode(MODES[args.mode])
        if future is not None:
            future.result()

        state = session.state

    if MODES[args.mode] is not None and state.display_state is DisplayState.NONE:
        log.warning("No saliency overlay produced; rendering the image alone")

    if not save_overlay(state, args.output):
        return 1

    log.success(f"Overlay ({state.display_state.value}, {len(state.path)} box(es)) written to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
