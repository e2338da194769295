"""Overlay rendering helpers: composite image, heat map and boxes."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

import cv2  # type: ignore
import numpy as np

from ..core.config import config
from ..core.logger import log
from ..utils.file_utils import ensure_directory, get_timestamp

if TYPE_CHECKING:
    from ..core.state import OverlayState


def _pixel_bounds(x: float, y: float, width: float, height: float, canvas_w: int, canvas_h: int):
    x1 = int(np.clip(round(x), 0, canvas_w))
    y1 = int(np.clip(round(y), 0, canvas_h))
    x2 = int(np.clip(round(x + width), 0, canvas_w))
    y2 = int(np.clip(round(y + height), 0, canvas_h))
    return x1, y1, x2, y2


def render_overlay(
    state: OverlayState,
    background: tuple[int, int, int] = (0, 0, 0),
) -> Optional[np.ndarray]:
    """Render the current state as a BGR image the size of the display rect.

    Returns ``None`` when there is no image or no layout yet.
    """
    if state.image is None or state.display_rect is None or state.geometry is None:
        return None

    display = state.display_rect
    canvas_w, canvas_h = max(int(round(display.width)), 1), max(int(round(display.height)), 1)
    canvas = np.empty((canvas_h, canvas_w, 3), dtype=np.uint8)
    canvas[:] = background[::-1]

    placement = state.geometry.placement_rect
    x1, y1, x2, y2 = _pixel_bounds(
        placement.x - display.x, placement.y - display.y,
        placement.width, placement.height, canvas_w, canvas_h,
    )
    if x2 <= x1 or y2 <= y1:
        return canvas

    # Image layer
    rgb = np.asarray(state.image.pixels.convert("RGB"), dtype=np.uint8)
    canvas[y1:y2, x1:x2] = cv2.resize(
        cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR), (x2 - x1, y2 - y1), interpolation=cv2.INTER_AREA
    )

    # Heat-map layer
    if state.heat_map is not None:
        heat = np.asarray(state.heat_map.convert("RGBA"), dtype=np.uint8)
        heat = cv2.resize(heat, (x2 - x1, y2 - y1), interpolation=cv2.INTER_LINEAR)
        alpha = heat[..., 3:4].astype(np.float32) / 255.0 * config.heat_map_opacity
        heat_bgr = heat[..., 2::-1].astype(np.float32)
        region = canvas[y1:y2, x1:x2].astype(np.float32)
        canvas[y1:y2, x1:x2] = np.clip(region * (1 - alpha) + heat_bgr * alpha, 0, 255).astype(np.uint8)

    # Bounding-box layer; path rects are relative to the placement rect
    stroke = tuple(int(c) for c in config.bounding_box_stroke_color[::-1])
    for rect in state.path:
        bx1, by1, bx2, by2 = _pixel_bounds(
            x1 + rect.x, y1 + rect.y, rect.width, rect.height, canvas_w - 1, canvas_h - 1
        )
        cv2.rectangle(canvas, (bx1, by1), (bx2, by2), stroke, thickness=config.bounding_box_line_width)

    return canvas


def save_overlay(state: OverlayState, output_path: str) -> bool:
    """Render ``state`` and write it to ``output_path``."""
    canvas = render_overlay(state)
    if canvas is None:
        log.warning("Nothing to render: no image or layout yet")
        return False

    directory = Path(output_path).resolve().parent
    ensure_directory(str(directory))
    if not cv2.imwrite(output_path, canvas):
        log.error(f"Failed to write overlay to {output_path}")
        return False
    log.debug(f"Overlay saved to {output_path}")
    return True


def save_debug_overlay(state: OverlayState) -> Optional[str]:
    """Write the rendered overlay under ``overlay_debug_dir`` when enabled."""
    if not config.save_overlay_debug:
        return None

    mode = state.display_state.value
    path = Path(config.get_overlay_debug_path()) / f"overlay_{mode}_{get_timestamp()}.png"
    return str(path) if save_overlay(state, str(path)) else None
