"""Validation utility functions for the saliency overlay toolkit."""

from __future__ import annotations

import math
from typing import Any

from ..core.logger import log
from ..vision.models import Rect


def validate_normalized_rect(rect: Rect, tolerance: float = 1e-6) -> bool:
    """Validate that a rect lies inside the unit square.

    Args:
        rect: Rect in normalized coordinates.
        tolerance: Slack allowed for floating point noise.

    Returns:
        True if the rect is within [0, 1] x [0, 1], False otherwise.
    """
    values = rect.as_tuple()
    if not all(math.isfinite(v) for v in values):
        log.warning(f"Normalized rect has non-finite values: {rect}")
        return False

    if rect.width < 0 or rect.height < 0:
        log.warning(f"Normalized rect has negative size: {rect}")
        return False

    if rect.min_x < -tolerance or rect.min_y < -tolerance:
        log.warning(f"Normalized rect origin out of bounds: {rect}")
        return False

    if rect.max_x > 1 + tolerance or rect.max_y > 1 + tolerance:
        log.warning(f"Normalized rect extends past the unit square: {rect}")
        return False

    return True


def validate_display_rect(rect: Any) -> bool:
    """Validate a display rect handed in by the presentation layer.

    Args:
        rect: Candidate display rect.

    Returns:
        True if it is a finite rect with positive size, False otherwise.
    """
    if not isinstance(rect, Rect):
        log.error(f"Display rect must be a Rect, got {type(rect).__name__}")
        return False

    if not all(math.isfinite(v) for v in rect.as_tuple()):
        log.warning(f"Display rect has non-finite values: {rect}")
        return False

    if rect.width <= 0 or rect.height <= 0:
        log.warning(f"Display rect has no area: {rect}")
        return False

    return True
