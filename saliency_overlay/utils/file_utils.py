"""File utility functions for the saliency overlay toolkit."""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ..core.logger import log
from ..vision.models import SourceImage


def ensure_directory(directory_path: str) -> str:
    """Ensure a directory exists, creating it if necessary.

    Args:
        directory_path: Path to the directory.

    Returns:
        Absolute path to the directory.
    """
    path = Path(directory_path).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return str(path)


def get_timestamp() -> str:
    """Get current timestamp as a string.

    Returns:
        Timestamp string in format YYYY-MM-DD_HH-MM-SS.
    """
    return time.strftime("%Y-%m-%d_%H-%M-%S")


def load_source_image(filepath: str, scale: float = 1.0) -> Optional[SourceImage]:
    """Load an image file for analysis.

    Args:
        filepath: Path to the image file.
        scale: Display scale; the image's point size is its pixel size divided by it.

    Returns:
        The decoded image, or None if the file is missing or cannot be decoded.
    """
    if scale <= 0:
        log.error(f"Invalid display scale {scale} for {filepath}")
        return None

    if not os.path.exists(filepath):
        log.warning(f"Image file not found: {filepath}")
        return None

    try:
        with Image.open(filepath) as img:
            img.load()
            pixels = img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as e:
        log.error(f"Failed to load image from {filepath}: {e}")
        return None

    log.debug(f"Image loaded from {filepath} ({pixels.width}x{pixels.height})")
    return SourceImage(pixels=pixels, scale=scale)
