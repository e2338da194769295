"""Utility functions for the saliency overlay toolkit.

This sub-package provides utility functions for:
- File and path operations, including loading images for analysis
- Validation of rects handed in from outside
"""

from .file_utils import ensure_directory, get_timestamp, load_source_image
from .validation import validate_display_rect, validate_normalized_rect

__all__ = [
    "ensure_directory",
    "get_timestamp",
    "load_source_image",
    "validate_display_rect",
    "validate_normalized_rect",
]
