"""Saliency overlay toolkit.

Runs objectness or attention saliency analysis on a photo and turns the
result into screen-space overlays: a heat map and bounding boxes aligned with
the photo's aspect-fit placement.
"""

__version__ = "1.0.0"
