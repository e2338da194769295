"""Overlay geometry: aspect-fit placement and normalized-to-layer mapping."""

from __future__ import annotations

from typing import Iterable

from ..utils.validation import validate_normalized_rect
from .models import AffineTransform, OverlayGeometry, Rect, SalientObject, Size


def aspect_fit_rect(aspect: Size, bounds: Rect) -> Rect:
    """Return the largest rect with ``aspect``'s ratio centred inside ``bounds``."""
    if aspect.width <= 0 or aspect.height <= 0:
        raise ValueError(f"Aspect size must be positive, got {aspect}")

    scale = min(bounds.width / aspect.width, bounds.height / aspect.height)
    width = aspect.width * scale
    height = aspect.height * scale
    return Rect(
        bounds.x + (bounds.width - width) / 2,
        bounds.y + (bounds.height - height) / 2,
        width,
        height,
    )


def normalized_to_layer_transform(layer: Size) -> AffineTransform:
    """Map normalized (bottom-left origin, y-up) coordinates into a y-down layer.

    Scale first, then translate: the flipped y axis must be re-anchored at the
    layer's bottom edge.
    """
    scale = AffineTransform.scale(layer.width, -layer.height)
    translate = AffineTransform.translation(0, layer.height)
    return scale.concatenating(translate)


def compute_geometry(image_size: Size, display_rect: Rect) -> OverlayGeometry:
    """Compute where the overlay layers go and how boxes map into them."""
    placement = aspect_fit_rect(image_size, display_rect)
    return OverlayGeometry(
        placement_rect=placement,
        transform=normalized_to_layer_transform(placement.size),
    )


def clamp_normalized_rect(rect: Rect) -> Rect:
    """Force ``rect`` into the unit square."""
    return SalientObject(rect).clamped().bounding_box


def bounding_box_path(
    objects: Iterable[SalientObject],
    transform: AffineTransform,
) -> tuple[Rect, ...]:
    """Return the layer-space rectangles for every salient object."""
    path: list[Rect] = []
    for obj in objects:
        box = obj.bounding_box
        if not validate_normalized_rect(box):
            box = clamp_normalized_rect(box)
        path.append(transform.apply_to_rect(box))
    return tuple(path)
