"""Turn a saliency mask into a displayable heat-map image."""

from __future__ import annotations

from typing import Sequence

import numpy as np
from PIL import Image

Vector4 = Sequence[float]


def apply_color_matrix(
    rgba: np.ndarray,
    r_vector: Vector4 = (1, 0, 0, 0),
    g_vector: Vector4 = (0, 1, 0, 0),
    b_vector: Vector4 = (0, 0, 1, 0),
    a_vector: Vector4 = (0, 0, 0, 1),
    bias: Vector4 = (0, 0, 0, 0),
) -> np.ndarray:
    """Apply a colour matrix to a float ``(h, w, 4)`` RGBA image.

    Each output channel is the dot product of its vector with the input
    ``(r, g, b, a)`` plus the matching bias. Results are clamped to [0, 1].
    """
    matrix = np.array([r_vector, g_vector, b_vector, a_vector], dtype=np.float32)
    out = rgba.astype(np.float32) @ matrix.T + np.asarray(bias, dtype=np.float32)
    return np.clip(out, 0.0, 1.0)


def mask_to_rgba(mask: np.ndarray) -> np.ndarray:
    """Expand a single-channel mask into opaque luminance RGBA."""
    values = np.clip(np.asarray(mask, dtype=np.float32), 0.0, 1.0)
    if values.ndim == 3:
        values = values[..., 0]
    rgba = np.empty(values.shape + (4,), dtype=np.float32)
    rgba[..., :3] = values[..., None]
    rgba[..., 3] = 1.0
    return rgba


def create_heat_map_mask(mask: np.ndarray) -> Image.Image:
    """Render the saliency mask as an RGBA image at mask resolution.

    The blue channel is replaced by the (opaque) alpha input, so low saliency
    shows blue and high saliency washes out towards white.
    """
    tinted = apply_color_matrix(mask_to_rgba(mask), b_vector=(0, 0, 0, 1))
    return Image.fromarray(np.round(tinted * 255).astype(np.uint8))
