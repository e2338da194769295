"""Conversion of decoded images into ARGB8 pixel buffers for analysis.

The drawing context here follows the bitmap-context convention: user space
has its origin at the bottom-left with y pointing up, while the backing
memory is stored top-down. Bitmaps are drawn the way a y-down drawing API
lays them out (source row 0 at the rect's minimum y), so callers must flip
the context before drawing or the buffer comes out vertically mirrored.
"""

from __future__ import annotations

import time

import numpy as np

from ..core.config import config
from ..core.logger import log
from .errors import AllocationFailure
from .models import AffineTransform, PixelBuffer, Rect, SourceImage

BYTES_PER_PIXEL = 4


def aligned_bytes_per_row(width: int, alignment: int | None = None) -> int:
    """Return the row stride for ``width`` ARGB8 pixels rounded up to ``alignment``."""
    alignment = alignment or config.pixel_buffer_row_alignment
    raw = width * BYTES_PER_PIXEL
    return ((raw + alignment - 1) // alignment) * alignment


def create_pixel_buffer(width: int, height: int) -> PixelBuffer:
    """Allocate a zeroed ARGB8 buffer.

    Raises
    ------
    AllocationFailure
        If the dimensions are not positive, exceed ``max_buffer_pixels`` or
        the memory cannot be obtained.
    """
    if width <= 0 or height <= 0:
        raise AllocationFailure(f"Invalid pixel buffer dimensions {width}x{height}")

    if width * height > config.max_buffer_pixels:
        raise AllocationFailure(
            f"Pixel buffer {width}x{height} exceeds limit of {config.max_buffer_pixels} pixels"
        )

    bytes_per_row = aligned_bytes_per_row(width)
    try:
        data = np.zeros((height, bytes_per_row), dtype=np.uint8)
    except MemoryError as exc:
        raise AllocationFailure(f"Out of memory allocating {width}x{height} buffer") from exc

    return PixelBuffer(width=width, height=height, bytes_per_row=bytes_per_row, data=data)


class BitmapContext:
    """Drawing context rendering into a :class:`PixelBuffer`."""

    def __init__(self, buffer: PixelBuffer) -> None:
        self.buffer = buffer
        self.ctm = AffineTransform.identity()

    def translate_by(self, tx: float, ty: float) -> None:
        self.ctm = AffineTransform.translation(tx, ty).concatenating(self.ctm)

    def scale_by(self, sx: float, sy: float) -> None:
        self.ctm = AffineTransform.scale(sx, sy).concatenating(self.ctm)

    def draw_image(self, rgba: np.ndarray, rect: Rect) -> None:
        """Draw a top-down ``(h, w, 4)`` RGBA bitmap into ``rect`` (user space).

        Nearest-neighbour sampling; only axis-aligned transforms are handled.
        """
        ctm = self.ctm
        if ctm.b != 0 or ctm.c != 0:
            raise ValueError("BitmapContext only supports axis-aligned transforms")
        inverse = ctm.inverted()
        if rect.width <= 0 or rect.height <= 0:
            return

        buffer = self.buffer
        src_h, src_w = rgba.shape[:2]

        # Device-space pixel centres; memory row m sits at device y = height - m - 0.5
        device_x = np.arange(buffer.width) + 0.5
        device_y = buffer.height - np.arange(buffer.height) - 0.5

        user_x = inverse.a * device_x + inverse.tx
        user_y = inverse.d * device_y + inverse.ty

        src_cols = np.floor((user_x - rect.x) / rect.width * src_w).astype(np.intp)
        src_rows = np.floor((user_y - rect.y) / rect.height * src_h).astype(np.intp)

        col_mask = (src_cols >= 0) & (src_cols < src_w)
        row_mask = (src_rows >= 0) & (src_rows < src_h)
        if not col_mask.any() or not row_mask.any():
            return

        sampled = rgba[np.ix_(src_rows[row_mask], src_cols[col_mask])].astype(np.uint16)
        alpha = sampled[..., 3:4]
        # Composite over the zeroed destination: premultiplied colour
        rgb = ((sampled[..., :3] * alpha + 127) // 255).astype(np.uint8)

        argb = np.empty(rgb.shape[:2] + (4,), dtype=np.uint8)
        argb[..., 0] = 0xFF  # alpha byte is skipped by consumers
        argb[..., 1:] = rgb

        target = buffer.pixels()
        target[np.ix_(np.flatnonzero(row_mask), np.flatnonzero(col_mask))] = argb


def to_pixel_buffer(image: SourceImage) -> PixelBuffer:
    """Render ``image`` into a freshly allocated ARGB8 buffer.

    Raises
    ------
    AllocationFailure
        If the buffer cannot be allocated.
    """
    started = time.perf_counter()
    size = image.size
    buffer = create_pixel_buffer(int(size.width), int(size.height))

    context = BitmapContext(buffer)
    # Flip to top-down before drawing, otherwise the buffer is upside down
    context.translate_by(0, size.height)
    context.scale_by(1.0, -1.0)
    context.draw_image(image.rgba(), Rect(0, 0, size.width, size.height))

    log.log_performance(
        f"pixel buffer {buffer.width}x{buffer.height}",
        (time.perf_counter() - started) * 1000,
    )
    return buffer
