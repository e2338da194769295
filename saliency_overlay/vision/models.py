"""Data models for the saliency overlay subsystem."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum

import numpy as np
from PIL import Image


class SaliencyMode(str, Enum):
    """Analysis variant requested from the saliency capability."""

    OBJECTNESS = "objectness"
    ATTENTION = "attention"


class DisplayState(str, Enum):
    """Which overlay is currently shown."""

    NONE = "none"
    OBJECTNESS_OVERLAY = "objectness_overlay"
    ATTENTION_OVERLAY = "attention_overlay"

    @classmethod
    def for_mode(cls, mode: SaliencyMode) -> DisplayState:
        if mode is SaliencyMode.OBJECTNESS:
            return cls.OBJECTNESS_OVERLAY
        return cls.ATTENTION_OVERLAY


@dataclass(frozen=True, slots=True)
class Size:
    """Width and height in points (may be fractional)."""

    width: float
    height: float


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle given by origin and size."""

    x: float
    y: float
    width: float
    height: float

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float) -> Rect:
        """Build a rect with non-negative size from two opposite corners."""
        return cls(min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1))

    def as_tuple(self) -> tuple[float, float, float, float]:
        """Return rect as ``(x, y, width, height)`` tuple."""
        return self.x, self.y, self.width, self.height


@dataclass(frozen=True, slots=True)
class AffineTransform:
    """2-D affine transform using the row-vector convention.

    A point ``(x, y)`` maps to ``(a*x + c*y + tx, b*x + d*y + ty)``.
    """

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    @classmethod
    def identity(cls) -> AffineTransform:
        return cls()

    @classmethod
    def scale(cls, sx: float, sy: float) -> AffineTransform:
        return cls(a=sx, d=sy)

    @classmethod
    def translation(cls, tx: float, ty: float) -> AffineTransform:
        return cls(tx=tx, ty=ty)

    def concatenating(self, other: AffineTransform) -> AffineTransform:
        """Return the transform that applies ``self`` first, then ``other``."""
        return AffineTransform(
            a=self.a * other.a + self.b * other.c,
            b=self.a * other.b + self.b * other.d,
            c=self.c * other.a + self.d * other.c,
            d=self.c * other.b + self.d * other.d,
            tx=self.tx * other.a + self.ty * other.c + other.tx,
            ty=self.tx * other.b + self.ty * other.d + other.ty,
        )

    def inverted(self) -> AffineTransform:
        det = self.a * self.d - self.b * self.c
        if det == 0:
            raise ValueError("Affine transform is not invertible")
        a = self.d / det
        b = -self.b / det
        c = -self.c / det
        d = self.a / det
        return AffineTransform(
            a=a,
            b=b,
            c=c,
            d=d,
            tx=-(self.tx * a + self.ty * c),
            ty=-(self.tx * b + self.ty * d),
        )

    def apply_to_point(self, x: float, y: float) -> tuple[float, float]:
        return self.a * x + self.c * y + self.tx, self.b * x + self.d * y + self.ty

    def apply_to_rect(self, rect: Rect) -> Rect:
        """Return the smallest rect containing the four transformed corners."""
        corners = [
            self.apply_to_point(px, py)
            for px in (rect.min_x, rect.max_x)
            for py in (rect.min_y, rect.max_y)
        ]
        xs = [p[0] for p in corners]
        ys = [p[1] for p in corners]
        return Rect.from_corners(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True)
class SourceImage:
    """A decoded bitmap plus the scale it is presented at.

    ``size`` is expressed in points: pixel dimensions divided by ``scale``.
    """

    pixels: Image.Image
    scale: float = 1.0
    image_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def size(self) -> Size:
        width, height = self.pixels.size
        return Size(width / self.scale, height / self.scale)

    def rgba(self) -> np.ndarray:
        """Return the bitmap as a top-down ``(h, w, 4)`` uint8 RGBA array."""
        return np.asarray(self.pixels.convert("RGBA"), dtype=np.uint8)


@dataclass(eq=False)
class PixelBuffer:
    """Fixed-layout ARGB8 buffer with top-down memory rows.

    ``data`` has shape ``(height, bytes_per_row)``; bytes past ``width * 4`` in
    each row are padding.
    """

    width: int
    height: int
    bytes_per_row: int
    data: np.ndarray
    pixel_format: str = "ARGB8"

    def pixels(self) -> np.ndarray:
        """Writable ``(height, width, 4)`` view of the ARGB bytes."""
        return self.data.reshape(self.height, self.bytes_per_row // 4, 4)[:, : self.width, :]

    def row(self, index: int) -> np.ndarray:
        """Memory row ``index`` (0 is the top of the buffer)."""
        return self.pixels()[index]

    def context_row(self, y: int) -> np.ndarray:
        """Row ``y`` in the drawing context's bottom-left-origin coordinates."""
        return self.pixels()[self.height - 1 - y]

    def to_bgr(self) -> np.ndarray:
        """Contiguous ``(h, w, 3)`` BGR copy, the layout OpenCV expects."""
        return np.ascontiguousarray(self.pixels()[:, :, 3:0:-1])


@dataclass(frozen=True, slots=True)
class SalientObject:
    """One salient region; ``bounding_box`` is normalized with a bottom-left origin."""

    bounding_box: Rect

    def clamped(self) -> SalientObject:
        box = self.bounding_box
        x = min(max(box.x, 0.0), 1.0)
        y = min(max(box.y, 0.0), 1.0)
        width = min(max(box.width, 0.0), 1.0 - x)
        height = min(max(box.height, 0.0), 1.0 - y)
        return SalientObject(Rect(x, y, width, height))


@dataclass(frozen=True, eq=False)
class SaliencyObservation:
    """Result of one analysis invocation."""

    mode: SaliencyMode
    mask: np.ndarray  # float32, [0, 1], top-down rows
    salient_objects: tuple[SalientObject, ...] = ()


@dataclass(frozen=True, slots=True)
class OverlayGeometry:
    """Placement of the overlay layers and the normalized-to-layer transform."""

    placement_rect: Rect
    transform: AffineTransform
