"""Shared fixtures for the saliency overlay tests."""

import os

# Keep test runs from writing rotating log files
os.environ.setdefault("SALIENCY_LOG_TO_FILE", "false")

import threading

import numpy as np
import pytest
from PIL import Image

from saliency_overlay.vision.models import (
    Rect,
    SaliencyMode,
    SaliencyObservation,
    SalientObject,
    SourceImage,
)


def make_row_coded_image(width: int, height: int) -> Image.Image:
    """RGBA image whose red channel encodes the row index and green the column."""
    rows = np.arange(height, dtype=np.uint8)[:, None]
    cols = np.arange(width, dtype=np.uint8)[None, :]
    rgba = np.zeros((height, width, 4), dtype=np.uint8)
    rgba[..., 0] = rows
    rgba[..., 1] = cols
    rgba[..., 2] = 200
    rgba[..., 3] = 255
    return Image.fromarray(rgba)


@pytest.fixture
def row_coded_image():
    return SourceImage(pixels=make_row_coded_image(6, 4))


@pytest.fixture
def wide_image():
    """A 2:1 image (200x100)."""
    return SourceImage(pixels=Image.new("RGBA", (200, 100), (10, 20, 30, 255)))


@pytest.fixture
def blob_image():
    """Dark background with one bright square, the obvious salient region."""
    rgb = np.zeros((120, 160, 3), dtype=np.uint8)
    rgb[40:80, 60:110] = 255
    return SourceImage(pixels=Image.fromarray(rgb).convert("RGBA"))


def make_observation(mode=SaliencyMode.OBJECTNESS, boxes=None):
    boxes = boxes if boxes is not None else [Rect(0.25, 0.25, 0.5, 0.5)]
    mask = np.linspace(0, 1, 68 * 68, dtype=np.float32).reshape(68, 68)
    return SaliencyObservation(
        mode=mode,
        mask=mask,
        salient_objects=tuple(SalientObject(b) for b in boxes),
    )


class FakeAnalyzer:
    """Records every call; returns canned observations (or None)."""

    def __init__(self, result="observation", gate=None):
        self.calls = []
        self.buffers = []
        self.result = result
        self.gate = gate
        self._lock = threading.Lock()

    def _respond(self, buffer, mode):
        with self._lock:
            self.calls.append(mode)
            self.buffers.append(buffer)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.result is None:
            return None
        if isinstance(self.result, Exception):
            raise self.result
        return make_observation(mode)

    def detect_objectness(self, buffer):
        return self._respond(buffer, SaliencyMode.OBJECTNESS)

    def detect_attention(self, buffer):
        return self._respond(buffer, SaliencyMode.ATTENTION)


@pytest.fixture
def fake_analyzer():
    return FakeAnalyzer()
