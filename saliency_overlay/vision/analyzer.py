"""Saliency analysis capability.

The overlay pipeline only relies on the :class:`SaliencyAnalyzer` protocol;
:class:`OpenCVSaliencyAnalyzer` is the bundled implementation backed by the
``cv2.saliency`` module from opencv-contrib.
"""

from __future__ import annotations

from typing import Optional, Protocol

import cv2  # type: ignore
import numpy as np
from loguru import logger

from ..core.config import config
from .models import PixelBuffer, Rect, SaliencyMode, SaliencyObservation, SalientObject


class SaliencyAnalyzer(Protocol):
    """Opaque analysis capability: mask plus boxes, or nothing."""

    def detect_objectness(self, buffer: PixelBuffer) -> Optional[SaliencyObservation]:
        ...

    def detect_attention(self, buffer: PixelBuffer) -> Optional[SaliencyObservation]:
        ...


def run_analysis(
    analyzer: SaliencyAnalyzer,
    buffer: PixelBuffer,
    mode: SaliencyMode,
) -> Optional[SaliencyObservation]:
    """Dispatch ``buffer`` to the analyzer operation matching ``mode``."""
    if mode is SaliencyMode.OBJECTNESS:
        return analyzer.detect_objectness(buffer)
    if mode is SaliencyMode.ATTENTION:
        return analyzer.detect_attention(buffer)
    raise ValueError(f"Unknown saliency mode: {mode!r}")


class OpenCVSaliencyAnalyzer:
    """Static saliency detectors from ``cv2.saliency``.

    Objectness uses the fine-grained detector and may report several boxes;
    attention uses the spectral residual detector and reports at most one.
    """

    def __init__(
        self,
        mask_size: int | None = None,
        max_objects: int | None = None,
        min_area_fraction: float | None = None,
    ) -> None:
        self.mask_size = mask_size or config.saliency_mask_size
        self.max_objects = max_objects or config.max_salient_objects
        self.min_area_fraction = (
            config.min_salient_area_fraction if min_area_fraction is None else min_area_fraction
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def detect_objectness(self, buffer: PixelBuffer) -> Optional[SaliencyObservation]:
        detector = cv2.saliency.StaticSaliencyFineGrained_create()
        return self._observe(detector, buffer, SaliencyMode.OBJECTNESS, self.max_objects)

    def detect_attention(self, buffer: PixelBuffer) -> Optional[SaliencyObservation]:
        detector = cv2.saliency.StaticSaliencySpectralResidual_create()
        return self._observe(detector, buffer, SaliencyMode.ATTENTION, 1)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _observe(
        self,
        detector,
        buffer: PixelBuffer,
        mode: SaliencyMode,
        max_objects: int,
    ) -> Optional[SaliencyObservation]:
        image = buffer.to_bgr()
        success, saliency_map = detector.computeSaliency(image)
        if not success or saliency_map is None:
            logger.warning(f"{mode.value} saliency computation reported no result")
            return None

        finite = np.nan_to_num(saliency_map.astype(np.float32), nan=0.0, posinf=0.0, neginf=0.0)
        saliency = cv2.normalize(finite, None, 0.0, 1.0, cv2.NORM_MINMAX)
        mask = cv2.resize(
            saliency, (self.mask_size, self.mask_size), interpolation=cv2.INTER_AREA
        )
        objects = self._salient_objects(saliency, max_objects)
        return SaliencyObservation(
            mode=mode,
            mask=np.clip(mask, 0.0, 1.0).astype(np.float32),
            salient_objects=objects,
        )

    def _salient_objects(self, saliency: np.ndarray, max_objects: int) -> tuple[SalientObject, ...]:
        """Extract normalized, bottom-left-origin boxes from a [0, 1] saliency map."""
        h, w = saliency.shape[:2]
        saliency_u8 = (saliency * 255).astype(np.uint8)
        if saliency_u8.max() == saliency_u8.min():
            return ()

        _, binary = cv2.threshold(saliency_u8, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)
        contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        min_area = w * h * self.min_area_fraction
        boxes = [cv2.boundingRect(c) for c in contours]
        boxes = [b for b in boxes if b[2] * b[3] >= min_area]
        boxes.sort(key=lambda b: b[2] * b[3], reverse=True)

        objects = []
        for x, y, box_w, box_h in boxes[:max_objects]:
            # Pixel rows grow downwards; normalized y grows upwards
            objects.append(
                SalientObject(Rect(x / w, 1.0 - (y + box_h) / h, box_w / w, box_h / h))
            )
        return tuple(objects)
