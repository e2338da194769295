"""Run saliency analysis on an image and derive the overlay artifacts."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from ..core.logger import log
from .analyzer import OpenCVSaliencyAnalyzer, SaliencyAnalyzer, run_analysis
from .errors import AllocationFailure, AnalysisFailure, ConversionFailure
from .geometry import bounding_box_path
from .heatmap import create_heat_map_mask
from .models import OverlayGeometry, Rect, SaliencyMode, SaliencyObservation, SourceImage
from .pixel_buffer import to_pixel_buffer


@dataclass(frozen=True)
class OverlayArtifacts:
    """What the presentation layer draws for one observation."""

    heat_map: Optional[Image.Image]
    path: tuple[Rect, ...] = ()


def build_path(observation: SaliencyObservation, geometry: Optional[OverlayGeometry]) -> tuple[Rect, ...]:
    if geometry is None:
        return ()
    return bounding_box_path(observation.salient_objects, geometry.transform)


def build_artifacts(
    observation: SaliencyObservation,
    geometry: Optional[OverlayGeometry],
) -> OverlayArtifacts:
    """Derive the heat map and the layer-space box path from ``observation``.

    Without a geometry (no layout yet) the path is empty; it is filled in on
    the next relayout.
    """
    return OverlayArtifacts(
        heat_map=create_heat_map_mask(observation.mask),
        path=build_path(observation, geometry),
    )


class SaliencyOrchestrator:
    """Convert an image, run the analyzer and report the observation."""

    def __init__(self, analyzer: Optional[SaliencyAnalyzer] = None) -> None:
        self.analyzer: SaliencyAnalyzer = analyzer or OpenCVSaliencyAnalyzer()

    def analyze(self, image: SourceImage, mode: SaliencyMode) -> SaliencyObservation:
        """Run one analysis synchronously.

        Raises
        ------
        ConversionFailure
            If the image cannot be converted into a pixel buffer.
        AnalysisFailure
            If the analyzer returns nothing or fails.
        """
        try:
            buffer = to_pixel_buffer(image)
        except AllocationFailure as exc:
            raise ConversionFailure(f"Could not convert image {image.image_id}: {exc}") from exc

        started = time.perf_counter()
        try:
            observation = run_analysis(self.analyzer, buffer, mode)
        except Exception as exc:
            raise AnalysisFailure(f"{mode.value} analysis failed: {exc}") from exc
        finally:
            log.log_performance(f"{mode.value} analysis", (time.perf_counter() - started) * 1000)

        if observation is None:
            raise AnalysisFailure(f"{mode.value} analysis returned no observation")

        log.log_analysis(mode.value, len(observation.salient_objects), observation.mask.shape)
        return observation
