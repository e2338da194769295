"""Saliency vision utilities.

This sub-package converts images into analysis input, runs the saliency
capability and maps its normalized output into overlay-layer coordinates.
"""

from .analyzer import OpenCVSaliencyAnalyzer, SaliencyAnalyzer
from .errors import AllocationFailure, AnalysisFailure, ConversionFailure, SaliencyError
from .geometry import compute_geometry
from .models import (
    AffineTransform,
    DisplayState,
    OverlayGeometry,
    PixelBuffer,
    Rect,
    SaliencyMode,
    SaliencyObservation,
    SalientObject,
    Size,
    SourceImage,
)
from .orchestrator import SaliencyOrchestrator
from .pixel_buffer import to_pixel_buffer

__all__ = [
    "AffineTransform",
    "AllocationFailure",
    "AnalysisFailure",
    "ConversionFailure",
    "DisplayState",
    "OpenCVSaliencyAnalyzer",
    "OverlayGeometry",
    "PixelBuffer",
    "Rect",
    "SaliencyAnalyzer",
    "SaliencyError",
    "SaliencyMode",
    "SaliencyObservation",
    "SaliencyOrchestrator",
    "SalientObject",
    "Size",
    "SourceImage",
    "compute_geometry",
    "to_pixel_buffer",
]
