"""Tests for the OpenCV-backed saliency analyzer."""

import cv2
import numpy as np
import pytest
from PIL import Image

from saliency_overlay.utils.validation import validate_normalized_rect
from saliency_overlay.vision.analyzer import OpenCVSaliencyAnalyzer, run_analysis
from saliency_overlay.vision.models import Rect, SaliencyMode, SourceImage
from saliency_overlay.vision.pixel_buffer import to_pixel_buffer

from conftest import FakeAnalyzer

requires_saliency = pytest.mark.skipif(
    not hasattr(cv2, "saliency"), reason="opencv-contrib saliency module not available"
)


def test_run_analysis_dispatches(wide_image):
    analyzer = FakeAnalyzer()
    buffer = to_pixel_buffer(wide_image)
    run_analysis(analyzer, buffer, SaliencyMode.ATTENTION)
    run_analysis(analyzer, buffer, SaliencyMode.OBJECTNESS)
    assert analyzer.calls == [SaliencyMode.ATTENTION, SaliencyMode.OBJECTNESS]


def test_run_analysis_rejects_unknown_mode(wide_image):
    with pytest.raises(ValueError):
        run_analysis(FakeAnalyzer(), to_pixel_buffer(wide_image), "gaze")


class TestSalientObjects:
    def test_single_region_box_uses_bottom_left_origin(self):
        saliency = np.zeros((100, 100), dtype=np.float32)
        saliency[30:60, 40:80] = 1.0
        objects = OpenCVSaliencyAnalyzer(min_area_fraction=0.0)._salient_objects(saliency, 3)
        assert len(objects) == 1
        assert objects[0].bounding_box.as_tuple() == pytest.approx((0.4, 0.4, 0.4, 0.3))

    def test_largest_regions_first_and_limited(self):
        saliency = np.zeros((100, 100), dtype=np.float32)
        saliency[5:15, 5:15] = 1.0
        saliency[50:90, 50:90] = 1.0
        saliency[5:25, 70:90] = 1.0
        objects = OpenCVSaliencyAnalyzer(min_area_fraction=0.0)._salient_objects(saliency, 2)
        areas = [o.bounding_box.width * o.bounding_box.height for o in objects]
        assert len(objects) == 2
        assert areas == sorted(areas, reverse=True)
        assert areas[0] == pytest.approx(0.16)

    def test_small_regions_filtered(self):
        saliency = np.zeros((100, 100), dtype=np.float32)
        saliency[10:12, 10:12] = 1.0
        assert OpenCVSaliencyAnalyzer(min_area_fraction=0.01)._salient_objects(saliency, 3) == ()

    def test_flat_map_has_no_objects(self):
        saliency = np.full((50, 50), 0.5, dtype=np.float32)
        assert OpenCVSaliencyAnalyzer()._salient_objects(saliency, 3) == ()


@requires_saliency
@pytest.mark.parametrize("mode", list(SaliencyMode))
def test_detection_on_synthetic_image(blob_image, mode):
    analyzer = OpenCVSaliencyAnalyzer(mask_size=32)
    observation = run_analysis(analyzer, to_pixel_buffer(blob_image), mode)

    assert observation is not None
    assert observation.mode is mode
    assert observation.mask.shape == (32, 32)
    assert observation.mask.dtype == np.float32
    assert observation.mask.min() >= 0.0
    assert observation.mask.max() <= 1.0
    assert all(validate_normalized_rect(o.bounding_box) for o in observation.salient_objects)
    if mode is SaliencyMode.ATTENTION:
        assert len(observation.salient_objects) <= 1


@requires_saliency
def test_detection_on_uniform_image_does_not_crash():
    image = SourceImage(pixels=Image.new("RGBA", (64, 48), (90, 90, 90, 255)))
    observation = OpenCVSaliencyAnalyzer().detect_attention(to_pixel_buffer(image))
    assert observation is None or np.isfinite(observation.mask).all()


def test_normalized_rect_validation():
    assert validate_normalized_rect(Rect(0, 0, 1, 1))
    assert not validate_normalized_rect(Rect(0.5, 0.5, 0.6, 0.1))
    assert not validate_normalized_rect(Rect(-0.1, 0, 0.5, 0.5))
    assert not validate_normalized_rect(Rect(0, 0, float("nan"), 0.5))
