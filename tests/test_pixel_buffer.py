"""Tests for image to ARGB8 pixel buffer conversion."""

import numpy as np
import pytest
from PIL import Image

from saliency_overlay.core.config import config
from saliency_overlay.vision.errors import AllocationFailure
from saliency_overlay.vision.models import AffineTransform, Rect, SourceImage
from saliency_overlay.vision.pixel_buffer import (
    BitmapContext,
    aligned_bytes_per_row,
    create_pixel_buffer,
    to_pixel_buffer,
)

from conftest import make_row_coded_image


class TestCreatePixelBuffer:
    def test_stride_is_aligned_and_covers_width(self):
        buffer = create_pixel_buffer(6, 4)
        assert buffer.bytes_per_row >= 6 * 4
        assert buffer.bytes_per_row % config.pixel_buffer_row_alignment == 0
        assert buffer.data.shape == (4, buffer.bytes_per_row)
        assert buffer.pixels().shape == (4, 6, 4)
        assert buffer.pixel_format == "ARGB8"

    def test_stride_exact_when_already_aligned(self):
        assert aligned_bytes_per_row(16, alignment=64) == 64
        assert aligned_bytes_per_row(17, alignment=64) == 128

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, 5)])
    def test_invalid_dimensions_fail(self, width, height):
        with pytest.raises(AllocationFailure):
            create_pixel_buffer(width, height)

    def test_pixel_limit_fails(self, monkeypatch):
        monkeypatch.setattr(config, "max_buffer_pixels", 100)
        with pytest.raises(AllocationFailure):
            create_pixel_buffer(20, 20)

    def test_pixels_view_writes_through(self):
        buffer = create_pixel_buffer(3, 2)
        buffer.pixels()[1, 2] = (1, 2, 3, 4)
        assert list(buffer.data[1, 8:12]) == [1, 2, 3, 4]


class TestToPixelBuffer:
    def test_memory_rows_are_top_down(self, row_coded_image):
        buffer = to_pixel_buffer(row_coded_image)
        assert (buffer.width, buffer.height) == (6, 4)
        for m in range(4):
            assert np.all(buffer.row(m)[:, 1] == m)

    def test_context_row_zero_is_image_bottom_row(self, row_coded_image):
        buffer = to_pixel_buffer(row_coded_image)
        assert np.all(buffer.context_row(0)[:, 1] == 3)
        assert np.all(buffer.context_row(3)[:, 1] == 0)

    def test_unflipped_context_produces_mirrored_buffer(self, row_coded_image):
        buffer = create_pixel_buffer(6, 4)
        context = BitmapContext(buffer)
        context.draw_image(row_coded_image.rgba(), Rect(0, 0, 6, 4))
        # Accepted silently, but upside down
        assert np.all(buffer.row(0)[:, 1] == 3)
        assert np.all(buffer.context_row(0)[:, 1] == 0)

    def test_argb_byte_order(self, row_coded_image):
        buffer = to_pixel_buffer(row_coded_image)
        pixels = buffer.pixels()
        assert np.all(pixels[..., 0] == 0xFF)
        assert np.all(pixels[..., 3] == 200)
        assert list(pixels[2, 5]) == [255, 2, 5, 200]

    def test_columns_are_not_mirrored(self, row_coded_image):
        buffer = to_pixel_buffer(row_coded_image)
        assert list(buffer.row(0)[:, 2]) == [0, 1, 2, 3, 4, 5]

    def test_to_bgr(self, row_coded_image):
        bgr = to_pixel_buffer(row_coded_image).to_bgr()
        assert bgr.shape == (4, 6, 3)
        assert bgr.flags["C_CONTIGUOUS"]
        assert list(bgr[1, 4]) == [200, 4, 1]

    def test_alpha_is_premultiplied(self):
        rgba = np.zeros((1, 1, 4), dtype=np.uint8)
        rgba[0, 0] = (100, 50, 0, 128)
        buffer = to_pixel_buffer(SourceImage(pixels=Image.fromarray(rgba)))
        assert list(buffer.row(0)[0]) == [255, 50, 25, 0]

    def test_fractional_scale_truncates_and_resamples(self):
        image = SourceImage(pixels=make_row_coded_image(6, 4), scale=2.0)
        buffer = to_pixel_buffer(image)
        assert (buffer.width, buffer.height) == (3, 2)
        assert list(buffer.row(0)[:, 1]) == [1, 1, 1]
        assert list(buffer.row(1)[:, 1]) == [3, 3, 3]
        assert list(buffer.row(0)[:, 2]) == [1, 3, 5]

    def test_sub_pixel_image_fails_allocation(self):
        image = SourceImage(pixels=Image.new("RGBA", (1, 1)), scale=2.0)
        with pytest.raises(AllocationFailure):
            to_pixel_buffer(image)


class TestBitmapContext:
    def test_rotated_transform_rejected(self):
        context = BitmapContext(create_pixel_buffer(2, 2))
        context.ctm = AffineTransform(a=0, b=1, c=-1, d=0)
        with pytest.raises(ValueError):
            context.draw_image(np.zeros((2, 2, 4), dtype=np.uint8), Rect(0, 0, 2, 2))

    def test_empty_rect_draws_nothing(self):
        buffer = create_pixel_buffer(2, 2)
        BitmapContext(buffer).draw_image(np.full((2, 2, 4), 255, dtype=np.uint8), Rect(0, 0, 0, 2))
        assert not buffer.data.any()

    def test_partial_rect_leaves_rest_untouched(self):
        buffer = create_pixel_buffer(4, 4)
        context = BitmapContext(buffer)
        context.translate_by(0, 4)
        context.scale_by(1.0, -1.0)
        context.draw_image(np.full((1, 1, 4), 255, dtype=np.uint8), Rect(0, 0, 2, 2))
        pixels = buffer.pixels()
        assert np.all(pixels[:2, :2] == 255)
        assert not pixels[2:, :].any()
        assert not pixels[:, 2:].any()

    def test_degenerate_transform_rejected(self):
        context = BitmapContext(create_pixel_buffer(2, 2))
        context.scale_by(0.0, 1.0)
        with pytest.raises(ValueError):
            context.draw_image(np.zeros((2, 2, 4), dtype=np.uint8), Rect(0, 0, 2, 2))
