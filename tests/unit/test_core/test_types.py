"""Unit tests for the pipeline value types."""
import numpy as np
import pytest

from pricesnap.core.types import DisplayBox, Frame, PixelBox

from conftest import make_frame


class TestPixelBox:
    """Test suite for PixelBox."""

    def test_valid_box(self):
        box = PixelBox(1, 2, 11, 22)
        assert box.width == 10
        assert box.height == 20

    def test_degenerate_box_is_allowed(self):
        box = PixelBox(5, 5, 5, 5)
        assert box.width == 0 and box.height == 0

    @pytest.mark.parametrize("corners", [(10, 0, 5, 10), (0, 10, 10, 5)])
    def test_unordered_corners_rejected(self, corners):
        with pytest.raises(ValueError):
            PixelBox(*corners)

    def test_offset(self):
        assert PixelBox(1, 2, 3, 4).offset(10, 20) == PixelBox(11, 22, 13, 24)


class TestDisplayBox:
    def test_as_pixel_box(self):
        assert DisplayBox(2.0, 3.0, 4.0, 5.0).as_pixel_box() == PixelBox(2.0, 3.0, 6.0, 8.0)


class TestFrame:
    """Test suite for Frame."""

    def test_dimensions(self):
        frame = make_frame(width=32, height=16)
        assert frame.width == 32
        assert frame.height == 16
        assert frame.dims.width == 32 and frame.dims.height == 16

    def test_pixels_are_read_only(self):
        frame = make_frame()
        with pytest.raises(ValueError):
            frame.pixels[0, 0, 0] = 1

    def test_rejects_rgb_array(self):
        with pytest.raises(ValueError):
            Frame(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_rejects_non_uint8(self):
        with pytest.raises(ValueError):
            Frame(np.zeros((4, 4, 4), dtype=np.float32))
