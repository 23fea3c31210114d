"""Unit tests for FramePreprocessor."""
import numpy as np
import pytest

from pricesnap.core.image_processor import FramePreprocessor, contrast_factor
from pricesnap.core.types import Frame, PreprocessedFrame

from conftest import make_frame


@pytest.fixture
def preprocessor():
    return FramePreprocessor()


@pytest.fixture
def random_frame():
    rng = np.random.default_rng(seed=7)
    pixels = rng.integers(0, 256, size=(40, 60, 4), dtype=np.uint8)
    return Frame(pixels)


class TestFramePreprocessor:
    """Test suite for the grayscale/contrast/threshold pipeline."""

    def test_contrast_factor_for_default_contrast(self):
        assert contrast_factor(1.5) == pytest.approx(259 * 256.5 / (255 * 257.5))

    def test_contrast_factor_rejects_pole(self):
        with pytest.raises(ValueError):
            contrast_factor(259)

    def test_output_is_binary(self, preprocessor, random_frame):
        result = preprocessor.preprocess(random_frame)
        rgb = result.pixels[:, :, :3]
        assert set(np.unique(rgb)).issubset({0, 255})

    def test_output_channels_are_equal(self, preprocessor, random_frame):
        result = preprocessor.preprocess(random_frame)
        assert np.array_equal(result.pixels[:, :, 0], result.pixels[:, :, 1])
        assert np.array_equal(result.pixels[:, :, 1], result.pixels[:, :, 2])

    def test_dimensions_preserved(self, preprocessor, random_frame):
        result = preprocessor.preprocess(random_frame)
        assert isinstance(result, PreprocessedFrame)
        assert result.pixels.shape == random_frame.pixels.shape

    def test_alpha_unchanged(self, preprocessor, random_frame):
        result = preprocessor.preprocess(random_frame)
        assert np.array_equal(result.pixels[:, :, 3], random_frame.pixels[:, :, 3])

    def test_idempotent_on_binarized_frame(self, preprocessor, random_frame):
        once = preprocessor.preprocess(random_frame)
        twice = preprocessor.preprocess(once)
        assert np.array_equal(once.pixels, twice.pixels)

    def test_source_frame_untouched(self, preprocessor, random_frame):
        before = random_frame.pixels.copy()
        result = preprocessor.preprocess(random_frame)
        assert np.array_equal(random_frame.pixels, before)
        assert not np.shares_memory(result.pixels, random_frame.pixels)

    @pytest.mark.parametrize("rgb, expected", [
        ((0, 0, 0), 0),
        ((255, 255, 255), 255),
        ((120, 120, 120), 0),
        ((130, 130, 130), 255),
        ((255, 0, 0), 0),        # pure red is dark in luma (76)
        ((0, 255, 0), 255),      # pure green is bright in luma (150)
    ])
    def test_known_pixels(self, preprocessor, rgb, expected):
        result = preprocessor.preprocess(make_frame(width=2, height=2, rgb=rgb, alpha=77))
        assert (result.pixels[:, :, :3] == expected).all()
        assert (result.pixels[:, :, 3] == 77).all()

    def test_empty_frame_rejected(self, preprocessor):
        with pytest.raises(ValueError):
            preprocessor.preprocess(Frame(np.zeros((0, 0, 4), dtype=np.uint8)))
