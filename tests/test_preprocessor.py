"""Tests for image decoding and the preprocessing chain."""

import numpy as np
import pytest

from conftest import make_slip_image
from pickslip.exceptions import DecodeError
from pickslip.preprocessor import PreprocessingPipeline, decode_image


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

class TestDecodeImage:
    """Byte decoding into a pixel array."""

    def test_decodes_png(self):
        """PNG bytes decode to a three-channel array of the encoded size."""
        image = decode_image(make_slip_image(width=300, height=500))
        assert image.shape == (500, 300, 3)
        assert image.dtype == np.uint8

    def test_empty_bytes_raise(self):
        """Empty input is a decode error."""
        with pytest.raises(DecodeError):
            decode_image(b"")

    def test_garbage_bytes_raise(self):
        """Bytes no decoder accepts are a decode error."""
        with pytest.raises(DecodeError):
            decode_image(b"definitely not an image" * 10)


# ---------------------------------------------------------------------------
# Chain
# ---------------------------------------------------------------------------

class TestPreprocess:
    """Full preprocessing with the packaged chain."""

    @pytest.fixture
    def pipeline(self):
        return PreprocessingPipeline()

    def test_output_is_read_only_grayscale(self, pipeline, config_manager, slip_image_bytes):
        """The buffer is 2-D uint8 and cannot be written to."""
        buffer = pipeline.preprocess(slip_image_bytes, config_manager.get_preprocessing_chain())
        assert buffer.ndim == 2
        assert buffer.dtype == np.uint8
        assert not buffer.flags.writeable
        with pytest.raises(ValueError):
            buffer[0, 0] = 0

    def test_narrow_image_upscaled(self, pipeline, config_manager, slip_image_bytes):
        """A 600px wide capture is upscaled to 1000px, keeping the aspect ratio."""
        buffer = pipeline.preprocess(slip_image_bytes, config_manager.get_preprocessing_chain())
        assert buffer.shape == (2000, 1000)

    def test_binarized(self, pipeline, config_manager, slip_image_bytes):
        """After thresholding and median blur only black and white remain."""
        buffer = pipeline.preprocess(slip_image_bytes, config_manager.get_preprocessing_chain())
        assert set(np.unique(buffer)) <= {0, 255}

    def test_unknown_method_raises(self, pipeline, slip_image_bytes):
        """An unregistered method name is rejected."""
        with pytest.raises(ValueError, match="Unknown preprocessing method"):
            pipeline.preprocess(slip_image_bytes, [{'method': 'sharpen', 'parameters': {}}])

    def test_empty_chain_still_grayscale(self, pipeline, slip_image_bytes):
        """Without any steps the buffer is still converted to one channel."""
        buffer = pipeline.preprocess(slip_image_bytes, [])
        assert buffer.shape == (1200, 600)


# ---------------------------------------------------------------------------
# Individual steps
# ---------------------------------------------------------------------------

class TestSteps:
    """Single preprocessing methods."""

    def test_upscale_leaves_wide_images(self):
        """Images at least min_width wide are returned unchanged."""
        image = np.zeros((50, 1200), dtype=np.uint8)
        assert PreprocessingPipeline.apply_upscale(image, {'min_width': 1000}) is image

    def test_upscale_grayscale(self):
        """Grayscale images are resized proportionally."""
        image = np.zeros((100, 500), dtype=np.uint8)
        assert PreprocessingPipeline.apply_upscale(image, {'min_width': 1000}).shape == (200, 1000)

    def test_grayscale_passes_single_channel(self):
        """Converting an already grayscale image is a no-op."""
        image = np.full((10, 10), 77, dtype=np.uint8)
        assert PreprocessingPipeline.apply_grayscale(image, {}) is image

    def test_equalize_uniform_image_unchanged(self):
        """A single-intensity image has nothing to stretch."""
        image = np.full((10, 10), 128, dtype=np.uint8)
        assert np.array_equal(PreprocessingPipeline.apply_equalize_histogram(image, {}), image)

    def test_equalize_stretches_to_full_range(self):
        """Two intensity levels are stretched to 0 and 255."""
        image = np.array([[50, 50], [100, 100]], dtype=np.uint8)
        result = PreprocessingPipeline.apply_equalize_histogram(image, {})
        assert result.tolist() == [[0, 0], [255, 255]]

    def test_equalize_is_idempotent_on_binary(self):
        """Equalizing an already two-level image changes nothing."""
        image = np.array([[0, 255], [255, 0]], dtype=np.uint8)
        once = PreprocessingPipeline.apply_equalize_histogram(image, {})
        assert np.array_equal(PreprocessingPipeline.apply_equalize_histogram(once, {}), once)

    def test_threshold_accepts_even_block_size(self):
        """Even block sizes are bumped to the next odd size."""
        image = np.tile(np.arange(0, 250, 10, dtype=np.uint8), (25, 1))
        result = PreprocessingPipeline.apply_adaptive_threshold(image, {'block_size': 16, 'C': 10})
        assert result.shape == image.shape
        assert set(np.unique(result)) <= {0, 255}

    def test_blur_radius_zero_is_noop(self):
        """A zero radius skips blurring."""
        image = np.eye(5, dtype=np.uint8) * 255
        assert PreprocessingPipeline.apply_gaussian_blur(image, {'radius': 0}) is image
