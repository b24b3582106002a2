"""
Image preprocessing module for the pick-slip pipeline.
Decodes raw bytes and applies the configured chain of transformations
that turns a phone screenshot into a binarized buffer for OCR.
"""

import io
import logging
import cv2
import numpy as np
import pillow_heif
from typing import Any, Dict, List, Optional, Tuple
from PIL import Image

from pickslip.exceptions import DecodeError


def decode_image(data: bytes, logger: Optional[logging.Logger] = None) -> np.ndarray:
    """
    Decode raw image bytes into a BGR (or grayscale) numpy array.

    OpenCV handles the common formats; anything it rejects is retried through
    Pillow with the HEIF opener registered, which covers iPhone HEIC screenshots.

    Args:
        data: Encoded image bytes
        logger: Logger instance

    Returns:
        Decoded image

    Raises:
        DecodeError: If the bytes are empty or no decoder accepts them
    """
    if not data:
        raise DecodeError("Image data is empty")

    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is not None:
        if logger:
            logger.debug(f"Decoded image with OpenCV: {image.shape[1]}x{image.shape[0]}")
        return image

    pillow_heif.register_heif_opener()
    try:
        pil_image = Image.open(io.BytesIO(data))
        pil_image = pil_image.convert('RGB')
    except Exception as e:
        raise DecodeError(f"Could not decode image data: {e}") from e

    if logger:
        logger.debug(f"Decoded image with Pillow ({pil_image.format}): {pil_image.size[0]}x{pil_image.size[1]}")
    return cv2.cvtColor(np.array(pil_image), cv2.COLOR_RGB2BGR)


class PreprocessingPipeline:
    """Applies a chain of preprocessing methods to an image."""

    # Mapping of method names to their handler functions
    METHOD_HANDLERS = {
        'upscale': 'apply_upscale',
        'grayscale': 'apply_grayscale',
        'gaussian_blur': 'apply_gaussian_blur',
        'equalize_histogram': 'apply_equalize_histogram',
        'adaptive_threshold': 'apply_adaptive_threshold',
        'median_blur': 'apply_median_blur',
    }

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize preprocessing pipeline.

        Args:
            logger: Logger instance
        """
        self.logger = logger

    def preprocess(self, data: bytes, methods: List[Dict[str, Any]]) -> np.ndarray:
        """
        Decode image bytes and run the preprocessing chain.

        Args:
            data: Encoded image bytes
            methods: List of preprocessing method dicts with 'method' and 'parameters' keys

        Returns:
            Read-only 2-D uint8 buffer

        Raises:
            DecodeError: If the bytes cannot be decoded
            ValueError: If a method is not recognized
        """
        image = decode_image(data, self.logger)
        result_image, applied_methods = self.apply_chain(image, methods)

        # Downstream stages expect a single channel
        if result_image.ndim == 3:
            result_image = self.apply_grayscale(result_image, {})
        result_image = np.ascontiguousarray(result_image, dtype=np.uint8)
        result_image.flags.writeable = False

        if self.logger:
            self.logger.debug(f"Preprocessed buffer {result_image.shape[1]}x{result_image.shape[0]} via {applied_methods}")
        return result_image

    def apply_chain(
        self,
        image: np.ndarray,
        methods: List[Dict[str, Any]]
    ) -> Tuple[np.ndarray, List[str]]:
        """
        Apply a chain of preprocessing methods to an image.

        Args:
            image: Input image as numpy array
            methods: List of preprocessing method dicts with 'method' and 'parameters' keys

        Returns:
            Tuple of (processed_image, applied_methods_list)

        Raises:
            ValueError: If method is not recognized
            Exception: If preprocessing fails
        """
        result_image = image.copy()
        applied_methods = []

        try:
            for method_config in methods:
                method_name = method_config.get('method')
                parameters = method_config.get('parameters', {}) or {}

                if method_name not in self.METHOD_HANDLERS:
                    raise ValueError(f"Unknown preprocessing method: {method_name}")

                handler = getattr(self, self.METHOD_HANDLERS[method_name])

                if self.logger:
                    self.logger.debug(f"Applying preprocessing: {method_name}")

                result_image = handler(result_image, parameters)
                applied_methods.append(f"{method_name}({parameters})")

            if self.logger:
                self.logger.info(f"Applied preprocessing chain with {len(methods)} methods")

            return result_image, applied_methods

        except Exception as e:
            if self.logger:
                self.logger.error(f"Preprocessing failed: {e}")
            raise

    # Preprocessing methods
    @staticmethod
    def apply_upscale(image: np.ndarray, parameters: Dict[str, Any]) -> np.ndarray:
        """Upscale narrow images proportionally using PIL's LANCZOS resampling.

        Images already at least min_width wide are returned unchanged.
        """
        min_width = parameters.get('min_width', 1000)
        original_height, original_width = image.shape[:2]
        if original_width >= min_width or original_width == 0:
            return image

        scale_factor = min_width / original_width
        width = int(min_width)
        height = max(1, int(round(original_height * scale_factor)))

        if image.ndim == 2:
            resized_image = Image.fromarray(image).resize((width, height), Image.LANCZOS)
            return np.array(resized_image)

        pil_image = Image.fromarray(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))
        resized_image = pil_image.resize((width, height), Image.LANCZOS)
        return cv2.cvtColor(np.array(resized_image), cv2.COLOR_RGB2BGR)

    @staticmethod
    def apply_grayscale(image: np.ndarray, parameters: Dict[str, Any]) -> np.ndarray:
        """Convert image to grayscale (0.299R + 0.587G + 0.114B)."""
        if image.ndim == 3:
            if image.shape[2] == 4:
                return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        return image

    @staticmethod
    def apply_gaussian_blur(image: np.ndarray, parameters: Dict[str, Any]) -> np.ndarray:
        """Apply a normalized Gaussian blur with kernel size 2r+1."""
        radius = int(parameters.get('radius', 1))
        if radius <= 0:
            return image
        ksize = 2 * radius + 1
        return cv2.GaussianBlur(image, (ksize, ksize), 0)

    @staticmethod
    def apply_equalize_histogram(image: np.ndarray, parameters: Dict[str, Any]) -> np.ndarray:
        """Stretch intensities through the cumulative histogram."""
        hist = np.bincount(image.ravel(), minlength=256)
        cdf = hist.cumsum()
        cdf_min = cdf[cdf > 0][0]
        total = image.size
        if total == cdf_min:
            # Single intensity, nothing to stretch
            return image
        lut = (cdf - cdf_min) / (total - cdf_min) * 255
        lut = np.clip(np.round(lut), 0, 255).astype(np.uint8)
        return lut[image]

    @staticmethod
    def apply_adaptive_threshold(image: np.ndarray, parameters: Dict[str, Any]) -> np.ndarray:
        """Binarize against the local mean: pixel > mean - C becomes 255."""
        max_value = parameters.get('max_value', 255)
        block_size = parameters.get('block_size', 16)
        C = parameters.get('C', 10)
        # Ensure block_size is odd
        if block_size % 2 == 0:
            block_size += 1
        return cv2.adaptiveThreshold(
            image,
            max_value,
            cv2.ADAPTIVE_THRESH_MEAN_C,
            cv2.THRESH_BINARY,
            block_size,
            C
        )

    @staticmethod
    def apply_median_blur(image: np.ndarray, parameters: Dict[str, Any]) -> np.ndarray:
        """Apply median blur."""
        ksize = parameters.get('ksize', 3)
        if ksize % 2 == 0:
            ksize += 1
        return cv2.medianBlur(image, ksize)
