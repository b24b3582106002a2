"""
OCR engine wrapper supporting multiple OCR libraries.
Handles tesseract, easyocr and paddleocr behind a single
recognize(image, region, profile) -> (text, confidence) contract.
"""

import logging
import shlex
import cv2
import numpy as np
import pytesseract
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from pickslip.models import Region

if TYPE_CHECKING:
    from pickslip.config_manager import ConfigManager


def crop_region(image: np.ndarray, region: Optional[Region]) -> np.ndarray:
    """Crop a region out of the buffer, clamped to the image bounds."""
    if region is None:
        return image
    height, width = image.shape[:2]
    left = min(max(region.left, 0), width)
    top = min(max(region.top, 0), height)
    right = min(left + max(region.width, 0), width)
    bottom = min(top + max(region.height, 0), height)
    return image[top:bottom, left:right]


def mean_confidence(confidences: List[float]) -> float:
    if not confidences:
        return 0.0
    return max(0.0, min(100.0, float(sum(confidences) / len(confidences))))


class OCREngine:
    """Unified OCR class to handle multiple different OCR libraries"""

    SUPPORTED_ENGINES = ['tesseract', 'easyocr', 'paddleocr']

    def __init__(
        self,
        config_manager: 'ConfigManager',
        primary_engine: str = 'tesseract',
        logger: Optional[logging.Logger] = None
    ):
        """
        Initializes the OCR engine specified as primary.

        Args:
            config_manager: Configuration manager instance for loading engine parameters
            primary_engine: Primary OCR engine to use
            logger: Logger instance

        Raises:
            ValueError: If engine is not supported
        """
        if primary_engine not in self.SUPPORTED_ENGINES:
            raise ValueError(f"Unsupported engine: {primary_engine}. Must be one of {self.SUPPORTED_ENGINES}")

        self.config_manager = config_manager
        self.primary_engine = primary_engine
        self.engine_config = config_manager.get_engine_config(primary_engine)
        self.logger = logger

        if self.logger:
            self.logger.info(f"Initializing {primary_engine} OCR engine")

        self.engine = self._initialize_engine(primary_engine)

    def _initialize_engine(self, engine_name: str) -> Any:
        """
        Initialize the specified OCR engine with parameters from config.

        easyocr and paddleocr are optional extras, imported only when selected.

        Raises:
            Exception: If engine initialization fails
        """
        try:
            if engine_name == 'tesseract':
                tesseract_cmd = self.engine_config.get('tesseract_cmd')
                if tesseract_cmd:
                    pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
                return pytesseract

            elif engine_name == 'easyocr':
                import easyocr
                languages = self.engine_config.get('languages', ['en'])
                gpu = self.engine_config.get('gpu', False)
                return easyocr.Reader(languages, gpu=gpu)

            elif engine_name == 'paddleocr':
                from paddleocr import PaddleOCR
                use_angle_cls = self.engine_config.get('use_angle_cls', True)
                lang = self.engine_config.get('lang', 'en')
                return PaddleOCR(use_angle_cls=use_angle_cls, lang=lang)

        except Exception as e:
            raise Exception(f"Failed to initialize {engine_name}: {e}")

    def recognize(
        self,
        image: np.ndarray,
        region: Optional[Region],
        profile: Dict[str, Any]
    ) -> Tuple[str, float]:
        """
        Recognize text inside one region of the buffer.

        Args:
            image: Preprocessed buffer
            region: Region to crop, or None for the whole image
            profile: Parameter profile ('psm', 'whitelist')

        Returns:
            Tuple of (text, confidence 0-100). Lines are separated by newlines.

        Raises:
            Exception: If OCR fails
        """
        crop = crop_region(image, region)
        if crop.size == 0:
            return '', 0.0

        try:
            if self.primary_engine == 'tesseract':
                return self._recognize_tesseract(crop, profile)

            elif self.primary_engine == 'easyocr':
                return self._recognize_easyocr(crop, profile)

            elif self.primary_engine == 'paddleocr':
                return self._recognize_paddleocr(crop)

        except Exception as e:
            if self.logger:
                self.logger.error(f"OCR recognition failed: {e}")
            raise

    @staticmethod
    def build_tesseract_config(profile: Dict[str, Any]) -> str:
        """Translate a region profile into tesseract command-line options."""
        options = [f"--psm {int(profile.get('psm', 6))}"]
        whitelist = profile.get('whitelist')
        if whitelist:
            options.append(f"-c tessedit_char_whitelist={shlex.quote(whitelist)}")
        return ' '.join(options)

    def _recognize_tesseract(self, image: np.ndarray, profile: Dict[str, Any]) -> Tuple[str, float]:
        """Recognize text using Tesseract, rebuilding lines from word boxes."""
        try:
            data = self.engine.image_to_data(
                image,
                lang=self.engine_config.get('lang', 'eng'),
                config=self.build_tesseract_config(profile),
                output_type=pytesseract.Output.DICT
            )

            lines: Dict[Tuple[int, int, int], List[str]] = {}
            confidences = []
            for i in range(len(data['text'])):
                text = str(data['text'][i]).strip()
                if not text:
                    continue
                key = (data['block_num'][i], data['par_num'][i], data['line_num'][i])
                lines.setdefault(key, []).append(text)
                confidence = float(data['conf'][i])
                if confidence >= 0:
                    confidences.append(confidence)

            text = '\n'.join(' '.join(words) for words in lines.values())
            return text, mean_confidence(confidences)

        except Exception as e:
            raise Exception(f"Tesseract recognition failed: {e}")

    def _recognize_easyocr(self, image: np.ndarray, profile: Dict[str, Any]) -> Tuple[str, float]:
        """Recognize text using EasyOCR."""
        try:
            result = self.engine.readtext(image, allowlist=profile.get('whitelist'))
            if not result:
                return '', 0.0

            texts = []
            confidences = []
            for _coords, text, confidence in result:
                texts.append(text)
                # EasyOCR confidence is 0-1
                confidences.append(float(confidence) * 100)
            return '\n'.join(texts), mean_confidence(confidences)

        except Exception as e:
            raise Exception(f"EasyOCR recognition failed: {e}")

    def _recognize_paddleocr(self, image: np.ndarray) -> Tuple[str, float]:
        """Recognize text using PaddleOCR."""
        try:
            if image.ndim == 2:
                image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
            result = self.engine.ocr(image)

            if not result or not result[0]:
                return '', 0.0

            texts = []
            confidences = []
            for line in result[0]:
                texts.append(line[1][0])
                confidences.append(float(line[1][1]) * 100)
            return '\n'.join(texts), mean_confidence(confidences)

        except Exception as e:
            raise Exception(f"PaddleOCR recognition failed: {e}")
