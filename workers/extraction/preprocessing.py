"""
Image Preprocessing for Tesseract OCR.

Tesseract reads dark text on a light, evenly lit background best, so
scanned and photographed reports are converted to grayscale, denoised,
contrast-equalized and upscaled when they are too small.
"""

import cv2
import numpy as np
from PIL import Image, ImageOps
from pathlib import Path
from typing import Union
import logging

logger = logging.getLogger(__name__)


class OcrPreprocessor:
    """
    Grayscale cleanup pipeline applied before text recognition.
    """

    # Tesseract accuracy drops sharply when glyphs are under ~20px tall
    MIN_WIDTH = 1000

    def __init__(
        self,
        denoise_enabled: bool = True,
        contrast_enhance_enabled: bool = True,
        binarize_enabled: bool = False,
    ):
        self.denoise_enabled = denoise_enabled
        self.contrast_enhance_enabled = contrast_enhance_enabled
        self.binarize_enabled = binarize_enabled

    def process(self, image_path: Union[str, Path]) -> Image.Image:
        """
        Load and clean an image for OCR.

        Args:
            image_path: Path to the input image

        Returns:
            Grayscale PIL Image
        """
        try:
            gray = cv2.imread(str(image_path), cv2.IMREAD_GRAYSCALE)
            if gray is None:
                raise ValueError(f"Failed to load image: {image_path}")

            gray = self._upscale(gray)

            if self.denoise_enabled:
                gray = self._denoise(gray)

            if self.contrast_enhance_enabled:
                gray = self._enhance_contrast(gray)

            if self.binarize_enabled:
                gray = self._binarize(gray)

            return Image.fromarray(gray)

        except Exception as e:
            logger.warning(f"OpenCV preprocessing failed for {image_path}: {e}")
            return self._basic_preprocess(image_path)

    def _upscale(self, gray: np.ndarray) -> np.ndarray:
        h, w = gray.shape[:2]
        if w >= self.MIN_WIDTH:
            return gray
        scale = self.MIN_WIDTH / float(w)
        return cv2.resize(gray, (self.MIN_WIDTH, int(h * scale)), interpolation=cv2.INTER_CUBIC)

    def _denoise(self, gray: np.ndarray) -> np.ndarray:
        try:
            return cv2.fastNlMeansDenoising(gray, None, h=10, templateWindowSize=7, searchWindowSize=21)
        except Exception as e:
            logger.warning(f"Denoise failed: {e}")
            return gray

    def _enhance_contrast(self, gray: np.ndarray) -> np.ndarray:
        """CLAHE handles uneven lighting in phone photos of reports."""
        try:
            clahe = cv2.createCLAHE(clipLimit=2.0, tileGridSize=(8, 8))
            return clahe.apply(gray)
        except Exception as e:
            logger.warning(f"Contrast enhancement failed: {e}")
            return gray

    def _binarize(self, gray: np.ndarray) -> np.ndarray:
        try:
            _, binary = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
            return binary
        except Exception as e:
            logger.warning(f"Binarization failed: {e}")
            return gray

    def _basic_preprocess(self, image_path: Union[str, Path]) -> Image.Image:
        """PIL-only fallback. Raises if the file is not an image at all."""
        img = Image.open(image_path)
        img = ImageOps.exif_transpose(img)
        img = img.convert('L')
        return ImageOps.autocontrast(img, cutoff=2)
