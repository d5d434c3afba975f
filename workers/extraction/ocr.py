"""
Tesseract text recognition.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import pytesseract

from backend.core.config import get_settings
from workers.extraction.exceptions import RecognitionFailure
from workers.extraction.preprocessing import OcrPreprocessor

logger = logging.getLogger(__name__)


@dataclass
class OcrResult:
    """Text recognized from one image."""
    text: str
    image_path: str
    language: str

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


class TesseractRecognizer:
    """
    Runs Tesseract over a preprocessed image.

    Usage:
        recognizer = TesseractRecognizer(language="eng")
        result = recognizer.recognize("report.png")
    """

    def __init__(
        self,
        language: Optional[str] = None,
        preprocessor: Optional[OcrPreprocessor] = None,
        tesseract_config: str = "--psm 6",
    ):
        ocr_settings = get_settings().ocr
        self.language = language or ocr_settings.language
        self.preprocessor = preprocessor or OcrPreprocessor(
            denoise_enabled=ocr_settings.denoise,
            contrast_enhance_enabled=ocr_settings.enhance_contrast,
        )
        # psm 6: assume a uniform block of text, which suits tabular reports
        self.tesseract_config = tesseract_config

    def recognize(self, image_path: Union[str, Path], language: Optional[str] = None) -> OcrResult:
        """
        Extract text from an image.

        Raises:
            RecognitionFailure: image unreadable or Tesseract failed
        """
        lang = language or self.language
        try:
            image = self.preprocessor.process(image_path)
            text = pytesseract.image_to_string(image, lang=lang, config=self.tesseract_config)
        except Exception as e:
            raise RecognitionFailure(f"OCR failed for {image_path}: {e}", path=str(image_path)) from e

        logger.info(f"OCR extracted {len(text)} characters from {Path(image_path).name}")
        return OcrResult(text=text or "", image_path=str(image_path), language=lang)
