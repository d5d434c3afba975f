"""
PDF to image conversion for OCR.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from pdf2image import convert_from_path

from backend.core.config import get_settings
from workers.extraction.exceptions import RasterizationFailure

logger = logging.getLogger(__name__)

STANDARD_DPI = 150


class PdfRasterizer:
    """
    Renders a single PDF page to a PNG next to the source file.

    Only page 1 is used: lab reports in this system are single-page.
    """

    def __init__(self, dpi: Optional[int] = None):
        self.dpi = dpi or get_settings().ocr.pdf_dpi

    def convert(self, pdf_path: Union[str, Path], page: int = 1, high_dpi: bool = True) -> str:
        """
        Rasterize one page.

        Args:
            pdf_path: Source PDF
            page: 1-based page number
            high_dpi: Render at the configured OCR resolution instead of screen resolution

        Returns:
            Path of the written PNG

        Raises:
            RasterizationFailure: conversion failed or produced no page
        """
        pdf_path = Path(pdf_path)
        dpi = self.dpi if high_dpi else STANDARD_DPI
        output_path = pdf_path.with_name(f"{pdf_path.stem}-page{page}.png")

        try:
            pages = convert_from_path(str(pdf_path), dpi=dpi, first_page=page, last_page=page)
            if not pages:
                raise RasterizationFailure(f"No page {page} in {pdf_path.name}", path=str(pdf_path))
            pages[0].save(str(output_path), "PNG")
        except RasterizationFailure:
            raise
        except Exception as e:
            # A half-written page is never handed to the caller, so it is not registered for cleanup
            output_path.unlink(missing_ok=True)
            raise RasterizationFailure(
                f"Failed to rasterize {pdf_path.name}: {e}", path=str(pdf_path)
            ) from e

        logger.info(f"Rasterized {pdf_path.name} page {page} at {dpi} DPI -> {output_path.name}")
        return str(output_path)
