"""
Text Extraction Stage.

Turns each admitted file into raw OCR text. PDFs are rasterized first.
A file that cannot be rasterized or recognized is skipped; the batch only
fails when nothing readable comes out of any file.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from workers.extraction.exceptions import FileProcessingError, NoTextExtracted
from workers.extraction.models import UploadedFile

logger = logging.getLogger(__name__)


class FileStatus(str, Enum):
    EXTRACTED = "extracted"
    EMPTY = "empty"      # OCR ran but found no text
    SKIPPED = "skipped"  # Rasterization or OCR failed


@dataclass
class FileOutcome:
    """Result of processing one file."""
    file: UploadedFile
    status: FileStatus
    text: str = ""
    error: Optional[str] = None


@dataclass
class TextExtractionResult:
    """Combined text of a batch plus per-file outcomes."""
    combined_text: str
    outcomes: List[FileOutcome] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == FileStatus.SKIPPED)

    @property
    def extracted_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == FileStatus.EXTRACTED)


def wrap_source_text(original_name: str, text: str) -> str:
    """Delimit a file's text so the combined buffer shows where it came from."""
    return f"\n--- Start of {original_name} ---\n{text.strip()}\n--- End of {original_name} ---\n"


class TextExtractionStage:
    """
    Sequential per-file OCR over an accepted batch.

    Args:
        rasterizer: object with convert(pdf_path, page=1, high_dpi=True) -> image path
        recognizer: object with recognize(image_path, language=...) -> OcrResult
        register_path: called with every intermediate file created (for cleanup)
        language: OCR language code
    """

    def __init__(
        self,
        rasterizer,
        recognizer,
        register_path: Callable[[str], None],
        language: Optional[str] = None,
    ):
        self.rasterizer = rasterizer
        self.recognizer = recognizer
        self.register_path = register_path
        self.language = language

    def process_file(self, upload: UploadedFile) -> FileOutcome:
        """Process one file. Per-file failures become a SKIPPED outcome."""
        try:
            image_path = upload.path
            if upload.is_pdf:
                image_path = self.rasterizer.convert(upload.path, page=1, high_dpi=True)
                self.register_path(image_path)

            result = self.recognizer.recognize(image_path, language=self.language)

        except FileProcessingError as e:
            logger.warning(f"Skipping {upload.original_name}: {e}")
            return FileOutcome(file=upload, status=FileStatus.SKIPPED, error=str(e))

        text = result.text or ""
        if not text.strip():
            logger.warning(f"No text recognized in {upload.original_name}")
            return FileOutcome(file=upload, status=FileStatus.EMPTY)

        return FileOutcome(file=upload, status=FileStatus.EXTRACTED, text=text)

    def run(self, files: Sequence[UploadedFile]) -> TextExtractionResult:
        """
        Extract and combine text from all files in batch order.

        Raises:
            NoTextExtracted: combined text is empty or whitespace
        """
        outcomes = []
        parts = []

        for upload in files:
            outcome = self.process_file(upload)
            outcomes.append(outcome)
            if outcome.status == FileStatus.EXTRACTED:
                parts.append(wrap_source_text(upload.original_name, outcome.text))

        combined = "".join(parts)
        result = TextExtractionResult(combined_text=combined, outcomes=outcomes)

        logger.info(
            f"Text extraction: {result.extracted_count}/{len(files)} file(s) readable, "
            f"{result.skipped_count} skipped, {len(combined)} characters"
        )

        if not combined.strip():
            raise NoTextExtracted("No text could be extracted from the uploaded files.")

        return result
