"""
Exceptions raised by the lab report triage pipeline.

Client errors (bad batch, nothing readable) reject the request early;
per-file failures are caught inside the text extraction stage and only
skip that file; anything else surfaces as InternalError.
"""

from typing import Optional


class LabTriageError(Exception):
    """Base exception for all pipeline errors."""
    status_code = 500
    public_message = "Error processing lab report"

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class ValidationError(LabTriageError):
    """Uploaded batch violates the admission policy."""
    status_code = 400
    public_message = "Invalid upload"


class NoTextExtracted(LabTriageError):
    """Every admitted file yielded no usable text."""
    status_code = 400
    public_message = "No text could be extracted from the uploaded files"


class FileProcessingError(LabTriageError):
    """Failure confined to a single file of the batch."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RasterizationFailure(FileProcessingError):
    """PDF page could not be converted to an image."""
    pass


class RecognitionFailure(FileProcessingError):
    """OCR engine failed on an image."""
    pass


class InternalError(LabTriageError):
    """Unexpected fault anywhere else in the pipeline."""
    status_code = 500
    public_message = "Error processing lab report"
