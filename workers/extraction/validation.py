"""
Upload Batch Validation Module.

Admission policy for a batch of uploaded files: up to 3 images OR a
single PDF, never both. Rules are checked in order and the first
violation rejects the whole batch.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from workers.extraction.cleanup import delete_files
from workers.extraction.exceptions import ValidationError
from workers.extraction.models import UploadedFile

logger = logging.getLogger(__name__)

MAX_IMAGES = 3
MAX_PDFS = 1


@dataclass
class BatchComposition:
    """Image/PDF split of an upload batch."""
    images: List[UploadedFile]
    pdfs: List[UploadedFile]
    other: List[UploadedFile]


def classify_batch(files: Sequence[UploadedFile]) -> BatchComposition:
    images = [f for f in files if f.is_image]
    pdfs = [f for f in files if f.is_pdf]
    other = [f for f in files if not f.is_image and not f.is_pdf]
    return BatchComposition(images=images, pdfs=pdfs, other=other)


def check_batch(files: Sequence[UploadedFile]) -> BatchComposition:
    """
    Apply the admission rules without touching the filesystem.

    Raises:
        ValidationError: on the first rule the batch violates
    """
    if not files:
        raise ValidationError("No files were uploaded.")

    batch = classify_batch(files)

    if len(batch.pdfs) > MAX_PDFS:
        raise ValidationError(f"Only {MAX_PDFS} PDF file can be uploaded at a time.")

    if len(batch.images) > MAX_IMAGES:
        raise ValidationError(f"A maximum of {MAX_IMAGES} images can be uploaded at a time.")

    if batch.pdfs and batch.images:
        raise ValidationError("Images and PDF files cannot be uploaded together.")

    if batch.other:
        names = ", ".join(f.original_name for f in batch.other)
        raise ValidationError(f"Unsupported file type: {names}. Upload images or a PDF.")

    return batch


def validate_batch(files: Sequence[UploadedFile]) -> BatchComposition:
    """
    Validate an upload batch, deleting every file on rejection.

    Args:
        files: Files in upload order

    Returns:
        BatchComposition of the accepted batch

    Raises:
        ValidationError: batch rejected (all files already deleted)
    """
    try:
        batch = check_batch(files)
    except ValidationError as e:
        removed = delete_files(f.path for f in files)
        logger.warning(f"Rejected upload batch of {len(files)} file(s): {e} (deleted {removed})")
        raise

    logger.info(f"Accepted batch: {len(batch.images)} image(s), {len(batch.pdfs)} PDF(s)")
    return batch
