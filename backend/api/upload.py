"""
Upload Routes - lab report upload and triage.
"""

import logging
import shutil
import time
import traceback
import uuid
from functools import lru_cache
from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from backend.core.config import get_settings
from workers.extraction.cleanup import delete_files
from workers.extraction.exceptions import LabTriageError, ValidationError
from workers.extraction.models import UploadedFile
from workers.extraction.pipeline import LabReportPipeline

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Upload"])


@lru_cache()
def get_pipeline() -> LabReportPipeline:
    return LabReportPipeline(language=get_settings().ocr.language)


def _stored_name(original_name: str) -> str:
    """Timestamp-qualified name so concurrent uploads never collide."""
    safe_name = Path(original_name or "upload").name
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{safe_name}"


def save_uploads(files: List[UploadFile], upload_dir: Path) -> List[UploadedFile]:
    """Write uploads to disk. On failure, every file written so far is removed, including a partial one."""
    upload_dir.mkdir(parents=True, exist_ok=True)
    saved: List[UploadedFile] = []
    written: List[str] = []

    try:
        for file in files:
            stored_name = _stored_name(file.filename)
            location = upload_dir / stored_name
            written.append(str(location))
            with open(location, "wb") as file_object:
                shutil.copyfileobj(file.file, file_object)

            saved.append(UploadedFile(
                path=str(location),
                mime_type=file.content_type or "application/octet-stream",
                original_name=file.filename or stored_name,
                size_bytes=location.stat().st_size,
                filename=stored_name,
            ))
    except Exception:
        delete_files(written)
        raise

    return saved


def error_response(error: Exception, status_code: int, message: str) -> JSONResponse:
    content = {"message": message, "error": str(error)}
    if not get_settings().app.is_production:
        content["stack"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    return JSONResponse(status_code=status_code, content=content)


@router.post("/upload")
async def upload_files(
    files: List[UploadFile] = File(default=[]),
    pipeline: LabReportPipeline = Depends(get_pipeline),
):
    """
    Upload up to 3 lab report images or a single PDF and triage them.

    Returns the per-field classification and the life-threatening flag.
    """
    settings = get_settings()
    logger.info(f"Received {len(files)} file(s): {[f.filename for f in files]}")

    try:
        uploads = save_uploads(files, Path(settings.storage.upload_dir))

        if len(uploads) > settings.storage.max_files:
            delete_files(f.path for f in uploads)
            raise ValidationError(f"A maximum of {settings.storage.max_files} files can be uploaded.")

        result = await run_in_threadpool(pipeline.run, uploads)

    except LabTriageError as e:
        if e.is_client_error:
            return JSONResponse(status_code=e.status_code, content={"message": e.public_message, "error": str(e)})
        return error_response(e, e.status_code, e.public_message)
    except Exception as e:
        logger.error(f"Upload error: {e}", exc_info=True)
        return error_response(e, 500, "Error uploading files")

    return result.to_dict()
