"""
Data types shared by the triage pipeline stages.
"""

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

PDF_MIME_TYPE = "application/pdf"


class Category(str, Enum):
    """Severity bucket of a lab value relative to its normal range."""
    GREEN = "Green"
    YELLOW = "Yellow"
    RED_YELLOW = "Red-Yellow"
    RED = "Red"


@dataclass
class UploadedFile:
    """A file admitted by the transport layer and stored on disk."""
    path: str
    mime_type: str
    original_name: str
    size_bytes: int
    filename: Optional[str] = None  # Stored (timestamp-qualified) name

    def __post_init__(self):
        if self.filename is None:
            self.filename = Path(self.path).name

    @property
    def is_pdf(self) -> bool:
        return self._effective_mime_type() == PDF_MIME_TYPE

    @property
    def is_image(self) -> bool:
        return self._effective_mime_type().startswith("image/")

    def _effective_mime_type(self) -> str:
        # Some clients send application/octet-stream; fall back to the extension
        mime = (self.mime_type or "").lower()
        if mime and mime != "application/octet-stream":
            return mime
        guessed, _ = mimetypes.guess_type(self.original_name or self.path)
        return (guessed or mime).lower()


@dataclass
class AnalysisItem:
    """Classification of one lab field."""
    category: Category
    name: str
    deviation: float
    is_missing: bool = False  # Yellow from a defaulted value, not from deviation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "name": self.name,
            "deviation": self.deviation,
        }


@dataclass
class AnalysisResult:
    """Response payload of a successful pipeline run."""
    message: str
    files: List[Dict[str, Any]]
    items: List[AnalysisItem] = field(default_factory=list)
    is_life_threatening: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "files": list(self.files),
            "items": [item.to_dict() for item in self.items],
            "isLifeThreatening": self.is_life_threatening,
        }
