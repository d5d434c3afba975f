"""
Shared pytest fixtures for Lab Report Triage tests.

Provides fake collaborators (rasterizer, OCR, Gemini, scoring service)
so no test touches Tesseract, poppler or the network.
"""

import os
import sys
from pathlib import Path
from typing import Callable, List, Optional
from unittest.mock import Mock

import numpy as np
import pytest
from PIL import Image

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from workers.extraction.field_catalog import FieldCatalog
from workers.extraction.models import UploadedFile
from workers.extraction.pipeline import LabReportPipeline

from tests.fixtures.fakes import FakeRasterizer, FakeRecognizer
from tests.fixtures.sample_lab_reports import NORMAL_FEATURES


# =============================================================================
# Environment Setup
# =============================================================================

@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment variables."""
    os.environ["TESTING"] = "true"
    os.environ.setdefault("GEMINI_API_KEY", "test-api-key")
    yield


# =============================================================================
# Image Fixtures
# =============================================================================

@pytest.fixture
def sample_image() -> Image.Image:
    """Create a sample test image (simulating a lab report)."""
    img_array = np.ones((800, 600, 3), dtype=np.uint8) * 255

    # Dark horizontal bars simulate text rows
    for y in range(100, 700, 50):
        img_array[y:y+10, 50:550] = 30

    return Image.fromarray(img_array, 'RGB')


@pytest.fixture
def test_image_path(sample_image: Image.Image, tmp_path: Path) -> str:
    """Save sample image to temp file and return path."""
    image_path = tmp_path / "test_lab_report.png"
    sample_image.save(str(image_path))
    return str(image_path)


@pytest.fixture
def test_pdf_path(sample_image: Image.Image, tmp_path: Path) -> str:
    """Save sample image as a single-page PDF."""
    pdf_path = tmp_path / "test_lab_report.pdf"
    sample_image.save(str(pdf_path), "PDF")
    return str(pdf_path)


# =============================================================================
# Upload Fixtures
# =============================================================================

@pytest.fixture
def make_upload(sample_image: Image.Image, tmp_path: Path) -> Callable[..., UploadedFile]:
    """Factory writing a real file to disk and returning its UploadedFile."""
    counter = {"n": 0}

    def _make(name: Optional[str] = None, mime_type: str = "image/png") -> UploadedFile:
        counter["n"] += 1
        if name is None:
            extension = "pdf" if mime_type == "application/pdf" else "png"
            name = f"report_{counter['n']}.{extension}"

        path = tmp_path / f"{1700000000000 + counter['n']}-{name}"
        if mime_type == "application/pdf":
            sample_image.save(str(path), "PDF")
        elif mime_type.startswith("image/"):
            sample_image.save(str(path), "PNG")
        else:
            path.write_text("not a lab report")

        return UploadedFile(
            path=str(path),
            mime_type=mime_type,
            original_name=name,
            size_bytes=path.stat().st_size,
        )

    return _make


@pytest.fixture
def images(make_upload) -> Callable[[int], List[UploadedFile]]:
    return lambda count: [make_upload() for _ in range(count)]


@pytest.fixture
def pdfs(make_upload) -> Callable[[int], List[UploadedFile]]:
    return lambda count: [make_upload(mime_type="application/pdf") for _ in range(count)]


# =============================================================================
# Catalog
# =============================================================================

@pytest.fixture
def field_catalog() -> FieldCatalog:
    return FieldCatalog.default()


@pytest.fixture
def small_catalog() -> FieldCatalog:
    """Three-field catalog, including one whose range contains 0."""
    return FieldCatalog.from_triples([
        ("Hemoglobin (g/dL)", 12.0, 16.0),
        ("Platelet Count (10^3/uL)", 150.0, 450.0),
        ("Trace Marker (units)", 0.0, 1.0),
    ])


# =============================================================================
# Fake Collaborators
# =============================================================================

@pytest.fixture
def fake_rasterizer() -> FakeRasterizer:
    return FakeRasterizer()


@pytest.fixture
def fake_recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def mock_extractor() -> Mock:
    """Structured extractor returning an all-normal feature vector."""
    extractor = Mock()
    extractor.extract.return_value = {"features": list(NORMAL_FEATURES)}
    return extractor


@pytest.fixture
def mock_relay() -> Mock:
    return Mock()


@pytest.fixture
def pipeline(field_catalog, fake_rasterizer, fake_recognizer, mock_extractor, mock_relay) -> LabReportPipeline:
    """Pipeline wired to fake collaborators."""
    return LabReportPipeline(
        catalog=field_catalog,
        rasterizer=fake_rasterizer,
        recognizer=fake_recognizer,
        extractor=mock_extractor,
        relay=mock_relay,
        language="eng",
    )
