"""
Lab Report Triage Pipeline Package.

- field_catalog: ordered lab fields and normal ranges
- validation: upload batch admission policy
- rasterizer / ocr / preprocessing: PDF rendering and Tesseract OCR
- text_extraction: per-file OCR with skip-on-failure
- gemini / feature_extraction: structured extraction of the feature vector
- scoring_relay: best-effort forward to the prediction service
- deviation: severity classification and triage flag
- cleanup: scoped deletion of every file a run creates
- pipeline: orchestration of the above
"""

from workers.extraction.field_catalog import FieldCatalog, LabFieldDefinition, get_field_catalog
from workers.extraction.models import AnalysisItem, AnalysisResult, Category, UploadedFile
from workers.extraction.exceptions import (
    LabTriageError,
    ValidationError,
    NoTextExtracted,
    RasterizationFailure,
    RecognitionFailure,
    InternalError,
)
from workers.extraction.validation import validate_batch
from workers.extraction.cleanup import CleanupCoordinator
from workers.extraction.deviation import DeviationAnalyzer, compute_deviation, categorize
from workers.extraction.pipeline import LabReportPipeline

__all__ = [
    # Catalog
    'FieldCatalog',
    'LabFieldDefinition',
    'get_field_catalog',

    # Types
    'AnalysisItem',
    'AnalysisResult',
    'Category',
    'UploadedFile',

    # Errors
    'LabTriageError',
    'ValidationError',
    'NoTextExtracted',
    'RasterizationFailure',
    'RecognitionFailure',
    'InternalError',

    # Stages
    'validate_batch',
    'CleanupCoordinator',
    'DeviationAnalyzer',
    'compute_deviation',
    'categorize',

    # Orchestration
    'LabReportPipeline',
]
