"""
Lab Report Triage Pipeline.

validate -> OCR text -> feature vector -> deviation analysis -> result,
with the scoring relay fired after the result exists and every file
created during the run deleted on the way out.
"""

import logging
import time
from typing import Optional, Sequence

from workers.extraction.assembler import assemble_result
from workers.extraction.cleanup import CleanupCoordinator
from workers.extraction.deviation import DeviationAnalyzer
from workers.extraction.exceptions import InternalError, LabTriageError
from workers.extraction.feature_extraction import FeatureExtractionStage
from workers.extraction.field_catalog import FieldCatalog, get_field_catalog
from workers.extraction.models import AnalysisResult, UploadedFile
from workers.extraction.text_extraction import TextExtractionStage
from workers.extraction.validation import validate_batch

logger = logging.getLogger(__name__)


class LabReportPipeline:
    """
    Runs one upload batch through the full triage pipeline.

    Collaborators default to the production implementations (pdf2image,
    Tesseract, Gemini, HTTP relay) and can be injected for tests.
    """

    def __init__(
        self,
        catalog: Optional[FieldCatalog] = None,
        rasterizer=None,
        recognizer=None,
        extractor=None,
        relay=None,
        language: Optional[str] = None,
    ):
        self.catalog = catalog or get_field_catalog()

        if rasterizer is None:
            from workers.extraction.rasterizer import PdfRasterizer
            rasterizer = PdfRasterizer()
        if recognizer is None:
            from workers.extraction.ocr import TesseractRecognizer
            recognizer = TesseractRecognizer()
        if extractor is None:
            from workers.extraction.gemini import GeminiStructuredExtractor
            extractor = GeminiStructuredExtractor()
        if relay is None:
            from workers.extraction.scoring_relay import ScoringRelay
            relay = ScoringRelay()

        self.rasterizer = rasterizer
        self.recognizer = recognizer
        self.extractor = extractor
        self.relay = relay
        self.language = language
        self.analyzer = DeviationAnalyzer(self.catalog)

    def run(self, files: Sequence[UploadedFile]) -> AnalysisResult:
        """
        Process an upload batch.

        Raises:
            ValidationError: batch rejected (files already deleted)
            NoTextExtracted: no file produced readable text
            InternalError: any other failure
        """
        validate_batch(files)

        with CleanupCoordinator() as cleanup:
            cleanup.register_all(f.path for f in files)
            try:
                return self._run_stages(files, cleanup)
            except LabTriageError:
                raise
            except Exception as e:
                logger.error(f"Pipeline failed: {e}", exc_info=True)
                raise InternalError(str(e)) from e

    def close(self) -> None:
        """Stop the relay's background workers."""
        self.relay.shutdown()

    def _run_stages(self, files: Sequence[UploadedFile], cleanup: CleanupCoordinator) -> AnalysisResult:
        total_start = time.time()

        logger.info(f"[Step 1] Extracting text from {len(files)} file(s)")
        text_stage = TextExtractionStage(
            rasterizer=self.rasterizer,
            recognizer=self.recognizer,
            register_path=cleanup.register,
            language=self.language,
        )
        text_result = text_stage.run(files)

        logger.info("[Step 2] Extracting lab values")
        feature_stage = FeatureExtractionStage(self.extractor, self.catalog)
        feature_result = feature_stage.run(text_result.combined_text)

        logger.info("[Step 3] Analyzing deviations")
        report = self.analyzer.analyze(feature_result.features)

        result = assemble_result(files, report)

        logger.info("[Step 4] Relaying features to scoring service")
        try:
            self.relay.dispatch(feature_result.payload)
        except Exception as e:
            logger.warning(f"Scoring relay dispatch failed: {e}")

        logger.info(
            f"Pipeline complete: {len(result.items)} items, "
            f"life_threatening={result.is_life_threatening}, time={time.time() - total_start:.1f}s"
        )
        return result
