"""
Result assembly for a completed pipeline run.
"""

from typing import Dict, List, Sequence

from workers.extraction.deviation import DeviationReport
from workers.extraction.models import AnalysisResult, UploadedFile

SUCCESS_MESSAGE = "Files uploaded and analyzed successfully"


def summarize_files(files: Sequence[UploadedFile]) -> List[Dict[str, object]]:
    """Stored filename and size of each admitted upload (never the rasterized pages)."""
    return [{"filename": f.filename, "size": f.size_bytes} for f in files]


def assemble_result(files: Sequence[UploadedFile], report: DeviationReport) -> AnalysisResult:
    return AnalysisResult(
        message=SUCCESS_MESSAGE,
        files=summarize_files(files),
        items=list(report.items),
        is_life_threatening=report.is_life_threatening,
    )
