"""
Deviation Analyzer.

Classifies each extracted value against its normal range:

    deviation == 0          Green
    0 < |deviation| <= 5    Yellow
    5 < |deviation| <= 20   Red-Yellow
    |deviation| > 20        Red

Deviation is the signed percentage distance from the breached bound
(positive above the range, negative below), rounded to one decimal.
Any Red item makes the batch life-threatening.

A value of 0 for a field whose range excludes 0 is the extractor's
"not found" sentinel; it is reported as Yellow with a
"(Missing/Defaulted)" suffix instead of being scored.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Sequence

from workers.extraction.field_catalog import FieldCatalog, LabFieldDefinition
from workers.extraction.models import AnalysisItem, Category

logger = logging.getLogger(__name__)

MISSING_SUFFIX = " (Missing/Defaulted)"

YELLOW_MAX_DEVIATION = 5.0
RED_YELLOW_MAX_DEVIATION = 20.0


@dataclass
class DeviationReport:
    """Per-field items in catalog order plus the triage flag."""
    items: List[AnalysisItem] = field(default_factory=list)
    is_life_threatening: bool = False

    def counts(self) -> dict:
        return dict(Counter(item.category.value for item in self.items))

    @property
    def missing_count(self) -> int:
        return sum(1 for item in self.items if item.is_missing)


def round1(value: float) -> float:
    """Round to one decimal place, half away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def is_missing_value(value: float, definition: LabFieldDefinition) -> bool:
    """0 is the missing sentinel unless 0 is itself inside the range."""
    return value == 0 and not definition.contains(0)


def compute_deviation(value: float, lower: float, upper: float) -> float:
    """
    Signed percentage deviation from the nearest breached bound.

    Examples:
        compute_deviation(13.5, 12.0, 16.0) -> 0.0
        compute_deviation(17.0, 12.0, 16.0) -> 6.3
        compute_deviation(10.0, 12.0, 16.0) -> -16.7
    """
    if lower <= value <= upper:
        return 0.0

    limit = upper if value > upper else lower
    if limit == 0:
        # Percent of a zero bound is undefined; measure against the range width
        base = (upper - lower) or 1.0
    else:
        base = abs(limit)

    return round1((value - limit) / base * 100)


def categorize(deviation: float) -> Category:
    abs_deviation = abs(deviation)
    if abs_deviation == 0:
        return Category.GREEN
    if abs_deviation <= YELLOW_MAX_DEVIATION:
        return Category.YELLOW
    if abs_deviation <= RED_YELLOW_MAX_DEVIATION:
        return Category.RED_YELLOW
    return Category.RED


def analyze_field(value: float, definition: LabFieldDefinition) -> AnalysisItem:
    if is_missing_value(value, definition):
        return AnalysisItem(
            category=Category.YELLOW,
            name=definition.name + MISSING_SUFFIX,
            deviation=0.0,
            is_missing=True,
        )

    deviation = compute_deviation(value, *definition.normal_range)
    return AnalysisItem(category=categorize(deviation), name=definition.name, deviation=deviation)


class DeviationAnalyzer:
    """
    Scores a feature vector against a FieldCatalog.

    Only positions present in both the vector and the catalog are
    analyzed, so a short vector yields fewer items.
    """

    def __init__(self, catalog: FieldCatalog):
        self.catalog = catalog

    def analyze(self, features: Sequence[float]) -> DeviationReport:
        report = DeviationReport()
        count = min(len(features), len(self.catalog))

        for i in range(count):
            item = analyze_field(features[i], self.catalog[i])
            report.items.append(item)
            if item.category == Category.RED:
                report.is_life_threatening = True

        logger.info(
            f"Deviation analysis: {count} field(s) {report.counts()}, "
            f"missing={report.missing_count}, life_threatening={report.is_life_threatening}"
        )
        if count < len(self.catalog):
            logger.warning(f"Only {count} of {len(self.catalog)} catalog fields were analyzed")

        return report
