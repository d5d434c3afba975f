"""
Feature Extraction Stage.

Asks the structured-extraction model for the catalog's fields as a fixed
order numeric vector and parses the reply. A missing or malformed reply
yields an empty vector instead of failing the request; absent fields are
0 by contract with the model.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from workers.extraction.field_catalog import FieldCatalog
from workers.extraction.prompts import get_feature_extraction_prompt

logger = logging.getLogger(__name__)

MISSING_VALUE = 0.0


@dataclass
class FeatureExtractionResult:
    """Parsed vector plus the model reply relayed to the scoring service."""
    features: List[float] = field(default_factory=list)
    raw_response: Optional[Dict[str, Any]] = None
    coerced_positions: List[int] = field(default_factory=list)

    @property
    def payload(self) -> Dict[str, Any]:
        """Request body for the scoring service: the model reply as received."""
        if isinstance(self.raw_response, dict):
            return self.raw_response
        return {"features": []}


def _to_number(value: Any) -> Optional[float]:
    # bool is an int subclass; true/false are not lab values
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(',', ''))
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_features(response: Optional[Dict[str, Any]], max_length: int) -> FeatureExtractionResult:
    """
    Convert the model's JSON object into a feature vector.

    Args:
        response: Parsed JSON object from the model (or None)
        max_length: Catalog length; longer vectors are truncated

    Returns:
        FeatureExtractionResult (features may be empty or short)
    """
    if not response:
        logger.warning("Structured extraction returned nothing, using empty feature vector")
        return FeatureExtractionResult(features=[], raw_response=response)

    raw_features = response.get('features')
    if not isinstance(raw_features, list):
        logger.warning("Structured extraction response has no 'features' list, using empty vector")
        return FeatureExtractionResult(features=[], raw_response=response)

    if len(raw_features) > max_length:
        logger.warning(f"Model returned {len(raw_features)} features, truncating to {max_length}")
        raw_features = raw_features[:max_length]
    elif len(raw_features) < max_length:
        logger.warning(f"Model returned {len(raw_features)} of {max_length} features")

    features = []
    coerced = []
    for i, value in enumerate(raw_features):
        number = _to_number(value)
        if number is None:
            coerced.append(i)
            number = MISSING_VALUE
        features.append(number)

    if coerced:
        logger.warning(f"Non-numeric feature values at positions {coerced} replaced with 0")

    return FeatureExtractionResult(features=features, raw_response=response, coerced_positions=coerced)


class FeatureExtractionStage:
    """
    Builds the ordered-field instruction, calls the extractor and parses the reply.

    Args:
        extractor: object with extract(prompt) -> Optional[dict]
        catalog: FieldCatalog defining field order
    """

    def __init__(self, extractor, catalog: FieldCatalog):
        self.extractor = extractor
        self.catalog = catalog

    def build_prompt(self, raw_text: str) -> str:
        return get_feature_extraction_prompt(raw_text, self.catalog.names())

    def run(self, raw_text: str) -> FeatureExtractionResult:
        prompt = self.build_prompt(raw_text)
        response = self.extractor.extract(prompt)
        result = parse_features(response, max_length=len(self.catalog))

        found = sum(1 for v in result.features if v != MISSING_VALUE)
        logger.info(f"Feature extraction: {len(result.features)} values, {found} non-zero")
        return result
