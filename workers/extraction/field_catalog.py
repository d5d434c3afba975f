"""
Lab Field Catalog.

Ordered set of the lab fields the triage pipeline extracts, each with its
normal range. The order is the positional meaning of the feature vector:
the extraction prompt and the deviation analyzer both read it from here.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabFieldDefinition:
    """A lab field and its clinically normal range."""
    name: str
    lower_bound: float
    upper_bound: float

    @property
    def normal_range(self) -> Tuple[float, float]:
        return self.lower_bound, self.upper_bound

    def contains(self, value: float) -> bool:
        """Inclusive on both ends."""
        return self.lower_bound <= value <= self.upper_bound


# (name, lower, upper) in feature vector order. Do not re-sort.
DEFAULT_LAB_FIELDS: Tuple[Tuple[str, float, float], ...] = (
    ("Hemoglobin (g/dL)", 12.0, 16.0),
    ("Hematocrit (%)", 36.0, 48.0),
    ("RBC Count (million/uL)", 4.2, 5.4),
    ("WBC Count (10^3/uL)", 4.0, 11.0),
    ("Platelet Count (10^3/uL)", 150.0, 450.0),
    ("MCV (fL)", 80.0, 100.0),
    ("MCH (pg)", 27.0, 33.0),
    ("MCHC (g/dL)", 32.0, 36.0),
    ("RDW (%)", 11.5, 14.5),
    ("Neutrophils (%)", 40.0, 70.0),
    ("Lymphocytes (%)", 20.0, 40.0),
    ("Monocytes (%)", 2.0, 8.0),
    ("Eosinophils (%)", 1.0, 4.0),
    ("Basophils (%)", 0.5, 1.0),
    ("Glucose (mg/dL)", 70.0, 100.0),
    ("Creatinine (mg/dL)", 0.6, 1.2),
    ("Sodium (mmol/L)", 135.0, 145.0),
    ("Potassium (mmol/L)", 3.5, 5.0),
    ("Blood Urea Nitrogen (mg/dL)", 7.0, 20.0),
)


class FieldCatalog:
    """
    Immutable, ordered sequence of LabFieldDefinition.

    Usage:
        catalog = FieldCatalog.default()
        catalog.names()        # the names in vector order
        catalog[4].normal_range
    """

    def __init__(self, fields: Sequence[LabFieldDefinition]):
        if not fields:
            raise ValueError("Field catalog must contain at least one field")

        seen = set()
        for field in fields:
            if field.name in seen:
                raise ValueError(f"Duplicate lab field in catalog: {field.name}")
            if field.lower_bound > field.upper_bound:
                raise ValueError(
                    f"Invalid range for {field.name}: "
                    f"{field.lower_bound} > {field.upper_bound}"
                )
            seen.add(field.name)

        self._fields: Tuple[LabFieldDefinition, ...] = tuple(fields)

    @classmethod
    def from_triples(cls, triples: Sequence[Tuple[str, float, float]]) -> "FieldCatalog":
        return cls([
            LabFieldDefinition(name=name, lower_bound=float(lower), upper_bound=float(upper))
            for name, lower, upper in triples
        ])

    @classmethod
    def default(cls) -> "FieldCatalog":
        return cls.from_triples(DEFAULT_LAB_FIELDS)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "FieldCatalog":
        """
        Load a catalog from YAML.

        Expected format (list order is vector order):
            fields:
              - name: Hemoglobin (g/dL)
                range: [12.0, 16.0]
        """
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        entries = data.get('fields', [])
        triples = []
        for entry in entries:
            lower, upper = entry['range']
            triples.append((entry['name'], lower, upper))

        logger.info(f"Loaded {len(triples)} lab fields from {yaml_path}")
        return cls.from_triples(triples)

    def names(self) -> List[str]:
        return [field.name for field in self._fields]

    def __getitem__(self, index: int) -> LabFieldDefinition:
        return self._fields[index]

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[LabFieldDefinition]:
        return iter(self._fields)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FieldCatalog):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self) -> int:
        return hash(self._fields)

    def __repr__(self) -> str:
        return f"FieldCatalog({len(self._fields)} fields)"


@lru_cache()
def get_field_catalog(yaml_path: Optional[str] = None) -> FieldCatalog:
    """Get the configured catalog: the YAML override if one is set, else the default."""
    if yaml_path is None:
        from backend.core.config import get_settings
        yaml_path = get_settings().catalog.path

    if yaml_path:
        return FieldCatalog.from_yaml(yaml_path)
    return FieldCatalog.default()
