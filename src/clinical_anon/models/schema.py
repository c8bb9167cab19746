"""
Typed column schema for diagnosis-level ingestion.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Mapping
from clinical_anon.core.config import DEFAULT_SETTINGS, Settings
from clinical_anon.core.errors import LoadError
from clinical_anon.models.hierarchy import Hierarchy, OrderedDomain, domain_from_hierarchy


class ColumnKind(str, Enum):
    STRING  = "string"
    INTEGER = "integer"
    ORDERED = "ordered"
    DECIMAL = "decimal"


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    kind: ColumnKind
    domain: OrderedDomain | None = None
    fmt: str | None = None
    decimal_point: str | None = None
    required: bool = True   # column must exist in the source
    nullable: bool = True   # cells may hold a missing token


def _hierarchy(hierarchies: Mapping[str, Hierarchy], name: str) -> Hierarchy:
    try:
        return hierarchies[name]
    except KeyError:
        raise LoadError(f"Hierarchy '{name}' is not loaded") from None


def build_ingestion_schema(
    hierarchies: Mapping[str, Hierarchy],
    settings: Settings = DEFAULT_SETTINGS,
) -> list[ColumnSpec]:
    """
    Nine typed columns in source order.

    The two zip columns are backed by the same hierarchy but each gets its own
    domain instance.
    """
    zip_hierarchy = _hierarchy(hierarchies, "zip")
    diagnosis_hierarchy = _hierarchy(hierarchies, "diagnosis")

    def distance(name: str) -> ColumnSpec:
        return ColumnSpec(
            name, ColumnKind.DECIMAL,
            fmt=settings.distance_format, decimal_point=settings.decimal_point,
        )

    return [
        ColumnSpec(settings.field_pseudonym, ColumnKind.STRING, nullable=False),
        ColumnSpec(settings.field_age, ColumnKind.INTEGER),
        ColumnSpec(settings.field_sex, ColumnKind.ORDERED, domain=OrderedDomain(tuple(settings.sex_values))),
        ColumnSpec(settings.field_center_name, ColumnKind.STRING),
        ColumnSpec(settings.field_center_zip, ColumnKind.ORDERED, domain=domain_from_hierarchy(zip_hierarchy)),
        ColumnSpec(settings.field_patient_zip, ColumnKind.ORDERED, domain=domain_from_hierarchy(zip_hierarchy)),
        ColumnSpec(settings.field_diagnosis, ColumnKind.ORDERED, domain=domain_from_hierarchy(diagnosis_hierarchy)),
        distance(settings.field_distance_linear),
        distance(settings.field_distance_route),
    ]
