"""
Transform diagnosis-level encounters into one patient-level row per pseudonym.

Two phases over the same rows:
1. index every patient's distinct diagnoses and sort them
2. emit the first-seen row of each patient, filling the two diagnosis slots
   from the index
"""

from __future__ import annotations
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterable
import numpy as np
import pandas as pd
from clinical_anon.core.config import DEFAULT_SETTINGS, Settings
from clinical_anon.models.hierarchy import OrderedDomain

log = logging.getLogger(__name__)

DiagnosisKey = Callable[[str], Any]

def hierarchy_order(domain: OrderedDomain) -> DiagnosisKey:
    """Sort key ranking codes by their leaf position; unknown codes go last, by text."""
    rank: dict[str, int] = {}
    for i, value in enumerate(domain):
        rank.setdefault(value, i)
    unknown = len(rank)

    def key(code: str) -> tuple[int, str]:
        return rank.get(code, unknown), code

    return key

def _text(value) -> str | None:
    if value is None or value is pd.NA:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    return str(value)

def round_distance(value, settings: Settings = DEFAULT_SETTINGS) -> str:
    """Round half up to a whole number; missing values become the absent marker."""
    if value is None or pd.isna(value):
        return settings.missing_value
    return str(Decimal(str(float(value))).quantize(Decimal(1), rounding=ROUND_HALF_UP))

def index_diagnoses(
    df: pd.DataFrame,
    settings: Settings = DEFAULT_SETTINGS,
    key: DiagnosisKey | None = None,
) -> dict[str, list[str]]:
    """Distinct diagnoses per pseudonym, sorted by ``key`` (plain string order by default)."""
    found: dict[str, set[str]] = {}
    pseudonyms = df[settings.field_pseudonym].tolist()
    diagnoses = df[settings.field_diagnosis].tolist()

    for pseudonym, diagnosis in zip(pseudonyms, diagnoses):
        codes = found.setdefault(str(pseudonym), set())
        diagnosis = _text(diagnosis)
        if diagnosis is not None:
            codes.add(diagnosis)

    return {p: sorted(codes, key=key) for p, codes in found.items()}

def _slots(codes: Iterable[str], missing: str) -> tuple[str, str]:
    codes = list(codes)
    first = codes[0] if codes else missing
    second = codes[1] if len(codes) > 1 else missing
    return first, second

def to_patient_level(
    df: pd.DataFrame,
    settings: Settings = DEFAULT_SETTINGS,
    diagnosis_key: DiagnosisKey | None = None,
) -> pd.DataFrame:
    header = list(settings.patient_header)
    diagnoses = index_diagnoses(df, settings, diagnosis_key)
    log.info("Indexed diagnoses for %d patients from %d rows", len(diagnoses), len(df))

    columns = {
        name: df[name].tolist()
        for name in (
            settings.field_pseudonym,
            settings.field_age,
            settings.field_sex,
            settings.field_center_name,
            settings.field_center_zip,
            settings.field_patient_zip,
            settings.field_distance_linear,
            settings.field_distance_route,
        )
    }

    rows = []
    done: set[str] = set()
    for i in range(len(df)):
        pseudonym = str(columns[settings.field_pseudonym][i])
        if pseudonym in done:
            continue

        diagnosis_1, diagnosis_2 = _slots(diagnoses[pseudonym], settings.missing_value)
        rows.append([
            pseudonym,
            _text(columns[settings.field_age][i]),
            _text(columns[settings.field_sex][i]),
            _text(columns[settings.field_center_name][i]),
            _text(columns[settings.field_center_zip][i]),
            _text(columns[settings.field_patient_zip][i]),
            diagnosis_1,
            diagnosis_2,
            round_distance(columns[settings.field_distance_linear][i], settings),
            round_distance(columns[settings.field_distance_route][i], settings),
        ])
        done.add(pseudonym)

    out = pd.DataFrame(rows, columns=header, dtype=object)
    log.info("Patient-level transform complete: %d patients", len(out))
    return out
