from __future__ import annotations
from dataclasses import dataclass, replace
from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

# project paths
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent
DATA_DIR      = Path(os.getenv("ANON_DATA_DIR", BASE_DIR / "data"))
RAW_DIR       = DATA_DIR / "raw"
OUTPUT_DIR    = DATA_DIR / "output"
LOGS_DIR      = DATA_DIR / "logs"
HIERARCHY_DIR = Path(os.getenv("ANON_HIERARCHY_DIR", DATA_DIR / "hierarchies"))

# input files
INPUT_FILE = Path(os.getenv("ANON_INPUT_FILE", RAW_DIR / "encounters.csv"))

# output files
PATIENTS_FILE = Path(os.getenv("ANON_PATIENTS_FILE", OUTPUT_DIR / "patients.csv"))
OUTPUT_FILE   = Path(os.getenv("ANON_OUTPUT_FILE", OUTPUT_DIR / "anonymized.csv"))

# anonymization engine as "module:attr", or "passthrough" for a dry run
ENGINE = os.getenv("ANON_ENGINE")

DIAGNOSIS_ORDERS = ("lexicographic", "hierarchy")


@dataclass(frozen=True)
class Settings:
    """Run constants shared by every stage. Passed explicitly, never mutated."""

    # raw and patient-level field names
    field_pseudonym: str = "patient_id"
    field_age: str = "age"
    field_sex: str = "gender"
    field_center_name: str = "hospital_name"
    field_center_zip: str = "hospital_zip"
    field_patient_zip: str = "patient_zip"
    field_diagnosis: str = "diagnosis"
    field_diagnosis_1: str = "diagnosis_1"
    field_diagnosis_2: str = "diagnosis_2"
    field_distance_linear: str = "bird_flight_distance"
    field_distance_route: str = "route_distance"

    sex_values: tuple[str, ...] = ("male", "female", "other", "unknown")

    # literal marker written for absent values
    missing_value: str = "NULL"
    missing_tokens: tuple[str, ...] = ("", "NULL")

    separator: str = ";"
    decimal_point: str = "."
    distance_format: str = "##0.##"
    encoding: str = "utf-8"

    risk_threshold: int = 5

    hierarchy_dir: Path = HIERARCHY_DIR
    hierarchy_files: tuple[tuple[str, str], ...] = (
        ("age", "age.csv"),
        ("diagnosis", "diagnosis.csv"),
        ("distance", "distance.csv"),
        ("zip", "zip.csv"),
    )
    diagnosis_order: str = "lexicographic"

    @property
    def encounter_header(self) -> tuple[str, ...]:
        return (
            self.field_pseudonym,
            self.field_age,
            self.field_sex,
            self.field_center_name,
            self.field_center_zip,
            self.field_patient_zip,
            self.field_diagnosis,
            self.field_distance_linear,
            self.field_distance_route,
        )

    @property
    def patient_header(self) -> tuple[str, ...]:
        return (
            self.field_pseudonym,
            self.field_age,
            self.field_sex,
            self.field_center_name,
            self.field_center_zip,
            self.field_patient_zip,
            self.field_diagnosis_1,
            self.field_diagnosis_2,
            self.field_distance_linear,
            self.field_distance_route,
        )

    def with_overrides(self, **changes) -> "Settings":
        return replace(self, **changes)


DEFAULT_SETTINGS = Settings()


def load_settings() -> Settings:
    """Build Settings from the environment (.env is loaded at import)."""
    separator = os.getenv("ANON_SEPARATOR", DEFAULT_SETTINGS.separator)
    if len(separator) != 1:
        raise ValueError(f"ANON_SEPARATOR must be a single character, got {separator!r}")

    order = os.getenv("ANON_DIAGNOSIS_ORDER", DEFAULT_SETTINGS.diagnosis_order).strip().lower()
    if order not in DIAGNOSIS_ORDERS:
        raise ValueError(f"ANON_DIAGNOSIS_ORDER must be one of {DIAGNOSIS_ORDERS}, got {order!r}")

    try:
        threshold = int(os.getenv("ANON_RISK_THRESHOLD", DEFAULT_SETTINGS.risk_threshold))
    except ValueError as e:
        raise ValueError("ANON_RISK_THRESHOLD must be an integer") from e

    return DEFAULT_SETTINGS.with_overrides(
        separator=separator,
        encoding=os.getenv("ANON_ENCODING", DEFAULT_SETTINGS.encoding),
        risk_threshold=threshold,
        diagnosis_order=order,
        hierarchy_dir=HIERARCHY_DIR,
    )
