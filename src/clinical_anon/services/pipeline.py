"""
Pipeline service - orchestrates ingestion, consolidation, anonymization and output
"""
from __future__ import annotations
import logging
from pathlib import Path
import pandas as pd
from clinical_anon.core.config import DEFAULT_SETTINGS, Settings
from clinical_anon.extract.extract_encounters import read_encounters
from clinical_anon.extract.extract_hierarchies import load_hierarchies
from clinical_anon.load.write_output import write_output
from clinical_anon.models.hierarchy import domain_from_hierarchy
from clinical_anon.models.schema import build_ingestion_schema
from clinical_anon.services.engine import AnonymizationEngine, PassthroughEngine
from clinical_anon.transforms.transform_patients import hierarchy_order, to_patient_level

log = logging.getLogger(__name__)

def run_pipeline(
    input_path: str | Path,
    output_path: str | Path,
    engine: AnonymizationEngine | None = None,
    settings: Settings | None = None,
    patients_path: str | Path | None = None,
) -> pd.DataFrame:
    """Execute one run; nothing is written unless every earlier step succeeded."""
    settings = settings or DEFAULT_SETTINGS
    engine = engine or PassthroughEngine()
    try:
        log.info("Loading hierarchies from %s", settings.hierarchy_dir)
        hierarchies = load_hierarchies(settings)

        schema = build_ingestion_schema(hierarchies, settings)
        encounters = read_encounters(input_path, schema, settings)

        key = None
        if settings.diagnosis_order == "hierarchy":
            key = hierarchy_order(domain_from_hierarchy(hierarchies["diagnosis"]))
        patients = to_patient_level(encounters, settings, key)

        log.info("Anonymizing %d patients with %s", len(patients), type(engine).__name__)
        result = engine.anonymize(patients, hierarchies, settings)

        # both files only once the engine has succeeded
        if patients_path is not None:
            write_output(patients, patients_path, settings)
        write_output(result, output_path, settings)
        log.info("Pipeline complete: %d encounter rows -> %d output rows", len(encounters), len(result))
        return result

    except Exception as e:
        log.error(f"Anonymization pipeline failed: {e}", exc_info=True)
        raise
