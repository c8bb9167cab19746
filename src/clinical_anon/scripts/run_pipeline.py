"""
CLI wrapper for the anonymization pipeline.
Paths, settings and the engine come from the environment (.env), see core/config.py.
Run with:
    ANON_ENGINE=mypackage.engines:ArxEngine python -m clinical_anon.scripts.run_pipeline
"""
import logging
from clinical_anon.core.config import ENGINE, INPUT_FILE, OUTPUT_FILE, PATIENTS_FILE, load_settings
from clinical_anon.core.logging_setup import setup_logging
from clinical_anon.services.engine import load_engine
from clinical_anon.services.pipeline import run_pipeline

def main(engine_target: str | None = ENGINE):
    setup_logging()
    log = logging.getLogger(__name__)

    log.info("Starting anonymization pipeline")
    settings = load_settings()
    engine = load_engine(engine_target)
    result = run_pipeline(INPUT_FILE, OUTPUT_FILE, engine, settings=settings, patients_path=PATIENTS_FILE)

    log.info(f"Pipeline complete: {len(result)} rows written to {OUTPUT_FILE}")

if __name__ == "__main__":
    main()
