"""
Anonymization engine seam. The generalization search, risk scoring and
suppression belong to the engine; this package only hands it a typed
patient-level table and takes back the generalized one.
"""

from __future__ import annotations
import importlib
import logging
from typing import Mapping, Protocol
import pandas as pd
from clinical_anon.core.config import Settings
from clinical_anon.models.hierarchy import Hierarchy

log = logging.getLogger(__name__)


class AnonymizationEngine(Protocol):
    def anonymize(
        self,
        data: pd.DataFrame,
        hierarchies: Mapping[str, Hierarchy],
        settings: Settings,
    ) -> pd.DataFrame:
        ...


class PassthroughEngine:
    """Returns the input unchanged. For dry runs where no engine is installed."""

    def anonymize(
        self,
        data: pd.DataFrame,
        hierarchies: Mapping[str, Hierarchy],
        settings: Settings,
    ) -> pd.DataFrame:
        log.warning(
            "Passthrough engine: %d rows written without generalization (risk threshold %d not applied)",
            len(data), settings.risk_threshold,
        )
        return data.copy()


def load_engine(target: str | None) -> AnonymizationEngine:
    """
    Resolve ``module:attr`` to an engine instance. ``passthrough`` must be named
    explicitly; an unset target is an error rather than a silent dry run.
    """
    if not target or not target.strip():
        raise ValueError("No anonymization engine configured; set ANON_ENGINE to 'module:attr' or 'passthrough'")
    target = target.strip()
    if target.lower() == "passthrough":
        return PassthroughEngine()

    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ValueError(f"ANON_ENGINE must look like 'module:attr', got {target!r}")
    try:
        factory = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise ValueError(f"Cannot load anonymization engine {target!r}: {e}") from e

    engine = factory() if isinstance(factory, type) else factory
    if not callable(getattr(engine, "anonymize", None)):
        raise ValueError(f"{target!r} does not provide an anonymize() method")
    log.info("Using anonymization engine %s", target)
    return engine
