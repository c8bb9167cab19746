"""
Extract generalization hierarchies from CSV files (one row per leaf, no header).
"""

from __future__ import annotations
import logging
from functools import lru_cache
from pathlib import Path
import pandas as pd
from clinical_anon.core.config import DEFAULT_SETTINGS, Settings
from clinical_anon.core.errors import LoadError
from clinical_anon.models.hierarchy import Hierarchy

log = logging.getLogger(__name__)

def read_hierarchy(path: str | Path, name: str | None = None, settings: Settings = DEFAULT_SETTINGS) -> Hierarchy:
    path = Path(path)
    name = name or path.stem
    log.info("Loading hierarchy '%s': %s", name, path)

    try:
        df = pd.read_csv(
            path,
            sep=settings.separator,
            header=None,
            dtype=str,
            keep_default_na=False,
            encoding=settings.encoding,
        )
    except (OSError, UnicodeDecodeError, pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise LoadError(f"Cannot read hierarchy '{name}' from {path}: {e}") from e

    df = df.fillna("")  # short rows are padded by the parser
    rows = tuple(tuple(cell.strip() for cell in row) for row in df.itertuples(index=False, name=None))
    if not rows:
        raise LoadError(f"Hierarchy '{name}' in {path} has no rows")

    log.info("Extracted hierarchy '%s': %d leaves, %d levels", name, len(rows), df.shape[1])
    return Hierarchy(name=name, rows=rows)

@lru_cache(maxsize=8)
def _load_cached(settings: Settings) -> tuple[tuple[str, Hierarchy], ...]:
    return tuple(
        (name, read_hierarchy(Path(settings.hierarchy_dir) / file_name, name, settings))
        for name, file_name in settings.hierarchy_files
    )

def load_hierarchies(settings: Settings = DEFAULT_SETTINGS, use_cache: bool = True) -> dict[str, Hierarchy]:
    """Every configured hierarchy keyed by name. Hierarchies are immutable, so cached ones are shared."""
    if use_cache:
        return dict(_load_cached(settings))
    return dict(_load_cached.__wrapped__(settings))

def clear_hierarchy_cache() -> None:
    _load_cached.cache_clear()
