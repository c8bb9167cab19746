"""
Write a tabular result to delimited text. Values are written as they are; no
reordering, filtering or formatting happens here.
"""

from __future__ import annotations
import logging
from pathlib import Path
import pandas as pd
from clinical_anon.core.config import DEFAULT_SETTINGS, Settings
from clinical_anon.core.errors import WriteError

log = logging.getLogger(__name__)

def write_output(df: pd.DataFrame, path: str | Path, settings: Settings = DEFAULT_SETTINGS) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(
            path,
            sep=settings.separator,
            index=False,
            na_rep=settings.missing_value,
            encoding=settings.encoding,
        )
    except OSError as e:
        log.error("Failed to write %s: %s", path, e)
        raise WriteError(f"Cannot write {path}: {e}") from e

    log.info("Saved output: %s (%d rows)", path, len(df))
    return path
