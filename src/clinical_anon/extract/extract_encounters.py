"""
Extract diagnosis-level encounters from a delimited file and type every column
according to the ingestion schema:
- Source columns are mapped to schema columns by position (header row is skipped)
- Missing tokens become nulls
- Any cell that does not fit its column type aborts the load
"""

from __future__ import annotations
import logging
from pathlib import Path
import numpy as np
import pandas as pd
from clinical_anon.core.config import DEFAULT_SETTINGS, Settings
from clinical_anon.core.errors import LoadError, SchemaError
from clinical_anon.models.schema import ColumnKind, ColumnSpec

log = logging.getLogger(__name__)

MAX_REPORTED_ROWS = 5

def _empty_column(spec: ColumnSpec, index: pd.Index) -> pd.Series:
    """All-null column for an optional spec the source does not carry."""
    if spec.kind is ColumnKind.ORDERED and spec.domain is not None:
        return pd.Series(index=index, dtype=spec.domain.dtype())
    dtypes = {ColumnKind.STRING: "string", ColumnKind.INTEGER: "Int64", ColumnKind.DECIMAL: "float64"}
    return pd.Series(index=index, dtype=dtypes.get(spec.kind, "object"))

def _fail(spec: ColumnSpec, bad: pd.Series, reason: str) -> None:
    rows = bad[bad].index.tolist()
    shown = ", ".join(str(r) for r in rows[:MAX_REPORTED_ROWS])
    more = f" (+{len(rows) - MAX_REPORTED_ROWS} more)" if len(rows) > MAX_REPORTED_ROWS else ""
    raise SchemaError(f"Column '{spec.name}': {reason} at rows {shown}{more}")

def _to_number(s: pd.Series, missing: pd.Series, decimal_point: str) -> pd.Series:
    text = s.where(~missing, None)
    if decimal_point != ".":
        text = text.str.replace(decimal_point, ".", regex=False)
    return pd.to_numeric(text, errors="coerce")

def coerce_column(s: pd.Series, spec: ColumnSpec, settings: Settings = DEFAULT_SETTINGS) -> pd.Series:
    s = s.astype(str).str.strip()
    missing = s.isin(settings.missing_tokens)

    if not spec.nullable and missing.any():
        _fail(spec, missing, "missing value in non-nullable column")

    if spec.kind is ColumnKind.STRING:
        return s.where(~missing, pd.NA).astype("string")

    if spec.kind is ColumnKind.INTEGER:
        num = _to_number(s, missing, ".")
        bad = ~missing & (num.isna() | (num % 1 != 0))
        if bad.any():
            _fail(spec, bad, "not an integer")
        return num.astype("Int64")

    if spec.kind is ColumnKind.DECIMAL:
        num = _to_number(s, missing, spec.decimal_point or ".")
        bad = ~missing & ~np.isfinite(num.astype("float64"))
        if bad.any():
            _fail(spec, bad, "not a finite decimal")
        return num.astype("float64")

    if spec.kind is ColumnKind.ORDERED:
        if spec.domain is None:
            raise SchemaError(f"Column '{spec.name}' is ordered but has no domain")
        bad = ~missing & ~s.isin(spec.domain.values)
        if bad.any():
            _fail(spec, bad, "value outside the declared domain")
        return s.where(~missing, None).astype(spec.domain.dtype())

    raise SchemaError(f"Column '{spec.name}' has unsupported kind {spec.kind!r}")

def read_encounters(
    path: str | Path,
    schema: list[ColumnSpec],
    settings: Settings = DEFAULT_SETTINGS,
) -> pd.DataFrame:
    path = Path(path)
    log.info("Loading encounters: %s", path)

    try:
        raw = pd.read_csv(
            path,
            sep=settings.separator,
            header=0,
            dtype=str,
            keep_default_na=False,
            encoding=settings.encoding,
        )
    except (OSError, UnicodeDecodeError, pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise LoadError(f"Cannot read encounters from {path}: {e}") from e

    absent = [spec.name for i, spec in enumerate(schema) if spec.required and i >= raw.shape[1]]
    if absent:
        raise SchemaError(
            f"Required columns {absent} missing from {path.name}, found {raw.shape[1]}: {list(raw.columns)}"
        )

    raw = raw.fillna("")
    df = pd.DataFrame(index=raw.index)
    for i, spec in enumerate(schema):
        if i >= raw.shape[1]:
            log.warning("Optional column '%s' absent from %s", spec.name, path.name)
            df[spec.name] = _empty_column(spec, raw.index)
            continue
        df[spec.name] = coerce_column(raw.iloc[:, i], spec, settings)

    log.info("Extracted %d encounter rows", len(df))
    return df
