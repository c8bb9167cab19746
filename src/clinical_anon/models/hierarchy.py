"""
Generalization hierarchies and the ordered categorical domains derived from them.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator
import pandas as pd
from clinical_anon.core.errors import LoadError


@dataclass(frozen=True)
class Hierarchy:
    """A loaded generalization hierarchy: one row per leaf, leaf value first."""

    name: str
    rows: tuple[tuple[str, ...], ...]

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def depth(self) -> int:
        return max((len(r) for r in self.rows), default=0)


@dataclass(frozen=True, eq=True)
class OrderedDomain:
    """
    Totally ordered category values for one column.

    Duplicates are kept as given. Build one instance per column, never share.
    """

    values: tuple[str, ...]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __contains__(self, value: object) -> bool:
        return value in self.values

    def dtype(self) -> pd.CategoricalDtype:
        # pandas categories must be unique; the first occurrence keeps its rank
        return pd.CategoricalDtype(categories=list(dict.fromkeys(self.values)), ordered=True)


def domain_from_hierarchy(hierarchy: Hierarchy) -> OrderedDomain:
    """Leaf values of ``hierarchy`` in row order. Returns a new domain on every call."""
    values = []
    for i, row in enumerate(hierarchy.rows):
        if not row:
            raise LoadError(f"Hierarchy '{hierarchy.name}' row {i} has no leaf value")
        values.append(row[0])
    return OrderedDomain(tuple(values))
