from __future__ import annotations

import math
from typing import Mapping

from .models import Database, DimensionLabel, Row


def format_value(value: float | None, fmt: str | None = None) -> str | None:
    if value is None:
        return None
    n = float(value)
    if math.isnan(n):
        return None
    if fmt == "currency":
        return f"${n:.2f}"
    if fmt == "integer":
        return f"{n:.0f}"
    if fmt == "percent":
        return f"{n:.2f}%"
    if n.is_integer():
        return str(int(n))
    return str(n)


def enrich_dimensions(key: Row, db: Database, dimension_config: Mapping[str, DimensionLabel]) -> Row:
    """Add a label column for each configured dimension key present in `key`."""
    result = dict(key)
    for dim_key, cfg in dimension_config.items():
        if key.get(dim_key) is None:
            continue
        table = db.dimensions.get(cfg.table)
        if not table:
            continue
        match = next((d for d in table if d.get(cfg.key) == key[dim_key]), None)
        if match is not None:
            result[cfg.label_alias] = match.get(cfg.label_prop)
    return result
