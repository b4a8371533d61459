from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from .config import settings
from .engine import evaluate_metric, new_cache
from .errors import UnknownFactTable
from .filters import apply_context, group_key, pick
from .formatting import enrich_dimensions, format_value
from .models import Row, SemanticModel

_logger = logging.getLogger(__name__)


class QueryRequest(BaseModel):
    rows: list[str] = Field(..., description="dimension keys for the row axis, e.g. regionId, productId")
    filters: dict[str, Any] = Field(default_factory=dict, description="base filter context")
    metrics: list[str] = Field(..., description="metric names to evaluate per row")
    fact_for_rows: str = Field(..., description="fact table used to find distinct row combinations")


@dataclass
class QueryResult:
    rows: list[Row]
    duration_ms: float


def _fact_columns(model: SemanticModel, fact_table: str, rows: list[Row]) -> list[str]:
    columns: dict[str, None] = {}
    fact_def = model.fact_tables.get(fact_table)
    if fact_def is not None:
        columns.update(dict.fromkeys(fact_def.grain))
    for r in rows:
        columns.update(dict.fromkeys(r))
    return list(columns)


def run_query(model: SemanticModel, request: QueryRequest) -> QueryResult:
    """
    Pivot: one output row per distinct combination of `request.rows` among
    the base-filtered fact rows, in first-seen order, with every requested
    metric evaluated under base filters + the row's dimension values.
    """
    start = time.perf_counter()

    fact_rows = model.db.facts.get(request.fact_for_rows)
    if fact_rows is None:
        raise UnknownFactTable(request.fact_for_rows)

    filters = request.filters
    filtered = apply_context(fact_rows, filters, _fact_columns(model, request.fact_for_rows, fact_rows))
    groups = filtered.group_by(lambda r: group_key(r, request.rows))

    cache = new_cache()
    result: list[Row] = []
    for g in groups:
        key_obj = pick(g.members[0], request.rows)
        row_context = {**filters, **{k: v for k, v in key_obj.items() if v is not None}}

        values: Row = {}
        for name in request.metrics:
            numeric = evaluate_metric(model, name, row_context, cache)
            values[name] = format_value(numeric, model.metrics[name].format)

        result.append({**enrich_dimensions(key_obj, model.db, model.dimension_config), **values})

    duration_ms = (time.perf_counter() - start) * 1000
    _logger.info(
        "run_query fact=%s rows=%s groups=%d metrics=%d took %.1fms",
        request.fact_for_rows,
        request.rows,
        len(result),
        len(request.metrics),
        duration_ms,
    )
    if duration_ms > settings.slow_query_ms:
        _logger.warning("slow run_query on %s: %.1fms", request.fact_for_rows, duration_ms)
    return QueryResult(rows=result, duration_ms=duration_ms)
