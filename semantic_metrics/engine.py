"""Recursive metric evaluation with a per-call memo cache."""
from __future__ import annotations

import logging
import math
from typing import Any, Iterable, MutableMapping, Sequence, assert_never

from cachetools import LRUCache

from .config import settings
from .errors import (
    UnknownFactMeasure,
    UnknownFactTable,
    UnknownMetric,
    UnknownTransform,
    UnsupportedAggregation,
)
from .filters import apply_context, context_key
from .models import (
    ContextTransformMetric,
    DerivedMetric,
    ExpressionMetric,
    FactMeasureMetric,
    FilterContext,
    Row,
    SemanticModel,
)
from .rowset import RowSet

_logger = logging.getLogger(__name__)

EvalCache = MutableMapping[tuple[str, bytes], "float | None"]


def new_cache() -> EvalCache:
    """One cache per top-level call; never share it between calls."""
    return LRUCache(maxsize=settings.eval_cache_maxsize)


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return 0 if math.isnan(value) else value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0
    return 0


def _fact_rows(model: SemanticModel, fact_table: str, grain: Sequence[str] | None, context: FilterContext) -> RowSet[Row]:
    fact_def = model.fact_tables.get(fact_table)
    if fact_def is None:
        raise UnknownFactTable(fact_table)
    rows = model.db.facts.get(fact_table)
    if rows is None:
        raise UnknownFactTable(fact_table, reason="missing rows for fact table")
    return apply_context(rows, context, grain if grain is not None else fact_def.grain)


def _eval_fact_measure(model: SemanticModel, metric: FactMeasureMetric, context: FilterContext) -> float | None:
    q = _fact_rows(model, metric.fact_table, metric.grain, context)
    measure = model.fact_tables[metric.fact_table].measures.get(metric.fact_column)
    if measure is None:
        raise UnknownFactMeasure(metric.fact_table, metric.fact_column)

    col = measure.column
    agg = metric.agg or measure.default_agg
    if agg == "sum":
        return q.sum(lambda r: _number(r.get(col)))
    if agg == "avg":
        return q.average(lambda r: _number(r.get(col)))
    if agg == "count":
        return q.count()
    raise UnsupportedAggregation(agg)


def evaluate_metric(
    model: SemanticModel,
    name: str,
    context: FilterContext | None = None,
    cache: EvalCache | None = None,
) -> float | None:
    """
    Evaluate `name` under `context`.

    Results, including None, are memoised in `cache` under
    (name, canonical context), so shared dependencies are computed once per
    distinct context. Pass the same cache through nested calls.
    """
    context = context or {}
    if cache is None:
        cache = new_cache()

    key = (name, context_key(context))
    if key in cache:
        _logger.debug("cache hit %s %s", name, key[1])
        return cache[key]

    metric = model.metrics.get(name)
    if metric is None:
        raise UnknownMetric(name)

    _logger.debug("evaluating %s (%s) %s", name, metric.kind, key[1])
    value: float | None
    if isinstance(metric, FactMeasureMetric):
        value = _eval_fact_measure(model, metric, context)
    elif isinstance(metric, ExpressionMetric):
        q = _fact_rows(model, metric.fact_table, metric.grain, context)
        value = metric.expression(q, model.db, context)
    elif isinstance(metric, DerivedMetric):
        dep_values = {dep: evaluate_metric(model, dep, context, cache) for dep in metric.dependencies}
        value = metric.eval_from_deps(dep_values, model.db, context)
    elif isinstance(metric, ContextTransformMetric):
        transform = model.transforms.get(metric.transform)
        if transform is None:
            raise UnknownTransform(metric.transform)
        value = evaluate_metric(model, metric.base_measure, transform(context), cache)
    else:
        assert_never(metric)

    cache[key] = value
    return value


def evaluate_metrics(
    model: SemanticModel,
    names: Iterable[str],
    context: FilterContext | None = None,
) -> dict[str, float | None]:
    cache = new_cache()
    return {name: evaluate_metric(model, name, context, cache) for name in names}
