from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Literal, Mapping, Union

from .rowset import RowSet

Row = dict[str, Any]
Aggregation = Literal["sum", "avg", "count"]

# A filter value is a primitive (equality) or a range mapping with any of
# from/to/gte/lte/gt/lt.
FilterValue = Union[str, int, float, bool, Mapping[str, Any]]
FilterContext = Mapping[str, FilterValue]
ContextTransform = Callable[[FilterContext], FilterContext]


@dataclass
class Database:
    dimensions: dict[str, list[Row]] = field(default_factory=dict)
    facts: dict[str, list[Row]] = field(default_factory=dict)


@dataclass(frozen=True)
class MeasureDef:
    column: str
    default_agg: Aggregation = "sum"
    format: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class FactTableDef:
    grain: tuple[str, ...]
    measures: Mapping[str, MeasureDef]


@dataclass(frozen=True)
class DimensionLabel:
    """Join a dimension key to a label column of a dimension table."""

    table: str
    key: str
    label_prop: str
    label_alias: str


Aggregator = Callable[[RowSet, Database, FilterContext], "float | None"]
Combinator = Callable[[Mapping[str, "float | None"], Database, FilterContext], "float | None"]


@dataclass(frozen=True, kw_only=True)
class MetricBase:
    kind: ClassVar[str]

    name: str
    description: str | None = None
    format: str | None = None


@dataclass(frozen=True, kw_only=True)
class FactMeasureMetric(MetricBase):
    """Single aggregation over one measure column of a fact table."""

    kind: ClassVar[str] = "factMeasure"

    fact_table: str
    fact_column: str
    agg: str | None = None
    grain: tuple[str, ...] | None = None


@dataclass(frozen=True, kw_only=True)
class ExpressionMetric(MetricBase):
    """Caller-supplied aggregator over the grain-filtered fact rows."""

    kind: ClassVar[str] = "expression"

    fact_table: str
    expression: Aggregator
    grain: tuple[str, ...] | None = None


@dataclass(frozen=True, kw_only=True)
class DerivedMetric(MetricBase):
    """Combines the values of other metrics under the same context."""

    kind: ClassVar[str] = "derived"

    dependencies: tuple[str, ...]
    eval_from_deps: Combinator


@dataclass(frozen=True, kw_only=True)
class ContextTransformMetric(MetricBase):
    """Evaluates a base metric under a transformed context (YTD, last year...)."""

    kind: ClassVar[str] = "contextTransform"

    base_measure: str
    transform: str


MetricDef = Union[FactMeasureMetric, ExpressionMetric, DerivedMetric, ContextTransformMetric]


@dataclass
class SemanticModel:
    """Everything an evaluation call reads. Treated as an immutable snapshot."""

    db: Database
    fact_tables: Mapping[str, FactTableDef]
    metrics: Mapping[str, MetricDef]
    transforms: Mapping[str, ContextTransform] = field(default_factory=dict)
    dimension_config: Mapping[str, DimensionLabel] = field(default_factory=dict)


def metric_edges(metric: MetricDef) -> tuple[str, ...]:
    if isinstance(metric, DerivedMetric):
        return tuple(metric.dependencies)
    if isinstance(metric, ContextTransformMetric):
        return (metric.base_measure,)
    return ()
