"""Demo semantic model: seed assets plus metrics that need code."""
from __future__ import annotations

from typing import Iterable

from .assets import load_database, load_dimension_config, load_fact_tables, load_seed_metrics
from .models import (
    ContextTransformMetric,
    DerivedMetric,
    ExpressionMetric,
    MetricDef,
    SemanticModel,
)
from .registry import MetricRegistry
from .time_intelligence import default_transforms

METRIC_BUNDLE = [
    "totalSalesAmount",
    "totalSalesQuantity",
    "totalBudget",
    "salesAmountYearRegion",
    "pricePerUnit",
    "salesVsBudgetPct",
    "salesAmountYTD",
    "salesAmountLastYear",
    "salesAmountYTDLastYear",
    "budgetYTD",
    "budgetLastYear",
    "salesVsBudgetPctYTD",
]


def _price_per_unit(q, db, context):
    amount = q.sum(lambda r: r.get("amount") or 0)
    qty = q.sum(lambda r: r.get("quantity") or 0)
    return amount / qty if qty else None


def pct_of(numerator: str, denominator: str):
    def combine(deps, db, context):
        n = deps.get(numerator) or 0
        d = deps.get(denominator) or 0
        if not d:
            return None
        return n / d * 100

    return combine


def _transformed(name: str, base: str, transform: str, description: str) -> ContextTransformMetric:
    return ContextTransformMetric(
        name=name,
        base_measure=base,
        transform=transform,
        description=description,
        format="currency",
    )


def code_metrics() -> list[MetricDef]:
    return [
        ExpressionMetric(
            name="pricePerUnit",
            description="Sales amount / quantity over the current context.",
            fact_table="sales",
            format="currency",
            expression=_price_per_unit,
        ),
        DerivedMetric(
            name="salesVsBudgetPct",
            description="Total sales / total budget.",
            dependencies=("totalSalesAmount", "totalBudget"),
            format="percent",
            eval_from_deps=pct_of("totalSalesAmount", "totalBudget"),
        ),
        _transformed("salesAmountYTD", "totalSalesAmount", "ytd", "YTD of total sales amount."),
        _transformed("salesAmountLastYear", "totalSalesAmount", "lastYear", "Total sales amount for previous year."),
        _transformed(
            "salesAmountYTDLastYear", "totalSalesAmount", "ytdLastYear", "YTD of total sales amount in previous year."
        ),
        _transformed("budgetYTD", "totalBudget", "ytd", "YTD of total budget (matches full year for an annual budget)."),
        _transformed("budgetLastYear", "totalBudget", "lastYear", "Total budget in previous year."),
        DerivedMetric(
            name="salesVsBudgetPctYTD",
            description="YTD sales / YTD budget.",
            dependencies=("salesAmountYTD", "budgetYTD"),
            format="percent",
            eval_from_deps=pct_of("salesAmountYTD", "budgetYTD"),
        ),
    ]


def build_demo_model(overrides: Iterable[MetricDef] = ()) -> SemanticModel:
    """Fresh model per call; overrides replace same-named metrics."""
    registry = MetricRegistry([*load_seed_metrics(), *code_metrics()]).with_overrides(overrides)
    return SemanticModel(
        db=load_database(),
        fact_tables=load_fact_tables(),
        metrics=registry,
        transforms=default_transforms(),
        dimension_config=load_dimension_config(),
    )
