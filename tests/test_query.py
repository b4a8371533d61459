import pytest

from semantic_metrics.errors import UnknownFactTable, UnknownMetric
from semantic_metrics.models import Database, DerivedMetric, ExpressionMetric, FactMeasureMetric, FactTableDef, MeasureDef, SemanticModel
from semantic_metrics.query import QueryRequest, run_query
from semantic_metrics.registry import MetricRegistry


def _request(rows, filters=None, metrics=("totalSalesAmount",), fact="sales"):
    return QueryRequest(rows=rows, filters=filters or {}, metrics=list(metrics), fact_for_rows=fact)


def test_region_by_product(model):
    res = run_query(
        model,
        _request(["regionId", "productId"], {"year": 2025, "month": 2}, ["totalSalesAmount", "salesVsBudgetPct", "pricePerUnit"]),
    )
    assert res.rows[0] == {
        "regionId": "NA",
        "productId": 1,
        "regionName": "North America",
        "productName": "Widget A",
        "totalSalesAmount": "$950.00",
        "salesVsBudgetPct": "43.18%",
        "pricePerUnit": "$118.75",
    }
    assert res.rows[1]["regionName"] == "Europe"
    assert res.rows[1]["productName"] == "Widget B"
    assert res.rows[1]["totalSalesAmount"] == "$450.00"
    assert res.duration_ms >= 0


def test_region_only_uses_group_values_in_context(model):
    res = run_query(model, _request(["regionId"], {"year": 2025, "month": 2}, ["totalSalesAmount", "salesAmountYearRegion"]))
    assert [r["regionId"] for r in res.rows] == ["NA", "EU"]
    assert res.rows[0]["totalSalesAmount"] == "$950.00"
    assert res.rows[0]["salesAmountYearRegion"] == "$2550.00"
    assert res.rows[1]["salesAmountYearRegion"] == "$950.00"


def test_filtered_region_by_product(model):
    res = run_query(model, _request(["productId"], {"year": 2025, "month": 2, "regionId": "NA"}))
    assert res.rows == [{"productId": 1, "productName": "Widget A", "totalSalesAmount": "$950.00"}]


def test_one_row_per_distinct_projection_in_first_seen_order(model):
    res = run_query(model, _request(["year"]))
    assert [r["year"] for r in res.rows] == [2024, 2025]
    res = run_query(model, _request(["regionId", "productId"]))
    assert [(r["regionId"], r["productId"]) for r in res.rows] == [("NA", 1), ("NA", 2), ("EU", 1), ("EU", 2)]


def test_no_matching_rows(model):
    assert run_query(model, _request(["regionId"], {"year": 2030})).rows == []


def test_missing_dimension_values_form_their_own_group():
    model = SemanticModel(
        db=Database(facts={"t": [{"regionId": "NA", "v": 1}, {"v": 2}, {"regionId": None, "v": 3}]}),
        fact_tables={"t": FactTableDef(grain=("regionId",), measures={"v": MeasureDef(column="v")})},
        metrics=MetricRegistry([FactMeasureMetric(name="total", fact_table="t", fact_column="v")]),
    )
    res = run_query(model, _request(["regionId"], metrics=["total"], fact="t"))
    assert res.rows == [{"regionId": "NA", "total": "1"}, {"regionId": None, "total": "6"}]


def test_cache_is_shared_across_metrics_and_groups():
    calls = []

    def expression(q, db, context):
        calls.append(context)
        return q.sum(lambda r: r["v"])

    model = SemanticModel(
        db=Database(facts={"t": [{"k": "a", "v": 1}, {"k": "b", "v": 2}, {"k": "a", "v": 3}]}),
        fact_tables={"t": FactTableDef(grain=("k",), measures={"v": MeasureDef(column="v")})},
        metrics=MetricRegistry(
            [
                ExpressionMetric(name="x", fact_table="t", expression=expression),
                DerivedMetric(name="double", dependencies=("x",), eval_from_deps=lambda d, db, c: d["x"] * 2),
            ]
        ),
    )
    res = run_query(model, _request(["k"], metrics=["x", "double"], fact="t"))
    assert res.rows == [{"k": "a", "x": "4", "double": "8"}, {"k": "b", "x": "2", "double": "4"}]
    assert len(calls) == 2


def test_unknown_fact_table(model):
    with pytest.raises(UnknownFactTable):
        run_query(model, _request(["regionId"], fact="returns"))


def test_unknown_metric_aborts_query(model):
    with pytest.raises(UnknownMetric):
        run_query(model, _request(["regionId"], metrics=["totalSalesAmount", "ghost"]))


def test_group_values_override_base_filters(model):
    res = run_query(model, _request(["month"], {"year": 2025, "month": {"lte": 2}}))
    assert [(r["month"], r["totalSalesAmount"]) for r in res.rows] == [(1, "$2100.00"), (2, "$1400.00")]


def test_integral_floats_group_with_ints():
    model = SemanticModel(
        db=Database(facts={"t": [{"k": 2, "v": 1}, {"k": 2.0, "v": 4}, {"k": 3, "v": 5}]}),
        fact_tables={"t": FactTableDef(grain=("k",), measures={"v": MeasureDef(column="v")})},
        metrics=MetricRegistry([FactMeasureMetric(name="total", fact_table="t", fact_column="v")]),
    )
    res = run_query(model, _request(["k"], metrics=["total"], fact="t"))
    assert res.rows == [{"k": 2, "total": "5"}, {"k": 3, "total": "5"}]
