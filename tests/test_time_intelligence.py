from semantic_metrics.time_intelligence import default_transforms, last_year, make_ytd, ytd, ytd_last_year


def test_ytd_bounds_month():
    ctx = {"year": 2025, "month": 2, "regionId": "NA"}
    assert ytd(ctx) == {"year": 2025, "month": {"lte": 2}, "regionId": "NA"}
    assert ctx == {"year": 2025, "month": 2, "regionId": "NA"}


def test_ytd_passes_through_without_year_or_month():
    assert ytd({"year": 2025}) == {"year": 2025}
    assert ytd({"month": 3}) == {"month": 3}


def test_ytd_keeps_upper_bound_of_month_range():
    assert ytd({"year": 2025, "month": {"from": 1, "to": 6}})["month"] == {"lte": 6}
    assert ytd({"year": 2025, "month": {"lt": 4}})["month"] == {"lt": 4}


def test_last_year():
    ctx = {"year": 2025, "month": 2}
    assert last_year(ctx) == {"year": 2024, "month": 2}
    assert ctx["year"] == 2025
    assert last_year({"regionId": "EU"}) == {"regionId": "EU"}
    assert last_year({"year": {"from": 2024, "to": 2025}}) == {"year": {"from": 2023, "to": 2024}}


def test_ytd_last_year():
    assert ytd_last_year({"year": 2025, "month": 2}) == {"year": 2024, "month": {"lte": 2}}
    assert ytd_last_year({"year": 2025}) == {"year": 2025}


def test_custom_keys():
    fiscal_ytd = make_ytd(year_key="fy", month_key="period")
    assert fiscal_ytd({"fy": 2025, "period": 9}) == {"fy": 2025, "period": {"lte": 9}}


def test_default_transform_names():
    assert set(default_transforms()) == {"ytd", "lastYear", "ytdLastYear"}


def test_ytd_keeps_month_value_type():
    assert ytd({"year": 2025, "month": "Feb"}) == {"year": 2025, "month": {"lte": "Feb"}}
    assert ytd({"year": 2025, "month": "2"})["month"] == {"lte": "2"}


def test_last_year_leaves_non_numeric_years_alone():
    assert last_year({"year": "FY2025"}) == {"year": "FY2025"}
    assert last_year({"year": {"from": "FY2024", "to": 2025}}) == {"year": {"from": "FY2024", "to": 2024}}
    assert ytd_last_year({"year": "FY2025", "month": 2}) == {"year": "FY2025", "month": {"lte": 2}}
