from __future__ import annotations

from typing import Any, Mapping

from .filters import RANGE_KEYS, is_number, is_range
from .models import ContextTransform, FilterContext


def _month_bound(month: Any) -> Mapping[str, Any] | None:
    """Upper bound on month for a year-to-date view; the value keeps its type."""
    if not is_range(month):
        return {"lte": month}
    for bound in ("lte", "to"):
        if month.get(bound) is not None:
            return {"lte": month[bound]}
    if month.get("lt") is not None:
        return {"lt": month["lt"]}
    return None


def _shift_year(year: Any, delta: int) -> Any:
    # only numeric years shift; labels like "FY2025" pass through
    if not is_range(year):
        return year + delta if is_number(year) else year
    return {b: (v + delta if b in RANGE_KEYS and is_number(v) else v) for b, v in year.items()}


def make_ytd(year_key: str = "year", month_key: str = "month") -> ContextTransform:
    def ytd(ctx: FilterContext) -> FilterContext:
        if ctx.get(year_key) is None or ctx.get(month_key) is None:
            return ctx
        bound = _month_bound(ctx[month_key])
        if bound is None:
            return ctx
        return {**ctx, month_key: bound}

    return ytd


def make_last_year(year_key: str = "year") -> ContextTransform:
    def last_year(ctx: FilterContext) -> FilterContext:
        if ctx.get(year_key) is None:
            return ctx
        return {**ctx, year_key: _shift_year(ctx[year_key], -1)}

    return last_year


def make_ytd_last_year(year_key: str = "year", month_key: str = "month") -> ContextTransform:
    ytd = make_ytd(year_key, month_key)
    last_year = make_last_year(year_key)

    def ytd_last_year(ctx: FilterContext) -> FilterContext:
        if ctx.get(year_key) is None or ctx.get(month_key) is None:
            return ctx
        return last_year(ytd(ctx))

    return ytd_last_year


ytd = make_ytd()
last_year = make_last_year()
ytd_last_year = make_ytd_last_year()


def default_transforms() -> Mapping[str, ContextTransform]:
    return {
        "ytd": ytd,
        "lastYear": last_year,
        "ytdLastYear": ytd_last_year,
    }
