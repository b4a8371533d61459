from __future__ import annotations

import operator
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import orjson

from .models import FilterContext, FilterValue, Row
from .rowset import RowSet

_RANGE_CHECKS = (
    ("from", operator.ge),
    ("to", operator.le),
    ("gte", operator.ge),
    ("lte", operator.le),
    ("gt", operator.gt),
    ("lt", operator.lt),
)
RANGE_KEYS = tuple(k for k, _ in _RANGE_CHECKS)


def is_range(filter_value: Any) -> bool:
    return isinstance(filter_value, Mapping)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _equals(value: Any, filter_value: Any) -> bool:
    if isinstance(value, bool) or isinstance(filter_value, bool):
        return isinstance(value, bool) and isinstance(filter_value, bool) and value == filter_value
    if is_number(value) and is_number(filter_value):
        return value == filter_value
    return type(value) is type(filter_value) and value == filter_value


def matches_filter(value: Any, filter_value: FilterValue) -> bool:
    """Equality for primitives; every present bound must hold for ranges."""
    if not is_range(filter_value):
        return _equals(value, filter_value)

    for bound, check in _RANGE_CHECKS:
        limit = filter_value.get(bound)
        if limit is None:
            continue
        try:
            if not check(value, limit):
                return False
        except TypeError:
            return False
    return True


def apply_context(rows: Iterable[Row] | RowSet[Row], context: FilterContext | None, grain: Sequence[str]) -> RowSet[Row]:
    """
    Narrow `rows` by the filters in `context` whose key is part of `grain`.

    Keys outside the grain are ignored, which is how a coarser metric (e.g.
    budget by year/region) stays unaffected by a month or product filter.
    """
    q = rows if isinstance(rows, RowSet) else RowSet(rows)
    grain_set = set(grain)
    for key, filter_value in (context or {}).items():
        if filter_value is None or key not in grain_set:
            continue
        q = q.where(lambda r, k=key, f=filter_value: matches_filter(r.get(k), f))
    return q


def normalize_context(context: FilterContext | None) -> dict[str, Any]:
    """Drop unconstrained entries and empty range bounds."""
    out: dict[str, Any] = {}
    for key, value in (context or {}).items():
        if value is None:
            continue
        if is_range(value):
            value = {b: v for b, v in value.items() if v is not None}
        out[key] = value
    return out


def context_key(context: FilterContext | None) -> bytes:
    return orjson.dumps(normalize_context(context), option=orjson.OPT_SORT_KEYS)


def pick(row: Row, keys: Sequence[str]) -> Row:
    """Project a row onto `keys`; absent keys come back as None."""
    return {k: row.get(k) for k in keys}


def _key_value(value: Any) -> Any:
    # 2 and 2.0 compare equal, so they must share a group
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def group_key(row: Row, keys: Sequence[str]) -> bytes:
    projected = {k: _key_value(v) for k, v in pick(row, keys).items()}
    return orjson.dumps(projected, option=orjson.OPT_SORT_KEYS)
