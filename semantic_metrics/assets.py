from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, Literal

import orjson
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .config import settings
from .errors import InvalidMetricDefinition
from .models import Database, DimensionLabel, FactMeasureMetric, FactTableDef, MeasureDef

_logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parent.parent


def assets_dir() -> Path:
    return Path(settings.assets_dir) if settings.assets_dir else ROOT / "assets"


def _read_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


class FactMeasureSpec(BaseModel):
    """JSON shape of a fact-measure metric; accepts snake_case or camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: Literal["factMeasure"] = "factMeasure"
    name: str = Field(..., min_length=1)
    description: str | None = None
    fact_table: str = Field(..., min_length=1, alias="factTable")
    fact_column: str = Field(..., min_length=1, alias="factColumn")
    format: str | None = None
    agg: Literal["sum", "avg", "count"] | None = None
    grain: Annotated[list[str], Field(min_length=1)] | None = None

    def to_metric(self) -> FactMeasureMetric:
        return FactMeasureMetric(
            name=self.name,
            description=self.description,
            format=self.format,
            fact_table=self.fact_table,
            fact_column=self.fact_column,
            agg=self.agg,
            grain=tuple(self.grain) if self.grain is not None else None,
        )


_SPEC_LIST = TypeAdapter(list[FactMeasureSpec])


def _validate_specs(data: Any) -> list[FactMeasureMetric]:
    try:
        specs = _SPEC_LIST.validate_python(data)
    except ValidationError as exc:
        issues = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        _logger.warning("metric definitions rejected: %s", issues)
        raise InvalidMetricDefinition(issues) from exc
    return [s.to_metric() for s in specs]


def parse_metric_overrides(text: str) -> list[FactMeasureMetric]:
    """Parse a JSON array of fact-measure definitions; blank input means no overrides."""
    if not text.strip():
        return []
    try:
        data = orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        _logger.warning("metric overrides are not valid JSON: %s", exc)
        raise InvalidMetricDefinition([str(exc)]) from exc
    return _validate_specs(data)


def load_seed_metrics() -> list[FactMeasureMetric]:
    return _validate_specs(_read_json(assets_dir() / "metrics.seed.json"))


def load_database() -> Database:
    data = _read_json(assets_dir() / "demo_db.json")
    return Database(dimensions=data.get("dimensions", {}), facts=data.get("facts", {}))


def load_fact_tables() -> dict[str, FactTableDef]:
    data = _read_json(assets_dir() / "fact_tables.json")
    out: dict[str, FactTableDef] = {}
    for name, t in data.items():
        out[name] = FactTableDef(
            grain=tuple(t["grain"]),
            measures={k: MeasureDef(**m) for k, m in t.get("measures", {}).items()},
        )
    return out


def load_dimension_config() -> dict[str, DimensionLabel]:
    data = _read_json(assets_dir() / "dimension_config.json")
    return {k: DimensionLabel(**v) for k, v in data.items()}
