from __future__ import annotations

import argparse
import logging
from pathlib import Path

from semantic_metrics.assets import parse_metric_overrides
from semantic_metrics.config import settings
from semantic_metrics.demo import METRIC_BUNDLE, build_demo_model
from semantic_metrics.query import QueryRequest, run_query

DEMOS = [
    ("2025-02, Region x Product", ["regionId", "productId"], {"year": 2025, "month": 2}),
    ("2025-02, Region only", ["regionId"], {"year": 2025, "month": 2}),
    ("2025-02, Region=NA, by Product", ["productId"], {"year": 2025, "month": 2, "regionId": "NA"}),
]


def print_table(rows: list[dict]) -> None:
    if not rows:
        print("(no rows)")
        return
    cols = list(rows[0])
    widths = {c: max(len(c), *(len(str(r.get(c))) for r in rows)) for c in cols}
    print("  ".join(c.ljust(widths[c]) for c in cols))
    for r in rows:
        print("  ".join(str(r.get(c)).ljust(widths[c]) for c in cols))


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--overrides", default=None, help="JSON file of factMeasure overrides")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    overrides = []
    if args.overrides:
        overrides = parse_metric_overrides(Path(args.overrides).read_text(encoding="utf-8"))
    model = build_demo_model(overrides)

    for title, dims, filters in DEMOS:
        print(f"\n=== Demo: {title} ===")
        res = run_query(
            model,
            QueryRequest(rows=dims, filters=filters, metrics=METRIC_BUNDLE, fact_for_rows="sales"),
        )
        print_table(res.rows)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
