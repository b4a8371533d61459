from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from .errors import CyclicMetricDefinition
from .models import MetricDef, metric_edges


class MetricRegistry(Mapping[str, MetricDef]):
    """Read-only name -> metric map, checked for dependency cycles on construction."""

    def __init__(self, metrics: Iterable[MetricDef] | Mapping[str, MetricDef] = ()):
        if isinstance(metrics, Mapping):
            metrics = metrics.values()
        self._metrics: dict[str, MetricDef] = {}
        for m in metrics:
            if m.name in self._metrics:
                raise ValueError(f"Duplicate metric name: {m.name}")
            self._metrics[m.name] = m
        check_acyclic(self._metrics)

    def __getitem__(self, name: str) -> MetricDef:
        return self._metrics[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._metrics)

    def __len__(self) -> int:
        return len(self._metrics)

    def __repr__(self) -> str:
        return f"MetricRegistry({list(self._metrics)!r})"

    def with_overrides(self, overrides: Iterable[MetricDef]) -> MetricRegistry:
        merged = dict(self._metrics)
        for m in overrides:
            merged[m.name] = m
        return MetricRegistry(merged)


def check_acyclic(metrics: Mapping[str, MetricDef]) -> None:
    """
    Depth-first walk over derived/context-transform edges.

    Edges to names missing from the registry are skipped; those surface as
    UnknownMetric at evaluation time.
    """
    done: set[str] = set()

    for root in metrics:
        if root in done:
            continue
        path: list[str] = []
        on_path: set[str] = set()
        stack: list[tuple[str, Iterator[str]]] = []

        def enter(name: str) -> None:
            path.append(name)
            on_path.add(name)
            stack.append((name, iter(metric_edges(metrics[name]))))

        enter(root)
        while stack:
            name, edges = stack[-1]
            nxt = next(edges, None)
            if nxt is None:
                stack.pop()
                path.pop()
                on_path.discard(name)
                done.add(name)
                continue
            if nxt not in metrics or nxt in done:
                continue
            if nxt in on_path:
                raise CyclicMetricDefinition(path[path.index(nxt):] + [nxt])
            enter(nxt)
