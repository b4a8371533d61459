from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Iterable, Iterator, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


@dataclass
class Group(Generic[K, T]):
    key: K
    members: list[T]


class RowSet(Generic[T]):
    """
    Lazy, composable view over a sequence of rows.

    `where` only stacks predicates; nothing is iterated until a terminal
    operation (`sum`, `average`, `count`, `group_by`, `to_list`) runs.
    Each terminal operation re-iterates the source, so a RowSet can be
    aggregated more than once.
    """

    def __init__(self, source: Iterable[T], predicates: tuple[Callable[[T], bool], ...] = ()):
        self._source = source
        self._predicates = predicates

    def __iter__(self) -> Iterator[T]:
        for item in self._source:
            if all(p(item) for p in self._predicates):
                yield item

    def where(self, predicate: Callable[[T], bool]) -> RowSet[T]:
        return RowSet(self._source, self._predicates + (predicate,))

    def sum(self, selector: Callable[[T], Any]) -> float:
        return sum((selector(item) for item in self), 0)

    def average(self, selector: Callable[[T], Any]) -> float | None:
        total = 0
        n = 0
        for item in self:
            total += selector(item)
            n += 1
        if n == 0:
            return None
        return total / n

    def count(self) -> int:
        return sum(1 for _ in self)

    def group_by(self, key_selector: Callable[[T], K]) -> list[Group[K, T]]:
        # dict keeps first-seen order
        groups: dict[K, Group[K, T]] = {}
        for item in self:
            k = key_selector(item)
            g = groups.get(k)
            if g is None:
                g = groups[k] = Group(key=k, members=[])
            g.members.append(item)
        return list(groups.values())

    def to_list(self) -> list[T]:
        return list(self)
