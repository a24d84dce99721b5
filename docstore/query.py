"""
Filter expressions and sort specs for store queries.

A Filter is a conjunction of conditions on top-level record fields. It is a
plain value (comparable, printable) and also a predicate: ``f(record)``
returns whether the record matches. Store operations accept either a Filter
or any callable taking a record and returning a bool.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Tuple, Union

Record = Dict[str, Any]
Predicate = Callable[[Record], bool]

OPS = ("eq", "ne", "in", "contains")

_MISSING = object()


@dataclass(frozen=True)
class Condition:
    """
    One test against a record.

    ``contains`` does a case-insensitive substring match of ``value`` against
    each field named in ``field`` (a comma-separated list); any hit matches.
    """
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPS:
            raise ValueError(f"Unknown filter op: {self.op!r}")

    def matches(self, record: Record) -> bool:
        if self.op == "contains":
            needle = str(self.value).lower()
            for name in self.field.split(","):
                hay = record.get(name.strip())
                if isinstance(hay, str) and needle in hay.lower():
                    return True
            return False
        actual = record.get(self.field, _MISSING)
        if self.op == "eq":
            return actual is not _MISSING and actual == self.value
        if self.op == "ne":
            return actual is _MISSING or actual != self.value
        # "in"
        return actual is not _MISSING and actual in self.value


@dataclass(frozen=True)
class Filter:
    conditions: Tuple[Condition, ...] = ()

    def __call__(self, record: Record) -> bool:
        return all(c.matches(record) for c in self.conditions)

    def __and__(self, other: "Filter") -> "Filter":
        if not isinstance(other, Filter):
            return NotImplemented
        return Filter(self.conditions + other.conditions)

    def eq(self, field: str, value: Any) -> "Filter":
        return Filter(self.conditions + (Condition(field, "eq", value),))

    def ne(self, field: str, value: Any) -> "Filter":
        return Filter(self.conditions + (Condition(field, "ne", value),))

    def isin(self, field: str, values: Iterable[Any]) -> "Filter":
        return Filter(self.conditions + (Condition(field, "in", tuple(values)),))

    def search(self, fields: Iterable[str], text: str) -> "Filter":
        return Filter(self.conditions + (Condition(",".join(fields), "contains", text),))


def where(**fields: Any) -> Filter:
    """Equality filter: ``where(userId=uid, subject="math")``."""
    return Filter(tuple(Condition(k, "eq", v) for k, v in fields.items()))


@dataclass(frozen=True)
class SortSpec:
    field: str
    order: str = "asc"  # asc | desc

    def __post_init__(self):
        if self.order not in ("asc", "desc"):
            raise ValueError(f"Unknown sort order: {self.order!r}")


def _greater(a: Any, b: Any) -> bool:
    # Values that cannot be compared (None, mixed types) are never greater.
    try:
        return bool(a > b)
    except TypeError:
        return False


def compare(spec: SortSpec) -> Callable[[Record, Record], int]:
    """
    Comparator for ``functools.cmp_to_key``.

    Uses strict greater-than on the field; ties return 0 so the stable sort
    keeps stored order.
    """
    def _cmp(a: Record, b: Record) -> int:
        x, y = a.get(spec.field), b.get(spec.field)
        if spec.order == "desc":
            x, y = y, x
        if _greater(x, y):
            return 1
        if _greater(y, x):
            return -1
        return 0
    return _cmp


PredicateLike = Union[Filter, Predicate, None]
