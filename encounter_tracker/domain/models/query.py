"""Store-agnostic filter criteria.

A Filter is a conjunction of field/operator/value criteria.  SQL stores
translate criteria into column expressions; the in-memory store evaluates them
with Filter.matches.  The data service builds its soft-delete and tenant
filters with the same vocabulary callers use for their own predicates.

    Filter.where("username", Operator.STARTSWITH, "al") & Filter.equals(is_active=True)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Operator(str, Enum):
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"
    CONTAINS = "contains"
    STARTSWITH = "startswith"
    IN = "in"


@dataclass(frozen=True)
class Criterion:
    field: str
    op: Operator
    value: Any

    def __post_init__(self) -> None:
        if self.op is Operator.IN and not isinstance(self.value, (tuple, frozenset)):
            # keep the criterion hashable (it is part of cache keys)
            object.__setattr__(self, "value", tuple(self.value))

    def matches(self, entity: Any) -> bool:
        actual = getattr(entity, self.field)
        if self.op is Operator.EQ:
            return actual == self.value
        if self.op is Operator.NE:
            return actual != self.value
        if self.op is Operator.IN:
            return actual in self.value
        if actual is None:
            return False
        if self.op is Operator.LT:
            return actual < self.value
        if self.op is Operator.LE:
            return actual <= self.value
        if self.op is Operator.GT:
            return actual > self.value
        if self.op is Operator.GE:
            return actual >= self.value
        if self.op is Operator.CONTAINS:
            return self.value in actual
        if self.op is Operator.STARTSWITH:
            return str(actual).startswith(self.value)
        raise ValueError(f"Unsupported operator: {self.op}")


@dataclass(frozen=True)
class Filter:
    """Conjunction of criteria.  An empty Filter matches everything."""

    criteria: tuple[Criterion, ...] = field(default_factory=tuple)

    @classmethod
    def where(cls, field_name: str, op: Operator | str, value: Any) -> Filter:
        return cls((Criterion(field_name, Operator(op), value),))

    @classmethod
    def equals(cls, **values: Any) -> Filter:
        return cls(tuple(Criterion(name, Operator.EQ, value) for name, value in values.items()))

    def __and__(self, other: Filter | None) -> Filter:
        if other is None:
            return self
        return Filter(self.criteria + other.criteria)

    def __bool__(self) -> bool:
        return bool(self.criteria)

    def fields(self) -> set[str]:
        return {c.field for c in self.criteria}

    def matches(self, entity: Any) -> bool:
        return all(c.matches(entity) for c in self.criteria)


def combine(*filters: Filter | None) -> Filter:
    """AND together the non-None filters."""
    result = Filter()
    for f in filters:
        result = result & f
    return result
