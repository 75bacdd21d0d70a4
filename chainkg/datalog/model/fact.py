from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .terms import Value

if TYPE_CHECKING:
    from .relation import Relation


@dataclass(frozen=True, slots=True)
class Origin:
    """
    Where a fact came from.

    A derived fact has `rule` set and `dependencies` holding the facts the
    rule matched, in the order they were matched. A seed fact may carry a
    free-text `description` instead.
    """
    rule: Optional[str] = None
    dependencies: tuple[Fact, ...] = ()
    description: Optional[str] = None

    @property
    def is_derived(self) -> bool:
        return self.rule is not None


@dataclass(frozen=True, slots=True)
class Query:
    """
    A pattern over one relation; `None` in either position is a wildcard.
    """
    relation: Relation
    left: Optional[Value] = None
    right: Optional[Value] = None

    def matches(self, fact: Fact) -> bool:
        return (
            fact.relation is self.relation
            and (self.left is None or fact.left is self.left)
            and (self.right is None or fact.right is self.right)
        )

    def __repr__(self) -> str:
        left = "_" if self.left is None else str(self.left)
        right = "_" if self.right is None else str(self.right)
        return f"{self.relation.name}({left}, {right})?"


@dataclass(frozen=True, slots=True)
class Fact:
    """
    A ground binary fact: relation(left, right).

    Equality and hashing use (relation, left, right) only; `origin` is
    provenance metadata.
    """
    relation: Relation
    left: Value
    right: Value
    origin: Optional[Origin] = field(default=None, compare=False)

    @property
    def key(self) -> tuple[Relation, Value, Value]:
        return (self.relation, self.left, self.right)

    @property
    def rule(self) -> Optional[str]:
        return self.origin.rule if self.origin else None

    @property
    def dependencies(self) -> tuple[Fact, ...]:
        return self.origin.dependencies if self.origin else ()

    def is_derived(self) -> bool:
        return self.origin is not None and self.origin.is_derived

    def as_query(self) -> Query:
        return Query(self.relation, self.left, self.right)

    def label(self) -> str:
        return self.relation.render(self.left, self.right)

    def __repr__(self) -> str:
        return f"{self.relation.name}({self.left}, {self.right})"
