from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .relation import Relation


@dataclass(frozen=True, slots=True, eq=False)
class Value:
    """
    A ground value usable as the left or right side of a fact.

    Values compare by identity: two Value("1") objects are different
    values, even though they print the same. The `label` is for display only.
    """
    label: str

    def __str__(self) -> str:
        return self.label

    def __repr__(self) -> str:
        return f"Value({self.label!r})"


def val(label: Any) -> Value:
    """Allocate a fresh Value whose label is `str(label)`."""
    return Value(str(label))


@dataclass(slots=True, eq=False)
class Variable:
    """
    A placeholder for the left or right value of a fact, used while
    assembling a rule.

    `producer` is `(relation, parent)` when this variable's value is the
    right-hand side of a `relation` fact whose left-hand side is `parent`.
    A variable without a producer is a free (seed) variable.

    `type_tag` is set the first time the variable is used at a typed
    relation position, see Relation.
    """
    producer: Optional[tuple[Relation, Variable]] = None
    name: Optional[str] = None
    type_tag: Optional[type] = field(default=None, compare=False)

    @property
    def relation(self) -> Optional[Relation]:
        return self.producer[0] if self.producer else None

    @property
    def parent(self) -> Optional[Variable]:
        return self.producer[1] if self.producer else None

    def describe(self) -> str:
        if self.name:
            return self.name
        if self.producer is None:
            return f"<free var {id(self):#x}>"
        relation, parent = self.producer
        return f"{relation.name}({parent.describe()})"

    def __repr__(self) -> str:
        return f"Variable({self.describe()})"
