from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from .terms import Variable

if TYPE_CHECKING:
    from .relation import Relation


@dataclass(frozen=True, slots=True, eq=False)
class RuleHead:
    """
    The conclusion of a rule under construction: `relation(left, right)`
    over two variables. Produced by calling a Relation with two Variables.
    """
    relation: Relation
    left: Variable
    right: Variable


@dataclass(frozen=True, slots=True, eq=False)
class Rule:
    """
    A named rule deriving `relation(left, right)`.

    The body is implicit: it is every producer link reachable backwards
    from `left` and `right`. For example

        rule("transitive", lambda a: lt(a, lt(lt(a))))

    reads "lt(a, c) if lt(a, b) and lt(b, c)".
    """
    name: str
    relation: Relation
    left: Variable
    right: Variable

    @classmethod
    def from_head(cls, name: str, head: RuleHead) -> Rule:
        return cls(name=name, relation=head.relation, left=head.left, right=head.right)

    def __repr__(self) -> str:
        return (
            f"Rule({self.name!r}: {self.relation.name}"
            f"({self.left.describe()}, {self.right.describe()}))"
        )


def rule(name: str, build: Callable[[Variable], RuleHead]) -> Rule:
    """
    Build a rule from a function of its free input variable.

    `build` receives a fresh Variable and must return the RuleHead produced
    by calling the target relation with two variables.
    """
    head = build(Variable(name="input"))
    if not isinstance(head, RuleHead):
        raise TypeError(
            f"rule {name!r}: build function must return a rule head "
            f"(relation called with two variables), got {type(head).__name__}"
        )
    return Rule.from_head(name, head)
