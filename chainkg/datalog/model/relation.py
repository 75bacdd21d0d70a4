from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from ..errors import TypeMismatchError
from .fact import Fact, Origin, Query
from .rule import RuleHead
from .terms import Value, Variable


@dataclass(frozen=True, slots=True, eq=False)
class Relation:
    """
    A binary predicate. Relations compare by identity, so two relations
    with the same name are still distinct.

    `template` controls how facts are displayed, e.g. "{} < {}"; by
    default facts render as `name(left, right)`. When `left_type` or
    `right_type` is given, variables used at that position are tagged with
    the type and reusing a variable at a position of a different type is
    rejected with TypeMismatchError.

    Calling a relation is the authoring surface:

        lt(a)              -> Variable produced by lt from a
        lt(a, c)           -> RuleHead (both arguments are Variables)
        lt(one, two)       -> Fact (both arguments are Values)
        lt(), lt(one)      -> Query with wildcards
    """
    name: str
    template: Optional[str] = None
    left_type: Optional[type] = None
    right_type: Optional[type] = None

    def render(self, left: Any, right: Any) -> str:
        if self.template is not None:
            return self.template.format(left, right)
        return f"{self.name}({left}, {right})"

    def _check_type(self, var: Variable, expected: Optional[type]) -> None:
        if expected is None:
            return
        if var.type_tag is not None and var.type_tag is not expected:
            placeholder = self.render("<...>", "<...>")
            raise TypeMismatchError(
                f"evaluating {placeholder}: expected {var.type_tag.__name__} var, "
                f"but found {expected.__name__} var ({var.describe()})"
            )
        var.type_tag = expected

    def __call__(
        self,
        left: Union[Variable, Value, None] = None,
        right: Union[Variable, Value, None] = None,
        description: Optional[str] = None,
    ) -> Union[Variable, RuleHead, Fact, Query]:
        if isinstance(left, Variable) and isinstance(right, Variable):
            self._check_type(left, self.left_type)
            self._check_type(right, self.right_type)
            return RuleHead(self, left, right)
        if isinstance(left, Value) and isinstance(right, Value):
            origin = Origin(description=description) if description is not None else None
            return Fact(self, left, right, origin)
        if isinstance(left, Variable) and right is None:
            self._check_type(left, self.left_type)
            produced = Variable(producer=(self, left))
            if self.right_type is not None:
                produced.type_tag = self.right_type
            return produced
        if (left is None or isinstance(left, Value)) and (right is None or isinstance(right, Value)):
            return Query(self, left, right)
        raise TypeError(
            f"{self.name}: cannot mix variables and values "
            f"({type(left).__name__}, {type(right).__name__})"
        )

    def __repr__(self) -> str:
        return f"Relation({self.name!r})"


def relation(
    name: str,
    template: Optional[str] = None,
    left_type: Optional[type] = None,
    right_type: Optional[type] = None,
) -> Relation:
    """Declare a new binary relation."""
    return Relation(name, template, left_type, right_type)
