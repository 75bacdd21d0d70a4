"""
Provenance expansion for derived facts.

Every derived fact records the rule that produced it and the facts the
rule matched. Expanding a fact walks those dependencies depth-first,
pre-order. Shared sub-derivations are expanded again each time they
appear, so the output is an unfolding of the derivation DAG.
"""
from typing import Any, Optional

from .config import config
from ..model.fact import Fact


def walk_trace(fact: Fact) -> list[tuple[int, Fact]]:
    """Return `(depth, fact)` pairs for the derivation tree of `fact`, pre-order."""
    out: list[tuple[int, Fact]] = []
    _walk(fact, 0, out)
    return out


def _walk(fact: Fact, depth: int, out: list[tuple[int, Fact]]) -> None:
    out.append((depth, fact))
    for dependency in fact.dependencies:
        _walk(dependency, depth + 1, out)


def describe(fact: Fact) -> str:
    """One line for a fact: its label plus the rule name or seed description."""
    label = fact.label()
    origin = fact.origin
    if origin is None:
        return label
    if origin.is_derived:
        return f"{label} ({origin.rule})"
    if origin.description:
        return f"{label} - {origin.description}"
    return label


def format_trace(fact: Fact, indent: Optional[str] = None) -> str:
    """
    Render the derivation tree of `fact` as indented text:

        lt(1, 3) (transitive)
          lt(1, 2)
          lt(2, 3)
    """
    if indent is None:
        indent = config.get_indent()
    lines = [indent * depth + describe(node) for depth, node in walk_trace(fact)]
    return "\n".join(lines)


def trace_to_dict(fact: Fact) -> dict[str, Any]:
    """Nested plain-dict form of the derivation tree, suitable for JSON."""
    node: dict[str, Any] = {
        "relation": fact.relation.name,
        "left": fact.left.label,
        "right": fact.right.label,
    }
    origin = fact.origin
    if origin is not None and origin.is_derived:
        node["rule"] = origin.rule
        node["dependencies"] = [trace_to_dict(dep) for dep in origin.dependencies]
    elif origin is not None and origin.description:
        node["description"] = origin.description
    return node


def derivation_size(fact: Fact) -> int:
    """Number of nodes in the unfolded derivation tree, `fact` included."""
    return len(walk_trace(fact))
