"""
Join planning: turns a rule's producer-link chain into an ordered list of
join steps.

A rule such as

    rule("relate first elements", lambda xs: related_elements(
        first(xs), first(related_lists(xs))))

only records, for every variable, which relation produced it from which
parent variable. The planner walks those links backwards from the rule's
two root variables, collects every (relation, parent, child) edge once,
and orders the edges so that each step's input variable is bound before
the step runs. The last step of a plan is always the rule's target.
"""
import logging
from dataclasses import dataclass

from ..errors import PlanningError
from ..model.relation import Relation
from ..model.rule import Rule
from ..model.terms import Variable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlanStep:
    """
    One join step: match `relation(input, output)` facts.

    Relation and Variable compare by identity, so two steps are equal
    exactly when they are the same edge of the dependency graph.
    """
    relation: Relation
    input: Variable
    output: Variable

    def __repr__(self) -> str:
        return f"{self.relation.name}({self.input.describe()} -> {self.output.describe()})"


@dataclass(frozen=True, slots=True)
class JoinPlan:
    """
    A compiled rule. `steps[:-1]` is the body to join, in execution order;
    `steps[-1]` is the target step whose (input, output) are the rule's
    (left, right).
    """
    rule: Rule
    steps: tuple[PlanStep, ...]

    @property
    def body(self) -> tuple[PlanStep, ...]:
        return self.steps[:-1]

    @property
    def target(self) -> PlanStep:
        return self.steps[-1]

    @property
    def seed(self) -> PlanStep:
        """The first body step; its relation is fully scanned to start the join."""
        return self.steps[0]

    def __len__(self) -> int:
        return len(self.steps)


def _collect_levels(rule: Rule) -> list[list[PlanStep]]:
    """Backward breadth-first traversal over producer links, one list per level."""
    target = PlanStep(rule.relation, rule.left, rule.right)
    levels = [[target]]
    seen: set[PlanStep] = set()

    while True:
        level: list[PlanStep] = []
        for step in levels[-1]:
            for var in (step.input, step.output):
                if var.producer is None:
                    continue
                relation, parent = var.producer
                edge = PlanStep(relation, parent, var)
                if edge in seen:
                    continue
                seen.add(edge)
                level.append(edge)
        if not level:
            break
        levels.append(level)

    return levels


def _order_steps(rule: Rule, candidates: list[PlanStep]) -> list[PlanStep]:
    """
    Stable topological ordering of body steps.

    `candidates` arrive deepest level first. At each point the first
    candidate whose input is already bound is taken; the very first step
    must start from a free variable (one without a producer), which
    becomes the join's seed.
    """
    pending = list(candidates)
    ordered: list[PlanStep] = []
    bound: set[Variable] = set()

    while pending:
        for index, step in enumerate(pending):
            if step.input in bound or (not bound and step.input.producer is None):
                break
        else:
            names = ", ".join(step.input.describe() for step in pending)
            raise PlanningError(
                f"rule {rule.name!r}: cannot bind input variable(s) {names}; "
                f"every variable must be reachable from a single free input variable"
            )
        step = pending.pop(index)
        ordered.append(step)
        bound.add(step.input)
        bound.add(step.output)

    for root in (rule.left, rule.right):
        if root not in bound:
            raise PlanningError(
                f"rule {rule.name!r}: variable {root.describe()} of "
                f"{rule.relation.name} is never bound by the rule body"
            )

    return ordered


def compile_rule(rule: Rule) -> JoinPlan:
    """
    Compile a rule into a JoinPlan.

    Raises PlanningError when the rule has no body, when a variable cannot
    be bound from the rule's free input variable, or when a root variable
    is disconnected from the body.
    """
    levels = _collect_levels(rule)
    if len(levels) == 1:
        raise PlanningError(
            f"rule {rule.name!r}: neither {rule.left.describe()} nor "
            f"{rule.right.describe()} is produced by a relation; the rule has no body"
        )

    candidates = [step for level in reversed(levels[1:]) for step in level]
    body = _order_steps(rule, candidates)
    plan = JoinPlan(rule, tuple(body) + (levels[0][0],))
    logger.debug(f"[PLAN] Rule {rule.name!r}: {list(plan.steps)}")
    return plan


def compile_rules(rules) -> list[JoinPlan]:
    """Compile every rule, failing on the first one that cannot be planned."""
    return [compile_rule(rule) for rule in rules]
