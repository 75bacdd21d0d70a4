import logging

import os
logger = logging.getLogger(__name__)
log_level_str = os.environ.get("CHAINKG_DEBUG", "INFO").upper()
try:
    logger.setLevel(getattr(logging, log_level_str))
except AttributeError:
    logger.setLevel(logging.INFO)
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('[%(levelname)s] %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)

from typing import Iterable, Optional
from tqdm import tqdm

from .config import config
from .planner import JoinPlan, compile_rules
from ..errors import RoundLimitExceeded
from ..model.fact import Fact, Origin, Query
from ..model.rule import Rule
from ..model.terms import Value, Variable


class NaiveEvaluator:
    """
    A naive, bottom-up forward-chaining evaluator.

    Every round runs each compiled rule as a nested-loop join over the
    *current* contents of the fact store, collects the candidate facts of
    all rules, and inserts them at the end of the round. Rounds repeat
    until an insertion adds nothing (the fixpoint).

    No deltas are reused between rounds, and rule sets whose derivable
    facts are unbounded will not terminate unless `max_rounds` is set.
    """
    def __init__(self, db, rules: Iterable[Rule], max_rounds: Optional[int] = None) -> None:
        self.db = db
        self.rules = list(rules)
        self.max_rounds = max_rounds if max_rounds is not None else config.get_max_rounds()
        # Plans are compiled once per evaluator; PlanningError surfaces here.
        self.plans: list[JoinPlan] = compile_rules(self.rules)
        self.rounds = 0
        self.added = 0

    def evaluate(self) -> int:
        """
        Run rounds until fixpoint. Returns the number of facts added.
        """
        logger.debug(f"[EVAL][RULES] Loaded rules: {[r.name for r in self.rules]}")
        changed = True
        while changed:
            if self.max_rounds is not None and self.rounds >= self.max_rounds:
                logger.error(f"[ERROR][LOOP] Exceeded max_rounds={self.max_rounds}.")
                raise RoundLimitExceeded(
                    f"Evaluation exceeded max_rounds={self.max_rounds}. Possible infinite loop."
                )
            before = len(self.db)
            candidates = self.run_round()
            changed = self.db.add(*candidates)
            added = len(self.db) - before
            self.added += added
            logger.debug(
                f"[EVAL][ROUND {self.rounds}] candidates={len(candidates)}, "
                f"new facts={added}, total facts={len(self.db)}"
            )
            self.rounds += 1

        logger.info(
            f"[EVAL][COMPLETE] Fixpoint after {self.rounds} round(s); "
            f"{self.added} fact(s) derived."
        )
        return self.added

    def run_round(self) -> list[Fact]:
        """Execute every plan once against the current store."""
        candidates: list[Fact] = []
        plans = tqdm(
            self.plans,
            desc=f"round {self.rounds}",
            disable=not config.show_progress(),
            leave=False,
        )
        for plan in plans:
            candidates.extend(self.evaluate_plan(plan))
        return candidates

    def evaluate_plan(self, plan: JoinPlan) -> list[Fact]:
        """
        Nested-loop join of one plan. Returns candidate facts on the rule's
        target relation, each carrying the rule name and its matched
        dependencies as provenance.
        """
        out: list[Fact] = []
        seed = plan.seed

        seen: set[Value] = set()
        for fact in self.db.get(Query(seed.relation)):
            if fact.left in seen:
                continue
            seen.add(fact.left)
            self._extend(plan, 0, {seed.input: fact.left}, (), out)

        logger.debug(f"[EVAL][RULE] {plan.rule.name!r}: {len(out)} candidate(s)")
        return out

    def _extend(
        self,
        plan: JoinPlan,
        index: int,
        bindings: dict[Variable, Value],
        dependencies: tuple[Fact, ...],
        out: list[Fact],
    ) -> None:
        body = plan.body
        if index == len(body):
            rule = plan.rule
            out.append(Fact(
                rule.relation,
                bindings[rule.left],
                bindings[rule.right],
                Origin(rule=rule.name, dependencies=dependencies),
            ))
            return

        step = body[index]
        query = Query(step.relation, bindings[step.input], bindings.get(step.output))
        for match in self.db.get(query):
            extended = dict(bindings)
            extended[step.output] = match.right
            self._extend(plan, index + 1, extended, dependencies + (match,), out)
