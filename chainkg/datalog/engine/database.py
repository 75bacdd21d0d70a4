import logging
import sys
from typing import Iterable, Iterator, Optional, TextIO, Union

from .config import config
from .frame import QueryResult
from .provenance import format_trace
from ..model.fact import Fact, Query
from ..model.relation import Relation
from ..model.rule import Rule
from ..model.terms import Value

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    formatter = logging.Formatter('[%(levelname)s] %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)


class FactDatabase:
    """
    Holds every ground fact of one engine instance, grouped by relation:
      - _relations: Dict[Relation -> list[Fact]] in insertion order
      - _index: Dict[(relation, left, right) -> Fact] for deduplication
      - _by_left: Dict[Relation -> Dict[Value -> list[Fact]]] for left-bound lookups

    The store only grows: facts are never changed or removed. No relation
    ever holds two facts with the same (left, right).
    """
    def __init__(self) -> None:
        self._relations: dict[Relation, list[Fact]] = {}
        self._index: dict[tuple[Relation, Value, Value], Fact] = {}
        self._by_left: dict[Relation, dict[Value, list[Fact]]] = {}

    def add(self, *facts: Fact) -> bool:
        """
        Insert facts, skipping any whose (relation, left, right) is already
        stored. Returns True if at least one fact was new.
        """
        did_add = False
        for fact in facts:
            if fact.key in self._index:
                continue
            self._index[fact.key] = fact
            self._relations.setdefault(fact.relation, []).append(fact)
            self._by_left.setdefault(fact.relation, {}).setdefault(fact.left, []).append(fact)
            did_add = True
        return did_add

    def get(self, query: Query) -> list[Fact]:
        """
        Return, in store order, the facts of `query.relation` matching its
        bound positions. Unknown relations yield an empty list.
        """
        relation = query.relation
        if relation not in self._relations:
            return []

        if query.left is not None and query.right is not None:
            fact = self._index.get((relation, query.left, query.right))
            return [fact] if fact is not None else []

        if query.left is not None:
            return list(self._by_left[relation].get(query.left, ()))

        if query.right is not None:
            return [fact for fact in self._relations[relation] if fact.right is query.right]

        return list(self._relations[relation])

    def contains(self, pattern: Union[Fact, Query]) -> bool:
        """True if any stored fact matches `pattern` (a Fact or a Query)."""
        if isinstance(pattern, Fact):
            pattern = pattern.as_query()
        return len(self.get(pattern)) > 0

    def all(self) -> Iterator[Fact]:
        """Iterate every fact: relations in order of first insertion, then insertion order."""
        for facts in self._relations.values():
            yield from facts

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[Fact]:
        return self.all()

    def __contains__(self, pattern: Union[Fact, Query]) -> bool:
        return self.contains(pattern)

    def relations(self) -> list[Relation]:
        """Relations with at least one fact, in order of first insertion."""
        return list(self._relations)

    def run(self, rules: Iterable[Rule], max_rounds: Optional[int] = None) -> None:
        """
        Evaluate `rules` to fixpoint, adding every derivable fact to this
        database.

        Raises PlanningError if a rule cannot be compiled, before any fact is
        added. `max_rounds` (or `evaluation.max_rounds` in the configuration)
        bounds the number of rounds; by default evaluation is unbounded.
        """
        # Import here to avoid circular import
        from .evaluator import NaiveEvaluator

        evaluator = NaiveEvaluator(self, rules, max_rounds)
        evaluator.evaluate()

    def load_program_from_string(self, program_str: str, loader=None) -> list[Rule]:
        """
        Load a Datalog program, add its facts to the database and return its rules.
        """
        from ..parser.loader import ProgramLoader

        loader = loader or ProgramLoader()
        return self._add_program(loader.load_string(program_str))

    def load_program_from_file(self, filepath: str, loader=None) -> list[Rule]:
        """
        Load a Datalog program from a file, add its facts and return its rules.
        """
        from ..parser.loader import ProgramLoader

        loader = loader or ProgramLoader()
        return self._add_program(loader.load_file(filepath))

    def _add_program(self, program) -> list[Rule]:
        self.add(*program.facts)
        logger.debug(f"[LOAD] Added program facts; database holds {len(self)} fact(s)")
        return program.rules

    def _select(self, query: Optional[Query]) -> Iterable[Fact]:
        return self.all() if query is None else self.get(query)

    def query_frame(self, query: Optional[Query] = None) -> QueryResult:
        """Tabulate the facts matching `query` (all facts when None)."""
        return QueryResult.from_facts(self._select(query))

    def print(self, query: Optional[Query] = None, file: Optional[TextIO] = None) -> None:
        """
        Write the derivation tree of every fact matching `query` (all facts
        when None), separated by `display.separator`.
        """
        out = file if file is not None else sys.stdout
        separator = config.get('display.separator', '\n')
        for fact in self._select(query):
            out.write(format_trace(fact))
            out.write("\n")
            out.write(separator)
