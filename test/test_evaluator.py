"""
Tests for naive fixpoint evaluation, including the end-to-end scenarios:
transitive closure, cross-relation rules, the two-list zip and type
inference over call expressions.
"""

import pytest

from chainkg.datalog.engine.config import config
from chainkg.datalog.engine.database import FactDatabase
from chainkg.datalog.engine.evaluator import NaiveEvaluator
from chainkg.datalog.errors import RoundLimitExceeded, TypeMismatchError
from chainkg.datalog.model import relation, rule, val


def _seed_less_than(lt, numbers):
    db = FactDatabase()
    db.add(lt(numbers[1], numbers[2]))
    db.add(lt(numbers[2], numbers[3]))
    db.add(lt(numbers[3], numbers[4]))
    return db


# =============================================================================
# SCENARIOS
# =============================================================================

class TestLessThan:
    """Transitive closure plus an inverse relation."""

    def test_transitive_closure(self, lt, numbers, less_than_rules):
        db = _seed_less_than(lt, numbers)
        db.run(less_than_rules)

        assert db.contains(lt(numbers[1], numbers[3]))
        assert db.contains(lt(numbers[1], numbers[4]))
        assert db.contains(lt(numbers[2], numbers[4]))
        assert not db.contains(lt(numbers[4], numbers[1]))
        assert len(db.get(lt())) == 6

    def test_inverse(self, lt, gt, numbers, less_than_rules):
        db = FactDatabase()
        db.add(lt(numbers[1], numbers[2]))
        db.run(less_than_rules)

        assert db.contains(gt(numbers[2], numbers[1]))
        assert not db.contains(gt(numbers[1], numbers[2]))

    def test_inverse_of_derived_facts(self, lt, gt, numbers, less_than_rules):
        db = _seed_less_than(lt, numbers)
        db.run(less_than_rules)

        assert db.contains(gt(numbers[4], numbers[1]))
        assert len(db.get(gt())) == 6

    def test_derived_facts_record_rule_and_dependencies(self, lt, numbers, less_than_rules):
        db = _seed_less_than(lt, numbers)
        db.run(less_than_rules)

        (derived,) = db.get(lt(numbers[1], numbers[3]))
        assert derived.rule == "transitive"
        assert derived.dependencies == (lt(numbers[1], numbers[2]), lt(numbers[2], numbers[3]))

        (seed,) = db.get(lt(numbers[1], numbers[2]))
        assert seed.origin is None


class TestZip:
    """Two lists related element by element; no cross products."""

    def test_zip(self):
        first_element = relation("first_element", "{}'s first element is {}")
        next_element = relation("next_element", "after {} is {}")
        related_lists = relation("related_lists", "the list {} is related to {}")
        related_elements = relation("related_elements", "the element {} is related to {}")

        def relate_first(xs):
            x = first_element(xs)
            ys = related_lists(xs)
            y = first_element(ys)
            return related_elements(x, y)

        def relate_next(x1):
            x2 = next_element(x1)
            y1 = related_elements(x1)
            y2 = next_element(y1)
            return related_elements(x2, y2)

        rules = [
            rule("relate first elements", relate_first),
            rule("relate next elements", relate_next),
        ]

        list_a, a1, a2, a3 = val("as"), val("a1"), val("a2"), val("a3")
        list_b, b1, b2, b3 = val("bs"), val("b1"), val("b2"), val("b3")

        db = FactDatabase()
        db.add(related_lists(list_a, list_b))
        db.add(first_element(list_a, a1), next_element(a1, a2), next_element(a2, a3))
        db.add(first_element(list_b, b1), next_element(b1, b2), next_element(b2, b3))

        db.run(rules)

        assert db.contains(related_elements(a1, b1))
        assert db.contains(related_elements(a2, b2))
        assert db.contains(related_elements(a3, b3))
        assert not db.contains(related_elements(a1, b2))
        assert not db.contains(related_elements(a2, b3))
        assert len(db.get(related_elements())) == 3


class Expr:
    pass


class Type:
    pass


class TestTypeInference:
    """Types flow from call arguments to parameters and from outputs to calls."""

    def _relations(self):
        return {
            "function_in_call": relation("function_in_call", "{} contains function {}", Expr, Expr),
            "parameter_in_call": relation("parameter_in_call", "{} contains parameter {}", Expr, Expr),
            "parameter_in_function": relation("parameter_in_function", "{} declares parameter {}", Expr, Expr),
            "output_of_function": relation("output_of_function", "{} declares output {}", Expr, Expr),
            "has_type": relation("has_type", "{} :: {}", Expr, Type),
        }

    def test_type_inference(self):
        r = self._relations()

        def parameter_type(call):
            parameter = r["parameter_in_function"](r["function_in_call"](call))
            argument_type = r["has_type"](r["parameter_in_call"](call))
            return r["has_type"](parameter, argument_type)

        def call_type(call):
            output_type = r["has_type"](r["output_of_function"](r["function_in_call"](call)))
            return r["has_type"](call, output_type)

        rules = [
            rule("type of function parameter <- type of input", parameter_type),
            rule("type of function call <- type of function's output", call_type),
        ]

        f, x, call, num, integer = val("f : x -> x"), val("x"), val("f num"), val("num"), val("Int")

        db = FactDatabase()
        db.add(r["parameter_in_function"](f, x))
        db.add(r["output_of_function"](f, x))
        db.add(r["function_in_call"](call, f))
        db.add(r["parameter_in_call"](call, num))
        db.add(r["has_type"](num, integer))

        db.run(rules)

        assert db.contains(r["has_type"](x, integer))
        assert db.contains(r["has_type"](call, integer))

    def test_variable_reused_at_incompatible_position(self):
        r = self._relations()
        with pytest.raises(TypeMismatchError, match="expected Type var, but found Expr var"):
            rule("bad", lambda e: r["has_type"](r["has_type"](r["has_type"](e))))


# =============================================================================
# FIXPOINT PROPERTIES
# =============================================================================

class TestFixpoint:
    """Evaluation is idempotent and monotone."""

    def test_second_run_adds_nothing(self, lt, numbers, less_than_rules):
        db = _seed_less_than(lt, numbers)
        db.run(less_than_rules)
        size = len(db)

        evaluator = NaiveEvaluator(db, less_than_rules)
        assert evaluator.evaluate() == 0
        assert evaluator.rounds == 1
        assert len(db) == size

    def test_existing_facts_survive_unchanged(self, lt, numbers, less_than_rules):
        db = _seed_less_than(lt, numbers)
        before = list(db.all())
        db.run(less_than_rules)

        after = list(db.all())
        for fact in before:
            assert fact in after
            (stored,) = db.get(fact.as_query())
            assert stored is fact

    def test_round_count(self, lt, numbers, less_than_rules):
        db = _seed_less_than(lt, numbers)
        evaluator = NaiveEvaluator(db, less_than_rules)
        assert evaluator.evaluate() == 9
        # the last round only confirms the fixpoint
        assert evaluator.rounds == 4

    def test_copy_rule_derives_nothing_new(self, lt, numbers):
        db = _seed_less_than(lt, numbers)
        copy = rule("copy", lambda a: lt(a, lt(a)))

        evaluator = NaiveEvaluator(db, [copy])
        assert evaluator.evaluate() == 0
        assert len(db) == 3
        assert not any(fact.is_derived() for fact in db.all())

    def test_copy_rule_from_text(self):
        db = FactDatabase()
        rules = db.load_program_from_string("lt(one, two). [copy] lt(A, B) :- lt(A, B).")
        db.run(rules)
        assert len(db) == 1

    def test_no_rules(self, lt, numbers):
        db = _seed_less_than(lt, numbers)
        db.run([])
        assert len(db) == 3

    def test_evaluate_plan_collects_candidates_without_inserting(self, lt, numbers, less_than_rules):
        db = _seed_less_than(lt, numbers)
        evaluator = NaiveEvaluator(db, less_than_rules)
        candidates = evaluator.evaluate_plan(evaluator.plans[0])

        assert candidates == [lt(numbers[1], numbers[3]), lt(numbers[2], numbers[4])]
        assert len(db) == 3


class TestRoundLimit:
    """An optional round limit guards evaluation."""

    def test_max_rounds_argument(self, lt, numbers, less_than_rules):
        db = _seed_less_than(lt, numbers)
        with pytest.raises(RoundLimitExceeded, match="max_rounds=1"):
            db.run(less_than_rules, max_rounds=1)

    def test_max_rounds_from_config(self, lt, numbers, less_than_rules):
        config.set("evaluation.max_rounds", 2)
        db = _seed_less_than(lt, numbers)
        with pytest.raises(RoundLimitExceeded):
            db.run(less_than_rules)

    def test_limit_large_enough(self, lt, numbers, less_than_rules):
        db = _seed_less_than(lt, numbers)
        db.run(less_than_rules, max_rounds=10)
        assert db.contains(lt(numbers[1], numbers[4]))

    def test_progress_bar_does_not_change_results(self, lt, numbers, less_than_rules):
        config.set("evaluation.progress", True)
        db = _seed_less_than(lt, numbers)
        db.run(less_than_rules)
        assert len(db) == 12
