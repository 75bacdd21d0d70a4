"""
chainkg: forward-chaining inference over binary relations with provenance.
"""
from .datalog.errors import ChainError, PlanningError, ProgramError, RoundLimitExceeded, TypeMismatchError
from .datalog.model import Fact, Origin, Query, Relation, Rule, Value, Variable, relation, rule, val
from .datalog.engine import FactDatabase, compile_rule, format_trace, trace_to_dict

__all__ = [
    'ChainError', 'PlanningError', 'ProgramError', 'RoundLimitExceeded', 'TypeMismatchError',
    'Fact', 'Origin', 'Query', 'Relation', 'Rule', 'Value', 'Variable', 'relation', 'rule', 'val',
    'FactDatabase', 'compile_rule', 'format_trace', 'trace_to_dict',
]
