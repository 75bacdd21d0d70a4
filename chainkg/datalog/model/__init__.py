from .terms import Value, Variable, val
from .fact import Fact, Origin, Query
from .rule import Rule, RuleHead, rule
from .relation import Relation, relation

__all__ = [
    'Value', 'Variable', 'val',
    'Fact', 'Origin', 'Query',
    'Rule', 'RuleHead', 'rule',
    'Relation', 'relation',
]
