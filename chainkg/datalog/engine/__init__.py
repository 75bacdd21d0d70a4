from .config import config, Config
from .database import FactDatabase
from .planner import JoinPlan, PlanStep, compile_rule, compile_rules
from .evaluator import NaiveEvaluator
from .provenance import format_trace, trace_to_dict, walk_trace

__all__ = [
    'config', 'Config',
    'FactDatabase',
    'JoinPlan', 'PlanStep', 'compile_rule', 'compile_rules',
    'NaiveEvaluator',
    'format_trace', 'trace_to_dict', 'walk_trace',
]
