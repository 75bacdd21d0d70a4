"""
Exceptions raised by the chainkg Datalog engine.
"""


class ChainError(Exception):
    """Base class for all chainkg errors."""


class PlanningError(ChainError, ValueError):
    """A rule's variable chain cannot be compiled into a join plan."""


class TypeMismatchError(ChainError, TypeError):
    """A variable was used at relation positions with different declared types."""


class ProgramError(ChainError, ValueError):
    """A parsed Datalog program cannot be turned into facts and rules."""


class RoundLimitExceeded(ChainError, RuntimeError):
    """Evaluation ran past the configured `evaluation.max_rounds`."""
