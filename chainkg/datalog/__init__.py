from .errors import ChainError, PlanningError, ProgramError, RoundLimitExceeded, TypeMismatchError
