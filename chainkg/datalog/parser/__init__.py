"""
Datalog text front end: a Lark grammar and a loader that builds rules.
"""
from .datalog_parser import DatalogParser
from .loader import Program, ProgramLoader

__all__ = ['DatalogParser', 'Program', 'ProgramLoader']
