"""
Turns a parsed Datalog program into relations, values, seed facts and rules.

Rule bodies must be chains: every body atom `r(X, Y)` is read as "Y is
produced by r from X". Each variable may be produced by at most one atom,
the produced variables must not form a cycle, and every atom must feed
one of the head's variables. The variable that is never produced is the
rule's free input.

    [transitive] lt(A, C) :- lt(A, B), lt(B, C).
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ..errors import ProgramError
from ..model.fact import Fact
from ..model.relation import Relation
from ..model.rule import Rule
from ..model.terms import Value, Variable
from .datalog_parser import DatalogParser

logger = logging.getLogger(__name__)


@dataclass
class Program:
    """The result of loading Datalog text."""
    facts: list[Fact] = field(default_factory=list)
    rules: list[Rule] = field(default_factory=list)
    relations: dict[str, Relation] = field(default_factory=dict)
    values: dict[str, Value] = field(default_factory=dict)


def _atom_text(atom: dict[str, Any]) -> str:
    parts = []
    for term in atom["terms"]:
        if term["type"] == "variable":
            parts.append(term["name"])
        elif term["type"] == "string":
            parts.append(f'"{term["value"]}"')
        else:
            parts.append(str(term["value"]))
    return f"{atom['name']}({', '.join(parts)})"


def _rule_text(stmt: dict[str, Any]) -> str:
    body = ", ".join(_atom_text(atom) for atom in stmt["body"])
    return f"{_atom_text(stmt['head'])} :- {body}"


class ProgramLoader:
    """
    Loads programs into one shared namespace: relations are looked up by
    name and values are interned by label, so loading several programs
    through the same loader refers to the same relation and value objects.

    Relations declared in Python (for example with a display template) can
    be passed in via `relations`.
    """
    def __init__(self, relations: Optional[dict[str, Relation]] = None) -> None:
        self.relations: dict[str, Relation] = dict(relations or {})
        self.values: dict[str, Value] = {}
        self._parser: Optional[DatalogParser] = None

    @property
    def parser(self) -> DatalogParser:
        if self._parser is None:
            self._parser = DatalogParser()
        return self._parser

    def relation(self, name: str) -> Relation:
        if name not in self.relations:
            self.relations[name] = Relation(name)
        return self.relations[name]

    def value(self, label: Any) -> Value:
        key = str(label)
        if key not in self.values:
            self.values[key] = Value(key)
        return self.values[key]

    def load_string(self, text: str) -> Program:
        return self.load_ast(self.parser.parse(text))

    def load_file(self, filepath: str) -> Program:
        with open(filepath, 'r') as f:
            return self.load_string(f.read())

    def load_ast(self, ast: dict[str, Any]) -> Program:
        if not isinstance(ast, dict) or ast.get("type") != "program":
            raise ValueError("Unrecognized AST structure")

        program = Program(relations=self.relations, values=self.values)
        for stmt in ast["clauses"]:
            if stmt["type"] == "fact":
                program.facts.append(self._build_fact(stmt["atom"]))
            elif stmt["type"] == "rule":
                program.rules.append(self._build_rule(stmt))
        logger.debug(f"[LOAD] {len(program.facts)} fact(s), {len(program.rules)} rule(s)")
        return program

    def _check_arity(self, atom: dict[str, Any], context: str) -> None:
        if len(atom["terms"]) != 2:
            raise ProgramError(
                f"{context}: {_atom_text(atom)} has arity {len(atom['terms'])}; "
                f"only binary relations are supported"
            )

    def _build_fact(self, atom: dict[str, Any]) -> Fact:
        self._check_arity(atom, "fact")
        left, right = atom["terms"]
        for term in (left, right):
            if term["type"] == "variable":
                raise ProgramError(f"fact {_atom_text(atom)} must be ground; found variable {term['name']}")
        return Fact(self.relation(atom["name"]), self.value(left["value"]), self.value(right["value"]))

    def _variable_names(self, atom: dict[str, Any], name: str) -> tuple[str, str]:
        self._check_arity(atom, f"rule {name!r}")
        left, right = atom["terms"]
        for term in (left, right):
            if term["type"] != "variable":
                raise ProgramError(
                    f"rule {name!r}: {_atom_text(atom)} contains constant {term['value']!r}; "
                    f"rule atoms may only contain variables"
                )
        return left["name"], right["name"]

    def _build_rule(self, stmt: dict[str, Any]) -> Rule:
        name = stmt.get("name") or _rule_text(stmt)
        head_left, head_right = self._variable_names(stmt["head"], name)

        producers: dict[str, tuple[Relation, str]] = {}
        for atom in stmt["body"]:
            left, right = self._variable_names(atom, name)
            if left == right:
                raise ProgramError(f"rule {name!r}: {_atom_text(atom)} relates {left} to itself")
            if right in producers:
                raise ProgramError(f"rule {name!r}: variable {right} is produced by more than one body atom")
            producers[right] = (self.relation(atom["name"]), left)

        variables: dict[str, Variable] = {}

        def resolve(var_name: str, visiting: set[str]) -> Variable:
            if var_name in variables:
                return variables[var_name]
            if var_name in visiting:
                raise ProgramError(f"rule {name!r}: variable {var_name} depends on itself")
            if var_name not in producers:
                variables[var_name] = Variable(name=var_name)
                return variables[var_name]
            relation, parent_name = producers[var_name]
            visiting.add(var_name)
            parent = resolve(parent_name, visiting)
            visiting.discard(var_name)
            variables[var_name] = Variable(producer=(relation, parent), name=var_name)
            return variables[var_name]

        left = resolve(head_left, set())
        right = resolve(head_right, set())

        for atom in stmt["body"]:
            _, produced = self._variable_names(atom, name)
            if produced not in variables:
                raise ProgramError(
                    f"rule {name!r}: body atom {_atom_text(atom)} does not contribute to the head"
                )

        return Rule(name=name, relation=self.relation(stmt["head"]["name"]), left=left, right=right)
