import logging
logger = logging.getLogger("chainkg.parser")
if not logger.hasHandlers():
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('[%(levelname)s] %(message)s'))
    logger.addHandler(handler)
logger.setLevel(logging.WARNING)

from lark import Lark, Transformer

datalog_grammar = r"""
// -----------------------------
// Top-Level: A program is zero or more facts or rules
// -----------------------------
start: (fact | rule)*

// -----------------------------
// Facts:  atom "."
// -----------------------------
fact: pred_atom "."

// -----------------------------
// Rules: [label] head ":-" body "."
// -----------------------------
rule: label? head ":-" body "."

label: "[" LABEL_TEXT "]"

// The head of a rule is always a predicate atom
head: pred_atom

// Body: one or more atoms separated by commas
body: pred_atom ("," pred_atom)*

// Predicate atom: ID "(" [ term_list ] ")"
pred_atom: ID "(" term_list? ")"

// Term list: one or more terms separated by commas
term_list: term ("," term)*

// A term is either a variable, a number, a string, or a constant identifier
?term: VARIABLE           // e.g. X, Node1
     | NUMBER             // e.g. 123, -4
     | STRING             // e.g. "hello"
     | CONSTANT           // e.g. a, foo, bar123

// Tokens (lexical items)
VARIABLE: /[A-Z][A-Za-z0-9_]*/
CONSTANT: /[a-z][A-Za-z0-9_]*/
NUMBER:    /-?[0-9]+/
// Accept both double-quoted and single-quoted strings
STRING:    /("([^"\\]|\\.)*")|('([^'\\]|\\.)*')/
LABEL_TEXT: /[^\]\n]+/

// ID for predicate names (allow underscores)
ID: /[A-Za-z_][A-Za-z0-9_]*/

%import common.CPP_COMMENT
COMMENT_ML: /\/\*[\s\S]*?\*\//
%ignore CPP_COMMENT
%ignore COMMENT_ML
%ignore /#[^\n]*/
%ignore /%[^\n]*/
%import common.WS
%ignore WS
"""


def _term_node(token):
    if token.type == "NUMBER":
        return {"type": "number", "value": int(token)}
    if token.type == "STRING":
        s = token[1:-1].encode("utf-8").decode("unicode_escape")
        return {"type": "string", "value": s}
    if token.type == "VARIABLE":
        return {"type": "variable", "name": str(token)}
    return {"type": "constant", "value": str(token)}


class DatalogTransformer(Transformer):
    """
    Transforms a Lark parse tree into a simple AST represented by nested Python dicts.
    """

    def start(self, items):
        logger.debug("Entering program with items: %s", items)
        return {"type": "program", "clauses": items}

    def fact(self, items):
        result = {"type": "fact", "atom": items[0]}
        logger.debug("fact result: %s", result)
        return result

    def rule(self, items):
        name = items[0] if isinstance(items[0], str) else None
        head, body = items[-2], items[-1]
        result = {"type": "rule", "name": name, "head": head, "body": body}
        logger.debug("rule result: %s", result)
        return result

    def label(self, items):
        return str(items[0]).strip()

    def head(self, items):
        return items[0]

    def body(self, items):
        return list(items)

    def pred_atom(self, items):
        name = str(items[0])
        terms = items[1] if len(items) == 2 else []
        result = {"type": "atom", "name": name, "terms": terms}
        logger.debug("pred_atom result: %s", result)
        return result

    def term_list(self, items):
        return [_term_node(tok) for tok in items]


class DatalogParser:
    def __init__(self):
        self.parser = Lark(datalog_grammar, parser="earley")
        self.transformer = DatalogTransformer()

    def parse(self, text):
        logger.debug("Starting parse for text:\n%s", text)
        parse_tree = self.parser.parse(text)
        logger.debug("Parse tree:\n%s", parse_tree.pretty())
        ast = self.transformer.transform(parse_tree)
        logger.debug("Final AST:\n%s", ast)
        return ast
