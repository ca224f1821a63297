"""Boolean expression parser used by the truth_table tool.

Grammar (lowest to highest precedence):

    expr    := term ("||" term)*
    term    := factor ("&&" factor)*
    factor  := "!" factor | "(" expr ")" | VARIABLE | "true" | "false"

Variables are single uppercase letters. Expressions are parsed into a small
tree of tuples and evaluated directly, so no user input is ever executed.
"""

import itertools
import re
from typing import Any

MAX_VARIABLES = 12

_TOKEN_RE = re.compile(r"\s*(?:(&&|\|\||!|\(|\))|(\btrue\b|\bfalse\b)|(\b[A-Z]\b)|(\S))")


def _tokenize(source: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    for match in _TOKEN_RE.finditer(source):
        operator, literal, variable, unexpected = match.groups()
        if operator:
            tokens.append(("op", operator))
        elif literal:
            tokens.append(("lit", literal))
        elif variable:
            tokens.append(("var", variable))
        elif unexpected:
            raise ValueError(f"Unexpected character '{unexpected}' at position {match.start(4)}")
    return tokens


class _Parser:
    def __init__(self, tokens: list[tuple[str, str]]):
        self.tokens = tokens
        self.position = 0

    def peek(self) -> tuple[str, str] | None:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def take(self) -> tuple[str, str]:
        token = self.peek()
        if token is None:
            raise ValueError("Unexpected end of expression")
        self.position += 1
        return token

    def parse(self) -> Any:
        if not self.tokens:
            raise ValueError("Expression is empty")
        node = self.expr()
        if self.peek() is not None:
            raise ValueError(f"Unexpected token '{self.peek()[1]}'")
        return node

    def expr(self) -> Any:
        node = self.term()
        while self.peek() == ("op", "||"):
            self.take()
            node = ("or", node, self.term())
        return node

    def term(self) -> Any:
        node = self.factor()
        while self.peek() == ("op", "&&"):
            self.take()
            node = ("and", node, self.factor())
        return node

    def factor(self) -> Any:
        kind, value = self.take()
        if (kind, value) == ("op", "!"):
            return ("not", self.factor())
        if (kind, value) == ("op", "("):
            node = self.expr()
            if self.take() != ("op", ")"):
                raise ValueError("Missing closing parenthesis")
            return node
        if kind == "var":
            return ("var", value)
        if kind == "lit":
            return ("lit", value == "true")
        raise ValueError(f"Unexpected token '{value}'")


def _evaluate(node: Any, assignment: dict[str, bool]) -> bool:
    kind = node[0]
    if kind == "var":
        return assignment[node[1]]
    if kind == "lit":
        return node[1]
    if kind == "not":
        return not _evaluate(node[1], assignment)
    if kind == "and":
        return _evaluate(node[1], assignment) and _evaluate(node[2], assignment)
    return _evaluate(node[1], assignment) or _evaluate(node[2], assignment)


class BooleanExpression:
    """A parsed boolean expression.

    Raises:
        ValueError: If the expression is malformed or has too many variables
    """

    def __init__(self, source: str):
        self.source = source
        tokens = _tokenize(source)
        self._tree = _Parser(tokens).parse()
        self.variables = sorted({value for kind, value in tokens if kind == "var"})
        if len(self.variables) > MAX_VARIABLES:
            raise ValueError(
                f"Too many variables ({len(self.variables)}), at most {MAX_VARIABLES} supported"
            )

    def evaluate(self, assignment: dict[str, bool]) -> bool:
        return _evaluate(self._tree, assignment)

    def truth_table(self) -> list[tuple[dict[str, bool], bool]]:
        """Evaluate every assignment, starting from all-false."""
        rows = []
        for values in itertools.product((False, True), repeat=len(self.variables)):
            assignment = dict(zip(self.variables, values))
            rows.append((assignment, self.evaluate(assignment)))
        return rows
