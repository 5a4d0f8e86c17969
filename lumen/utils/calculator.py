"""
Arithmetic expression evaluator.

Recursive descent over the grammar

    expr    := term (("+" | "-") term)*
    term    := unary (("*" | "/" | "%") unary | <implicit> unary)*
    unary   := ("-" | "+") unary | power
    power   := primary ("^" unary)?
    primary := NUMBER | NAME "(" expr ")" | NAME | "(" expr ")"

`^` is right-associative and binds tighter than unary minus, so -2^2 is -4.
A number or closing parenthesis directly followed by a name or "(" is an
implicit multiplication (2pi, 3(4+1)).
"""

import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..core.exceptions import ExpressionError

MAX_EXPRESSION_LENGTH = 256

# Parentheses and function calls deeper than this are rejected
MAX_NESTING_DEPTH = 64

SYNTAX_ERROR = "Invalid syntax"

CONSTANTS: Dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "tau": math.tau,
}


def _cbrt(x: float) -> float:
    return math.copysign(abs(x) ** (1.0 / 3.0), x)


FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "sqrt": math.sqrt,
    "cbrt": _cbrt,
    "abs": abs,
    "exp": math.exp,
    "ln": math.log,
    "log": math.log,
    "lg": math.log10,
    "log10": math.log10,
    "log2": math.log2,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "floor": math.floor,
    "ceil": math.ceil,
    "round": round,
}

_TOKEN_RE = re.compile(
    r"\s*(?:"
    r"(?P<number>\d+(?:\.\d*)?|\.\d+)"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<op>\*\*|[-+*/%^()])"
    r")"
)

Token = Tuple[str, str]


def tokenize(expr: str) -> List[Token]:
    """Split an expression into (kind, text) tokens."""
    tokens = []
    pos = 0
    expr = expr.rstrip()
    while pos < len(expr):
        match = _TOKEN_RE.match(expr, pos)
        if not match or match.end() == pos:
            raise ExpressionError("Invalid characters in expression")
        kind = match.lastgroup
        text = match.group(kind)
        if text == "**":
            text = "^"
        tokens.append((kind, text))
        pos = match.end()
    return tokens


def format_number(value: float) -> str:
    """Canonical display string for a result."""
    if value == 0:
        return "0"
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return format(value, ".12g")


@dataclass(frozen=True)
class Evaluation:
    """Result of evaluating an expression: a value or an error message."""

    value: Optional[float] = None
    display: Optional[str] = None
    error: Optional[str] = None
    # A lone number or constant, nothing was actually computed
    trivial: bool = False

    @property
    def is_error(self) -> bool:
        return self.error is not None


def _finite(value: float) -> float:
    if math.isinf(value):
        raise ExpressionError("Result too large")
    return value


class _Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        self.operations = 0
        self.depth = 0
        # Whether the last primary ended in ")" (enables "(1+2)3")
        self.closed = False

    def peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def next(self) -> Token:
        token = self.peek()
        if token is None:
            raise ExpressionError(SYNTAX_ERROR)
        self.pos += 1
        return token

    def open_group(self):
        self.depth += 1
        if self.depth > MAX_NESTING_DEPTH:
            raise ExpressionError("Expression too deeply nested")

    def close_group(self):
        self.expect(")")
        self.depth -= 1

    def expect(self, text: str):
        token = self.peek()
        if token is None or token[1] != text:
            raise ExpressionError(SYNTAX_ERROR)
        self.pos += 1

    def parse(self) -> float:
        if not self.tokens:
            raise ExpressionError("Empty expression")
        value = self.expr()
        if self.peek() is not None:
            raise ExpressionError(SYNTAX_ERROR)
        return value

    def expr(self) -> float:
        value = self.term()
        while self.peek() and self.peek()[1] in ("+", "-"):
            op = self.next()[1]
            rhs = self.term()
            self.operations += 1
            value = _finite(value + rhs if op == "+" else value - rhs)
        return value

    def _implicit_multiplication(self) -> bool:
        token = self.peek()
        if token is None:
            return False
        kind, text = token
        if kind == "name" or text == "(":
            return True
        return kind == "number" and self.closed

    def term(self) -> float:
        value = self.unary()
        while True:
            token = self.peek()
            if token and token[1] in ("*", "/", "%"):
                op = self.next()[1]
                rhs = self.unary()
                if op == "*":
                    value = _finite(value * rhs)
                elif rhs == 0:
                    raise ExpressionError("Division by zero")
                elif op == "/":
                    value = _finite(value / rhs)
                else:
                    value = math.fmod(value, rhs)
            elif self._implicit_multiplication():
                value = _finite(value * self.unary())
            else:
                return value
            self.operations += 1

    def unary(self) -> float:
        token = self.peek()
        if token and token[1] in ("-", "+"):
            self.next()
            self.operations += 1
            value = self.unary()
            return -value if token[1] == "-" else value
        return self.power()

    def power(self) -> float:
        base = self.primary()
        if self.peek() and self.peek()[1] == "^":
            self.next()
            exponent = self.unary()
            self.operations += 1
            if base == 0 and exponent < 0:
                raise ExpressionError("Division by zero")
            return math.pow(base, exponent)
        return base

    def primary(self) -> float:
        kind, text = self.next()
        self.closed = False

        if kind == "number":
            return float(text)

        if text == "(":
            self.open_group()
            value = self.expr()
            self.close_group()
            self.closed = True
            return value

        if kind == "name":
            name = text.lower()
            if name in FUNCTIONS:
                if not self.peek() or self.peek()[1] != "(":
                    raise ExpressionError(SYNTAX_ERROR)
                self.next()
                self.open_group()
                argument = self.expr()
                self.close_group()
                self.operations += 1
                self.closed = True
                return float(FUNCTIONS[name](argument))
            if name in CONSTANTS:
                return CONSTANTS[name]
            raise ExpressionError(f"Unknown function or variable: {text}")

        raise ExpressionError(SYNTAX_ERROR)


class ArithmeticEvaluator:
    """Evaluates infix arithmetic with functions and constants."""

    def __init__(self, max_length: int = MAX_EXPRESSION_LENGTH):
        self.max_length = max_length

    def parse(self, expr: str) -> Tuple[float, bool]:
        """Evaluate `expr`, returning (value, trivial). Raises ExpressionError."""
        if not expr or not expr.strip():
            raise ExpressionError("Empty expression")
        if len(expr) > self.max_length:
            raise ExpressionError("Expression too long")

        parser = _Parser(tokenize(expr))
        try:
            value = parser.parse()
        except ZeroDivisionError:
            raise ExpressionError("Division by zero")
        except OverflowError:
            raise ExpressionError("Result too large")
        except RecursionError:
            raise ExpressionError("Expression too deeply nested")
        except ValueError:
            raise ExpressionError("Math domain error")

        if math.isnan(value):
            raise ExpressionError("Math domain error")
        if math.isinf(value):
            raise ExpressionError("Result too large")
        return value, parser.operations == 0

    def evaluate(self, expr: str) -> Evaluation:
        """Evaluate `expr` into an Evaluation, never raising."""
        try:
            value, trivial = self.parse(expr)
        except ExpressionError as e:
            return Evaluation(error=e.message)
        return Evaluation(value=value, display=format_number(value), trivial=trivial)


_default_evaluator = ArithmeticEvaluator()


def evaluate(expr: str) -> Evaluation:
    return _default_evaluator.evaluate(expr)


def evaluate_calculator(expr: str) -> Tuple[Optional[str], Optional[str]]:
    """Evaluate calculator expression, returning (result, error)."""
    result = _default_evaluator.evaluate(expr)
    if result.is_error:
        return None, result.error
    return result.display, None
