"""Constrained expression evaluator — recursive descent over a tiny grammar.

Only arithmetic, comparison and boolean operators, the ternary, literals,
variable/array lookups, ``.length`` and a handful of pure builtins are
accepted. Anything else raises ``EvaluationError``; no host-language
evaluation is ever performed.
"""

from __future__ import annotations

import functools
import logging
import math
import re
from dataclasses import dataclass
from typing import Any

from . import constants
from .state_types import ExecutionState, format_value

logger = logging.getLogger(__name__)


class EvaluationError(Exception):
    """An expression or condition could not be evaluated."""

    def __init__(self, message: str, expression: str = ""):
        super().__init__(message)
        self.message = message
        self.expression = expression


# ── Normalization ────────────────────────────────────────────────

_ACCESSOR_CALL = re.compile(r"\.\s*(?:length|size)\s*\(\s*\)")
_INTEGER_SUFFIX = re.compile(r"\b(\d+)[lL]\b")
_DECIMAL_SUFFIX = re.compile(r"\b(\d+(?:\.\d*)?|\.\d+)[fFdD]\b")
_QUALIFIED_BUILTIN = re.compile(r"\b(?:Math\s*\.|std::)\s*(max|min|abs)\b")
_NUMERIC_CONSTANT = re.compile(
    "|".join(
        r"\b" + re.escape(name) + r"\b"
        for name in sorted(constants.NUMERIC_CONSTANTS, key=len, reverse=True)
    )
)


def normalize_expression(text: str) -> str:
    """Rewrite dialect idioms into the evaluator's grammar."""
    text = _NUMERIC_CONSTANT.sub(
        lambda m: str(constants.NUMERIC_CONSTANTS[m.group(0)]), text
    )
    text = _ACCESSOR_CALL.sub(".length", text)
    text = _QUALIFIED_BUILTIN.sub(r"\1", text)
    text = _INTEGER_SUFFIX.sub(r"\1", text)
    text = _DECIMAL_SUFFIX.sub(r"\1", text)
    return text.strip()


# ── AST ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Name:
    ident: str


@dataclass(frozen=True)
class Index:
    target: Any
    index: Any


@dataclass(frozen=True)
class Length:
    target: Any


@dataclass(frozen=True)
class Unary:
    op: str
    operand: Any


@dataclass(frozen=True)
class Binary:
    op: str
    left: Any
    right: Any


@dataclass(frozen=True)
class Logical:
    op: str
    left: Any
    right: Any


@dataclass(frozen=True)
class Conditional:
    test: Any
    then: Any
    other: Any


@dataclass(frozen=True)
class Call:
    func: str
    args: tuple[Any, ...]


# ── Tokenizer ────────────────────────────────────────────────────

_TOKEN = re.compile(
    r"""\s*(?:
        (?P<number>\d+\.\d*|\.\d+|\d+)
      | (?P<string>"(?:[^"\\]|\\.)*")
      | (?P<char>'(?:[^'\\]|\\.)')
      | (?P<name>[A-Za-z_]\w*)
      | (?P<op>==|!=|<=|>=|&&|\|\||[-+*/%<>!?:()\[\].,])
    )""",
    re.VERBOSE,
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}

_KEYWORD_LITERALS = {"true": True, "false": False, "null": None, "nullptr": None}


def _unescape(body: str) -> str:
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


def tokenize(text: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    while pos < len(text):
        if text[pos:].strip() == "":
            break
        match = _TOKEN.match(text, pos)
        if match is None:
            raise EvaluationError(
                f"unexpected character {text[pos:].lstrip()[0]!r}", text
            )
        kind = match.lastgroup
        tokens.append((kind, match.group(kind)))
        pos = match.end()
    return tokens


# ── Parser ───────────────────────────────────────────────────────

_EQUALITY_OPS = ("==", "!=")
_RELATIONAL_OPS = ("<", "<=", ">", ">=")
_ADDITIVE_OPS = ("+", "-")
_MULTIPLICATIVE_OPS = ("*", "/", "%")


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0

    def peek(self) -> tuple[str, str] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def accept(self, *ops: str) -> str | None:
        token = self.peek()
        if token is not None and token[0] == "op" and token[1] in ops:
            self.pos += 1
            return token[1]
        return None

    def expect(self, op: str) -> None:
        if self.accept(op) is None:
            raise EvaluationError(f"expected {op!r}", self.text)

    def parse(self):
        node = self.ternary()
        if self.peek() is not None:
            raise EvaluationError(f"unexpected token {self.peek()[1]!r}", self.text)
        return node

    def ternary(self):
        test = self.logical_or()
        if self.accept("?"):
            then = self.ternary()
            self.expect(":")
            return Conditional(test, then, self.ternary())
        return test

    def logical_or(self):
        node = self.logical_and()
        while self.accept("||"):
            node = Logical("||", node, self.logical_and())
        return node

    def logical_and(self):
        node = self.binary_level(0)
        while self.accept("&&"):
            node = Logical("&&", node, self.binary_level(0))
        return node

    _LEVELS = (_EQUALITY_OPS, _RELATIONAL_OPS, _ADDITIVE_OPS, _MULTIPLICATIVE_OPS)

    def binary_level(self, level: int):
        if level == len(self._LEVELS):
            return self.unary()
        node = self.binary_level(level + 1)
        while True:
            op = self.accept(*self._LEVELS[level])
            if op is None:
                return node
            node = Binary(op, node, self.binary_level(level + 1))

    def unary(self):
        op = self.accept("-", "+", "!")
        if op is not None:
            return Unary(op, self.unary())
        return self.postfix()

    def postfix(self):
        node = self.primary()
        while True:
            if self.accept("["):
                index = self.ternary()
                self.expect("]")
                node = Index(node, index)
            elif self.accept("."):
                token = self.peek()
                if token != ("name", "length"):
                    raise EvaluationError("only .length is supported", self.text)
                self.pos += 1
                node = Length(node)
            else:
                return node

    def primary(self):
        token = self.peek()
        if token is None:
            raise EvaluationError("unexpected end of expression", self.text)
        kind, value = token
        self.pos += 1

        if kind == "number":
            if "." in value:
                return Literal(float(value))
            return Literal(_bounded(int(value)))
        if kind == "string":
            return Literal(_unescape(value[1:-1]))
        if kind == "char":
            return Literal(ord(_unescape(value[1:-1])))
        if kind == "name":
            if value in _KEYWORD_LITERALS:
                return Literal(_KEYWORD_LITERALS[value])
            if self.accept("("):
                return Call(value, self.arguments())
            return Name(value)
        if value == "(":
            node = self.ternary()
            self.expect(")")
            return node
        raise EvaluationError(f"unexpected token {value!r}", self.text)

    def arguments(self) -> tuple[Any, ...]:
        args: list[Any] = []
        if self.accept(")"):
            return ()
        while True:
            args.append(self.ternary())
            if self.accept(")"):
                return tuple(args)
            self.expect(",")


@functools.lru_cache(maxsize=1024)
def parse_expression(text: str):
    """Parse normalized expression text into an immutable AST."""
    return _Parser(text).parse()


# ── Operators ────────────────────────────────────────────────────


def _is_integral(value: Any) -> bool:
    return isinstance(value, int)


def _bounded(value: Any) -> Any:
    if isinstance(value, int) and value.bit_length() > constants.MAX_INTERMEDIATE_BITS:
        raise OverflowError(
            f"integer result exceeds {constants.MAX_INTERMEDIATE_BITS} bits"
        )
    if isinstance(value, str) and len(value) > constants.MAX_STRING_LENGTH:
        raise OverflowError(
            f"string result exceeds {constants.MAX_STRING_LENGTH} characters"
        )
    return value


def _numeric(value: Any) -> int | float:
    if isinstance(value, (int, float)):
        return value
    raise TypeError(f"{format_value(value)} is not a number")


def _add(a: Any, b: Any) -> Any:
    if isinstance(a, str) or isinstance(b, str):
        return _bounded(format_value(a) + format_value(b))
    return _bounded(_numeric(a) + _numeric(b))


def _divide(a: Any, b: Any) -> Any:
    a, b = _numeric(a), _numeric(b)
    if b == 0:
        raise ZeroDivisionError("division by zero")
    if _is_integral(a) and _is_integral(b):
        quotient = abs(a) // abs(b)
        return quotient if (a >= 0) == (b >= 0) else -quotient
    return a / b


def _modulo(a: Any, b: Any) -> Any:
    a, b = _numeric(a), _numeric(b)
    if b == 0:
        raise ZeroDivisionError("modulo by zero")
    if _is_integral(a) and _is_integral(b):
        remainder = abs(a) % abs(b)
        return remainder if a >= 0 else -remainder
    return math.fmod(a, b)


BINOP_TABLE: dict[str, Any] = {
    "+": _add,
    "-": lambda a, b: _bounded(_numeric(a) - _numeric(b)),
    "*": lambda a, b: _bounded(_numeric(a) * _numeric(b)),
    "/": _divide,
    "%": _modulo,
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    ">": lambda a, b: a > b,
    "<=": lambda a, b: a <= b,
    ">=": lambda a, b: a >= b,
}

UNOP_TABLE: dict[str, Any] = {
    "-": lambda a: -_numeric(a),
    "+": lambda a: +_numeric(a),
    "!": lambda a: not truthy(a),
}


def _builtin_max(args: list[Any]) -> Any:
    if len(args) < 2:
        raise EvaluationError("max expects at least two arguments")
    return max(_numeric(a) for a in args)


def _builtin_min(args: list[Any]) -> Any:
    if len(args) < 2:
        raise EvaluationError("min expects at least two arguments")
    return min(_numeric(a) for a in args)


def _builtin_abs(args: list[Any]) -> Any:
    if len(args) != 1:
        raise EvaluationError("abs expects one argument")
    return abs(_numeric(args[0]))


BUILTINS: dict[str, Any] = {
    "max": _builtin_max,
    "min": _builtin_min,
    "abs": _builtin_abs,
}


def truthy(value: Any) -> bool:
    return bool(value)


# ── Evaluation ───────────────────────────────────────────────────


def _eval_literal(node: Literal, scope: dict[str, Any]) -> Any:
    return node.value


def _eval_name(node: Name, scope: dict[str, Any]) -> Any:
    if node.ident not in scope:
        raise EvaluationError(f"{node.ident} is not defined")
    return scope[node.ident]


def _eval_index(node: Index, scope: dict[str, Any]) -> Any:
    target = _eval(node.target, scope)
    index = _eval(node.index, scope)
    if not isinstance(target, (list, str)):
        raise EvaluationError(f"{format_value(target)} cannot be indexed")
    if not isinstance(index, int) or isinstance(index, bool):
        raise EvaluationError(f"index {format_value(index)} is not an integer")
    if not 0 <= index < len(target):
        raise EvaluationError(
            f"index {index} out of bounds for length {len(target)}"
        )
    return target[index]


def _eval_length(node: Length, scope: dict[str, Any]) -> Any:
    target = _eval(node.target, scope)
    if not isinstance(target, (list, str)):
        raise EvaluationError(f"{format_value(target)} has no length")
    return len(target)


def _eval_unary(node: Unary, scope: dict[str, Any]) -> Any:
    return UNOP_TABLE[node.op](_eval(node.operand, scope))


def _eval_binary(node: Binary, scope: dict[str, Any]) -> Any:
    return BINOP_TABLE[node.op](_eval(node.left, scope), _eval(node.right, scope))


def _eval_logical(node: Logical, scope: dict[str, Any]) -> bool:
    left = truthy(_eval(node.left, scope))
    if node.op == "&&":
        return left and truthy(_eval(node.right, scope))
    return left or truthy(_eval(node.right, scope))


def _eval_conditional(node: Conditional, scope: dict[str, Any]) -> Any:
    branch = node.then if truthy(_eval(node.test, scope)) else node.other
    return _eval(branch, scope)


def _eval_call(node: Call, scope: dict[str, Any]) -> Any:
    builtin = BUILTINS.get(node.func)
    if builtin is None:
        raise EvaluationError(f"call to {node.func}() is not supported")
    return builtin([_eval(arg, scope) for arg in node.args])


_EVALUATORS: dict[type, Any] = {
    Literal: _eval_literal,
    Name: _eval_name,
    Index: _eval_index,
    Length: _eval_length,
    Unary: _eval_unary,
    Binary: _eval_binary,
    Logical: _eval_logical,
    Conditional: _eval_conditional,
    Call: _eval_call,
}


def _eval(node: Any, scope: dict[str, Any]) -> Any:
    return _EVALUATORS[type(node)](node, scope)


# ── Public API ───────────────────────────────────────────────────


def _parse_number(text: str) -> int | float | None:
    text = normalize_expression(text)
    try:
        return _bounded(int(text))
    except (ValueError, OverflowError):
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def evaluate_expression(expression: str, state: ExecutionState) -> Any:
    """Evaluate *expression* against the variables and arrays in *state*.

    Empty text evaluates to 0. Raises ``EvaluationError`` carrying the
    offending text when the expression cannot be evaluated and is not a
    plain numeric literal.
    """
    text = expression.strip()
    if not text:
        return 0
    try:
        return _eval(parse_expression(normalize_expression(text)), state.scope())
    except (
        EvaluationError, ArithmeticError, TypeError, ValueError, RecursionError
    ) as exc:
        number = _parse_number(text)
        if number is not None:
            return number
        reason = exc.message if isinstance(exc, EvaluationError) else str(exc)
        raise EvaluationError(f'Eval failed for "{text}": {reason}', text) from exc


def evaluate_condition(condition: str, state: ExecutionState) -> bool:
    """Evaluate *condition* and coerce the result to a boolean."""
    try:
        return truthy(evaluate_expression(condition, state))
    except EvaluationError as exc:
        literal = condition.strip()
        if literal in ("true", "false"):
            return literal == "true"
        logger.debug("Condition %r failed: %s", condition, exc.message)
        raise EvaluationError(f'Condition error "{literal}"', condition) from exc
