"""Statement executors — one handler per ``StatementKind``, no control flow."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from . import constants
from .blocks import split_top_level
from .evaluator import BINOP_TABLE, EvaluationError, evaluate_expression
from .language import Dialect
from .run_types import TracerConfig
from .signature import ParameterKind, parse_parameters
from .state_types import ExecutionState, coerce_to_type, format_value
from .statements import Statement, StatementKind

logger = logging.getLogger(__name__)


class StatementError(Exception):
    """A classified statement could not be applied to the execution state."""

    def __init__(self, message: str, statement_text: str = ""):
        super().__init__(message)
        self.message = message
        self.statement_text = statement_text


class Control(Enum):
    NONE = "none"
    RETURN = "return"
    BREAK = "break"
    CONTINUE = "continue"


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of executing one statement."""

    emit_step: bool = False
    control: Control = Control.NONE

    @classmethod
    def unchanged(cls) -> ExecutionResult:
        return cls()

    @classmethod
    def changed(cls, emit_step: bool = True) -> ExecutionResult:
        return cls(emit_step=emit_step)

    @classmethod
    def jump(cls, control: Control, emit_step: bool = False) -> ExecutionResult:
        return cls(emit_step=emit_step, control=control)


# ── Helpers ──────────────────────────────────────────────────────


def _store(statement: Statement, store, *args) -> Any:
    try:
        return store(*args)
    except ValueError as exc:
        raise StatementError(str(exc), statement.text) from exc


def _combine(statement: Statement, op: str, current: Any, operand: Any) -> Any:
    try:
        return BINOP_TABLE[op](current, operand)
    except (ArithmeticError, TypeError) as exc:
        raise StatementError(
            f"cannot apply {op}= to {format_value(current)}: {exc}", statement.text
        ) from exc


def _index_of(statement: Statement, array: list[Any], state: ExecutionState) -> int:
    index = evaluate_expression(statement.index, state)
    if not isinstance(index, int) or isinstance(index, bool):
        raise StatementError(
            f"index {format_value(index)} is not an integer", statement.text
        )
    if not 0 <= index < len(array):
        raise StatementError(
            f"index {index} out of bounds for {statement.name}[{len(array)}]",
            statement.text,
        )
    return index


def _existing_array(statement: Statement, state: ExecutionState) -> list[Any]:
    if statement.name not in state.arrays:
        raise StatementError(
            f"array {statement.name} is not declared", statement.text
        )
    return state.arrays[statement.name]


# ── Scalars ──────────────────────────────────────────────────────


def _execute_declaration(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    # Later declarators may read earlier ones; nothing is committed if any fails
    staged = replace(state, variables=dict(state.variables))
    for name, initializer in statement.targets:
        value = evaluate_expression(initializer, staged) if initializer else 0
        _store(statement, staged.declare, name, statement.declared_type, value)
    state.variables.update(staged.variables)
    return ExecutionResult.changed()


def _execute_assignment(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    value = evaluate_expression(statement.expression, state)
    changed = _store(statement, state.assign, statement.name, value)
    return ExecutionResult.changed(emit_step=changed)


def _execute_increment(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    if statement.name not in state.variables:
        state.declare(statement.name, "int", 0)
    current = state.lookup(statement.name)
    value = _combine(statement, statement.operator, current, 1)
    _store(statement, state.assign, statement.name, value)
    return ExecutionResult.changed()


def _execute_compound(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    operand = evaluate_expression(statement.expression, state)
    current = state.lookup(statement.name)
    value = _combine(statement, statement.operator, current, operand)
    changed = _store(statement, state.assign, statement.name, value)
    return ExecutionResult.changed(emit_step=changed)


# ── Arrays ───────────────────────────────────────────────────────


def _check_size(statement: Statement, size: Any, config: TracerConfig) -> int:
    if not isinstance(size, int) or isinstance(size, bool) or size < 0:
        raise StatementError(
            f"invalid array size {format_value(size)}", statement.text
        )
    if size > config.max_array_size:
        raise StatementError(
            f"array size {size} exceeds limit {config.max_array_size}",
            statement.text,
        )
    return size


def _execute_array_literal(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    values = [evaluate_expression(e, state) for e in statement.elements]
    _check_size(statement, len(values), config)
    _store(
        statement,
        state.declare_array,
        statement.name,
        statement.declared_type,
        values,
    )
    return ExecutionResult.changed()


def _execute_array_sized(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    size = _check_size(
        statement, evaluate_expression(statement.expression, state), config
    )
    fill = evaluate_expression(statement.fill, state) if statement.fill else 0
    _store(
        statement,
        state.declare_array,
        statement.name,
        statement.declared_type,
        [fill] * size,
    )
    return ExecutionResult.changed()


def _execute_indexed_write(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    array = _existing_array(statement, state)
    index = _index_of(statement, array, state)
    value = evaluate_expression(statement.expression, state)
    if statement.operator != "=":
        value = _combine(statement, statement.operator, array[index], value)
    element_type = state.array_types.get(statement.name, constants.UNKNOWN_TYPE)
    array[index] = _store(statement, coerce_to_type, value, element_type)
    return ExecutionResult.changed()


def _execute_append(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    array = _existing_array(statement, state)
    _check_size(statement, len(array) + 1, config)
    value = evaluate_expression(statement.expression, state)
    element_type = state.array_types.get(statement.name, constants.UNKNOWN_TYPE)
    array.append(_store(statement, coerce_to_type, value, element_type))
    return ExecutionResult.changed()


def _execute_signature(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    """Method headers inside a full program: array parameters start empty."""
    for param in parse_parameters(statement.rest, Dialect.JAVA):
        if param.kind in (ParameterKind.INT_ARRAY, ParameterKind.BOOL_ARRAY):
            element = (
                param.type[:-2]
                if param.type.endswith("[]")
                else param.type[param.type.find("<") + 1 : -1]
            )
            state.arrays.setdefault(param.name, [])
            state.array_types.setdefault(param.name, element)
    return ExecutionResult.unchanged()


# ── Output ───────────────────────────────────────────────────────

_LINE_BREAKS = frozenset({"endl", "std::endl", '"\\n"', "'\\n'"})
_PRINTF_PLACEHOLDER = re.compile(r"%[-+ 0#]*(\d*)(?:\.(\d+))?([dicsfn%])")


def _render_part(part: str, state: ExecutionState) -> str:
    try:
        return format_value(evaluate_expression(part, state))
    except EvaluationError:
        return part.strip().strip('"')


def _render_concatenation(content: str, state: ExecutionState) -> str:
    if not content.strip():
        return ""
    try:
        return format_value(evaluate_expression(content, state))
    except EvaluationError as exc:
        logger.debug("Falling back to part-wise print for %r: %s", content, exc)
        return "".join(
            _render_part(p, state) for p in split_top_level(content, "+") if p
        )


def _render_cout(content: str, state: ExecutionState) -> str:
    parts = [p for p in split_top_level(content, "<<") if p]
    return "".join(
        _render_part(p, state) for p in parts if p not in _LINE_BREAKS
    )


def _format_placeholder(match: re.Match[str], values: list[Any]) -> str:
    conversion = match.group(3)
    if conversion == "%":
        return "%"
    if conversion == "n":
        return ""
    if not values:
        raise StatementError("not enough printf arguments")
    value = values.pop(0)
    if conversion in ("d", "i"):
        text = str(int(value))
    elif conversion == "c":
        text = chr(value) if isinstance(value, int) else format_value(value)
    elif conversion == "f":
        precision = int(match.group(2)) if match.group(2) else 6
        text = f"{float(value):.{precision}f}"
    else:
        text = format_value(value)
    width = int(match.group(1)) if match.group(1) else 0
    return text.rjust(width)


def _render_printf(content: str, state: ExecutionState) -> str:
    args = [a for a in split_top_level(content, ",") if a]
    if not args:
        return ""
    template = evaluate_expression(args[0], state)
    if not isinstance(template, str):
        return format_value(template)
    values = [evaluate_expression(a, state) for a in args[1:]]
    try:
        return _PRINTF_PLACEHOLDER.sub(
            lambda m: _format_placeholder(m, values), template
        )
    except (TypeError, ValueError, OverflowError) as exc:
        raise StatementError(f"bad printf arguments: {exc}", content) from exc


_PRINT_RENDERERS = {
    "print": _render_concatenation,
    "cout": _render_cout,
    "printf": _render_printf,
}


def _execute_print(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    renderer = _PRINT_RENDERERS[statement.operator]
    text = renderer(statement.expression, state)
    state.output.append(text.rstrip("\n"))
    return ExecutionResult.changed()


# ── Jumps ────────────────────────────────────────────────────────

_ARRAY_RETURN = (
    re.compile(r"^new\s+\w+\s*\[\s*\]\s*\{(?P<items>.*)\}$"),
    re.compile(r"^(?:std::)?vector\s*<[^>]*>\s*\{(?P<items>.*)\}$"),
    re.compile(r"^\{(?P<items>.*)\}$"),
)


def _return_value(expression: str, state: ExecutionState) -> str:
    for pattern in _ARRAY_RETURN:
        match = pattern.match(expression)
        if match:
            items = match["items"].strip()
            parts = split_top_level(items, ",") if items else []
            return format_value([evaluate_expression(p, state) for p in parts])
    return format_value(evaluate_expression(expression, state))


def _execute_return(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    expression = statement.expression.strip()
    if not expression:
        return ExecutionResult.jump(Control.RETURN)
    try:
        shown = _return_value(expression, state)
    except EvaluationError as exc:
        logger.warning("Return value not evaluated: %s", exc.message)
        shown = expression
    state.output.append(constants.RETURN_LABEL + shown)
    return ExecutionResult.jump(Control.RETURN, emit_step=True)


def _execute_break(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    return ExecutionResult.jump(Control.BREAK)


def _execute_continue(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    return ExecutionResult.jump(Control.CONTINUE)


def _execute_nothing(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    return ExecutionResult.unchanged()


def _execute_malformed(
    statement: Statement, state: ExecutionState, config: TracerConfig
) -> ExecutionResult:
    raise StatementError(statement.error or "malformed statement", statement.text)


# ── Dispatch ─────────────────────────────────────────────────────

_EXECUTORS: dict[StatementKind, Any] = {
    StatementKind.SKIP: _execute_nothing,
    StatementKind.UNRECOGNIZED: _execute_nothing,
    StatementKind.MALFORMED: _execute_malformed,
    StatementKind.SIGNATURE: _execute_signature,
    StatementKind.DECLARATION: _execute_declaration,
    StatementKind.ASSIGNMENT: _execute_assignment,
    StatementKind.INCREMENT: _execute_increment,
    StatementKind.COMPOUND_ASSIGNMENT: _execute_compound,
    StatementKind.ARRAY_LITERAL: _execute_array_literal,
    StatementKind.ARRAY_SIZED: _execute_array_sized,
    StatementKind.INDEXED_WRITE: _execute_indexed_write,
    StatementKind.ARRAY_APPEND: _execute_append,
    StatementKind.PRINT: _execute_print,
    StatementKind.RETURN: _execute_return,
    StatementKind.BREAK: _execute_break,
    StatementKind.CONTINUE: _execute_continue,
}


def execute_statement(
    statement: Statement,
    state: ExecutionState,
    config: TracerConfig = TracerConfig(),
) -> ExecutionResult:
    """Apply one straight-line statement to *state*.

    Raises ``EvaluationError`` or ``StatementError`` when the statement
    cannot be applied; the caller decides whether that is fatal.
    Loop and branch headers are not handled here.
    """
    handler = _EXECUTORS.get(statement.kind)
    if handler is None:
        raise StatementError(
            f"{statement.kind.value} is not a straight-line statement",
            statement.text,
        )
    return handler(statement, state, config)
