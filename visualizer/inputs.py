"""Test-input synthesis for entry-function parameters."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any

from . import constants
from .signature import Parameter, ParameterKind
from .state_types import format_value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TestInput:
    """A concrete parameter value plus its human-readable literal form."""

    __test__ = False  # not a pytest class

    display: str
    value: Any


def _default_input(kind: ParameterKind) -> TestInput:
    if kind == ParameterKind.BOOLEAN:
        return TestInput(display="true", value=1)
    if kind == ParameterKind.INT_ARRAY:
        values = list(constants.DEFAULT_ARRAY_INPUT)
        return TestInput(display=format_value(values), value=values)
    if kind == ParameterKind.BOOL_ARRAY:
        values = list(constants.DEFAULT_BOOL_ARRAY_INPUT)
        return TestInput(display=format_value(values), value=values)
    if kind == ParameterKind.TEXT:
        text = constants.DEFAULT_TEXT_INPUT
        return TestInput(display=f'"{text}"', value=text)
    return TestInput(
        display=str(constants.DEFAULT_INT_INPUT), value=constants.DEFAULT_INT_INPUT
    )


def generate_test_inputs(
    parameters: tuple[Parameter, ...] | list[Parameter],
    custom_inputs: dict[str, Any] | None = None,
) -> dict[str, TestInput]:
    """Produce a value for every parameter.

    A caller-supplied override (keyed by parameter name) wins when it can be
    coerced to the parameter's type; otherwise the per-type default is used.
    """
    inputs: dict[str, TestInput] = {}
    custom_inputs = custom_inputs or {}

    for param in parameters:
        kind = param.kind
        if param.name in custom_inputs:
            override = _coerce_override(custom_inputs[param.name], kind)
            if override is not None:
                inputs[param.name] = override
                continue
            logger.warning(
                "Ignoring input %r for %s %s; using default",
                custom_inputs[param.name],
                param.type,
                param.name,
            )
        inputs[param.name] = _default_input(kind)

    return inputs


# ── Override coercion ────────────────────────────────────────────


def _coerce_override(value: Any, kind: ParameterKind) -> TestInput | None:
    if kind in (ParameterKind.INT_ARRAY, ParameterKind.BOOL_ARRAY) or (
        kind == ParameterKind.UNKNOWN and isinstance(value, (list, tuple))
    ):
        element = _coerce_bool if kind == ParameterKind.BOOL_ARRAY else _coerce_int
        items = _coerce_sequence(value, element)
        if items is None:
            return None
        return TestInput(display=format_value(items), value=items)

    if kind == ParameterKind.BOOLEAN:
        flag = _coerce_bool(value)
        if flag is None:
            return None
        return TestInput(display=format_value(bool(flag)), value=flag)

    if kind == ParameterKind.TEXT:
        if isinstance(value, (list, tuple, dict)):
            return None
        return TestInput(display=f'"{value}"', value=str(value))

    number = _coerce_int(value)
    if number is None:
        return None
    return TestInput(display=str(number), value=number)


def _coerce_sequence(value: Any, element) -> list[int] | None:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return None
    if not isinstance(value, (list, tuple)):
        return None
    items = [element(v) for v in value]
    if any(item is None for item in items):
        return None
    return items


def _coerce_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return math.trunc(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return math.trunc(number) if math.isfinite(number) else None
    return None


def _coerce_bool(value: Any) -> int | None:
    """Booleans travel as 0/1."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value != 0)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("true", "1"):
            return 1
        if text in ("false", "0"):
            return 0
    return None
