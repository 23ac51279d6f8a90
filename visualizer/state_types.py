"""Execution state — data types and type-coercion helpers (no control flow)."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict

from . import constants

_LONG_LONG = re.compile(r"\blong\s+long\b")
_TYPE_NOISE = re.compile(r"\b(?:const|final|unsigned|signed|static)\b|std::|[&*]")


# ── Data types ───────────────────────────────────────────────────


class Variable(BaseModel):
    """A declared scalar: its declared type text and current value."""

    model_config = ConfigDict(frozen=True)

    type: str
    value: Any


@dataclass
class ExecutionState:
    """Mutable state of one interpretation run — never shared across runs."""

    variables: dict[str, Variable] = field(default_factory=dict)
    arrays: dict[str, list[Any]] = field(default_factory=dict)
    array_types: dict[str, str] = field(default_factory=dict)
    output: list[str] = field(default_factory=list)

    def declare(self, name: str, declared_type: str, value: Any) -> None:
        self.variables[name] = Variable(
            type=declared_type, value=coerce_to_type(value, declared_type)
        )

    def assign(self, name: str, value: Any) -> bool:
        """Store *value* keeping the existing declared type; True if it changed."""
        existing = self.variables.get(name)
        if existing is None:
            self.variables[name] = Variable(type=constants.UNKNOWN_TYPE, value=value)
            return True
        coerced = coerce_to_type(value, existing.type)
        self.variables[name] = Variable(type=existing.type, value=coerced)
        return not _same_value(existing.value, coerced)

    def lookup(self, name: str, default: Any = 0) -> Any:
        existing = self.variables.get(name)
        return default if existing is None else existing.value

    def declare_array(self, name: str, element_type: str, values: list[Any]) -> None:
        self.array_types[name] = element_type
        self.arrays[name] = [coerce_to_type(v, element_type) for v in values]

    def scope(self) -> dict[str, Any]:
        """Names visible to expressions; arrays shadow same-named variables."""
        bindings: dict[str, Any] = {k: v.value for k, v in self.variables.items()}
        bindings.update(self.arrays)
        return bindings


# ── Helpers ──────────────────────────────────────────────────────


def normalize_type(type_text: str) -> str:
    """Canonical lowercase form of a declared type (``vector<int>``, ``int[]``)."""
    text = _LONG_LONG.sub("long", type_text)
    text = _TYPE_NOISE.sub(" ", text)
    return re.sub(r"\s+", "", text).lower()


def is_integer_type(type_text: str) -> bool:
    return normalize_type(type_text) in constants.INTEGER_TYPES


def coerce_to_type(value: Any, declared_type: str) -> Any:
    """Truncate numeric values written to integer-family types.

    Floats truncate toward zero and the result wraps to the type's storage
    width in two's complement. Raises ``ValueError`` when a non-numeric value
    is written to an integer-family type. Other types store the value
    unchanged.
    """
    normalized = normalize_type(declared_type)
    if normalized not in constants.INTEGER_TYPES:
        return value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, float) and math.isfinite(value):
        value = math.trunc(value)
    if not isinstance(value, int):
        raise ValueError(f"cannot store {format_value(value)} in {declared_type}")
    return wrap_integer(value, normalized)


def wrap_integer(value: int, normalized_type: str) -> int:
    """Reduce *value* to the storage width of *normalized_type*."""
    bits, signed = constants.INTEGER_WIDTHS[normalized_type]
    value &= (1 << bits) - 1
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def format_value(value: Any) -> str:
    """Render a runtime value the way the traced program would print it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    return str(value)


def _same_value(old: Any, new: Any) -> bool:
    return type(old) is type(new) and old == new
