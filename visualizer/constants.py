"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

LANGUAGE_UNKNOWN = "unknown"

DEFAULT_MAX_STEPS = 500
DEFAULT_MAX_LOOP_ITERATIONS = 50
DEFAULT_MAX_ARRAY_SIZE = 1000

UNSUPPORTED_ERROR = "__unsupported__"
NO_STEPS_ERROR = (
    "No executable steps found. Try a snippet with int variables, loops, or if/else."
)
CANNOT_VISUALIZE_ERROR = "This snippet cannot be visualized yet."
LOOP_LIMIT_MESSAGE = "Visualization stopped: possible infinite loop."
STEP_LIMIT_MESSAGE = "Visualization stopped: too many steps."

RETURN_LABEL = "Return: "

UNKNOWN_TYPE = "unknown"

INTEGER_TYPES: frozenset[str] = frozenset(
    {"int", "long", "short", "byte", "char", "size_t"}
)
BOOLEAN_TYPES: frozenset[str] = frozenset({"boolean", "bool"})
TEXT_TYPES: frozenset[str] = frozenset({"string"})

DEFAULT_INT_INPUT = 3
DEFAULT_ARRAY_INPUT: tuple[int, ...] = (1, 2, 3)
DEFAULT_BOOL_ARRAY_INPUT: tuple[int, ...] = (1, 0, 1)
DEFAULT_TEXT_INPUT = "abc"

NUMERIC_CONSTANTS: dict[str, int] = {
    "Integer.MAX_VALUE": 2**31 - 1,
    "Integer.MIN_VALUE": -(2**31),
    "Long.MAX_VALUE": 2**63 - 1,
    "Long.MIN_VALUE": -(2**63),
    "INT_MAX": 2**31 - 1,
    "INT_MIN": -(2**31),
    "LLONG_MAX": 2**63 - 1,
    "LLONG_MIN": -(2**63),
}

# Storage width in bits and signedness of each integer-family type.
INTEGER_WIDTHS: dict[str, tuple[int, bool]] = {
    "byte": (8, True),
    "short": (16, True),
    "char": (16, False),
    "int": (32, True),
    "long": (64, True),
    "size_t": (64, False),
}

MAX_INTERMEDIATE_BITS = 256
MAX_STRING_LENGTH = 10_000
