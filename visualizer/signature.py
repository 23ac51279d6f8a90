"""Entry-point detection and parameter parsing."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from . import constants
from .language import Dialect
from .state_types import normalize_type

logger = logging.getLogger(__name__)


class ParameterKind(Enum):
    INTEGER = "integer"
    BOOLEAN = "boolean"
    INT_ARRAY = "int_array"
    BOOL_ARRAY = "bool_array"
    TEXT = "text"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Parameter:
    name: str
    type: str

    @property
    def kind(self) -> ParameterKind:
        return parameter_kind(self.type)


@dataclass(frozen=True)
class FunctionSignature:
    name: str
    parameters: tuple[Parameter, ...] = field(default_factory=tuple)
    # 0-based source line the signature was matched on
    line: int | None = field(default=None, compare=False)


_MAIN_CALL = re.compile(r"\bmain\s*\(")

_JAVA_SIGNATURE = re.compile(
    r"^(?:(?:public|private|protected|static|final)\s+)*"
    r"(?:int|long|boolean|void|String|double|char)(?:\s*\[\s*\])?\s+"
    r"(\w+)\s*\(([^)]*)\)\s*(?:\{.*)?$"
)
_CPP_SIGNATURE = re.compile(
    r"^(?:(?:static|inline)\s+)*"
    r"(?:long\s+long|int|long|bool|void|string|std::string|double|char"
    r"|(?:std::)?vector\s*<[^>]*>)(?:\s*[&*]\s*|\s+)"
    r"(\w+)\s*\(([^)]*)\)\s*(?:const\s*)?(?:\{.*)?$"
)

_JAVA_PARAMETER = re.compile(
    r"^(int\[\]|long\[\]|boolean\[\]|String\[\]|String|int|long|boolean)\s+(\w+)$"
)
_CPP_PARAMETER = re.compile(
    r"^(vector\s*<\s*(?:int|long\s+long|long|bool)\s*>|string|int|long\s+long|long|bool)"
    r"\s+(\w+)$"
)
_PARAMETER_NOISE = re.compile(r"\b(?:final|const)\b|std::|[&*]")


def parameter_kind(type_text: str) -> ParameterKind:
    """Bucket a declared parameter type into the kinds inputs are synthesized for."""
    t = normalize_type(type_text)
    element = _element_type(t)
    if element is not None:
        if element in constants.BOOLEAN_TYPES:
            return ParameterKind.BOOL_ARRAY
        if element in constants.INTEGER_TYPES:
            return ParameterKind.INT_ARRAY
        return ParameterKind.UNKNOWN
    if t in constants.INTEGER_TYPES:
        return ParameterKind.INTEGER
    if t in constants.BOOLEAN_TYPES:
        return ParameterKind.BOOLEAN
    if t in constants.TEXT_TYPES:
        return ParameterKind.TEXT
    return ParameterKind.UNKNOWN


def _element_type(normalized: str) -> str | None:
    if normalized.endswith("[]"):
        return normalized[:-2]
    match = re.fullmatch(r"vector<(\w+)>", normalized)
    return match.group(1) if match else None


def detect_entry_function(source: str, dialect: Dialect) -> FunctionSignature | None:
    """Find the first callable signature in *source*, skipping ``main``.

    Returns ``None`` when no signature is found, in which case the source is
    interpreted verbatim as a script.
    """
    pattern = _JAVA_SIGNATURE if dialect == Dialect.JAVA else _CPP_SIGNATURE

    for index, line in enumerate(source.split("\n")):
        trimmed = line.strip()
        if _MAIN_CALL.search(trimmed):
            continue

        match = pattern.match(trimmed)
        if not match:
            continue

        name = match.group(1)
        # Capitalized Java names are constructors
        if dialect == Dialect.JAVA and name[0].isupper():
            continue

        signature = FunctionSignature(
            name=name,
            parameters=parse_parameters(match.group(2), dialect),
            line=index,
        )
        logger.info(
            "Entry function %s(%s)",
            name,
            ", ".join(f"{p.type} {p.name}" for p in signature.parameters),
        )
        return signature

    return None


def parse_parameters(raw: str, dialect: Dialect) -> tuple[Parameter, ...]:
    """Parse a comma-separated parameter list into typed parameters.

    Best effort and total: unrecognized parameters fall back to "last token
    is the name, the rest is the type".
    """
    raw = raw.strip()
    if not raw:
        return ()
    return tuple(_parse_parameter(part, dialect) for part in raw.split(","))


def _parse_parameter(text: str, dialect: Dialect) -> Parameter:
    text = re.sub(r"\s+", " ", _PARAMETER_NOISE.sub(" ", text)).strip()

    patterns = (
        (_JAVA_PARAMETER, _CPP_PARAMETER)
        if dialect == Dialect.JAVA
        else (_CPP_PARAMETER, _JAVA_PARAMETER)
    )
    for pattern in patterns:
        match = pattern.match(text)
        if match:
            return Parameter(name=match.group(2), type=_compact_type(match.group(1)))

    parts = text.split(" ")
    if len(parts) >= 2:
        name, type_text = parts[-1], " ".join(parts[:-1])
        # C-style array parameter: int nums[]
        if name.endswith("[]"):
            name, type_text = name[:-2], type_text + "[]"
        return Parameter(name=name, type=_compact_type(type_text))
    return Parameter(name=text, type="int")


def _compact_type(type_text: str) -> str:
    return re.sub(r"\s*([<>\[\]])\s*", r"\1", type_text).strip()
