"""Harness synthesis — parameter declarations spliced in front of a function body."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field

from .blocks import find_block_end, next_code_line, strip_comment
from .inputs import TestInput
from .language import Dialect
from .signature import FunctionSignature, Parameter, ParameterKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Harness:
    """Runnable lines plus the source line each one came from.

    ``origins[i]`` is the 0-based source line of ``lines[i]``; generated
    declarations point at the signature line.
    """

    lines: list[str]
    origins: tuple[int, ...] = field(default_factory=tuple)
    preamble_size: int = 0

    def original_line(self, step_line: int) -> int:
        """Map a 1-based step line back to the 1-based user source line."""
        if not 1 <= step_line <= len(self.origins):
            raise ValueError(f"line {step_line} is outside the harness")
        return self.origins[step_line - 1] + 1


# ── Declarations ─────────────────────────────────────────────────


def _element_type(param: Parameter, dialect: Dialect) -> str:
    match = re.fullmatch(r"(?:std::)?vector<(.+)>", param.type)
    if match:
        return match.group(1)
    if param.type.endswith("[]"):
        return param.type[:-2]
    if param.kind == ParameterKind.BOOL_ARRAY:
        return "boolean" if dialect == Dialect.JAVA else "bool"
    return "int"


def declaration_line(param: Parameter, test_input: TestInput, dialect: Dialect) -> str:
    """One dialect-correct declaration binding *param* to its test value."""
    value = test_input.value
    if isinstance(value, list):
        items = ", ".join(str(v) for v in value)
        element = _element_type(param, dialect)
        if dialect == Dialect.JAVA:
            return f"{element}[] {param.name} = {{{items}}};"
        return f"vector<{element}> {param.name} = {{{items}}};"

    kind = param.kind
    if kind == ParameterKind.BOOLEAN:
        type_text = "boolean" if dialect == Dialect.JAVA else "bool"
        return f"{type_text} {param.name} = {value};"
    if kind == ParameterKind.TEXT:
        type_text = "String" if dialect == Dialect.JAVA else "string"
        return f"{type_text} {param.name} = {json.dumps(value, ensure_ascii=False)};"
    type_text = param.type if kind == ParameterKind.INTEGER else "int"
    return f"{type_text} {param.name} = {value};"


# ── Body extraction ──────────────────────────────────────────────


def _find_signature_line(lines: list[str], name: str) -> int | None:
    pattern = re.compile(rf"\b{re.escape(name)}\s?\(")
    for i, line in enumerate(lines):
        if pattern.search(line):
            return i
    return None


def _find_opening_brace(lines: list[str], signature_line: int) -> int | None:
    code = strip_comment(lines[signature_line])
    if "{" in code:
        return signature_line
    if code.rstrip().endswith(";"):
        return None
    nxt = next_code_line(lines, signature_line + 1)
    if nxt is not None and strip_comment(lines[nxt]).lstrip().startswith("{"):
        return nxt
    return None


def _body_lines(lines: list[str], open_line: int) -> list[tuple[int, str]]:
    end = find_block_end(lines, open_line)
    opening = strip_comment(lines[open_line])
    after_brace = opening[opening.index("{") + 1 :]

    if end == open_line:
        inner = after_brace[: after_brace.rfind("}")].strip()
        return [(open_line, inner)] if inner else []

    body: list[tuple[int, str]] = []
    if after_brace.strip():
        body.append((open_line, after_brace.strip()))
    body.extend((i, lines[i]) for i in range(open_line + 1, end))
    closing = strip_comment(lines[end])
    before_brace = closing[: closing.rfind("}")].strip() if "}" in closing else ""
    if before_brace:
        body.append((end, before_brace))
    return body


def build_harness(
    source: str,
    signature: FunctionSignature,
    inputs: dict[str, TestInput],
    dialect: Dialect,
) -> Harness | None:
    """Build the runnable harness for *signature*, or ``None`` if its body can't be found.

    Args:
        source: The user's source text.
        signature: The detected entry function.
        inputs: A test input for every parameter of *signature*.
        dialect: Controls declaration syntax.

    Returns:
        A ``Harness`` whose ``lines`` are the declarations followed by the
        verbatim body lines, or ``None`` when the caller should interpret
        the raw source instead.
    """
    lines = source.split("\n")
    signature_line = signature.line
    if signature_line is None or signature_line >= len(lines):
        signature_line = _find_signature_line(lines, signature.name)
    if signature_line is None:
        logger.info("Signature line for %s not found", signature.name)
        return None
    open_line = _find_opening_brace(lines, signature_line)
    if open_line is None:
        logger.info("No body found for %s; running raw source", signature.name)
        return None

    preamble = [
        declaration_line(param, inputs[param.name], dialect)
        for param in signature.parameters
    ]
    body = _body_lines(lines, open_line)

    harness = Harness(
        lines=preamble + [text for _, text in body],
        origins=tuple([signature_line] * len(preamble) + [i for i, _ in body]),
        preamble_size=len(preamble),
    )
    logger.info(
        "Harness for %s: %d declarations, %d body lines",
        signature.name,
        len(preamble),
        len(body),
    )
    return harness
