"""Statement classification — one pass from a source line to a tagged variant.

Every line is classified into exactly one ``StatementKind``. The executor and
the control-flow interpreter dispatch on the kind; no later stage re-matches
the raw text against patterns.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .blocks import split_header, split_top_level, strip_comment
from .language import Dialect


class StatementKind(Enum):
    SKIP = "skip"
    SIGNATURE = "signature"
    DECLARATION = "declaration"
    ASSIGNMENT = "assignment"
    INCREMENT = "increment"
    COMPOUND_ASSIGNMENT = "compound_assignment"
    ARRAY_LITERAL = "array_literal"
    ARRAY_SIZED = "array_sized"
    INDEXED_WRITE = "indexed_write"
    ARRAY_APPEND = "array_append"
    PRINT = "print"
    RETURN = "return"
    BREAK = "break"
    CONTINUE = "continue"
    FOR = "for"
    FOREACH = "foreach"
    WHILE = "while"
    IF = "if"
    ELSE_IF = "else_if"
    ELSE = "else"
    MALFORMED = "malformed"
    UNRECOGNIZED = "unrecognized"


CONTROL_KINDS: frozenset[StatementKind] = frozenset(
    {
        StatementKind.FOR,
        StatementKind.FOREACH,
        StatementKind.WHILE,
        StatementKind.IF,
        StatementKind.ELSE_IF,
        StatementKind.ELSE,
    }
)


@dataclass(frozen=True)
class Statement:
    """A classified statement.

    Only the fields relevant to ``kind`` are populated:

    - declarations: ``declared_type`` and ``targets`` (name, initializer) pairs
    - assignments: ``name``, ``operator`` (``=``, ``+``, ``-``, ...) and ``expression``
    - arrays: ``name``, ``declared_type`` (element type), ``elements`` or the
      size in ``expression`` plus an optional ``fill``; indexed writes use ``index``
    - print: ``operator`` is the print form, ``expression`` the raw content
    - loops/branches: ``init``, ``condition``, ``update`` and the header ``rest``
    """

    kind: StatementKind
    text: str = ""
    name: str = ""
    declared_type: str = ""
    expression: str = ""
    operator: str = ""
    index: str = ""
    fill: str = ""
    elements: tuple[str, ...] = ()
    targets: tuple[tuple[str, str], ...] = ()
    init: str = ""
    condition: str = ""
    update: str = ""
    rest: str = ""
    error: str = ""


# ── Patterns ─────────────────────────────────────────────────────

_TYPE = (
    r"(?:(?:const|final|static|unsigned|signed)\s+)*"
    r"(?:long\s+long(?:\s+int)?|long\s+int|short\s+int|long\s+double|int|long"
    r"|short|byte|double|float|char|boolean|bool|String|(?:std::)?string|auto"
    r"|(?:std::)?size_t|unsigned|signed)"
)
_VECTOR = r"(?:std::)?vector\s*<\s*(?P<element>[^<>]+?)\s*>"

_DECLARATION = re.compile(rf"^(?P<type>{_TYPE})\s+(?P<rest>[A-Za-z_]\w*\b.*)$")
_DECLARATOR = re.compile(r"^(?P<name>[A-Za-z_]\w*)\s*(?:=(?!=)\s*(?P<value>.+))?$")

_JAVA_ARRAY_LITERAL = re.compile(
    rf"^(?P<element>{_TYPE})\s*\[\s*\]\s+(?P<name>\w+)\s*=\s*"
    r"(?:new\s+\w+\s*\[\s*\]\s*)?\{(?P<items>.*)\}$"
)
_C_ARRAY_LITERAL = re.compile(
    rf"^(?P<element>{_TYPE})\s+(?P<name>\w+)\s*\[\s*\w*\s*\]\s*=\s*\{{(?P<items>.*)\}}$"
)
_VECTOR_LITERAL = re.compile(
    rf"^{_VECTOR}\s+(?P<name>\w+)\s*=?\s*\{{(?P<items>.*)\}}$"
)
_JAVA_ARRAY_SIZED = re.compile(
    rf"^(?P<element>{_TYPE})\s*\[\s*\]\s+(?P<name>\w+)\s*=\s*"
    r"new\s+\w+\s*\[(?P<size>.+)\]$"
)
_C_ARRAY_SIZED = re.compile(
    rf"^(?P<element>{_TYPE})\s+(?P<name>\w+)\s*\[(?P<size>[^\]]+)\]$"
)
_VECTOR_SIZED = re.compile(rf"^{_VECTOR}\s+(?P<name>\w+)\s*(?:\((?P<args>.*)\))?$")

_ARRAY_LITERALS: dict[Dialect, tuple[re.Pattern[str], ...]] = {
    Dialect.JAVA: (_JAVA_ARRAY_LITERAL, _C_ARRAY_LITERAL),
    Dialect.CPP: (_C_ARRAY_LITERAL, _VECTOR_LITERAL),
}
_ARRAY_SIZED: dict[Dialect, tuple[re.Pattern[str], ...]] = {
    Dialect.JAVA: (_JAVA_ARRAY_SIZED,),
    Dialect.CPP: (_C_ARRAY_SIZED,),
}

_INCREMENT = re.compile(r"^(?:(?P<pre>\+\+|--)\s*(?P<a>\w+)|(?P<b>\w+)\s*(?P<post>\+\+|--))$")
_COMPOUND = re.compile(r"^(?P<name>\w+)\s*(?P<op>[-+*/%])=\s*(?P<value>.+)$")
_ASSIGNMENT = re.compile(r"^(?P<name>\w+)\s*=(?!=)\s*(?P<value>.+)$")
_SUBSCRIPT_HEAD = re.compile(r"^(?P<name>\w+)\s*\[")
_SUBSCRIPT_WRITE = re.compile(r"^(?:(?P<step>\+\+|--)|(?P<op>[-+*/%]?)=(?!=)\s*(?P<value>.+))$")
_APPEND = re.compile(
    r"^(?P<name>\w+)\s*\.\s*(?:push_back|emplace_back|add)\s*\((?P<value>.*)\)$"
)

_JAVA_PRINT = re.compile(
    r"^System\s*\.\s*out\s*\.\s*(?P<mode>println|print|printf|format)\s*\((?P<content>.*)\)$"
)
_CSHARP_PRINT = re.compile(r"^Console\s*\.\s*Write(?:Line)?\s*\((?P<content>.*)\)$")
_C_PRINTF = re.compile(r"^(?:std::)?printf\s*\((?P<content>.*)\)$")
_COUT = re.compile(r"^(?:std::)?cout\s*<<(?P<content>.*)$")

_PRINT_FORMS: dict[Dialect, tuple[tuple[re.Pattern[str], str], ...]] = {
    Dialect.JAVA: ((_CSHARP_PRINT, "print"),),
    Dialect.CPP: ((_C_PRINTF, "printf"), (_COUT, "cout")),
}

_RETURN = re.compile(r"^return\b\s*(?P<value>.*)$")
_FOREACH = re.compile(
    r"^(?:final\s+|const\s+)?(?P<type>[\w:<>\s&*]+?)\s*[&*]?\s*\b(?P<name>\w+)\s*:\s*(?P<iterable>.+)$"
)
_CONTROL_KEYWORD = re.compile(r"^(?:for|while|if|else\s+if)\s*\(")

_SIGNATURE = re.compile(r"^(?:public|private|protected)\b[^=]*\((?P<params>[^)]*)\)")
_CLASS_HEADER = re.compile(
    r"^(?:(?:public|private|protected|static|final|abstract)\s+)*"
    r"(?:class|struct|interface|enum)\b"
)
_MAIN_CALL = re.compile(r"\bmain\s*\(")

_SKIP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^[{};\s]*$"),
    re.compile(r"^(?://|/\*|\*)"),
    re.compile(r"^(?:import|package|using)\b"),
    re.compile(r"^#"),
    _CLASS_HEADER,
    _MAIN_CALL,
    re.compile(r"^void\s"),
    re.compile(r"\b(?:cin|scanf|Scanner)\b"),
    re.compile(r"^new\s"),
    re.compile(r"^\w+\s*:$"),
    re.compile(r"^\w+\s*\(.*\)$"),
    re.compile(r"^[\w.]+\s*\.\s*\w+\s*\(.*\)$"),
)


# ── Classification ───────────────────────────────────────────────


def clean_statement(text: str) -> str:
    """Strip a trailing comment, leading closing braces and the semicolon."""
    text = strip_comment(text).strip()
    text = text.lstrip("}").strip()
    return text.removesuffix(";").strip()


def classify_statement(text: str, dialect: Dialect = Dialect.JAVA) -> Statement:
    """Classify one cleaned-up statement into its ``StatementKind`` variant."""
    text = clean_statement(text)
    for classifier in _CLASSIFIERS[dialect]:
        statement = classifier(text)
        if statement is not None:
            return statement
    return Statement(StatementKind.UNRECOGNIZED, text=text)


def _classify_print(text: str, dialect: Dialect) -> Statement | None:
    if dialect == Dialect.JAVA:
        match = _JAVA_PRINT.match(text)
        if match:
            mode = "printf" if match.group("mode") in ("printf", "format") else "print"
            return Statement(
                StatementKind.PRINT,
                text=text,
                operator=mode,
                expression=match["content"],
            )
    for pattern, mode in _PRINT_FORMS[dialect]:
        match = pattern.match(text)
        if match:
            return Statement(
                StatementKind.PRINT,
                text=text,
                operator=mode,
                expression=match["content"].strip(),
            )
    return None


def _classify_jump(text: str) -> Statement | None:
    match = _RETURN.match(text)
    if match:
        return Statement(StatementKind.RETURN, text=text, expression=match["value"])
    if text == "break":
        return Statement(StatementKind.BREAK, text=text)
    if text == "continue":
        return Statement(StatementKind.CONTINUE, text=text)
    return None


def _classify_control(text: str) -> Statement | None:
    header = split_header(text)
    if header is None:
        if _CONTROL_KEYWORD.match(text):
            return Statement(
                StatementKind.MALFORMED, text=text, error="unbalanced parentheses"
            )
        return None

    if header.keyword == "for":
        parts = split_top_level(header.inner, ";")
        if len(parts) == 3:
            return Statement(
                StatementKind.FOR,
                text=text,
                init=parts[0],
                condition=parts[1],
                update=parts[2],
                rest=header.rest,
            )
        match = _FOREACH.match(header.inner)
        if match and len(parts) == 1:
            return Statement(
                StatementKind.FOREACH,
                text=text,
                declared_type=re.sub(r"\s+", " ", match["type"]).strip(),
                name=match["name"],
                expression=match["iterable"].strip(),
                rest=header.rest,
            )
        return Statement(StatementKind.MALFORMED, text=text, error="bad for header")

    kinds = {
        "while": StatementKind.WHILE,
        "if": StatementKind.IF,
        "else if": StatementKind.ELSE_IF,
        "else": StatementKind.ELSE,
    }
    return Statement(
        kinds[header.keyword], text=text, condition=header.inner, rest=header.rest
    )


def _classify_signature(text: str) -> Statement | None:
    if _CLASS_HEADER.match(text) or _MAIN_CALL.search(text):
        return None
    match = _SIGNATURE.match(text)
    if match:
        return Statement(StatementKind.SIGNATURE, text=text, rest=match["params"])
    return None


def _classify_array(text: str, dialect: Dialect) -> Statement | None:
    for pattern in _ARRAY_LITERALS[dialect]:
        match = pattern.match(text)
        if match:
            items = match["items"].strip()
            return Statement(
                StatementKind.ARRAY_LITERAL,
                text=text,
                name=match["name"],
                declared_type=match["element"],
                elements=tuple(split_top_level(items, ",")) if items else (),
            )

    for pattern in _ARRAY_SIZED[dialect]:
        match = pattern.match(text)
        if match:
            return Statement(
                StatementKind.ARRAY_SIZED,
                text=text,
                name=match["name"],
                declared_type=match["element"],
                expression=match["size"].strip(),
            )

    match = _VECTOR_SIZED.match(text) if dialect == Dialect.CPP else None
    if match:
        args = split_top_level(match["args"], ",") if match["args"] else []
        args = [a for a in args if a]
        if len(args) > 2:
            return Statement(StatementKind.MALFORMED, text=text, error="bad vector size")
        return Statement(
            StatementKind.ARRAY_SIZED,
            text=text,
            name=match["name"],
            declared_type=match["element"],
            expression=args[0] if args else "0",
            fill=args[1] if len(args) == 2 else "",
        )

    match = _APPEND.match(text)
    if match:
        return Statement(
            StatementKind.ARRAY_APPEND,
            text=text,
            name=match["name"],
            expression=match["value"].strip(),
        )

    head = _SUBSCRIPT_HEAD.match(text)
    if head:
        close = _matching_bracket(text, head.end() - 1)
        if close is None:
            return None
        write = _SUBSCRIPT_WRITE.match(text[close + 1 :].strip())
        if write is None:
            return None
        if write["step"]:
            operator, value = write["step"][0], "1"
        else:
            operator, value = write["op"] or "=", write["value"]
        return Statement(
            StatementKind.INDEXED_WRITE,
            text=text,
            name=head["name"],
            index=text[head.end() : close].strip(),
            operator=operator,
            expression=value.strip(),
        )
    return None


def _matching_bracket(text: str, open_at: int) -> int | None:
    depth = 0
    for i in range(open_at, len(text)):
        if text[i] == "[":
            depth += 1
        elif text[i] == "]":
            depth -= 1
            if depth == 0:
                return i
    return None


def _classify_declaration(text: str) -> Statement | None:
    match = _DECLARATION.match(text)
    if not match:
        return None
    targets: list[tuple[str, str]] = []
    for part in split_top_level(match["rest"], ","):
        declarator = _DECLARATOR.match(part)
        if declarator is None:
            return Statement(
                StatementKind.MALFORMED, text=text, error=f"bad declarator {part!r}"
            )
        targets.append((declarator["name"], (declarator["value"] or "").strip()))
    return Statement(
        StatementKind.DECLARATION,
        text=text,
        declared_type=re.sub(r"\s+", " ", match["type"]),
        targets=tuple(targets),
    )


def _classify_skip(text: str) -> Statement | None:
    if any(pattern.search(text) for pattern in _SKIP_PATTERNS):
        return Statement(StatementKind.SKIP, text=text)
    return None


def _classify_mutation(text: str) -> Statement | None:
    match = _INCREMENT.match(text)
    if match:
        step = match["pre"] or match["post"]
        return Statement(
            StatementKind.INCREMENT,
            text=text,
            name=match["a"] or match["b"],
            operator=step[0],
        )
    match = _COMPOUND.match(text)
    if match:
        return Statement(
            StatementKind.COMPOUND_ASSIGNMENT,
            text=text,
            name=match["name"],
            operator=match["op"],
            expression=match["value"].strip(),
        )
    match = _ASSIGNMENT.match(text)
    if match:
        return Statement(
            StatementKind.ASSIGNMENT,
            text=text,
            name=match["name"],
            operator="=",
            expression=match["value"].strip(),
        )
    return None


def _classify_empty(text: str) -> Statement | None:
    return Statement(StatementKind.SKIP, text=text) if not text else None


def _classifiers(dialect: Dialect) -> tuple[Callable[[str], Statement | None], ...]:
    return (
        _classify_empty,
        functools.partial(_classify_print, dialect=dialect),
        _classify_jump,
        _classify_control,
        _classify_signature,
        functools.partial(_classify_array, dialect=dialect),
        _classify_skip,
        _classify_declaration,
        _classify_mutation,
    )


_CLASSIFIERS: dict[Dialect, tuple[Callable[[str], Statement | None], ...]] = {
    Dialect.JAVA: _classifiers(Dialect.JAVA),
    Dialect.CPP: _classifiers(Dialect.CPP),
}
