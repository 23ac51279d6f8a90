"""Block boundaries — brace-depth scanning over source lines.

Every loop and branch needs to know where its body ends. Boundaries are
found by counting braces forward from the construct's header, ignoring
braces inside string/char literals and ``//`` comments. Braceless bodies
(a single statement on the header line or on the next line) are supported
as well, as are closing lines that carry a continuation (``} else {``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_HEADER_START = re.compile(r"^(else\s+if|if|while|for)\s*\(")
_ELSE_START = re.compile(r"^else\b(.*)$")


@dataclass(frozen=True)
class BlockBoundary:
    """Line range of a construct's body (0-based, inclusive).

    ``body_start > body_end`` means the body has no lines of its own;
    ``inline`` then holds the statements written on the header line.
    ``tail`` is whatever follows the closing brace on the ``end`` line.
    """

    header: int
    end: int
    body_start: int
    body_end: int
    inline: tuple[str, ...] = ()
    tail: str = ""


@dataclass(frozen=True)
class Header:
    keyword: str
    inner: str
    rest: str


@dataclass(frozen=True)
class Clause:
    line: int
    condition: str | None
    boundary: BlockBoundary


@dataclass(frozen=True)
class BranchChain:
    clauses: tuple[Clause, ...] = field(default_factory=tuple)
    end: int = 0


# ── Text helpers ─────────────────────────────────────────────────


def _literal_spans(text: str):
    """Yield (index, char, in_literal) for every character of *text*."""
    quote = ""
    escaped = False
    for i, ch in enumerate(text):
        if quote:
            yield i, ch, True
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = ""
            continue
        if ch in ('"', "'"):
            quote = ch
            yield i, ch, True
            continue
        yield i, ch, False


def strip_comment(line: str) -> str:
    """Drop a trailing ``//`` comment that is not inside a literal."""
    for i, ch, in_literal in _literal_spans(line):
        if not in_literal and ch == "/" and line.startswith("//", i):
            return line[:i]
    return line


def clean_line(line: str) -> str:
    """Trim whitespace, a trailing comment and a trailing semicolon."""
    return strip_comment(line).strip().removesuffix(";").strip()


def split_top_level(text: str, separator: str) -> list[str]:
    """Split on *separator* outside literals, parentheses, brackets and braces."""
    parts: list[str] = []
    depth = 0
    start = 0
    skip_until = -1
    for i, ch, in_literal in _literal_spans(text):
        if i < skip_until or in_literal:
            continue
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif depth == 0 and text.startswith(separator, i):
            parts.append(text[start:i])
            start = i + len(separator)
            skip_until = start
    parts.append(text[start:])
    return [p.strip() for p in parts]


def split_header(text: str) -> Header | None:
    """Split a ``for``/``while``/``if``/``else if``/``else`` header.

    Returns ``None`` when *text* is not a control header or its parentheses
    do not balance.
    """
    match = _HEADER_START.match(text)
    if match:
        keyword = re.sub(r"\s+", " ", match.group(1))
        open_at = match.end() - 1
        depth = 0
        for i, ch, in_literal in _literal_spans(text):
            if i < open_at or in_literal:
                continue
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    return Header(
                        keyword=keyword,
                        inner=text[open_at + 1 : i].strip(),
                        rest=text[i + 1 :].strip(),
                    )
        return None
    match = _ELSE_START.match(text)
    if match:
        return Header(keyword="else", inner="", rest=match.group(1).strip())
    return None


def _inline_statements(text: str) -> tuple[str, ...]:
    return tuple(s for s in split_top_level(text, ";") if s)


def next_code_line(lines: list[str], start: int) -> int | None:
    """Index of the first line at or after *start* with code on it."""
    for i in range(start, len(lines)):
        if strip_comment(lines[i]).strip():
            return i
    return None


# ── Boundary scanning ────────────────────────────────────────────


def find_block_end(lines: list[str], start: int) -> int:
    """Index of the line whose closing brace returns depth to zero.

    Counting starts at the beginning of line *start*; if the braces never
    balance the last line is returned.
    """
    depth = 0
    for i in range(start, len(lines)):
        for _, ch, in_literal in _literal_spans(strip_comment(lines[i])):
            if in_literal:
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return i
    return len(lines) - 1


def _match_braces(
    lines: list[str], header: int, open_line: int, text: str
) -> BlockBoundary:
    """Boundary of the brace block whose ``{`` starts *text* on *open_line*."""
    depth = 0
    for i, ch, in_literal in _literal_spans(text):
        if in_literal:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return BlockBoundary(
                    header=header,
                    end=open_line,
                    body_start=open_line + 1,
                    body_end=open_line,
                    inline=_inline_statements(text[1:i]),
                    tail=clean_line(text[i + 1 :]),
                )

    for k in range(open_line + 1, len(lines)):
        code = strip_comment(lines[k])
        for i, ch, in_literal in _literal_spans(code):
            if in_literal:
                continue
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return BlockBoundary(
                        header=header,
                        end=k,
                        body_start=open_line + 1,
                        body_end=k - 1,
                        tail=clean_line(code[i + 1 :]),
                    )

    last = len(lines) - 1
    return BlockBoundary(
        header=header, end=last, body_start=open_line + 1, body_end=last
    )


def locate_body(lines: list[str], header: int, rest: str) -> BlockBoundary:
    """Find the body of the construct on line *header*.

    *rest* is the header text left after its parenthesized part (or after
    ``else``): an opening brace, an inline statement, or nothing, in which
    case the body starts on the next code line.
    """
    rest = rest.strip()
    if rest.startswith("{"):
        return _match_braces(lines, header, header, rest)
    if rest:
        return BlockBoundary(
            header=header,
            end=header,
            body_start=header + 1,
            body_end=header,
            inline=_inline_statements(rest),
        )

    nxt = next_code_line(lines, header + 1)
    if nxt is None:
        return BlockBoundary(
            header=header, end=header, body_start=header + 1, body_end=header
        )
    text = strip_comment(lines[nxt]).strip()
    if text.startswith("{"):
        return _match_braces(lines, header, nxt, text)
    end = statement_extent(lines, nxt)
    return BlockBoundary(header=header, end=end, body_start=nxt, body_end=end)


def statement_extent(lines: list[str], index: int) -> int:
    """Last line index of the statement or construct starting on *index*."""
    text = clean_line(lines[index])
    header = split_header(text)
    if header is None or header.keyword in ("else", "else if"):
        return index
    if header.keyword == "if":
        return scan_branch_chain(lines, index, text).end
    return locate_body(lines, index, header.rest).end


def scan_branch_chain(lines: list[str], index: int, text: str) -> BranchChain:
    """Collect every clause of the if / else-if / else chain starting at *index*.

    Clause boundaries are computed without evaluating any condition so the
    caller can jump past the whole chain once a clause has been chosen.
    """
    clauses: list[Clause] = []
    line = index
    while True:
        header = split_header(text)
        if header is None:
            break
        boundary = locate_body(lines, line, header.rest)
        clauses.append(
            Clause(
                line=line,
                condition=None if header.keyword == "else" else header.inner,
                boundary=boundary,
            )
        )
        if header.keyword == "else":
            break

        if boundary.tail:
            candidate, candidate_line = boundary.tail, boundary.end
        else:
            nxt = next_code_line(lines, boundary.end + 1)
            if nxt is None:
                break
            candidate, candidate_line = clean_line(lines[nxt]), nxt
        candidate = candidate.lstrip("}").strip()
        if not _ELSE_START.match(candidate):
            break
        text, line = candidate, candidate_line

    end = clauses[-1].boundary.end if clauses else index
    return BranchChain(clauses=tuple(clauses), end=end)
