"""Surface-language detection from weighted syntactic markers."""

from __future__ import annotations

import logging
import re
from enum import Enum

logger = logging.getLogger(__name__)


class Dialect(str, Enum):
    JAVA = "java"
    CPP = "cpp"
    UNSUPPORTED = "unsupported"


_JAVA_MARKERS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"public\s+class\b"), 2),
    (re.compile(r"static\s+void\s+main"), 2),
    (re.compile(r"System\.out"), 2),
    (re.compile(r"int\[\]"), 1),
    (re.compile(r"boolean\[\]"), 1),
    (re.compile(r"String\[\]"), 1),
    (re.compile(r"long\[\]"), 1),
    (re.compile(r"\bnew\s+int\s*\["), 1),
)

_CPP_MARKERS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"#include"), 2),
    (re.compile(r"using\s+namespace\s+std"), 2),
    (re.compile(r"vector\s*<"), 1),
    (re.compile(r"\bcout\b"), 2),
    (re.compile(r"\bstd::"), 1),
)

_SCALAR_DECLARATION = re.compile(r"\bint\b")
_COUNTED_LOOP = re.compile(r"\bfor\s*\(")


def _score(source: str, markers: tuple[tuple[re.Pattern[str], int], ...]) -> int:
    return sum(weight for pattern, weight in markers if pattern.search(source))


def detect_language(source: str) -> Dialect:
    """Classify *source* as Java, C++ or unsupported. Never raises."""
    java_score = _score(source, _JAVA_MARKERS)
    cpp_score = _score(source, _CPP_MARKERS)
    logger.debug("Dialect scores: java=%d cpp=%d", java_score, cpp_score)

    if cpp_score > 0 and cpp_score >= java_score:
        return Dialect.CPP
    if java_score > 0:
        return Dialect.JAVA

    # Generic snippet with no strong markers: Java by convention
    if _SCALAR_DECLARATION.search(source) and _COUNTED_LOOP.search(source):
        return Dialect.JAVA

    return Dialect.UNSUPPORTED
