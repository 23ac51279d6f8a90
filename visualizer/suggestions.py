"""Input suggestions — boundary to an external text-generation service.

The package ships no network client. Callers inject a ``CompletionClient``;
anything it returns is validated here, and any failure degrades to ``None``
so the caller keeps the built-in default inputs.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

MAX_SOURCE_CHARS = 2000

INPUT_SUGGESTION_SYSTEM_PROMPT = (
    "You are a QA engineer. You generate meaningful test cases. "
    "You strictly output JSON."
)


class CompletionClient(ABC):
    """Anything that turns a system prompt and a user message into text."""

    @abstractmethod
    def complete(
        self, system_prompt: str, user_message: str, max_tokens: int = 1024
    ) -> str: ...


class SuggestedInputs(BaseModel):
    """Expected reply shape: ``{"inputs": {"<param>": <value>, ...}}``."""

    inputs: dict[str, Any] = Field(default_factory=dict)


def build_input_suggestion_prompt(source: str, language: str) -> str:
    return f"""\
Analyze this {language} code.
Identify the entry function and its parameters.
Generate a SINGLE best test case to demonstrate the logic (e.g., an interesting edge case or typical usage).
Return a strictly valid JSON object (no markdown) with a key "inputs" containing parameter names and values.

Example:
Code: int binarySearch(int[] arr, int target)
Output: {{ "inputs": {{ "arr": [1, 3, 5, 7, 9], "target": 5 }} }}

Code:
{source[:MAX_SOURCE_CHARS]}
"""


def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
    if text.endswith("```"):
        text = text.rsplit("\n", 1)[0] if "\n" in text else ""
    return text.strip()


def parse_suggested_inputs(raw: str) -> dict[str, Any] | None:
    """Extract the ``inputs`` map from a service reply, or ``None`` if malformed."""
    try:
        data = json.loads(_strip_fences(raw))
        suggestion = SuggestedInputs.model_validate(data)
    except (ValueError, ValidationError) as exc:
        logger.warning("Discarding malformed input suggestion: %s", exc)
        return None
    return suggestion.inputs or None


def request_suggested_inputs(
    source: str, language: str, client: CompletionClient
) -> dict[str, Any] | None:
    """Ask *client* for sample inputs; never raises."""
    prompt = build_input_suggestion_prompt(source, language)
    try:
        raw = client.complete(INPUT_SUGGESTION_SYSTEM_PROMPT, prompt)
    except Exception:
        logger.warning("Input suggestion request failed", exc_info=True)
        return None
    return parse_suggested_inputs(raw)
