"""Trace data types for step-by-step execution replay."""

from __future__ import annotations

import copy

from pydantic import BaseModel, ConfigDict, Field

from .state_types import ExecutionState, Variable


class Step(BaseModel):
    """A single snapshot in the execution trace.

    Captures the active (1-based) line and a copy of the variables, arrays
    and printed output taken right after the statement on that line ran.
    """

    model_config = ConfigDict(frozen=True)

    line: int
    variables: dict[str, Variable] = Field(default_factory=dict)
    arrays: dict[str, list] = Field(default_factory=dict)
    output: list[str] = Field(default_factory=list)

    @classmethod
    def capture(cls, line: int, state: ExecutionState) -> Step:
        return cls(
            line=line,
            variables=dict(state.variables),
            arrays=copy.deepcopy(state.arrays),
            output=list(state.output),
        )


class VisualizationResult(BaseModel):
    """Structured outcome of one visualization call — never an exception."""

    steps: list[Step] = Field(default_factory=list)
    language: str
    dry_run_inputs: dict[str, str] | None = None
    error: str | None = None
