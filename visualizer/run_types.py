"""Run pipeline data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass

from . import constants


@dataclass(frozen=True)
class TracerConfig:
    """Groups the fixed bounds of one interpretation run."""

    max_steps: int = constants.DEFAULT_MAX_STEPS
    max_loop_iterations: int = constants.DEFAULT_MAX_LOOP_ITERATIONS
    max_array_size: int = constants.DEFAULT_MAX_ARRAY_SIZE
