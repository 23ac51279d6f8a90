"""Composable API functions for the snippet visualizer.

``visualize_snippet`` is the full pipeline (dialect detection, entry point,
test inputs, harness, interpretation). ``visualize_java`` and
``visualize_cpp`` interpret already-complete source in a known dialect.
None of them raise: every outcome is a ``VisualizationResult``.
"""

from __future__ import annotations

import logging
from typing import Any

from . import constants
from .harness import build_harness
from .inputs import generate_test_inputs
from .language import Dialect, detect_language
from .run import TraceLimitExceeded, interpret
from .run_types import TracerConfig
from .signature import detect_entry_function
from .trace_types import VisualizationResult

logger = logging.getLogger(__name__)


def _fatal_result() -> VisualizationResult:
    return VisualizationResult(
        language=constants.LANGUAGE_UNKNOWN, error=constants.CANNOT_VISUALIZE_ERROR
    )


def _prepare_lines(
    source: str, dialect: Dialect, custom_inputs: dict[str, Any] | None
) -> tuple[list[str], dict[str, str] | None]:
    signature = detect_entry_function(source, dialect)
    if signature is None or not signature.parameters:
        return source.split("\n"), None

    inputs = generate_test_inputs(signature.parameters, custom_inputs)
    harness = build_harness(source, signature, inputs, dialect)
    if harness is None:
        return source.split("\n"), None
    return harness.lines, {name: value.display for name, value in inputs.items()}


def _interpret_lines(
    lines: list[str],
    dialect: Dialect,
    config: TracerConfig,
    dry_run_inputs: dict[str, str] | None = None,
) -> VisualizationResult:
    steps = interpret(lines, dialect, config)
    if not steps:
        return VisualizationResult(
            language=dialect.value,
            dry_run_inputs=dry_run_inputs,
            error=constants.NO_STEPS_ERROR,
        )
    logger.info("Recorded %d steps", len(steps))
    return VisualizationResult(
        steps=steps, language=dialect.value, dry_run_inputs=dry_run_inputs
    )


def visualize_snippet(
    source: str,
    custom_inputs: dict[str, Any] | None = None,
    config: TracerConfig = TracerConfig(),
) -> VisualizationResult:
    """Produce the step trace for a snippet in either supported dialect.

    Args:
        source: A function or bare script in the Java or C++ subset.
        custom_inputs: Optional parameter name → value overrides for the
            synthesized test inputs.
        config: Step, loop-iteration and array-size bounds.

    Returns:
        A ``VisualizationResult``. ``language`` is ``"unsupported"`` when no
        dialect was detected and ``"unknown"`` when a fatal bound was hit.
    """
    try:
        dialect = detect_language(source)
        if dialect == Dialect.UNSUPPORTED:
            logger.info("No supported dialect detected")
            return VisualizationResult(
                language=dialect.value, error=constants.UNSUPPORTED_ERROR
            )
        logger.info("Detected dialect: %s", dialect.value)

        lines, dry_run_inputs = _prepare_lines(source, dialect, custom_inputs)
        return _interpret_lines(lines, dialect, config, dry_run_inputs)
    except TraceLimitExceeded as exc:
        logger.warning("Visualization aborted: %s", exc)
        return _fatal_result()
    except Exception:
        logger.exception("Unexpected failure while visualizing snippet")
        return _fatal_result()


def _visualize_dialect(
    source: str, dialect: Dialect, config: TracerConfig
) -> VisualizationResult:
    try:
        return _interpret_lines(source.split("\n"), dialect, config)
    except TraceLimitExceeded as exc:
        logger.warning("Visualization aborted: %s", exc)
        return _fatal_result()
    except Exception:
        logger.exception("Unexpected failure while visualizing %s", dialect.value)
        return _fatal_result()


def visualize_java(
    source: str, config: TracerConfig = TracerConfig()
) -> VisualizationResult:
    """Interpret complete Java-subset source without synthesizing a harness."""
    return _visualize_dialect(source, Dialect.JAVA, config)


def visualize_cpp(
    source: str, config: TracerConfig = TracerConfig()
) -> VisualizationResult:
    """Interpret complete C++-subset source without synthesizing a harness."""
    return _visualize_dialect(source, Dialect.CPP, config)
