"""Command-line entry point: ``snippet-visualizer [file] [options]``."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from . import constants
from .api import visualize_cpp, visualize_java, visualize_snippet
from .run_types import TracerConfig
from .state_types import format_value
from .trace_types import VisualizationResult

DEMO_SOURCE = """\
public int[] twoSum(int[] nums, int target) {
    for (int i = 0; i < nums.length; i++) {
        for (int j = i + 1; j < nums.length; j++) {
            if (nums[i] + nums[j] == target) {
                return new int[] {i, j};
            }
        }
    }
    return new int[] {};
}
"""

DEMO_INPUTS = {"nums": [2, 7, 11, 15], "target": 9}


def format_trace(result: VisualizationResult) -> str:
    """Human-readable listing of a result, one block per step."""
    out = [f"language: {result.language}"]
    if result.dry_run_inputs:
        shown = ", ".join(f"{k} = {v}" for k, v in result.dry_run_inputs.items())
        out.append(f"inputs: {shown}")
    if result.error:
        out.append(f"error: {result.error}")
    for number, step in enumerate(result.steps, start=1):
        out.append(f"── step {number} (line {step.line}) ──")
        for name, var in step.variables.items():
            out.append(f"  {name}: {var.type} = {format_value(var.value)}")
        for name, values in step.arrays.items():
            out.append(f"  {name}[] = {format_value(values)}")
        if step.output:
            out.append(f"  output: {step.output[-1]}")
    return "\n".join(out)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Step-by-step snippet visualizer")
    parser.add_argument("file", nargs="?", help="Source file to visualize")
    parser.add_argument(
        "--inputs",
        "-i",
        default=None,
        help='JSON object of parameter values, e.g. \'{"n": 5}\'',
    )
    parser.add_argument(
        "--language",
        "-l",
        default=None,
        choices=["java", "cpp"],
        help="Skip detection and interpret the source as this dialect",
    )
    parser.add_argument(
        "--max-steps",
        "-n",
        type=int,
        default=constants.DEFAULT_MAX_STEPS,
        help=f"Maximum recorded steps (default: {constants.DEFAULT_MAX_STEPS})",
    )
    parser.add_argument(
        "--max-loop-iterations",
        type=int,
        default=constants.DEFAULT_MAX_LOOP_ITERATIONS,
        help="Maximum iterations of a single loop "
        f"(default: {constants.DEFAULT_MAX_LOOP_ITERATIONS})",
    )
    parser.add_argument(
        "--trace", action="store_true", help="Print a readable step listing"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    custom_inputs = None
    if args.inputs:
        try:
            custom_inputs = json.loads(args.inputs)
        except ValueError as exc:
            print(f"--inputs is not valid JSON: {exc}", file=sys.stderr)
            return 2
        if not isinstance(custom_inputs, dict):
            print("--inputs must be a JSON object", file=sys.stderr)
            return 2

    if not args.file:
        source = DEMO_SOURCE
        custom_inputs = custom_inputs or DEMO_INPUTS
        print("No file provided. Using built-in demo:\n", file=sys.stderr)
        print(source, file=sys.stderr)
    else:
        try:
            with open(args.file) as f:
                source = f.read()
        except OSError as exc:
            print(f"cannot read {args.file}: {exc.strerror}", file=sys.stderr)
            return 2

    config = TracerConfig(
        max_steps=args.max_steps, max_loop_iterations=args.max_loop_iterations
    )
    if args.language == "java":
        result = visualize_java(source, config)
    elif args.language == "cpp":
        result = visualize_cpp(source, config)
    else:
        result = visualize_snippet(source, custom_inputs, config)

    if args.trace:
        print(format_trace(result))
    else:
        print(result.model_dump_json(indent=2))
    return 0 if result.error is None else 1


if __name__ == "__main__":
    sys.exit(main())
