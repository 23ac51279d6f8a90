"""Control-flow interpreter — walks source lines with an explicit frame stack.

Each frame is either a ``BlockFrame`` (a run of lines plus any statements
written inline on a header line) or a ``LoopFrame`` (a for / while /
for-each loop deciding whether to push its body again). The interpreter
loop always advances the frame on top of the stack; loop and branch bodies
are pushed instead of walked recursively.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Union

from . import constants
from .blocks import BlockBoundary, locate_body, scan_branch_chain, split_top_level
from .evaluator import EvaluationError, evaluate_condition, evaluate_expression
from .executor import Control, ExecutionResult, StatementError, execute_statement
from .language import Dialect
from .run_types import TracerConfig
from .state_types import ExecutionState
from .statements import (
    CONTROL_KINDS,
    Statement,
    StatementKind,
    classify_statement,
    clean_statement,
)
from .trace_types import Step

logger = logging.getLogger(__name__)


class TraceLimitExceeded(Exception):
    """A fatal bound (step count or loop iterations) was exceeded."""


# ── Frames ───────────────────────────────────────────────────────


@dataclass
class BlockFrame:
    cursor: int
    end: int
    pending: list[str] = field(default_factory=list)
    pending_line: int = 0


@dataclass
class LoopFrame:
    kind: StatementKind
    line: int
    body: BlockBoundary
    body_line: int
    condition: str = ""
    update: str = ""
    name: str = ""
    declared_type: str = ""
    items: list[Any] = field(default_factory=list)
    iterations: int = 0


Frame = Union[BlockFrame, LoopFrame]


@dataclass(frozen=True)
class _Text:
    """Lines a construct is scanned in; inline statements use a one-line view."""

    lines: list[str]
    fixed_line: int | None = None

    def line_no(self, index: int) -> int:
        return self.fixed_line if self.fixed_line is not None else index + 1


# ── Interpreter ──────────────────────────────────────────────────


class _Interpreter:
    def __init__(self, lines: list[str], dialect: Dialect, config: TracerConfig):
        self.source = _Text(lines)
        self.dialect = dialect
        self.config = config
        self.state = ExecutionState()
        self.steps: list[Step] = []
        self.stack: list[Frame] = []

    def run(self) -> list[Step]:
        self.stack.append(BlockFrame(cursor=0, end=len(self.source.lines) - 1))
        while self.stack:
            frame = self.stack[-1]
            if isinstance(frame, LoopFrame):
                self._advance_loop(frame)
            elif frame.pending:
                text = frame.pending.pop(0)
                self._run_text(_Text([text], fixed_line=frame.pending_line), 0, text)
            elif frame.cursor > frame.end:
                self.stack.pop()
            else:
                index = frame.cursor
                frame.cursor = (
                    self._run_text(self.source, index, self.source.lines[index]) + 1
                )
        return self.steps

    # ── Steps ────────────────────────────────────────────────────

    def _record(self, line: int) -> None:
        if len(self.steps) >= self.config.max_steps:
            raise TraceLimitExceeded(constants.STEP_LIMIT_MESSAGE)
        self.steps.append(Step.capture(line, self.state))
        logger.debug("Step %d at line %d", len(self.steps), line)

    # ── Straight-line statements ─────────────────────────────────

    def _run_text(self, text_view: _Text, index: int, raw: str) -> int:
        """Run the line at *index*; returns the last line index it consumed."""
        text = clean_statement(raw)
        statement = classify_statement(text, self.dialect)
        line = text_view.line_no(index)

        if statement.kind in CONTROL_KINDS:
            return self._run_construct(statement, text_view, index, text)

        segments = split_top_level(text, ";") if ";" in text else [text]
        for segment in segments:
            if not segment:
                continue
            part = (
                statement
                if len(segments) == 1
                else classify_statement(segment, self.dialect)
            )
            if part.kind in CONTROL_KINDS:
                logger.warning("Skipping nested construct on line %d", line)
                continue
            result = self._execute(part, line)
            if result.control != Control.NONE:
                self._jump(result.control, line)
                break
        return index

    def _execute(self, statement: Statement, line: int) -> ExecutionResult:
        if statement.kind == StatementKind.UNRECOGNIZED:
            logger.debug("Unrecognized statement on line %d: %r", line, statement.text)
        try:
            result = execute_statement(statement, self.state, self.config)
        except (EvaluationError, StatementError) as exc:
            logger.warning("Skipping line %d: %s", line, exc)
            return ExecutionResult.unchanged()
        if result.emit_step:
            self._record(line)
        return result

    def _run_clause(self, clause: str) -> None:
        """Run a loop init/update clause; comma-separated parts run in order."""
        statement = classify_statement(clause, self.dialect)
        if statement.kind == StatementKind.DECLARATION:
            parts = [statement]
        else:
            parts = [
                classify_statement(p, self.dialect)
                for p in split_top_level(clause, ",")
                if p
            ]
        for part in parts:
            if part.kind == StatementKind.MALFORMED:
                raise StatementError(part.error, part.text)
            execute_statement(part, self.state, self.config)

    def _jump(self, control: Control, line: int) -> None:
        if control == Control.RETURN:
            self.stack.clear()
            return
        if not any(isinstance(f, LoopFrame) for f in self.stack):
            logger.warning("Ignoring %s outside a loop on line %d", control.value, line)
            return
        while not isinstance(self.stack[-1], LoopFrame):
            self.stack.pop()
        if control == Control.BREAK:
            self.stack.pop()

    # ── Constructs ───────────────────────────────────────────────

    @staticmethod
    def _body_frame(boundary: BlockBoundary, pending_line: int) -> BlockFrame:
        return BlockFrame(
            cursor=boundary.body_start,
            end=boundary.body_end,
            pending=list(boundary.inline),
            pending_line=pending_line,
        )

    def _run_construct(
        self, statement: Statement, text_view: _Text, index: int, text: str
    ) -> int:
        if statement.kind == StatementKind.IF:
            return self._run_branch_chain(text_view, index, text)

        boundary = locate_body(text_view.lines, index, statement.rest)
        line = text_view.line_no(index)
        if statement.kind in (StatementKind.ELSE, StatementKind.ELSE_IF):
            logger.debug("Skipping detached %s on line %d", statement.kind.value, line)
            return boundary.end

        frame = LoopFrame(
            kind=statement.kind,
            line=line,
            body=boundary,
            body_line=text_view.line_no(boundary.end),
            condition=statement.condition,
            update=statement.update,
            name=statement.name,
            declared_type=statement.declared_type,
        )
        try:
            self._start_loop(frame, statement)
        except (EvaluationError, StatementError) as exc:
            logger.warning("Skipping loop on line %d: %s", line, exc)
            return boundary.end
        self.stack.append(frame)
        return boundary.end

    def _start_loop(self, frame: LoopFrame, statement: Statement) -> None:
        if frame.kind == StatementKind.FOR:
            if statement.init:
                self._run_clause(statement.init)
                self._record(frame.line)
        elif frame.kind == StatementKind.WHILE:
            self._record(frame.line)
        else:
            items = evaluate_expression(statement.expression, self.state)
            if not isinstance(items, (list, str)):
                raise StatementError(
                    f"cannot iterate over {statement.expression}", statement.text
                )
            frame.items = list(items)

    def _loop_continues(self, frame: LoopFrame) -> bool:
        if frame.kind == StatementKind.FOREACH:
            return frame.iterations < len(frame.items)
        if not frame.condition.strip():
            return True
        try:
            return evaluate_condition(frame.condition, self.state)
        except EvaluationError as exc:
            logger.warning("Leaving loop on line %d: %s", frame.line, exc)
            return False

    def _advance_loop(self, frame: LoopFrame) -> None:
        if frame.iterations > 0:
            if frame.kind == StatementKind.FOR and frame.update:
                try:
                    self._run_clause(frame.update)
                except (EvaluationError, StatementError) as exc:
                    logger.warning("Loop update on line %d failed: %s", frame.line, exc)
                self._record(frame.line)
            elif frame.kind == StatementKind.WHILE:
                self._record(frame.line)

        if not self._loop_continues(frame):
            self.stack.pop()
            return

        frame.iterations += 1
        if frame.iterations > self.config.max_loop_iterations:
            raise TraceLimitExceeded(constants.LOOP_LIMIT_MESSAGE)

        if frame.kind == StatementKind.FOREACH:
            item = frame.items[frame.iterations - 1]
            try:
                self.state.declare(frame.name, frame.declared_type, item)
            except ValueError as exc:
                logger.warning("Leaving loop on line %d: %s", frame.line, exc)
                self.stack.pop()
                return
            self._record(frame.line)

        self.stack.append(self._body_frame(frame.body, frame.body_line))

    def _run_branch_chain(self, text_view: _Text, index: int, text: str) -> int:
        chain = scan_branch_chain(text_view.lines, index, text)
        for clause in chain.clauses:
            line = text_view.line_no(clause.line)
            if clause.condition is not None:
                try:
                    taken = evaluate_condition(clause.condition, self.state)
                except EvaluationError as exc:
                    logger.warning("Skipping branch on line %d: %s", line, exc)
                    return chain.end
                self._record(line)
                if not taken:
                    continue
            else:
                self._record(line)
            self.stack.append(
                self._body_frame(
                    clause.boundary, text_view.line_no(clause.boundary.end)
                )
            )
            break
        return chain.end


def interpret(
    lines: list[str],
    dialect: Dialect = Dialect.JAVA,
    config: TracerConfig = TracerConfig(),
) -> list[Step]:
    """Interpret *lines* and return the recorded steps.

    Per-line failures are logged and skipped. Raises ``TraceLimitExceeded``
    when the step or loop-iteration bound is exceeded.
    """
    return _Interpreter(lines, dialect, config).run()
