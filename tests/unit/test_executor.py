"""Tests for execute_statement — straight-line statements against ExecutionState."""

import pytest

from visualizer.evaluator import EvaluationError
from visualizer.executor import Control, ExecutionResult, StatementError, execute_statement
from visualizer.language import Dialect
from visualizer.run_types import TracerConfig
from visualizer.state_types import ExecutionState, Variable
from visualizer.statements import classify_statement


def _run(*lines, state=None, dialect=Dialect.JAVA, config=TracerConfig()):
    """Execute every line in order and return (state, last result)."""
    state = state if state is not None else ExecutionState()
    result = None
    for line in lines:
        result = execute_statement(classify_statement(line, dialect), state, config)
    return state, result


class TestScalars:
    def test_declaration_without_initializer_is_zero(self):
        state, result = _run("int x;")
        assert state.variables["x"] == Variable(type="int", value=0)
        assert result == ExecutionResult.changed()

    def test_declaration_truncates(self):
        state, _ = _run("int x = 7 / 2;", "int y = 2.9;")
        assert state.lookup("x") == 3
        assert state.lookup("y") == 2

    def test_text_into_int_is_an_error(self):
        with pytest.raises(StatementError):
            _run('int x = "abc";')

    def test_unchanged_assignment_emits_no_step(self):
        state, result = _run("int x = 3;", "x = 3;")
        assert result.emit_step is False

    def test_assignment_to_undeclared_name(self):
        state, result = _run("y = 4;")
        assert state.variables["y"] == Variable(type="unknown", value=4)
        assert result.emit_step is True

    def test_increment_creates_int(self):
        state, _ = _run("k++;")
        assert state.variables["k"] == Variable(type="int", value=1)

    def test_compound_division_per_type(self):
        state, _ = _run("int a = 7;", "double d = 7.0;", "a /= 2;", "d /= 2;")
        assert state.lookup("a") == 3
        assert state.lookup("d") == 3.5

    def test_unknown_name_in_expression(self):
        with pytest.raises(EvaluationError):
            _run("int x = missing + 1;")

    def test_declarators_read_earlier_ones(self):
        state, _ = _run("int a = 1, b = a + 2;")
        assert (state.lookup("a"), state.lookup("b")) == (1, 3)

    def test_failed_declarator_commits_nothing(self):
        state = ExecutionState()
        with pytest.raises(EvaluationError):
            _run("int a = 1, b = zz;", state=state)
        assert "a" not in state.variables

    def test_compound_growth_is_an_error(self):
        state = ExecutionState()
        state.assign("x", 2**200)
        with pytest.raises(StatementError):
            _run("x *= x;", state=state)
        assert state.lookup("x") == 2**200


class TestArrays:
    def test_literal(self):
        state, _ = _run("int[] a = {1, 2, 3};")
        assert state.arrays["a"] == [1, 2, 3]
        assert state.array_types["a"] == "int"

    def test_sized_array_is_zero_filled(self):
        state, _ = _run("int n = 3;", "int[] dp = new int[n + 1];")
        assert state.arrays["dp"] == [0, 0, 0, 0]

    def test_vector_fill(self):
        state, _ = _run("vector<int> v(3, 7);", dialect=Dialect.CPP)
        assert state.arrays["v"] == [7, 7, 7]

    def test_size_limit(self):
        with pytest.raises(StatementError, match="exceeds limit"):
            _run("int[] a = new int[20];", config=TracerConfig(max_array_size=10))

    def test_negative_size(self):
        with pytest.raises(StatementError):
            _run("int[] a = new int[-1];")

    def test_indexed_write_needs_declared_array(self):
        with pytest.raises(StatementError, match="not declared"):
            _run("b[0] = 1;")

    def test_indexed_write_bounds(self):
        with pytest.raises(StatementError, match="out of bounds"):
            _run("int[] a = {1, 2, 3};", "a[5] = 1;")

    def test_indexed_compound_and_truncation(self):
        state, _ = _run("int[] a = {1, 2, 3};", "a[1] += 4;", "a[0] = 2.9;")
        assert state.arrays["a"] == [2, 6, 3]

    def test_push_back(self):
        state, _ = _run("vector<int> v;", "v.push_back(4);", dialect=Dialect.CPP)
        assert state.arrays["v"] == [4]

    def test_signature_registers_empty_arrays(self):
        state, result = _run(
            "public static int solve(int[] nums, boolean[] seen, int k) {"
        )
        assert state.arrays == {"nums": [], "seen": []}
        assert state.array_types == {"nums": "int", "seen": "boolean"}
        assert result.emit_step is False


class TestPrint:
    def test_concatenation(self):
        state, _ = _run("int sum = 35;", 'System.out.println("Sum: " + sum);')
        assert state.output == ["Sum: 35"]

    def test_each_print_is_one_line(self):
        state, _ = _run('System.out.print("a");', 'System.out.print("b");')
        assert state.output == ["a", "b"]

    def test_cout_drops_line_breaks(self):
        state, _ = _run("int x = 5;", 'cout << "x = " << x << endl;', dialect=Dialect.CPP)
        assert state.output == ["x = 5"]

    def test_printf(self):
        state, _ = _run("int x = 5;", 'System.out.printf("x=%d, y=%3d%n", x, 7);')
        assert state.output == ["x=5, y=  7"]

    def test_printf_float_precision(self):
        state, _ = _run('printf("%.2f\\n", 3.14159);', dialect=Dialect.CPP)
        assert state.output == ["3.14"]

    def test_unevaluable_part_is_shown_raw(self):
        state, _ = _run("int x = 1;", 'System.out.println("Total: " + foo(x));')
        assert state.output == ["Total: foo(x)"]


class TestReturn:
    def test_scalar(self):
        state, result = _run("int a = 2;", "int b = 3;", "return a + b;")
        assert state.output == ["Return: 5"]
        assert result == ExecutionResult.jump(Control.RETURN, emit_step=True)

    @pytest.mark.parametrize(
        "statement",
        ["return new int[] {i, j};", "return {i, j};", "return vector<int>{i, j};"],
    )
    def test_array_forms(self, statement):
        state, _ = _run("int i = 0;", "int j = 1;", statement)
        assert state.output == ["Return: [0, 1]"]

    def test_unevaluable_value_is_shown_raw(self):
        state, result = _run("return foo(3);")
        assert state.output == ["Return: foo(3)"]
        assert result.control == Control.RETURN

    def test_bare_return(self):
        state, result = _run("return;")
        assert state.output == []
        assert result == ExecutionResult.jump(Control.RETURN)


class TestJumpsAndErrors:
    def test_break_and_continue(self):
        assert _run("break;")[1].control == Control.BREAK
        assert _run("continue;")[1].control == Control.CONTINUE

    def test_malformed_raises(self):
        with pytest.raises(StatementError):
            _run("vector<int> v(1, 2, 3);", dialect=Dialect.CPP)

    def test_control_headers_are_rejected(self):
        with pytest.raises(StatementError):
            _run("while (x > 0) {")

    def test_skipped_lines_change_nothing(self):
        state, result = _run("import java.util.*;")
        assert result == ExecutionResult.unchanged()
        assert state == ExecutionState()
