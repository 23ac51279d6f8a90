"""End-to-end tests for visualize_snippet / visualize_java / visualize_cpp."""

from visualizer import constants, visualize_cpp, visualize_java, visualize_snippet
from visualizer.run_types import TracerConfig

TWO_SUM = """\
public int[] twoSum(int[] nums, int target) {
    for (int i = 0; i < nums.length; i++) {
        for (int j = i + 1; j < nums.length; j++) {
            if (nums[i] + nums[j] == target) {
                return new int[] {i, j};
            }
        }
    }
    return new int[] {};
}"""

ARRAY_SUM = """\
int[] arr = {5, 10, 15, 5};
int sum = 0;
for (int i = 0; i < arr.length; i++) {
    sum += arr[i];
}
System.out.println("Sum: " + sum);"""

CPP_PROGRAM = """\
#include <iostream>
#include <vector>
using namespace std;

int main() {
    vector<int> v = {1, 2, 3};
    int total = 0;
    for (int x : v) {
        total += x;
    }
    cout << "Total: " << total << endl;
    return 0;
}"""

JAVA_PROGRAM = """\
public class Main {
    public static void main(String[] args) {
        int[] nums = {1, 2, 3};
        int total = 0;
        for (int n : nums) {
            total += n;
        }
        System.out.println("Total: " + total);
    }
}"""

SUM_VEC = """\
int sumVec(vector<int>& v) {
    int total = 0;
    for (int x : v) {
        total += x;
    }
    return total;
}"""

MAIN_FIRST = """\
public class Solution {
    public static void main(String[] args) {
        int[] r = twoSum(new int[] {2, 7, 11, 15}, 9);
    }

    public static int[] twoSum(int[] nums, int target) {
        for (int i = 0; i < nums.length; i++) {
            for (int j = i + 1; j < nums.length; j++) {
                if (nums[i] + nums[j] == target) {
                    return new int[] {i, j};
                }
            }
        }
        return new int[] {};
    }
}"""

INFINITE = "int[] a = {1};\nint i = 0;\nwhile (true) {\n    i++;\n}"


class TestVisualizeSnippet:
    def test_script_snippet(self):
        result = visualize_snippet(ARRAY_SUM)
        assert result.language == "java"
        assert result.error is None
        assert result.dry_run_inputs is None
        assert [s.line for s in result.steps] == [1, 2, 3, 4, 3, 4, 3, 4, 3, 4, 3, 6]
        assert result.steps[-1].output == ["Sum: 35"]

    def test_function_with_custom_inputs(self):
        result = visualize_snippet(TWO_SUM, {"nums": [2, 7, 11, 15], "target": 9})
        assert result.language == "java"
        assert result.dry_run_inputs == {"nums": "[2, 7, 11, 15]", "target": "9"}
        assert [s.line for s in result.steps] == [1, 2, 3, 4, 5, 6]
        assert result.steps[-1].output == ["Return: [0, 1]"]

    def test_function_with_default_inputs(self):
        result = visualize_snippet(TWO_SUM)
        assert result.dry_run_inputs == {"nums": "[1, 2, 3]", "target": "3"}
        assert result.steps[-1].output == ["Return: [0, 1]"]

    def test_bad_custom_input_falls_back_to_default(self):
        result = visualize_snippet(TWO_SUM, {"nums": "oops"})
        assert result.error is None
        assert result.dry_run_inputs["nums"] == "[1, 2, 3]"

    def test_cpp_function_harness(self):
        result = visualize_snippet(SUM_VEC)
        assert result.language == "cpp"
        assert result.dry_run_inputs == {"v": "[1, 2, 3]"}
        assert result.steps[-1].output == ["Return: 6"]

    def test_method_defined_after_main(self):
        result = visualize_snippet(MAIN_FIRST)
        assert result.error is None
        assert result.dry_run_inputs == {"nums": "[1, 2, 3]", "target": "3"}
        assert result.steps[0].arrays["nums"] == [1, 2, 3]
        assert result.steps[-1].output == ["Return: [0, 1]"]

    def test_zero_parameter_function_runs_raw_source(self):
        source = "static void demo() {\n    int[] a = {1, 2};\n    int x = a[0];\n}"
        result = visualize_snippet(source)
        assert result.dry_run_inputs is None
        assert [s.line for s in result.steps] == [2, 3]

    def test_unsupported_language(self):
        result = visualize_snippet("def f(x):\n    return x\n")
        assert result.language == "unsupported"
        assert result.error == constants.UNSUPPORTED_ERROR
        assert result.steps == []

    def test_no_steps(self):
        result = visualize_snippet("public class Empty {\n}")
        assert result.language == "java"
        assert result.error == constants.NO_STEPS_ERROR
        assert result.steps == []

    def test_infinite_loop_is_fatal(self):
        result = visualize_snippet(INFINITE)
        assert result.language == constants.LANGUAGE_UNKNOWN
        assert result.error == constants.CANNOT_VISUALIZE_ERROR
        assert result.steps == []

    def test_step_cap_is_fatal(self):
        result = visualize_snippet(ARRAY_SUM, config=TracerConfig(max_steps=3))
        assert result.error == constants.CANNOT_VISUALIZE_ERROR

    def test_unexpected_failure_never_raises(self, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("visualizer.api.interpret", boom)
        result = visualize_snippet(ARRAY_SUM)
        assert result.language == constants.LANGUAGE_UNKNOWN
        assert result.error == constants.CANNOT_VISUALIZE_ERROR

    def test_repeated_calls_are_identical(self):
        first = visualize_snippet(TWO_SUM, {"nums": [3, 3], "target": 6})
        second = visualize_snippet(TWO_SUM, {"nums": [3, 3], "target": 6})
        assert first.model_dump() == second.model_dump()


class TestDialectEntryPoints:
    def test_visualize_cpp_program(self):
        result = visualize_cpp(CPP_PROGRAM)
        assert result.language == "cpp"
        assert result.steps[-1].output == ["Total: 6", "Return: 0"]

    def test_visualize_java_program(self):
        result = visualize_java(JAVA_PROGRAM)
        assert result.language == "java"
        assert result.steps[-1].output == ["Total: 6"]
        assert result.steps[-1].variables["total"].value == 6

    def test_full_java_program_through_snippet(self):
        result = visualize_snippet(JAVA_PROGRAM)
        assert result.dry_run_inputs is None
        assert result.steps[-1].output == ["Total: 6"]

    def test_dialect_entry_points_are_fatal_safe(self):
        result = visualize_java(INFINITE)
        assert result.error == constants.CANNOT_VISUALIZE_ERROR
