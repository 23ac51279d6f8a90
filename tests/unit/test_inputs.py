"""Tests for generate_test_inputs — per-type defaults and override coercion."""

import logging

from visualizer.inputs import TestInput, generate_test_inputs
from visualizer.signature import Parameter


def _params(*pairs):
    return tuple(Parameter(name=name, type=type_text) for type_text, name in pairs)


class TestDefaults:
    def test_integer_default(self):
        inputs = generate_test_inputs(_params(("int", "n")))
        assert inputs["n"] == TestInput(display="3", value=3)

    def test_array_default(self):
        inputs = generate_test_inputs(_params(("int[]", "nums")))
        assert inputs["nums"].display == "[1, 2, 3]"
        assert inputs["nums"].value == [1, 2, 3]

    def test_vector_default(self):
        inputs = generate_test_inputs(_params(("vector<int>", "v")))
        assert inputs["v"].value == [1, 2, 3]

    def test_boolean_default_is_true_as_one(self):
        inputs = generate_test_inputs(_params(("boolean", "flag")))
        assert inputs["flag"] == TestInput(display="true", value=1)

    def test_boolean_array_default(self):
        inputs = generate_test_inputs(_params(("boolean[]", "seen")))
        assert inputs["seen"].value == [1, 0, 1]

    def test_text_default(self):
        inputs = generate_test_inputs(_params(("String", "s")))
        assert inputs["s"] == TestInput(display='"abc"', value="abc")

    def test_unknown_type_uses_integer_default(self):
        inputs = generate_test_inputs(_params(("double", "rate")))
        assert inputs["rate"].value == 3

    def test_every_parameter_gets_a_value(self):
        params = _params(("int[]", "a"), ("int", "k"), ("boolean", "f"))
        assert list(generate_test_inputs(params)) == ["a", "k", "f"]

    def test_defaults_are_not_shared_between_calls(self):
        first = generate_test_inputs(_params(("int[]", "a")))
        first["a"].value.append(99)
        second = generate_test_inputs(_params(("int[]", "a")))
        assert second["a"].value == [1, 2, 3]


class TestOverrides:
    def test_array_override(self):
        inputs = generate_test_inputs(
            _params(("int[]", "nums")), {"nums": [2, 7, 11, 15]}
        )
        assert inputs["nums"] == TestInput(display="[2, 7, 11, 15]", value=[2, 7, 11, 15])

    def test_array_override_from_json_text(self):
        inputs = generate_test_inputs(_params(("int[]", "nums")), {"nums": "[4, 5]"})
        assert inputs["nums"].value == [4, 5]

    def test_scalar_override_from_text(self):
        inputs = generate_test_inputs(_params(("int", "n")), {"n": "42"})
        assert inputs["n"] == TestInput(display="42", value=42)

    def test_float_override_truncates(self):
        inputs = generate_test_inputs(_params(("int", "n")), {"n": 4.9})
        assert inputs["n"].value == 4

    def test_boolean_override(self):
        inputs = generate_test_inputs(_params(("boolean", "flag")), {"flag": False})
        assert inputs["flag"] == TestInput(display="false", value=0)

    def test_text_override(self):
        inputs = generate_test_inputs(_params(("String", "s")), {"s": "racecar"})
        assert inputs["s"] == TestInput(display='"racecar"', value="racecar")

    def test_unmatched_override_is_ignored(self):
        inputs = generate_test_inputs(_params(("int", "n")), {"other": 9})
        assert inputs["n"].value == 3

    def test_bad_array_override_degrades_to_default(self, caplog):
        with caplog.at_level(logging.WARNING):
            inputs = generate_test_inputs(_params(("int[]", "nums")), {"nums": "abc"})
        assert inputs["nums"].value == [1, 2, 3]
        assert "nums" in caplog.text

    def test_bad_scalar_override_degrades_to_default(self):
        inputs = generate_test_inputs(_params(("int", "n")), {"n": [1, 2]})
        assert inputs["n"].value == 3

    def test_array_with_bad_element_degrades_to_default(self):
        inputs = generate_test_inputs(_params(("int[]", "a")), {"a": [1, "x"]})
        assert inputs["a"].value == [1, 2, 3]
