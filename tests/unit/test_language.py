"""Tests for detect_language — weighted marker scoring with a generic fallback."""

from visualizer.language import Dialect, detect_language

JAVA_SOURCE = """\
public class Main {
    public static void main(String[] args) {
        System.out.println("hi");
    }
}
"""

CPP_SOURCE = """\
#include <iostream>
using namespace std;
int main() {
    cout << "hi" << endl;
}
"""


class TestDetectLanguage:
    def test_java_markers(self):
        assert detect_language(JAVA_SOURCE) == Dialect.JAVA

    def test_cpp_markers(self):
        assert detect_language(CPP_SOURCE) == Dialect.CPP

    def test_typed_array_alone_is_java(self):
        assert detect_language("int[] a = {1, 2};") == Dialect.JAVA

    def test_vector_alone_is_cpp(self):
        assert detect_language("vector<int> v = {1, 2};") == Dialect.CPP

    def test_tie_prefers_cpp(self):
        source = "int[] a = {1};\nvector<int> v = {1};"
        assert detect_language(source) == Dialect.CPP

    def test_stronger_java_wins_over_weak_cpp(self):
        source = 'System.out.println(x);\nstd::swap(a, b);'
        assert detect_language(source) == Dialect.JAVA

    def test_generic_counted_loop_falls_back_to_java(self):
        source = "int s = 0;\nfor (int i = 0; i < 3; i++) s += i;"
        assert detect_language(source) == Dialect.JAVA

    def test_loop_without_int_is_unsupported(self):
        assert detect_language("for (x of xs) {}") == Dialect.UNSUPPORTED

    def test_python_is_unsupported(self):
        assert detect_language("def f(x):\n    return x\n") == Dialect.UNSUPPORTED

    def test_empty_source_is_unsupported(self):
        assert detect_language("") == Dialect.UNSUPPORTED

    def test_dialect_values(self):
        assert Dialect.JAVA.value == "java"
        assert Dialect.CPP.value == "cpp"
        assert Dialect.UNSUPPORTED.value == "unsupported"
