"""Tests for brace-depth block scanning and header splitting."""

from visualizer.blocks import (
    BlockBoundary,
    Header,
    clean_line,
    find_block_end,
    locate_body,
    scan_branch_chain,
    split_header,
    split_top_level,
    strip_comment,
)


class TestTextHelpers:
    def test_comment_inside_literal_is_kept(self):
        line = 'String s = "a//b"; // note'
        assert strip_comment(line) == 'String s = "a//b"; '

    def test_clean_line(self):
        assert clean_line("   x = 1;   // trailing") == "x = 1"

    def test_split_respects_parentheses_and_literals(self):
        assert split_top_level("a, f(b, c), ',' ", ",") == ["a", "f(b, c)", "','"]

    def test_split_on_multi_char_separator(self):
        assert split_top_level('"a" << x << endl', "<<") == ['"a"', "x", "endl"]

    def test_split_without_separator(self):
        assert split_top_level("x + 1", ",") == ["x + 1"]


class TestSplitHeader:
    def test_for_header(self):
        header = split_header("for (int i = 0; i < n; i++) {")
        assert header == Header(keyword="for", inner="int i = 0; i < n; i++", rest="{")

    def test_else_if_keyword_is_normalized(self):
        header = split_header("else   if (x < 0) y = 1;")
        assert header.keyword == "else if"
        assert header.inner == "x < 0"
        assert header.rest == "y = 1;"

    def test_bare_else(self):
        assert split_header("else {") == Header(keyword="else", inner="", rest="{")

    def test_nested_parentheses(self):
        header = split_header("while ((a + b) > max(c, d))")
        assert header.inner == "(a + b) > max(c, d)"
        assert header.rest == ""

    def test_parenthesis_inside_literal(self):
        header = split_header('if (s == ")") {')
        assert header.inner == 's == ")"'

    def test_unbalanced_header(self):
        assert split_header("if (a > (b + 1) {") is None

    def test_plain_statement(self):
        assert split_header("x = 1") is None
        assert split_header("elsewhere = 1") is None


class TestFindBlockEnd:
    def test_brace_inside_string_is_ignored(self):
        lines = ["for (int i = 0; i < 3; i++) {", '    s = "}";', "}"]
        assert find_block_end(lines, 0) == 2

    def test_unbalanced_returns_last_line(self):
        assert find_block_end(["if (x) {", "    y = 1;"], 0) == 1


class TestLocateBody:
    def test_inline_statement(self):
        lines = ["if (x > 0) y = 1;"]
        assert locate_body(lines, 0, "y = 1;") == BlockBoundary(
            header=0, end=0, body_start=1, body_end=0, inline=("y = 1",)
        )

    def test_braces_on_one_line(self):
        lines = ["while (i < 3) { i++; s += i; }"]
        boundary = locate_body(lines, 0, "{ i++; s += i; }")
        assert boundary.inline == ("i++", "s += i")
        assert boundary.end == 0
        assert boundary.tail == ""

    def test_braced_body_with_continuation(self):
        lines = ["if (x) {", "    a = 1;", "} else {", "    b = 2;", "}"]
        boundary = locate_body(lines, 0, "{")
        assert (boundary.body_start, boundary.body_end, boundary.end) == (1, 1, 2)
        assert boundary.tail == "else {"

    def test_allman_braces(self):
        lines = ["for (int i = 0; i < 3; i++)", "{", "    s += i;", "}"]
        assert locate_body(lines, 0, "") == BlockBoundary(
            header=0, end=3, body_start=2, body_end=2
        )

    def test_braceless_body_on_next_line(self):
        lines = ["if (x > 0)", "    y = 1;", "z = 2;"]
        assert locate_body(lines, 0, "") == BlockBoundary(
            header=0, end=1, body_start=1, body_end=1
        )

    def test_nested_braceless_loops(self):
        lines = [
            "for (int i = 0; i < 2; i++)",
            "    for (int j = 0; j < 2; j++)",
            "        s++;",
            "t = s;",
        ]
        boundary = locate_body(lines, 0, "")
        assert (boundary.body_start, boundary.body_end) == (1, 2)

    def test_header_on_last_line(self):
        boundary = locate_body(["while (x > 0)"], 0, "")
        assert boundary.body_start > boundary.body_end


class TestScanBranchChain:
    def test_cuddled_else_chain(self):
        lines = [
            "if (x > 0) {",
            "    y = 1;",
            "} else if (x < 0) {",
            "    y = -1;",
            "} else {",
            "    y = 0;",
            "}",
            "z = y;",
        ]
        chain = scan_branch_chain(lines, 0, clean_line(lines[0]))
        assert [c.line for c in chain.clauses] == [0, 2, 4]
        assert [c.condition for c in chain.clauses] == ["x > 0", "x < 0", None]
        assert [(c.boundary.body_start, c.boundary.body_end) for c in chain.clauses] == [
            (1, 1),
            (3, 3),
            (5, 5),
        ]
        assert chain.end == 6

    def test_else_on_its_own_line(self):
        lines = ["if (x > 0) {", "    y = 1;", "}", "else {", "    y = 0;", "}"]
        chain = scan_branch_chain(lines, 0, clean_line(lines[0]))
        assert [c.line for c in chain.clauses] == [0, 3]
        assert chain.end == 5

    def test_single_line_clauses(self):
        lines = ["if (x > 0) y = 1;", "else y = 2;"]
        chain = scan_branch_chain(lines, 0, clean_line(lines[0]))
        assert [c.boundary.inline for c in chain.clauses] == [("y = 1",), ("y = 2",)]
        assert chain.end == 1

    def test_chain_stops_at_other_code(self):
        lines = ["if (x) {", "    y = 1;", "}", "z = 2;"]
        chain = scan_branch_chain(lines, 0, clean_line(lines[0]))
        assert len(chain.clauses) == 1
        assert chain.end == 2
