# tests/test_sexp.py
"""
Tests for S-expression dumps of syntax trees.
"""

from sexpdata import Symbol

from javatrace.parser import parse_compilation_unit, parse_expression
from javatrace.sexp import dump, to_sexp


class TestToSexp:

    def test_leaf(self):
        assert to_sexp(parse_expression("x")) == [Symbol("Name"), Symbol(":name"), "x"]

    def test_child_slots_are_grouped(self):
        form = to_sexp(parse_expression("a + 1"))
        assert form[:3] == [Symbol("BinaryExpression"), Symbol(":operator"), "+"]
        left, right = form[3:]
        assert left == [Symbol(":left"), [Symbol("Name"), Symbol(":name"), "a"]]
        assert right[0] == Symbol(":right")
        assert right[1][0] == Symbol("Literal")

    def test_locations(self):
        form = to_sexp(parse_expression("x"), with_locations=True)
        assert form[1:5] == [Symbol(":line"), 1, Symbol(":column"), 1]


class TestDump:

    def test_binary_expression(self):
        text = dump(parse_expression("a + 1"))
        assert text.startswith("(BinaryExpression")
        assert ':operator "+"' in text
        assert '(Name :name "a")' in text

    def test_booleans_and_empty_slots(self):
        unit = parse_compilation_unit("interface Shape { double area(); }")
        text = dump(unit)
        assert ":is_interface true" in text
        assert ":body" not in text
        assert ":superclass" not in text

    def test_false_is_kept(self):
        assert ":value false" in dump(parse_expression("false"))

    def test_empty_string_and_null_literals_differ(self):
        empty = dump(parse_expression('""'))
        null = dump(parse_expression("null"))
        assert ':value ""' in empty
        assert ":value null" in null
        assert empty != null

    def test_with_locations(self):
        text = dump(parse_compilation_unit("class A { int f() { return 1; } }"), with_locations=True)
        assert ":line 1" in text
        assert "(ReturnStatement" in text
