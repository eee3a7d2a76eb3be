# tests/test_walker.py
"""
Tests for schema-driven traversal helpers.
"""

from javatrace.parser import parse_compilation_unit, parse_expression
from javatrace.syntax_tree import NodeKind
from javatrace.walker import STOP, find_all, iter_children, postorder, walk

SOURCE = """\
class A {
    void f() {
        int x = g(1);
        if (x > 0) {
            h(x);
        } else {
            k();
        }
    }
}"""


class TestIterChildren:

    def test_slot_order(self):
        stmt = parse_compilation_unit(SOURCE).types[0].members[0].body.statements[1]
        kinds = [child.kind for child in iter_children(stmt)]
        assert kinds == [NodeKind.BINARY_EXPRESSION, NodeKind.BLOCK, NodeKind.BLOCK]

    def test_missing_slots_are_skipped(self):
        expr = parse_expression("f()")
        assert list(iter_children(expr)) == []


class TestWalk:

    def test_preorder(self):
        unit = parse_compilation_unit(SOURCE)
        names = []
        walk(unit, {NodeKind.METHOD_INVOCATION: lambda n: names.append(n.name)})
        assert names == ["g", "h", "k"]

    def test_stop_prunes_subtree(self):
        unit = parse_compilation_unit(SOURCE)
        names = []
        walk(unit, {
            NodeKind.IF_STATEMENT: lambda n: STOP,
            NodeKind.METHOD_INVOCATION: lambda n: names.append(n.name),
        })
        assert names == ["g"]

    def test_find_all_includes_root(self):
        expr = parse_expression("a + (b - c)")
        found = find_all(expr, NodeKind.BINARY_EXPRESSION)
        assert [n.operator for n in found] == ["+", "-"]

    def test_find_all_multiple_kinds(self):
        unit = parse_compilation_unit(SOURCE)
        found = find_all(unit, NodeKind.LITERAL, NodeKind.NAME)
        assert [n.kind for n in found] == [
            NodeKind.LITERAL, NodeKind.NAME, NodeKind.LITERAL, NodeKind.NAME,
        ]


class TestPostorder:

    def test_children_first(self):
        expr = parse_expression("f(g(1), h())")
        calls = [n.name for n in postorder(expr) if n.kind is NodeKind.METHOD_INVOCATION]
        assert calls == ["g", "h", "f"]

    def test_prune(self):
        expr = parse_expression("f(g(1), h())")
        nodes = list(postorder(expr, prune={NodeKind.METHOD_INVOCATION}))
        assert nodes == [expr]

    def test_deep_nesting(self):
        expr = parse_expression(" + ".join(["x"] * 300))
        assert sum(1 for _ in postorder(expr)) == 599
