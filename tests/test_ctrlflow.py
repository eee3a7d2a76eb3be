# tests/test_ctrlflow.py
"""
Tests for the control-flow summary of a method.
"""

from javatrace.ctrlflow import (
    ConditionalDescriptor,
    DeclaredVariable,
    LoopDescriptor,
    ReturnDescriptor,
    extract_control_flow,
    statement_count,
)
from javatrace.parser import parse_compilation_unit
from javatrace.syntax_tree import EmptyStatement
from tests.conftest import locate

BRANCHES = """\
public class Branches {
    static int classify(int x) {
        int a = 1, b;
        if (x > 0) {
            a = 2;
            b = 3;
        } else b = 4;
        if (x == 0) {
            while (a < 10) { a = a + 1; }
        }
        return a;
    }
}"""


class TestSummary:

    def test_method_identity(self, counter_method):
        summary = extract_control_flow(counter_method)
        assert summary.method_name == "main"
        assert summary.parameters == (("String[]", "args"),)

    def test_top_level_variables(self, counter_method):
        summary = extract_control_flow(counter_method)
        assert summary.variables == (DeclaredVariable("total", "int", "0"),)

    def test_for_loop(self, counter_method):
        summary = extract_control_flow(counter_method)
        assert summary.loops == (
            LoopDescriptor(
                kind="for",
                condition="i < 3",
                body=1,
                initialization=("int i = 0",),
                update=("i = i + 1",),
            ),
        )
        assert summary.conditionals == ()
        assert summary.returns == ()

    def test_conditionals_and_returns(self):
        summary = extract_control_flow(locate(BRANCHES))
        assert summary.variables == (
            DeclaredVariable("a", "int", "1"),
            DeclaredVariable("b", "int", None),
        )
        assert summary.conditionals == (
            ConditionalDescriptor("x > 0", 2, 1),
            ConditionalDescriptor("x == 0", 1, 0),
        )
        assert summary.returns == (ReturnDescriptor("a"),)

    def test_loop_inside_branch_is_not_listed(self):
        summary = extract_control_flow(locate(BRANCHES))
        assert summary.loops == ()

    def test_void_return_and_nested_returns(self, factorial_method):
        summary = extract_control_flow(factorial_method)
        # the return inside the if is covered by the conditional
        assert summary.returns == (ReturnDescriptor("n * fact(n - 1)"),)
        bare = locate("class A { void f() { return; } }")
        assert extract_control_flow(bare).returns == (ReturnDescriptor("void"),)

    def test_local_class_bodies_skipped(self):
        method = locate(
            "class A { void f() {"
            " class Local { int g() { while (true) { } } }"
            " Runnable r = new Runnable() { public void run() { return; } };"
            " } }"
        )
        summary = extract_control_flow(method)
        assert summary.loops == ()
        assert summary.returns == ()


class TestSerialization:

    def test_to_dict(self, counter_method):
        data = extract_control_flow(counter_method).to_dict()
        assert data == {
            "methodName": "main",
            "parameters": [{"type": "String[]", "name": "args"}],
            "variables": [{"name": "total", "type": "int", "initialValue": "0"}],
            "loops": [{
                "type": "for",
                "initialization": ["int i = 0"],
                "condition": "i < 3",
                "update": ["i = i + 1"],
                "body": 1,
            }],
            "conditionals": [],
            "returns": [],
        }

    def test_while_loop_dict(self):
        loop = LoopDescriptor(kind="while", condition="a < 10", body=1)
        assert loop.to_dict() == {"type": "while", "condition": "a < 10", "body": 1}

    def test_conditional_dict(self):
        assert ConditionalDescriptor("c", 2).to_dict() == {
            "condition": "c", "thenBranch": 2, "elseBranch": 0,
        }


class TestStatementCount:

    def test_counts(self):
        unit = parse_compilation_unit("class A { void f() { { a(); b(); } c(); } }")
        block, single = unit.types[0].members[0].body.statements
        assert statement_count(block) == 2
        assert statement_count(single) == 1
        assert statement_count(None) == 0
        assert statement_count(EmptyStatement()) == 0
