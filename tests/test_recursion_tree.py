# tests/test_recursion_tree.py
"""
Tests for rebuilding the recursion tree from trace steps.
"""

import pytest

from javatrace.config import AnalysisConfig
from javatrace.errors import MalformedTrace
from javatrace.recursion_tree import RecursionTreeBuilder, build_recursion_tree
from javatrace.trace import StepKind, generate_trace
from tests.conftest import call_argument, make_step


def fib_steps():
    return [
        make_step(0, StepKind.INITIAL),
        make_step(1, StepKind.METHOD_CALL, methodName="fib", arguments=(call_argument("n - 1", 2),)),
        make_step(2, StepKind.CONDITIONAL_CHECK, {"x": 1}, condition="n < 2", result=False),
        make_step(3, StepKind.RETURN, value=1, expression="x"),
        make_step(4, StepKind.METHOD_CALL, methodName="fib", arguments=(call_argument("n - 2", 1),)),
        make_step(5, StepKind.RETURN, value=0, expression="0"),
        make_step(6, StepKind.RETURN, value=1, expression="a + b"),
    ]


class TestBuild:

    def test_children_in_call_order(self):
        tree = build_recursion_tree("fib", fib_steps(), ("n",))
        root = tree.root
        assert root.depth == 0
        assert dict(root.parameters) == {"n": None}
        assert root.return_value == 1
        assert [child.depth for child in root.children] == [1, 1]
        assert [dict(c.parameters) for c in root.children] == [{"n": 2}, {"n": 1}]
        assert [c.return_value for c in root.children] == [1, 0]
        assert tree.truncated_calls == 0
        assert tree.warnings == ()

    def test_snapshots_merge_into_current_node(self):
        root = build_recursion_tree("fib", fib_steps(), ("n",)).root
        assert dict(root.children[0].variables) == {"x": 1}
        assert dict(root.children[1].variables) == {}
        assert dict(root.variables) == {}

    def test_other_calls_do_not_open_nodes(self):
        steps = [
            make_step(0, StepKind.INITIAL),
            make_step(1, StepKind.METHOD_CALL, {"k": 3}, methodName="println", arguments=()),
        ]
        root = build_recursion_tree("fib", steps, ("n",)).root
        assert root.children == ()
        assert dict(root.variables) == {"k": 3}

    def test_arity_mismatch_keys_by_expression(self):
        steps = [
            make_step(0, StepKind.METHOD_CALL, methodName="f",
                      arguments=(call_argument("a + 1", 2), call_argument("b", None))),
            make_step(1, StepKind.RETURN, value=None, expression="void"),
        ]
        (child,) = build_recursion_tree("f", steps, ("n",)).root.children
        assert dict(child.parameters) == {"a + 1": 2, "b": None}

    def test_iter_nodes_and_size(self):
        root = build_recursion_tree("fib", fib_steps(), ("n",)).root
        assert [node.depth for node in root.iter_nodes()] == [0, 1, 1]
        assert root.size == 3


class TestDepthLimit:

    def test_deeper_calls_counted(self):
        steps = [
            make_step(0, StepKind.METHOD_CALL, methodName="f", arguments=(call_argument("n", 1),)),
            make_step(1, StepKind.METHOD_CALL, methodName="f", arguments=(call_argument("n", 2),)),
            make_step(2, StepKind.RETURN, value=2),
            make_step(3, StepKind.RETURN, value=1),
        ]
        tree = RecursionTreeBuilder("f", ("n",), AnalysisConfig(max_recursion_depth=1)).build(steps)
        (child,) = tree.root.children
        assert child.children == ()
        assert child.return_value == 1
        assert tree.truncated_calls == 1
        assert tree.warnings == ("Recursion tree truncated at depth 1; 1 deeper call(s) omitted",)


class TestMalformed:

    def test_non_increasing_index(self):
        steps = [make_step(0, StepKind.INITIAL), make_step(0, StepKind.INITIAL)]
        with pytest.raises(MalformedTrace) as excinfo:
            build_recursion_tree("f", steps)
        assert excinfo.value.step == 0

    def test_unmatched_return(self):
        steps = [
            make_step(0, StepKind.INITIAL),
            make_step(1, StepKind.RETURN, value=1),
            make_step(2, StepKind.RETURN, value=2),
        ]
        with pytest.raises(MalformedTrace, match="return without a matching call") as excinfo:
            build_recursion_tree("f", steps)
        assert excinfo.value.step == 2

    def test_call_after_root_returned(self):
        steps = [
            make_step(0, StepKind.INITIAL),
            make_step(1, StepKind.RETURN, value=1),
            make_step(2, StepKind.METHOD_CALL, methodName="f", arguments=(call_argument("n", 1),)),
        ]
        with pytest.raises(MalformedTrace, match="after the entry method returned") as excinfo:
            build_recursion_tree("f", steps, ("n",))
        assert excinfo.value.step == 2

    def test_other_calls_after_return_are_ignored(self):
        steps = [
            make_step(0, StepKind.RETURN, value=1),
            make_step(1, StepKind.METHOD_CALL, methodName="log", arguments=()),
        ]
        root = build_recursion_tree("f", steps).root
        assert root.return_value == 1
        assert root.children == ()


class TestSerialization:

    def test_returned_nodes_carry_value(self):
        data = build_recursion_tree("fib", fib_steps(), ("n",)).root.to_dict()
        assert data["node"] == {
            "method": "fib", "depth": 0, "parameters": {"n": None},
            "variables": {}, "returnValue": 1,
        }
        assert data["children"][1] == {
            "node": {
                "method": "fib", "depth": 1, "parameters": {"n": 1},
                "variables": {}, "returnValue": 0,
            },
            "children": [],
        }

    def test_unreturned_root_has_no_value(self):
        data = build_recursion_tree("f", [make_step(0, StepKind.INITIAL)], ("n",)).root.to_dict()
        assert "returnValue" not in data["node"]


class TestFromTrace:

    def test_factorial(self, factorial_method):
        trace = generate_trace(factorial_method)
        tree = build_recursion_tree("fact", trace.steps, factorial_method.parameter_names)
        (child,) = tree.root.children
        assert dict(child.parameters) == {"n": None}
        assert child.returned
        assert child.return_value is None
        assert not tree.root.returned
