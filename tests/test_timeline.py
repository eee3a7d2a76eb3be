# tests/test_timeline.py
"""
Tests for per-variable value histories.
"""

from javatrace.timeline import VariableRecord, build_variable_timeline, declared_variables
from javatrace.trace import StepKind, generate_trace
from tests.conftest import NESTED_DECLARATION_SNIPPET, SCENARIO_A, locate, make_step


def _timeline(method):
    return {r.name: r for r in build_variable_timeline(method, generate_trace(method).steps)}


class TestFromTrace:

    def test_scenario_a(self):
        records = _timeline(locate(SCENARIO_A))
        x = records["x"]
        assert x.type == "int"
        assert x.initializer == "5"
        assert x.initial_value == 5
        assert x.history == ((0, 5), (2, 10))

    def test_counter(self, counter_method):
        records = _timeline(counter_method)
        assert list(records) == ["total", "i"]
        assert records["total"].history == ((0, 0), (3, 0), (6, 1), (9, 3))
        assert records["i"].history == ((1, 0), (4, 1), (7, 2), (10, 3))
        assert records["i"].initial_value == 0

    def test_nested_declarations(self):
        records = _timeline(locate(NESTED_DECLARATION_SNIPPET))
        assert records["a"].history == ((0, 1),)
        assert records["b"].history == ((2, 2),)
        assert records["b"].initial_value == 2
        # never reached
        assert records["z"].history == ()
        assert records["z"].initial_value is None
        assert records["z"].initializer == "1"

    def test_parameters_are_not_variables(self, factorial_method):
        assert build_variable_timeline(factorial_method, generate_trace(factorial_method).steps) == ()


class TestRecordingRules:

    def test_assignment_of_same_value_is_recorded(self, counter_method):
        steps = [
            make_step(0, StepKind.INITIAL, {"total": 0}),
            make_step(1, StepKind.ASSIGNMENT, {"total": 0}, variable="total", value=0),
            make_step(2, StepKind.CONDITIONAL_CHECK, {"total": 0}),
        ]
        (total,) = [r for r in build_variable_timeline(counter_method, steps) if r.name == "total"]
        assert total.history == ((0, 0), (1, 0))

    def test_change_without_assignment_is_recorded(self, counter_method):
        steps = [
            make_step(0, StepKind.INITIAL, {"total": 0}),
            make_step(1, StepKind.LOOP_UPDATE, {"total": 4}),
        ]
        records = {r.name: r for r in build_variable_timeline(counter_method, steps)}
        assert records["total"].history == ((0, 0), (1, 4))

    def test_type_aware_change(self, counter_method):
        steps = [
            make_step(0, StepKind.INITIAL, {"total": 1}),
            make_step(1, StepKind.CONDITIONAL_CHECK, {"total": 1.0}),
            make_step(2, StepKind.CONDITIONAL_CHECK, {"total": True}),
        ]
        records = {r.name: r for r in build_variable_timeline(counter_method, steps)}
        assert records["total"].history == ((0, 1), (1, 1.0), (2, True))

    def test_absent_from_snapshot(self, counter_method):
        steps = [make_step(0, StepKind.INITIAL, {"total": 0})]
        records = {r.name: r for r in build_variable_timeline(counter_method, steps)}
        assert records["i"].history == ()


class TestDeclarations:

    def test_first_declaration_wins(self):
        method = locate("class A { void f() { if (true) { int k = 1; } else { double k = 2.0; } } }")
        (decl,) = declared_variables(method)
        assert decl.name == "k"
        assert decl.type == "int"

    def test_local_class_members_skipped(self):
        method = locate(
            "class A { void f() { int a = 1;"
            " Runnable r = new Runnable() { public void run() { int hidden = 2; } }; } }"
        )
        assert [d.name for d in declared_variables(method)] == ["a", "r"]

    def test_bodyless_method(self):
        method = locate("interface Shape { double area(); }")
        assert declared_variables(method) == []


class TestSerialization:

    def test_to_dict(self):
        record = VariableRecord("x", "int", 5, "5", ((0, 5), (2, 10)))
        assert record.to_dict() == {
            "name": "x",
            "type": "int",
            "initialValue": 5,
            "initializer": "5",
            "history": [{"step": 0, "value": 5}, {"step": 2, "value": 10}],
        }
