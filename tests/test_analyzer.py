# tests/test_analyzer.py
"""
End-to-end tests of the analysis pipeline and its failure boundary.
"""

import json

import pytest

import javatrace.analyzer
from javatrace.analyzer import AnalysisResult, analyze, failure_payload, run_analysis
from javatrace.config import AnalysisConfig
from javatrace.errors import NoMethodFound, ParseFailure
from javatrace.trace import StepKind
from tests.conftest import (
    COUNTER_JAVA,
    FACTORIAL_JAVA,
    FIELDS_ONLY_JAVA,
    MISMATCHED_JAVA,
    MUTUAL_JAVA,
    SCENARIO_A,
    SCENARIO_B,
)


class TestScenarios:

    def test_snippet_with_branch(self):
        result = analyze(SCENARIO_A)
        assert isinstance(result, AnalysisResult)
        assert result.parse.strategy == "wrap-in-main"
        assert [s.kind for s in result.trace.steps] == [
            StepKind.INITIAL,
            StepKind.CONDITIONAL_CHECK,
            StepKind.ASSIGNMENT,
            StepKind.RETURN,
        ]
        (x,) = result.variables
        assert x.history == ((0, 5), (2, 10))
        assert result.warnings == ("Code was automatically wrapped in a main method",)

    def test_loop_cap(self):
        data = analyze(SCENARIO_B).to_dict()
        checks = [s for s in data["executionTraces"] if s["type"] == "loop-condition-check"]
        assert len(checks) == 5
        assert all(s["result"] is True for s in checks)
        assert data["warnings"] == [
            "Code was automatically wrapped in a main method",
            "for loop at line 1 reached the iteration cap (5); simulation of the loop was stopped",
        ]

    def test_factorial_recursion_tree(self):
        data = analyze(FACTORIAL_JAVA).to_dict()
        assert data["hasRecursion"] is True
        tree = data["recursionTree"]
        assert tree["node"]["method"] == "fact"
        assert tree["node"]["depth"] == 0
        assert tree["node"]["parameters"] == {"n": None}
        assert [c["node"]["depth"] for c in tree["children"]] == [1]
        assert tree["children"][0]["node"]["returnValue"] is None

    def test_malformed_source(self):
        payload = run_analysis(MISMATCHED_JAVA)
        assert payload["success"] is False
        assert payload["error"].startswith("All parsing strategies failed")
        assert "ParseFailure" in payload["stack"]


class TestResultShape:

    def test_keys(self):
        data = analyze(COUNTER_JAVA).to_dict()
        assert list(data) == [
            "success", "variables", "controlFlow", "executionTraces",
            "hasRecursion", "recursionTree", "methodCalls", "warnings",
        ]
        assert data["success"] is True
        assert data["recursionTree"] is None
        assert data["warnings"] == []
        assert data["controlFlow"]["methodName"] == "main"
        assert [v["name"] for v in data["variables"]] == ["total", "i"]
        assert data["methodCalls"] == [{
            "methodName": "println",
            "arguments": ["total"],
            "location": {"line": 7, "column": 9},
        }]

    def test_call_step(self):
        data = analyze(COUNTER_JAVA).to_dict()
        last = data["executionTraces"][-1]
        assert last["type"] == "method-call"
        assert last["qualifier"] == "System.out"
        assert last["arguments"] == [{"expression": "total", "value": 3}]

    @pytest.mark.parametrize("source", [SCENARIO_A, SCENARIO_B, COUNTER_JAVA, FACTORIAL_JAVA, MUTUAL_JAVA])
    def test_json_serializable(self, source):
        data = analyze(source).to_dict()
        assert json.loads(json.dumps(data)) == data

    def test_mutual_recursion_builds_tree(self):
        result = analyze(MUTUAL_JAVA)
        assert result.has_recursion
        assert result.method.name == "isEven"
        # isEven never calls itself directly in the trace
        assert result.recursion_tree.root.children == ()


class TestConfig:

    def test_bounds_are_passed_through(self):
        result = analyze(SCENARIO_B, AnalysisConfig(loop_bound=2))
        assert len(result.trace.of_kind(StepKind.LOOP_CONDITION_CHECK)) == 2

    def test_max_steps(self):
        result = analyze(SCENARIO_B, AnalysisConfig(max_steps=4))
        assert result.trace.truncated
        assert "Execution trace truncated after 4 steps" in result.warnings


class TestFailures:

    def test_analyze_raises(self):
        with pytest.raises(ParseFailure):
            analyze(MISMATCHED_JAVA)
        with pytest.raises(NoMethodFound):
            analyze(FIELDS_ONLY_JAVA)

    def test_no_methods_payload(self):
        payload = run_analysis(FIELDS_ONLY_JAVA)
        assert payload["success"] is False
        assert payload["error"] == (
            "Could not find any methods to analyze. Please include at least one method."
        )

    def test_unexpected_error_is_contained(self, monkeypatch):
        def explode(method):
            raise RuntimeError("boom")

        monkeypatch.setattr(javatrace.analyzer, "extract_control_flow", explode)
        payload = run_analysis(COUNTER_JAVA)
        assert payload["success"] is False
        assert payload["error"] == "boom"
        assert "RuntimeError" in payload["stack"]

    def test_failure_payload_without_message(self):
        payload = failure_payload(ValueError())
        assert payload["error"] == "ValueError"
        assert payload["success"] is False

    def test_malformed_literal_payload(self):
        payload = run_analysis("int x = 0x_; return x;")
        assert payload["success"] is False
        assert payload["error"].startswith("All parsing strategies failed. Last error: ")
        assert "Parse tree" not in payload["error"]
