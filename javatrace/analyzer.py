"""
javatrace.analyzer
==================

The analysis pipeline and its failure boundary.

    text ─► frontend ─► locator ─┬─► ctrlflow
                                 ├─► recursion
                                 └─► trace ─┬─► timeline
                                            └─► recursion_tree

:func:`analyze` returns an :class:`AnalysisResult` or raises an
:class:`~javatrace.errors.AnalysisError`.  :func:`run_analysis` is the
boundary used by callers: it never raises and always returns the
success or failure payload (plain JSON-compatible dicts).
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .config import DEFAULT_CONFIG, AnalysisConfig
from .ctrlflow import ControlFlowSummary, extract_control_flow
from .errors import AnalysisError
from .frontend import ParseOutcome, parse_source
from .locator import MethodDescriptor, locate_method
from .recursion import RecursionInfo, detect_recursion
from .recursion_tree import RecursionTree, RecursionTreeBuilder
from .timeline import VariableRecord, build_variable_timeline
from .trace import ExecutionTrace, TraceGenerator

__all__ = ["AnalysisResult", "analyze", "run_analysis", "failure_payload"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Everything one analysis run produced."""

    parse: ParseOutcome
    method: MethodDescriptor
    control_flow: ControlFlowSummary
    recursion: RecursionInfo
    trace: ExecutionTrace
    variables: Tuple[VariableRecord, ...]
    recursion_tree: Optional[RecursionTree] = None

    @property
    def has_recursion(self) -> bool:
        return self.recursion.has_recursion

    @property
    def warnings(self) -> Tuple[str, ...]:
        tree_warnings = self.recursion_tree.warnings if self.recursion_tree else ()
        return self.parse.warnings + self.trace.warnings + tree_warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "variables": [v.to_dict() for v in self.variables],
            "controlFlow": self.control_flow.to_dict(),
            "executionTraces": [step.to_dict() for step in self.trace.steps],
            "hasRecursion": self.has_recursion,
            "recursionTree": self.recursion_tree.root.to_dict() if self.recursion_tree else None,
            "methodCalls": [call.to_dict() for call in self.recursion.method_calls],
            "warnings": list(self.warnings),
        }


def analyze(source: str, config: Optional[AnalysisConfig] = None) -> AnalysisResult:
    """Run the whole pipeline on *source*.

    Raises
    ------
    AnalysisError
        ``ParseFailure``, ``NoAnalyzableUnit``, ``NoMethodFound`` or
        ``MalformedTrace``.
    """
    config = config or DEFAULT_CONFIG
    outcome = parse_source(source)
    logger.info("Parsed with strategy %s", outcome.strategy)

    method = locate_method(outcome.unit)
    logger.info("Analyzing method %s", method.name)

    control_flow = extract_control_flow(method)
    recursion = detect_recursion(method, outcome.unit)
    trace = TraceGenerator(config).generate(method)
    variables = build_variable_timeline(method, trace.steps)

    tree = None
    if recursion.has_recursion:
        builder = RecursionTreeBuilder(method.name, method.parameter_names, config)
        tree = builder.build(trace.steps)

    return AnalysisResult(
        parse=outcome,
        method=method,
        control_flow=control_flow,
        recursion=recursion,
        trace=trace,
        variables=variables,
        recursion_tree=tree,
    )


def failure_payload(exc: BaseException) -> Dict[str, Any]:
    return {
        "success": False,
        "error": str(exc) or type(exc).__name__,
        "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    }


def run_analysis(source: str, config: Optional[AnalysisConfig] = None) -> Dict[str, Any]:
    """Analyze *source* and return the success or failure payload."""
    try:
        return analyze(source, config).to_dict()
    except AnalysisError as exc:
        logger.error("Analysis failed: %s", exc)
        return failure_payload(exc)
    except Exception as exc:
        logger.exception("Unexpected analysis error")
        return failure_payload(exc)
