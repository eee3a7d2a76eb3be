"""
javatrace — Static Analysis and Bounded Simulation of Java Methods
==================================================================

This package turns a fragment of Java source text into a structured
report about one method: its control-flow summary, whether it recurses,
a bounded statement-level execution trace, per-variable value histories
and, for recursive methods, the tree of self-calls.

Core modules
------------
grammar / parser
    Parsimonious PEG grammars for the supported Java subset and the
    visitor that builds the immutable syntax tree.
frontend
    Tiered parsing strategies (strict, relaxed, wrap-in-class,
    wrap-in-main).
locator
    Selection of the class and the method to analyze.
ctrlflow
    Descriptive summary of loops, conditionals and returns.
recursion
    Direct and one-hop mutual recursion detection.
evaluator
    Side-effect-free evaluation of the supported expression subset.
trace
    The bounded execution-trace simulator.
timeline
    Per-variable value histories derived from the trace.
recursion_tree
    Nested self-call structure rebuilt from the trace.
analyzer
    The pipeline and its failure boundary.

Quick start
-----------
>>> from javatrace import run_analysis
>>> result = run_analysis("int x = 5; if (x > 3) { x = 10; } return x;")
>>> [step["type"] for step in result["executionTraces"]]
['initial', 'conditional-check', 'assignment', 'return']
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import Dict, List

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.1.0"
__all__: List[str] = []          # populated below

_log = logging.getLogger(__name__)
_log.addHandler(logging.NullHandler())

# ---------------------------------------------------------------------------
# Re-exported names, per submodule
# ---------------------------------------------------------------------------

_CORE_MODULES: Dict[str, List[str]] = {
    "errors": [
        "AnalysisError",
        "ParseFailure",
        "NoAnalyzableUnit",
        "NoMethodFound",
        "EvaluationGap",
        "MalformedTrace",
        "RequestError",
    ],
    "config": [
        "AnalysisConfig",
        "DEFAULT_CONFIG",
    ],
    "frontend": [
        "ParseOutcome",
        "parse_source",
    ],
    "locator": [
        "MethodDescriptor",
        "locate_method",
    ],
    "ctrlflow": [
        "ControlFlowSummary",
        "extract_control_flow",
    ],
    "recursion": [
        "RecursionInfo",
        "detect_recursion",
    ],
    "evaluator": [
        "evaluate",
    ],
    "trace": [
        "StepKind",
        "ExecutionStep",
        "ExecutionTrace",
        "TraceGenerator",
    ],
    "timeline": [
        "VariableRecord",
        "build_variable_timeline",
    ],
    "recursion_tree": [
        "RecursionTree",
        "RecursionTreeNode",
        "RecursionTreeBuilder",
    ],
    "analyzer": [
        "AnalysisResult",
        "analyze",
        "run_analysis",
    ],
    "request": [
        "handle_analyze_request",
    ],
}


def _import_names(module_rel_name: str, names: List[str]) -> None:
    """Import *names* from a submodule and bind them in the package namespace."""
    fq_name = f"{__name__}.{module_rel_name}"
    try:
        mod = importlib.import_module(fq_name)
    except ImportError as exc:
        raise ImportError(
            f"javatrace: required submodule '{module_rel_name}' failed to import: {exc}"
        ) from exc

    current_module = sys.modules[__name__]
    for name in names:
        if not hasattr(mod, name):
            raise AttributeError(f"javatrace.{module_rel_name} does not export '{name}'")
        setattr(current_module, name, getattr(mod, name))
        __all__.append(name)


for _mod, _names in _CORE_MODULES.items():
    _import_names(_mod, _names)

del _mod, _names


def list_submodules() -> List[str]:
    """Names of the submodules re-exported at package level."""
    return sorted(_CORE_MODULES)
