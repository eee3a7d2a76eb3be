# javatrace/errors.py
"""
Error types raised by the javatrace analysis pipeline.

Error hierarchy
───────────────
    AnalysisError (base)
    ├── ParseFailure       - every front-end strategy was rejected (terminal)
    ├── NoAnalyzableUnit   - the tree declares no class or interface (terminal)
    ├── NoMethodFound      - the selected type declares no method (terminal)
    ├── EvaluationGap      - unsupported expression (never leaves the evaluator)
    └── MalformedTrace     - call/return steps are not well nested (terminal)
    RequestError           - request rejected before the core is invoked

Terminal errors abort the run.  :func:`javatrace.analyzer.run_analysis`
converts them into the ``{success: false, error, stack}`` payload, so
nothing above the core receives an unhandled exception.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

__all__ = [
    "AnalysisError",
    "ParseFailure",
    "NoAnalyzableUnit",
    "NoMethodFound",
    "EvaluationGap",
    "MalformedTrace",
    "RequestError",
]


class AnalysisError(Exception):
    """Base exception for all analysis errors.

    Carries a human-readable message plus a ``details`` mapping with
    structured context for logs and failure payloads.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ───────────────────────────────────────────────────────────────────────────────
# FRONT-END
# ───────────────────────────────────────────────────────────────────────────────

class ParseFailure(AnalysisError):
    """All parsing strategies failed.

    ``attempts`` holds ``(strategy, error message)`` pairs in the order the
    strategies were tried; the exception message repeats the last one.
    """

    def __init__(self, message: str, attempts: Sequence[Tuple[str, str]] = ()) -> None:
        super().__init__(message, details={"attempts": [list(a) for a in attempts]})
        self.attempts: Tuple[Tuple[str, str], ...] = tuple(attempts)


# ───────────────────────────────────────────────────────────────────────────────
# DECLARATION LOOKUP
# ───────────────────────────────────────────────────────────────────────────────

class NoAnalyzableUnit(AnalysisError):
    """No class or interface declaration was found in the source."""

    def __init__(self) -> None:
        super().__init__("No class or interface found in the provided code")


class NoMethodFound(AnalysisError):
    """A type was found but it declares no methods."""

    def __init__(self, type_name: str) -> None:
        super().__init__(
            "Could not find any methods to analyze. "
            "Please include at least one method.",
            details={"type": type_name},
        )
        self.type_name = type_name


# ───────────────────────────────────────────────────────────────────────────────
# EVALUATION / SIMULATION
# ───────────────────────────────────────────────────────────────────────────────

class EvaluationGap(AnalysisError):
    """An expression the evaluator cannot compute.

    Raised inside :mod:`javatrace.evaluator` only; :func:`evaluate` turns it
    into ``None`` so that the trace keeps going.
    """

    def __init__(self, message: str, expression: str = "") -> None:
        super().__init__(message, details={"expression": expression})
        self.expression = expression


class MalformedTrace(AnalysisError):
    """The step sequence cannot be folded into a recursion tree."""

    def __init__(self, message: str, step: Optional[int] = None) -> None:
        super().__init__(message, details={"step": step})
        self.step = step


# ───────────────────────────────────────────────────────────────────────────────
# REQUEST VALIDATION
# ───────────────────────────────────────────────────────────────────────────────

class RequestError(Exception):
    """An analysis request was rejected before reaching the core."""

    def __init__(self, message: str, details: str = "", status: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.status = status
