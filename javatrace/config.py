"""
javatrace.config
================

Explicit bounds for one analysis run.

The simulator is deliberately incomplete (no ``+=``, no ``++``, no callee
execution), so a loop condition may never become false under its
semantics.  Every termination guarantee of the pipeline is therefore one
of the values below, passed into the pipeline instead of being hard-coded.
"""

from __future__ import annotations

from dataclasses import dataclass

# Default limits
DEFAULT_LOOP_BOUND = 5
DEFAULT_MAX_STEPS = 10_000
DEFAULT_MAX_RECURSION_DEPTH = 64


@dataclass(frozen=True)
class AnalysisConfig:
    """Bounds applied to a single analysis run.

    Parameters
    ----------
    loop_bound : int
        Maximum number of simulated iterations of any ``for``/``while``
        loop, i.e. the maximum number of condition checks emitted for one
        execution of that loop.
    max_steps : int
        Maximum length of the execution trace.  The trace is truncated
        (with a warning) once it is reached.
    max_recursion_depth : int
        Deepest level materialized in the recursion tree.  Calls below it
        are counted but not expanded.
    """

    loop_bound: int = DEFAULT_LOOP_BOUND
    max_steps: int = DEFAULT_MAX_STEPS
    max_recursion_depth: int = DEFAULT_MAX_RECURSION_DEPTH

    def __post_init__(self) -> None:
        for name in ("loop_bound", "max_steps", "max_recursion_depth"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")


DEFAULT_CONFIG = AnalysisConfig()
