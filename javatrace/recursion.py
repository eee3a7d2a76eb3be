"""
javatrace.recursion
===================

Recursion detector.

Every method invocation in the analyzed body is recorded.  Recursion is
reported when

* a call targets the analyzed method's own name (direct), or
* a called method, looked up by name in the same compilation unit,
  contains a call back to the analyzed method (mutual, one hop).  Such a
  method gets an extra record flagged ``mutual_recursion``.

Calls are matched by simple name only; overloads and qualifiers are not
distinguished.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .locator import MethodDescriptor, find_method
from .syntax_tree import NO_LOC, MethodInvocation, NodeKind, SourceLoc, SyntaxNode
from .walker import find_all

__all__ = ["CallRecord", "RecursionInfo", "collect_calls", "calls_method", "detect_recursion"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallRecord:
    """A call site, or a mutual-recursion marker when ``mutual_recursion``."""

    method_name: str
    arguments: Tuple[str, ...] = ()
    loc: SourceLoc = NO_LOC
    mutual_recursion: bool = False
    calls: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.mutual_recursion:
            return {"methodName": self.method_name, "mutualRecursion": True, "calls": self.calls}
        return {
            "methodName": self.method_name,
            "arguments": list(self.arguments),
            "location": self.loc.to_dict(),
        }


@dataclass(frozen=True)
class RecursionInfo:
    has_recursion: bool
    method_calls: Tuple[CallRecord, ...]
    entry_method: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasRecursion": self.has_recursion,
            "methodCalls": [c.to_dict() for c in self.method_calls],
            "entryMethod": self.entry_method,
        }


def collect_calls(root: Optional[SyntaxNode]) -> List[MethodInvocation]:
    """All method invocations under *root*, nested ones included, in preorder."""
    if root is None:
        return []
    return find_all(root, NodeKind.METHOD_INVOCATION)


def calls_method(root: Optional[SyntaxNode], name: str) -> bool:
    return any(call.name == name for call in collect_calls(root))


def detect_recursion(method: MethodDescriptor, unit: SyntaxNode) -> RecursionInfo:
    """Find direct and one-hop mutual recursion of *method* within *unit*."""
    calls = collect_calls(method.block)
    records: List[CallRecord] = [
        CallRecord(call.name, tuple(arg.text for arg in call.arguments), call.loc)
        for call in calls
    ]
    has_recursion = any(call.name == method.name for call in calls)

    seen = set()
    for call in calls:
        callee = call.name
        if callee == method.name or callee in seen:
            continue
        seen.add(callee)
        other = find_method(unit, callee)
        if other is not None and calls_method(other.body, method.name):
            logger.debug("Mutual recursion: %s -> %s -> %s", method.name, callee, method.name)
            has_recursion = True
            records.append(CallRecord(callee, mutual_recursion=True, calls=method.name))

    return RecursionInfo(has_recursion, tuple(records), method.name)
