"""
javatrace.recursion_tree
========================

Rebuilds the nested structure of self-calls from the flat execution
trace.

The builder walks the steps with an explicit call stack:

* a ``method-call`` step naming the entry method opens a child of the
  current node (depth + 1, parameters bound from the evaluated
  arguments) and makes it current;
* a ``return`` step closes the current node (recording the value) and
  restores its parent; at depth 0 it records the root's return value;
* any other step merges its variable snapshot into the current node,
  later values overwriting earlier ones.

Checks
------
The trace must be well formed: step indices strictly increase, and once
the root has returned no further ``return`` or entry-method call may
follow.  Violations raise :class:`~javatrace.errors.MalformedTrace`
instead of producing a silently wrong tree.

Calls deeper than ``AnalysisConfig.max_recursion_depth`` are not
materialized; they are counted (their returns are matched against that
count) and reported as truncated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, AnalysisConfig
from .errors import MalformedTrace
from .trace import ExecutionStep, StepKind

__all__ = ["RecursionTreeNode", "RecursionTree", "RecursionTreeBuilder", "build_recursion_tree"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecursionTreeNode:
    method: str
    depth: int
    parameters: Mapping[str, Any]
    variables: Mapping[str, Any]
    return_value: Any = None
    returned: bool = False
    children: Tuple["RecursionTreeNode", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        node: Dict[str, Any] = {
            "method": self.method,
            "depth": self.depth,
            "parameters": dict(self.parameters),
            "variables": dict(self.variables),
        }
        if self.returned:
            node["returnValue"] = self.return_value
        return {"node": node, "children": [child.to_dict() for child in self.children]}

    def iter_nodes(self):
        """Preorder over this node and its descendants."""
        stack: List[RecursionTreeNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    @property
    def size(self) -> int:
        return sum(1 for _ in self.iter_nodes())


@dataclass(frozen=True)
class RecursionTree:
    root: RecursionTreeNode
    truncated_calls: int = 0
    warnings: Tuple[str, ...] = ()


@dataclass
class _Frame:
    method: str
    depth: int
    parameters: Dict[str, Any]
    variables: Dict[str, Any] = field(default_factory=dict)
    return_value: Any = None
    returned: bool = False
    children: List["_Frame"] = field(default_factory=list)

    def freeze(self) -> RecursionTreeNode:
        return RecursionTreeNode(
            method=self.method,
            depth=self.depth,
            parameters=MappingProxyType(dict(self.parameters)),
            variables=MappingProxyType(dict(self.variables)),
            return_value=self.return_value,
            returned=self.returned,
            children=tuple(child.freeze() for child in self.children),
        )


class RecursionTreeBuilder:
    """Builds the recursion tree of ``entry_method`` from trace steps.

    Parameters
    ----------
    entry_method : str
        Name of the analyzed method; only calls to it open tree nodes.
    parameter_names : sequence of str
        Declared parameter names of the entry method.  Call arguments are
        bound to them positionally; when the arity differs the argument
        source texts are used as keys instead.
    config : AnalysisConfig, optional
        Supplies ``max_recursion_depth``.
    """

    def __init__(
        self,
        entry_method: str,
        parameter_names: Sequence[str] = (),
        config: Optional[AnalysisConfig] = None,
    ) -> None:
        self.entry_method = entry_method
        self.parameter_names = tuple(parameter_names)
        self.config = config or DEFAULT_CONFIG

    def _bind(self, arguments: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
        if len(arguments) == len(self.parameter_names):
            return {name: arg["value"] for name, arg in zip(self.parameter_names, arguments)}
        return {arg["expression"]: arg["value"] for arg in arguments}

    def build(self, steps: Iterable[ExecutionStep]) -> RecursionTree:
        root = _Frame(self.entry_method, 0, {name: None for name in self.parameter_names})
        current = root
        stack: List[_Frame] = []
        overflow = 0
        truncated = 0
        last_index = -1

        for step in steps:
            if step.index <= last_index:
                raise MalformedTrace(
                    f"step index {step.index} does not follow {last_index}", step.index
                )
            last_index = step.index

            if step.kind is StepKind.METHOD_CALL and step.get("methodName") == self.entry_method:
                if root.returned:
                    raise MalformedTrace(
                        f"call to {self.entry_method} after the entry method returned", step.index
                    )
                if overflow or current.depth >= self.config.max_recursion_depth:
                    overflow += 1
                    truncated += 1
                    continue
                child = _Frame(self.entry_method, current.depth + 1, self._bind(step.get("arguments", ())))
                current.children.append(child)
                stack.append(current)
                current = child
            elif step.kind is StepKind.RETURN:
                if overflow:
                    overflow -= 1
                    continue
                if root.returned:
                    raise MalformedTrace("return without a matching call", step.index)
                current.return_value = step.get("value")
                current.returned = True
                if stack:
                    current = stack.pop()
            elif not overflow:
                current.variables.update(step.variables)

        warnings: Tuple[str, ...] = ()
        if truncated:
            message = (
                f"Recursion tree truncated at depth {self.config.max_recursion_depth}; "
                f"{truncated} deeper call(s) omitted"
            )
            logger.warning(message)
            warnings = (message,)
        return RecursionTree(root.freeze(), truncated, warnings)


def build_recursion_tree(
    entry_method: str,
    steps: Iterable[ExecutionStep],
    parameter_names: Sequence[str] = (),
    config: Optional[AnalysisConfig] = None,
) -> RecursionTree:
    return RecursionTreeBuilder(entry_method, parameter_names, config).build(steps)
