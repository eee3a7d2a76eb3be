"""
javatrace.timeline
==================

Variable timeline builder: per-variable value histories derived from an
execution trace.

One :class:`VariableRecord` is seeded for every local variable declared
anywhere in the method body (first declaration of a name wins; local and
anonymous class bodies are skipped).  A step adds a ``(step index,
value)`` observation to a variable present in its snapshot when

* it is the variable's first observation, or
* the step is an assignment to that variable, or
* the value differs from the last observation (type-aware: ``1``,
  ``1.0`` and ``true`` are different values).

The initial value of a record is its first observed value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .evaluator import same_value
from .locator import MethodDescriptor
from .syntax_tree import LocalVariableDeclaration, NodeKind, SyntaxNode, VariableDeclarator
from .trace import ExecutionStep, StepKind
from .walker import STOP, walk

__all__ = ["VariableRecord", "declared_variables", "build_variable_timeline"]


@dataclass(frozen=True)
class VariableRecord:
    name: str
    type: str
    initial_value: Any = None
    initializer: Optional[str] = None
    history: Tuple[Tuple[int, Any], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "initialValue": self.initial_value,
            "initializer": self.initializer,
            "history": [{"step": step, "value": value} for step, value in self.history],
        }


def declared_variables(method: MethodDescriptor) -> List[VariableDeclarator]:
    """Declarators of every local variable in *method*, first per name."""
    found: Dict[str, VariableDeclarator] = {}

    def on_declaration(node: LocalVariableDeclaration):
        for decl in node.declarators:
            found.setdefault(decl.name, decl)

    def skip(node: SyntaxNode):
        return STOP

    if method.block is not None:
        walk(method.block, {
            NodeKind.LOCAL_VARIABLE_DECLARATION: on_declaration,
            NodeKind.CLASS_DECLARATION: skip,
            NodeKind.METHOD_DECLARATION: skip,
            NodeKind.CONSTRUCTOR_DECLARATION: skip,
            NodeKind.INITIALIZER: skip,
        })
    return list(found.values())


def build_variable_timeline(
    method: MethodDescriptor, steps: Iterable[ExecutionStep]
) -> Tuple[VariableRecord, ...]:
    """Fold *steps* into one :class:`VariableRecord` per declared variable."""
    declarators = declared_variables(method)
    histories: Dict[str, List[Tuple[int, Any]]] = {d.name: [] for d in declarators}

    for step in steps:
        assigned = step.get("variable") if step.kind is StepKind.ASSIGNMENT else None
        for name, history in histories.items():
            if name not in step.variables:
                continue
            value = step.variables[name]
            if not history or name == assigned or not same_value(history[-1][1], value):
                history.append((step.index, value))

    records = []
    for decl in declarators:
        history = histories[decl.name]
        records.append(VariableRecord(
            name=decl.name,
            type=decl.type,
            initial_value=history[0][1] if history else None,
            initializer=decl.initializer.text if decl.initializer is not None else None,
            history=tuple(history),
        ))
    return tuple(records)
