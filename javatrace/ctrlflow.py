"""
javatrace.ctrlflow
==================

Control-flow extractor: a descriptive summary of one method's loops,
conditionals and returns.  Nothing is evaluated.

Traversal stops at every loop, conditional and return node, so a loop
nested inside an ``if`` branch is described only by the enclosing
conditional.  Local and anonymous class bodies are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .locator import MethodDescriptor
from .syntax_tree import (
    ForStatement,
    IfStatement,
    LocalVariableDeclaration,
    NodeKind,
    ReturnStatement,
    SyntaxNode,
    WhileStatement,
)
from .walker import STOP, walk

__all__ = [
    "DeclaredVariable",
    "LoopDescriptor",
    "ConditionalDescriptor",
    "ReturnDescriptor",
    "ControlFlowSummary",
    "statement_count",
    "for_init_texts",
    "extract_control_flow",
]

VOID = "void"


@dataclass(frozen=True)
class DeclaredVariable:
    name: str
    type: str
    initial_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "initialValue": self.initial_value}


@dataclass(frozen=True)
class LoopDescriptor:
    """A ``for`` or ``while`` loop.  ``initialization``/``update`` stay
    empty for ``while``."""

    kind: str
    condition: Optional[str]
    body: int
    initialization: Tuple[str, ...] = ()
    update: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        if self.kind == "while":
            return {"type": "while", "condition": self.condition, "body": self.body}
        return {
            "type": self.kind,
            "initialization": list(self.initialization),
            "condition": self.condition,
            "update": list(self.update),
            "body": self.body,
        }


@dataclass(frozen=True)
class ConditionalDescriptor:
    condition: str
    then_branch: int
    else_branch: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "condition": self.condition,
            "thenBranch": self.then_branch,
            "elseBranch": self.else_branch,
        }


@dataclass(frozen=True)
class ReturnDescriptor:
    expression: str = VOID

    def to_dict(self) -> Dict[str, Any]:
        return {"expression": self.expression}


@dataclass(frozen=True)
class ControlFlowSummary:
    method_name: str
    parameters: Tuple[Tuple[str, str], ...]
    variables: Tuple[DeclaredVariable, ...] = ()
    loops: Tuple[LoopDescriptor, ...] = ()
    conditionals: Tuple[ConditionalDescriptor, ...] = ()
    returns: Tuple[ReturnDescriptor, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "methodName": self.method_name,
            "parameters": [{"type": t, "name": n} for t, n in self.parameters],
            "variables": [v.to_dict() for v in self.variables],
            "loops": [loop.to_dict() for loop in self.loops],
            "conditionals": [c.to_dict() for c in self.conditionals],
            "returns": [r.to_dict() for r in self.returns],
        }


def statement_count(statement: Optional[SyntaxNode]) -> int:
    """Number of direct statements a loop/branch body stands for."""
    if statement is None or statement.kind is NodeKind.EMPTY_STATEMENT:
        return 0
    if statement.kind is NodeKind.BLOCK:
        return len(statement.statements)
    return 1


def for_init_texts(loop: ForStatement) -> Tuple[str, ...]:
    """``("int i = 0", "int j = 1")`` for declarations, else expression texts."""
    texts: List[str] = []
    for init in loop.initialization:
        if isinstance(init, LocalVariableDeclaration):
            texts.extend(f"{init.type} {d.text}" for d in init.declarators)
        else:
            texts.append(init.text)
    return tuple(texts)


def extract_control_flow(method: MethodDescriptor) -> ControlFlowSummary:
    """Summarize *method*'s top-level variables, loops, conditionals and returns."""
    variables = tuple(
        DeclaredVariable(
            d.name, d.type, d.initializer.text if d.initializer is not None else None
        )
        for stmt in method.body
        if isinstance(stmt, LocalVariableDeclaration)
        for d in stmt.declarators
    )

    loops: List[LoopDescriptor] = []
    conditionals: List[ConditionalDescriptor] = []
    returns: List[ReturnDescriptor] = []

    def on_for(node: ForStatement):
        loops.append(LoopDescriptor(
            kind="for",
            initialization=for_init_texts(node),
            condition=node.condition.text if node.condition is not None else None,
            update=tuple(u.text for u in node.update),
            body=statement_count(node.body),
        ))
        return STOP

    def on_while(node: WhileStatement):
        loops.append(LoopDescriptor(
            kind="while", condition=node.condition.text, body=statement_count(node.body)
        ))
        return STOP

    def on_if(node: IfStatement):
        conditionals.append(ConditionalDescriptor(
            condition=node.condition.text,
            then_branch=statement_count(node.then_statement),
            else_branch=statement_count(node.else_statement),
        ))
        return STOP

    def on_return(node: ReturnStatement):
        expression = node.expression.text if node.expression is not None else VOID
        returns.append(ReturnDescriptor(expression))
        return STOP

    def skip(node: SyntaxNode):
        return STOP

    visitors = {
        NodeKind.FOR_STATEMENT: on_for,
        NodeKind.WHILE_STATEMENT: on_while,
        NodeKind.IF_STATEMENT: on_if,
        NodeKind.RETURN_STATEMENT: on_return,
        NodeKind.CLASS_DECLARATION: skip,
        NodeKind.METHOD_DECLARATION: skip,
    }
    if method.block is not None:
        walk(method.block, visitors)

    return ControlFlowSummary(
        method_name=method.name,
        parameters=method.parameters,
        variables=variables,
        loops=tuple(loops),
        conditionals=tuple(conditionals),
        returns=tuple(returns),
    )
