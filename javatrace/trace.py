"""
javatrace.trace
===============

Execution trace generator: a statement-level simulator over one method
body that records an ordered list of :class:`ExecutionStep`.

Simulation rules
----------------
* Top-level local declarations are evaluated in order before anything
  runs and folded into the snapshot of step 0 (``initial``).  Declarations
  in nested blocks bind their variable when reached and, when they have
  an initializer, emit an ``assignment`` step.
* A plain ``=`` assignment to a name updates the variable map first; the
  step's snapshot shows the new value.  Assignments to fields or array
  elements emit a step but leave the map alone.  Compound assignments
  and ``++``/``--`` are not simulated.
* Every method invocation reached (in conditions, initializers, return
  values and arguments, in Java evaluation order) emits a ``method-call``
  step before the step of the enclosing statement.  Callee bodies are
  never executed.
* A branch or loop condition counts as true only when it evaluates to
  ``True``; an unknown (``None``) condition takes the ``else`` branch and
  ends a loop.  A missing ``for`` condition is true.
* ``return`` ends the simulated method.  ``break``/``continue`` act on the
  innermost loop.
* Each execution of a loop checks its condition at most
  ``AnalysisConfig.loop_bound`` times; a loop still running at that point
  is abandoned with a warning.
* The trace holds at most ``AnalysisConfig.max_steps`` steps; the rest is
  cut off with a warning.

Snapshots are read-only views over private copies of the variable map,
so later mutation never reaches an earlier step.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .config import DEFAULT_CONFIG, AnalysisConfig
from .ctrlflow import for_init_texts
from .evaluator import evaluate
from .locator import MethodDescriptor
from .syntax_tree import (
    Assignment,
    ForStatement,
    IfStatement,
    LocalVariableDeclaration,
    MethodInvocation,
    NodeKind,
    ReturnStatement,
    SourceLoc,
    SyntaxNode,
    WhileStatement,
)
from .walker import postorder

__all__ = ["StepKind", "ExecutionStep", "ExecutionTrace", "TraceGenerator", "generate_trace"]

logger = logging.getLogger(__name__)


class StepKind(enum.Enum):
    INITIAL = "initial"
    ASSIGNMENT = "assignment"
    CONDITIONAL_CHECK = "conditional-check"
    LOOP_INIT = "loop-init"
    LOOP_CONDITION_CHECK = "loop-condition-check"
    LOOP_UPDATE = "loop-update"
    METHOD_CALL = "method-call"
    RETURN = "return"


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (tuple, list)):
        return [_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class ExecutionStep:
    """One entry of the trace.

    ``payload`` depends on ``kind``:

    ====================  ==================================================
    initial               (empty)
    assignment            variable, value, operator
    conditional-check     condition, result
    loop-init             loopType, initializations
    loop-condition-check  loopType, condition, result, iteration
    loop-update           loopType, updates, iteration
    method-call           methodName, qualifier, arguments
                          (each ``{expression, value}``)
    return                value, expression (``"void"`` when bare)
    ====================  ==================================================
    """

    index: int
    kind: StepKind
    payload: Mapping[str, Any]
    loc: SourceLoc
    variables: Mapping[str, Any]

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"step": self.index, "type": self.kind.value}
        data.update(_plain(self.payload))
        data["location"] = self.loc.to_dict()
        data["variables"] = dict(self.variables)
        return data


@dataclass(frozen=True)
class ExecutionTrace:
    steps: Tuple[ExecutionStep, ...]
    warnings: Tuple[str, ...] = ()
    truncated: bool = False

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def of_kind(self, kind: StepKind) -> List[ExecutionStep]:
        return [step for step in self.steps if step.kind is kind]


# ─────────────────────────────────────────────────────────────────────────
#  Control signals
# ─────────────────────────────────────────────────────────────────────────


class _Signal(Exception):
    pass


class _Return(_Signal):
    pass


class _Break(_Signal):
    pass


class _Continue(_Signal):
    pass


class _StepLimit(_Signal):
    pass


# Members of anonymous and local classes are never executed.
_OPAQUE_KINDS = frozenset({
    NodeKind.CLASS_DECLARATION,
    NodeKind.FIELD_DECLARATION,
    NodeKind.METHOD_DECLARATION,
    NodeKind.CONSTRUCTOR_DECLARATION,
    NodeKind.INITIALIZER,
})


class _TraceRun:
    """State of one simulation; never reused."""

    def __init__(self, method: MethodDescriptor, config: AnalysisConfig) -> None:
        self.method = method
        self.config = config
        self.variables: Dict[str, Any] = {}
        self.steps: List[ExecutionStep] = []
        self.warnings: List[str] = []

    # -- step recording -------------------------------------------------

    def emit(self, kind: StepKind, loc: SourceLoc, **payload: Any) -> None:
        if len(self.steps) >= self.config.max_steps:
            raise _StepLimit()
        self.steps.append(ExecutionStep(
            index=len(self.steps),
            kind=kind,
            payload=MappingProxyType(payload),
            loc=loc,
            variables=MappingProxyType(dict(self.variables)),
        ))

    def value(self, expr: Optional[SyntaxNode]) -> Any:
        return None if expr is None else evaluate(expr, self.variables)

    def emit_calls(self, expr: Optional[SyntaxNode]) -> None:
        if expr is None:
            return
        for node in postorder(expr, prune=_OPAQUE_KINDS):
            if node.kind is NodeKind.METHOD_INVOCATION:
                self.emit_call(node)

    def emit_call(self, call: MethodInvocation) -> None:
        arguments = tuple(
            MappingProxyType({"expression": arg.text, "value": self.value(arg)})
            for arg in call.arguments
        )
        self.emit(
            StepKind.METHOD_CALL, call.loc,
            methodName=call.name,
            qualifier=call.qualifier.text if call.qualifier is not None else None,
            arguments=arguments,
        )

    # -- driver ---------------------------------------------------------

    def run(self) -> ExecutionTrace:
        for stmt in self.method.body:
            if isinstance(stmt, LocalVariableDeclaration):
                for decl in stmt.declarators:
                    self.variables[decl.name] = self.value(decl.initializer)

        truncated = False
        try:
            self.emit(StepKind.INITIAL, self.method.loc)
            self.execute_block(self.method.body, top_level=True)
        except _Return:
            pass
        except (_Break, _Continue):
            logger.debug("break/continue outside of a loop in %s", self.method.name)
        except _StepLimit:
            truncated = True
            message = f"Execution trace truncated after {self.config.max_steps} steps"
            logger.warning(message)
            self.warnings.append(message)
        return ExecutionTrace(tuple(self.steps), tuple(self.warnings), truncated)

    # -- statements -----------------------------------------------------

    def execute_block(self, statements: Sequence[SyntaxNode], top_level: bool = False) -> None:
        for stmt in statements:
            self.execute(stmt, top_level)

    def execute(self, stmt: Optional[SyntaxNode], top_level: bool = False) -> None:
        if stmt is None:
            return
        kind = stmt.kind
        if kind is NodeKind.BLOCK:
            self.execute_block(stmt.statements)
        elif kind is NodeKind.LOCAL_VARIABLE_DECLARATION:
            self.declare(stmt, folded=top_level)
        elif kind is NodeKind.EXPRESSION_STATEMENT:
            self.emit_calls(stmt.expression)
            self.assign(stmt.expression)
        elif kind is NodeKind.IF_STATEMENT:
            self.branch(stmt)
        elif kind is NodeKind.FOR_STATEMENT:
            self.for_loop(stmt)
        elif kind is NodeKind.WHILE_STATEMENT:
            self.loop(stmt, "while")
        elif kind is NodeKind.RETURN_STATEMENT:
            self.ret(stmt)
        elif kind is NodeKind.BREAK_STATEMENT:
            raise _Break()
        elif kind is NodeKind.CONTINUE_STATEMENT:
            raise _Continue()
        elif kind not in (NodeKind.EMPTY_STATEMENT, NodeKind.CLASS_DECLARATION):
            logger.debug("Skipping unsupported statement %s", kind.value)

    def declare(self, stmt: LocalVariableDeclaration, folded: bool) -> None:
        for decl in stmt.declarators:
            self.emit_calls(decl.initializer)
            if folded:
                continue
            value = self.value(decl.initializer)
            self.variables[decl.name] = value
            if decl.initializer is not None:
                self.emit(StepKind.ASSIGNMENT, decl.loc, variable=decl.name, value=value, operator="=")

    def apply(self, expr: SyntaxNode) -> Optional[Tuple[str, Any]]:
        """Perform a plain assignment without recording it.

        Returns ``(target text, value)``, or ``None`` when *expr* is not a
        simulated assignment.
        """
        if not isinstance(expr, Assignment):
            if expr.kind is NodeKind.UPDATE_EXPRESSION:
                logger.debug("Update expression %r is not simulated", expr.text)
            return None
        if expr.operator != "=":
            logger.debug("Compound assignment %r is not simulated", expr.text)
            return None
        value = self.value(expr.value)
        if expr.target.kind is NodeKind.NAME:
            self.variables[expr.target.name] = value
            return expr.target.name, value
        return expr.target.text, value

    def assign(self, expr: SyntaxNode) -> None:
        applied = self.apply(expr)
        if applied is not None:
            target, value = applied
            self.emit(StepKind.ASSIGNMENT, expr.loc, variable=target, value=value, operator="=")

    def branch(self, stmt: IfStatement) -> None:
        self.emit_calls(stmt.condition)
        result = self.value(stmt.condition)
        self.emit(StepKind.CONDITIONAL_CHECK, stmt.loc, condition=stmt.condition.text, result=result)
        if result is True:
            self.execute(stmt.then_statement)
        else:
            self.execute(stmt.else_statement)

    def for_loop(self, stmt: ForStatement) -> None:
        for init in stmt.initialization:
            if isinstance(init, LocalVariableDeclaration):
                for decl in init.declarators:
                    self.emit_calls(decl.initializer)
                    self.variables[decl.name] = self.value(decl.initializer)
            else:
                self.emit_calls(init)
                self.apply(init)
        self.emit(
            StepKind.LOOP_INIT, stmt.loc,
            loopType="for", initializations=for_init_texts(stmt),
        )
        self.loop(stmt, "for")

    def loop(self, stmt: ForStatement | WhileStatement, loop_type: str) -> None:
        bound = self.config.loop_bound
        condition = stmt.condition
        condition_text = condition.text if condition is not None else ""
        for iteration in range(bound):
            if condition is None:
                result = True
            else:
                self.emit_calls(condition)
                result = self.value(condition)
            self.emit(
                StepKind.LOOP_CONDITION_CHECK, stmt.loc,
                loopType=loop_type, condition=condition_text,
                result=result, iteration=iteration,
            )
            if result is not True:
                return
            try:
                self.execute(stmt.body)
            except _Break:
                return
            except _Continue:
                pass
            if loop_type == "for":
                for update in stmt.update:
                    self.emit_calls(update)
                    self.apply(update)
                self.emit(
                    StepKind.LOOP_UPDATE, stmt.loc,
                    loopType=loop_type,
                    updates=tuple(u.text for u in stmt.update),
                    iteration=iteration,
                )
        message = (
            f"{loop_type} loop at line {stmt.loc.line} reached the iteration cap "
            f"({bound}); simulation of the loop was stopped"
        )
        logger.warning(message)
        self.warnings.append(message)

    def ret(self, stmt: ReturnStatement) -> None:
        self.emit_calls(stmt.expression)
        expression = stmt.expression.text if stmt.expression is not None else "void"
        self.emit(StepKind.RETURN, stmt.loc, value=self.value(stmt.expression), expression=expression)
        raise _Return()


class TraceGenerator:
    """Simulates methods under a fixed :class:`AnalysisConfig`."""

    def __init__(self, config: Optional[AnalysisConfig] = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def generate(self, method: MethodDescriptor) -> ExecutionTrace:
        logger.debug("Simulating %s (loop bound %d)", method.name, self.config.loop_bound)
        return _TraceRun(method, self.config).run()


def generate_trace(method: MethodDescriptor, config: Optional[AnalysisConfig] = None) -> ExecutionTrace:
    return TraceGenerator(config).generate(method)
