"""javatrace/syntax_tree.py – Syntax tree for the supported Java subset.

The parser (:mod:`javatrace.parser`) produces a tree of the node classes
below and every later stage consumes it read-only.

Design invariants
-----------------
* Every node is a frozen, slotted dataclass; child sequences are tuples.
* The node kind is a closed set (:class:`NodeKind`).  :data:`CHILD_SLOTS`
  maps every kind to the ordered names of the attributes that hold child
  nodes, so traversal is driven by the schema and never by reflection.
* Non-child attributes (names, operators, type text, literal values) are
  plain strings / scalars.
* Every node carries its exact source ``text`` (comments and trailing
  whitespace excluded) and a :class:`SourceLoc`.  Nodes synthesised by a
  wrapping front-end strategy carry :data:`NO_LOC` (line 0).
* ``text``, ``loc`` and ``span`` do not take part in equality, so two
  structurally identical subtrees compare equal wherever they occur.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Optional, Tuple, Type

__all__ = [
    "SourceLoc",
    "NO_LOC",
    "NodeKind",
    "SyntaxNode",
    "CompilationUnit",
    "ClassDeclaration",
    "FieldDeclaration",
    "MethodDeclaration",
    "ConstructorDeclaration",
    "Initializer",
    "Parameter",
    "Block",
    "LocalVariableDeclaration",
    "VariableDeclarator",
    "IfStatement",
    "ForStatement",
    "WhileStatement",
    "ReturnStatement",
    "BreakStatement",
    "ContinueStatement",
    "EmptyStatement",
    "ExpressionStatement",
    "Assignment",
    "UpdateExpression",
    "BinaryExpression",
    "UnaryExpression",
    "ConditionalExpression",
    "CastExpression",
    "MethodInvocation",
    "FieldAccess",
    "ArrayAccess",
    "ObjectCreation",
    "ArrayCreation",
    "ArrayInitializer",
    "Literal",
    "Name",
    "This",
    "CHILD_SLOTS",
    "NODE_CLASSES",
    "STATEMENT_KINDS",
]


# ════════════════════════════════════════════════════════════════════════
# §1  Source location
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SourceLoc:
    """1-based position in the user's source text."""

    line: int = 0
    column: int = 0

    @property
    def synthetic(self) -> bool:
        return self.line == 0

    def to_dict(self) -> dict:
        return {"line": self.line, "column": self.column}

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


#: Location of nodes produced by wrapping, with no user-visible position.
NO_LOC = SourceLoc()


# ════════════════════════════════════════════════════════════════════════
# §2  Node kinds
# ════════════════════════════════════════════════════════════════════════


class NodeKind(Enum):
    """Closed set of syntax node kinds."""

    # Declarations
    COMPILATION_UNIT = "CompilationUnit"
    CLASS_DECLARATION = "ClassDeclaration"
    FIELD_DECLARATION = "FieldDeclaration"
    METHOD_DECLARATION = "MethodDeclaration"
    CONSTRUCTOR_DECLARATION = "ConstructorDeclaration"
    INITIALIZER = "Initializer"
    PARAMETER = "Parameter"

    # Statements
    BLOCK = "Block"
    LOCAL_VARIABLE_DECLARATION = "LocalVariableDeclaration"
    VARIABLE_DECLARATOR = "VariableDeclarator"
    IF_STATEMENT = "IfStatement"
    FOR_STATEMENT = "ForStatement"
    WHILE_STATEMENT = "WhileStatement"
    RETURN_STATEMENT = "ReturnStatement"
    BREAK_STATEMENT = "BreakStatement"
    CONTINUE_STATEMENT = "ContinueStatement"
    EMPTY_STATEMENT = "EmptyStatement"
    EXPRESSION_STATEMENT = "ExpressionStatement"

    # Expressions
    ASSIGNMENT = "Assignment"
    UPDATE_EXPRESSION = "UpdateExpression"
    BINARY_EXPRESSION = "BinaryExpression"
    UNARY_EXPRESSION = "UnaryExpression"
    CONDITIONAL_EXPRESSION = "ConditionalExpression"
    CAST_EXPRESSION = "CastExpression"
    METHOD_INVOCATION = "MethodInvocation"
    FIELD_ACCESS = "FieldAccess"
    ARRAY_ACCESS = "ArrayAccess"
    OBJECT_CREATION = "ObjectCreation"
    ARRAY_CREATION = "ArrayCreation"
    ARRAY_INITIALIZER = "ArrayInitializer"
    LITERAL = "Literal"
    NAME = "Name"
    THIS = "This"


# ════════════════════════════════════════════════════════════════════════
# §3  Node classes
# ════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class SyntaxNode:
    """Base class of every syntax node.

    Subclasses set the ``kind`` class variable and declare their own
    fields; the location fields below are keyword-only so that subclass
    fields stay positional.
    """

    kind: ClassVar[NodeKind]

    text: str = field(default="", kw_only=True, compare=False, repr=False)
    loc: SourceLoc = field(default=NO_LOC, kw_only=True, compare=False, repr=False)
    span: Tuple[int, int] = field(default=(0, 0), kw_only=True, compare=False, repr=False)

    def __str__(self) -> str:
        return self.text


# -- declarations -------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CompilationUnit(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.COMPILATION_UNIT

    package: Optional[str] = None
    imports: Tuple[str, ...] = ()
    types: Tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True, slots=True)
class ClassDeclaration(SyntaxNode):
    """A class or interface declaration (``is_interface`` tells them apart)."""

    kind: ClassVar[NodeKind] = NodeKind.CLASS_DECLARATION

    name: str = ""
    modifiers: Tuple[str, ...] = ()
    is_interface: bool = False
    superclass: Optional[str] = None
    interfaces: Tuple[str, ...] = ()
    members: Tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True, slots=True)
class FieldDeclaration(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.FIELD_DECLARATION

    modifiers: Tuple[str, ...] = ()
    type: str = ""
    declarators: Tuple[VariableDeclarator, ...] = ()


@dataclass(frozen=True, slots=True)
class Parameter(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.PARAMETER

    type: str = ""
    name: str = ""
    modifiers: Tuple[str, ...] = ()
    varargs: bool = False


@dataclass(frozen=True, slots=True)
class MethodDeclaration(SyntaxNode):
    """A method; ``body`` is ``None`` for abstract and interface methods."""

    kind: ClassVar[NodeKind] = NodeKind.METHOD_DECLARATION

    name: str = ""
    modifiers: Tuple[str, ...] = ()
    return_type: str = "void"
    parameters: Tuple[Parameter, ...] = ()
    throws: Tuple[str, ...] = ()
    body: Optional[Block] = None


@dataclass(frozen=True, slots=True)
class ConstructorDeclaration(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.CONSTRUCTOR_DECLARATION

    name: str = ""
    modifiers: Tuple[str, ...] = ()
    parameters: Tuple[Parameter, ...] = ()
    throws: Tuple[str, ...] = ()
    body: Optional[Block] = None


@dataclass(frozen=True, slots=True)
class Initializer(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.INITIALIZER

    is_static: bool = False
    body: Optional[Block] = None


# -- statements ---------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Block(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.BLOCK

    statements: Tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True, slots=True)
class VariableDeclarator(SyntaxNode):
    """One ``name [= initializer]`` of a declaration.

    ``type`` is the full declared type, including any dimensions written
    after the name (``int a[]`` gives ``int[]``).
    """

    kind: ClassVar[NodeKind] = NodeKind.VARIABLE_DECLARATOR

    name: str = ""
    type: str = ""
    initializer: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class LocalVariableDeclaration(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.LOCAL_VARIABLE_DECLARATION

    modifiers: Tuple[str, ...] = ()
    type: str = ""
    declarators: Tuple[VariableDeclarator, ...] = ()


@dataclass(frozen=True, slots=True)
class IfStatement(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.IF_STATEMENT

    condition: Optional[SyntaxNode] = None
    then_statement: Optional[SyntaxNode] = None
    else_statement: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class ForStatement(SyntaxNode):
    """A basic ``for`` loop.

    ``initialization`` holds either one :class:`LocalVariableDeclaration`
    or a sequence of expressions; ``condition`` is ``None`` when omitted.
    """

    kind: ClassVar[NodeKind] = NodeKind.FOR_STATEMENT

    initialization: Tuple[SyntaxNode, ...] = ()
    condition: Optional[SyntaxNode] = None
    update: Tuple[SyntaxNode, ...] = ()
    body: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class WhileStatement(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.WHILE_STATEMENT

    condition: Optional[SyntaxNode] = None
    body: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class ReturnStatement(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.RETURN_STATEMENT

    expression: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class BreakStatement(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.BREAK_STATEMENT

    label: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ContinueStatement(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.CONTINUE_STATEMENT

    label: Optional[str] = None


@dataclass(frozen=True, slots=True)
class EmptyStatement(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.EMPTY_STATEMENT


@dataclass(frozen=True, slots=True)
class ExpressionStatement(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.EXPRESSION_STATEMENT

    expression: Optional[SyntaxNode] = None


# -- expressions --------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Assignment(SyntaxNode):
    """``target op value`` where ``op`` is ``=`` or a compound operator."""

    kind: ClassVar[NodeKind] = NodeKind.ASSIGNMENT

    target: Optional[SyntaxNode] = None
    operator: str = "="
    value: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class UpdateExpression(SyntaxNode):
    """``++x``, ``x--`` and friends."""

    kind: ClassVar[NodeKind] = NodeKind.UPDATE_EXPRESSION

    operator: str = "++"
    prefix: bool = False
    operand: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class BinaryExpression(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.BINARY_EXPRESSION

    left: Optional[SyntaxNode] = None
    operator: str = ""
    right: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class UnaryExpression(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.UNARY_EXPRESSION

    operator: str = ""
    operand: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class ConditionalExpression(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.CONDITIONAL_EXPRESSION

    condition: Optional[SyntaxNode] = None
    if_true: Optional[SyntaxNode] = None
    if_false: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class CastExpression(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.CAST_EXPRESSION

    type: str = ""
    expression: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class MethodInvocation(SyntaxNode):
    """``[qualifier.]name(arguments)``."""

    kind: ClassVar[NodeKind] = NodeKind.METHOD_INVOCATION

    qualifier: Optional[SyntaxNode] = None
    name: str = ""
    arguments: Tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True, slots=True)
class FieldAccess(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.FIELD_ACCESS

    target: Optional[SyntaxNode] = None
    name: str = ""


@dataclass(frozen=True, slots=True)
class ArrayAccess(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.ARRAY_ACCESS

    array: Optional[SyntaxNode] = None
    index: Optional[SyntaxNode] = None


@dataclass(frozen=True, slots=True)
class ObjectCreation(SyntaxNode):
    """``new Type(args)``; ``body`` holds anonymous-class members."""

    kind: ClassVar[NodeKind] = NodeKind.OBJECT_CREATION

    type: str = ""
    arguments: Tuple[SyntaxNode, ...] = ()
    body: Tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True, slots=True)
class ArrayInitializer(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.ARRAY_INITIALIZER

    elements: Tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True, slots=True)
class ArrayCreation(SyntaxNode):
    """``new T[n][m][]`` or ``new T[]{...}``.

    ``type`` is the full array type (``int[][]``); ``dimensions`` holds
    only the explicitly sized dimensions.
    """

    kind: ClassVar[NodeKind] = NodeKind.ARRAY_CREATION

    type: str = ""
    dimensions: Tuple[SyntaxNode, ...] = ()
    initializer: Optional[ArrayInitializer] = None


@dataclass(frozen=True, slots=True)
class Literal(SyntaxNode):
    """A literal; ``literal_type`` is the Java type of ``value``.

    ``value`` is an ``int`` (int/long), ``float`` (float/double), ``bool``,
    ``str`` (String and char) or ``None`` (null).
    """

    kind: ClassVar[NodeKind] = NodeKind.LITERAL

    value: Any = None
    literal_type: str = "null"


@dataclass(frozen=True, slots=True)
class Name(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.NAME

    name: str = ""


@dataclass(frozen=True, slots=True)
class This(SyntaxNode):
    kind: ClassVar[NodeKind] = NodeKind.THIS


# ════════════════════════════════════════════════════════════════════════
# §4  Schema
# ════════════════════════════════════════════════════════════════════════

#: Ordered child-slot names per kind.  A slot holds ``None``, one node or a
#: tuple of nodes.
CHILD_SLOTS: Mapping[NodeKind, Tuple[str, ...]] = MappingProxyType({
    NodeKind.COMPILATION_UNIT: ("types",),
    NodeKind.CLASS_DECLARATION: ("members",),
    NodeKind.FIELD_DECLARATION: ("declarators",),
    NodeKind.METHOD_DECLARATION: ("parameters", "body"),
    NodeKind.CONSTRUCTOR_DECLARATION: ("parameters", "body"),
    NodeKind.INITIALIZER: ("body",),
    NodeKind.PARAMETER: (),
    NodeKind.BLOCK: ("statements",),
    NodeKind.LOCAL_VARIABLE_DECLARATION: ("declarators",),
    NodeKind.VARIABLE_DECLARATOR: ("initializer",),
    NodeKind.IF_STATEMENT: ("condition", "then_statement", "else_statement"),
    NodeKind.FOR_STATEMENT: ("initialization", "condition", "update", "body"),
    NodeKind.WHILE_STATEMENT: ("condition", "body"),
    NodeKind.RETURN_STATEMENT: ("expression",),
    NodeKind.BREAK_STATEMENT: (),
    NodeKind.CONTINUE_STATEMENT: (),
    NodeKind.EMPTY_STATEMENT: (),
    NodeKind.EXPRESSION_STATEMENT: ("expression",),
    NodeKind.ASSIGNMENT: ("target", "value"),
    NodeKind.UPDATE_EXPRESSION: ("operand",),
    NodeKind.BINARY_EXPRESSION: ("left", "right"),
    NodeKind.UNARY_EXPRESSION: ("operand",),
    NodeKind.CONDITIONAL_EXPRESSION: ("condition", "if_true", "if_false"),
    NodeKind.CAST_EXPRESSION: ("expression",),
    NodeKind.METHOD_INVOCATION: ("qualifier", "arguments"),
    NodeKind.FIELD_ACCESS: ("target",),
    NodeKind.ARRAY_ACCESS: ("array", "index"),
    NodeKind.OBJECT_CREATION: ("arguments", "body"),
    NodeKind.ARRAY_CREATION: ("dimensions", "initializer"),
    NodeKind.ARRAY_INITIALIZER: ("elements",),
    NodeKind.LITERAL: (),
    NodeKind.NAME: (),
    NodeKind.THIS: (),
})

NODE_CLASSES: Mapping[NodeKind, Type[SyntaxNode]] = MappingProxyType({
    cls.kind: cls
    for cls in (
        CompilationUnit, ClassDeclaration, FieldDeclaration,
        MethodDeclaration, ConstructorDeclaration, Initializer, Parameter,
        Block, LocalVariableDeclaration, VariableDeclarator, IfStatement,
        ForStatement, WhileStatement, ReturnStatement, BreakStatement,
        ContinueStatement, EmptyStatement, ExpressionStatement, Assignment,
        UpdateExpression, BinaryExpression, UnaryExpression,
        ConditionalExpression, CastExpression, MethodInvocation,
        FieldAccess, ArrayAccess, ObjectCreation, ArrayCreation,
        ArrayInitializer, Literal, Name, This,
    )
})

STATEMENT_KINDS = frozenset({
    NodeKind.BLOCK,
    NodeKind.LOCAL_VARIABLE_DECLARATION,
    NodeKind.IF_STATEMENT,
    NodeKind.FOR_STATEMENT,
    NodeKind.WHILE_STATEMENT,
    NodeKind.RETURN_STATEMENT,
    NodeKind.BREAK_STATEMENT,
    NodeKind.CONTINUE_STATEMENT,
    NodeKind.EMPTY_STATEMENT,
    NodeKind.EXPRESSION_STATEMENT,
    NodeKind.CLASS_DECLARATION,
})
