"""
parser.py — Parsimonious parse tree → javatrace syntax tree
===========================================================

:class:`TreeBuilder` is a :class:`parsimonious.NodeVisitor` over either
grammar in :mod:`javatrace.grammar`.  Visitor methods unpack the children
positionally, in the order the rule lists them.

Source positions
----------------
A front-end strategy may parse the user's text embedded in a synthetic
wrapper.  The builder is told where the user text starts inside the
parsed text (``origin``) and how long it is; offsets inside that window
are mapped back to 1-based user line/column, offsets outside it get
:data:`~javatrace.syntax_tree.NO_LOC`.
"""

from __future__ import annotations

import bisect
import logging
import re
from dataclasses import replace
from typing import Any, List, Optional, Sequence, Tuple

from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from .grammar import STRICT_GRAMMAR
from .syntax_tree import (
    NO_LOC,
    ArrayAccess,
    ArrayCreation,
    ArrayInitializer,
    Assignment,
    BinaryExpression,
    Block,
    BreakStatement,
    CastExpression,
    ClassDeclaration,
    CompilationUnit,
    ConditionalExpression,
    ConstructorDeclaration,
    ContinueStatement,
    EmptyStatement,
    ExpressionStatement,
    FieldAccess,
    FieldDeclaration,
    ForStatement,
    IfStatement,
    Initializer,
    Literal,
    LocalVariableDeclaration,
    MethodDeclaration,
    MethodInvocation,
    Name,
    ObjectCreation,
    Parameter,
    ReturnStatement,
    SourceLoc,
    SyntaxNode,
    This,
    UnaryExpression,
    UpdateExpression,
    VariableDeclarator,
    WhileStatement,
)

__all__ = ["TreeBuilder", "parse_compilation_unit", "parse_expression", "decode_literal"]

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  LITERAL DECODING
# ═══════════════════════════════════════════════════════════════════

_ESCAPE_RE = re.compile(r"\\(u+[0-9a-fA-F]{4}|[0-3][0-7]{0,2}|[4-7][0-7]?|.)")

_SIMPLE_ESCAPES = {
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "f": "\f",
    "r": "\r",
    "s": " ",
    '"': '"',
    "'": "'",
    "\\": "\\",
}


def _unescape(body: str) -> str:
    def repl(match: re.Match) -> str:
        esc = match.group(1)
        if esc[0] == "u":
            return chr(int(esc.lstrip("u"), 16))
        if esc[0] in "01234567":
            return chr(int(esc, 8))
        return _SIMPLE_ESCAPES.get(esc, esc)

    return _ESCAPE_RE.sub(repl, body)


def _to_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def decode_literal(text: str, rule: str) -> Tuple[Any, str]:
    """Decode literal source text into ``(value, java_type)``.

    ``rule`` is the grammar rule that matched the text.  Hexadecimal,
    octal and binary ``int`` literals are reinterpreted as 32-bit two's
    complement (``0xFFFFFFFF`` is ``-1``), long ones as 64-bit.
    """
    if rule == "int_literal":
        body = text.replace("_", "")
        is_long = body[-1] in "lL"
        if is_long:
            body = body[:-1]
        bits = 64 if is_long else 32
        java_type = "long" if is_long else "int"
        lowered = body.lower()
        if lowered.startswith("0x"):
            return _to_signed(int(lowered[2:], 16), bits), java_type
        if lowered.startswith("0b"):
            return _to_signed(int(lowered[2:], 2), bits), java_type
        if len(body) > 1 and body.startswith("0") and body.isdigit() and "8" not in body and "9" not in body:
            return _to_signed(int(body, 8), bits), java_type
        return int(body, 10), java_type
    if rule == "float_literal":
        body = text.replace("_", "")
        java_type = "float" if body[-1] in "fF" else "double"
        if body[-1] in "fFdD":
            body = body[:-1]
        return float(body), java_type
    if rule == "char_literal":
        return _unescape(text[1:-1]), "char"
    if rule == "string_literal":
        return _unescape(text[1:-1]), "String"
    if rule == "bool_literal":
        return text == "true", "boolean"
    if rule == "null_literal":
        return None, "null"
    raise ValueError(f"not a literal rule: {rule!r}")


# ═══════════════════════════════════════════════════════════════════
#  TREE BUILDER
# ═══════════════════════════════════════════════════════════════════


def _content_end(node: Node) -> int:
    """End offset of ``node`` without its trailing whitespace/comments."""
    while True:
        if node.expr_name == "_":
            return node.start
        nonempty = [child for child in node.children if child.end > child.start]
        if not nonempty:
            return node.end
        node = nonempty[-1]


def _present(optional: Any) -> Any:
    """Value inside an optional (``?``) match, or ``None``."""
    if isinstance(optional, list) and optional:
        return optional[0]
    return None


class TreeBuilder(NodeVisitor):
    """Transforms a Parsimonious parse tree into :mod:`syntax_tree` nodes.

    Parameters
    ----------
    source : str
        The full text that was parsed (possibly including a wrapper).
    origin : int
        Offset in ``source`` at which the user's text begins.
    length : int, optional
        Length of the user's text; defaults to the rest of ``source``.
    """

    def __init__(self, source: str, origin: int = 0, length: Optional[int] = None) -> None:
        self._source = source
        self._origin = origin
        self._length = len(source) - origin if length is None else length
        user_text = source[origin:origin + self._length]
        self._line_starts = [0] + [m.end() for m in re.finditer(r"\n", user_text)]

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def generic_visit(self, node, visited_children):
        """Default: children values, the bare node for tokens, [] for empty matches."""
        if visited_children or node.end > node.start:
            return visited_children or node
        return []

    def _loc(self, offset: int) -> SourceLoc:
        relative = offset - self._origin
        if relative < 0 or relative >= self._length:
            return NO_LOC
        line = bisect.bisect_right(self._line_starts, relative)
        return SourceLoc(line=line, column=relative - self._line_starts[line - 1] + 1)

    def _span(self, node: Node) -> Tuple[int, int]:
        return node.start, _content_end(node)

    def _text(self, node: Node) -> str:
        start, end = self._span(node)
        return self._source[start:end]

    def _make(self, cls, node: Node, **fields) -> SyntaxNode:
        start, end = self._span(node)
        return cls(**fields, text=self._source[start:end], loc=self._loc(start), span=(start, end))

    def _make_between(self, cls, first: SyntaxNode, end: int, **fields) -> SyntaxNode:
        start = first.span[0]
        return cls(**fields, text=self._source[start:end], loc=first.loc, span=(start, end))

    def _only_child(self, node, visited_children):
        return visited_children[0]

    def _node_text(self, node, visited_children):
        return self._text(node)

    def _token(self, node, visited_children):
        return node.children[0].text

    @staticmethod
    def _comma_list(first, rest) -> List[Any]:
        return [first] + [item[-1] for item in rest]

    def _fold_binary(self, node, visited_children):
        left, tail = visited_children
        for operator, right in tail:
            left = self._make_between(
                BinaryExpression, left, right.span[1],
                left=left, operator=operator, right=right,
            )
        return left

    # ─────────────────────────────────────────────────────────────
    # Pass-through rules
    # ─────────────────────────────────────────────────────────────

    visit_statement = _only_child
    visit_block_stmt = _only_child
    visit_expression = _only_child
    visit_unary_expr = _only_child
    visit_primary = _only_child
    visit_literal = _only_child
    visit_creation_expr = _only_child
    visit_selector = _only_child
    visit_variable_initializer = _only_child

    visit_modifier = _node_text
    visit_variable_modifier = _node_text
    visit_type = _node_text
    visit_class_type = _node_text
    visit_primitive_type = _node_text
    visit_result_type = _node_text
    visit_array_base = _node_text

    visit_ASSIGN_OP = _token
    visit_OR_OP = _token
    visit_AND_OP = _token
    visit_BIT_OR = _token
    visit_BIT_XOR = _token
    visit_BIT_AND = _token
    visit_EQ_OP = _token
    visit_REL_OP = _token
    visit_SHIFT_OP = _token
    visit_ADD_OP = _token
    visit_MUL_OP = _token
    visit_UNARY_OP = _token
    visit_INCDEC = _token

    visit_or_expr = _fold_binary
    visit_and_expr = _fold_binary
    visit_bit_or_expr = _fold_binary
    visit_bit_xor_expr = _fold_binary
    visit_bit_and_expr = _fold_binary
    visit_equality_expr = _fold_binary
    visit_relational_expr = _fold_binary
    visit_shift_expr = _fold_binary
    visit_additive_expr = _fold_binary
    visit_multiplicative_expr = _fold_binary

    def visit_identifier(self, node, visited_children):
        return node.children[1].text

    def visit_qualified_name(self, node, visited_children):
        first, rest = visited_children
        return ".".join(self._comma_list(first, rest))

    def visit_dims(self, node, visited_children):
        return len(visited_children) if isinstance(visited_children, list) else 0

    # ─────────────────────────────────────────────────────────────
    # Compilation unit and type declarations
    # ─────────────────────────────────────────────────────────────

    def visit_compilation_unit(self, node, visited_children):
        _, package, imports, types = visited_children
        return self._make(
            CompilationUnit, node,
            package=_present(package),
            imports=tuple(imports),
            types=tuple(t for t in types if t is not None),
        )

    def visit_package_decl(self, node, visited_children):
        _, _, name, _ = visited_children
        return name

    def visit_import_decl(self, node, visited_children):
        _, static, name, star, _ = visited_children
        prefix = "static " if static else ""
        return f"{prefix}{name}{'.*' if star else ''}"

    def visit_type_decl(self, node, visited_children):
        decl = visited_children[0]
        return decl if isinstance(decl, SyntaxNode) else None

    def visit_class_decl(self, node, visited_children):
        modifiers, _, name, _, superclass, interfaces, members = visited_children
        return self._make(
            ClassDeclaration, node,
            name=name,
            modifiers=tuple(modifiers),
            superclass=_present(superclass),
            interfaces=_present(interfaces) or (),
            members=members,
        )

    def visit_interface_decl(self, node, visited_children):
        modifiers, _, name, _, extends, members = visited_children
        return self._make(
            ClassDeclaration, node,
            name=name,
            modifiers=tuple(modifiers),
            is_interface=True,
            interfaces=_present(extends) or (),
            members=members,
        )

    def visit_superclass(self, node, visited_children):
        return visited_children[1]

    def visit_interfaces(self, node, visited_children):
        return visited_children[1]

    def visit_extends_interfaces(self, node, visited_children):
        return visited_children[1]

    def visit_type_list(self, node, visited_children):
        first, rest = visited_children
        return tuple(self._comma_list(first, rest))

    def visit_class_body(self, node, visited_children):
        _, members, _ = visited_children
        return tuple(m for m in members if m is not None)

    def visit_member_decl(self, node, visited_children):
        member = visited_children[0]
        return member if isinstance(member, SyntaxNode) else None

    def visit_method_decl(self, node, visited_children):
        modifiers, _, result_type, name, params, dims, throws, body = visited_children
        return self._make(
            MethodDeclaration, node,
            name=name,
            modifiers=tuple(modifiers),
            return_type=result_type + "[]" * dims,
            parameters=params,
            throws=_present(throws) or (),
            body=body,
        )

    def visit_method_body(self, node, visited_children):
        body = visited_children[0]
        return body if isinstance(body, Block) else None

    def visit_constructor_decl(self, node, visited_children):
        modifiers, _, name, params, throws, body = visited_children
        return self._make(
            ConstructorDeclaration, node,
            name=name,
            modifiers=tuple(modifiers),
            parameters=params,
            throws=_present(throws) or (),
            body=body,
        )

    def visit_initializer(self, node, visited_children):
        static, body = visited_children
        return self._make(Initializer, node, is_static=bool(static), body=body)

    def visit_field_decl(self, node, visited_children):
        modifiers, type_, declarators, _ = visited_children
        return self._make(
            FieldDeclaration, node,
            modifiers=tuple(modifiers),
            type=type_,
            declarators=self._typed(type_, declarators),
        )

    def visit_formal_params(self, node, visited_children):
        _, params, _ = visited_children
        if not params:
            return ()
        first, rest = params[0]
        return tuple(self._comma_list(first, rest))

    def visit_formal_param(self, node, visited_children):
        modifiers, type_, ellipsis, name, dims = visited_children
        varargs = bool(ellipsis)
        return self._make(
            Parameter, node,
            type=type_ + "[]" * dims + ("..." if varargs else ""),
            name=name,
            modifiers=tuple(modifiers),
            varargs=varargs,
        )

    def visit_throws_clause(self, node, visited_children):
        _, first, rest = visited_children
        return tuple(self._comma_list(first, rest))

    # ─────────────────────────────────────────────────────────────
    # Variable declarations
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def _typed(type_: str, declarators: Sequence[Tuple[VariableDeclarator, int]]) -> Tuple[VariableDeclarator, ...]:
        return tuple(replace(decl, type=type_ + "[]" * dims) for decl, dims in declarators)

    def visit_variable_declarators(self, node, visited_children):
        first, rest = visited_children
        return self._comma_list(first, rest)

    def visit_variable_declarator(self, node, visited_children):
        name, dims, init = visited_children
        decl = self._make(VariableDeclarator, node, name=name, initializer=_present(init))
        return decl, dims

    def visit_variable_init(self, node, visited_children):
        return visited_children[1]

    def visit_array_initializer(self, node, visited_children):
        _, elements, _ = visited_children
        items: List[SyntaxNode] = []
        if elements:
            first, rest, _ = elements[0]
            items = self._comma_list(first, rest)
        return self._make(ArrayInitializer, node, elements=tuple(items))

    def visit_local_var_decl(self, node, visited_children):
        modifiers, type_, declarators = visited_children
        return self._make(
            LocalVariableDeclaration, node,
            modifiers=tuple(modifiers),
            type=type_,
            declarators=self._typed(type_, declarators),
        )

    def visit_local_var_stmt(self, node, visited_children):
        decl = visited_children[0]
        start, end = self._span(node)
        return replace(decl, text=self._source[start:end], span=(start, end))

    # ─────────────────────────────────────────────────────────────
    # Statements
    # ─────────────────────────────────────────────────────────────

    def visit_block(self, node, visited_children):
        _, statements, _ = visited_children
        return self._make(Block, node, statements=tuple(s for s in statements if s is not None))

    def visit_if_stmt(self, node, visited_children):
        _, _, condition, _, then_statement, else_clause = visited_children
        return self._make(
            IfStatement, node,
            condition=condition,
            then_statement=then_statement,
            else_statement=_present(else_clause),
        )

    def visit_else_clause(self, node, visited_children):
        return visited_children[1]

    def visit_for_stmt(self, node, visited_children):
        _, _, init, _, condition, _, update, _, body = visited_children
        return self._make(
            ForStatement, node,
            initialization=_present(init) or (),
            condition=_present(condition),
            update=_present(update) or (),
            body=body,
        )

    def visit_for_init(self, node, visited_children):
        init = visited_children[0]
        if isinstance(init, SyntaxNode):
            return (init,)
        return init

    def visit_expression_list(self, node, visited_children):
        first, rest = visited_children
        return tuple(self._comma_list(first, rest))

    def visit_while_stmt(self, node, visited_children):
        _, _, condition, _, body = visited_children
        return self._make(WhileStatement, node, condition=condition, body=body)

    def visit_return_stmt(self, node, visited_children):
        _, expression, _ = visited_children
        return self._make(ReturnStatement, node, expression=_present(expression))

    def visit_break_stmt(self, node, visited_children):
        _, label, _ = visited_children
        return self._make(BreakStatement, node, label=_present(label))

    def visit_continue_stmt(self, node, visited_children):
        _, label, _ = visited_children
        return self._make(ContinueStatement, node, label=_present(label))

    def visit_empty_stmt(self, node, visited_children):
        return self._make(EmptyStatement, node)

    def visit_expr_stmt(self, node, visited_children):
        expression, _ = visited_children
        return self._make(ExpressionStatement, node, expression=expression)

    # ─────────────────────────────────────────────────────────────
    # Expressions
    # ─────────────────────────────────────────────────────────────

    def visit_assignment(self, node, visited_children):
        target, operator, value = visited_children
        return self._make(Assignment, node, target=target, operator=operator, value=value)

    def visit_conditional_expr(self, node, visited_children):
        condition, branches = visited_children
        if not branches:
            return condition
        _, if_true, _, if_false = branches[0]
        return self._make(
            ConditionalExpression, node,
            condition=condition, if_true=if_true, if_false=if_false,
        )

    def visit_prefix_update(self, node, visited_children):
        operator, operand = visited_children
        return self._make(UpdateExpression, node, operator=operator, prefix=True, operand=operand)

    def visit_postfix_update(self, node, visited_children):
        operand, operator = visited_children
        return self._make(UpdateExpression, node, operator=operator, prefix=False, operand=operand)

    def visit_signed_expr(self, node, visited_children):
        operator, operand = visited_children
        return self._make(UnaryExpression, node, operator=operator, operand=operand)

    def visit_cast_expr(self, node, visited_children):
        parts = visited_children[0]
        type_, dims, operand = parts[1], parts[2], parts[-1]
        return self._make(CastExpression, node, type=type_ + "[]" * dims, expression=operand)

    def visit_postfix_expr(self, node, visited_children):
        current, selectors = visited_children
        for selector in selectors:
            if selector[0] == "index":
                _, index, end = selector
                current = self._make_between(ArrayAccess, current, end, array=current, index=index)
                continue
            _, name, arguments, end = selector
            if arguments is None:
                current = self._make_between(FieldAccess, current, end, target=current, name=name)
            else:
                current = self._make_between(
                    MethodInvocation, current, end,
                    qualifier=current, name=name, arguments=arguments,
                )
        return current

    def visit_member_selector(self, node, visited_children):
        _, name, arguments = visited_children
        return ("member", name, _present(arguments), _content_end(node))

    def visit_index_selector(self, node, visited_children):
        _, index, _ = visited_children
        return ("index", index, _content_end(node))

    def visit_arguments(self, node, visited_children):
        _, arguments, _ = visited_children
        if not arguments:
            return ()
        first, rest = arguments[0]
        return tuple(self._comma_list(first, rest))

    def visit_paren_expr(self, node, visited_children):
        _, inner, _ = visited_children
        start, end = self._span(node)
        return replace(inner, text=self._source[start:end], loc=self._loc(start), span=(start, end))

    def visit_invocation(self, node, visited_children):
        name, arguments = visited_children
        return self._make(MethodInvocation, node, name=name, arguments=arguments)

    def visit_name(self, node, visited_children):
        return self._make(Name, node, name=visited_children[0])

    def visit_this_expr(self, node, visited_children):
        return self._make(This, node)

    def visit_object_creation(self, node, visited_children):
        _, type_, arguments, body = visited_children
        return self._make(
            ObjectCreation, node,
            type=type_, arguments=arguments, body=_present(body) or (),
        )

    def visit_array_creation(self, node, visited_children):
        _, base, shape = visited_children
        variant, dimensions, extra, initializer = shape[0]
        return self._make(
            ArrayCreation, node,
            type=base + "[]" * (len(dimensions) + extra),
            dimensions=dimensions,
            initializer=initializer,
        )

    def visit_sized_dims(self, node, visited_children):
        dimensions, extra = visited_children
        return ("sized", tuple(dimensions), extra, None)

    def visit_initialized_dims(self, node, visited_children):
        dims, initializer = visited_children
        return ("initialized", (), len(dims), initializer)

    def visit_dim_expr(self, node, visited_children):
        return visited_children[1]

    # ─────────────────────────────────────────────────────────────
    # Literals
    # ─────────────────────────────────────────────────────────────

    def _literal(self, node, visited_children):
        value, java_type = decode_literal(node.children[0].text, node.expr_name)
        return self._make(Literal, node, value=value, literal_type=java_type)

    visit_float_literal = _literal
    visit_int_literal = _literal
    visit_char_literal = _literal
    visit_string_literal = _literal
    visit_bool_literal = _literal
    visit_null_literal = _literal


# ═══════════════════════════════════════════════════════════════════
#  ENTRY POINTS
# ═══════════════════════════════════════════════════════════════════


def parse_compilation_unit(
    text: str,
    grammar: Grammar = STRICT_GRAMMAR,
    origin: int = 0,
    length: Optional[int] = None,
) -> CompilationUnit:
    """Parse ``text`` with ``grammar`` and build its :class:`CompilationUnit`.

    Raises :class:`parsimonious.exceptions.ParseError` (or its subclass
    ``IncompleteParseError``) when the text does not match.
    """
    tree = grammar.parse(text)
    return TreeBuilder(text, origin=origin, length=length).visit(tree)


def parse_expression(text: str, grammar: Grammar = STRICT_GRAMMAR) -> SyntaxNode:
    """Parse a single Java expression (leading/trailing blanks ignored)."""
    stripped = text.strip()
    tree = grammar["expression"].parse(stripped)
    return TreeBuilder(stripped).visit(tree)
