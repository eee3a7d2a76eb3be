"""javatrace/sexp.py – S-expression rendering of syntax trees.

Used by ``javatrace parse --format sexp`` to show the tree a strategy
produced.  Each node becomes a list headed by its kind symbol, followed
by ``:attribute value`` pairs for its scalar attributes and
``(:slot child ...)`` groups for its child slots::

    (ReturnStatement
      (:expression (BinaryExpression :operator "*"
                     (:left (Name :name "n")) (:right ...))))

Booleans and ``null`` are written as the symbols ``true``, ``false`` and
``null``; child-less slots and empty attributes are omitted, except a
literal's ``:value``, so ``""`` and ``null`` stay distinct.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, List

import sexpdata
from sexpdata import Symbol

from .syntax_tree import CHILD_SLOTS, SyntaxNode

__all__ = ["to_sexp", "dump"]

_LOCATION_FIELDS = frozenset({"text", "loc", "span"})


def _scalar(value: Any) -> Any:
    if value is None:
        return Symbol("null")
    if isinstance(value, bool):
        return Symbol("true" if value else "false")
    if isinstance(value, tuple):
        return [_scalar(v) for v in value]
    return value


def to_sexp(node: SyntaxNode, with_locations: bool = False) -> List[Any]:
    """Convert *node* into nested lists of :class:`sexpdata.Symbol` and scalars."""
    slots = CHILD_SLOTS[node.kind]
    form: List[Any] = [Symbol(node.kind.value)]
    if with_locations and not node.loc.synthetic:
        form += [Symbol(":line"), node.loc.line, Symbol(":column"), node.loc.column]
    for f in fields(node):
        if f.name in _LOCATION_FIELDS or f.name in slots:
            continue
        value = getattr(node, f.name)
        if f.name != "value" and value in ((), None, ""):
            continue
        form += [Symbol(":" + f.name), _scalar(value)]
    for slot in slots:
        value = getattr(node, slot)
        if value is None or value == ():
            continue
        children = value if isinstance(value, tuple) else (value,)
        form.append([Symbol(":" + slot)] + [to_sexp(c, with_locations) for c in children])
    return form


def dump(node: SyntaxNode, with_locations: bool = False) -> str:
    """Render *node* as S-expression text."""
    return sexpdata.dumps(to_sexp(node, with_locations))
