#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
javatrace/walker.py
===================

Schema-driven traversal over :mod:`javatrace.syntax_tree`.

Provides:
- ``iter_children`` — the children of one node, in ``CHILD_SLOTS`` order
- ``walk`` — preorder depth-first traversal with per-kind visitors that
  can prune a subtree by returning a truthy value (``STOP``)
- ``find_all`` — every node of the given kinds, in preorder
- ``postorder`` — children before parents (Java evaluation order for
  the operands of an expression)

All traversals are iterative; deeply nested trees do not consume Python
stack frames.
"""

from __future__ import annotations

from typing import Any, Callable, Collection, Iterator, List, Mapping, Tuple

from .syntax_tree import CHILD_SLOTS, NodeKind, SyntaxNode

__all__ = ["STOP", "CONTINUE", "Visitor", "iter_children", "walk", "find_all", "postorder"]

#: Returned by a visitor to skip the visited node's children.
STOP = True
#: Returned by a visitor to descend normally (any falsy value works).
CONTINUE = None

Visitor = Callable[[SyntaxNode], Any]


def iter_children(node: SyntaxNode) -> Iterator[SyntaxNode]:
    """Yield the direct children of *node* in declared slot order."""
    for slot in CHILD_SLOTS[node.kind]:
        value = getattr(node, slot)
        if value is None:
            continue
        if isinstance(value, tuple):
            yield from value
        else:
            yield value


def walk(root: SyntaxNode, visitors: Mapping[NodeKind, Visitor]) -> None:
    """Visit *root* and its descendants in preorder.

    ``visitors`` maps a node kind to a callback.  When the callback for a
    node returns a truthy value, the node's children are not visited.
    Nodes without a callback are always descended into.
    """
    stack: List[SyntaxNode] = [root]
    while stack:
        node = stack.pop()
        visitor = visitors.get(node.kind)
        if visitor is not None and visitor(node):
            continue
        # reversed so the first child is popped first
        stack.extend(reversed(tuple(iter_children(node))))


def find_all(root: SyntaxNode, *kinds: NodeKind) -> List[SyntaxNode]:
    """Every node under *root* (inclusive) whose kind is in *kinds*."""
    wanted = frozenset(kinds)
    found: List[SyntaxNode] = []

    def collect(node: SyntaxNode) -> None:
        found.append(node)

    walk(root, {kind: collect for kind in wanted})
    return found


def postorder(root: SyntaxNode, prune: Collection[NodeKind] = ()) -> Iterator[SyntaxNode]:
    """Yield nodes children-first.

    Subtrees rooted at a kind in *prune* are skipped entirely (the root of
    the pruned subtree included), unless it is *root* itself.
    """
    pruned = frozenset(prune)
    stack: List[Tuple[SyntaxNode, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        stack.append((node, True))
        for child in reversed(tuple(iter_children(node))):
            if child.kind in pruned:
                continue
            stack.append((child, False))
