"""
javatrace.locator
=================

Declaration locator: picks the class and the method an analysis run is
about.

Selection policy
----------------
1. Type declarations come from ``CompilationUnit.types``; when that slot
   is empty the whole tree is scanned for class declarations.
2. Methods are collected by a full scan of the *first* type (nested and
   anonymous classes included, in source order).
3. A method named ``main`` wins; otherwise the first method found.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .errors import NoAnalyzableUnit, NoMethodFound
from .syntax_tree import (
    Block,
    ClassDeclaration,
    MethodDeclaration,
    NodeKind,
    SourceLoc,
    SyntaxNode,
)
from .walker import find_all

__all__ = ["MethodDescriptor", "find_types", "find_methods", "find_method", "locate_method"]

logger = logging.getLogger(__name__)

ENTRY_METHOD_NAME = "main"


@dataclass(frozen=True)
class MethodDescriptor:
    """The method selected for analysis.

    ``parameters`` is an ordered tuple of ``(type, name)`` pairs; ``body``
    is the tuple of top-level statements (empty for a body-less method).
    """

    name: str
    parameters: Tuple[Tuple[str, str], ...]
    body: Tuple[SyntaxNode, ...]
    loc: SourceLoc
    declaration: MethodDeclaration

    @classmethod
    def from_declaration(cls, decl: MethodDeclaration) -> "MethodDescriptor":
        body = decl.body.statements if decl.body is not None else ()
        return cls(
            name=decl.name,
            parameters=tuple((p.type, p.name) for p in decl.parameters),
            body=body,
            loc=decl.loc,
            declaration=decl,
        )

    @property
    def block(self) -> Optional[Block]:
        return self.declaration.body

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(name for _, name in self.parameters)


def find_types(unit: SyntaxNode) -> List[ClassDeclaration]:
    """Type declarations of *unit*, falling back to a full-tree scan."""
    types = [t for t in getattr(unit, "types", ()) if t.kind is NodeKind.CLASS_DECLARATION]
    if types:
        return types
    logger.debug("No top-level types; scanning the whole tree for class declarations")
    return find_all(unit, NodeKind.CLASS_DECLARATION)


def find_methods(root: SyntaxNode) -> List[MethodDeclaration]:
    """Every method declaration under *root*, in source order."""
    return find_all(root, NodeKind.METHOD_DECLARATION)


def find_method(unit: SyntaxNode, name: str) -> Optional[MethodDeclaration]:
    """First method named *name* anywhere in *unit*, or ``None``."""
    for method in find_methods(unit):
        if method.name == name:
            return method
    return None


def locate_method(unit: SyntaxNode) -> MethodDescriptor:
    """Select the method to analyze.

    Raises
    ------
    NoAnalyzableUnit
        No class or interface declaration exists.
    NoMethodFound
        The first type declares no methods.
    """
    types = find_types(unit)
    if not types:
        raise NoAnalyzableUnit()
    owner = types[0]

    methods = find_methods(owner)
    logger.debug("Found methods in %s: %s", owner.name, [m.name for m in methods])
    if not methods:
        raise NoMethodFound(owner.name)

    selected = next((m for m in methods if m.name == ENTRY_METHOD_NAME), None)
    if selected is None:
        selected = methods[0]
        logger.debug("Using method for analysis: %s", selected.name)
    return MethodDescriptor.from_declaration(selected)
