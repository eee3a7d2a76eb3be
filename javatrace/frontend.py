"""
javatrace.frontend
==================

Syntax front-end: source text → :class:`~javatrace.syntax_tree.CompilationUnit`.

The text is normalized (line endings unified, surrounding whitespace
trimmed) and then handed to a fixed sequence of strategies, strictest
first.  The first strategy that parses wins:

=================  =====================================================
``strict``         strict grammar, text as-is
``relaxed``        relaxed grammar (unknown modifiers, free-form
                   annotation arguments), text as-is
``wrap-in-class``  text placed inside ``public class WrapperClass``;
                   skipped when the text already starts like a type
                   declaration
``wrap-in-main``   text placed inside a synthetic ``main`` method of
                   ``WrapperClass``
=================  =====================================================

Locations of nodes parsed from wrapped text refer to the user's text;
wrapper nodes have line 0.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from parsimonious.exceptions import ParseError, VisitationError
from parsimonious.grammar import Grammar

from .errors import ParseFailure
from .grammar import RELAXED_GRAMMAR, STRICT_GRAMMAR
from .parser import parse_compilation_unit
from .syntax_tree import CompilationUnit

__all__ = [
    "ParseOutcome",
    "Strategy",
    "STRATEGIES",
    "normalize_source",
    "looks_like_type_declaration",
    "parse_source",
]

logger = logging.getLogger(__name__)

WRAPPER_CLASS = "WrapperClass"

_CLASS_PREFIX = "public class WrapperClass {\n  "
_CLASS_SUFFIX = "\n}"
_MAIN_PREFIX = "public class WrapperClass {\n  public static void main(String[] args) {\n    "
_MAIN_SUFFIX = "\n  }\n}"

_TYPE_DECLARATION_RE = re.compile(r"^\s*(public\s+)?(class|interface|enum|@interface)\s+\w+")


class _StrategySkipped(Exception):
    """A strategy that does not apply to this text."""


@dataclass(frozen=True)
class ParseOutcome:
    """Result of :func:`parse_source`.

    Attributes
    ----------
    unit : CompilationUnit
        The syntax tree.
    strategy : str
        Name of the strategy that succeeded.
    warnings : tuple of str
        Empty for ``strict``; otherwise one note about the tolerance or
        wrapping that was applied.
    attempts : tuple of (str, str)
        ``(strategy, error message)`` for every strategy that was tried
        and rejected before the winning one.
    """

    unit: CompilationUnit
    strategy: str
    warnings: Tuple[str, ...] = ()
    attempts: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Strategy:
    name: str
    run: Callable[[str], CompilationUnit]
    warning: Optional[str] = None


# ─────────────────────────────────────────────────────────────────────────
#  Strategies
# ─────────────────────────────────────────────────────────────────────────


def _parse_wrapped(code: str, prefix: str, suffix: str, grammar: Grammar) -> CompilationUnit:
    return parse_compilation_unit(
        prefix + code + suffix, grammar, origin=len(prefix), length=len(code)
    )


def _strict(code: str) -> CompilationUnit:
    return parse_compilation_unit(code, STRICT_GRAMMAR)


def _relaxed(code: str) -> CompilationUnit:
    return parse_compilation_unit(code, RELAXED_GRAMMAR)


def _wrap_in_class(code: str) -> CompilationUnit:
    if looks_like_type_declaration(code):
        raise _StrategySkipped("Not a standalone method")
    return _parse_wrapped(code, _CLASS_PREFIX, _CLASS_SUFFIX, STRICT_GRAMMAR)


def _wrap_in_main(code: str) -> CompilationUnit:
    return _parse_wrapped(code, _MAIN_PREFIX, _MAIN_SUFFIX, STRICT_GRAMMAR)


STRATEGIES: Tuple[Strategy, ...] = (
    Strategy("strict", _strict),
    Strategy("relaxed", _relaxed, "Code was parsed in relaxed mode"),
    Strategy("wrap-in-class", _wrap_in_class, "Code was automatically wrapped in a class"),
    Strategy("wrap-in-main", _wrap_in_main, "Code was automatically wrapped in a main method"),
)


# ─────────────────────────────────────────────────────────────────────────
#  Public API
# ─────────────────────────────────────────────────────────────────────────


def normalize_source(text: str) -> str:
    """Unify line endings to ``\\n`` and trim surrounding whitespace."""
    return text.replace("\r\n", "\n").replace("\r", "\n").strip()


def looks_like_type_declaration(text: str) -> bool:
    return _TYPE_DECLARATION_RE.match(text) is not None


def _describe(exc: Exception) -> str:
    message = str(exc).strip()
    return message.splitlines()[0] if message else type(exc).__name__


def parse_source(text: str, strategies: Tuple[Strategy, ...] = STRATEGIES) -> ParseOutcome:
    """Parse ``text`` with the first strategy that accepts it.

    Raises
    ------
    ParseFailure
        When the text is empty or every strategy rejects it.  The message
        carries the last strategy's error.  Errors raised while building
        the tree, including the interpreter's recursion limit on deeply
        nested input, reject the strategy like a grammar mismatch.
    """
    code = normalize_source(text)
    if not code:
        raise ParseFailure("All parsing strategies failed. Last error: Empty source text")

    attempts: List[Tuple[str, str]] = []
    for strategy in strategies:
        logger.debug("Trying parsing strategy: %s", strategy.name)
        try:
            unit = strategy.run(code)
        except (ParseError, VisitationError, RecursionError, _StrategySkipped) as exc:
            message = _describe(exc)
            logger.warning("Strategy %s failed: %s", strategy.name, message)
            attempts.append((strategy.name, message))
            continue
        logger.debug("Success with strategy: %s", strategy.name)
        warnings = (strategy.warning,) if strategy.warning else ()
        return ParseOutcome(unit, strategy.name, warnings, tuple(attempts))

    last = attempts[-1][1] if attempts else "Unknown error"
    raise ParseFailure(f"All parsing strategies failed. Last error: {last}", attempts)
