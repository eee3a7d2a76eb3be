"""
javatrace.evaluator
===================

Pure, side-effect-free evaluation of the supported expression subset.

``evaluate(expr, variables)`` never raises: anything it cannot compute is
an :class:`~javatrace.errors.EvaluationGap` internally and comes back as
``None``, so an unanalyzable sub-expression never aborts a trace.

Supported kinds
---------------
* literals, names (undeclared names evaluate to ``None``)
* binary ``+ - * / % < > <= >= == != && ||``
* unary ``- + !``

Numeric model
-------------
* Integral values are Python ``int`` wrapped to signed 64 bits after
  every operation (``int`` and ``long`` are not told apart).  Floating
  values are IEEE-754 doubles.  Mixed operands give a double.
* Integer ``/`` truncates toward zero and ``%`` takes the sign of the
  dividend.  Integer division by zero is a gap; double division by zero
  gives ``±inf`` or ``nan`` like Java.
* Booleans are not numbers.  Relational operators need two numbers.
* ``+`` with a string operand concatenates, rendering the other operand
  the way Java's ``String.valueOf`` does (``true``, ``null``, ``1.0E10``).
  Char values are :class:`JavaChar` strings: they concatenate with
  strings and are promoted to their code point by arithmetic,
  relational and equality operators (``'a' + 1`` is ``98``).
* ``None`` stands for both Java ``null`` and "unknown".  Arithmetic or
  relational use of it is a gap; ``None == None`` is true, and comparing
  a value to the ``null`` literal is false.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional

from .errors import EvaluationGap
from .syntax_tree import BinaryExpression, NodeKind, SyntaxNode, UnaryExpression

__all__ = ["JavaChar", "evaluate", "java_str", "wrap_int", "is_number", "same_value"]

logger = logging.getLogger(__name__)

INT_BITS = 64
_INT_MASK = (1 << INT_BITS) - 1
_INT_SIGN = 1 << (INT_BITS - 1)


# ─────────────────────────────────────────────────────────────────────────
#  Value helpers
# ─────────────────────────────────────────────────────────────────────────


class JavaChar(str):
    """A ``char`` value; renders as its character."""

    __slots__ = ()


def _promote(value: Any) -> Any:
    return ord(value) if isinstance(value, JavaChar) else value


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and not isinstance(value, JavaChar)


def wrap_int(value: int) -> int:
    """Two's-complement wrap to signed 64 bits."""
    value &= _INT_MASK
    return value - (1 << INT_BITS) if value & _INT_SIGN else value


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def same_value(a: Any, b: Any) -> bool:
    """Type-aware identity of two simulated values (``1``, ``1.0`` and
    ``True`` all differ; ``nan`` equals ``nan``)."""
    if type(a) is not type(b):
        return False
    if isinstance(a, float) and math.isnan(a) and math.isnan(b):
        return True
    return a == b


def _java_double(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0 or 1e-3 <= abs(value) < 1e7:
        return repr(value)
    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    mantissa = str(digits[0]) + "." + ("".join(map(str, digits[1:])) or "0")
    return ("-" if sign else "") + f"{mantissa}E{len(digits) - 1 + exponent}"


def java_str(value: Any) -> str:
    """Render *value* the way Java string concatenation would."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _java_double(value)
    return str(value)


# ─────────────────────────────────────────────────────────────────────────
#  Operators
# ─────────────────────────────────────────────────────────────────────────


def _numbers(op: str, left: Any, right: Any, text: str) -> None:
    if not (is_number(left) and is_number(right)):
        raise EvaluationGap(
            f"operator {op!r} needs numeric operands, got {left!r} and {right!r}", text
        )


def _int_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _arith(op: str, left: Any, right: Any, text: str) -> Any:
    _numbers(op, left, right, text)
    if isinstance(left, int) and isinstance(right, int):
        if op in ("/", "%") and right == 0:
            raise EvaluationGap("integer division by zero", text)
        if op == "+":
            result = left + right
        elif op == "-":
            result = left - right
        elif op == "*":
            result = left * right
        elif op == "/":
            result = _int_div(left, right)
        else:
            result = left - right * _int_div(left, right)
        return wrap_int(result)

    x, y = float(left), float(right)
    if op == "+":
        return x + y
    if op == "-":
        return x - y
    if op == "*":
        return x * y
    if op == "/":
        if y == 0.0:
            if x == 0.0 or math.isnan(x):
                return math.nan
            return math.copysign(math.inf, x) * math.copysign(1.0, y)
        return x / y
    if y == 0.0 or math.isinf(x):
        return math.nan
    return math.fmod(x, y)


_RELATIONAL: Dict[str, Callable[[Any, Any], bool]] = {
    "<": lambda a, b: a < b,
    ">": lambda a, b: a > b,
    "<=": lambda a, b: a <= b,
    ">=": lambda a, b: a >= b,
}


def _is_null_literal(node: Optional[SyntaxNode]) -> bool:
    return node is not None and node.kind is NodeKind.LITERAL and node.literal_type == "null"


def _equals(node: BinaryExpression, left: Any, right: Any) -> bool:
    if left is None or right is None:
        if left is None and right is None:
            return True
        if _is_null_literal(node.left) or _is_null_literal(node.right):
            return False
        raise EvaluationGap("comparison with an unknown value", node.text)
    if is_number(left) and is_number(right):
        return left == right
    if type(left) is not type(right):
        raise EvaluationGap(f"cannot compare {left!r} with {right!r}", node.text)
    return left == right


def _boolean(value: Any, text: str) -> bool:
    if not isinstance(value, bool):
        raise EvaluationGap(f"expected a boolean, got {value!r}", text)
    return value


# ─────────────────────────────────────────────────────────────────────────
#  Evaluation
# ─────────────────────────────────────────────────────────────────────────


def _binary(node: BinaryExpression, variables: Mapping[str, Any]) -> Any:
    op = node.operator
    if op in ("&&", "||"):
        left = _boolean(_eval(node.left, variables), node.text)
        if (op == "&&" and not left) or (op == "||" and left):
            return left
        return _boolean(_eval(node.right, variables), node.text)

    left = _eval(node.left, variables)
    right = _eval(node.right, variables)
    if op == "+" and (_is_text(left) or _is_text(right)):
        return java_str(left) + java_str(right)
    left, right = _promote(left), _promote(right)
    if op in ("+", "-", "*", "/", "%"):
        return _arith(op, left, right, node.text)
    if op in _RELATIONAL:
        _numbers(op, left, right, node.text)
        return _RELATIONAL[op](left, right)
    if op == "==":
        return _equals(node, left, right)
    if op == "!=":
        return not _equals(node, left, right)
    raise EvaluationGap(f"unsupported operator {op!r}", node.text)


def _unary(node: UnaryExpression, variables: Mapping[str, Any]) -> Any:
    value = _eval(node.operand, variables)
    if node.operator in ("-", "+"):
        value = _promote(value)
    if node.operator == "!":
        return not _boolean(value, node.text)
    if node.operator in ("-", "+"):
        if not is_number(value):
            raise EvaluationGap(f"unary {node.operator!r} needs a number, got {value!r}", node.text)
        if node.operator == "+":
            return value
        return wrap_int(-value) if isinstance(value, int) else -value
    raise EvaluationGap(f"unsupported unary operator {node.operator!r}", node.text)


def _eval(node: Optional[SyntaxNode], variables: Mapping[str, Any]) -> Any:
    if node is None:
        raise EvaluationGap("missing expression")
    kind = node.kind
    if kind is NodeKind.LITERAL:
        if node.literal_type == "char":
            return JavaChar(node.value)
        return node.value
    if kind is NodeKind.NAME:
        return variables.get(node.name)
    if kind is NodeKind.BINARY_EXPRESSION:
        return _binary(node, variables)
    if kind is NodeKind.UNARY_EXPRESSION:
        return _unary(node, variables)
    raise EvaluationGap(f"unsupported expression kind {kind.value}", node.text)


def evaluate(expr: Optional[SyntaxNode], variables: Mapping[str, Any]) -> Any:
    """Value of *expr* against the *variables* snapshot, or ``None``."""
    try:
        return _eval(expr, variables)
    except EvaluationGap as gap:
        logger.debug("Evaluation gap in %r: %s", gap.expression, gap.message)
        return None
