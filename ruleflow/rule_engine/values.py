"""Runtime value model for expression evaluation.

Values are plain Python objects. ``kind_of`` maps them onto a closed set of
kinds that drive the operator semantics:

- INT: ``int`` (``bool`` is excluded even though it subclasses ``int``)
- FLOAT: ``float``
- BOOL: ``bool``
- STR: ``str``
- LIST: ``list`` or ``tuple``
- RECORD: any mapping or other structured object
- NULL: ``None``
"""

import math
from collections.abc import Mapping
from enum import Enum
from typing import Any

from ruleflow.rule_engine.errors import (
    DivisionByZeroError,
    NumericOverflowError,
    TypeMismatchError,
)


class ValueKind(Enum):
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STR = "str"
    LIST = "list"
    RECORD = "record"
    NULL = "null"


ARITHMETIC_OPERATORS = frozenset({"+", "-", "*", "/"})
RELATIONAL_OPERATORS = frozenset({">", "<", ">=", "<="})
EQUALITY_OPERATORS = frozenset({"==", "!="})
LOGICAL_OPERATORS = frozenset({"&&", "||"})


def kind_of(value: Any) -> ValueKind:
    """Classify a Python value into its expression kind."""
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        return ValueKind.INT
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STR
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    return ValueKind.RECORD


def is_numeric(value: Any) -> bool:
    return kind_of(value) in (ValueKind.INT, ValueKind.FLOAT)


def values_equal(left: Any, right: Any) -> bool:
    """Structural equality across all value kinds.

    Numbers compare by value whatever their INT/FLOAT tag. Lists compare
    element-wise and mappings by key set and value; any other pair must share
    a kind to be equal.
    """
    left_kind = kind_of(left)
    right_kind = kind_of(right)

    if is_numeric(left) and is_numeric(right):
        return left == right
    if left_kind != right_kind:
        return False
    if left_kind == ValueKind.LIST:
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[k], right[k]) for k in left)
    return left == right


def _require_numeric(op: str, left: Any, right: Any) -> None:
    if not (is_numeric(left) and is_numeric(right)):
        raise TypeMismatchError(
            f"Operator '{op}' requires numeric operands, got "
            f"{kind_of(left).value} and {kind_of(right).value}"
        )


def compare(op: str, left: Any, right: Any) -> bool:
    """Apply a relational operator to two numeric values."""
    _require_numeric(op, left, right)
    if op == ">":
        return left > right
    if op == "<":
        return left < right
    if op == ">=":
        return left >= right
    if op == "<=":
        return left <= right
    raise ValueError(f"Unknown relational operator: {op}")


def arithmetic(op: str, left: Any, right: Any) -> int | float:
    """Apply an arithmetic operator, promoting to float on mixed operands.

    Raises:
        TypeMismatchError: If an operand is not numeric
        DivisionByZeroError: If the divisor is zero
        NumericOverflowError: If finite operands give an infinite or NaN result
    """
    _require_numeric(op, left, right)
    both_int = kind_of(left) == ValueKind.INT and kind_of(right) == ValueKind.INT
    if both_int:
        return _apply_arithmetic(op, left, right, both_int)

    try:
        left, right = float(left), float(right)
    except OverflowError:
        raise NumericOverflowError(
            f"Operand of '{op}' is too large for a float"
        ) from None
    result = _apply_arithmetic(op, left, right, both_int)
    if not math.isfinite(result) and math.isfinite(left) and math.isfinite(right):
        raise NumericOverflowError(f"Overflow in {left!r} {op} {right!r}")
    return result


def _apply_arithmetic(op: str, left: Any, right: Any, both_int: bool) -> int | float:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        if right == 0:
            raise DivisionByZeroError(f"Division by zero: {left} / {right}")
        if both_int:
            # truncate toward zero
            quotient = abs(left) // abs(right)
            return quotient if (left < 0) == (right < 0) else -quotient
        try:
            return left / right
        except OverflowError:
            raise NumericOverflowError(f"Overflow in {left!r} / {right!r}") from None
    raise ValueError(f"Unknown arithmetic operator: {op}")
