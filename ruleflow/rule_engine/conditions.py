"""Conditions: boolean predicates evaluated against a context.

``Condition.evaluate`` is the fail-closed boundary used by rules: an
evaluation error (unbound variable, missing field, type mismatch, ...) makes
the condition false and is recorded as a diagnostic on the context instead of
aborting the firing pass. ``Condition.check`` is the raising variant; composite
conditions use it on their children so that a failing child fails the whole
composite closed.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable, Union

from ruleflow.core.config import settings
from ruleflow.rule_engine.context import EvaluationContext
from ruleflow.rule_engine.errors import (
    ConfigurationError,
    EvaluationError,
    TypeMismatchError,
)
from ruleflow.rule_engine.expression import Expression, compile_expression, compile_path
from ruleflow.rule_engine.values import ValueKind, compare, kind_of, values_equal

logger = logging.getLogger(__name__)


class Condition(ABC):
    """A boolean predicate over an evaluation context."""

    def evaluate(self, context: EvaluationContext) -> bool:
        """Evaluate the condition, treating evaluation errors as false."""
        try:
            return self.check(context)
        except EvaluationError as e:
            description = self.describe()
            context.record_diagnostic(description, e)
            logger.log(
                settings.diagnostic_level,
                f"Condition {description} evaluated to false: {e}",
            )
            return False

    @abstractmethod
    def check(self, context: EvaluationContext) -> bool:
        """Evaluate the condition.

        Raises:
            EvaluationError: If the condition cannot be evaluated
        """

    def describe(self) -> str:
        return repr(self)


class ExpressionCondition(Condition):
    """Condition backed by an expression such as ``orderTotal > 200``.

    Text is compiled once, at construction.
    """

    def __init__(self, expression: str | Expression):
        if isinstance(expression, str):
            expression = compile_expression(expression)
        self.expression = expression

    def check(self, context: EvaluationContext) -> bool:
        return self.expression.evaluate_condition(context)

    def __repr__(self) -> str:
        return f"ExpressionCondition({self.expression.source!r})"


class ComparisonOperator(Enum):
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_OR_EQUAL = ">="
    LESS_OR_EQUAL = "<="
    CONTAINS = "contains"

    @classmethod
    def parse(cls, value: "ComparisonOperator | str") -> "ComparisonOperator":
        """Accept an operator, its symbol (``">"``) or its name (``"GREATER_THAN"``)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            pass
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ConfigurationError(f"Unknown comparison operator: {value}") from None


def _contains(container: Any, item: Any) -> bool:
    if kind_of(container) == ValueKind.STR and kind_of(item) == ValueKind.STR:
        return item in container
    if kind_of(container) == ValueKind.LIST:
        return any(values_equal(element, item) for element in container)
    if isinstance(container, Mapping):
        return item in container
    raise TypeMismatchError(
        f"'contains' is not supported on {kind_of(container).value} values"
    )


class FieldComparisonCondition(Condition):
    """Compare the value at a field path with a literal.

    Args:
        field: Path into the context, e.g. ``"orderTotal"`` or ``"user.tier"``
        operator: A ``ComparisonOperator``, its symbol or its name
        value: Literal to compare against
    """

    def __init__(self, field: str, operator: ComparisonOperator | str, value: Any):
        self.field = field
        self.path = compile_path(field)
        self.operator = ComparisonOperator.parse(operator)
        self.value = value

    def check(self, context: EvaluationContext) -> bool:
        actual = self.path.evaluate(context)
        op = self.operator

        if op is ComparisonOperator.EQUALS:
            return values_equal(actual, self.value)
        if op is ComparisonOperator.NOT_EQUALS:
            return not values_equal(actual, self.value)
        if op is ComparisonOperator.CONTAINS:
            return _contains(actual, self.value)
        return compare(op.value, actual, self.value)

    def __repr__(self) -> str:
        return (
            f"FieldComparisonCondition({self.field!r} {self.operator.value} "
            f"{self.value!r})"
        )


class CompositeOperator(Enum):
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


class CompositeCondition(Condition):
    """Combine sub-conditions with AND, OR or NOT.

    AND and OR over no conditions are true. NOT takes exactly one condition.
    Children are evaluated in order and short-circuit.
    """

    def __init__(
        self,
        operator: CompositeOperator | str,
        conditions: Iterable["ConditionLike"] = (),
    ):
        if isinstance(operator, str):
            operator = operator.upper()
        try:
            self.operator = CompositeOperator(operator)
        except ValueError:
            raise ConfigurationError(f"Unknown composite operator: {operator}") from None
        self.conditions = tuple(as_condition(c) for c in conditions)
        if self.operator is CompositeOperator.NOT and len(self.conditions) != 1:
            raise ConfigurationError(
                f"NOT condition requires exactly one sub-condition, "
                f"got {len(self.conditions)}"
            )

    def check(self, context: EvaluationContext) -> bool:
        if self.operator is CompositeOperator.AND:
            return all(c.check(context) for c in self.conditions)
        if self.operator is CompositeOperator.OR:
            if not self.conditions:
                return True
            return any(c.check(context) for c in self.conditions)
        return not self.conditions[0].check(context)

    def __repr__(self) -> str:
        inner = ", ".join(c.describe() for c in self.conditions)
        return f"{self.operator.value}({inner})"


def all_of(*conditions: "ConditionLike") -> CompositeCondition:
    return CompositeCondition(CompositeOperator.AND, conditions)


def any_of(*conditions: "ConditionLike") -> CompositeCondition:
    return CompositeCondition(CompositeOperator.OR, conditions)


def negate(condition: "ConditionLike") -> CompositeCondition:
    return CompositeCondition(CompositeOperator.NOT, [condition])


class TimeWindowCondition(Condition):
    """True while the current time lies strictly between ``start`` and ``end``.

    Either bound may be omitted.
    """

    def __init__(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if start is not None and end is not None and start >= end:
            raise ConfigurationError(f"Time window start {start} is not before end {end}")
        self.start = start
        self.end = end
        self.clock = clock

    def check(self, context: EvaluationContext) -> bool:
        now = self.clock()
        if self.start is not None and not now > self.start:
            return False
        if self.end is not None and not now < self.end:
            return False
        return True

    def __repr__(self) -> str:
        return f"TimeWindowCondition({self.start} .. {self.end})"


class PredicateCondition(Condition):
    """Condition backed by a plain callable taking the context."""

    def __init__(
        self, func: Callable[[EvaluationContext], bool], name: str | None = None
    ):
        self.func = func
        self.name = name or getattr(func, "__name__", "predicate")

    def check(self, context: EvaluationContext) -> bool:
        return bool(self.func(context))

    def __repr__(self) -> str:
        return f"PredicateCondition({self.name})"


ConditionLike = Union[Condition, str, Expression, Callable[[EvaluationContext], bool]]


def as_condition(value: ConditionLike) -> Condition:
    """Coerce expression text, a compiled expression or a callable to a Condition."""
    if isinstance(value, Condition):
        return value
    if isinstance(value, (str, Expression)):
        return ExpressionCondition(value)
    if callable(value):
        return PredicateCondition(value)
    raise ConfigurationError(f"Cannot use {value!r} as a condition")
