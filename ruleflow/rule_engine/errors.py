"""Exception hierarchy for the rule engine."""

from typing import Any


class RuleEngineError(Exception):
    """Base class for every error raised by the rule engine."""


class ExpressionSyntaxError(RuleEngineError):
    """An expression could not be tokenized or parsed.

    Attributes:
        expression: The offending expression text
        position: Character offset of the error within the expression
        rule_id: Id of the rule being built, attached by the rule builder
    """

    def __init__(self, message: str, expression: str = "", position: int = 0):
        super().__init__(message)
        self.message = message
        self.expression = expression
        self.position = position
        self.rule_id: str | None = None

    def __str__(self) -> str:
        text = f"{self.message} at position {self.position} in {self.expression!r}"
        if self.rule_id is not None:
            return f"Rule '{self.rule_id}': {text}"
        return text


class LexError(ExpressionSyntaxError):
    """Malformed token: unknown character, unterminated string or bad number."""


class ParseError(ExpressionSyntaxError):
    """Token sequence does not match the expression grammar."""

    def __init__(
        self,
        expression: str,
        position: int,
        expected: tuple[str, ...],
        found: str,
    ):
        expected_text = ", ".join(expected) if expected else "nothing"
        super().__init__(
            f"Expected {expected_text} but found {found}", expression, position
        )
        self.expected = expected
        self.found = found


class EvaluationError(RuleEngineError):
    """Base class for errors raised while evaluating an expression."""


class UnboundVariableError(EvaluationError):
    def __init__(self, name: str):
        super().__init__(f"Variable '{name}' is not bound in the context")
        self.name = name


class NoSuchFieldError(EvaluationError):
    def __init__(self, name: str, target: Any):
        super().__init__(
            f"No field '{name}' on value of type {type(target).__name__}"
        )
        self.name = name


class NoSuchMethodError(EvaluationError):
    def __init__(self, name: str, target: Any):
        super().__init__(
            f"No zero-argument accessor '{name}()' on value of type "
            f"{type(target).__name__}"
        )
        self.name = name


class AccessorError(EvaluationError):
    """A field read or accessor invoked during path resolution raised."""

    def __init__(self, name: str, error: Exception):
        super().__init__(f"Reading '{name}' failed: {error}")
        self.name = name


class IndexOutOfBoundsError(EvaluationError, IndexError):
    def __init__(self, index: int, length: int):
        super().__init__(f"Index {index} out of bounds for list of length {length}")
        self.index = index
        self.length = length


class NotIndexableError(EvaluationError):
    def __init__(self, target: Any):
        super().__init__(f"Value of type {type(target).__name__} is not indexable")


class TypeMismatchError(EvaluationError, TypeError):
    """Operand kinds are not accepted by an operator."""


class DivisionByZeroError(EvaluationError, ZeroDivisionError):
    """Division with a zero divisor."""


class NumericOverflowError(EvaluationError, OverflowError):
    """Float arithmetic on finite operands left the representable range."""


class ConfigurationError(RuleEngineError, ValueError):
    """A rule, condition or expression was constructed incorrectly."""


class ActionExecutionError(RuleEngineError):
    """An action raised while a matched rule was executing.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, rule_id: str, action_name: str, error: Exception):
        super().__init__(f"Rule '{rule_id}': action '{action_name}' failed: {error}")
        self.rule_id = rule_id
        self.action_name = action_name
        self.error = error
