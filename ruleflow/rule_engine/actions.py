"""Actions applied to the context when a rule matches."""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Union

from ruleflow.rule_engine.context import EvaluationContext
from ruleflow.rule_engine.errors import ConfigurationError
from ruleflow.rule_engine.expression import Expression, compile_expression

logger = logging.getLogger(__name__)


class Action(ABC):
    """A side-effecting operation on an evaluation context."""

    name: str = "action"

    @abstractmethod
    def execute(self, context: EvaluationContext) -> None:
        """Apply the action. Failures propagate to the caller of ``fire``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CallbackAction(Action):
    """Run an arbitrary callable against the context."""

    def __init__(self, name: str, func: Callable[[EvaluationContext], None]):
        self.name = name
        self.func = func

    def execute(self, context: EvaluationContext) -> None:
        self.func(context)


class SetAction(Action):
    """Evaluate an expression and store the result under ``target``.

    Example:
        ``SetAction("finalPrice", "orderTotal * 0.8")``
    """

    def __init__(self, target: str, expression: str | Expression):
        if isinstance(expression, str):
            expression = compile_expression(expression)
        self.target = target
        self.expression = expression
        self.name = f"set {target}"

    def execute(self, context: EvaluationContext) -> None:
        value = self.expression.evaluate(context)
        context.set(self.target, value)
        logger.debug(f"Set {self.target} = {value!r} from '{self.expression.source}'")


class LogAction(Action):
    """Write a message to the ``ruleflow`` log."""

    def __init__(self, message: str, level: int = logging.INFO):
        self.message = message
        self.level = level
        self.name = "log"

    def execute(self, context: EvaluationContext) -> None:
        logger.log(self.level, self.message)


ActionLike = Union[Action, Callable[[EvaluationContext], None]]


def as_action(value: ActionLike) -> Action:
    """Wrap a plain callable in a ``CallbackAction``."""
    if isinstance(value, Action):
        return value
    if callable(value):
        return CallbackAction(getattr(value, "__name__", "callback"), value)
    raise ConfigurationError(f"Cannot use {value!r} as an action")
