"""Fluent builder for immutable rules."""

from datetime import datetime

from ruleflow.rule_engine.actions import ActionLike, as_action
from ruleflow.rule_engine.conditions import Condition, ConditionLike, as_condition
from ruleflow.rule_engine.errors import ConfigurationError, ExpressionSyntaxError
from ruleflow.rule_engine.models import Rule


class RuleBuilder:
    """Collects rule settings and produces a ``Rule``.

    Example:
        rule = (
            RuleBuilder.create()
            .id("vip-discount")
            .priority(10)
            .when("user.vip == true && orderTotal > 100")
            .then(SetAction("finalPrice", "orderTotal * 0.8"))
            .exclusive()
            .build()
        )
    """

    def __init__(self):
        self._id: str | None = None
        self._name: str | None = None
        self._description: str | None = None
        self._priority = 0
        self._condition: ConditionLike | None = None
        self._actions: list[ActionLike] = []
        self._exclusive = False
        self._effective_from: datetime | None = None
        self._effective_until: datetime | None = None

    @classmethod
    def create(cls) -> "RuleBuilder":
        return cls()

    def id(self, rule_id: str) -> "RuleBuilder":
        self._id = rule_id
        return self

    def name(self, name: str) -> "RuleBuilder":
        self._name = name
        return self

    def description(self, description: str) -> "RuleBuilder":
        self._description = description
        return self

    def priority(self, priority: int) -> "RuleBuilder":
        self._priority = priority
        return self

    def when(self, condition: ConditionLike) -> "RuleBuilder":
        """Set the condition: a ``Condition``, expression text or a callable."""
        self._condition = condition
        return self

    def then(self, action: ActionLike) -> "RuleBuilder":
        """Append an action. Actions run in the order they were added."""
        self._actions.append(action)
        return self

    def exclusive(self, flag: bool = True) -> "RuleBuilder":
        self._exclusive = flag
        return self

    def effective_from(self, start: datetime) -> "RuleBuilder":
        self._effective_from = start
        return self

    def effective_until(self, end: datetime) -> "RuleBuilder":
        self._effective_until = end
        return self

    def effective_between(self, start: datetime, end: datetime) -> "RuleBuilder":
        return self.effective_from(start).effective_until(end)

    def build(self) -> Rule:
        """Build the rule.

        Raises:
            ConfigurationError: If the id is missing or the window is inverted
            ExpressionSyntaxError: If the condition text does not compile
        """
        if not self._id:
            raise ConfigurationError("Rule id is required")
        if (
            self._effective_from is not None
            and self._effective_until is not None
            and self._effective_from > self._effective_until
        ):
            raise ConfigurationError(
                f"Rule '{self._id}' effective window starts after it ends"
            )

        return Rule(
            id=self._id,
            name=self._name or self._id,
            priority=self._priority,
            condition=self._build_condition(),
            actions=tuple(as_action(a) for a in self._actions),
            exclusive=self._exclusive,
            effective_from=self._effective_from,
            effective_until=self._effective_until,
            description=self._description,
        )

    def _build_condition(self) -> Condition | None:
        if self._condition is None:
            return None
        try:
            return as_condition(self._condition)
        except ExpressionSyntaxError as e:
            e.rule_id = self._id
            raise
