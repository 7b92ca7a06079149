"""Shared data models for the rule engine."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from ruleflow.rule_engine.errors import ActionExecutionError, EvaluationError

if TYPE_CHECKING:
    from ruleflow.rule_engine.actions import Action
    from ruleflow.rule_engine.conditions import Condition
    from ruleflow.rule_engine.context import EvaluationContext


@dataclass(frozen=True)
class Rule:
    """A prioritized condition/actions pair.

    Rules are built with ``RuleBuilder`` and never change afterwards.
    Higher ``priority`` fires earlier. An ``exclusive`` rule stops the firing
    pass once it matches. The effective window is closed and either bound
    may be omitted.
    """

    id: str
    name: str
    priority: int = 0
    condition: "Condition | None" = None
    actions: tuple["Action", ...] = ()
    exclusive: bool = False
    effective_from: datetime | None = None
    effective_until: datetime | None = None
    description: str | None = None

    def is_effective(self, now: datetime) -> bool:
        if self.effective_from is not None and now < self.effective_from:
            return False
        if self.effective_until is not None and now > self.effective_until:
            return False
        return True

    def matches(self, context: "EvaluationContext") -> bool:
        """Evaluate the condition; a rule without one always matches."""
        if self.condition is None:
            return True
        return self.condition.evaluate(context)

    def execute(self, context: "EvaluationContext") -> None:
        """Run every action in order against the context."""
        for action in self.actions:
            try:
                action.execute(context)
            except Exception as e:
                raise ActionExecutionError(self.id, action.name, e) from e


@dataclass(frozen=True)
class Diagnostic:
    """Record of a condition that failed closed instead of raising."""

    condition: str
    error: EvaluationError
    rule_id: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass(frozen=True)
class Purchase:
    """A customer purchase, usable as a lottery candidate."""

    customer_id: str
    purchase_time: datetime
