"""Rule engine: fires registered rules against an evaluation context."""

import logging
from datetime import datetime

from ruleflow.rule_engine.context import EvaluationContext
from ruleflow.rule_engine.models import Rule
from ruleflow.rule_engine.rule_registry import RuleRegistry

logger = logging.getLogger(__name__)


class RuleEngine:
    """Executes rules against a context in priority order.

    Each ``fire`` call walks a snapshot of the registry, so rules registered
    or removed during a pass only affect later passes.
    """

    def __init__(self, registry: RuleRegistry | None = None):
        """Initialize the rule engine.

        Args:
            registry: The rule registry to use (a new one if omitted)
        """
        self.registry = registry if registry is not None else RuleRegistry()

    def register(self, rule: Rule) -> None:
        self.registry.register(rule)
        logger.debug(f"Registered rule '{rule.id}' with priority {rule.priority}")

    def remove(self, rule_id: str) -> Rule | None:
        return self.registry.remove(rule_id)

    def clear(self) -> None:
        self.registry.clear()

    @property
    def rules(self) -> list[Rule]:
        """Registered rules, highest priority first."""
        return self.registry.get_all()

    def fire(self, context: EvaluationContext, now: datetime | None = None) -> None:
        """Evaluate every effective rule and run the actions of those that match.

        Args:
            context: The context conditions read and actions write
            now: Time used for effective-window checks (defaults to now)

        Raises:
            ActionExecutionError: If an action fails. Later actions and rules
                do not run and earlier effects are kept.
        """
        now = now or datetime.now()
        rules = self.registry.get_all()
        logger.debug(f"Firing {len(rules)} rule(s)")

        for rule in rules:
            if not rule.is_effective(now):
                logger.debug(f"Rule '{rule.id}' is not effective at {now}, skipping")
                continue

            with context.evaluating(rule.id):
                matched = rule.matches(context)
            if not matched:
                continue

            logger.info(f"Rule '{rule.id}' matched, executing {len(rule.actions)} action(s)")
            rule.execute(context)

            if rule.exclusive:
                logger.info(f"Rule '{rule.id}' is exclusive, stopping evaluation")
                break
