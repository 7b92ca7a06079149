"""Rule registry for managing rule definitions."""

import threading

from ruleflow.rule_engine.errors import ConfigurationError
from ruleflow.rule_engine.models import Rule


class RuleRegistry:
    """Registry for managing rules.

    Rules are kept ordered by priority (highest first). Rules with equal
    priority keep their registration order. All access goes through a
    re-entrant lock, and readers get snapshots.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._rules: list[Rule] = []
        self._by_id: dict[str, Rule] = {}
        self._lock = threading.RLock()

    def register(self, rule: Rule) -> None:
        """Register a rule.

        Args:
            rule: The rule to register

        Raises:
            ConfigurationError: If a rule with the same id already exists
        """
        with self._lock:
            if rule.id in self._by_id:
                raise ConfigurationError(f"Rule '{rule.id}' is already registered")
            self._by_id[rule.id] = rule
            self._rules.append(rule)
            # sort is stable, so ties keep registration order
            self._rules.sort(key=lambda r: -r.priority)

    def remove(self, rule_id: str) -> Rule | None:
        """Remove a rule by id.

        Returns:
            The removed rule or None if it was not registered
        """
        with self._lock:
            rule = self._by_id.pop(rule_id, None)
            if rule is not None:
                self._rules.remove(rule)
            return rule

    def lookup(self, rule_id: str) -> Rule | None:
        """Look up a rule by id.

        Args:
            rule_id: The id of the rule to look up

        Returns:
            The rule or None if not found
        """
        with self._lock:
            return self._by_id.get(rule_id)

    def get_all(self) -> list[Rule]:
        """Get all registered rules, highest priority first.

        Returns:
            A snapshot list of the rules
        """
        with self._lock:
            return list(self._rules)

    def clear(self) -> None:
        """Clear all registered rules."""
        with self._lock:
            self._rules.clear()
            self._by_id.clear()

    def __len__(self) -> int:
        """Return the number of registered rules."""
        with self._lock:
            return len(self._rules)

    def __contains__(self, rule_id: str) -> bool:
        """Check if a rule is registered."""
        with self._lock:
            return rule_id in self._by_id
