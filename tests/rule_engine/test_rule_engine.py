"""Tests for the rule registry and rule engine."""

from datetime import datetime

import pytest

from ruleflow.rule_engine.actions import CallbackAction, LogAction, SetAction
from ruleflow.rule_engine.context import EvaluationContext
from ruleflow.rule_engine.errors import ActionExecutionError, ConfigurationError
from ruleflow.rule_engine.rule_builder import RuleBuilder
from ruleflow.rule_engine.rule_engine import RuleEngine
from ruleflow.rule_engine.rule_registry import RuleRegistry


def tracking_rule(rule_id, priority=0, condition=None, exclusive=False):
    """Build a rule that appends its id to the context's ``fired`` list."""
    builder = (
        RuleBuilder.create()
        .id(rule_id)
        .priority(priority)
        .then(CallbackAction("track", lambda ctx: ctx["fired"].append(rule_id)))
        .exclusive(exclusive)
    )
    if condition is not None:
        builder.when(condition)
    return builder.build()


@pytest.fixture
def ctx():
    return EvaluationContext({"fired": [], "amount": 50})


class TestRuleRegistry:
    """Tests for RuleRegistry class."""

    @pytest.fixture
    def registry(self):
        """Create a rule registry for testing."""
        return RuleRegistry()

    def test_register_and_lookup(self, registry):
        rule = tracking_rule("r1")
        registry.register(rule)

        assert "r1" in registry
        assert len(registry) == 1
        assert registry.lookup("r1") is rule
        assert registry.lookup("r2") is None

    def test_duplicate_id(self, registry):
        registry.register(tracking_rule("r1"))

        with pytest.raises(ConfigurationError, match="already registered"):
            registry.register(tracking_rule("r1", priority=5))

    def test_priority_order_stable_for_ties(self, registry):
        for rule_id, priority in [("low", 1), ("a", 5), ("high", 10), ("b", 5)]:
            registry.register(tracking_rule(rule_id, priority))

        assert [r.id for r in registry.get_all()] == ["high", "a", "b", "low"]

    def test_get_all_is_a_snapshot(self, registry):
        registry.register(tracking_rule("r1"))
        rules = registry.get_all()
        registry.register(tracking_rule("r2"))

        assert len(rules) == 1

    def test_remove_and_clear(self, registry):
        registry.register(tracking_rule("r1"))
        registry.register(tracking_rule("r2"))

        assert registry.remove("r1").id == "r1"
        assert registry.remove("r1") is None
        assert [r.id for r in registry.get_all()] == ["r2"]

        registry.clear()
        assert len(registry) == 0
        assert "r2" not in registry


class TestRuleEngine:
    """Tests for RuleEngine class."""

    @pytest.fixture
    def engine(self):
        """Create a rule engine with its own registry."""
        return RuleEngine()

    def test_fire_with_no_rules(self, engine, ctx):
        engine.fire(ctx)

        assert ctx["fired"] == []

    def test_priority_order(self, engine, ctx):
        engine.register(tracking_rule("low", 1))
        engine.register(tracking_rule("high", 10))
        engine.register(tracking_rule("mid", 5))

        engine.fire(ctx)

        assert ctx["fired"] == ["high", "mid", "low"]

    def test_non_matching_rule_is_skipped(self, engine, ctx):
        engine.register(tracking_rule("big", 10, "amount > 100"))
        engine.register(tracking_rule("small", 1, "amount <= 100"))

        engine.fire(ctx)

        assert ctx["fired"] == ["small"]

    def test_exclusive_rule_stops_evaluation(self, engine, ctx):
        engine.register(tracking_rule("first", 10, "amount > 10", exclusive=True))
        engine.register(tracking_rule("second", 5))

        engine.fire(ctx)

        assert ctx["fired"] == ["first"]

    def test_non_matching_exclusive_rule_does_not_stop(self, engine, ctx):
        engine.register(tracking_rule("first", 10, "amount > 100", exclusive=True))
        engine.register(tracking_rule("second", 5))

        engine.fire(ctx)

        assert ctx["fired"] == ["second"]

    def test_effective_window(self, engine, ctx):
        rule = (
            RuleBuilder.create()
            .id("seasonal")
            .when(lambda c: c["fired"].append("evaluated") or True)
            .effective_between(datetime(2024, 6, 1), datetime(2024, 6, 30))
            .build()
        )
        engine.register(rule)

        engine.fire(ctx, now=datetime(2024, 7, 1))
        assert ctx["fired"] == []

        engine.fire(ctx, now=datetime(2024, 6, 30))
        assert ctx["fired"] == ["evaluated"]

    def test_later_rules_see_earlier_effects(self, engine, ctx):
        engine.register(
            RuleBuilder.create()
            .id("double")
            .priority(10)
            .then(SetAction("amount", "amount * 2"))
            .build()
        )
        engine.register(tracking_rule("check", 1, "amount == 100"))

        engine.fire(ctx)

        assert ctx["amount"] == 100
        assert ctx["fired"] == ["check"]

    def test_failed_condition_records_diagnostic(self, engine, ctx):
        engine.register(tracking_rule("bad", 10, "customer.tier == 'gold'"))
        engine.register(tracking_rule("good", 1))

        engine.fire(ctx)

        assert ctx["fired"] == ["good"]
        assert len(ctx.diagnostics) == 1
        assert ctx.diagnostics[0].rule_id == "bad"
        assert ctx.active_rule_id is None

    def test_long_condition_does_not_abort_fire(self, engine):
        ctx = EvaluationContext({"fired": [], "x": True})
        condition = " && ".join(["x"] * 800)
        engine.register(tracking_rule("long", 10, condition))
        engine.register(tracking_rule("after", 1))

        engine.fire(ctx)

        assert ctx["fired"] == ["long", "after"]
        assert ctx.diagnostics == []

    def test_action_failure_propagates(self, engine, ctx):
        def explode(c):
            raise RuntimeError("boom")

        engine.register(
            RuleBuilder.create()
            .id("faulty")
            .priority(10)
            .then(SetAction("step", "1"))
            .then(CallbackAction("explode", explode))
            .then(SetAction("after", "2"))
            .build()
        )
        engine.register(tracking_rule("later", 1))

        with pytest.raises(ActionExecutionError) as exc_info:
            engine.fire(ctx)

        error = exc_info.value
        assert error.rule_id == "faulty"
        assert error.action_name == "explode"
        assert isinstance(error.__cause__, RuntimeError)
        # no rollback, and nothing after the failure runs
        assert ctx["step"] == 1
        assert "after" not in ctx
        assert ctx["fired"] == []

    def test_register_remove_clear(self, engine):
        engine.register(tracking_rule("a"))
        engine.register(tracking_rule("b", 3))

        assert [r.id for r in engine.rules] == ["b", "a"]
        engine.remove("b")
        assert [r.id for r in engine.rules] == ["a"]
        engine.clear()
        assert engine.rules == []

    def test_shared_registry(self, ctx):
        registry = RuleRegistry()
        registry.register(tracking_rule("r1"))

        RuleEngine(registry).fire(ctx)

        assert ctx["fired"] == ["r1"]

    def test_log_action(self, engine, ctx, caplog):
        engine.register(
            RuleBuilder.create().id("log").then(LogAction("hello rules")).build()
        )

        with caplog.at_level("INFO", logger="ruleflow"):
            engine.fire(ctx)

        assert "hello rules" in caplog.text
