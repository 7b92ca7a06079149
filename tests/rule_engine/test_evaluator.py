"""Tests for expression evaluation."""

import pytest

from ruleflow.rule_engine.context import EvaluationContext
from ruleflow.rule_engine.errors import (
    ConfigurationError,
    DivisionByZeroError,
    TypeMismatchError,
    UnboundVariableError,
)
from ruleflow.rule_engine.evaluator import ExpressionEvaluator
from ruleflow.rule_engine.expression import (
    compile_expression,
    compile_path,
    nesting_depth,
)
from ruleflow.rule_engine.nodes import BinaryOp, Literal


def evaluate(text, context):
    return compile_expression(text).evaluate(context)


class TestExpressionEvaluator:
    """Tests for values produced by expressions."""

    def test_comparisons(self, context):
        assert evaluate("orderTotal > 100", context) is True
        assert evaluate("orderTotal >= 150", context) is True
        assert evaluate("orderTotal < 150", context) is False
        assert evaluate("count <= 7.0", context) is True

    def test_equality(self, context):
        assert evaluate("userType == 'VIP'", context) is True
        assert evaluate("userType != \"VIP\"", context) is False
        assert evaluate("count == 7.0", context) is True
        assert evaluate("nothing == nothing", context) is True
        assert evaluate("nothing == 0", context) is False
        assert evaluate("order.tags == order.tags", context) is True

    def test_arithmetic(self, context):
        assert evaluate("1 + 2 * 3", context) == 7
        assert evaluate("10 - 4 - 3", context) == 3
        assert evaluate("5 / 2", context) == 2
        assert evaluate("5.0 / 2", context) == 2.5
        assert evaluate("orderTotal * 0.8", context) == 120.0
        assert evaluate("count - -3", context) == 10

    def test_arithmetic_in_comparison(self, context):
        assert evaluate("user.goods.size() * 2 > count - 2", context) is True

    def test_logical(self, context):
        assert evaluate("flag && userType == 'VIP'", context) is True
        assert evaluate("!flag || count > 100", context) is False
        assert evaluate("!!flag", context) is True

    def test_and_short_circuits(self, context):
        """Test that the right operand is skipped once the left decides."""
        assert evaluate("false && missing.value > 1", context) is False
        assert evaluate("flag || 1 / 0 > 1", context) is True
        assert evaluate("true || missing.value > 1", context) is True

    def test_short_circuit_inside_mixed_chain(self, context):
        assert evaluate("false && missing > 1 || flag", context) is True
        assert evaluate("flag || missing > 1 && false", context) is True

    def test_long_operator_chains(self, context):
        """Test chains far longer than the interpreter's recursion limit."""
        assert evaluate(" + ".join(["1"] * 1000) + " > 0", context) is True
        assert evaluate(" + ".join(["1"] * 1000), context) == 1000
        bits = EvaluationContext({"x": True, "y": False})
        assert evaluate(" && ".join(["x"] * 800), bits) is True
        assert evaluate(" || ".join(["y"] * 800), bits) is False
        assert evaluate(" || ".join(["!flag"] * 400), context) is False

    def test_repeated_negation(self, context):
        assert evaluate("!" * 2000 + "true", context) is True
        assert evaluate("!" * 2001 + "flag", context) is False
        with pytest.raises(TypeMismatchError):
            evaluate("!" * 1000 + "count", context)

    def test_right_operand_errors_when_evaluated(self, context):
        with pytest.raises(UnboundVariableError):
            evaluate("true && missing", context)

    def test_logical_requires_booleans(self, context):
        with pytest.raises(TypeMismatchError):
            evaluate("count && flag", context)
        with pytest.raises(TypeMismatchError):
            evaluate("!count", context)

    def test_relational_requires_numbers(self, context):
        with pytest.raises(TypeMismatchError):
            evaluate("userType > 'A'", context)

    def test_division_by_zero(self, context):
        with pytest.raises(DivisionByZeroError):
            evaluate("count / 0", context)

    def test_unknown_node(self, context):
        with pytest.raises(ValueError):
            ExpressionEvaluator(context).evaluate("not a node")

    def test_evaluator_is_stateless(self):
        """Test that one compiled expression serves independent contexts."""
        expression = compile_expression("total * 2")

        assert expression.evaluate(EvaluationContext({"total": 1})) == 2
        assert expression.evaluate(EvaluationContext({"total": 2.5})) == 5.0

    def test_evaluate_ast_directly(self, context):
        ast = BinaryOp("+", Literal(1), Literal(2.0))

        assert ExpressionEvaluator(context).evaluate(ast) == 3.0


class TestConditionEvaluation:
    def test_boolean_result(self, context):
        assert compile_expression("flag").evaluate_condition(context) is True

    def test_non_boolean_result(self, context):
        with pytest.raises(TypeMismatchError, match="boolean"):
            compile_expression("count + 1").evaluate_condition(context)


class TestCompile:
    def test_source_is_kept(self):
        expression = compile_expression("a > 1")

        assert expression.source == "a > 1"
        assert str(expression) == "a > 1"

    def test_expression_too_long(self, monkeypatch):
        from ruleflow.core.config import settings

        monkeypatch.setattr(settings, "MAX_EXPRESSION_LENGTH", 5)
        with pytest.raises(ConfigurationError, match="maximum"):
            compile_expression("a > 100")

    def test_compile_path_rejects_expressions(self):
        with pytest.raises(ConfigurationError):
            compile_path("a + 1")

    def test_compile_path(self, context):
        assert compile_path("order.items[2]").evaluate(context) == 3

    def test_nested_indexes_too_deep(self, monkeypatch):
        from ruleflow.core.config import settings

        monkeypatch.setattr(settings, "MAX_EXPRESSION_DEPTH", 10)
        text = "a" + "[a" * 20 + "]" * 20

        with pytest.raises(ConfigurationError, match="levels deep"):
            compile_expression(text)

    def test_default_depth_rejects_deep_nesting(self):
        with pytest.raises(ConfigurationError):
            compile_expression("a" + "[a" * 500 + "]" * 500)

    def test_nesting_depth(self):
        """Test that operator chains and negation do not add depth."""
        assert nesting_depth(compile_expression("a").ast) == 1
        assert nesting_depth(compile_expression("a + b + c + d").ast) == 2
        assert nesting_depth(compile_expression("!!!a && b").ast) == 2
        assert nesting_depth(compile_expression("a || b && c == d + e * f").ast) == 6
        assert nesting_depth(compile_expression("a[b[c]]").ast) == 3
