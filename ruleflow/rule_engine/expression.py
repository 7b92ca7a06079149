"""Compiled expressions: source text plus an immutable AST."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ruleflow.core.config import settings
from ruleflow.rule_engine.errors import ConfigurationError
from ruleflow.rule_engine.evaluator import ExpressionEvaluator
from ruleflow.rule_engine.nodes import BinaryOp, Index, Node, UnaryNot, Variable
from ruleflow.rule_engine.parser import parse_expression

if TYPE_CHECKING:
    from ruleflow.rule_engine.context import EvaluationContext


@dataclass(frozen=True)
class Expression:
    """A parsed expression that can be evaluated against many contexts."""

    source: str
    ast: Node

    def evaluate(self, context: "EvaluationContext") -> Any:
        """Evaluate to a value of any kind."""
        return ExpressionEvaluator(context).evaluate(self.ast)

    def evaluate_condition(self, context: "EvaluationContext") -> bool:
        """Evaluate to a boolean.

        Raises:
            TypeMismatchError: If the expression does not produce a boolean
        """
        return ExpressionEvaluator(context).evaluate_condition(self.ast)

    def __str__(self) -> str:
        return self.source


def compile_expression(text: str) -> Expression:
    """Parse expression text once so it can be evaluated repeatedly.

    Raises:
        ConfigurationError: If the text is longer, or nests deeper, than the
            configured maximum
        LexError: If the text contains a malformed token
        ParseError: If the text does not match the grammar
    """
    if len(text) > settings.MAX_EXPRESSION_LENGTH:
        raise ConfigurationError(
            f"Expression is {len(text)} characters long, maximum is "
            f"{settings.MAX_EXPRESSION_LENGTH}"
        )
    ast = parse_expression(text)
    depth = nesting_depth(ast)
    if depth > settings.MAX_EXPRESSION_DEPTH:
        raise ConfigurationError(
            f"Expression nests {depth} levels deep, maximum is "
            f"{settings.MAX_EXPRESSION_DEPTH}"
        )
    return Expression(source=text, ast=ast)


def nesting_depth(ast: Node) -> int:
    """Number of nested sub-expressions the evaluator recurses into.

    Left operands of an operator chain and repeated ``!`` are evaluated in a
    loop, so only right operands and index expressions add a level.
    """
    deepest = 0
    stack = [(ast, 1)]
    while stack:
        node, depth = stack.pop()
        deepest = max(deepest, depth)
        if isinstance(node, BinaryOp):
            stack.append((node.left, depth))
            stack.append((node.right, depth + 1))
        elif isinstance(node, UnaryNot):
            stack.append((node.operand, depth))
        elif isinstance(node, Variable):
            for segment in node.path:
                if isinstance(segment, Index):
                    stack.append((segment.expression, depth + 1))
    return deepest


def compile_path(text: str) -> Expression:
    """Compile text that must be a single path such as ``user.goods[0].price``."""
    expression = compile_expression(text)
    if not isinstance(expression.ast, Variable):
        raise ConfigurationError(f"Expected a field path, got expression {text!r}")
    return expression
