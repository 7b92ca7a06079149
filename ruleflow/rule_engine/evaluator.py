"""Expression evaluator for compiled condition and value expressions."""

from typing import TYPE_CHECKING, Any

from ruleflow.rule_engine.errors import TypeMismatchError
from ruleflow.rule_engine.nodes import BinaryOp, Literal, Node, UnaryNot, Variable
from ruleflow.rule_engine.resolver import PathResolver
from ruleflow.rule_engine.values import (
    ARITHMETIC_OPERATORS,
    EQUALITY_OPERATORS,
    LOGICAL_OPERATORS,
    RELATIONAL_OPERATORS,
    ValueKind,
    arithmetic,
    compare,
    kind_of,
    values_equal,
)

if TYPE_CHECKING:
    from ruleflow.rule_engine.context import EvaluationContext


class ExpressionEvaluator:
    """Evaluator for expression AST nodes.

    The evaluator walks nodes produced by the parser and evaluates them
    against the data in an evaluation context. An evaluator is created per
    evaluation and keeps no state between calls.
    """

    def __init__(self, context: "EvaluationContext"):
        """Initialize the evaluator.

        Args:
            context: Evaluation context holding the variables
        """
        self.ctx = context
        self.resolver = PathResolver(context, self.evaluate)

    def evaluate(self, ast: Node) -> Any:
        """Evaluate an AST node to a value.

        Raises:
            EvaluationError: If a path cannot be resolved or an operator
                rejects its operands
            ValueError: If the AST node is not recognized
        """
        if isinstance(ast, Literal):
            return ast.value

        if isinstance(ast, Variable):
            return self.resolver.resolve(ast)

        if isinstance(ast, UnaryNot):
            return self._evaluate_not(ast)

        if isinstance(ast, BinaryOp):
            return self._evaluate_binary(ast)

        raise ValueError(f"Unknown AST node type: {type(ast).__name__}")

    def evaluate_condition(self, ast: Node) -> bool:
        """Evaluate an AST node that must produce a boolean."""
        result = self.evaluate(ast)
        if kind_of(result) != ValueKind.BOOL:
            raise TypeMismatchError(
                f"Condition must evaluate to a boolean, got {kind_of(result).value}"
            )
        return result

    def _evaluate_binary(self, ast: BinaryOp) -> Any:
        """Evaluate an operator chain such as ``a + b + c`` or ``x && y && z``.

        The parser folds chains into left-deep trees, so the left spine is
        walked in a loop and only right operands recurse.
        """
        spine = []
        node = ast
        while isinstance(node, BinaryOp):
            spine.append(node)
            node = node.left

        value = self.evaluate(node)
        for node in reversed(spine):
            value = self._apply_binary(node, value)
        return value

    def _apply_binary(self, ast: BinaryOp, left: Any) -> Any:
        op = ast.op

        if op in LOGICAL_OPERATORS:
            return self._apply_logical(ast, left)

        right = self.evaluate(ast.right)

        if op in EQUALITY_OPERATORS:
            equal = values_equal(left, right)
            return equal if op == "==" else not equal

        if op in RELATIONAL_OPERATORS:
            return compare(op, left, right)

        if op in ARITHMETIC_OPERATORS:
            return arithmetic(op, left, right)

        raise ValueError(f"Unknown binary operator: {op}")

    def _apply_logical(self, ast: BinaryOp, left: Any) -> bool:
        """Apply && / || with short-circuit.

        The right operand is not evaluated when the left one decides the
        result, so errors inside it never surface.
        """
        self._require_bool(left, ast.op)
        if ast.op == "&&" and not left:
            return False
        if ast.op == "||" and left:
            return True
        return self._evaluate_bool(ast.right, ast.op)

    def _evaluate_not(self, ast: UnaryNot) -> bool:
        negations = 0
        node = ast
        while isinstance(node, UnaryNot):
            negations += 1
            node = node.operand

        value = self._evaluate_bool(node, "!")
        return value if negations % 2 == 0 else not value

    def _evaluate_bool(self, ast: Node, op: str) -> bool:
        value = self.evaluate(ast)
        self._require_bool(value, op)
        return value

    @staticmethod
    def _require_bool(value: Any, op: str) -> None:
        if kind_of(value) != ValueKind.BOOL:
            raise TypeMismatchError(
                f"Operator '{op}' requires boolean operands, got {kind_of(value).value}"
            )
