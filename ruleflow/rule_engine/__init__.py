"""Rule engine package for prioritized, condition/action business rules.

This package provides an expression-driven rule engine. It supports:

- Expression compilation (tokenizer, precedence grammar, AST)
- Typed evaluation with path resolution over heterogeneous data
- Fail-closed conditions with diagnostics
- Prioritized, exclusive and time-gated rules
- Lottery draws over time-windowed purchase records
"""

# Expressions
from ruleflow.rule_engine.expression import Expression, compile_expression, compile_path
from ruleflow.rule_engine.parser import ExpressionParser, parse_expression
from ruleflow.rule_engine.tokenizer import Token, TokenKind, tokenize

# Evaluation context and expression evaluator
from ruleflow.rule_engine.context import EvaluationContext
from ruleflow.rule_engine.evaluator import ExpressionEvaluator
from ruleflow.rule_engine.resolver import Record

# Conditions and actions
from ruleflow.rule_engine.conditions import (
    Condition,
    ExpressionCondition,
    ComparisonOperator,
    FieldComparisonCondition,
    CompositeOperator,
    CompositeCondition,
    TimeWindowCondition,
    PredicateCondition,
    all_of,
    any_of,
    negate,
)
from ruleflow.rule_engine.actions import Action, CallbackAction, SetAction, LogAction
from ruleflow.rule_engine.lottery import LotteryAction, draw_lottery

# Rule builder, registry and engine
from ruleflow.rule_engine.rule_builder import RuleBuilder
from ruleflow.rule_engine.rule_registry import RuleRegistry
from ruleflow.rule_engine.rule_engine import RuleEngine

# Data models
from ruleflow.rule_engine.models import Rule, Diagnostic, Purchase

# Errors
from ruleflow.rule_engine.errors import (
    RuleEngineError,
    ExpressionSyntaxError,
    LexError,
    ParseError,
    EvaluationError,
    UnboundVariableError,
    NoSuchFieldError,
    NoSuchMethodError,
    AccessorError,
    IndexOutOfBoundsError,
    NotIndexableError,
    TypeMismatchError,
    DivisionByZeroError,
    NumericOverflowError,
    ConfigurationError,
    ActionExecutionError,
)

__all__ = [
    # Expressions
    "Expression",
    "compile_expression",
    "compile_path",
    "ExpressionParser",
    "parse_expression",
    "Token",
    "TokenKind",
    "tokenize",
    # Evaluation context and expression evaluator
    "EvaluationContext",
    "ExpressionEvaluator",
    "Record",
    # Conditions and actions
    "Condition",
    "ExpressionCondition",
    "ComparisonOperator",
    "FieldComparisonCondition",
    "CompositeOperator",
    "CompositeCondition",
    "TimeWindowCondition",
    "PredicateCondition",
    "all_of",
    "any_of",
    "negate",
    "Action",
    "CallbackAction",
    "SetAction",
    "LogAction",
    "LotteryAction",
    "draw_lottery",
    # Rule builder, registry and engine
    "RuleBuilder",
    "RuleRegistry",
    "RuleEngine",
    # Data models
    "Rule",
    "Diagnostic",
    "Purchase",
    # Errors
    "RuleEngineError",
    "ExpressionSyntaxError",
    "LexError",
    "ParseError",
    "EvaluationError",
    "UnboundVariableError",
    "NoSuchFieldError",
    "NoSuchMethodError",
    "AccessorError",
    "IndexOutOfBoundsError",
    "NotIndexableError",
    "TypeMismatchError",
    "DivisionByZeroError",
    "NumericOverflowError",
    "ConfigurationError",
    "ActionExecutionError",
]
