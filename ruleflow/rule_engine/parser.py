"""Expression parser using Lark."""

from functools import lru_cache
from pathlib import Path
from typing import Iterator

from lark import Lark, Token, Transformer
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken

from ruleflow.rule_engine.errors import LexError, ParseError
from ruleflow.rule_engine.nodes import (
    BinaryOp,
    Call,
    Field,
    Index,
    Literal,
    Node,
    UnaryNot,
    Variable,
)
from ruleflow.rule_engine.tokenizer import TERMINAL_DISPLAY, check_number, lex_error


class ASTTransformer(Transformer):
    """Transform the Lark parse tree into expression nodes."""

    def or_expr(self, items):
        # Operator terminals are filtered; build a left-associative chain
        result = items[0]
        for item in items[1:]:
            result = BinaryOp("||", result, item)
        return result

    def and_expr(self, items):
        result = items[0]
        for item in items[1:]:
            result = BinaryOp("&&", result, item)
        return result

    def equality(self, items):
        # items: [left, EQ_OP, right]
        return BinaryOp(str(items[1]), items[0], items[2])

    def relational(self, items):
        return BinaryOp(str(items[1]), items[0], items[2])

    def additive(self, items):
        return self._fold_binary(items)

    def multiplicative(self, items):
        return self._fold_binary(items)

    def not_expr(self, items):
        return UnaryNot(items[0])

    def number(self, items):
        # items: [NUMBER] or [MINUS, NUMBER]
        text = str(items[-1])
        value = float(text) if "." in text else int(text)
        return Literal(-value if len(items) == 2 else value)

    def string(self, items):
        # Strip the surrounding quotes; no escape processing
        return Literal(str(items[0])[1:-1])

    def true_lit(self, items):
        return Literal(True)

    def false_lit(self, items):
        return Literal(False)

    def path(self, items):
        return Variable((Field(str(items[0])), *items[1:]))

    def field_segment(self, items):
        return Field(str(items[0]))

    def call_segment(self, items):
        return Call(str(items[0]))

    def index_segment(self, items):
        return Index(items[0])

    @staticmethod
    def _fold_binary(items):
        # items: [operand, op, operand, op, operand, ...]
        result = items[0]
        for i in range(1, len(items), 2):
            result = BinaryOp(str(items[i]), result, items[i + 1])
        return result


class ExpressionParser:
    """Parser for condition and value expressions."""

    def __init__(self):
        grammar_path = Path(__file__).parent / "expression.lark"
        with open(grammar_path) as f:
            grammar = f.read()

        self.lark = Lark(
            grammar,
            parser="lalr",
            lexer="basic",
            transformer=ASTTransformer(),
            start="start",
            lexer_callbacks={"NUMBER": check_number},
        )

    def parse(self, text: str) -> Node:
        """Parse expression text into an AST.

        Raises:
            LexError: If the text contains a malformed token
            ParseError: If the tokens do not match the grammar
        """
        try:
            return self.lark.parse(text)
        except UnexpectedCharacters as e:
            raise lex_error(e, text) from None
        except UnexpectedToken as e:
            raise self._parse_error(text, e.token, e.expected) from None
        except UnexpectedEOF as e:
            raise self._parse_error(text, None, e.expected) from None
        except LexError as e:
            e.expression = text
            raise

    def lex(self, text: str) -> Iterator[Token]:
        """Run only the lexer over the text."""
        return self.lark.lex(text)

    @staticmethod
    def _parse_error(text: str, token: Token | None, expected) -> ParseError:
        expected_names = tuple(
            sorted({TERMINAL_DISPLAY.get(name, name) for name in expected or ()})
        )
        if token is None or token.type == "$END":
            return ParseError(text, len(text), expected_names, "end of input")
        return ParseError(text, token.start_pos, expected_names, f"'{token.value}'")


@lru_cache(maxsize=1)
def get_parser() -> ExpressionParser:
    """Return the shared parser; Lark LALR parsing keeps no state between calls."""
    return ExpressionParser()


def parse_expression(text: str) -> Node:
    return get_parser().parse(text)
