"""Tokenizer for condition expressions.

Tokens are produced by the lexer of the shared expression grammar
(``expression.lark``), so the tokenizer and the parser always agree on what a
token is.
"""

import re
from dataclasses import dataclass
from enum import Enum

from lark import Token as LarkToken
from lark.exceptions import UnexpectedCharacters

from ruleflow.rule_engine.errors import LexError


class TokenKind(Enum):
    IDENT = "IDENT"
    INT = "INT"
    FLOAT = "FLOAT"
    STRING = "STRING"
    BOOL = "BOOL"
    OPERATOR = "OPERATOR"
    DOT = "DOT"
    LBRACKET = "LBRACKET"
    RBRACKET = "RBRACKET"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    position: int


_NUMBER_RE = re.compile(r"\d+(\.\d+)?")

# Grammar terminal name -> token kind
_TERMINAL_KINDS = {
    "NAME": TokenKind.IDENT,
    "STRING": TokenKind.STRING,
    "TRUE": TokenKind.BOOL,
    "FALSE": TokenKind.BOOL,
    "EQ_OP": TokenKind.OPERATOR,
    "REL_OP": TokenKind.OPERATOR,
    "PLUS": TokenKind.OPERATOR,
    "MINUS": TokenKind.OPERATOR,
    "MUL_OP": TokenKind.OPERATOR,
    "_OR": TokenKind.OPERATOR,
    "_AND": TokenKind.OPERATOR,
    "_NOT": TokenKind.OPERATOR,
    "_DOT": TokenKind.DOT,
    "_LPAR": TokenKind.LPAREN,
    "_RPAR": TokenKind.RPAREN,
    "_LSQB": TokenKind.LBRACKET,
    "_RSQB": TokenKind.RBRACKET,
}

# Grammar terminal name -> text shown in parse errors
TERMINAL_DISPLAY = {
    "NAME": "identifier",
    "NUMBER": "number",
    "STRING": "string",
    "TRUE": "'true'",
    "FALSE": "'false'",
    "EQ_OP": "'==' or '!='",
    "REL_OP": "comparison operator",
    "PLUS": "'+'",
    "MINUS": "'-'",
    "MUL_OP": "'*' or '/'",
    "_OR": "'||'",
    "_AND": "'&&'",
    "_NOT": "'!'",
    "_DOT": "'.'",
    "_LPAR": "'('",
    "_RPAR": "')'",
    "_LSQB": "'['",
    "_RSQB": "']'",
    "$END": "end of input",
}


def check_number(token: LarkToken) -> LarkToken:
    """Lexer callback rejecting malformed numeric lexemes."""
    if not _NUMBER_RE.fullmatch(token.value):
        raise LexError(
            f"Malformed numeric literal '{token.value}'", position=token.start_pos
        )
    return token


def lex_error(exc: UnexpectedCharacters, text: str) -> LexError:
    """Convert a Lark lexing failure into a LexError."""
    if exc.char in ("'", '"'):
        return LexError(
            f"Unterminated string literal opened with {exc.char}",
            text,
            exc.pos_in_stream,
        )
    return LexError(f"Unrecognized character {exc.char!r}", text, exc.pos_in_stream)


def tokenize(text: str) -> list[Token]:
    """Split an expression into tokens, ending with an EOF token.

    Raises:
        LexError: On an unrecognized character, an unterminated string or a
            malformed number
    """
    from ruleflow.rule_engine.parser import get_parser

    tokens = []
    try:
        for tok in get_parser().lex(text):
            if tok.type == "NUMBER":
                kind = TokenKind.FLOAT if "." in tok.value else TokenKind.INT
            else:
                kind = _TERMINAL_KINDS[tok.type]
            tokens.append(Token(kind, tok.value, tok.start_pos))
    except UnexpectedCharacters as e:
        raise lex_error(e, text) from None
    except LexError as e:
        e.expression = text
        raise

    tokens.append(Token(TokenKind.EOF, "", len(text)))
    return tokens
