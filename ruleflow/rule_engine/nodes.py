"""Expression AST nodes.

Nodes are frozen so that one parsed expression can be evaluated against
any number of contexts.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Field:
    name: str


@dataclass(frozen=True)
class Call:
    """Zero-argument accessor call such as ``size()``."""

    name: str


@dataclass(frozen=True)
class Index:
    expression: "Node"


PathSegment = Union[Field, Call, Index]


@dataclass(frozen=True)
class Variable:
    """Dotted/indexed path whose head is looked up in the context."""

    path: tuple[PathSegment, ...]

    @property
    def root(self) -> str:
        return self.path[0].name


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class UnaryNot:
    operand: "Node"


Node = Union[Literal, Variable, BinaryOp, UnaryNot]
