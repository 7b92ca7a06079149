"""Path resolution over heterogeneous context data.

A path such as ``user.goods[1].price`` or ``user.goods.size()`` starts at a
context variable and walks fields, zero-argument calls and list indexes.
Resolution is read-only: neither the context nor the visited values are
modified.

Structured values can take part in three ways:

- mappings, whose keys are fields and whose callable values are accessors
- objects implementing the ``Record`` protocol
- plain objects (dataclasses, etc.), whose public attributes are fields and
  whose public zero-argument methods are accessors
"""

import inspect
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

from ruleflow.rule_engine.errors import (
    AccessorError,
    IndexOutOfBoundsError,
    NoSuchFieldError,
    NoSuchMethodError,
    NotIndexableError,
    TypeMismatchError,
)
from ruleflow.rule_engine.functions import evaluate_builtin, supports_builtin
from ruleflow.rule_engine.nodes import Call, Field, Index, Node, PathSegment, Variable
from ruleflow.rule_engine.values import ValueKind, kind_of

if TYPE_CHECKING:
    from ruleflow.rule_engine.context import EvaluationContext


@runtime_checkable
class Record(Protocol):
    """Explicit field/accessor capability for structured values.

    ``get_field`` raises ``LookupError`` for an unknown field and
    ``call_accessor`` raises ``AttributeError`` for an unknown accessor.
    """

    def get_field(self, name: str) -> Any: ...

    def call_accessor(self, name: str) -> Any: ...


def _is_public(name: str) -> bool:
    return not name.startswith("_")


def get_field(value: Any, name: str) -> Any:
    """Read field ``name`` from a structured value.

    Raises:
        NoSuchFieldError: If the value has no such field
        AccessorError: If reading the attribute raised
    """
    if isinstance(value, Record):
        try:
            return value.get_field(name)
        except LookupError:
            raise NoSuchFieldError(name, value) from None
        except Exception as e:
            raise AccessorError(name, e) from e

    if isinstance(value, Mapping):
        if name in value:
            return value[name]
        raise NoSuchFieldError(name, value)

    if kind_of(value) != ValueKind.RECORD or not _is_public(name):
        raise NoSuchFieldError(name, value)

    try:
        attr = getattr(value, name)
    except AttributeError:
        raise NoSuchFieldError(name, value) from None
    except Exception as e:
        raise AccessorError(name, e) from e

    # Methods are reached with call syntax only
    if inspect.ismethod(attr) or inspect.isbuiltin(attr):
        raise NoSuchFieldError(name, value)
    return attr


def call_accessor(value: Any, name: str) -> Any:
    """Evaluate ``value.name()``.

    ``size``/``length``/``isEmpty`` on sized values are handled by the
    engine; anything else is a named zero-argument accessor on the value.

    Raises:
        NoSuchMethodError: If the value has no such zero-argument accessor
        AccessorError: If the accessor raised
    """
    if supports_builtin(name, value):
        return evaluate_builtin(name, value)

    if isinstance(value, Record):
        try:
            return value.call_accessor(name)
        except AttributeError:
            raise NoSuchMethodError(name, value) from None
        except Exception as e:
            raise AccessorError(name, e) from e

    if isinstance(value, Mapping):
        func = value.get(name)
    elif kind_of(value) == ValueKind.RECORD:
        func = getattr(value, name, None)
    else:
        func = None

    if func is None or not callable(func) or not _is_public(name):
        raise NoSuchMethodError(name, value)

    try:
        inspect.signature(func).bind()
    except TypeError:
        raise NoSuchMethodError(name, value) from None
    except ValueError:
        pass  # no introspectable signature; let the call decide

    try:
        return func()
    except Exception as e:
        raise AccessorError(name, e) from e


def get_index(value: Any, index: Any) -> Any:
    """Bounds-checked list element access.

    Raises:
        NotIndexableError: If the value is not a list
        TypeMismatchError: If the index is not an integer
        IndexOutOfBoundsError: If the index is negative or past the end
    """
    if kind_of(value) != ValueKind.LIST:
        raise NotIndexableError(value)
    if kind_of(index) != ValueKind.INT:
        raise TypeMismatchError(
            f"List index must be an integer, got {kind_of(index).value}"
        )
    if index < 0 or index >= len(value):
        raise IndexOutOfBoundsError(index, len(value))
    return value[index]


class PathResolver:
    """Resolves ``Variable`` nodes against an evaluation context."""

    def __init__(
        self, context: "EvaluationContext", evaluate_index: Callable[[Node], Any]
    ):
        """Initialize the resolver.

        Args:
            context: Context holding the root variables
            evaluate_index: Callback evaluating index sub-expressions
        """
        self.ctx = context
        self.evaluate_index = evaluate_index

    def resolve(self, variable: Variable) -> Any:
        """Resolve a variable path to its value.

        Raises:
            UnboundVariableError: If the root is not in the context
            EvaluationError: If any later segment cannot be resolved
        """
        value = self.ctx.get_variable(variable.root)
        for segment in variable.path[1:]:
            value = self.apply(value, segment)
        return value

    def apply(self, value: Any, segment: PathSegment) -> Any:
        """Apply one path segment to the value produced so far."""
        if isinstance(segment, Field):
            return get_field(value, segment.name)
        if isinstance(segment, Call):
            return call_accessor(value, segment.name)
        if isinstance(segment, Index):
            return get_index(value, self.evaluate_index(segment.expression))
        raise ValueError(f"Unknown path segment: {segment!r}")
