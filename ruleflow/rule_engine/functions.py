"""Built-in zero-argument calls available on collection values."""

from collections.abc import Sized
from typing import Any


class BuiltinCalls:
    """Calls resolved by the engine itself instead of by the target object.

    Each applies to any sized value: lists, mappings and strings.
    """

    @staticmethod
    def size(value: Sized) -> int:
        """Number of elements in the value."""
        return len(value)

    @staticmethod
    def length(value: Sized) -> int:
        """Alias of ``size``."""
        return len(value)

    @staticmethod
    def isEmpty(value: Sized) -> bool:
        """True when the value has no elements."""
        return len(value) == 0


BUILTIN_CALL_NAMES = frozenset({"size", "length", "isEmpty"})


def supports_builtin(name: str, value: Any) -> bool:
    """Whether ``value.name()`` is handled by a built-in call."""
    return name in BUILTIN_CALL_NAMES and isinstance(value, Sized)


def evaluate_builtin(name: str, value: Any) -> Any:
    """Evaluate a built-in call on a value.

    Raises:
        AttributeError: If the built-in is not found
    """
    func = getattr(BuiltinCalls, name, None)
    if func is None:
        raise AttributeError(f"Unknown built-in call: {name}")
    return func(value)
