"""Evaluation context shared by conditions and actions during a firing pass."""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, TypeVar

from ruleflow.rule_engine.errors import EvaluationError, UnboundVariableError
from ruleflow.rule_engine.expression import compile_path
from ruleflow.rule_engine.models import Diagnostic

T = TypeVar("T")


@dataclass
class EvaluationContext:
    """Mutable key/value store that conditions read and actions write.

    The caller creates and owns the context. The engine and the conditions
    and actions only use it for the duration of a ``fire`` call.
    """

    variables: dict[str, Any] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    active_rule_id: str | None = field(default=None, repr=False)

    def get_variable(self, name: str) -> Any:
        """Get a variable by name.

        Raises:
            UnboundVariableError: If the variable is not in the context
        """
        try:
            return self.variables[name]
        except KeyError:
            raise UnboundVariableError(name) from None

    def get(self, key: str, default: Any = None) -> Any:
        return self.variables.get(key, default)

    def get_as(self, key: str, expected_type: type[T]) -> T | None:
        """Get a value only if it is an instance of ``expected_type``."""
        value = self.variables.get(key)
        if isinstance(value, expected_type):
            return value
        return None

    def set(self, key: str, value: Any) -> None:
        self.variables[key] = value

    def resolve_path(self, path: str) -> Any:
        """Resolve a path such as ``user.goods[0].price`` against this context.

        Raises:
            ConfigurationError: If the text is not a single path
            EvaluationError: If the path cannot be resolved
        """
        return compile_path(path).evaluate(self)

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of the current data."""
        return dict(self.variables)

    def record_diagnostic(self, condition: str, error: EvaluationError) -> Diagnostic:
        diagnostic = Diagnostic(
            condition=condition, error=error, rule_id=self.active_rule_id
        )
        self.diagnostics.append(diagnostic)
        return diagnostic

    @contextmanager
    def evaluating(self, rule_id: str) -> Iterator["EvaluationContext"]:
        """Tag diagnostics recorded inside the block with ``rule_id``."""
        previous = self.active_rule_id
        self.active_rule_id = rule_id
        try:
            yield self
        finally:
            self.active_rule_id = previous

    def __getitem__(self, key: str) -> Any:
        return self.variables[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.variables[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.variables

    def __len__(self) -> int:
        return len(self.variables)
