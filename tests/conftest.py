"""Shared fixtures for rule engine tests."""

from dataclasses import dataclass, field

import pytest

from ruleflow.rule_engine.context import EvaluationContext


@dataclass
class Goods:
    name: str
    price: float


@dataclass
class User:
    name: str
    vip: bool
    goods: list[Goods] = field(default_factory=list)

    def total(self) -> float:
        return sum(g.price for g in self.goods)

    def discount(self, rate: float) -> float:
        return self.total() * rate

    def broken(self) -> float:
        raise RuntimeError("backend unavailable")


@pytest.fixture
def user():
    """A user object with three goods."""
    return User(
        name="alice",
        vip=True,
        goods=[Goods("pen", 2.5), Goods("book", 12.0), Goods("lamp", 30)],
    )


@pytest.fixture
def context(user):
    """Context mixing an object, a mapping, and scalar values."""
    return EvaluationContext(
        variables={
            "user": user,
            "order": {"total": 150.0, "items": [1, 2, 3], "tags": ["gift"]},
            "orderTotal": 150.0,
            "count": 7,
            "userType": "VIP",
            "flag": True,
            "idx": 1,
            "nothing": None,
        }
    )
