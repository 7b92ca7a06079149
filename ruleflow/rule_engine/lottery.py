"""Lottery draws over purchase records within a time window."""

import logging
import random
from datetime import datetime, timedelta
from typing import Any, Callable, Sequence

from ruleflow.core.config import settings
from ruleflow.rule_engine.actions import Action
from ruleflow.rule_engine.context import EvaluationContext
from ruleflow.rule_engine.errors import ConfigurationError, EvaluationError
from ruleflow.rule_engine.resolver import get_field

logger = logging.getLogger(__name__)


def default_rng() -> random.Random:
    """Random generator seeded from ``LOTTERY_SEED`` (system entropy if unset)."""
    return random.Random(settings.LOTTERY_SEED)


def filter_by_window(
    candidates: Sequence[Any],
    start: datetime | None,
    end: datetime | None,
    timestamp_field: str = "purchase_time",
) -> list[Any]:
    """Keep candidates whose timestamp lies in the closed window [start, end].

    Either bound may be None. Candidates without a timestamp are skipped.
    """
    eligible = []
    for candidate in candidates:
        try:
            timestamp = get_field(candidate, timestamp_field)
        except EvaluationError as e:
            logger.debug(f"Skipping lottery candidate {candidate!r}: {e}")
            continue
        if timestamp is None:
            continue
        if start is not None and timestamp < start:
            continue
        if end is not None and timestamp > end:
            continue
        eligible.append(candidate)
    return eligible


def draw_lottery(
    candidates: Sequence[Any] | None,
    start: datetime | None,
    end: datetime | None,
    winner_count: int,
    *,
    timestamp_field: str = "purchase_time",
    rng: random.Random | None = None,
) -> list[Any]:
    """Draw distinct winners uniformly at random from eligible candidates.

    Args:
        candidates: Records exposing a timestamp field
        start: Inclusive window start, or None for unbounded
        end: Inclusive window end, or None for unbounded
        winner_count: Number of winners requested
        timestamp_field: Field holding each candidate's timestamp
        rng: Random generator; defaults to one seeded from settings

    Returns:
        ``min(winner_count, eligible)`` winners, or an empty list
    """
    if not candidates or winner_count <= 0:
        return []

    eligible = filter_by_window(candidates, start, end, timestamp_field)
    if not eligible:
        return []

    rng = rng or default_rng()
    return rng.sample(eligible, min(winner_count, len(eligible)))


class LotteryAction(Action):
    """Draw lottery winners from a candidate list stored in the context.

    The window is either explicit (``start``/``end``) or the trailing
    ``period`` ending now.
    """

    def __init__(
        self,
        name: str,
        winner_count: int,
        candidates_key: str,
        result_key: str,
        *,
        period: timedelta | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        timestamp_field: str = "purchase_time",
        clock: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
    ):
        if period is not None and (start is not None or end is not None):
            raise ConfigurationError("Use either period or start/end, not both")
        self.name = name
        self.winner_count = winner_count
        self.candidates_key = candidates_key
        self.result_key = result_key
        self.period = period
        self.start = start
        self.end = end
        self.timestamp_field = timestamp_field
        self.clock = clock
        self.rng = rng

    def window(self) -> tuple[datetime | None, datetime | None]:
        if self.period is not None:
            now = self.clock()
            return now - self.period, now
        return self.start, self.end

    def execute(self, context: EvaluationContext) -> None:
        candidates = context.get(self.candidates_key) or []
        start, end = self.window()
        winners = draw_lottery(
            candidates,
            start,
            end,
            self.winner_count,
            timestamp_field=self.timestamp_field,
            rng=self.rng,
        )
        context.set(self.result_key, winners)
        logger.info(
            f"Lottery '{self.name}' drew {len(winners)} winner(s) from "
            f"{len(candidates)} candidate(s) in window {start} .. {end}"
        )
