"""Bounded retry policy shared by generation and reshuffling.

A policy is an ordered list of strategy phases plus a deterministic
fallback. Each phase applies its strategy up to ``attempts`` times and the
first attempt the acceptance check approves ends the run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from ..core.exceptions import ConfigurationError
from ..utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass
class StrategyPhase:
    name: str
    attempts: int
    apply: Callable[[], None]


@dataclass
class RetryOutcome:
    strategy: str
    attempts: int
    used_fallback: bool = False


class RetryPolicy:
    """Run strategy phases in order, then the fallback if none succeeded."""

    def __init__(
        self,
        phases: Sequence[StrategyPhase],
        fallback: Callable[[], None],
        fallback_name: str = "fallback",
        label: str = "retry",
    ) -> None:
        if any(phase.attempts < 0 for phase in phases):
            raise ConfigurationError("Strategy phase attempts cannot be negative")
        self.phases = list(phases)
        self.fallback = fallback
        self.fallback_name = fallback_name
        self.label = label

    @property
    def max_attempts(self) -> int:
        return sum(phase.attempts for phase in self.phases)

    def run(self, accept: Callable[[], bool]) -> RetryOutcome:
        attempts = 0
        for phase in self.phases:
            for _ in range(phase.attempts):
                phase.apply()
                attempts += 1
                if accept():
                    LOGGER.debug(
                        "%s accepted on attempt %d (%s)", self.label, attempts, phase.name
                    )
                    return RetryOutcome(strategy=phase.name, attempts=attempts)
        LOGGER.warning(
            "%s budget of %d attempts exhausted; using %s",
            self.label,
            attempts,
            self.fallback_name,
        )
        self.fallback()
        return RetryOutcome(strategy=self.fallback_name, attempts=attempts, used_fallback=True)
