"""
Request-count aware pacing for a single crawl session.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from doubansync.config import SchedulerSettings
from doubansync.logging_utils import log_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DelayConfig:
    """
    Delay parameters currently in effect.
    """

    mode: str
    base_delay_ms: float
    random_range_ms: float

    @property
    def expected_delay_ms(self) -> float:
        return self.base_delay_ms + self.random_range_ms / 2


class DelayScheduler:
    """
    Draws randomized waits that lengthen once a session has made many requests.
    """

    def __init__(
        self,
        *,
        base_delay_ms: float = 4000.0,
        random_delay_ms: float = 4000.0,
        slow_mode_threshold: int = 200,
        slow_delay_ms: float = 10000.0,
        slow_random_delay_ms: float = 5000.0,
        rng: random.Random | None = None,
    ) -> None:
        self._normal = DelayConfig(mode="normal", base_delay_ms=base_delay_ms, random_range_ms=random_delay_ms)
        self._slow = DelayConfig(mode="slow", base_delay_ms=slow_delay_ms, random_range_ms=slow_random_delay_ms)
        self._slow_mode_threshold = slow_mode_threshold
        self._rng = rng or random.Random()
        self._request_count = 0

    @classmethod
    def from_settings(cls, settings: SchedulerSettings, *, rng: random.Random | None = None) -> "DelayScheduler":
        return cls(
            base_delay_ms=settings.base_delay_ms,
            random_delay_ms=settings.random_delay_ms,
            slow_mode_threshold=settings.slow_mode_threshold,
            slow_delay_ms=settings.slow_delay_ms,
            slow_random_delay_ms=settings.slow_random_delay_ms,
            rng=rng,
        )

    @property
    def request_count(self) -> int:
        return self._request_count

    @property
    def slow_mode_threshold(self) -> int:
        return self._slow_mode_threshold

    @property
    def normal_config(self) -> DelayConfig:
        return self._normal

    @property
    def slow_config(self) -> DelayConfig:
        return self._slow

    @property
    def is_slow_mode(self) -> bool:
        return self._request_count > self._slow_mode_threshold

    def current_config(self) -> DelayConfig:
        return self._slow if self.is_slow_mode else self._normal

    def next_delay(self) -> float:
        """
        Count one more request and return the wait before it, in milliseconds.
        """

        self._request_count += 1
        config = self.current_config()
        delay_ms = config.base_delay_ms + self._rng.random() * config.random_range_ms
        log_event(
            logger,
            logging.DEBUG,
            "request_delay_computed",
            mode=config.mode,
            request_count=self._request_count,
            delay_ms=round(delay_ms),
        )
        return delay_ms

    def reset(self) -> None:
        previous = self._request_count
        self._request_count = 0
        log_event(logger, logging.INFO, "request_count_reset", previous_count=previous)

    def set_count(self, count: int) -> None:
        if count < 0:
            raise ValueError(f"Request count must be non-negative, got {count}.")
        self._request_count = count
        log_event(logger, logging.DEBUG, "request_count_set", request_count=count)
