"""
Paced, classified, retrying page fetcher for one crawl session.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import requests

from doubansync.config import SchedulerSettings, get_scheduler_settings
from doubansync.logging_utils import log_event
from doubansync.scraping.classifier import (
    BLOCKED,
    FORBIDDEN,
    VERIFICATION_REQUIRED,
    ResponseClassifier,
    is_login_prompt,
)
from doubansync.scraping.delay import DelayConfig, DelayScheduler
from doubansync.scraping.errors import (
    BlockedError,
    FetchCancelledError,
    ForbiddenError,
    NetworkError,
    ScraperError,
    TransientScraperError,
    VerificationRequiredError,
)
from doubansync.scraping.headers import HeaderBuilder, subdomain_for_url

logger = logging.getLogger(__name__)

PROFILE_URL_TEMPLATE = "https://www.douban.com/people/{user_id}/"

HeaderFactory = Callable[[str, str | None], dict[str, str]]


@dataclass(frozen=True)
class SchedulerStats:
    """
    Snapshot of the session counters.
    """

    request_count: int
    is_slow_mode: bool
    slow_mode_threshold: int
    base_delay: float
    slow_delay: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "requestCount": self.request_count,
            "isSlowMode": self.is_slow_mode,
            "slowModeThreshold": self.slow_mode_threshold,
            "baseDelay": self.base_delay,
            "slowDelay": self.slow_delay,
        }


@dataclass(frozen=True)
class CredentialCheck:
    """
    Result of checking a credential against the user's profile page.
    """

    valid: bool
    reason: str | None = None


class RequestScheduler:
    """
    Issues one request at a time with pacing, classification and retries.

    Requests are strictly sequential. One instance must never be shared across
    threads, and two instances must never run against the same credential at
    once.
    """

    def __init__(
        self,
        *,
        settings: SchedulerSettings | None = None,
        session: requests.Session | None = None,
        header_builder: HeaderFactory | None = None,
        delay_scheduler: DelayScheduler | None = None,
        classifier: ResponseClassifier | None = None,
        sleep: Callable[[float], None] | None = None,
        rng: random.Random | None = None,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._settings = settings or get_scheduler_settings()
        self._session = session or requests.Session()
        self._header_builder = header_builder or HeaderBuilder(
            user_agent=self._settings.user_agent,
            accept_language=self._settings.accept_language,
        )
        self._rng = rng or random.Random()
        self._delays = delay_scheduler or DelayScheduler.from_settings(self._settings, rng=self._rng)
        self._classifier = classifier or ResponseClassifier()
        self._sleep = sleep or time.sleep
        self._stop_event = stop_event

    @property
    def max_retries(self) -> int:
        return self._settings.max_retries

    def fetch(
        self,
        url: str,
        credential: str | None,
        overrides: Mapping[str, str] | None = None,
    ) -> str:
        """
        Fetch ``url`` and return the body text.

        Raises ForbiddenError or VerificationRequiredError immediately; raises
        the last BlockedError or NetworkError once every attempt has failed.
        """

        subdomain = subdomain_for_url(url)
        headers = {**self._header_builder(subdomain, credential), **dict(overrides or {})}

        last_error: ScraperError | None = None
        for attempt in range(1, self.max_retries + 1):
            log_event(
                logger,
                logging.DEBUG,
                "fetch_attempt",
                attempt=attempt,
                max_retries=self.max_retries,
                url=url,
            )
            if attempt > 1:
                self.sleep_range(self._settings.retry_backoff_min_ms, self._settings.retry_backoff_max_ms)
            self._suspend(self._delays.next_delay())

            try:
                return self._request_once(url=url, headers=headers)
            except TransientScraperError as exc:
                last_error = exc
                log_event(
                    logger,
                    logging.WARNING,
                    "fetch_attempt_failed",
                    attempt=attempt,
                    max_retries=self.max_retries,
                    url=url,
                    error_type=type(exc).__name__,
                    error=exc.message,
                )

        if last_error is None:
            raise NetworkError("No fetch attempts were configured", url=url)
        log_event(
            logger,
            logging.ERROR,
            "fetch_retries_exhausted",
            url=url,
            error_type=type(last_error).__name__,
            error=last_error.message,
        )
        raise last_error

    def validate_credential(self, user_id: str, credential: str) -> CredentialCheck:
        """
        Fetch the user's profile page and report whether the credential still works.
        """

        url = PROFILE_URL_TEMPLATE.format(user_id=user_id)
        try:
            body = self.fetch(url, credential)
        except ScraperError as exc:
            log_event(
                logger,
                logging.ERROR,
                "credential_validation_failed",
                user_id=user_id,
                error_type=type(exc).__name__,
                error=exc.message,
            )
            return CredentialCheck(valid=False, reason=exc.message or "credential validation failed")

        if is_login_prompt(body):
            return CredentialCheck(valid=False, reason="credential expired, needs re-login")
        if self._classifier.is_restricted(body):
            return CredentialCheck(valid=False, reason="account restricted or verification required")
        return CredentialCheck(valid=True)

    def stats(self) -> SchedulerStats:
        return SchedulerStats(
            request_count=self._delays.request_count,
            is_slow_mode=self._delays.is_slow_mode,
            slow_mode_threshold=self._delays.slow_mode_threshold,
            base_delay=self._delays.normal_config.base_delay_ms,
            slow_delay=self._delays.slow_config.base_delay_ms,
        )

    def reset_count(self) -> None:
        self._delays.reset()

    def set_count(self, count: int) -> None:
        self._delays.set_count(count)

    def current_delay_config(self) -> DelayConfig:
        return self._delays.current_config()

    def sleep_range(self, min_ms: float, max_ms: float) -> None:
        """
        Suspend for a random duration between ``min_ms`` and ``max_ms``.
        """

        low, high = sorted((min_ms, max_ms))
        self._suspend(low + self._rng.random() * (high - low))

    def _request_once(self, *, url: str, headers: dict[str, str]) -> str:
        try:
            response = self._session.get(
                url,
                headers=headers,
                timeout=self._settings.timeout_seconds,
                allow_redirects=True,
            )
        except (requests.RequestException, OSError) as exc:
            raise NetworkError(f"Request failed: {exc}", url=url) from exc

        status_code = response.status_code
        if status_code >= 500:
            raise NetworkError(f"Server error status={status_code}", url=url, status_code=status_code)

        if response.encoding in (None, "ascii", "ISO-8859-1"):
            response.encoding = "utf-8"
        body = response.text or ""

        label = self._classifier.classify(status_code=status_code, body=body)
        if label == FORBIDDEN:
            raise ForbiddenError(
                "Request forbidden (403) - possible IP blocking",
                url=url,
                status_code=status_code,
            )
        if label == VERIFICATION_REQUIRED:
            raise VerificationRequiredError(
                "Human verification required - please update cookie",
                url=url,
                status_code=status_code,
            )
        if label == BLOCKED:
            raise BlockedError(
                "Access blocked - content indicates restriction",
                url=url,
                status_code=status_code,
            )

        log_event(logger, logging.DEBUG, "fetch_succeeded", url=url, status_code=status_code)
        return body

    def _suspend(self, delay_ms: float) -> None:
        seconds = max(0.0, delay_ms) / 1000.0
        if self._stop_event is None:
            self._sleep(seconds)
            return
        if self._stop_event.wait(seconds):
            raise FetchCancelledError("Fetch cancelled while waiting")
