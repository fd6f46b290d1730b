"""
tests/test_request_scheduler.py

Pytest unit tests for RequestScheduler.

No network access: a fake session replays scripted responses and sleeps are
recorded instead of performed.

Coverage
--------
- Success on first attempt and pacing before every request
- Terminal failures (403, verification page) are not retried
- Transient failures are retried with backoff and may recover
- Exhausted retries re-raise the last transient error
- Header construction, overrides and cookie hygiene
- Credential validation outcomes
- Counters, delay config and cancellation
"""

from __future__ import annotations

import random
import threading
from typing import Any

import pytest
import requests

from doubansync.config import SchedulerSettings
from doubansync.scraping.errors import (
    BlockedError,
    FetchCancelledError,
    ForbiddenError,
    NetworkError,
    VerificationRequiredError,
)
from doubansync.scraping.scheduler import RequestScheduler

BOOK_URL = "https://book.douban.com/subject/1007305/"
COOKIE = 'bid=abc123; dbcl2="12345:secret"'


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", encoding: str | None = "utf-8") -> None:
        self.status_code = status_code
        self.text = text
        self.encoding = encoding


class FakeSession:
    def __init__(self, *outcomes: Any) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _scheduler(session: FakeSession, sleeps: list[float], **kwargs: Any) -> RequestScheduler:
    return RequestScheduler(
        settings=SchedulerSettings(),
        session=session,
        sleep=sleeps.append,
        rng=random.Random(0),
        **kwargs,
    )


# ---------------------------------------------------------------------------
# fetch
# ---------------------------------------------------------------------------


def test_fetch_returns_body_after_one_paced_request() -> None:
    session = FakeSession(FakeResponse(text="<html><title>红楼梦</title></html>"))
    sleeps: list[float] = []

    body = _scheduler(session, sleeps).fetch(BOOK_URL, COOKIE)

    assert "红楼梦" in body
    assert len(session.calls) == 1
    assert session.calls[0]["timeout"] == 30.0
    assert session.calls[0]["allow_redirects"] is True
    assert len(sleeps) == 1
    assert 4.0 <= sleeps[0] <= 8.0


def test_forbidden_status_is_not_retried() -> None:
    session = FakeSession(FakeResponse(status_code=403, text="forbidden"))

    with pytest.raises(ForbiddenError) as excinfo:
        _scheduler(session, []).fetch(BOOK_URL, COOKIE)

    assert len(session.calls) == 1
    assert excinfo.value.status_code == 403
    assert excinfo.value.url == BOOK_URL


def test_verification_page_is_not_retried() -> None:
    page = "<html><head><title>禁止访问</title></head><body>...</body></html>"
    session = FakeSession(FakeResponse(text=page))

    with pytest.raises(VerificationRequiredError):
        _scheduler(session, []).fetch(BOOK_URL, COOKIE)

    assert len(session.calls) == 1


def test_transient_failures_recover_on_third_attempt() -> None:
    session = FakeSession(
        requests.ConnectionError("connection reset"),
        FakeResponse(status_code=502, text="bad gateway"),
        FakeResponse(text="<html>ok</html>"),
    )
    sleeps: list[float] = []

    body = _scheduler(session, sleeps).fetch(BOOK_URL, COOKIE)

    assert body == "<html>ok</html>"
    assert len(session.calls) == 3
    # delay, then backoff + delay for each retry
    assert len(sleeps) == 5
    assert 5.0 <= sleeps[1] <= 10.0
    assert 4.0 <= sleeps[2] <= 8.0
    assert 5.0 <= sleeps[3] <= 10.0


def test_socket_errors_from_the_client_are_retried() -> None:
    session = FakeSession(
        OSError("network unreachable"),
        TimeoutError("read timed out"),
        FakeResponse(text="<html>ok</html>"),
    )

    body = _scheduler(session, []).fetch(BOOK_URL, COOKIE)

    assert body == "<html>ok</html>"
    assert len(session.calls) == 3


def test_socket_errors_exhaust_as_network_error() -> None:
    session = FakeSession(*(OSError("connection refused") for _ in range(3)))

    with pytest.raises(NetworkError) as excinfo:
        _scheduler(session, []).fetch(BOOK_URL, COOKIE)

    assert "connection refused" in excinfo.value.message
    assert len(session.calls) == 3


def test_blocked_pages_exhaust_retries() -> None:
    session = FakeSession(*(FakeResponse(text="请求频繁，请稍后再试") for _ in range(3)))

    with pytest.raises(BlockedError):
        _scheduler(session, []).fetch(BOOK_URL, COOKIE)

    assert len(session.calls) == 3


def test_server_errors_raise_network_error() -> None:
    session = FakeSession(*(FakeResponse(status_code=503) for _ in range(3)))

    with pytest.raises(NetworkError) as excinfo:
        _scheduler(session, []).fetch(BOOK_URL, COOKIE)

    assert excinfo.value.status_code == 503
    assert len(session.calls) == 3


def test_headers_follow_subdomain_and_overrides() -> None:
    session = FakeSession(FakeResponse(text="ok"))

    _scheduler(session, []).fetch(
        "https://movie.douban.com/subject/1292052/",
        'bid=abc;\n dbcl2="1:x"',
        overrides={"Accept-Language": "en-US", "Referer": "https://movie.douban.com/"},
    )

    headers = session.calls[0]["headers"]
    assert headers["Host"] == "movie.douban.com"
    assert headers["Accept-Language"] == "en-US"
    assert headers["Referer"] == "https://movie.douban.com/"
    assert "\n" not in headers["Cookie"]
    assert "User-Agent" in headers


def test_missing_credential_sends_no_cookie() -> None:
    session = FakeSession(FakeResponse(text="ok"))

    _scheduler(session, []).fetch("https://www.douban.com/", None)

    assert "Cookie" not in session.calls[0]["headers"]
    assert session.calls[0]["headers"]["Host"] == "www.douban.com"


def test_latin1_encoding_is_switched_to_utf8() -> None:
    response = FakeResponse(text="ok", encoding="ISO-8859-1")
    session = FakeSession(response)

    _scheduler(session, []).fetch(BOOK_URL, COOKIE)

    assert response.encoding == "utf-8"


# ---------------------------------------------------------------------------
# validate_credential
# ---------------------------------------------------------------------------


def test_valid_credential() -> None:
    session = FakeSession(FakeResponse(text="<html><title>Alice</title>我的豆瓣主页</html>"))

    check = _scheduler(session, []).validate_credential("12345", COOKIE)

    assert check.valid is True
    assert check.reason is None
    assert session.calls[0]["url"] == "https://www.douban.com/people/12345/"


def test_login_prompt_means_expired_credential() -> None:
    session = FakeSession(FakeResponse(text="<html>请登录 或 注册 豆瓣</html>"))

    check = _scheduler(session, []).validate_credential("12345", COOKIE)

    assert check.valid is False
    assert check.reason == "credential expired, needs re-login"


def test_fetch_failure_is_reported_as_invalid() -> None:
    session = FakeSession(FakeResponse(status_code=403))

    check = _scheduler(session, []).validate_credential("12345", COOKIE)

    assert check.valid is False
    assert check.reason == "Request forbidden (403) - possible IP blocking"


# ---------------------------------------------------------------------------
# counters and cancellation
# ---------------------------------------------------------------------------


def test_stats_track_request_count() -> None:
    session = FakeSession(FakeResponse(text="ok"))
    scheduler = _scheduler(session, [])

    scheduler.fetch(BOOK_URL, COOKIE)
    stats = scheduler.stats()

    assert stats.request_count == 1
    assert stats.is_slow_mode is False
    assert stats.to_dict() == {
        "requestCount": 1,
        "isSlowMode": False,
        "slowModeThreshold": 200,
        "baseDelay": 4000.0,
        "slowDelay": 10000.0,
    }


def test_set_and_reset_count_switch_delay_config() -> None:
    scheduler = _scheduler(FakeSession(), [])

    scheduler.set_count(300)
    assert scheduler.current_delay_config().mode == "slow"

    scheduler.reset_count()
    assert scheduler.stats().request_count == 0
    assert scheduler.current_delay_config().mode == "normal"


def test_stop_event_cancels_before_request() -> None:
    stop_event = threading.Event()
    stop_event.set()
    session = FakeSession(FakeResponse(text="ok"))

    with pytest.raises(FetchCancelledError):
        _scheduler(session, [], stop_event=stop_event).fetch(BOOK_URL, COOKIE)

    assert session.calls == []
