"""
Exception taxonomy for outbound fetches.
"""

from __future__ import annotations


class ScraperError(RuntimeError):
    """
    Base class for classified fetch failures.
    """

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.status_code = status_code


class TerminalScraperError(ScraperError):
    """
    The session must stop using this credential; never retried.
    """


class TransientScraperError(ScraperError):
    """
    Retried until every attempt is used.
    """


class ForbiddenError(TerminalScraperError):
    """
    HTTP 403, usually an IP block.
    """


class VerificationRequiredError(TerminalScraperError):
    """
    The site served a human-verification page.
    """


class FetchCancelledError(TerminalScraperError):
    """
    The session stop event was set while waiting.
    """


class BlockedError(TransientScraperError):
    """
    The body reports throttling or denied access.
    """


class NetworkError(TransientScraperError):
    """
    Transport failure, timeout or server-side error status.
    """
