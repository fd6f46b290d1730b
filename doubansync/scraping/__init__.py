"""
Request scheduling for the catalogue site.
"""

from doubansync.scraping.classifier import ClassifierRule, ResponseClassifier
from doubansync.scraping.delay import DelayConfig, DelayScheduler
from doubansync.scraping.errors import (
    BlockedError,
    FetchCancelledError,
    ForbiddenError,
    NetworkError,
    ScraperError,
    TerminalScraperError,
    TransientScraperError,
    VerificationRequiredError,
)
from doubansync.scraping.headers import HeaderBuilder
from doubansync.scraping.scheduler import CredentialCheck, RequestScheduler, SchedulerStats

__all__ = [
    "BlockedError",
    "ClassifierRule",
    "CredentialCheck",
    "DelayConfig",
    "DelayScheduler",
    "FetchCancelledError",
    "ForbiddenError",
    "HeaderBuilder",
    "NetworkError",
    "RequestScheduler",
    "ResponseClassifier",
    "ScraperError",
    "SchedulerStats",
    "TerminalScraperError",
    "TransientScraperError",
    "VerificationRequiredError",
]
