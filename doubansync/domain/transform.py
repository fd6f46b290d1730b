"""
doubansync/domain/transform.py

Per-call transform state and result envelopes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from doubansync.logging_utils import log_event

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class TransformStats:
    """
    Field counters for one transform call.
    """

    total_fields: int = 0
    transformed_fields: int = 0
    repaired_fields: int = 0
    failed_fields: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "totalFields": self.total_fields,
            "transformedFields": self.transformed_fields,
            "repairedFields": self.repaired_fields,
            "failedFields": self.failed_fields,
        }


@dataclass
class TransformContext:
    """
    Scratch state allocated fresh for every transform call.

    Threaded through mapper, repair engine and validator so that no service
    instance ever holds per-call data.
    """

    content_type: str
    warnings: list[str] = field(default_factory=list)
    total_fields: int = 0
    transformed_fields: int = 0
    repaired_fields: int = 0
    failed_fields: int = 0

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        log_event(
            logger,
            logging.WARNING,
            "transform_warning",
            content_type=self.content_type,
            message=message,
        )

    def snapshot(self) -> TransformStats:
        return TransformStats(
            total_fields=self.total_fields,
            transformed_fields=self.transformed_fields,
            repaired_fields=self.repaired_fields,
            failed_fields=self.failed_fields,
        )


@dataclass(frozen=True)
class TransformResult:
    """
    Outcome of transforming one scraped record.
    """

    data: dict[str, Any]
    statistics: TransformStats
    warnings: list[str]
    raw_data: Any = _MISSING

    @property
    def has_raw_data(self) -> bool:
        return self.raw_data is not _MISSING

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "data": dict(self.data),
            "statistics": self.statistics.to_dict(),
            "warnings": list(self.warnings),
        }
        if self.has_raw_data:
            payload["rawData"] = self.raw_data
        return payload


@dataclass(frozen=True)
class BatchTransformResult:
    """
    Outcome of transforming a list of scraped records.
    """

    results: list[TransformResult]
    total_items: int
    successful_items: int
    failed_items: int
    processing_time_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "batchStatistics": {
                "totalItems": self.total_items,
                "successfulItems": self.successful_items,
                "failedItems": self.failed_items,
                "processingTimeMs": self.processing_time_ms,
            },
        }
