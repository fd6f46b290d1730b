"""
doubansync/services/transform_pipeline.py

Mapping, repair and validation of scraped records into spreadsheet rows.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Any

from pydantic import ValidationError

from doubansync.config import TransformSettings, get_transform_settings
from doubansync.domain.field_mapping import ContentType
from doubansync.domain.transform import (
    BatchTransformResult,
    TransformContext,
    TransformResult,
    TransformStats,
)
from doubansync.logging_utils import log_event
from doubansync.mappers.field_registry import DEFAULT_REGISTRY, FieldMappingRegistry, coerce_content_type
from doubansync.mappers.generic_mapper import GenericMapper
from doubansync.normalization.repair_engine import RepairEngine
from doubansync.schemas.transform import TransformOptions, TransformResultContract
from doubansync.validators.field_validator import FieldValidator

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 1000

OptionsInput = TransformOptions | Mapping[str, Any] | None


class TransformPipeline:
    """
    Runs GenericMapper, RepairEngine and FieldValidator over one raw record.

    The pipeline holds collaborators only; every call allocates its own
    TransformContext, so one instance may serve concurrent callers.
    """

    def __init__(
        self,
        *,
        registry: FieldMappingRegistry | None = None,
        mapper: GenericMapper | None = None,
        repair_engine: RepairEngine | None = None,
        validator: FieldValidator | None = None,
        settings: TransformSettings | None = None,
    ) -> None:
        self._registry = registry or DEFAULT_REGISTRY
        self._mapper = mapper or GenericMapper()
        self._repair_engine = repair_engine or RepairEngine()
        self._validator = validator or FieldValidator()
        self._settings = settings or get_transform_settings()

    def transform(
        self,
        raw: Any,
        content_type: ContentType | str,
        options: OptionsInput = None,
    ) -> TransformResult:
        """
        Transform one scraped record.

        Never raises: field and repair failures become warnings, and an
        orchestration failure yields an empty result explaining why.
        """

        label = content_type.value if isinstance(content_type, ContentType) else str(content_type)
        context = TransformContext(content_type=label)
        resolved = self._resolve_options(options, context)
        log_event(logger, logging.INFO, "transform_started", content_type=label)

        if raw is None:
            context.warn("input data is empty (None)")
            return self._empty_result(raw, resolved, context)
        if not isinstance(raw, Mapping):
            context.warn(f"input data must be a mapping, got {type(raw).__name__}")
            return self._empty_result(raw, resolved, context)
        if not raw:
            context.warn("input data is an empty object")
            return self._empty_result(raw, resolved, context)

        try:
            resolved_type = coerce_content_type(content_type)
            descriptors = self._registry.descriptors(resolved_type)
            context.total_fields = len(descriptors)

            outcome = self._mapper.map_all(raw, descriptors)
            context.transformed_fields = outcome.transformed_count
            context.failed_fields = outcome.failed_count
            for warning in outcome.warnings:
                context.warn(warning)

            data = outcome.mapped
            if resolved.enable_intelligent_repairs:
                data = self._repair_engine.repair(data, resolved_type, context=context, source=raw)
            if resolved.strict_validation:
                data = self._validator.validate(data, resolved_type, descriptors, context=context)

            stats = context.snapshot()
            TransformResultContract.model_validate(
                {
                    "data": data,
                    "statistics": {
                        "total_fields": stats.total_fields,
                        "transformed_fields": stats.transformed_fields,
                        "repaired_fields": stats.repaired_fields,
                        "failed_fields": stats.failed_fields,
                    },
                    "warnings": context.warnings,
                }
            )
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "transform_failed",
                content_type=label,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return TransformResult(
                data={},
                statistics=TransformStats(),
                warnings=[*context.warnings, f"transform failed: {exc}"],
            )

        log_event(
            logger,
            logging.INFO,
            "transform_completed",
            content_type=label,
            total_fields=stats.total_fields,
            transformed_fields=stats.transformed_fields,
            repaired_fields=stats.repaired_fields,
            failed_fields=stats.failed_fields,
            warnings=len(context.warnings),
        )
        return self._build_result(data, stats, context, resolved, raw)

    def transform_batch(
        self,
        items: Sequence[Any],
        content_type: ContentType | str,
        options: OptionsInput = None,
        batch_size: int | None = None,
    ) -> BatchTransformResult:
        """
        Transform many records in chunks of ``batch_size``.

        An item counts as failed when its result carries no data.
        """

        size = batch_size if batch_size is not None else self._settings.batch_size
        if size < 1 or size > MAX_BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {MAX_BATCH_SIZE}, got {size}.")
        if not items:
            raise ValueError("Batch transform needs at least one item.")

        started = time.perf_counter()
        results: list[TransformResult] = []
        for offset in range(0, len(items), size):
            chunk = items[offset : offset + size]
            results.extend(self.transform(item, content_type, options) for item in chunk)
            log_event(
                logger,
                logging.DEBUG,
                "transform_chunk_processed",
                offset=offset,
                chunk_size=len(chunk),
            )

        successful = sum(1 for result in results if result.data)
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        log_event(
            logger,
            logging.INFO,
            "transform_batch_completed",
            total_items=len(results),
            successful_items=successful,
            failed_items=len(results) - successful,
            processing_time_ms=round(elapsed_ms, 2),
        )
        return BatchTransformResult(
            results=results,
            total_items=len(results),
            successful_items=successful,
            failed_items=len(results) - successful,
            processing_time_ms=elapsed_ms,
        )

    @staticmethod
    def _resolve_options(options: OptionsInput, context: TransformContext) -> TransformOptions:
        if options is None:
            return TransformOptions()
        if isinstance(options, TransformOptions):
            return options
        try:
            return TransformOptions.model_validate(options)
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'options'}: {error['msg']}"
                for error in exc.errors()
            )
            context.warn(f"invalid transform options, using defaults: {details}")
            return TransformOptions()

    @staticmethod
    def _empty_result(raw: Any, options: TransformOptions, context: TransformContext) -> TransformResult:
        if options.preserve_raw_data:
            return TransformResult(data={}, statistics=TransformStats(), warnings=list(context.warnings), raw_data=raw)
        return TransformResult(data={}, statistics=TransformStats(), warnings=list(context.warnings))

    @staticmethod
    def _build_result(
        data: dict[str, Any],
        stats: TransformStats,
        context: TransformContext,
        options: TransformOptions,
        raw: Any,
    ) -> TransformResult:
        if options.preserve_raw_data:
            return TransformResult(data=data, statistics=stats, warnings=list(context.warnings), raw_data=raw)
        return TransformResult(data=data, statistics=stats, warnings=list(context.warnings))


@lru_cache(maxsize=1)
def get_transform_pipeline() -> TransformPipeline:
    """
    Build and cache the shared transform pipeline.
    """

    return TransformPipeline()
