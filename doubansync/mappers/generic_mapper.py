"""
doubansync/mappers/generic_mapper.py

Applies a field table to one scraped object.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from doubansync.domain.field_mapping import FieldDescriptor
from doubansync.logging_utils import log_event

logger = logging.getLogger(__name__)

ARRAY_SEPARATOR = " / "


@dataclass(frozen=True)
class MappingOutcome:
    """
    Result of mapping every descriptor of one table.
    """

    mapped: dict[str, Any]
    transformed_count: int
    failed_count: int
    warnings: list[str] = field(default_factory=list)


class GenericMapper:
    """
    Extracts, flattens and collects field values without repairing them.
    """

    def extract(self, raw: Any, descriptor: FieldDescriptor) -> Any:
        """
        Read the descriptor's value from ``raw``; ``None`` when any hop is missing.
        """

        if raw is None:
            return None

        path = descriptor.nested_path
        if not path or "." not in path:
            return self._get(raw, descriptor.source_name)

        value = raw
        for key in path.split("."):
            if value is None:
                return None
            value = self._get(value, key)
        return value

    def collapse_array(self, value: Any, descriptor: FieldDescriptor) -> Any:
        """
        Join list values with `` / ``; other values pass through unchanged.

        The descriptor names the field in the debug trace of each collapse.
        """

        if not isinstance(value, (list, tuple)):
            return value
        log_event(logger, logging.DEBUG, "array_collapsed", field=descriptor.source_name, items=len(value))
        if not value:
            return ""
        return ARRAY_SEPARATOR.join(str(item) for item in value)

    def map_all(self, raw: Any, descriptors: Iterable[FieldDescriptor]) -> MappingOutcome:
        mapped: dict[str, Any] = {}
        warnings: list[str] = []
        transformed = 0
        failed = 0

        for descriptor in descriptors:
            name = descriptor.source_name
            try:
                value = self.collapse_array(self.extract(raw, descriptor), descriptor)
                if value is not None:
                    mapped[name] = value
                    transformed += 1
                elif descriptor.required:
                    warnings.append(f"required field {name} is empty")
                    failed += 1
            except Exception as exc:
                warnings.append(f"field {name} could not be mapped: {exc}")
                failed += 1

        return MappingOutcome(
            mapped=mapped,
            transformed_count=transformed,
            failed_count=failed,
            warnings=warnings,
        )

    @staticmethod
    def _get(container: Any, key: str) -> Any:
        if isinstance(container, Mapping):
            return container.get(key)
        return getattr(container, key, None)
