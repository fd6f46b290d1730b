"""
Best-effort recovery of fields the generic mapper could not cleanly produce.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from doubansync.domain.field_mapping import ContentType
from doubansync.domain.transform import TransformContext
from doubansync.logging_utils import log_event
from doubansync.normalization.repair_rules import (
    BOOK_TEXT_REPAIRS,
    LISTING_CLEANUPS,
    MARKUP_RULES,
    clean_listing,
    first_match,
)

logger = logging.getLogger(__name__)

HTML_KEY = "html"


class RepairEngine:
    """
    Content-type specific repairs, using the raw page markup as a fallback source.
    """

    def repair(
        self,
        data: Mapping[str, Any],
        content_type: ContentType,
        *,
        context: TransformContext,
        source: Any = None,
    ) -> dict[str, Any]:
        """
        Return a repaired copy of ``data``.

        ``context.repaired_fields`` grows by the number of fields changed. Any
        failure is downgraded to a warning and the unrepaired data is returned.
        """

        try:
            if content_type.is_screen:
                repaired, touched = self._repair_screen(data, self._markup(source))
            else:
                repaired, touched = self._repair_book(data, source)
        except Exception as exc:
            context.warn(f"intelligent repair failed: {exc}")
            log_event(
                logger,
                logging.ERROR,
                "repair_failed",
                content_type=content_type.value,
                error=str(exc),
            )
            return dict(data)

        context.repaired_fields += len(touched)
        return repaired

    def _repair_screen(self, data: Mapping[str, Any], html: str | None) -> tuple[dict[str, Any], set[str]]:
        repaired = dict(data)
        touched: set[str] = set()

        if html:
            for field_name, rules in MARKUP_RULES.items():
                if repaired.get(field_name):
                    continue
                hit = first_match(rules, html)
                if hit is None:
                    continue
                rule_name, value = hit
                repaired[field_name] = value
                touched.add(field_name)
                self._trace(field_name, value, rule=rule_name)

        for field_name, (own_labels, names) in LISTING_CLEANUPS.items():
            value = repaired.get(field_name)
            if not isinstance(value, str) or not value:
                continue
            cleaned = clean_listing(value, own_labels=own_labels, names=names)
            if cleaned != value:
                repaired[field_name] = cleaned
                touched.add(field_name)
                self._trace(field_name, cleaned, rule="listing_cleanup")

        return repaired, touched

    def _repair_book(self, data: Mapping[str, Any], source: Any) -> tuple[dict[str, Any], set[str]]:
        repaired = dict(data)
        touched: set[str] = set()

        for field_name, fix in BOOK_TEXT_REPAIRS:
            value = repaired.get(field_name)
            if not isinstance(value, str) or not value:
                continue
            fixed = fix(value)
            if fixed != value:
                repaired[field_name] = fixed
                touched.add(field_name)
                self._trace(field_name, fixed, rule=fix.__name__)

        if not repaired.get("doubanRating"):
            average = self._nested_average(repaired.get("rating"))
            if average is None and isinstance(source, Mapping):
                average = self._nested_average(source.get("rating"))
            if average is not None:
                repaired["doubanRating"] = average
                touched.add("doubanRating")
                self._trace("doubanRating", average, rule="rating_average")

        return repaired, touched

    @staticmethod
    def _markup(source: Any) -> str | None:
        if isinstance(source, Mapping):
            html = source.get(HTML_KEY)
            if isinstance(html, str) and html:
                return html
        return None

    @staticmethod
    def _nested_average(rating: Any) -> Any:
        if isinstance(rating, Mapping) and rating.get("average"):
            return rating["average"]
        return None

    @staticmethod
    def _trace(field_name: str, value: Any, *, rule: str) -> None:
        log_event(logger, logging.DEBUG, "field_repaired", field=field_name, rule=rule, value=value)
