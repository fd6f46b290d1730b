"""
Ordered pattern tables and string repairs for scraped catalogue fields.

Each markup repair is a list of rules tried in order against the raw page;
the first rule that yields a non-empty value wins.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

SEPARATOR = " / "


@dataclass(frozen=True)
class MarkupRule:
    """
    One ``(pattern, extractor)`` pair.
    """

    name: str
    pattern: re.Pattern[str]
    extract: Callable[[re.Match[str]], str | None]
    collect_all: bool = False

    def apply(self, html: str) -> str | None:
        if self.collect_all:
            values = [value for value in (self.extract(match) for match in self.pattern.finditer(html)) if value]
            return SEPARATOR.join(values) or None
        match = self.pattern.search(html)
        return self.extract(match) if match else None


def first_match(rules: Sequence[MarkupRule], html: str) -> tuple[str, str] | None:
    """
    Return ``(rule_name, value)`` for the first rule producing a value.
    """

    for rule in rules:
        value = rule.apply(html)
        if value:
            return rule.name, value
    return None


def _stripped(match: re.Match[str]) -> str | None:
    text = match.group(1).strip()
    return text or None


def _minutes(match: re.Match[str]) -> str:
    return f"{match.group(1)}分钟"


def _rounded_minutes(match: re.Match[str]) -> str:
    return f"{int(float(match.group(1)) + 0.5)}分钟"


def _minutes_seconds(match: re.Match[str]) -> str:
    return f"{match.group(1)}分{match.group(2)}秒"


def _labeled_run(label: str) -> re.Pattern[str]:
    return re.compile(rf"{re.escape(label)}[\s\S]*?</span>\s*([^<]+)", re.IGNORECASE)


def _pl_tag(label: str) -> re.Pattern[str]:
    return re.compile(rf'<span[^>]*class="pl"[^>]*>{re.escape(label)}</span>\s*([^<]+)', re.IGNORECASE)


DURATION_RULES: tuple[MarkupRule, ...] = (
    MarkupRule("runtime_tag", re.compile(r'<[^>]*property="v:runtime"[^>]*>([0-9]+)</[^>]*>'), _minutes),
    MarkupRule("duration_label", _labeled_run("片长:"), _stripped),
    MarkupRule("minutes", re.compile(r"([0-9]+(?:\.[0-9]+)?)\s*分钟"), _rounded_minutes),
    MarkupRule("minutes_seconds", re.compile(r"([0-9]+)分([0-9]+)秒"), _minutes_seconds),
)

RELEASE_DATE_RULES: tuple[MarkupRule, ...] = (
    MarkupRule(
        "release_date_tags",
        re.compile(r'<[^>]*property="v:initialReleaseDate"[^>]*>([^<]+)</[^>]*>'),
        _stripped,
        collect_all=True,
    ),
    MarkupRule("release_date_label", _labeled_run("上映日期:"), _stripped),
    MarkupRule("iso_date", re.compile(r"([0-9]{4}-[0-9]{1,2}-[0-9]{1,2})"), _stripped),
)

COUNTRY_LABEL = "制片国家/地区:"
LANGUAGE_LABEL = "语言:"

COUNTRY_RULES: tuple[MarkupRule, ...] = (MarkupRule("country_tag", _pl_tag(COUNTRY_LABEL), _stripped),)
LANGUAGE_RULES: tuple[MarkupRule, ...] = (MarkupRule("language_tag", _pl_tag(LANGUAGE_LABEL), _stripped),)

MARKUP_RULES: Mapping[str, tuple[MarkupRule, ...]] = {
    "duration": DURATION_RULES,
    "releaseDate": RELEASE_DATE_RULES,
    "country": COUNTRY_RULES,
    "language": LANGUAGE_RULES,
}

NEIGHBOR_LABELS: tuple[str, ...] = (
    "制片国家/地区:",
    "制片地区:",
    "语言:",
    "上映日期:",
    "片长:",
    "又名:",
    "IMDb:",
)

COUNTRY_NAMES: Mapping[str, str] = {
    "USA": "美国",
    "United States": "美国",
    "China": "中国",
    "Japan": "日本",
    "Korea": "韩国",
    "France": "法国",
    "Germany": "德国",
    "UK": "英国",
    "United Kingdom": "英国",
}

LANGUAGE_NAMES: Mapping[str, str] = {
    "English": "英语",
    "Chinese": "中文",
    "Mandarin": "普通话",
    "Cantonese": "粤语",
    "Japanese": "日语",
    "Korean": "韩语",
    "French": "法语",
    "German": "德语",
    "Spanish": "西班牙语",
}

# field -> (labels that belong to the field itself, localized names)
LISTING_CLEANUPS: Mapping[str, tuple[tuple[str, ...], Mapping[str, str]]] = {
    "country": (("制片国家/地区:", "制片地区:"), COUNTRY_NAMES),
    "language": (("语言:",), LANGUAGE_NAMES),
}


def truncate_at_labels(value: str, labels: Sequence[str]) -> str:
    """
    Cut ``value`` at the earliest occurrence of any label.
    """

    positions = [value.find(label) for label in labels]
    hits = [position for position in positions if position >= 0]
    return value[: min(hits)] if hits else value


def clean_listing(value: str, *, own_labels: Sequence[str], names: Mapping[str, str]) -> str:
    neighbors = [label for label in NEIGHBOR_LABELS if label not in own_labels]
    text = truncate_at_labels(value.strip(), neighbors).strip()
    parts = [part.strip() for part in text.split("/")]
    return SEPARATOR.join(names.get(part, part) for part in parts if part)


_FULL_CN_DATE = re.compile(r"^([0-9]{4})年([0-9]{1,2})月([0-9]{1,2})日$")
_YEAR_MONTH_CN = re.compile(r"^([0-9]{4})年([0-9]{1,2})月$")
_YEAR_CN = re.compile(r"^([0-9]{4})年$")
_ISO_DATE = re.compile(r"^([0-9]{4})-([0-9]{1,2})-[0-9]{1,2}$")


def repair_publish_date(value: str) -> str:
    """
    Normalize publication dates to ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``.

    ISO dates are cut back to year and month; unrecognized shapes pass through.
    """

    text = value.strip()
    match = _FULL_CN_DATE.match(text)
    if match:
        return f"{match.group(1)}-{int(match.group(2)):02d}-{int(match.group(3)):02d}"
    match = _YEAR_MONTH_CN.match(text)
    if match:
        return f"{match.group(1)}-{int(match.group(2)):02d}"
    match = _YEAR_CN.match(text)
    if match:
        return match.group(1)
    match = _ISO_DATE.match(text)
    if match:
        return f"{match.group(1)}-{int(match.group(2)):02d}"
    return value


def repair_author(value: str) -> str:
    if "/" not in value or SEPARATOR in value:
        return value
    names = [name.strip() for name in value.split("/")]
    return SEPARATOR.join(name for name in names if name)


def repair_publisher(value: str) -> str:
    cleaned = re.sub(r";\s*[^/]+", "", value.strip())
    cleaned = re.sub(r"\s*/\s*", SEPARATOR, cleaned)
    return re.sub(r"\s+", " ", cleaned).strip()


_LEADING_ISBN = re.compile(r"^([0-9]{10,13})")


def repair_isbn(value: str) -> str:
    match = _LEADING_ISBN.match(value.strip())
    return match.group(1) if match else value


BOOK_TEXT_REPAIRS: tuple[tuple[str, Callable[[str], str]], ...] = (
    ("publishDate", repair_publish_date),
    ("author", repair_author),
    ("publisher", repair_publisher),
    ("isbn", repair_isbn),
)
