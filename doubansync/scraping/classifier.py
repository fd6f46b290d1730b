"""
Rule-based classification of fetched pages.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from bs4 import BeautifulSoup

VERIFICATION_TITLE = "禁止访问"

VERIFICATION_INDICATORS: tuple[str, ...] = (
    f"<title>{VERIFICATION_TITLE}</title>",
    "验证码",
    "人机验证",
    "captcha",
    "robot check",
    "安全验证",
    "verification required",
)

BLOCK_INDICATORS: tuple[str, ...] = (
    "访问被拒绝",
    "access denied",
    "请求频繁",
    "too many requests",
    "系统繁忙",
)

LOGIN_PROMPT_MARKERS: tuple[str, ...] = ("登录", "注册")

FORBIDDEN = "forbidden"
VERIFICATION_REQUIRED = "verification_required"
BLOCKED = "blocked"
OK = "ok"


@dataclass(frozen=True)
class PageSnapshot:
    """
    What the classifier rules may look at.
    """

    status_code: int
    body: str

    @property
    def lowered(self) -> str:
        return self.body.lower()


@dataclass(frozen=True)
class ClassifierRule:
    """
    One named predicate; rules are evaluated in list order.
    """

    label: str
    predicate: Callable[[PageSnapshot], bool]


def contains_any(body: str, indicators: Sequence[str]) -> bool:
    lowered = body.lower()
    return any(indicator.lower() in lowered for indicator in indicators)


def page_title(body: str) -> str | None:
    if "<title" not in body.lower():
        return None
    soup = BeautifulSoup(body, "html.parser")
    if soup.title is None:
        return None
    return soup.title.get_text(strip=True)


def is_forbidden(page: PageSnapshot) -> bool:
    return page.status_code == 403


def requires_verification(page: PageSnapshot) -> bool:
    if contains_any(page.body, VERIFICATION_INDICATORS):
        return True
    return page_title(page.body) == VERIFICATION_TITLE


def is_blocked(page: PageSnapshot) -> bool:
    return contains_any(page.body, BLOCK_INDICATORS)


def is_login_prompt(body: str) -> bool:
    return all(marker in body for marker in LOGIN_PROMPT_MARKERS)


DEFAULT_RULES: tuple[ClassifierRule, ...] = (
    ClassifierRule(label=FORBIDDEN, predicate=is_forbidden),
    ClassifierRule(label=VERIFICATION_REQUIRED, predicate=requires_verification),
    ClassifierRule(label=BLOCKED, predicate=is_blocked),
)


class ResponseClassifier:
    """
    Maps a fetched page onto the first matching rule label, or ``OK``.
    """

    def __init__(self, rules: Sequence[ClassifierRule] | None = None) -> None:
        self._rules = tuple(rules if rules is not None else DEFAULT_RULES)

    @property
    def rules(self) -> tuple[ClassifierRule, ...]:
        return self._rules

    def with_rule(self, rule: ClassifierRule, *, before: str | None = None) -> "ResponseClassifier":
        """
        Return a classifier with ``rule`` inserted before label ``before`` (or appended).
        """

        rules = list(self._rules)
        labels = [existing.label for existing in rules]
        if before is not None and before in labels:
            rules.insert(labels.index(before), rule)
        else:
            rules.append(rule)
        return ResponseClassifier(rules)

    def classify(self, *, status_code: int, body: str) -> str:
        page = PageSnapshot(status_code=status_code, body=body or "")
        for rule in self._rules:
            if rule.predicate(page):
                return rule.label
        return OK

    def is_restricted(self, body: str) -> bool:
        """
        True when the body carries verification or block markers.
        """

        page = PageSnapshot(status_code=200, body=body or "")
        return requires_verification(page) or is_blocked(page)
