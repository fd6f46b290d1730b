"""
Browser-like request headers and cookie hygiene helpers.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from doubansync.config import DEFAULT_ACCEPT_LANGUAGE, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

HOSTS_BY_SUBDOMAIN: dict[str, str] = {
    "book": "book.douban.com",
    "movie": "movie.douban.com",
    "music": "music.douban.com",
    "www": "www.douban.com",
}

COOKIE_PATTERN = re.compile(r"^[a-zA-Z0-9_=;%\-\s.\":'/]+$")
REQUIRED_COOKIE_KEYS: tuple[str, ...] = ("bid", "dbcl2")
DBCL2_USER_ID = re.compile(r'dbcl2="([0-9]+):')


def subdomain_for_url(url: str) -> str:
    """
    Return the logical sub-domain (book, movie, music or www) for a URL.
    """

    host = (urlparse(url).hostname or "").lower()
    for subdomain, known_host in HOSTS_BY_SUBDOMAIN.items():
        if subdomain != "www" and host == known_host:
            return subdomain
    return "www"


def sanitize_cookie(cookie: str) -> str:
    return re.sub(r"\s+", " ", re.sub(r"\r?\n", "", cookie)).strip()


def is_valid_cookie_format(cookie: str) -> bool:
    """
    Cheap structural check before a cookie is used for a live request.
    """

    if not COOKIE_PATTERN.match(cookie):
        logger.warning("Cookie rejected: unexpected characters")
        return False
    if not any(key in cookie for key in REQUIRED_COOKIE_KEYS):
        logger.warning("Cookie rejected: missing session keys %s", ", ".join(REQUIRED_COOKIE_KEYS))
        return False
    return True


def user_id_from_cookie(cookie: str) -> str | None:
    match = DBCL2_USER_ID.search(cookie)
    return match.group(1) if match else None


class HeaderBuilder:
    """
    Builds the header set sent with every scheduled request.
    """

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        accept_language: str = DEFAULT_ACCEPT_LANGUAGE,
    ) -> None:
        self._user_agent = user_agent
        self._accept_language = accept_language

    def build(self, subdomain: str, credential: str | None = None) -> dict[str, str]:
        headers = {
            "Accept": (
                "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
                "image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
            ),
            "Accept-Language": self._accept_language,
            "Cache-Control": "max-age=0",
            "Connection": "keep-alive",
            "Host": HOSTS_BY_SUBDOMAIN.get(subdomain, HOSTS_BY_SUBDOMAIN["www"]),
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "none",
            "Sec-Fetch-User": "?1",
            "Upgrade-Insecure-Requests": "1",
            "User-Agent": self._user_agent,
            "sec-ch-ua": '"Not/A)Brand";v="99", "Google Chrome";v="115", "Chromium";v="115"',
            "sec-ch-ua-mobile": "?0",
            "sec-ch-ua-platform": '"Windows"',
        }
        if credential:
            headers["Cookie"] = sanitize_cookie(credential)
        return headers

    def __call__(self, subdomain: str, credential: str | None = None) -> dict[str, str]:
        return self.build(subdomain, credential)
