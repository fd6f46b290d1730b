"""
Check whether a stored Douban cookie still opens the user's profile page.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from doubansync.logging_utils import configure_script_logging
from doubansync.scraping import RequestScheduler
from doubansync.scraping.headers import is_valid_cookie_format, sanitize_cookie, user_id_from_cookie


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate a Douban cookie against the profile page.")
    parser.add_argument(
        "--user-id",
        dest="user_id",
        default=None,
        help="Douban user id; read from the dbcl2 cookie when omitted.",
    )
    parser.add_argument(
        "--cookie-file",
        dest="cookie_file",
        required=True,
        help="File holding the raw Cookie header value.",
    )
    args = parser.parse_args()

    configure_script_logging("INFO")

    cookie = sanitize_cookie(Path(args.cookie_file).read_text(encoding="utf-8"))
    user_id = args.user_id or user_id_from_cookie(cookie)
    if not user_id:
        parser.error("--user-id is required when the cookie has no dbcl2 entry.")
    if not is_valid_cookie_format(cookie):
        print(json.dumps({"valid": False, "reason": "malformed cookie"}, ensure_ascii=False))
        return 1

    check = RequestScheduler().validate_credential(user_id, cookie)
    print(json.dumps({"valid": check.valid, "reason": check.reason}, ensure_ascii=False, indent=2))
    return 0 if check.valid else 1


if __name__ == "__main__":
    raise SystemExit(main())
