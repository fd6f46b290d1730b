"""
Transform scraped records from a JSON file and print the result envelopes.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from doubansync.domain import ContentType
from doubansync.logging_utils import configure_script_logging
from doubansync.schemas import TransformOptions
from doubansync.services import get_transform_pipeline


def main() -> int:
    parser = argparse.ArgumentParser(description="Transform scraped Douban records into spreadsheet rows.")
    parser.add_argument(
        "--type",
        dest="content_type",
        required=True,
        choices=[item.value for item in ContentType],
        help="Content type of the records.",
    )
    parser.add_argument(
        "--input",
        dest="input_path",
        required=True,
        help="JSON file holding one record object or a list of records.",
    )
    parser.add_argument("--no-repairs", action="store_true", help="Skip intelligent repairs.")
    parser.add_argument("--no-strict", action="store_true", help="Skip field validation.")
    parser.add_argument("--keep-raw", action="store_true", help="Include the raw record in each result.")
    args = parser.parse_args()

    configure_script_logging("WARNING")

    payload = json.loads(Path(args.input_path).read_text(encoding="utf-8"))
    options = TransformOptions(
        enable_intelligent_repairs=not args.no_repairs,
        strict_validation=not args.no_strict,
        preserve_raw_data=args.keep_raw,
    )

    pipeline = get_transform_pipeline()
    if isinstance(payload, list):
        try:
            output = pipeline.transform_batch(payload, args.content_type, options).to_dict()
        except ValueError as exc:
            parser.error(f"{args.input_path}: {exc}")
    else:
        output = pipeline.transform(payload, args.content_type, options).to_dict()

    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
