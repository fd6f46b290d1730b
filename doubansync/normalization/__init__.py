"""
Repairs applied between mapping and validation.
"""

from doubansync.normalization.repair_engine import RepairEngine
from doubansync.normalization.repair_rules import (
    MarkupRule,
    clean_listing,
    repair_author,
    repair_isbn,
    repair_publish_date,
    repair_publisher,
)

__all__ = [
    "MarkupRule",
    "RepairEngine",
    "clean_listing",
    "repair_author",
    "repair_isbn",
    "repair_publish_date",
    "repair_publisher",
]
