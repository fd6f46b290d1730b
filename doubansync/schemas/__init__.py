"""
doubansync/schemas package marker.
"""

from doubansync.schemas.transform import (
    TransformOptions,
    TransformResultContract,
    TransformStatsContract,
)

__all__ = [
    "TransformOptions",
    "TransformResultContract",
    "TransformStatsContract",
]
