"""
doubansync/domain package marker.
"""

from doubansync.domain.field_mapping import ContentType, FieldDescriptor, FieldType
from doubansync.domain.transform import (
    BatchTransformResult,
    TransformContext,
    TransformResult,
    TransformStats,
)

__all__ = [
    "BatchTransformResult",
    "ContentType",
    "FieldDescriptor",
    "FieldType",
    "TransformContext",
    "TransformResult",
    "TransformStats",
]
