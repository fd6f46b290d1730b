"""
Retrieval and transformation core for syncing Douban collections to spreadsheets.
"""

from doubansync.domain import ContentType, FieldDescriptor, FieldType, TransformResult, TransformStats
from doubansync.schemas import TransformOptions
from doubansync.scraping import DelayScheduler, RequestScheduler
from doubansync.services import TransformPipeline

__all__ = [
    "ContentType",
    "DelayScheduler",
    "FieldDescriptor",
    "FieldType",
    "RequestScheduler",
    "TransformOptions",
    "TransformPipeline",
    "TransformResult",
    "TransformStats",
]
