"""
doubansync/services package marker.
"""

from doubansync.services.transform_pipeline import TransformPipeline, get_transform_pipeline

__all__ = [
    "TransformPipeline",
    "get_transform_pipeline",
]
