"""
doubansync/schemas/transform.py

Pydantic contracts for transform options and result envelopes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class TransformOptions(BaseModel):
    """
    Per-call switches for the transform pipeline.

    Accepts snake_case or camelCase keys; unknown keys and non-boolean values
    are rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        strict=True,
        frozen=True,
    )

    enable_intelligent_repairs: bool = True
    strict_validation: bool = True
    preserve_raw_data: bool = False


class TransformStatsContract(BaseModel):
    """
    Statistics block of a transform result.
    """

    total_fields: int = Field(..., ge=0)
    transformed_fields: int = Field(..., ge=0)
    repaired_fields: int = Field(..., ge=0)
    failed_fields: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_field_counts(self) -> "TransformStatsContract":
        if self.transformed_fields + self.failed_fields > self.total_fields:
            raise ValueError(
                "transformed_fields + failed_fields must not exceed total_fields "
                f"({self.transformed_fields} + {self.failed_fields} > {self.total_fields})"
            )
        return self


class TransformResultContract(BaseModel):
    """
    Shape check applied to every pipeline result before it is returned.
    """

    data: dict[str, Any]
    statistics: TransformStatsContract
    warnings: list[str] = Field(default_factory=list)
