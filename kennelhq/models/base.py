"""Shared Pydantic base models and utilities."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class KennelBase(BaseModel):
    """Base model with shared config for all KennelHQ schemas."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
