"""Shared Pydantic base models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LunaBase(BaseModel):
    """Base model with shared config for all Luna schemas.

    ``from_attributes`` lets routes validate the predictor's dataclasses
    directly.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ErrorDetail(BaseModel):
    detail: str
