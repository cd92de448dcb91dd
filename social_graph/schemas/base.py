"""Shared pydantic configuration for API payloads."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serialises snake_case fields as the camelCase keys the mobile client reads."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


__all__ = ["CamelModel"]
