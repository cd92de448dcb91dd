"""Shared limit/offset query handling for list endpoints."""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import Query

from ..config import get_settings


@dataclass(frozen=True, slots=True)
class PageParams:
    limit: int
    offset: int


def page_params(
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
) -> PageParams:
    settings = get_settings()
    if limit is None:
        limit = settings.default_page_limit
    return PageParams(limit=min(limit, settings.max_page_limit), offset=offset)


__all__ = ["PageParams", "page_params"]
