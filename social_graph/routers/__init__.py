"""Aggregate router exports."""
from .follow_requests import router as follow_requests_router
from .users import router as users_router

__all__ = [
    "follow_requests_router",
    "users_router",
]
