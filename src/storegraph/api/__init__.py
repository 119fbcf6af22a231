"""
API module - FastAPI router and error handlers.
"""

from __future__ import annotations

from .error_handlers import register_error_handlers
from .router import get_graph, router

__all__ = [
    "router",
    "get_graph",
    "register_error_handlers",
]
