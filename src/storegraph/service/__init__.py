"""
Service module - FastAPI app factory.
"""

from __future__ import annotations

from .app import HealthcheckLogFilter, build_graph, create_app

__all__ = [
    "create_app",
    "build_graph",
    "HealthcheckLogFilter",
]
