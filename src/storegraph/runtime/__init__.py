"""
Runtime module - query execution and mutation pipeline.
"""

from __future__ import annotations

from .executor import SelectionExecutor
from .mutation_executor import MutationPipeline
from .resolver import ReferenceResolver

__all__ = [
    "ReferenceResolver",
    "SelectionExecutor",
    "MutationPipeline",
]
