"""
Custom exceptions for the Storegraph system.
"""

from __future__ import annotations

from typing import Any


class StoregraphError(Exception):
    """Base exception for all storegraph errors."""

    code = "STOREGRAPH_ERROR"
    http_status = 500


class ValidationError(StoregraphError):
    """Raised when input fails validation before reaching the store."""

    code = "VALIDATION_ERROR"
    http_status = 422

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Validation failed: {errors}")


class NotFoundError(StoregraphError):
    """Raised when an update targets an identity that does not exist."""

    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class StoreUnavailableError(StoregraphError):
    """Raised when the document store cannot serve a request."""

    code = "STORE_UNAVAILABLE"
    http_status = 503

    def __init__(self, message: str):
        super().__init__(f"Document store unavailable: {message}")


class DanglingReferenceError(StoregraphError):
    """Raised in strict mode when a write references missing entities."""

    code = "DANGLING_REFERENCE"
    http_status = 409

    def __init__(self, entity: str, missing: dict[str, list[Any]]):
        self.entity = entity
        self.missing = missing
        details = ", ".join(f"{target}: {ids}" for target, ids in missing.items())
        super().__init__(f"{entity} references missing entities ({details})")
