"""
HTTP client for a Storegraph service.

Unwraps the {"data": ...} envelope and turns error responses back into
Storegraph exceptions.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from .core.errors import (
    DanglingReferenceError,
    NotFoundError,
    StoregraphError,
    StoreUnavailableError,
    ValidationError,
)
from .core.defs import get_entity


class StoregraphClient:
    """
    Async client for the Storegraph HTTP API.

    Usage:
        async with StoregraphClient("http://storegraph:8000") as client:
            product = await client.create("Product", {"name": "Mouse", "price": 10})
            orders = await client.list("Order", user_id=user_id)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize client.

        Args:
            base_url: Service base URL
            timeout: HTTP request timeout in seconds
            http_client: Shared client (e.g. one using ASGITransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def close(self):
        """Close the HTTP client if we own it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> StoregraphClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        entity: str = "",
        entity_id: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise StoreUnavailableError(str(e))

        if response.status_code >= 400:
            raise self._error_from_response(response, entity, entity_id)
        return response.json()["data"]

    def _error_from_response(
        self,
        response: httpx.Response,
        entity: str,
        entity_id: Optional[str],
    ) -> StoregraphError:
        """Map an error envelope back to the matching exception."""
        try:
            error = response.json().get("error", {})
        except ValueError:
            error = {}
        message = error.get("message", response.text)
        code = error.get("code")

        if code == "VALIDATION_ERROR":
            return ValidationError(error.get("details") or [message])
        if code == "NOT_FOUND":
            return NotFoundError(entity, entity_id)
        if code == "DANGLING_REFERENCE":
            return DanglingReferenceError(entity, error.get("details") or {})
        if code == "STORE_UNAVAILABLE":
            return StoreUnavailableError(message)
        return StoregraphError(f"HTTP {response.status_code}: {message}")

    async def query(self, query: dict[str, Any]) -> Any:
        """Execute a query DSL request."""
        return await self._request("POST", "/query", json=query)

    async def get(self, entity: str, entity_id: str) -> Optional[dict[str, Any]]:
        return await self._request("GET", f"/{get_entity(entity).collection}/{entity_id}")

    async def list(self, entity: str, **params: Any) -> list[dict[str, Any]]:
        """List an entity collection. ``params`` become query parameters (active_only, user_id)."""
        params = {k: v for k, v in params.items() if v is not None}
        return await self._request("GET", f"/{get_entity(entity).collection}", params=params)

    async def create(self, entity: str, data: dict[str, Any]) -> dict[str, Any]:
        entity_def = get_entity(entity)
        return await self._request("POST", f"/{entity_def.collection}", entity_def.name, json=data)

    async def update(self, entity: str, entity_id: str, data: dict[str, Any]) -> dict[str, Any]:
        entity_def = get_entity(entity)
        return await self._request(
            "PATCH", f"/{entity_def.collection}/{entity_id}", entity_def.name, entity_id, json=data
        )

    async def delete(self, entity: str, entity_id: str) -> bool:
        return await self._request("DELETE", f"/{get_entity(entity).collection}/{entity_id}")
