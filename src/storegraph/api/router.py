"""
FastAPI router for the Storegraph API.

Endpoints:
- POST /query - Executes a query DSL request
- GET    /{collection}          - List products / users / orders
- GET    /{collection}/{id}     - Fetch one (data is null when absent)
- POST   /{collection}          - Create
- PATCH  /{collection}/{id}     - Partial update
- DELETE /{collection}/{id}     - Delete (data is true/false)

Every response is wrapped as {"data": ...}. Orders are returned with
``products`` and ``user`` resolved.

Query parameters:
- GET /products?active_only=true
- GET /orders?user_id=<id>
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request

from ..core.query_types import JSONQuery
from ..graph import StoreGraph


router = APIRouter()


def get_graph(request: Request) -> StoreGraph:
    """Get the StoreGraph attached to the app."""
    graph = getattr(request.app.state, "graph", None)
    if graph is None:
        raise RuntimeError("StoreGraph not initialized on app.state.graph")
    return graph


@router.post("/query")
async def query_endpoint(query: JSONQuery, graph: StoreGraph = Depends(get_graph)) -> dict:
    """
    Execute a query.

    Example:
        {"entity": "Order", "filters": {"status": "PENDING"},
         "select": {"fields": ["total"], "relations": {"user": {"fields": ["username"]}}}}
    """
    return {"data": await graph.query(query)}


# --- Products ---

@router.get("/products")
async def list_products(active_only: bool = False, graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.list_products(active_only=active_only)}


@router.get("/products/{product_id}")
async def get_product(product_id: str, graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.get_product(product_id)}


@router.post("/products", status_code=201)
async def create_product(data: dict[str, Any] = Body(...), graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.mutations.create("Product", data)}


@router.patch("/products/{product_id}")
async def update_product(
    product_id: str,
    data: dict[str, Any] = Body(...),
    graph: StoreGraph = Depends(get_graph),
) -> dict:
    return {"data": await graph.mutations.update("Product", product_id, data)}


@router.delete("/products/{product_id}")
async def delete_product(product_id: str, graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.delete_product(product_id)}


# --- Users ---

@router.get("/users")
async def list_users(graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.list_users()}


@router.get("/users/{user_id}")
async def get_user(user_id: str, graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.get_user(user_id)}


@router.post("/users", status_code=201)
async def create_user(data: dict[str, Any] = Body(...), graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.mutations.create("User", data)}


@router.patch("/users/{user_id}")
async def update_user(
    user_id: str,
    data: dict[str, Any] = Body(...),
    graph: StoreGraph = Depends(get_graph),
) -> dict:
    return {"data": await graph.mutations.update("User", user_id, data)}


@router.delete("/users/{user_id}")
async def delete_user(user_id: str, graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.delete_user(user_id)}


# --- Orders ---

@router.get("/orders")
async def list_orders(user_id: Optional[str] = None, graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.list_orders(user_id=user_id)}


@router.get("/orders/{order_id}")
async def get_order(order_id: str, graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.get_order(order_id)}


@router.post("/orders", status_code=201)
async def create_order(data: dict[str, Any] = Body(...), graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.mutations.create("Order", data)}


@router.patch("/orders/{order_id}")
async def update_order(
    order_id: str,
    data: dict[str, Any] = Body(...),
    graph: StoreGraph = Depends(get_graph),
) -> dict:
    return {"data": await graph.mutations.update("Order", order_id, data)}


@router.delete("/orders/{order_id}")
async def delete_order(order_id: str, graph: StoreGraph = Depends(get_graph)) -> dict:
    return {"data": await graph.delete_order(order_id)}
