"""
StoreGraph - operation surface over products, users and orders.

Usage:
    from storegraph import StoreGraph
    from storegraph.store import MemoryDocumentStore

    graph = StoreGraph(MemoryDocumentStore())

    product = await graph.create_product(name="KeyBoard", price=99, status="ACTIVE")
    user = await graph.create_user(username="user_1", email="user_1@ymail.com", role="CUSTOMER")
    order = await graph.create_order(products=[product["id"]], user=user["id"], total=200, status="COMPLETED")

    resolved = await graph.get_order(order["id"])
    resolved["user"]["username"]  # "user_1"
"""

from __future__ import annotations

from typing import Any, Optional

from .core.query_types import JSONQuery, NormalizedFilter, SelectionNode, full_selection
from .core.defs import ORDER
from .core.entities import OrderStatus, ProductStatus, Role
from .messaging.events import Topic, Verb
from .messaging.notifier import ChangeNotifier, Subscription
from .runtime.executor import SelectionExecutor
from .runtime.mutation_executor import MutationPipeline
from .runtime.resolver import ReferenceResolver
from .store.base import DocumentStore


class StoreGraph:
    """
    Wires the store, resolver, executor, pipeline and notifier together.

    The notifier is owned by this instance (or injected), never a module
    global, so tests can build isolated graphs.
    """

    def __init__(
        self,
        store: DocumentStore,
        notifier: Optional[ChangeNotifier] = None,
        *,
        strict_references: bool = False,
    ):
        """
        Initialize graph.

        Args:
            store: Document store adapter
            notifier: Change notifier (default: a new one)
            strict_references: Reject orders referencing missing products/users
        """
        self.store = store
        self.notifier = notifier or ChangeNotifier()
        self.resolver = ReferenceResolver(store)
        self.executor = SelectionExecutor(store, self.resolver)
        self.mutations = MutationPipeline(
            store,
            self.notifier,
            strict_references=strict_references,
            resolver=self.resolver,
        )

    # --- Queries ---

    async def query(self, query: JSONQuery | dict[str, Any]) -> Any:
        """Run a query DSL request."""
        if isinstance(query, dict):
            query = JSONQuery.model_validate(query)
        return await self.executor.execute(query)

    async def get_product(self, product_id: str) -> Optional[dict[str, Any]]:
        return await self.executor.fetch_one("Product", product_id)

    async def list_products(self, active_only: bool = False) -> list[dict[str, Any]]:
        filters = []
        if active_only:
            filters.append(NormalizedFilter(field="status", op="eq", value=ProductStatus.ACTIVE.value))
        return await self.executor.fetch_many("Product", filters)

    async def get_user(self, user_id: str) -> Optional[dict[str, Any]]:
        return await self.executor.fetch_one("User", user_id)

    async def list_users(self) -> list[dict[str, Any]]:
        return await self.executor.fetch_many("User")

    async def get_order(
        self,
        order_id: str,
        select: Optional[SelectionNode] = None,
    ) -> Optional[dict[str, Any]]:
        """Fetch an order with products and user resolved (unless ``select`` says otherwise)."""
        return await self.executor.fetch_one("Order", order_id, select or full_selection(ORDER.relations))

    async def list_orders(
        self,
        user_id: Optional[str] = None,
        select: Optional[SelectionNode] = None,
    ) -> list[dict[str, Any]]:
        """Fetch orders, optionally only those owned by ``user_id``, with references resolved."""
        filters = []
        if user_id is not None:
            filters.append(NormalizedFilter(field="user", op="eq", value=user_id))
        return await self.executor.fetch_many("Order", filters, select or full_selection(ORDER.relations))

    # --- Mutations ---

    async def create_product(
        self,
        *,
        name: str,
        price: int,
        category: Optional[str] = None,
        status: ProductStatus | str = ProductStatus.ACTIVE,
    ) -> dict[str, Any]:
        return await self.mutations.create(
            "Product", {"name": name, "price": price, "category": category, "status": status}
        )

    async def update_product(self, product_id: str, **changes: Any) -> dict[str, Any]:
        return await self.mutations.update("Product", product_id, changes)

    async def delete_product(self, product_id: str) -> bool:
        return await self.mutations.delete("Product", product_id)

    async def create_user(self, *, username: str, email: str, role: Role | str) -> dict[str, Any]:
        return await self.mutations.create("User", {"username": username, "email": email, "role": role})

    async def update_user(self, user_id: str, **changes: Any) -> dict[str, Any]:
        return await self.mutations.update("User", user_id, changes)

    async def delete_user(self, user_id: str) -> bool:
        return await self.mutations.delete("User", user_id)

    async def create_order(
        self,
        *,
        products: list[str],
        user: str,
        total: int,
        status: OrderStatus | str,
    ) -> dict[str, Any]:
        return await self.mutations.create(
            "Order", {"products": products, "user": user, "total": total, "status": status}
        )

    async def update_order(self, order_id: str, **changes: Any) -> dict[str, Any]:
        return await self.mutations.update("Order", order_id, changes)

    async def delete_order(self, order_id: str) -> bool:
        return await self.mutations.delete("Order", order_id)

    # --- Subscriptions ---

    def subscribe(self, entity: str, verb: Verb | str, maxsize: Optional[int] = None) -> Subscription:
        """Open an event channel for (entity, verb)."""
        return self.notifier.subscribe(Topic.of(entity, verb), maxsize=maxsize)

    async def close(self) -> None:
        self.notifier.close()
        await self.store.close()
