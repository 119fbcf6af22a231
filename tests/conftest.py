"""Shared fixtures: stores, notifier, graph and an HTTP client over the app.

Every test gets fresh instances; nothing is shared through module globals.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from storegraph import ChangeNotifier, StoreGraph
from storegraph.config import StoregraphConfig
from storegraph.service import create_app
from storegraph.store import MemoryDocumentStore, SQLDocumentStore


class CountingStore(MemoryDocumentStore):
    """Memory store that records every read it serves."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def reset(self):
        self.calls.clear()

    def lookups(self, collection):
        return [c for c in self.calls if c[1] == collection]

    async def get(self, collection, doc_id):
        self.calls.append(("get", collection, doc_id))
        return await super().get(collection, doc_id)

    async def find(self, collection, filters=None):
        self.calls.append(("find", collection, list(filters or [])))
        return await super().find(collection, filters)


@pytest.fixture
def store():
    return CountingStore()


@pytest.fixture
def notifier():
    return ChangeNotifier(capacity=10, publish_timeout=0.05)


@pytest.fixture
def graph(store, notifier):
    return StoreGraph(store, notifier)


@pytest.fixture
def strict_graph(store, notifier):
    return StoreGraph(store, notifier, strict_references=True)


@pytest.fixture
async def sql_store(tmp_path):
    store = SQLDocumentStore(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await store.init()
    yield store
    await store.close()


@pytest.fixture
async def seeded(graph):
    """KeyBoard product, user_1 and one completed order referencing both."""
    product = await graph.create_product(name="KeyBoard", price=99, category="Electronics", status="ACTIVE")
    user = await graph.create_user(username="user_1", email="user_1@ymail.com", role="CUSTOMER")
    order = await graph.create_order(products=[product["id"]], user=user["id"], total=200, status="COMPLETED")
    return {"product": product, "user": user, "order": order}


@pytest.fixture
def app(store):
    return create_app(StoregraphConfig(publish_timeout=0.05), store=store)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
