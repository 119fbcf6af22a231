"""SQL document store on SQLite via aiosqlite, same contract as the memory store."""

import pytest
from sqlalchemy.exc import OperationalError

from storegraph import NormalizedFilter, StoreGraph, StoreUnavailableError, ValidationError
from storegraph.store import SQLDocumentStore


async def test_insert_get_update_delete_roundtrip(sql_store):
    product = await sql_store.insert("products", {"name": "Mouse", "price": 10, "category": None, "status": "ACTIVE"})

    assert len(product["id"]) == 32
    assert await sql_store.get("products", product["id"]) == product

    updated = await sql_store.update("products", product["id"], {"price": 12})
    assert updated == {**product, "price": 12}

    assert await sql_store.delete("products", product["id"]) is True
    assert await sql_store.delete("products", product["id"]) is False
    assert await sql_store.get("products", product["id"]) is None


async def test_update_missing_returns_none(sql_store):
    assert await sql_store.update("users", "missing", {"username": "x"}) is None


async def test_find_filters_in_database_and_keeps_insert_order(sql_store):
    ids = []
    for i in range(4):
        doc = await sql_store.insert("products", {
            "name": f"p{i}", "price": i, "status": "ACTIVE" if i % 2 else "INACTIVE",
        })
        ids.append(doc["id"])

    active = await sql_store.find("products", [NormalizedFilter(field="status", op="eq", value="ACTIVE")])
    by_ids = await sql_store.find_by_ids("products", [ids[3], ids[0]])

    assert [p["name"] for p in active] == ["p1", "p3"]
    assert [p["id"] for p in by_ids] == [ids[0], ids[3]]


async def test_order_products_stored_as_list(sql_store):
    order = await sql_store.insert("orders", {"products": ["a", "b"], "user": "u", "total": 3, "status": "PENDING"})

    fetched = await sql_store.get("orders", order["id"])
    assert fetched["products"] == ["a", "b"]

    updated = await sql_store.update("orders", order["id"], {"products": ["c"]})
    assert updated["products"] == ["c"]


async def test_unknown_collection_and_field_raise_validation_error(sql_store):
    with pytest.raises(ValidationError):
        await sql_store.find("invoices")
    with pytest.raises(ValidationError):
        await sql_store.find("products", [NormalizedFilter(field="colour", op="eq", value="red")])


async def test_backend_failure_raises_store_unavailable(sql_store, monkeypatch):
    def broken_session():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(sql_store, "_session_maker", broken_session)

    with pytest.raises(StoreUnavailableError):
        await sql_store.get("products", "x")


async def test_unreachable_database_raises_store_unavailable(tmp_path):
    store = SQLDocumentStore(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'dir' / 'db.sqlite'}")

    with pytest.raises(StoreUnavailableError):
        await store.init()
    await store.close()


async def test_graph_scenario_on_sql_store(sql_store):
    graph = StoreGraph(sql_store)
    product = await graph.create_product(name="KeyBoard", price=99, category="Electronics", status="ACTIVE")
    user = await graph.create_user(username="user_1", email="user_1@ymail.com", role="CUSTOMER")
    order = await graph.create_order(products=[product["id"]], user=user["id"], total=200, status="COMPLETED")

    resolved = await graph.get_order(order["id"])
    assert resolved["user"]["username"] == "user_1"
    assert resolved["products"][0]["name"] == "KeyBoard"

    await graph.delete_user(user["id"])
    resolved = await graph.get_order(order["id"])
    assert resolved["user"] is None

    assert [p["id"] for p in await graph.list_products(active_only=True)] == [product["id"]]
    assert [o["id"] for o in await graph.list_orders(user_id=user["id"])] == [order["id"]]
