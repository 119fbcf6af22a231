"""Selection executor: batched relation resolution, filters, projection.

Invariants:
    - Each referenced type is looked up at most once per pass, whatever the
      number of parent records
    - Batched output equals naive per-record resolution
    - Dangling references resolve to None and never fail the query
"""

import pytest

from storegraph import NormalizedFilter, SelectionNode, ValidationError
from storegraph.runtime import SelectionExecutor


ALL_RELATIONS = SelectionNode(relations={"products": SelectionNode(), "user": SelectionNode()})


async def _seed_orders(store, n_orders=5):
    products = [await store.insert("products", {"name": f"p{i}", "price": i, "status": "ACTIVE"}) for i in range(3)]
    users = [await store.insert("users", {"username": f"u{i}", "email": f"u{i}@x.io", "role": "CUSTOMER"}) for i in range(2)]
    orders = []
    for i in range(n_orders):
        orders.append(await store.insert("orders", {
            "products": [products[i % 3]["id"], products[(i + 1) % 3]["id"]],
            "user": users[i % 2]["id"],
            "total": i * 10,
            "status": "PENDING",
        }))
    return products, users, orders


async def _naive(store, order):
    """Per-record resolution: one lookup per reference."""
    resolved = dict(order)
    resolved["user"] = await store.get("users", order["user"])
    resolved["products"] = [await store.get("products", pid) for pid in order["products"]]
    return resolved


async def test_list_resolves_each_type_once_regardless_of_result_size(store):
    await _seed_orders(store, n_orders=20)
    store.reset()

    orders = await SelectionExecutor(store).fetch_many("Order", select=ALL_RELATIONS)

    assert len(orders) == 20
    assert len(store.lookups("orders")) == 1
    assert len(store.lookups("products")) == 1
    assert len(store.lookups("users")) == 1


async def test_batched_resolution_matches_naive_resolution(store):
    _, _, orders = await _seed_orders(store)
    # One dangling product and one dangling user
    orders.append(await store.insert("orders", {
        "products": ["missing-product", orders[0]["products"][0]],
        "user": "missing-user",
        "total": 1,
        "status": "CANCELLED",
    }))

    batched = await SelectionExecutor(store).fetch_many("Order", select=ALL_RELATIONS)
    naive = [await _naive(store, order) for order in orders]

    assert batched == naive


async def test_fetch_one_missing_returns_none(store):
    assert await SelectionExecutor(store).fetch_one("Order", "nope", ALL_RELATIONS) is None


async def test_fetch_one_keeps_product_order_and_duplicates(store):
    a = await store.insert("products", {"name": "a"})
    b = await store.insert("products", {"name": "b"})
    order = await store.insert("orders", {"products": [b["id"], a["id"], b["id"]], "user": None})

    result = await SelectionExecutor(store).fetch_one("Order", order["id"], ALL_RELATIONS)

    assert [p["name"] for p in result["products"]] == ["b", "a", "b"]
    assert result["user"] is None


async def test_unrequested_relations_keep_raw_ids(store):
    _, users, orders = await _seed_orders(store, n_orders=1)
    store.reset()

    result = await SelectionExecutor(store).fetch_one(
        "Order", orders[0]["id"], SelectionNode(relations={"user": SelectionNode()})
    )

    assert result["user"]["id"] == users[0]["id"]
    assert result["products"] == orders[0]["products"]
    assert store.lookups("products") == []


async def test_filters_are_pushed_to_store(store):
    _, users, _ = await _seed_orders(store, n_orders=4)
    store.reset()

    result = await SelectionExecutor(store).fetch_many(
        "Order", [NormalizedFilter(field="user", op="eq", value=users[1]["id"])]
    )

    assert len(result) == 2
    assert all(o["user"] == users[1]["id"] for o in result)
    find_call = store.lookups("orders")[0]
    assert find_call[2][0].field == "user"


async def test_projection_keeps_id_and_requested_relations(store):
    _, _, orders = await _seed_orders(store, n_orders=1)

    result = await SelectionExecutor(store).fetch_one(
        "Order",
        orders[0]["id"],
        SelectionNode(fields=["total"], relations={"user": SelectionNode(fields=["username"])}),
    )

    assert set(result) == {"id", "total", "user"}
    assert set(result["user"]) == {"id", "username"}


async def test_resolved_children_are_not_shared_between_parents(store):
    product = await store.insert("products", {"name": "shared"})
    o1 = await store.insert("orders", {"products": [product["id"]], "user": None})
    await store.insert("orders", {"products": [product["id"]], "user": None})

    orders = await SelectionExecutor(store).fetch_many("Order", select=ALL_RELATIONS)
    orders[0]["products"][0]["name"] = "mutated"

    assert orders[0]["id"] == o1["id"]
    assert orders[1]["products"][0]["name"] == "shared"


async def test_unknown_relation_raises_validation_error(store):
    with pytest.raises(ValidationError):
        await SelectionExecutor(store).fetch_many(
            "Product", select=SelectionNode(relations={"orders": SelectionNode()})
        )


async def test_unknown_field_raises_validation_error(store):
    with pytest.raises(ValidationError):
        await SelectionExecutor(store).fetch_many("User", select=SelectionNode(fields=["password"]))


async def test_non_filterable_field_raises_validation_error(store):
    with pytest.raises(ValidationError):
        await SelectionExecutor(store).fetch_many(
            "Order", [NormalizedFilter(field="products", op="eq", value=[])]
        )


async def test_unknown_entity_raises_validation_error(store):
    with pytest.raises(ValidationError):
        await SelectionExecutor(store).fetch_many("Invoice")
