"""End-to-end flows through StoreGraph: catalogue, orders, dangling users."""

from storegraph import JSONQuery, SelectionNode


async def test_created_product_listed_as_active(graph):
    product = await graph.create_product(name="KeyBoard", price=99, category="Electronics", status="ACTIVE")
    await graph.create_product(name="Old Mouse", price=5, status="INACTIVE")

    active = await graph.list_products(active_only=True)

    assert product in active
    assert all(p["status"] == "ACTIVE" for p in active)
    assert len(await graph.list_products()) == 2


async def test_active_filter_returns_exact_active_subset(graph):
    for i in range(10):
        await graph.create_product(name=f"p{i}", price=i, status="ACTIVE" if i % 3 else "INACTIVE")

    everything = await graph.list_products()
    active = await graph.list_products(active_only=True)

    assert active == [p for p in everything if p["status"] == "ACTIVE"]


async def test_get_order_resolves_user_and_products(graph, seeded):
    order = await graph.get_order(seeded["order"]["id"])

    assert order["user"]["username"] == "user_1"
    assert order["products"][0]["name"] == "KeyBoard"
    assert order["total"] == 200
    assert order["status"] == "COMPLETED"


async def test_deleted_user_leaves_order_with_absent_user(graph, seeded):
    assert await graph.delete_user(seeded["user"]["id"]) is True

    order = await graph.get_order(seeded["order"]["id"])

    assert order is not None
    assert order["user"] is None
    assert order["products"][0]["name"] == "KeyBoard"


async def test_list_orders_filtered_by_user(graph, seeded):
    other = await graph.create_user(username="user_2", email="user_2@ymail.com", role="ADMIN")
    await graph.create_order(products=[], user=other["id"], total=0, status="PENDING")

    mine = await graph.list_orders(user_id=seeded["user"]["id"])
    everyone = await graph.list_orders()

    assert [o["id"] for o in mine] == [seeded["order"]["id"]]
    assert mine[0]["user"]["username"] == "user_1"
    assert len(everyone) == 2


async def test_list_orders_batches_references(graph, store, seeded):
    for _ in range(5):
        await graph.create_order(
            products=[seeded["product"]["id"]], user=seeded["user"]["id"], total=1, status="PENDING"
        )
    store.reset()

    orders = await graph.list_orders()

    assert len(orders) == 6
    assert len(store.lookups("products")) == 1
    assert len(store.lookups("users")) == 1


async def test_query_dsl_with_selection(graph, seeded):
    result = await graph.query({
        "entity": "Order",
        "filters": {"status": "COMPLETED"},
        "select": {"fields": ["total"], "relations": {"user": {"fields": ["email"]}}},
    })

    assert result == [{
        "id": seeded["order"]["id"],
        "total": 200,
        "user": {"id": seeded["user"]["id"], "email": "user_1@ymail.com"},
    }]


async def test_query_dsl_single_lookup(graph, seeded):
    query = JSONQuery(entity="Product", id=seeded["product"]["id"], select=SelectionNode(fields=["name"]))

    assert await graph.query(query) == {"id": seeded["product"]["id"], "name": "KeyBoard"}
    assert await graph.query({"entity": "Product", "id": "missing"}) is None


async def test_get_order_without_relations(graph, seeded):
    order = await graph.get_order(seeded["order"]["id"], select=SelectionNode(fields=["products"]))

    assert order == {"id": seeded["order"]["id"], "products": [seeded["product"]["id"]]}


async def test_order_added_event_reaches_subscriber(graph, seeded):
    events = graph.subscribe("Order", "added")

    order = await graph.create_order(
        products=[seeded["product"]["id"]], user=seeded["user"]["id"], total=99, status="PENDING"
    )

    event = await events.get()
    assert event.payload["id"] == order["id"]
    assert event.topic.channel == "order.added"
