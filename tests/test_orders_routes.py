from app.services import inventory_service, order_service


def seed_order(session, user, book, quantity=1):
    return order_service.create(session, order_service.draft(
        user_id=user.id,
        items=[{"book_id": book.id, "title": book.title, "price": book.price, "quantity": quantity}],
        total_price=book.price * quantity,
    ))


# -------- POST /orders --------

def test_checkout_returns_201_with_populated_order(client, snapshot, auth_headers, make_user, make_book, add_to_cart):
    user = make_user("alice", balance=50.0)
    book = make_book("Emma", price=12.5, stock=4, author="Jane Austen")
    add_to_cart(user.id, book.id, 2)

    res = client.post("/orders", headers=auth_headers(user))

    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Order created successfully"
    order = body["order"]
    assert order["status"] == "pending"
    assert order["total_price"] == 25.0
    assert order["user"]["username"] == "alice"
    assert order["items"][0]["book"]["author"] == "Jane Austen"
    assert order["items"][0]["quantity"] == 2

    state = snapshot()
    assert state["balance"][user.id] == 25.0
    assert state["stock"][book.id] == 2
    assert state["cart"] == 0


def test_checkout_requires_token(client):
    res = client.post("/orders")
    assert res.status_code == 401


def test_checkout_rejects_bad_token(client):
    res = client.post("/orders", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


def test_checkout_empty_cart(client, auth_headers, make_user):
    user = make_user()

    res = client.post("/orders", headers=auth_headers(user))

    assert res.status_code == 400
    assert res.json()["detail"]["message"] == "Cart is empty"


def test_checkout_shortages_payload(client, auth_headers, make_user, make_book, add_to_cart):
    user = make_user(balance=500.0)
    a = make_book("A", stock=0)
    b = make_book("B", stock=1)
    add_to_cart(user.id, a.id, 1)
    add_to_cart(user.id, b.id, 3)

    res = client.post("/orders", headers=auth_headers(user))

    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["message"] == "Insufficient stock for some items"
    assert [(s["title"], s["available"], s["requested"]) for s in detail["shortages"]] == [
        ("A", 0, 1),
        ("B", 1, 3),
    ]


def test_checkout_balance_payload(client, auth_headers, make_user, make_book, add_to_cart):
    user = make_user(balance=5.0)
    book = make_book(price=10.0, stock=3)
    add_to_cart(user.id, book.id, 1)

    res = client.post("/orders", headers=auth_headers(user))

    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["required"] == 10.0
    assert detail["available"] == 5.0


def test_checkout_race_is_a_server_error(client, snapshot, monkeypatch, auth_headers, make_user, make_book, add_to_cart):
    user = make_user(balance=100.0)
    book = make_book(stock=5)
    add_to_cart(user.id, book.id, 2)
    monkeypatch.setattr(inventory_service, "conditional_decrement", lambda *args: None)

    res = client.post("/orders", headers=auth_headers(user))

    assert res.status_code == 500
    assert res.json()["detail"]["bookId"] == book.id
    state = snapshot()
    assert state["stock"][book.id] == 5
    assert state["cart"] == 1
    assert state["orders"] == 0


# -------- GET /orders, /orders/{id} --------

def test_list_own_orders(client, session, auth_headers, make_user, make_book):
    user = make_user()
    other = make_user("other")
    book = make_book()
    mine = seed_order(session, user, book)
    seed_order(session, other, book)

    res = client.get("/orders", headers=auth_headers(user))

    assert res.status_code == 200
    assert [o["id"] for o in res.json()["orders"]] == [mine.id]


def test_get_order_ownership(client, session, auth_headers, make_user, make_book):
    owner = make_user()
    stranger = make_user("stranger")
    order = seed_order(session, owner, make_book())

    assert client.get(f"/orders/{order.id}", headers=auth_headers(owner)).status_code == 200
    assert client.get(f"/orders/{order.id}", headers=auth_headers(stranger)).status_code == 403
    assert client.get("/orders/9999", headers=auth_headers(owner)).status_code == 404


# -------- admin --------

def test_all_orders_admin_only(client, auth_headers, make_user):
    user = make_user()

    res = client.get("/orders/all", headers=auth_headers(user))

    assert res.status_code == 403


def test_all_orders_paginated(client, session, auth_headers, make_user, make_book):
    admin = make_user("admin", role="admin")
    user = make_user()
    book = make_book()
    for _ in range(3):
        seed_order(session, user, book)

    res = client.get("/orders/all?page=2&limit=2", headers=auth_headers(admin))

    assert res.status_code == 200
    body = res.json()
    assert len(body["orders"]) == 1
    assert body["pagination"] == {
        "currentPage": 2,
        "totalPages": 2,
        "totalOrders": 3,
        "hasNext": False,
        "hasPrev": True,
    }


def test_update_status(client, session, auth_headers, make_user, make_book):
    admin = make_user("admin", role="admin")
    order = seed_order(session, make_user(), make_book())

    res = client.put(f"/orders/{order.id}/status", json={"status": "shipped"}, headers=auth_headers(admin))

    assert res.status_code == 200
    assert res.json()["order"]["status"] == "shipped"


def test_update_status_invalid(client, session, auth_headers, make_user, make_book):
    admin = make_user("admin", role="admin")
    order = seed_order(session, make_user(), make_book())

    res = client.put(f"/orders/{order.id}/status", json={"status": "lost"}, headers=auth_headers(admin))

    assert res.status_code == 400
    assert "delivered" in res.json()["detail"]["validStatuses"]


def test_update_status_missing_order(client, auth_headers, make_user):
    admin = make_user("admin", role="admin")

    res = client.put("/orders/404/status", json={"status": "shipped"}, headers=auth_headers(admin))

    assert res.status_code == 404


def test_update_status_admin_only(client, session, auth_headers, make_user, make_book):
    user = make_user()
    order = seed_order(session, user, make_book())

    res = client.put(f"/orders/{order.id}/status", json={"status": "shipped"}, headers=auth_headers(user))

    assert res.status_code == 403


def test_health(client):
    res = client.get("/health/check")
    assert res.status_code == 200
    assert res.json()["database"] == "ok"
