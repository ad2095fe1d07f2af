from conftest import ADMIN_EMAIL, CUSTOMER_EMAIL, CUSTOMER_PASSWORD
from src.store.crud.order import take_stock
from src.store.models.catalog.product_info import ProductInfo
from src.store.utils.database import AsyncSessionLocal
from src.store.utils.image_host import UploadResult


async def _product(client, admin_headers, **overrides):
    body = {"name": "Chicken Biryani Tray", "price": "45.50", "stock": 10}
    body.update(overrides)
    res = await client.post("/api/products", json=body, headers=admin_headers)
    assert res.status_code == 201, res.text
    return res.json()


# ------------------------------------------------------------------ users
async def test_register_login_profile(client):
    res = await client.post(
        "/api/users/register",
        json={"name": "Sam", "email": "Sam@AveCatering.com", "password": "secret-1", "phone": "555"},
    )
    assert res.status_code == 201
    assert res.json()["user"]["email"] == "sam@avecatering.com"

    dup = await client.post(
        "/api/users/register",
        json={"name": "Sam", "email": "sam@avecatering.com", "password": "secret-1"},
    )
    assert dup.status_code == 409

    bad = await client.post("/api/users/login", json={"email": "sam@avecatering.com", "password": "nope"})
    assert bad.status_code == 401

    ok = await client.post("/api/users/login", json={"email": "sam@avecatering.com", "password": "secret-1"})
    assert ok.status_code == 200
    token = ok.json()["token"]

    me = await client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["name"] == "Sam"
    assert me.json()["isAdmin"] is False


async def test_short_password_rejected(client):
    res = await client.post("/api/users/register", json={"name": "X", "email": "x@avecatering.com", "password": "123"})
    assert res.status_code == 422


async def test_admin_user_management(client, admin_headers, admin_user, customer_user):
    listing = await client.get("/api/users", headers=admin_headers)
    assert {u["email"] for u in listing.json()} == {ADMIN_EMAIL, CUSTOMER_EMAIL}

    assert (await client.delete(f"/api/users/{admin_user.id}", headers=admin_headers)).status_code == 409
    assert (await client.delete(f"/api/users/{customer_user.id}", headers=admin_headers)).status_code == 200
    assert (await client.delete(f"/api/users/{customer_user.id}", headers=admin_headers)).status_code == 404


async def test_customer_cannot_list_users(client, customer_headers):
    assert (await client.get("/api/users", headers=customer_headers)).status_code == 403


# ------------------------------------------------------------- categories
async def test_category_tree(client, admin_headers):
    cat = await client.post("/api/categories", json={"name": "Party Trays"}, headers=admin_headers)
    assert cat.status_code == 201
    assert cat.json()["slug"] == "party-trays"
    cat_id = cat.json()["id"]

    again = await client.post("/api/categories", json={"name": "Party  Trays!"}, headers=admin_headers)
    assert again.json()["slug"] == "party-trays-2"

    sub = await client.post(
        "/api/subcategories", json={"name": "Rice", "categoryId": cat_id}, headers=admin_headers
    )
    assert sub.status_code == 201
    assert sub.json()["categoryId"] == cat_id

    orphan = await client.post(
        "/api/subcategories", json={"name": "Lost", "categoryId": 999}, headers=admin_headers
    )
    assert orphan.status_code == 404

    subs = await client.get("/api/subcategories", params={"parentId": cat_id})
    assert [s["name"] for s in subs.json()] == ["Rice"]

    blocked = await client.delete(f"/api/categories/{cat_id}", headers=admin_headers)
    assert blocked.status_code == 409

    await client.delete(f"/api/subcategories/{sub.json()['id']}", headers=admin_headers)
    assert (await client.delete(f"/api/categories/{cat_id}", headers=admin_headers)).status_code == 200


# --------------------------------------------------------------- products
async def test_product_crud_and_filters(client, admin_headers):
    first = await _product(client, admin_headers, isFeatured=True)
    await _product(client, admin_headers, name="Vegetable Samosa", price="12", stock=40)

    assert first["price"] == 45.5
    assert first["isFeatured"] is True

    page = await client.get("/api/products", params={"q": "samosa"})
    assert page.json()["total"] == 1
    assert page.json()["items"][0]["name"] == "Vegetable Samosa"

    featured = await client.get("/api/products", params={"featured": "true"})
    assert [p["id"] for p in featured.json()["items"]] == [first["id"]]

    updated = await client.put(f"/api/products/{first['id']}", json={"stock": 3}, headers=admin_headers)
    assert updated.json()["stock"] == 3
    assert updated.json()["name"] == "Chicken Biryani Tray"

    negative = await client.post("/api/products", json={"name": "X", "price": "-1"}, headers=admin_headers)
    assert negative.status_code == 422

    assert (await client.delete(f"/api/products/{first['id']}", headers=admin_headers)).status_code == 200
    assert (await client.get(f"/api/products/{first['id']}")).status_code == 404


# ----------------------------------------------------------------- offers
async def test_offers(client, admin_headers):
    live = await client.post(
        "/api/offers",
        json={"title": "Eid 10%", "code": "eid10", "discountPercent": 10},
        headers=admin_headers,
    )
    assert live.status_code == 201
    assert live.json()["code"] == "EID10"

    await client.post(
        "/api/offers",
        json={"title": "Old", "discountPercent": 5, "startDate": "2020-01-01", "endDate": "2020-01-31"},
        headers=admin_headers,
    )

    dup = await client.post(
        "/api/offers", json={"title": "Again", "code": "EID10", "discountPercent": 5}, headers=admin_headers
    )
    assert dup.status_code == 409

    window = await client.post(
        "/api/offers",
        json={"title": "Bad", "discountPercent": 5, "startDate": "2025-02-01", "endDate": "2025-01-01"},
        headers=admin_headers,
    )
    assert window.status_code == 422

    active = await client.get("/api/offers/active")
    assert [o["title"] for o in active.json()] == ["Eid 10%"]


# ----------------------------------------------------------------- orders
async def test_order_lifecycle(client, admin_headers, customer_headers):
    product = await _product(client, admin_headers)

    res = await client.post(
        "/api/orders",
        json={
            "items": [
                {"productId": product["id"], "quantity": 2},
                {"productId": product["id"], "quantity": 1},
            ],
            "paymentMethod": "cod",
        },
        headers=customer_headers,
    )
    assert res.status_code == 201
    order = res.json()
    assert order["total"] == 136.5
    assert order["items"] == [
        {"product_id": product["id"], "name": "Chicken Biryani Tray", "price": 45.5, "quantity": 3, "line_total": 136.5}
    ]
    assert order["status"] == "pending"
    assert (await client.get(f"/api/products/{product['id']}")).json()["stock"] == 7

    too_many = await client.post(
        "/api/orders", json={"items": [{"productId": product["id"], "quantity": 50}]}, headers=customer_headers
    )
    assert too_many.status_code == 409

    missing = await client.post(
        "/api/orders", json={"items": [{"productId": 999, "quantity": 1}]}, headers=customer_headers
    )
    assert missing.status_code == 404

    empty = await client.post("/api/orders", json={"items": []}, headers=customer_headers)
    assert empty.status_code == 422

    mine = await client.get("/api/orders/mine", headers=customer_headers)
    assert [o["id"] for o in mine.json()] == [order["id"]]

    cancel = await client.patch(
        f"/api/orders/{order['id']}/status", json={"status": "cancelled"}, headers=admin_headers
    )
    assert cancel.json()["status"] == "cancelled"
    assert (await client.get(f"/api/products/{product['id']}")).json()["stock"] == 10

    reopen = await client.patch(
        f"/api/orders/{order['id']}/status", json={"status": "processing"}, headers=admin_headers
    )
    assert reopen.status_code == 409

    forbidden = await client.patch(
        f"/api/orders/{order['id']}/status", json={"status": "shipped"}, headers=customer_headers
    )
    assert forbidden.status_code == 403


async def test_stock_is_taken_against_the_row_not_a_stale_read(client, admin_headers, customer_headers):
    product = await _product(client, admin_headers, stock=5)

    async with AsyncSessionLocal() as s:
        stale = await s.get(ProductInfo, product["id"])
        assert stale.stock == 5

        # another checkout lands between our read and our write
        bought = await client.post(
            "/api/orders", json={"items": [{"productId": product["id"], "quantity": 4}]}, headers=customer_headers
        )
        assert bought.status_code == 201

        assert stale.stock == 5
        assert not await take_stock(s, product["id"], 3)
        await s.rollback()

    assert (await client.get(f"/api/products/{product['id']}")).json()["stock"] == 1

    last = await client.post(
        "/api/orders", json={"items": [{"productId": product["id"], "quantity": 2}]}, headers=customer_headers
    )
    assert last.status_code == 409
    assert "(1 left)" in last.json()["message"]
    assert (await client.get(f"/api/products/{product['id']}")).json()["stock"] == 1


async def test_other_customers_order_is_forbidden(client, admin_headers, customer_headers):
    product = await _product(client, admin_headers)
    placed = await client.post(
        "/api/orders", json={"items": [{"productId": product["id"], "quantity": 1}]}, headers=customer_headers
    )

    reg = await client.post(
        "/api/users/register", json={"name": "Other", "email": "other@avecatering.com", "password": "other-pass"}
    )
    other = {"Authorization": f"Bearer {reg.json()['token']}"}

    assert (await client.get(f"/api/orders/{placed.json()['id']}", headers=other)).status_code == 403
    assert (await client.get(f"/api/orders/{placed.json()['id']}", headers=customer_headers)).status_code == 200
    assert (await client.get(f"/api/orders/{placed.json()['id']}", headers=admin_headers)).status_code == 200


# ---------------------------------------------------------------- reports
async def test_reports(client, admin_headers, customer_headers):
    product = await _product(client, admin_headers, stock=4)
    await client.post(
        "/api/orders", json={"items": [{"productId": product["id"], "quantity": 2}]}, headers=customer_headers
    )

    summary = (await client.get("/api/reports/summary", headers=admin_headers)).json()
    assert summary["orders"] == 1
    assert summary["revenue"] == 91.0
    assert summary["ordersByStatus"] == {"pending": 1}
    assert summary["lowStock"] == 1
    assert summary["customers"] == 1

    sales = (await client.get("/api/reports/sales", params={"days": 7}, headers=admin_headers)).json()
    assert sales["days"] == 7
    assert len(sales["series"]) == 7
    assert sales["series"][-1]["orders"] == 1
    assert sum(day["revenue"] for day in sales["series"]) == 91.0

    assert (await client.get("/api/reports/summary", headers=customer_headers)).status_code == 403


# --------------------------------------------------------------- settings
async def test_settings(client, admin_headers):
    assert (await client.get("/api/settings")).json() == {}

    res = await client.put("/api/settings/delivery_fee", json={"value": 4.99}, headers=admin_headers)
    assert res.json() == {"key": "delivery_fee", "value": 4.99}
    await client.put("/api/settings/store.hours", json={"value": {"open": "09:00"}}, headers=admin_headers)

    assert (await client.get("/api/settings")).json() == {
        "delivery_fee": 4.99,
        "store.hours": {"open": "09:00"},
    }
    assert (await client.put("/api/settings/bad key", json={"value": 1}, headers=admin_headers)).status_code == 422


# ----------------------------------------------------------------- upload
async def test_signed_upload(client, admin_headers, monkeypatch):
    async def fake_upload_signed(data, content_type, folder="uploads"):
        return UploadResult(secure_url=f"https://res.cloudinary.com/demo/{folder}/a.png", public_id=f"{folder}/a")

    monkeypatch.setattr("src.store.routes.upload_api.upload_signed", fake_upload_signed)

    res = await client.post(
        "/api/upload",
        data={"folder": "products"},
        files={"file": ("a.png", b"\x89PNG" + b"\x00" * 16, "image/png")},
        headers=admin_headers,
    )
    assert res.status_code == 200
    assert res.json() == {"url": "https://res.cloudinary.com/demo/products/a.png", "public_id": "products/a"}


async def test_upload_without_credentials_is_502(client, admin_headers):
    res = await client.post(
        "/api/upload",
        files={"file": ("a.png", b"\x89PNG" + b"\x00" * 16, "image/png")},
        headers=admin_headers,
    )
    assert res.status_code == 502
    assert res.json()["error_type"] == "UploadError"


# ----------------------------------------------------------------- import
async def test_csv_import(client, admin_headers):
    csv_text = (
        "\ufeffName,Price,Stock,Category\n"
        "Mango Lassi,3.50,20,Drinks\n"
        ",2.00,1,Drinks\n"
        "Chai,abc,5,Drinks\n"
        "Masala Chai,2.25,,drinks\n"
    )
    res = await client.post(
        "/api/import/products",
        files={"file": ("products.csv", csv_text.encode("utf-8"), "text/csv")},
        headers=admin_headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert body["created"] == 2
    assert body["skipped"] == 2
    assert [e["line"] for e in body["errors"]] == [3, 4]

    cats = (await client.get("/api/categories")).json()
    assert [c["name"] for c in cats] == ["Drinks"]

    page = (await client.get("/api/products", params={"categoryId": cats[0]["id"]})).json()
    assert page["total"] == 2


async def test_csv_import_requires_columns(client, admin_headers):
    res = await client.post(
        "/api/import/products",
        files={"file": ("p.csv", b"title,cost\nA,1\n", "text/csv")},
        headers=admin_headers,
    )
    assert res.status_code == 422
    assert "price" in res.json()["errors"]["file"]
