import pytest

from salon_api.services.stock_service import signed_quantity


def _post(client, url: str, payload: dict) -> dict:
    res = client.post(url, json=payload)
    assert res.status_code == 201, res.text
    return res.json()


def _seed(client) -> dict:
    salon_id = _post(client, "/api/salons", {"name": "Salon Bellecour", "city": "Lyon"})["id"]
    other_salon_id = _post(client, "/api/salons", {"name": "Salon Gerland", "city": "Lyon"})["id"]
    category_id = _post(client, "/api/product-categories", {"name": "Shampooings"})["id"]
    product = _post(
        client,
        "/api/products",
        {
            "name": "Shampooing kératine",
            "reference": "SHK-500",
            "category_id": category_id,
            "purchase_price": 6.2,
            "sale_price": 14.9,
        },
    )
    return {
        "salon_id": salon_id,
        "other_salon_id": other_salon_id,
        "product_id": product["id"],
        "product": product,
    }


@pytest.mark.parametrize(
    "movement_type, quantity, expected",
    [("entry", 3, 3), ("transfer_in", -3, 3), ("exit", 3, -3), ("sale", 2, -2), ("adjustment", -4, -4)],
)
def test_signed_quantity(movement_type, quantity, expected):
    assert signed_quantity(movement_type, quantity) == expected


def test_stock_movements_keep_quantities_consistent(test_context):
    client, _ = test_context
    ids = _seed(client)
    assert ids["product"]["category_name"] == "Shampooings"

    stock = _post(
        client,
        "/api/products/stock",
        {"product_id": ids["product_id"], "salon_id": ids["salon_id"], "quantity": 10, "alert_threshold": 3},
    )
    assert stock["quantity"] == 10

    sold = _post(
        client,
        "/api/products/movement",
        {
            "product_id": ids["product_id"],
            "salon_id": ids["salon_id"],
            "movement_type": "sale",
            "quantity": 4,
            "unit_price": 14.9,
        },
    )
    assert sold["new_stock"] == 6
    assert sold["movement"]["previous_stock"] == 10
    assert sold["movement"]["quantity"] == 4
    assert sold["movement"]["total_price"] == 59.6

    too_many = client.post(
        "/api/products/movement",
        json={
            "product_id": ids["product_id"],
            "salon_id": ids["salon_id"],
            "movement_type": "exit",
            "quantity": 7,
        },
    )
    assert too_many.status_code == 400
    assert too_many.json()["error"] == "Stock insuffisant pour cette opération"

    adjusted = client.patch(f"/api/products/stock/{stock['id']}", json={"quantity_change": -4, "reason": "Casse"})
    assert adjusted.status_code == 200, adjusted.text
    assert adjusted.json()["quantity"] == 2

    overdrawn = client.patch(f"/api/products/stock/{stock['id']}", json={"quantity_change": -5})
    assert overdrawn.status_code == 400
    assert overdrawn.json()["error"] == "Stock insuffisant"

    movements = client.get("/api/products/movements", params={"product_id": ids["product_id"]}).json()
    assert sorted((row["movement_type"], row["new_stock"]) for row in movements) == [("exit", 2), ("sale", 6)]
    assert all(row["product_name"] == "Shampooing kératine" for row in movements)
    assert all(row["category_name"] == "Shampooings" for row in movements)

    per_salon = client.get(f"/api/products/{ids['product_id']}/stock").json()
    assert [(row["salon_name"], row["quantity"]) for row in per_salon] == [("Salon Bellecour", 2)]


def test_listing_low_stock_and_summary(test_context):
    client, _ = test_context
    ids = _seed(client)
    _post(
        client,
        "/api/products/stock",
        {"product_id": ids["product_id"], "salon_id": ids["salon_id"], "quantity": 2, "alert_threshold": 3},
    )
    _post(
        client,
        "/api/products/movement",
        {
            "product_id": ids["product_id"],
            "salon_id": ids["other_salon_id"],
            "movement_type": "entry",
            "quantity": 8,
        },
    )

    products = client.get("/api/products").json()
    assert len(products) == 1
    assert products[0]["total_stock"] == 10
    assert products[0]["salon_count"] == 2

    low = client.get("/api/products/low-stock").json()
    assert [(row["salon_name"], row["stock_quantity"]) for row in low] == [("Salon Bellecour", 2)]
    assert client.get(f"/api/products/low-stock/salon/{ids['other_salon_id']}").json() == []

    salon_products = client.get(f"/api/products/salon/{ids['salon_id']}").json()
    assert salon_products[0]["stock_quantity"] == 2
    assert salon_products[0]["stock_id"]

    summary = client.get("/api/products/summary", params={"salon_id": ids["salon_id"]}).json()
    assert summary == {
        "total_products": 1,
        "total_stock": 2,
        "stock_value_purchase": 12.4,
        "stock_value_sale": 29.8,
        "low_stock_count": 1,
    }


def test_salon_without_stock_row_reads_zero(test_context):
    client, _ = test_context
    ids = _seed(client)

    rows = client.get(f"/api/products/salon/{ids['other_salon_id']}").json()
    assert rows[0]["stock_quantity"] == 0
    assert rows[0]["alert_threshold"] == 5
    assert rows[0]["stock_id"] is None


def test_unknown_product_and_soft_delete(test_context):
    client, _ = test_context
    ids = _seed(client)

    unknown = client.post(
        "/api/products/movement",
        json={"product_id": "missing", "salon_id": ids["salon_id"], "movement_type": "entry", "quantity": 1},
    )
    assert unknown.status_code == 409

    bad_type = client.post(
        "/api/products/movement",
        json={"product_id": ids["product_id"], "salon_id": ids["salon_id"], "movement_type": "gift", "quantity": 1},
    )
    assert bad_type.status_code == 400

    updated = client.put(f"/api/products/{ids['product_id']}", json={"sale_price": 15.5})
    assert updated.json()["sale_price"] == 15.5

    deleted = client.delete(f"/api/products/{ids['product_id']}")
    assert deleted.status_code == 200, deleted.text
    assert deleted.json()["message"] == "Produit supprimé"
    assert deleted.json()["product"]["is_active"] is False
    assert client.get("/api/products").json() == []
    assert client.get(f"/api/products/{ids['product_id']}").json()["is_active"] is False

    missing = client.get("/api/products/missing")
    assert missing.status_code == 404
    assert missing.json()["error"] == "Produit non trouvé"
    assert client.patch("/api/products/stock/missing", json={"quantity_change": 1}).status_code == 404
