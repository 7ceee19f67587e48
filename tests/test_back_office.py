# tests/test_back_office.py


def test_list_orders_puts_open_orders_first(client, variant_ids, make_order, admin_headers):
    vid = variant_ids["BLT-BRN"]
    first = client.post("/api/orders", json=make_order((vid, 1), name="first")).json()
    second = client.post("/api/orders", json=make_order((vid, 2), name="second")).json()
    client.patch(f"/api/orders/{first['orderId']}/status", json={"status": "completed"}, headers=admin_headers)

    body = client.get("/api/orders", headers=admin_headers).json()
    assert [o["orderNumber"] for o in body["orders"]] == [second["orderNumber"], first["orderNumber"]]
    assert body["statusCounts"] == {"pending": 1, "completed": 1}
    assert body["pagination"]["total"] == 2
    assert body["orders"][0]["itemCount"] == 1
    assert body["orders"][0]["total"] == 1999.00 * 2

    pending = client.get("/api/orders", params={"status": "pending"}, headers=admin_headers).json()
    assert [o["customerName"] for o in pending["orders"]] == ["second"]
    assert pending["pagination"]["total"] == 1


def test_status_update_validation(client, variant_ids, make_order, admin_headers):
    order = client.post("/api/orders", json=make_order((variant_ids["BLT-BRN"], 1))).json()

    r = client.patch(f"/api/orders/{order['orderId']}/status", json={"status": "shipped"}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"

    r = client.patch("/api/orders/999999/status", json={"status": "confirmed"}, headers=admin_headers)
    assert r.status_code == 404

    r = client.patch(f"/api/orders/{order['orderId']}/status", json={"status": "ready"}, headers=admin_headers)
    assert r.json()["processedAt"] is not None
    status = client.get(f"/api/orders/{order['orderNumber']}/status").json()
    assert status["status"] == "ready"


def test_settings_round_trip(client, admin_headers):
    assert client.get("/api/settings/low_stock_threshold", headers=admin_headers).json() == {
        "key": "low_stock_threshold",
        "value": "10",
    }
    assert client.get("/api/settings/unknown", headers=admin_headers).json()["value"] is None

    client.put("/api/settings/store_name", json={"value": "Corner Shop"}, headers=admin_headers)
    assert client.get("/api/settings/store_name", headers=admin_headers).json()["value"] == "Corner Shop"


def test_orders_page_size_is_clamped(client, variant_ids, make_order, admin_headers):
    vid = variant_ids["BLT-BRN"]
    client.post("/api/orders", json=make_order((vid, 1), name="first"))
    client.post("/api/orders", json=make_order((vid, 1), name="second"))

    body = client.get("/api/orders", params={"limit": -5}, headers=admin_headers).json()
    assert body["pagination"]["limit"] == 1
    assert len(body["orders"]) == 1
    assert body["pagination"]["total"] == 2

    body = client.get("/api/orders", params={"limit": 1000}, headers=admin_headers).json()
    assert body["pagination"]["limit"] == 100

    body = client.get("/api/orders", params={"page": 10**20}, headers=admin_headers).json()
    assert body["orders"] == []


def test_status_update_for_out_of_range_order_id(client, admin_headers):
    r = client.patch(f"/api/orders/{10**20}/status", json={"status": "confirmed"}, headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["code"] == "NOT_FOUND"
