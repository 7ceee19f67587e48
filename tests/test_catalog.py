# tests/test_catalog.py
from shopfront.models import Category, Variant


def test_list_products(client):
    r = client.get("/api/products")
    assert r.status_code == 200
    body = r.json()
    assert body["pagination"] == {"page": 1, "limit": 50, "total": 3}
    names = [p["name"] for p in body["products"]]
    assert names == ["Leather Belt", "Oxford Shirt", "Slim Chinos"]

    shirt = body["products"][1]
    assert shirt["categoryName"] == "Shirts"
    assert shirt["price"] == 3499.00
    # default variant first, and stock is never part of the catalog
    assert shirt["variants"][0]["sku"] == "OXF-WHT-M"
    assert "quantity" not in shirt["variants"][0]


def test_routes_are_served_with_and_without_prefix(client):
    assert client.get("/products").json() == client.get("/api/products").json()


def test_filter_by_category_and_search(client):
    categories = client.get("/api/products/categories/list").json()
    assert [c["name"] for c in categories] == ["Shirts", "Trousers", "Accessories"]
    trousers = next(c for c in categories if c["name"] == "Trousers")

    r = client.get("/api/products", params={"categoryId": trousers["id"]})
    assert [p["name"] for p in r.json()["products"]] == ["Slim Chinos"]

    r = client.get("/api/products", params={"search": "leather"})
    assert [p["name"] for p in r.json()["products"]] == ["Leather Belt"]
    assert r.json()["pagination"]["total"] == 1


def test_pagination_is_capped(client):
    r = client.get("/api/products", params={"limit": 1000, "page": 2})
    assert r.json()["pagination"]["limit"] == 100
    assert r.json()["products"] == []

    r = client.get("/api/products", params={"limit": 2, "page": 2})
    assert [p["name"] for p in r.json()["products"]] == ["Slim Chinos"]
    assert r.json()["pagination"]["total"] == 3


def test_get_product_and_not_found(client):
    products = client.get("/api/products").json()["products"]
    belt = next(p for p in products if p["name"] == "Leather Belt")

    r = client.get(f"/api/products/{belt['id']}")
    assert r.status_code == 200
    assert r.json()["variants"] == [{"id": belt["variants"][0]["id"], "name": None, "sku": "BLT-BRN", "price": 1999.00}]

    r = client.get("/api/products/999999")
    assert r.status_code == 404
    assert r.json() == {"error": "Product not found", "code": "NOT_FOUND"}


def test_inactive_rows_are_hidden(client, database, variant_ids, make_order):
    with database.session() as db:
        db.get(Variant, variant_ids["OXF-WHT-L"]).is_active = False
        belt = db.get(Variant, variant_ids["BLT-BRN"]).product
        belt.is_active = False
        db.query(Category).filter(Category.name == "Accessories").one().is_active = False
        db.commit()
        belt_id = belt.id

    products = client.get("/api/products").json()["products"]
    assert [p["name"] for p in products] == ["Oxford Shirt", "Slim Chinos"]
    assert "OXF-WHT-L" not in [v["sku"] for v in products[0]["variants"]]
    assert client.get(f"/api/products/{belt_id}").status_code == 404
    assert "Accessories" not in [c["name"] for c in client.get("/api/products/categories/list").json()]

    r = client.post("/api/orders", json=make_order((variant_ids["OXF-WHT-L"], 1)))
    assert r.status_code == 400
    assert r.json()["code"] == "UNKNOWN_VARIANT"
    assert "no longer available" in r.json()["error"]


def test_unknown_endpoint_and_health(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json()["error"] == "Endpoint not found"

    health = client.get("/api/health").json()
    assert health["status"] == "running"
    assert health["database"] == "connected"


def test_ids_beyond_the_key_range(client):
    r = client.get(f"/api/products/{10**20}")
    assert r.status_code == 404
    assert r.json() == {"error": "Product not found", "code": "NOT_FOUND"}

    r = client.get("/api/products", params={"categoryId": 10**20})
    assert r.status_code == 200
    assert r.json()["products"] == []
    assert r.json()["pagination"]["total"] == 0

    r = client.get("/api/products", params={"page": 10**20})
    assert r.status_code == 200
    assert r.json()["products"] == []


def test_apps_are_built_by_the_factory_only(database):
    import shopfront.main

    assert not hasattr(shopfront.main, "app")
    first = shopfront.main.create_app(database=database)
    second = shopfront.main.create_app(database=database)
    assert first is not second
    assert first.state.database is database
