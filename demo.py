#!/usr/bin/env python
# demo.py: walks the storefront and back-office flows against a running API
# (start it with `python init_db.py --seed && uvicorn --factory shopfront.main:create_app --port 4000`)
import os

from shopfront_sdk import StoreAPIError, StoreClient


def main():
    c = StoreClient(base_url=os.getenv("SHOPFRONT_API_URL", "http://127.0.0.1:4000/api"))

    # -----------------------------
    # Browse the catalog
    # -----------------------------
    print("Categories...")
    for cat in c.get_categories():
        print(f"  {cat.id}: {cat.name}")

    print("\nProducts...")
    page = c.get_products()
    for p in page.products:
        print(f"  {p.id}: {p.name} ({p.category_name}) from {p.price:.2f}")
        for v in p.variants:
            print(f"      variant {v.id} {v.sku} {v.price:.2f}")

    print("\nSearching for 'shirt'...")
    print(c.get_products(search="shirt").pagination)

    # -----------------------------
    # Place an order
    # -----------------------------
    variant = page.products[0].variants[0]
    print(f"\nOrdering 2 x {variant.sku}...")
    order = c.create_order({
        "customerName": "Alice Example",
        "customerPhone": "+1 555 0100",
        "customerCity": "Springfield",
        "items": [{"variantId": variant.id, "quantity": 2}],
    })
    print(order)

    print("\nOrder status...")
    print(c.get_order_status(order.order_number))

    # -----------------------------
    # Rejections
    # -----------------------------
    print("\nOrdering far more than is in stock...")
    try:
        c.create_order({
            "customerName": "Bob Example",
            "customerPhone": "+1 555 0101",
            "items": [{"variantId": variant.id, "quantity": 10_000}],
        })
    except StoreAPIError as e:
        print(f"  rejected ({e.status_code}): {e.message}")

    # -----------------------------
    # Back office
    # -----------------------------
    print("\nLogging in as ADMIN001...")
    login = c.login("ADMIN001", "admin123")
    print(f"  hello {login.user.first_name}, token expires {login.expires_at}")

    print("\nLow-stock report...")
    report = c.get_inventory(low_stock=True)
    print(f"  threshold {report.threshold}")
    for row in report.inventory:
        print(f"  {row.sku}: {row.quantity} {row.status}")

    print("\nConfirming the order...")
    print(c.update_order_status(order.order_id, "confirmed"))

    print("\nOrders...")
    orders = c.list_orders()
    print(f"  counts: {orders.status_counts}")


if __name__ == "__main__":
    main()
