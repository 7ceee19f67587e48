#!/usr/bin/env python
# demo_concurrent.py: several shoppers race for the last units of one variant
import asyncio
import os

from shopfront_sdk import StoreAPIError, StoreClient

SHOPPERS = 5


async def simulate_purchase(client: StoreClient, name: str, variant_id: int, qty: int):
    try:
        resp = await client.create_order_async({
            "customerName": name,
            "customerPhone": "+1 555 0199",
            "items": [{"variantId": variant_id, "quantity": qty}],
        })
        print(f"✅ {name} bought {qty} unit(s) (Order: {resp.order_number}, Total: {resp.total:.2f})")
        return True
    except StoreAPIError as e:
        if e.status_code == 409:
            print(f"❌ {name} order failed: {e.message}")
        else:
            print(f"❌ {name} order failed with error ({e.status_code}): {e.message}")
        return False


async def main():
    c = StoreClient(base_url=os.getenv("SHOPFRONT_API_URL", "http://127.0.0.1:4000/api"))
    c.login(os.getenv("SHOPFRONT_EMPLOYEE", "ADMIN001"), os.getenv("SHOPFRONT_PASSWORD", "admin123"))

    # Pick the lowest stocked variant that can still be bought
    candidates = [row for row in c.get_inventory().inventory if row.quantity > 0]
    if not candidates:
        print("Nothing in stock; run `python init_db.py --reset --seed` first.")
        return
    target = min(candidates, key=lambda row: row.quantity)
    print(f"\n🎯 {target.sku}: {target.quantity} in stock, {SHOPPERS} shoppers want 2 each\n")

    results = await asyncio.gather(*[
        simulate_purchase(c, f"shopper{i}", target.variant_id, 2) for i in range(1, SHOPPERS + 1)
    ])

    after = {row.variant_id: row for row in c.get_inventory().inventory}[target.variant_id]
    print(f"\n📦 {sum(results)} order(s) placed, {after.quantity} left (status {after.status})")


if __name__ == "__main__":
    asyncio.run(main())
