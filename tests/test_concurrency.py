# tests/test_concurrency.py
import asyncio
from concurrent.futures import ThreadPoolExecutor

import httpx
from sqlalchemy import select

from shopfront.core import OrderItemIn, OrderRequest
from shopfront.errors import InsufficientStockError
from shopfront.models import Inventory


async def _buy_task(app, payload):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        return await ac.post("/api/orders", json=payload)


def test_concurrent_orders_for_the_last_units(app, database, variant_ids, make_order):
    vid = variant_ids["CHN-NVY-34"]

    async def race():
        return await asyncio.gather(
            _buy_task(app, make_order((vid, 5), name="first")),
            _buy_task(app, make_order((vid, 5), name="second")),
        )

    results = asyncio.run(race())
    statuses = sorted(r.status_code for r in results)
    # exactly one succeeds (201) and the other is refused (409)
    assert statuses == [201, 409]
    refused = next(r for r in results if r.status_code == 409)
    assert refused.json()["code"] == "INSUFFICIENT_STOCK"

    with database.session() as db:
        assert db.scalar(select(Inventory.quantity_on_hand).where(Inventory.variant_id == vid)) == 0


def test_threads_never_oversell(app, database, variant_ids):
    vid = variant_ids["OXF-WHT-L"]
    service = app.state.order_service

    def buy(i):
        req = OrderRequest(
            customer_name=f"shopper{i}",
            customer_phone="555",
            items=[OrderItemIn(variant_id=vid, quantity=1)],
        )
        try:
            service.place_order(req)
            return True
        except InsufficientStockError:
            return False

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(buy, range(12)))

    assert results.count(True) == 8
    assert results.count(False) == 4
    with database.session() as db:
        assert db.scalar(select(Inventory.quantity_on_hand).where(Inventory.variant_id == vid)) == 0
