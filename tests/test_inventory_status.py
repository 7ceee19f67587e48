# tests/test_inventory_status.py
import pytest

from shopfront.inventory import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    StockStatus,
    parse_threshold,
    resolve_threshold,
    stock_status,
)
from shopfront.models import Setting


@pytest.mark.parametrize(
    "quantity,threshold,expected",
    [
        (0, 10, StockStatus.OUT_OF_STOCK),
        (-3, 10, StockStatus.OUT_OF_STOCK),
        (1, 10, StockStatus.LOW_STOCK),
        (10, 10, StockStatus.LOW_STOCK),
        (11, 10, StockStatus.IN_STOCK),
        (5, 1, StockStatus.IN_STOCK),
    ],
)
def test_stock_status_boundaries(quantity, threshold, expected):
    assert stock_status(quantity, threshold) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "0", "-4", "2.5"])
def test_unusable_threshold_falls_back_to_default(raw):
    assert parse_threshold(raw) == DEFAULT_LOW_STOCK_THRESHOLD == 10


def test_threshold_parsed_from_text():
    assert parse_threshold(" 25 ") == 25
    assert parse_threshold(3) == 3


def test_resolve_threshold_reads_setting_each_time(database):
    with database.session() as db:
        assert resolve_threshold(db) == 10
        db.get(Setting, "low_stock_threshold").value = "4"
        db.commit()
        assert resolve_threshold(db) == 4
        db.delete(db.get(Setting, "low_stock_threshold"))
        db.commit()
        assert resolve_threshold(db) == 10


def test_inventory_report_statuses(client, admin_headers):
    r = client.get("/api/inventory", headers=admin_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["threshold"] == 10
    statuses = {row["sku"]: (row["quantity"], row["status"]) for row in body["inventory"]}
    assert statuses["OXF-WHT-M"] == (25, "IN_STOCK")
    assert statuses["OXF-WHT-L"] == (8, "LOW_STOCK")
    assert statuses["OXF-BLU-L"] == (0, "OUT_OF_STOCK")
    assert statuses["CHN-NVY-34"] == (5, "LOW_STOCK")


def test_low_stock_filter_and_alerts(client, admin_headers):
    r = client.get("/api/inventory", params={"lowStock": "true"}, headers=admin_headers)
    skus = {row["sku"] for row in r.json()["inventory"]}
    assert skus == {"OXF-WHT-L", "OXF-BLU-L", "CHN-NVY-34"}

    alerts = client.get("/api/inventory/alerts", headers=admin_headers).json()
    assert [a["sku"] for a in alerts] == ["OXF-BLU-L", "CHN-NVY-34", "OXF-WHT-L"]


def test_threshold_change_applies_immediately(client, admin_headers):
    r = client.put("/api/settings/low_stock_threshold", json={"value": 20}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["value"] == "20"

    body = client.get("/api/inventory", headers=admin_headers).json()
    assert body["threshold"] == 20
    statuses = {row["sku"]: row["status"] for row in body["inventory"]}
    assert statuses["CHN-KHK-32"] == "LOW_STOCK"

    client.put("/api/settings/low_stock_threshold", json={"value": "abc"}, headers=admin_headers)
    assert client.get("/api/inventory", headers=admin_headers).json()["threshold"] == 10
