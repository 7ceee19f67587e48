"""Stock-status policy and the back-office inventory reports built on it."""

from enum import Enum
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .core import InventoryRow
from .models import Inventory, Product, Setting, Variant

LOW_STOCK_THRESHOLD_KEY = "low_stock_threshold"
DEFAULT_LOW_STOCK_THRESHOLD = 10


class StockStatus(str, Enum):
    IN_STOCK = "IN_STOCK"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


def stock_status(quantity: int, threshold: int) -> StockStatus:
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def parse_threshold(raw: Optional[Any]) -> int:
    """Positive integer value of ``raw``, or the default threshold."""
    if raw is None:
        return DEFAULT_LOW_STOCK_THRESHOLD
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return DEFAULT_LOW_STOCK_THRESHOLD
    if value <= 0:
        return DEFAULT_LOW_STOCK_THRESHOLD
    return value


def resolve_threshold(db: Session) -> int:
    # Read on every call so an updated setting applies immediately.
    setting = db.get(Setting, LOW_STOCK_THRESHOLD_KEY)
    return parse_threshold(setting.value if setting else None)


def _inventory_rows(db: Session, threshold: int) -> List[InventoryRow]:
    stmt = (
        select(Variant, Product, Inventory.quantity_on_hand)
        .join(Product, Variant.product_id == Product.id)
        .outerjoin(Inventory, Inventory.variant_id == Variant.id)
        .where(Variant.is_active.is_(True), Product.is_active.is_(True))
        .order_by(Product.name, Variant.name, Variant.id)
    )
    rows = []
    for variant, product, quantity in db.execute(stmt):
        quantity = quantity or 0
        rows.append(
            InventoryRow(
                variant_id=variant.id,
                sku=variant.sku,
                product_id=product.id,
                product_name=product.name,
                variant_name=variant.name,
                quantity=quantity,
                status=stock_status(quantity, threshold).value,
            )
        )
    return rows


def inventory_report(db: Session, low_stock_only: bool = False) -> dict:
    """All active variants with quantity and status under the current threshold."""
    threshold = resolve_threshold(db)
    rows = _inventory_rows(db, threshold)
    if low_stock_only:
        rows = [r for r in rows if r.status != StockStatus.IN_STOCK.value]
    return {"threshold": threshold, "inventory": rows}


def inventory_alerts(db: Session, limit: int = 20) -> List[InventoryRow]:
    threshold = resolve_threshold(db)
    rows = [r for r in _inventory_rows(db, threshold) if r.status != StockStatus.IN_STOCK.value]
    rows.sort(key=lambda r: (r.quantity, r.product_name))
    return rows[:limit]
