"""
orders.py: order placement and order status.

``OrderService.place_order`` is the only code path that decrements stock. The
stock check and the decrement for a variant happen under that variant's lock
and inside one transaction, so concurrent orders can never oversell.
"""

import time
import uuid
from typing import Dict, List, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from .core import (
    OrderConfirmation,
    OrderList,
    OrderRequest,
    OrderStatusOut,
    OrderSummary,
    Pagination,
    to_amount,
)
from .database import Database
from .errors import (
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
    StoreError,
    UnknownVariantError,
    ValidationError,
)
from .logging_config import get_logger
from .models import MAX_ROW_ID, Employee, Inventory, Order, OrderItem, Variant, is_row_id, utcnow

log = get_logger(__name__)

ORDER_STATUSES = ("pending", "confirmed", "processing", "ready", "completed", "cancelled")
CONFIRMATION_MESSAGE = "Order placed successfully! We will contact you shortly to confirm."

_MAX_ORDER_NUMBER_ATTEMPTS = 5


def generate_order_number(prefix: str = "WEB") -> str:
    """``<prefix>-<epoch ms>-<4 random chars>``; uniqueness is checked by the caller."""
    millis = int(time.time() * 1000)
    return f"{prefix}-{millis}-{uuid.uuid4().hex[:4].upper()}"


def _validate_request(req: OrderRequest) -> None:
    if not req.items:
        raise ValidationError("Validation failed: At least one item is required (items)")
    if not req.customer_name or not req.customer_name.strip():
        raise ValidationError("Validation failed: Name is required (customerName)")
    if not req.customer_phone or not req.customer_phone.strip():
        raise ValidationError("Validation failed: Phone is required (customerPhone)")
    for item in req.items:
        if item.quantity < 1:
            raise ValidationError(
                "Validation failed: Invalid quantity (items.quantity)",
                variant_id=item.variant_id,
            )


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class OrderService:
    """Validates, prices and persists storefront orders."""

    def __init__(self, database: Database, order_number_prefix: str = "WEB"):
        self.database = database
        self.order_number_prefix = order_number_prefix

    def place_order(self, req: OrderRequest) -> OrderConfirmation:
        _validate_request(req)

        lock_keys = [f"variant:{item.variant_id}" for item in req.items]
        try:
            # Only ids that exist get an entry in the lock registry.
            self._check_variants_exist(req)
            with self.database.locked(lock_keys):
                with self.database.session() as db:
                    with db.begin():
                        order = self._create_order(db, req)
                    confirmation = OrderConfirmation(
                        order_number=order.order_number,
                        order_id=order.id,
                        total=to_amount(order.total_cents),
                        item_count=len(order.items),
                        message=CONFIRMATION_MESSAGE,
                    )
        except StoreError as e:
            log.warning(f"Order rejected ({e.code}): {e.message}")
            raise
        except SQLAlchemyError as e:
            log.error(f"Order could not be persisted: {e}", exc_info=True)
            raise PersistenceError("Order could not be placed, please try again later") from e

        log.info(
            f"[Order: {confirmation.order_number}] Placed with {confirmation.item_count} "
            f"item(s), total {confirmation.total:.2f}"
        )
        return confirmation

    def _check_variants_exist(self, req: OrderRequest) -> None:
        for item in req.items:
            if not is_row_id(item.variant_id):
                raise UnknownVariantError(
                    f"Product variant {item.variant_id} not found", variant_id=item.variant_id
                )
        wanted = {item.variant_id for item in req.items}
        with self.database.session() as db:
            found = set(db.scalars(select(Variant.id).where(Variant.id.in_(wanted))))
        for item in req.items:
            if item.variant_id not in found:
                raise UnknownVariantError(
                    f"Product variant {item.variant_id} not found", variant_id=item.variant_id
                )

    def _create_order(self, db: Session, req: OrderRequest) -> Order:
        variant_ids = sorted({item.variant_id for item in req.items})
        variants = {
            v.id: v
            for v in db.scalars(
                select(Variant)
                .options(joinedload(Variant.product))
                .where(Variant.id.in_(variant_ids))
            )
        }

        for item in req.items:
            variant = variants.get(item.variant_id)
            if variant is None:
                raise UnknownVariantError(
                    f"Product variant {item.variant_id} not found", variant_id=item.variant_id
                )
            if not variant.is_active or not variant.product.is_active:
                raise UnknownVariantError(
                    f'"{variant.product.name}" is no longer available', variant_id=item.variant_id
                )

        # Several lines may name the same variant; stock is checked on the sum.
        requested: Dict[int, int] = {}
        for item in req.items:
            requested[item.variant_id] = requested.get(item.variant_id, 0) + item.quantity

        on_hand = {
            inv.variant_id: inv.quantity_on_hand
            for inv in db.scalars(
                select(Inventory)
                .where(Inventory.variant_id.in_(variant_ids))
                .order_by(Inventory.variant_id)
                .with_for_update()
            )
        }
        for variant_id, quantity in requested.items():
            available = on_hand.get(variant_id, 0)
            if quantity > available:
                raise InsufficientStockError(
                    f"Insufficient stock for {_label(variants[variant_id])}: "
                    f"requested {quantity}, available {max(available, 0)}",
                    variant_id=variant_id,
                )

        lines: List[OrderItem] = []
        for position, item in enumerate(req.items):
            variant = variants[item.variant_id]
            lines.append(
                OrderItem(
                    variant_id=variant.id,
                    position=position,
                    product_name=variant.product.name,
                    variant_name=variant.name,
                    quantity=item.quantity,
                    unit_price_cents=variant.price_cents,
                    line_total_cents=variant.price_cents * item.quantity,
                )
            )
        subtotal = sum(line.line_total_cents for line in lines)

        order = Order(
            order_number=self._new_order_number(db),
            source="WEBSITE",
            customer_name=req.customer_name.strip(),
            customer_phone=req.customer_phone.strip(),
            customer_email=_blank_to_none(req.customer_email),
            customer_address=_blank_to_none(req.customer_address),
            customer_city=_blank_to_none(req.customer_city),
            notes=_blank_to_none(req.notes),
            subtotal_cents=subtotal,
            total_cents=subtotal,
            status="pending",
            items=lines,
        )
        db.add(order)

        for variant_id, quantity in requested.items():
            result = db.execute(
                update(Inventory)
                .where(
                    Inventory.variant_id == variant_id,
                    Inventory.quantity_on_hand >= quantity,
                )
                .values(
                    quantity_on_hand=Inventory.quantity_on_hand - quantity,
                    updated_at=utcnow(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InsufficientStockError(
                    f"Insufficient stock for {_label(variants[variant_id])}",
                    variant_id=variant_id,
                )

        db.flush()
        return order

    def _new_order_number(self, db: Session) -> str:
        for _ in range(_MAX_ORDER_NUMBER_ATTEMPTS):
            candidate = generate_order_number(self.order_number_prefix)
            taken = db.scalar(select(Order.id).where(Order.order_number == candidate))
            if taken is None:
                return candidate
            log.warning(f"Order number collision on {candidate}, regenerating")
        raise PersistenceError("Could not allocate an order number")


def _label(variant: Variant) -> str:
    if variant.name:
        return f"{variant.product.name} - {variant.name}"
    return variant.product.name


# ---------------------------
# Reads and back-office updates
# ---------------------------
def get_order_status(db: Session, order_number: str) -> OrderStatusOut:
    order = db.scalar(select(Order).where(Order.order_number == order_number))
    if order is None:
        raise NotFoundError("Order not found")
    return OrderStatusOut(
        order_number=order.order_number,
        status=order.status,
        total=to_amount(order.total_cents),
        created_at=order.created_at,
    )


def _summary(order: Order) -> OrderSummary:
    processed_by = None
    if order.processed_by is not None:
        processed_by = order.processed_by.first_name
    return OrderSummary(
        id=order.id,
        order_number=order.order_number,
        source=order.source,
        customer_name=order.customer_name,
        customer_phone=order.customer_phone,
        customer_email=order.customer_email,
        customer_city=order.customer_city,
        status=order.status,
        total=to_amount(order.total_cents),
        item_count=len(order.items),
        created_at=order.created_at,
        processed_at=order.processed_at,
        processed_by=processed_by,
    )


def list_orders(
    db: Session, status: Optional[str] = None, page: int = 1, limit: int = 50
) -> OrderList:
    """Open orders first (pending, confirmed, processing, ready), newest first within a status."""
    limit = max(limit, 1)
    page = min(max(page, 1), MAX_ROW_ID // limit)
    status_rank = case(
        {"pending": 1, "confirmed": 2, "processing": 3, "ready": 4},
        value=Order.status,
        else_=5,
    )
    stmt = select(Order).options(selectinload(Order.items), joinedload(Order.processed_by))
    count_stmt = select(func.count(Order.id))
    if status:
        stmt = stmt.where(Order.status == status)
        count_stmt = count_stmt.where(Order.status == status)
    stmt = (
        stmt.order_by(status_rank, Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    )

    orders = [_summary(o) for o in db.scalars(stmt).unique()]
    counts = {
        row_status: count
        for row_status, count in db.execute(
            select(Order.status, func.count(Order.id)).group_by(Order.status)
        )
    }
    return OrderList(
        orders=orders,
        status_counts=counts,
        pagination=Pagination(page=page, limit=limit, total=db.scalar(count_stmt) or 0),
    )


def update_order_status(db: Session, order_id: int, status: str, employee: Employee) -> OrderSummary:
    if status not in ORDER_STATUSES:
        raise ValidationError(f"Invalid status; expected one of: {', '.join(ORDER_STATUSES)}")

    order = db.get(Order, order_id) if is_row_id(order_id) else None
    if order is None:
        raise NotFoundError("Order not found")

    previous = order.status
    order.status = status
    if status not in ("pending", "cancelled"):
        order.processed_by_id = employee.id
        order.processed_at = utcnow()
    db.commit()
    db.refresh(order)

    log.info(
        f"[Order: {order.order_number}] Status {previous} -> {status} by {employee.employee_code}"
    )
    return _summary(order)
