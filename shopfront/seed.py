"""Seed data expressed as plain data, applied as idempotent upserts.

Each record is matched on its natural key (role name, employee code, setting
key, category name, SKU). Re-running ``apply_seed`` updates descriptive fields
but never resets stock that already exists, and never rewrites a password of an
existing employee.
"""

from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .auth import hash_password
from .inventory import DEFAULT_LOW_STOCK_THRESHOLD, LOW_STOCK_THRESHOLD_KEY
from .logging_config import get_logger
from .models import Category, Employee, Inventory, Product, Role, Setting, Variant

log = get_logger(__name__)

SEED: Dict[str, Any] = {
    "roles": [
        {"name": "Admin", "permissions": ["*"]},
        {"name": "Manager", "permissions": ["orders.*", "inventory.*", "settings.update"]},
        {"name": "Cashier", "permissions": ["orders.view", "inventory.view"]},
    ],
    "employees": [
        {
            "employee_code": "ADMIN001",
            "first_name": "System",
            "last_name": "Administrator",
            "email": "admin@example.com",
            "password": "admin123",
            "role": "Admin",
        },
        {
            "employee_code": "CASH001",
            "first_name": "Front",
            "last_name": "Desk",
            "password": "cashier123",
            "role": "Cashier",
        },
    ],
    "settings": [
        {
            "key": LOW_STOCK_THRESHOLD_KEY,
            "value": str(DEFAULT_LOW_STOCK_THRESHOLD),
            "description": "Quantity at or below which a variant is flagged as low stock",
        },
    ],
    "categories": [
        {"name": "Shirts", "description": "Casual and formal shirts", "sort_order": 1},
        {"name": "Trousers", "description": "Chinos, jeans and formal trousers", "sort_order": 2},
        {"name": "Accessories", "description": "Belts, caps and wallets", "sort_order": 3},
    ],
    "products": [
        {
            "name": "Oxford Shirt",
            "description": "Cotton oxford button-down",
            "base_price_cents": 349900,
            "category": "Shirts",
            "variants": [
                {"sku": "OXF-WHT-M", "name": "White / M", "price_cents": 349900, "is_default": True, "stock": 25},
                {"sku": "OXF-WHT-L", "name": "White / L", "price_cents": 349900, "stock": 8},
                {"sku": "OXF-BLU-L", "name": "Blue / L", "price_cents": 359900, "stock": 0},
            ],
        },
        {
            "name": "Slim Chinos",
            "description": "Stretch cotton chinos",
            "base_price_cents": 449900,
            "category": "Trousers",
            "variants": [
                {"sku": "CHN-KHK-32", "name": "Khaki / 32", "price_cents": 449900, "is_default": True, "stock": 12},
                {"sku": "CHN-NVY-34", "name": "Navy / 34", "price_cents": 449900, "stock": 5},
            ],
        },
        {
            "name": "Leather Belt",
            "description": "Full-grain leather belt",
            "base_price_cents": 199900,
            "category": "Accessories",
            "variants": [
                {"sku": "BLT-BRN", "name": None, "price_cents": 199900, "is_default": True, "stock": 40},
            ],
        },
    ],
}


def _upsert_roles(db: Session, records) -> Dict[str, Role]:
    roles = {}
    for rec in records:
        role = db.scalar(select(Role).where(Role.name == rec["name"]))
        if role is None:
            role = Role(name=rec["name"])
            db.add(role)
        role.permissions = list(rec.get("permissions", []))
        roles[role.name] = role
    return roles


def _upsert_employees(db: Session, records, roles: Dict[str, Role]) -> None:
    for rec in records:
        employee = db.scalar(select(Employee).where(Employee.employee_code == rec["employee_code"]))
        if employee is None:
            employee = Employee(
                employee_code=rec["employee_code"],
                password_hash=hash_password(rec["password"]),
            )
            db.add(employee)
        employee.first_name = rec["first_name"]
        employee.last_name = rec.get("last_name")
        employee.email = rec.get("email")
        employee.role = roles.get(rec.get("role"))
        employee.is_active = rec.get("is_active", True)


def _upsert_settings(db: Session, records) -> None:
    for rec in records:
        setting = db.get(Setting, rec["key"])
        if setting is None:
            # Existing values were chosen by staff; only fill in missing keys.
            db.add(Setting(key=rec["key"], value=rec["value"], description=rec.get("description")))
        elif rec.get("description"):
            setting.description = rec["description"]


def _upsert_categories(db: Session, records) -> Dict[str, Category]:
    categories = {}
    for rec in records:
        category = db.scalar(select(Category).where(Category.name == rec["name"]))
        if category is None:
            category = Category(name=rec["name"])
            db.add(category)
        category.description = rec.get("description")
        category.sort_order = rec.get("sort_order", 0)
        category.is_active = rec.get("is_active", True)
        categories[category.name] = category
    return categories


def _upsert_products(db: Session, records, categories: Dict[str, Category]) -> None:
    for rec in records:
        variants = rec.get("variants", [])
        product: Optional[Product] = None
        # A product is identified by any of its SKUs.
        for v in variants:
            existing = db.scalar(select(Variant).where(Variant.sku == v["sku"]))
            if existing is not None:
                product = existing.product
                break
        if product is None:
            product = Product(name=rec["name"])
            db.add(product)
        product.name = rec["name"]
        product.description = rec.get("description")
        product.base_price_cents = rec["base_price_cents"]
        product.image_url = rec.get("image_url")
        product.category = categories.get(rec.get("category"))
        product.is_active = rec.get("is_active", True)

        for v in variants:
            variant = db.scalar(select(Variant).where(Variant.sku == v["sku"]))
            if variant is None:
                variant = Variant(sku=v["sku"], product=product)
                db.add(variant)
            variant.name = v.get("name")
            variant.price_cents = v["price_cents"]
            variant.is_default = v.get("is_default", False)
            variant.is_active = v.get("is_active", True)
            if variant.inventory is None:
                variant.inventory = Inventory(quantity_on_hand=v.get("stock", 0))
        db.flush()


def apply_seed(db: Session, seed: Optional[Dict[str, Any]] = None) -> Dict[str, int]:
    """Upserts ``seed`` (default ``SEED``) and commits. Returns record counts."""
    seed = SEED if seed is None else seed

    roles = _upsert_roles(db, seed.get("roles", []))
    db.flush()
    _upsert_employees(db, seed.get("employees", []), roles)
    _upsert_settings(db, seed.get("settings", []))
    categories = _upsert_categories(db, seed.get("categories", []))
    db.flush()
    _upsert_products(db, seed.get("products", []), categories)
    db.commit()

    counts = {name: len(seed.get(name, [])) for name in ("roles", "employees", "settings", "categories", "products")}
    log.info(f"Seed applied: {counts}")
    return counts
