from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def to_amount(cents: int) -> float:
    """Cents to major currency units for JSON output."""
    return round(cents / 100, 2)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------
# Catalog
# ---------------------------
class VariantOut(CamelModel):
    id: int
    name: Optional[str] = None
    sku: str
    price: float


class ProductOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    variants: List[VariantOut] = []


class Pagination(CamelModel):
    page: int
    limit: int
    total: int


class ProductPage(CamelModel):
    products: List[ProductOut]
    pagination: Pagination


class CategoryOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None


# ---------------------------
# Orders
# ---------------------------
class OrderItemIn(CamelModel):
    variant_id: int
    quantity: int


class OrderRequest(CamelModel):
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    customer_address: Optional[str] = None
    customer_city: Optional[str] = None
    items: List[OrderItemIn]
    notes: Optional[str] = None


class OrderConfirmation(CamelModel):
    success: bool = True
    order_number: str
    order_id: int
    total: float
    item_count: int
    message: str


class OrderStatusOut(CamelModel):
    order_number: str
    status: str
    total: float
    created_at: datetime


class OrderSummary(CamelModel):
    id: int
    order_number: str
    source: str
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    customer_city: Optional[str] = None
    status: str
    total: float
    item_count: int
    created_at: datetime
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None


class OrderList(CamelModel):
    orders: List[OrderSummary]
    status_counts: Dict[str, int]
    pagination: Pagination


class OrderStatusUpdate(CamelModel):
    status: str


# ---------------------------
# Inventory
# ---------------------------
class InventoryRow(CamelModel):
    variant_id: int
    sku: str
    product_id: int
    product_name: str
    variant_name: Optional[str] = None
    quantity: int
    status: str


class InventoryReport(CamelModel):
    threshold: int
    inventory: List[InventoryRow]


# ---------------------------
# Auth & settings
# ---------------------------
class LoginIn(CamelModel):
    employee_code: str
    password: str


class EmployeeOut(CamelModel):
    id: int
    employee_code: str
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    permissions: List[str] = []


class LoginOut(CamelModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: EmployeeOut


class SettingOut(CamelModel):
    key: str
    value: Optional[str] = None


class SettingUpdate(CamelModel):
    value: Any
