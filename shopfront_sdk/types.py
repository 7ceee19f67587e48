# shopfront_sdk/types.py
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Variant(_Payload):
    id: int
    name: Optional[str] = None
    sku: str
    price: float


class Product(_Payload):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    variants: List[Variant] = []


class Pagination(_Payload):
    page: int
    limit: int
    total: int


class ProductPage(_Payload):
    products: List[Product]
    pagination: Pagination


class Category(_Payload):
    id: int
    name: str
    description: Optional[str] = None


class OrderLine(_Payload):
    variant_id: int
    quantity: int = Field(1, ge=1)


class OrderData(_Payload):
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    customer_address: Optional[str] = None
    customer_city: Optional[str] = None
    items: List[OrderLine]
    notes: Optional[str] = None


class OrderResponse(_Payload):
    success: bool
    order_number: str
    order_id: int
    total: float
    item_count: Optional[int] = None
    message: str


class OrderStatus(_Payload):
    order_number: str
    status: str
    total: float
    created_at: Optional[datetime] = None


class Employee(_Payload):
    id: int
    employee_code: str
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    permissions: List[str] = []


class LoginResponse(_Payload):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    expires_at: Optional[datetime] = None
    user: Employee


class InventoryItem(_Payload):
    variant_id: int
    sku: str
    product_id: int
    product_name: str
    variant_name: Optional[str] = None
    quantity: int
    status: str


class InventoryReport(_Payload):
    threshold: int
    inventory: List[InventoryItem]


class OrderSummary(_Payload):
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


class OrderList(_Payload):
    orders: List[OrderSummary]
    status_counts: Dict[str, int]
    pagination: Pagination
