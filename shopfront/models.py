"""SQLAlchemy models for the catalog, order, settings and staff tables."""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


MAX_ROW_ID = 2**63 - 1


def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_row_id(value) -> bool:
    """True when ``value`` fits an integer primary key column."""
    return isinstance(value, int) and 1 <= value <= MAX_ROW_ID


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False, unique=True, comment="Category name")
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    products = relationship("Product", back_populates="category")

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name})>"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, index=True, comment="Product name")
    description = Column(Text, nullable=True)
    base_price_cents = Column(Integer, nullable=False, default=0, comment="Base price in cents")
    image_url = Column(Text, nullable=True)
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    category = relationship("Category", back_populates="products")
    variants = relationship(
        "Variant",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by=lambda: [Variant.is_default.desc(), Variant.id],
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name={self.name})>"


class Variant(Base):
    """A purchasable SKU of a product, e.g. one size or colour."""

    __tablename__ = "product_variants"

    id = Column(Integer, primary_key=True)
    product_id = Column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sku = Column(String(64), nullable=False, unique=True, comment="Stock Keeping Unit")
    name = Column(String(120), nullable=True, comment="Variant name, e.g. 'Large / Red'")
    barcode = Column(String(32), nullable=True, unique=True)
    price_cents = Column(Integer, nullable=False, comment="Selling price in cents")
    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    product = relationship("Product", back_populates="variants")
    inventory = relationship(
        "Inventory", back_populates="variant", uselist=False, cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Variant(id={self.id}, sku={self.sku}, product_id={self.product_id})>"


class Inventory(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True)
    variant_id = Column(
        Integer,
        ForeignKey("product_variants.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    quantity_on_hand = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    variant = relationship("Variant", back_populates="inventory")

    def __repr__(self):
        return f"<Inventory(variant_id={self.variant_id}, quantity_on_hand={self.quantity_on_hand})>"


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Setting(key={self.key}, value={self.value})>"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(40), nullable=False, unique=True, comment="Customer-facing number")
    source = Column(String(20), nullable=False, default="WEBSITE")
    customer_name = Column(String(120), nullable=False)
    customer_phone = Column(String(40), nullable=False)
    customer_email = Column(String(255), nullable=True)
    customer_address = Column(Text, nullable=True)
    customer_city = Column(String(120), nullable=True)
    notes = Column(Text, nullable=True)
    subtotal_cents = Column(Integer, nullable=False, default=0)
    total_cents = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="pending", index=True)
    processed_by_id = Column(
        Integer, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True
    )
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )
    processed_by = relationship("Employee")

    def __repr__(self):
        return f"<Order(id={self.id}, order_number={self.order_number}, status={self.status})>"


class OrderItem(Base):
    """Line item; name and price are copied so later catalog edits don't touch it."""

    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_order_items_quantity"),)

    id = Column(Integer, primary_key=True)
    order_id = Column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    variant_id = Column(
        Integer, ForeignKey("product_variants.id", ondelete="RESTRICT"), nullable=False
    )
    position = Column(Integer, nullable=False, default=0)
    product_name = Column(String(255), nullable=False)
    variant_name = Column(String(120), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price_cents = Column(Integer, nullable=False)
    line_total_cents = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
    variant = relationship("Variant")

    def __repr__(self):
        return f"<OrderItem(order_id={self.order_id}, variant_id={self.variant_id}, quantity={self.quantity})>"


class Role(Base):
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True)
    name = Column(String(50), nullable=False, unique=True)
    permissions = Column(JSON, nullable=False, default=list, comment="e.g. ['orders.*']")

    employees = relationship("Employee", back_populates="role")

    def __repr__(self):
        return f"<Role(id={self.id}, name={self.name})>"


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True)
    employee_code = Column(String(32), nullable=False, unique=True)
    first_name = Column(String(80), nullable=False)
    last_name = Column(String(80), nullable=True)
    email = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime, nullable=True)

    role = relationship("Role", back_populates="employees")
    tokens = relationship("AuthToken", back_populates="employee", cascade="all, delete-orphan")

    @property
    def permissions(self):
        return list(self.role.permissions or []) if self.role else []

    def __repr__(self):
        return f"<Employee(id={self.id}, employee_code={self.employee_code})>"


class AuthToken(Base):
    __tablename__ = "auth_tokens"

    token = Column(String(64), primary_key=True)
    employee_id = Column(
        Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)

    employee = relationship("Employee", back_populates="tokens")
