"""Read-only catalog queries for the storefront. Stock levels are never exposed here."""

from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, joinedload, selectinload

from .core import CategoryOut, Pagination, ProductOut, ProductPage, VariantOut, to_amount
from .errors import NotFoundError
from .models import MAX_ROW_ID, Category, Product, is_row_id

MAX_PAGE_SIZE = 100


def _product_out(product: Product) -> ProductOut:
    category = product.category
    if category is not None and not category.is_active:
        category = None
    return ProductOut(
        id=product.id,
        name=product.name,
        description=product.description,
        price=to_amount(product.base_price_cents),
        image_url=product.image_url,
        category_id=category.id if category else None,
        category_name=category.name if category else None,
        variants=[
            VariantOut(id=v.id, name=v.name, sku=v.sku, price=to_amount(v.price_cents))
            for v in product.variants
            if v.is_active
        ],
    )


def list_products(
    db: Session,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
    max_limit: int = MAX_PAGE_SIZE,
) -> ProductPage:
    page = min(max(page, 1), MAX_ROW_ID // max_limit)
    limit = min(max(limit, 1), max_limit)

    filters = [Product.is_active.is_(True)]
    if category_id is not None:
        if not is_row_id(category_id):
            return ProductPage(products=[], pagination=Pagination(page=page, limit=limit, total=0))
        filters.append(Product.category_id == category_id)
    if search:
        term = f"%{search}%"
        filters.append(or_(Product.name.ilike(term), Product.description.ilike(term)))

    stmt = (
        select(Product)
        .options(joinedload(Product.category), selectinload(Product.variants))
        .where(*filters)
        .order_by(Product.name, Product.id)
        .limit(limit)
        .offset((page - 1) * limit)
    )
    products = [_product_out(p) for p in db.scalars(stmt).unique()]
    total = db.scalar(select(func.count(Product.id)).where(*filters)) or 0

    return ProductPage(products=products, pagination=Pagination(page=page, limit=limit, total=total))


def get_product(db: Session, product_id: int) -> ProductOut:
    if not is_row_id(product_id):
        raise NotFoundError("Product not found")
    product = db.scalar(
        select(Product)
        .options(joinedload(Product.category), selectinload(Product.variants))
        .where(Product.id == product_id, Product.is_active.is_(True))
    )
    if product is None:
        raise NotFoundError("Product not found")
    return _product_out(product)


def list_categories(db: Session) -> List[CategoryOut]:
    stmt = (
        select(Category)
        .where(Category.is_active.is_(True))
        .order_by(Category.sort_order, Category.name)
    )
    return [CategoryOut(id=c.id, name=c.name, description=c.description) for c in db.scalars(stmt)]
