# shopfront/main.py
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__, auth, catalog, inventory, orders
from .config import Settings
from .core import (
    CategoryOut,
    EmployeeOut,
    InventoryReport,
    InventoryRow,
    LoginIn,
    LoginOut,
    OrderConfirmation,
    OrderList,
    OrderRequest,
    OrderStatusOut,
    OrderStatusUpdate,
    OrderSummary,
    ProductOut,
    ProductPage,
    SettingOut,
    SettingUpdate,
)
from .database import Database
from .errors import PersistenceError, StoreError
from .logging_config import get_logger, setup_logging
from .models import Employee, Setting

log = get_logger(__name__)


# ---------------------------
# Dependencies
# ---------------------------
def get_db(request: Request) -> Iterator[Session]:
    with request.app.state.database.session() as db:
        yield db


def current_employee(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Employee:
    return auth.authenticate(db, authorization)


def require_permission(*permissions: str):
    def dependency(employee: Employee = Depends(current_employee)) -> Employee:
        return auth.authorize(employee, *permissions)

    return dependency


router = APIRouter()


# ---------------------------
# Storefront: catalog
# ---------------------------
@router.get("/products", response_model=ProductPage)
def list_products(
    request: Request,
    category_id: Optional[int] = Query(None, alias="categoryId"),
    search: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    settings: Settings = request.app.state.settings
    return catalog.list_products(
        db,
        category_id=category_id,
        search=search,
        page=page,
        limit=limit or settings.default_page_size,
        max_limit=settings.max_page_size,
    )


# Registered before /products/{product_id} so "categories" is not parsed as an id.
@router.get("/products/categories/list", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return catalog.list_categories(db)


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return catalog.get_product(db, product_id)


# ---------------------------
# Storefront: orders
# ---------------------------
@router.post("/orders", response_model=OrderConfirmation, status_code=201)
def create_order(payload: OrderRequest, request: Request):
    return request.app.state.order_service.place_order(payload)


@router.get("/orders/{order_number}/status", response_model=OrderStatusOut)
def order_status(order_number: str, db: Session = Depends(get_db)):
    return orders.get_order_status(db, order_number)


# ---------------------------
# Back office
# ---------------------------
@router.post("/auth/login", response_model=LoginOut)
def login(payload: LoginIn, request: Request, db: Session = Depends(get_db)):
    ttl = request.app.state.settings.token_ttl_hours
    return auth.login(db, payload.employee_code, payload.password, ttl_hours=ttl)


@router.get("/auth/me", response_model=EmployeeOut)
def me(employee: Employee = Depends(current_employee)):
    return auth.employee_out(employee)


@router.get("/inventory", response_model=InventoryReport)
def inventory_list(
    low_stock: bool = Query(False, alias="lowStock"),
    employee: Employee = Depends(current_employee),
    db: Session = Depends(get_db),
):
    return inventory.inventory_report(db, low_stock_only=low_stock)


@router.get("/inventory/alerts", response_model=List[InventoryRow])
def inventory_alerts(
    employee: Employee = Depends(current_employee),
    db: Session = Depends(get_db),
):
    return inventory.inventory_alerts(db)


@router.get("/orders", response_model=OrderList)
def list_orders(
    request: Request,
    status: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
    employee: Employee = Depends(current_employee),
    db: Session = Depends(get_db),
):
    settings: Settings = request.app.state.settings
    limit = min(max(limit or settings.default_page_size, 1), settings.max_page_size)
    return orders.list_orders(db, status=status, page=page, limit=limit)


@router.patch("/orders/{order_id}/status", response_model=OrderSummary)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    employee: Employee = Depends(require_permission("orders.update")),
    db: Session = Depends(get_db),
):
    return orders.update_order_status(db, order_id, payload.status, employee)


@router.get("/settings/{key}", response_model=SettingOut)
def get_setting(
    key: str,
    employee: Employee = Depends(current_employee),
    db: Session = Depends(get_db),
):
    setting = db.get(Setting, key)
    return SettingOut(key=key, value=setting.value if setting else None)


@router.put("/settings/{key}")
def put_setting(
    key: str,
    payload: SettingUpdate,
    employee: Employee = Depends(require_permission("settings.update")),
    db: Session = Depends(get_db),
):
    value = None if payload.value is None else str(payload.value)
    setting = db.get(Setting, key)
    if setting is None:
        db.add(Setting(key=key, value=value))
    else:
        setting.value = value
    db.commit()
    log.info(f"Setting {key} set to {value!r} by {employee.employee_code}")
    return {"success": True, "key": key, "value": value}


@router.get("/health")
def health(request: Request):
    try:
        request.app.state.database.ping()
        db_status = "connected"
    except SQLAlchemyError as e:
        db_status = f"disconnected: {e}"
    return {
        "status": "running",
        "database": db_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ---------------------------
# Error envelope: {"error": "..."}
# ---------------------------
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"Validation failed: {first.get('msg', 'invalid request')}"
    if field:
        message += f" ({field})"
    return JSONResponse(status_code=400, content={"error": message, "code": "VALIDATION_ERROR"})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
    message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message, "code": code})


async def persistence_error_handler(request: Request, exc: SQLAlchemyError):
    log.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    err = PersistenceError("Internal server error")
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


# ---------------------------
# Application factory
# ---------------------------
def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or Settings()
    database = database or Database.from_settings(settings)
    setup_logging(settings.log_level, settings.log_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.create_all()
        log.info(f"shopfront {__version__} started on {database.engine.url.render_as_string(hide_password=True)}")
        yield
        database.dispose()

    app = FastAPI(title="shopfront", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.order_service = orders.OrderService(database, settings.order_number_prefix)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, persistence_error_handler)

    app.include_router(router)
    app.include_router(router, prefix="/api")
    return app


if __name__ == "__main__":
    import uvicorn

    # python -m shopfront.main; same as `uvicorn --factory shopfront.main:create_app`
    uvicorn.run("shopfront.main:create_app", factory=True, host="0.0.0.0", port=4000)
