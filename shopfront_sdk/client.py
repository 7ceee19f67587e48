# shopfront_sdk/client.py
"""
Typed client for the shopfront HTTP API.

Every call makes exactly one request. It either returns the parsed payload or
raises ``StoreAPIError`` whose message is the ``error`` field of the response
body (``"Request failed"`` when the body can't be read).
"""

from typing import Any, Dict, List, Optional, Union

import httpx
import requests

from .types import (
    Category,
    Employee,
    InventoryItem,
    InventoryReport,
    LoginResponse,
    OrderData,
    OrderList,
    OrderResponse,
    OrderStatus,
    OrderSummary,
    Product,
    ProductPage,
)

DEFAULT_ERROR = "Request failed"

OrderInput = Union[OrderData, Dict[str, Any]]


class StoreAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(resp: Any) -> str:
    try:
        body = resp.json()
    except ValueError:
        return DEFAULT_ERROR
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return DEFAULT_ERROR


def _unwrap(resp: Any) -> Any:
    if resp.status_code >= 400:
        raise StoreAPIError(_error_message(resp), resp.status_code)
    try:
        return resp.json()
    except ValueError:
        raise StoreAPIError(DEFAULT_ERROR, resp.status_code)


def _order_payload(order: OrderInput) -> Dict[str, Any]:
    if isinstance(order, dict):
        order = OrderData.model_validate(order)
    return order.model_dump(by_alias=True, exclude_none=True)


class StoreClient:
    def __init__(
        self,
        base_url: str = "http://localhost:4000/api",
        token: Optional[str] = None,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None
        self._async_transport = async_transport
        if token:
            self.set_token(token)

    def set_token(self, token: str) -> None:
        self.token = token
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            r = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise StoreAPIError(f"{DEFAULT_ERROR}: {e}") from e
        return _unwrap(r)

    # Catalog
    def get_products(self, category_id: Optional[int] = None, search: Optional[str] = None) -> ProductPage:
        params = {}
        if category_id is not None:
            params["categoryId"] = category_id
        if search:
            params["search"] = search
        return ProductPage.model_validate(self._request("GET", "/products", params=params))

    def get_product(self, product_id: int) -> Product:
        return Product.model_validate(self._request("GET", f"/products/{product_id}"))

    def get_categories(self) -> List[Category]:
        return [Category.model_validate(c) for c in self._request("GET", "/products/categories/list")]

    # Orders
    def create_order(self, order: OrderInput) -> OrderResponse:
        return OrderResponse.model_validate(self._request("POST", "/orders", json=_order_payload(order)))

    def get_order_status(self, order_number: str) -> OrderStatus:
        return OrderStatus.model_validate(self._request("GET", f"/orders/{order_number}/status"))

    async def create_order_async(self, order: OrderInput) -> OrderResponse:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._async_transport,
            ) as client:
                r = await client.post("/orders", json=_order_payload(order))
        except httpx.HTTPError as e:
            raise StoreAPIError(f"{DEFAULT_ERROR}: {e}") from e
        return OrderResponse.model_validate(_unwrap(r))

    # Back office
    def login(self, employee_code: str, password: str) -> LoginResponse:
        data = self._request("POST", "/auth/login", json={"employeeCode": employee_code, "password": password})
        resp = LoginResponse.model_validate(data)
        self.set_token(resp.access_token)
        return resp

    def me(self) -> Employee:
        return Employee.model_validate(self._request("GET", "/auth/me"))

    def get_inventory(self, low_stock: bool = False) -> InventoryReport:
        params = {"lowStock": "true"} if low_stock else {}
        return InventoryReport.model_validate(self._request("GET", "/inventory", params=params))

    def get_inventory_alerts(self) -> List[InventoryItem]:
        return [InventoryItem.model_validate(i) for i in self._request("GET", "/inventory/alerts")]

    def list_orders(self, status: Optional[str] = None, page: int = 1) -> OrderList:
        params: Dict[str, Any] = {"page": page}
        if status:
            params["status"] = status
        return OrderList.model_validate(self._request("GET", "/orders", params=params))

    def update_order_status(self, order_id: int, status: str) -> OrderSummary:
        data = self._request("PATCH", f"/orders/{order_id}/status", json={"status": status})
        return OrderSummary.model_validate(data)

    def get_setting(self, key: str) -> Optional[str]:
        return self._request("GET", f"/settings/{key}").get("value")

    def set_setting(self, key: str, value: Any) -> Dict[str, Any]:
        return self._request("PUT", f"/settings/{key}", json={"value": value})

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")
