"""Python client for the shopfront API."""

from .client import StoreAPIError, StoreClient
from .types import OrderData, OrderLine

__all__ = ["StoreClient", "StoreAPIError", "OrderData", "OrderLine"]
