"""Typed failures raised by the services and rendered as ``{"error": ...}``."""

from typing import Any, Dict, Optional


class StoreError(Exception):
    code = "STORE_ERROR"
    status_code = 500

    def __init__(self, message: str, variant_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.variant_id = variant_id

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.variant_id is not None:
            body["variantId"] = self.variant_id
        return body


class ValidationError(StoreError):
    code = "VALIDATION_ERROR"
    status_code = 400


class UnknownVariantError(StoreError):
    code = "UNKNOWN_VARIANT"
    status_code = 400


class InsufficientStockError(StoreError):
    code = "INSUFFICIENT_STOCK"
    status_code = 409


class NotFoundError(StoreError):
    code = "NOT_FOUND"
    status_code = 404


class PersistenceError(StoreError):
    code = "PERSISTENCE_ERROR"
    status_code = 500


class UnauthorizedError(StoreError):
    code = "UNAUTHORIZED"
    status_code = 401


class ForbiddenError(StoreError):
    code = "FORBIDDEN"
    status_code = 403
