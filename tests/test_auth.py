# tests/test_auth.py
from datetime import timedelta

import bcrypt
import pytest
from sqlalchemy import func, select

from shopfront.auth import has_permission, hash_password, verify_password
from shopfront.models import AuthToken, Employee, utcnow


def test_password_hashing():
    stored = hash_password("s3cret", rounds=4)
    assert stored.startswith("$2b$04$")
    assert verify_password("s3cret", stored)
    assert not verify_password("wrong", stored)


def test_hashes_from_other_bcrypt_implementations_verify():
    # $2a$ is what the Node.js bcrypt libraries write
    stored = bcrypt.hashpw(b"admin123", bcrypt.gensalt(rounds=4, prefix=b"2a")).decode()
    assert stored.startswith("$2a$")
    assert verify_password("admin123", stored)
    assert not verify_password("admin124", stored)


@pytest.mark.parametrize(
    "stored",
    [None, "", "not-a-hash", "pbkdf2_sha256$abc$salt$digest", "$2b$04$short"],
)
def test_malformed_hash_never_verifies(stored):
    assert verify_password("s3cret", stored) is False


def test_login_with_malformed_stored_hash_is_unauthorized(client, database):
    with database.session() as db:
        db.scalar(select(Employee).where(Employee.employee_code == "CASH001")).password_hash = "pbkdf2_sha256$x$y$z"
        db.commit()
    r = client.post("/api/auth/login", json={"employeeCode": "CASH001", "password": "cashier123"})
    assert r.status_code == 401
    assert r.json()["code"] == "UNAUTHORIZED"


def test_permission_wildcards():
    assert has_permission(["*"], "orders.update")
    assert has_permission(["orders.*"], "orders.update")
    assert has_permission(["orders.update"], "orders.update")
    assert not has_permission(["orders.view"], "orders.update")
    assert not has_permission(["inventory.*"], "orders.update")


def test_login_and_me(client):
    r = client.post("/api/auth/login", json={"employeeCode": "ADMIN001", "password": "admin123"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["tokenType"] == "bearer"
    assert body["user"]["role"] == "Admin"
    assert body["user"]["permissions"] == ["*"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["employeeCode"] == "ADMIN001"


def test_wrong_password(client):
    r = client.post("/api/auth/login", json={"employeeCode": "ADMIN001", "password": "nope"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid credentials", "code": "UNAUTHORIZED"}


def test_protected_routes_need_a_token(client):
    for path in ("/api/inventory", "/api/inventory/alerts", "/api/orders", "/api/auth/me"):
        r = client.get(path)
        assert r.status_code == 401, path
        assert r.json()["error"] == "No token provided"

    r = client.get("/api/inventory", headers={"Authorization": "Bearer made-up"})
    assert r.status_code == 401
    assert r.json()["error"] == "Invalid or expired token"


def test_expired_token(client, database, admin_headers):
    token = admin_headers["Authorization"].split(" ", 1)[1]
    with database.session() as db:
        db.get(AuthToken, token).expires_at = utcnow() - timedelta(minutes=1)
        db.commit()
    assert client.get("/api/auth/me", headers=admin_headers).status_code == 401


def test_cashier_cannot_update_orders(client, variant_ids, make_order, cashier_headers, admin_headers):
    order = client.post("/api/orders", json=make_order((variant_ids["BLT-BRN"], 1))).json()

    # reads are open to any employee
    assert client.get("/api/orders", headers=cashier_headers).status_code == 200

    r = client.patch(f"/api/orders/{order['orderId']}/status", json={"status": "confirmed"}, headers=cashier_headers)
    assert r.status_code == 403
    assert r.json() == {"error": "Insufficient permissions", "code": "FORBIDDEN"}

    r = client.put("/api/settings/low_stock_threshold", json={"value": 3}, headers=cashier_headers)
    assert r.status_code == 403

    r = client.patch(f"/api/orders/{order['orderId']}/status", json={"status": "confirmed"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "confirmed"
    assert r.json()["processedBy"] == "System"


def test_login_prunes_expired_tokens(client, database, admin_headers):
    token = admin_headers["Authorization"].split(" ", 1)[1]
    with database.session() as db:
        db.get(AuthToken, token).expires_at = utcnow() - timedelta(minutes=1)
        db.commit()

    r = client.post("/api/auth/login", json={"employeeCode": "ADMIN001", "password": "admin123"})
    assert r.status_code == 200

    with database.session() as db:
        assert db.get(AuthToken, token) is None
        assert db.scalar(select(func.count()).select_from(AuthToken)) == 1
