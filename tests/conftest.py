# tests/conftest.py
import shutil

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from shopfront.config import Settings
from shopfront.database import Database
from shopfront.main import create_app
from shopfront.models import Variant
from shopfront.seed import apply_seed


@pytest.fixture(scope="session")
def seeded_db_file(tmp_path_factory):
    # Hashing the seed passwords is slow, so seed once and copy the file per test.
    path = tmp_path_factory.mktemp("seed") / "seed.db"
    database = Database(f"sqlite:///{path}")
    database.create_all()
    with database.session() as db:
        apply_seed(db)
    database.dispose()
    return path


@pytest.fixture
def database(seeded_db_file, tmp_path):
    path = tmp_path / "shopfront.db"
    shutil.copy(seeded_db_file, path)
    database = Database(f"sqlite:///{path}")
    yield database
    database.dispose()


@pytest.fixture
def app(database):
    return create_app(Settings(database_url=database.url), database)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def variant_ids(database):
    with database.session() as db:
        return {v.sku: v.id for v in db.scalars(select(Variant))}


@pytest.fixture
def make_order():
    def _make(*items, name="Alice Example", phone="+1 555 0100"):
        return {
            "customerName": name,
            "customerPhone": phone,
            "items": [{"variantId": vid, "quantity": qty} for vid, qty in items],
        }

    return _make


def _login(client, code, password):
    r = client.post("/api/auth/login", json={"employeeCode": code, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['accessToken']}"}


@pytest.fixture
def admin_headers(client):
    return _login(client, "ADMIN001", "admin123")


@pytest.fixture
def cashier_headers(client):
    return _login(client, "CASH001", "cashier123")
