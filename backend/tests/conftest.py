import os
import tempfile

# settings are read at import time, so point them at a scratch dir before app is imported
_TMP = tempfile.mkdtemp(prefix="bellakids-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["ADMIN_PASS"] = "magic123"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DEFAULT_LOCALE"] = "ar"
os.environ["DEFAULT_REGION"] = "wb"

import pytest
from fastapi.testclient import TestClient

from app.db import SessionLocal, init_db
from app.main import app
from app.repositories.product_repo import ProductRepository
from app.schemas.product_schema import ProductOut


@pytest.fixture(autouse=True, scope="session")
def setup_db():
    init_db(reset=True)
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    # fresh client per test so the cart cookie does not leak between tests
    return TestClient(app)


@pytest.fixture
def admin_headers(client):
    res = client.post("/api/login", json={"password": "magic123"})
    assert res.status_code == 200
    return {"Authorization": res.json()["token"]}


@pytest.fixture
def make_product(db):
    """Insert a product row and return its normalized schema."""

    def _make(**overrides) -> ProductOut:
        fields = {
            "name_en": "Floral Dress",
            "name_ar": "فستان مزهر",
            "category": "girls",
            "price": 50,
            "sizes": ["S", "M"],
            "colors": [],
            "images": [{"url": "dress.png", "variantId": "D1"}],
            "in_stock": True,
        }
        fields.update(overrides)
        p = ProductRepository(db).create(**fields)
        db.commit()
        return ProductOut.model_validate(p)

    return _make
