import os
import tempfile

# must be set before dairycart reads its settings
_db_dir = tempfile.mkdtemp(prefix="dairycart-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'dairycart.db')}"
os.environ["WEBHOOK_ASYNC_DISPATCH"] = "true"

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from dairycart.db import models  # noqa: E402,F401
from dairycart.db.base import Base  # noqa: E402
from dairycart.db.session import SessionLocal, engine  # noqa: E402
from dairycart.db.storer import Storer  # noqa: E402
from dairycart.main import create_app  # noqa: E402
from dairycart.services import webhook_service  # noqa: E402


@pytest.fixture(autouse=True)
def schema():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def storer():
    return Storer()


@pytest.fixture
def webhook_task(monkeypatch):
    """Capture webhook deliveries instead of sending them to a broker."""
    task = MagicMock()
    monkeypatch.setattr(webhook_service, "dispatch_webhook_async", task)
    return task


@pytest.fixture
def client(webhook_task):
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def product_payload():
    return {
        "name": "T-Shirt",
        "subtitle": "A plain cotton tee",
        "description": "Soft and breathable",
        "sku": "t-shirt",
        "upc": "012345678905",
        "manufacturer": "Dairycart Apparel",
        "brand": "Dairycart",
        "quantity": 100,
        "quantity_per_package": 1,
        "taxable": True,
        "price": 12.5,
        "on_sale": False,
        "sale_price": 10.0,
        "cost": 5.0,
        "product_weight": 0.2,
        "product_height": 1,
        "product_width": 20,
        "product_length": 30,
        "package_weight": 0.25,
        "package_height": 2,
        "package_width": 22,
        "package_length": 32,
        "options": [
            {"name": "Size", "values": ["small", "medium", "large"]},
            {"name": "Color", "values": ["red", "green", "blue"]},
        ],
    }
