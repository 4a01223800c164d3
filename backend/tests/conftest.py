from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import models.product  # noqa: F401  registers the products table
from database import Base, Gateway, create_db_engine
from main import app
from repositories.products import ProductRepository, get_product_repository
from schemas.product import ProductRecord
from utils.notifications import ProductNotifier, get_notifier


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def gateway(engine):
    return Gateway(sessionmaker(autocommit=False, autoflush=False, bind=engine))


@pytest.fixture
def repository(gateway):
    return ProductRepository(gateway)


@pytest.fixture
def notifier():
    return ProductNotifier(queue_size=8)


@pytest.fixture
def client(repository, notifier):
    app.dependency_overrides[get_product_repository] = lambda: repository
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_product():
    def _make(**overrides) -> ProductRecord:
        data = {
            "manufacturer": "Acme",
            "sku": "ACM-001",
            "upc": "012345678905",
            "price_per_unit": Decimal("12.50"),
            "quantity_on_hand": 5,
            "product_name": "Blue Widget",
        }
        data.update(overrides)
        return ProductRecord(**data)
    return _make
