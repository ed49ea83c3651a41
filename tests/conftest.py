import pytest

from partsflow.config.settings import CatalogConfig
from partsflow.core.inventory_service import InventoryService
from partsflow.db.core import RecordStore
from partsflow.db.repository import InMemoryRepository
from partsflow.models import LineItem, Product


def make_product(product_id="p1", quantity=10, min_stock=5, **overrides):
    values = dict(
        id=product_id,
        name=f"Servo {product_id}",
        brand="Yaskawa",
        model=f"SGM-{product_id}",
        category="Servo Motors",
        quantity=quantity,
        min_stock=min_stock,
        unit_cost=100.0,
        selling_price=150.0,
        specs="400W",
    )
    values.update(overrides)
    return Product(**values)


def line(product_id, quantity, amount=0.0):
    return LineItem(product_id=product_id, quantity=quantity, amount=amount)


@pytest.fixture(autouse=True)
def clear_partsflow_env(monkeypatch):
    for name in ("PARTSFLOW_DATA_DIR", "PARTSFLOW_EXPORT_DIR", "PARTSFLOW_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def products():
    return [
        make_product("p1", quantity=10, min_stock=5),
        make_product("p2", quantity=3, min_stock=1, name="PLC S7", brand="Siemens",
                     model="S7-1200", category="PLCs", unit_cost=250.0, selling_price=320.0),
        make_product("p3", quantity=0, min_stock=0, name="Proximity Sensor", brand="Omron",
                     model="E2E-X5", category="Sensors", unit_cost=20.0, selling_price=35.0),
    ]


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def store(repository, products):
    record_store = RecordStore(repository)
    record_store.save_products(products)
    return record_store


@pytest.fixture
def service(store):
    return InventoryService(store, CatalogConfig())
