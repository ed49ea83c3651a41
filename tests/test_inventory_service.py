from datetime import date

import pytest

from partsflow.config.settings import CatalogConfig
from partsflow.core.exceptions import (
    ConfirmationDeclined,
    InsufficientStock,
    StoreError,
    UnknownProductError,
    ValidationError,
)
from partsflow.core.inventory_service import InventoryService
from partsflow.db.core import RecordStore
from partsflow.db.repository import JsonFileRepository

from conftest import line


PRODUCT_FORM = {
    "name": "Linear Actuator",
    "brand": "Festo",
    "model": "DNC-32",
    "category": "Actuators",
    "quantity": "4",
    "min_stock": "2",
    "unit_cost": "55.5",
    "selling_price": "80",
    "specs": "32mm bore",
}


def test_add_product_normalizes_form(service, store):
    product = service.add_product(PRODUCT_FORM)

    assert product.quantity == 4
    assert product.unit_cost == 55.5
    assert store.get_product(product.id) == product
    assert len(store.products()) == 4


def test_add_product_requires_fields(service, store):
    with pytest.raises(ValidationError, match="brand"):
        service.add_product({**PRODUCT_FORM, "brand": "  "})

    assert len(store.products()) == 3


def test_add_product_rejects_unknown_category(service):
    with pytest.raises(ValidationError, match="Unknown category"):
        service.add_product({**PRODUCT_FORM, "category": "Hydraulics"})


def test_add_product_rejects_negative_stock(service):
    with pytest.raises(ValidationError, match="negative"):
        service.add_product({**PRODUCT_FORM, "quantity": -3})


def test_update_product_keeps_id(service, store):
    updated = service.update_product("p2", {**PRODUCT_FORM, "name": "PLC S7 v2", "category": "PLCs"})

    assert updated.id == "p2"
    assert store.get_product("p2").name == "PLC S7 v2"
    assert [p.id for p in store.products()] == ["p1", "p2", "p3"]


def test_update_unknown_product(service):
    with pytest.raises(UnknownProductError):
        service.update_product("nope", PRODUCT_FORM)


def test_delete_requires_confirmation(service, store):
    with pytest.raises(ConfirmationDeclined):
        service.delete_product("p1", confirm=lambda: False)

    assert store.get_product("p1") is not None

    service.delete_product("p1", confirm=lambda: True)
    assert store.get_product("p1") is None


def test_record_purchase_updates_stock_and_cost(service, store):
    purchase = service.record_purchase("2026-10-05", "ABC Electronics",
                                       [line("p1", 5, 90.0), line("p3", 10, 18.0)])

    assert purchase.total == 5 * 90.0 + 10 * 18.0
    assert purchase.date == date(2026, 10, 5)
    assert store.get_product("p1").quantity == 15
    assert store.get_product("p1").unit_cost == 90.0
    assert store.get_product("p3").quantity == 10
    assert store.purchases() == [purchase]


def test_record_purchase_defaults_date_to_today(service):
    purchase = service.record_purchase(None, "ABC Electronics", [line("p1", 1, 1.0)])

    assert purchase.date == date.today()


def test_strict_purchase_saves_nothing(store):
    service = InventoryService(store, CatalogConfig(strict_purchases=True))

    with pytest.raises(UnknownProductError):
        service.record_purchase("2026-10-05", "ABC Electronics", [line("p1", 5, 90.0), line("ghost", 1, 1.0)])

    assert store.get_product("p1").quantity == 10
    assert store.purchases() == []


def test_record_purchase_validation(service, store):
    with pytest.raises(ValidationError, match="at least one item"):
        service.record_purchase("2026-10-05", "ABC Electronics", [])
    with pytest.raises(ValidationError, match="Supplier is required"):
        service.record_purchase("2026-10-05", "", [line("p1", 1, 1.0)])
    with pytest.raises(ValidationError, match="Invalid date"):
        service.record_purchase("not a date", "ABC Electronics", [line("p1", 1, 1.0)])

    assert store.purchases() == []


def test_record_sale_deducts_stock(service, store):
    sale = service.record_sale("2026-10-06", "Acme Manufacturing", [line("p1", 10, 150.0)])

    assert sale.total == 1500.0
    assert store.get_product("p1").quantity == 0
    assert store.get_product("p1").selling_price == 150.0
    assert store.sales() == [sale]
    assert "p1" in [p.id for p in service.dashboard(date(2026, 10, 19)).low_stock]


def test_rejected_sale_leaves_store_untouched(service, store, repository):
    before = repository.load("products")

    with pytest.raises(InsufficientStock):
        service.record_sale("2026-10-06", "Acme Manufacturing", [line("p1", 6, 150.0), line("p1", 5, 150.0)])

    assert repository.load("products") == before
    assert store.sales() == []


def test_unreadable_sales_file_leaves_stock_untouched(tmp_path, products):
    store = RecordStore(JsonFileRepository(str(tmp_path / "store")))
    store.save_products(products)
    (tmp_path / "store" / "sales.json").write_text("{not json")
    service = InventoryService(store, CatalogConfig())

    with pytest.raises(StoreError):
        service.record_sale("2026-10-06", "Acme Manufacturing", [line("p1", 4, 1.0)])

    assert store.get_product("p1").quantity == 10


def test_unreadable_purchases_file_leaves_stock_untouched(tmp_path, products):
    store = RecordStore(JsonFileRepository(str(tmp_path / "store")))
    store.save_products(products)
    (tmp_path / "store" / "purchases.json").write_text("[{")
    service = InventoryService(store, CatalogConfig())

    with pytest.raises(StoreError):
        service.record_purchase("2026-10-06", "ABC Electronics", [line("p1", 4, 1.0)])

    assert store.get_product("p1").quantity == 10
    assert store.get_product("p1").unit_cost == 100.0


def test_party_must_come_from_pick_list(service, store):
    with pytest.raises(ValidationError, match="Unknown supplier 'Nobody Ltd.'"):
        service.record_purchase("2026-10-05", "Nobody Ltd.", [line("p1", 1, 1.0)])
    with pytest.raises(ValidationError, match="Unknown customer"):
        service.record_sale("2026-10-05", "Walk-in", [line("p1", 1, 1.0)])

    assert store.get_product("p1").quantity == 10
    assert store.purchases() == []
    assert store.sales() == []


def test_empty_pick_list_accepts_any_party(store):
    service = InventoryService(store, CatalogConfig(customers=[]))

    sale = service.record_sale("2026-10-05", "Walk-in", [line("p1", 1, 150.0)])

    assert store.sales() == [sale]


def test_default_price_is_catalog_selling_price(service):
    assert service.default_price("p2") == 320.0
    assert service.default_price("gone") == 0.0


def test_deleted_product_leaves_history(service, store):
    service.record_sale("2026-10-06", "Acme Manufacturing", [line("p2", 1, 320.0)])
    service.delete_product("p2", confirm=lambda: True)

    assert store.sales()[0].items[0].product_id == "p2"
    assert store.get_product("p2") is None


def test_search_products(service):
    assert [p.id for p in service.search_products("yaskawa")] == ["p1"]
    assert [p.id for p in service.search_products(category="Sensors")] == ["p3"]
