import copy
import logging

import pytest

from partsflow.core import ledger
from partsflow.core.aggregation import low_stock_items
from partsflow.core.exceptions import InsufficientStock, UnknownProductError, ValidationError

from conftest import line, make_product


def quantities(products):
    return {p.id: p.quantity for p in products}


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------


def test_purchase_adds_quantities_per_product(products):
    lines = [line("p1", 4, 90.0), line("p2", 2, 240.0), line("p1", 1, 95.0)]

    updated = ledger.apply_purchase(products, lines)

    assert quantities(updated) == {"p1": 15, "p2": 5, "p3": 0}


def test_purchase_last_line_cost_wins(products):
    lines = [line("p1", 1, 80.0), line("p1", 1, 120.0)]

    updated = ledger.apply_purchase(products, lines)

    assert updated[0].unit_cost == 120.0
    assert updated[1].unit_cost == products[1].unit_cost


def test_purchase_does_not_touch_input(products):
    before = copy.deepcopy(products)

    ledger.apply_purchase(products, [line("p1", 5, 10.0)])

    assert products == before


def test_purchase_skips_unknown_products(products, caplog):
    caplog.set_level(logging.WARNING)

    updated = ledger.apply_purchase(products, [line("ghost", 5, 10.0), line("p3", 2, 21.0)])

    assert quantities(updated) == {"p1": 10, "p2": 3, "p3": 2}
    assert [p.id for p in updated] == ["p1", "p2", "p3"]
    assert "ghost" in caplog.text


def test_strict_purchase_rejects_unknown_products(products):
    with pytest.raises(UnknownProductError) as exc:
        ledger.apply_purchase(products, [line("p1", 1, 1.0), line("ghost", 1, 1.0)], strict=True)

    assert exc.value.product_ids == ["ghost"]


def test_purchase_requires_lines(products):
    with pytest.raises(ValidationError):
        ledger.apply_purchase(products, [])


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------


def test_sale_of_entire_stock_reaches_zero_and_low_stock():
    products = [make_product("p1", quantity=10, min_stock=5)]

    updated = ledger.apply_sale(products, [line("p1", 10, 150.0)])

    assert updated[0].quantity == 0
    assert [p.id for p in low_stock_items(updated)] == ["p1"]


def test_oversell_is_rejected_and_stock_unchanged():
    products = [make_product("p1", quantity=10, min_stock=5)]
    before = copy.deepcopy(products)

    with pytest.raises(InsufficientStock) as exc:
        ledger.apply_sale(products, [line("p1", 11, 150.0)])

    assert exc.value.product_id == "p1"
    assert exc.value.available == 10
    assert exc.value.requested == 11
    assert products == before


def test_sale_checks_quantity_summed_across_lines():
    products = [make_product("p1", quantity=10)]

    with pytest.raises(InsufficientStock) as exc:
        ledger.apply_sale(products, [line("p1", 6, 150.0), line("p1", 5, 150.0)])

    assert exc.value.available == 10
    assert exc.value.requested == 11
    assert products[0].quantity == 10


def test_sale_deducts_repeated_lines_together():
    products = [make_product("p1", quantity=10)]

    updated = ledger.apply_sale(products, [line("p1", 6, 150.0), line("p1", 4, 140.0)])

    assert updated[0].quantity == 0


def test_sale_rejects_whole_transaction_when_one_line_short(products):
    before = copy.deepcopy(products)

    with pytest.raises(InsufficientStock) as exc:
        ledger.apply_sale(products, [line("p1", 2, 150.0), line("p2", 4, 300.0)])

    assert exc.value.product_id == "p2"
    assert products == before


def test_sale_of_unknown_product_has_nothing_available(products):
    with pytest.raises(InsufficientStock) as exc:
        ledger.apply_sale(products, [line("ghost", 1, 1.0)])

    assert exc.value.available == 0
    assert exc.value.requested == 1


def test_sale_does_not_change_selling_price(products):
    updated = ledger.apply_sale(products, [line("p1", 1, 999.0)])

    assert updated[0].selling_price == products[0].selling_price
    assert updated[0].unit_cost == products[0].unit_cost


@pytest.mark.parametrize("requests", [
    [("p1", 10)],
    [("p1", 3), ("p2", 3)],
    [("p2", 1), ("p2", 1), ("p2", 1), ("p1", 9)],
])
def test_accepted_sales_never_go_negative(products, requests):
    lines = [line(pid, qty, 1.0) for pid, qty in requests]

    updated = ledger.apply_sale(products, lines)

    assert all(p.quantity >= 0 for p in updated)
    assert sum(p.quantity for p in products) - sum(p.quantity for p in updated) == sum(q for _, q in requests)


def test_insufficient_stock_message_names_product():
    products = [make_product("p1", quantity=2, name="Servo 400W")]

    with pytest.raises(InsufficientStock, match="Servo 400W. Available: 2, Required: 3"):
        ledger.apply_sale(products, [line("p1", 3)])


def test_transaction_total():
    assert ledger.transaction_total([line("p1", 2, 12.5), line("p2", 3, 10.0)]) == 55.0
