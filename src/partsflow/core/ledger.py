"""
Stock ledger: applies purchase and sale line items to product quantities.

Both operations are pure. They take the current product collection and
return a new one; the caller's list and the products inside it are never
modified, so a rejected transaction leaves nothing to roll back. Saving the
result is the caller's job.

Invariants:
- A purchase adds each line's quantity and sets unit_cost to the line cost.
  When a product appears on several lines, the last line's cost wins.
- A sale is validated for every product before anything is deducted, using
  the quantity requested across all lines for that product.
- No accepted transaction leaves a product with negative quantity.
"""

from collections import OrderedDict
from dataclasses import replace
from typing import Dict, Iterable, List, Sequence

from partsflow.core.exceptions import InsufficientStock, UnknownProductError, ValidationError
from partsflow.models import LineItem, Product
from partsflow.utils.logger import get_logger

logger = get_logger(__name__)

def transaction_total(lines: Iterable[LineItem]) -> float:
    """Total of a transaction as stored on the record."""
    return sum(line.line_total for line in lines)

def requested_by_product(lines: Iterable[LineItem]) -> "OrderedDict[str, int]":
    """Sum line quantities per product id, keeping first-seen order."""
    totals: "OrderedDict[str, int]" = OrderedDict()
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
    return totals

def _require_lines(lines: Sequence[LineItem]) -> None:
    if not lines:
        raise ValidationError("Please add at least one item")

def apply_purchase(
    products: Sequence[Product],
    lines: Sequence[LineItem],
    strict: bool = False
) -> List[Product]:
    """
    Add purchased quantities to stock and record the latest unit cost.

    Args:
        products: Current product collection
        lines: Purchase line items, amount is the unit cost
        strict: Reject lines for unknown products instead of skipping them

    Returns:
        New product collection in the original order
    """
    _require_lines(lines)

    by_id: Dict[str, Product] = {p.id: p for p in products}
    unknown = [pid for pid in requested_by_product(lines) if pid not in by_id]
    if unknown:
        if strict:
            raise UnknownProductError(unknown)
        logger.warning(f"⚠️  Purchase lines for unknown products skipped: {unknown}")

    updated = dict(by_id)
    for line in lines:
        current = updated.get(line.product_id)
        if current is None:
            continue
        updated[line.product_id] = replace(
            current,
            quantity=current.quantity + line.quantity,
            unit_cost=line.amount
        )

    return [updated[p.id] for p in products]

def check_sale(products: Sequence[Product], lines: Sequence[LineItem]) -> None:
    """
    Validate a sale against current stock without changing anything.

    Raises:
        ValidationError: No lines were given
        InsufficientStock: First product whose total requested quantity
            exceeds what is on hand; unknown products have nothing on hand
    """
    _require_lines(lines)

    by_id: Dict[str, Product] = {p.id: p for p in products}
    for product_id, requested in requested_by_product(lines).items():
        product = by_id.get(product_id)
        available = product.quantity if product else 0
        if requested > available:
            raise InsufficientStock(
                product_id,
                available,
                requested,
                product_name=product.name if product else None
            )

def apply_sale(products: Sequence[Product], lines: Sequence[LineItem]) -> List[Product]:
    """
    Deduct sold quantities from stock, all or nothing.

    The line price is not written back to the product's selling price.

    Returns:
        New product collection in the original order
    """
    check_sale(products, lines)

    requested = requested_by_product(lines)
    return [
        replace(p, quantity=p.quantity - requested[p.id]) if p.id in requested else p
        for p in products
    ]
