from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from partsflow.models import Product, Purchase, Sale

Transaction = Union[Purchase, Sale]
FieldSpec = Union[str, Callable[[Any], Any]]

def total_stock(products: Sequence[Product]) -> int:
    return sum(p.quantity for p in products)

def low_stock_items(products: Sequence[Product]) -> List[Product]:
    """Products at or below their minimum stock threshold."""
    return [p for p in products if p.quantity <= p.min_stock]

def inventory_value(products: Sequence[Product]) -> float:
    return sum(p.quantity * p.unit_cost for p in products)

def total_amount(transactions: Sequence[Transaction]) -> float:
    return sum(t.total for t in transactions)

def monthly_total(transactions: Sequence[Transaction], month: int, year: int) -> float:
    """Sum of stored totals for transactions dated in ``month`` (1-12) of ``year``."""
    return sum(t.total for t in transactions if t.date.month == month and t.date.year == year)

def recent(transactions: Sequence[Transaction], limit: int = 5) -> List[Transaction]:
    """Last ``limit`` transactions by insertion order, newest first."""
    if limit <= 0:
        return []
    return list(reversed(transactions[-limit:]))

def filter_products(
    products: Sequence[Product],
    search: Optional[str] = None,
    category: Optional[str] = None
) -> List[Product]:
    """Case-insensitive search over name, brand and model, plus category match."""
    term = (search or "").lower()
    return [
        p for p in products
        if (term in p.name.lower() or term in p.brand.lower() or term in p.model.lower())
        and (not category or p.category == category)
    ]

def csv_rows(records: Sequence[Any], field_map: Dict[str, FieldSpec]) -> List[List[Any]]:
    """
    Header row plus one row per record.

    Args:
        records: Records to project
        field_map: Column header -> attribute name or callable taking the record

    Returns:
        List of rows, header first
    """
    header = list(field_map.keys())
    rows = [header]
    for record in records:
        row = []
        for spec in field_map.values():
            row.append(spec(record) if callable(spec) else getattr(record, spec))
        rows.append(row)
    return rows

@dataclass
class DashboardMetrics:
    """Figures shown on the dashboard."""
    total_products: int = 0
    total_stock: int = 0
    low_stock_count: int = 0
    low_stock: List[Product] = field(default_factory=list)
    total_sales: float = 0.0
    total_purchases: float = 0.0
    monthly_sales: float = 0.0
    monthly_purchases: float = 0.0
    recent_sales: List[Sale] = field(default_factory=list)
    recent_purchases: List[Purchase] = field(default_factory=list)
    as_of: Optional[date] = None

def dashboard_metrics(
    products: Sequence[Product],
    purchases: Sequence[Purchase],
    sales: Sequence[Sale],
    today: date,
    limit: int = 5
) -> DashboardMetrics:
    low = low_stock_items(products)
    return DashboardMetrics(
        total_products=len(products),
        total_stock=total_stock(products),
        low_stock_count=len(low),
        low_stock=low[:limit],
        total_sales=total_amount(sales),
        total_purchases=total_amount(purchases),
        monthly_sales=monthly_total(sales, today.month, today.year),
        monthly_purchases=monthly_total(purchases, today.month, today.year),
        recent_sales=recent(sales, limit),
        recent_purchases=recent(purchases, limit),
        as_of=today
    )
