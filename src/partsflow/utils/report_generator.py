from typing import Any, Dict, Sequence
from datetime import datetime
from pathlib import Path
import pandas as pd

from partsflow.core.aggregation import (
    DashboardMetrics,
    FieldSpec,
    csv_rows,
    inventory_value,
    low_stock_items,
    total_amount,
)
from partsflow.core.exceptions import ValidationError
from partsflow.utils.logger import get_logger

logger = get_logger(__name__)

INVENTORY_FIELDS: Dict[str, FieldSpec] = {
    "Name": "name",
    "Brand": "brand",
    "Model": "model",
    "Category": "category",
    "Current Stock": "quantity",
    "Min Stock": "min_stock",
    "Unit Cost": "unit_cost",
    "Selling Price": "selling_price",
    "Stock Value": lambda p: f"{p.quantity * p.unit_cost:.2f}",
}

SALES_FIELDS: Dict[str, FieldSpec] = {
    "Date": lambda s: s.date.isoformat(),
    "Customer": "customer",
    "Items Count": "items_count",
    "Total": lambda s: f"{s.total:.2f}",
}

PURCHASES_FIELDS: Dict[str, FieldSpec] = {
    "Date": lambda p: p.date.isoformat(),
    "Supplier": "supplier",
    "Items Count": "items_count",
    "Total": lambda p: f"{p.total:.2f}",
}

REPORTS = {
    "inventory": ("inventory-report", INVENTORY_FIELDS),
    "sales": ("sales-report", SALES_FIELDS),
    "purchases": ("purchases-report", PURCHASES_FIELDS),
}

def build_report_frame(records: Sequence[Any], field_map: Dict[str, FieldSpec]) -> pd.DataFrame:
    """Project records into a DataFrame with one column per field_map entry."""
    header, *rows = csv_rows(records, field_map)
    return pd.DataFrame(rows, columns=header)

def export_csv(records: Sequence[Any], field_map: Dict[str, FieldSpec], output_path: str) -> Path:
    """
    Write records to a CSV file.

    Fields containing separators, quotes or newlines are quoted by pandas.

    Raises:
        ValidationError: There is nothing to export
    """
    if not records:
        raise ValidationError("No data to export")

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = build_report_frame(records, field_map)
    df.to_csv(path, index=False)

    logger.info(f"📄 Exported {len(df):,} rows to {path}")
    return path

def report_summary(kind: str, records: Sequence[Any]) -> Dict[str, str]:
    """Headline figures over the records selected for a report."""
    if kind == "inventory":
        return {
            "Products": f"{len(records):,}",
            "Total inventory value": f"${inventory_value(records):,.2f}",
            "Low stock items": f"{len(low_stock_items(records)):,}",
        }

    label = "Total sales" if kind == "sales" else "Total purchases"
    return {
        "Transactions": f"{len(records):,}",
        label: f"${total_amount(records):,.2f}",
    }

def generate_dashboard_report(metrics: DashboardMetrics, output_path: str) -> None:
    """Write the dashboard figures as a plain-text report."""

    logger.info(f"📄 Generating dashboard report: {output_path}")

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(render_dashboard(metrics))

    logger.info("✅ Report generated successfully")

def render_dashboard(metrics: DashboardMetrics) -> str:
    lines = [
        "PARTSFLOW HUB - DASHBOARD",
        "=" * 60,
        f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"As of: {metrics.as_of.isoformat()}" if metrics.as_of else "As of: N/A",
        "",
        "STOCK",
        "-" * 30,
        f"Total products: {metrics.total_products:,}",
        f"Total stock: {metrics.total_stock:,}",
        f"Low stock items: {metrics.low_stock_count:,}",
        "",
        "SALES & PURCHASES",
        "-" * 30,
        f"Total sales: ${metrics.total_sales:,.2f}",
        f"Total purchases: ${metrics.total_purchases:,.2f}",
        f"This month's sales: ${metrics.monthly_sales:,.2f}",
        f"This month's purchases: ${metrics.monthly_purchases:,.2f}",
    ]

    if metrics.low_stock:
        lines += ["", "LOW STOCK ALERTS", "-" * 30]
        lines += [f"{p.label}: {p.quantity} / {p.min_stock} min" for p in metrics.low_stock]

    if metrics.recent_sales:
        lines += ["", "RECENT SALES", "-" * 30]
        lines += [f"{s.date.isoformat()}  {s.customer}  ${s.total:,.2f}" for s in metrics.recent_sales]

    if metrics.recent_purchases:
        lines += ["", "RECENT PURCHASES", "-" * 30]
        lines += [f"{p.date.isoformat()}  {p.supplier}  ${p.total:,.2f}" for p in metrics.recent_purchases]

    return "\n".join(lines) + "\n"
