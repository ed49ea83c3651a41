"""
PartsFlow Hub - command line shell
Inventory, purchases, sales and reports for industrial components
"""

import argparse
import math
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from partsflow.config.settings import ApplicationConfig, load_config
from partsflow.core.exceptions import PartsFlowError, ValidationError
from partsflow.core.inventory_service import InventoryService
from partsflow.core.session import SessionGate
from partsflow.db.core import PRODUCTS, PURCHASES, SALES, RecordStore
from partsflow.db.repository import JsonFileRepository, Repository
from partsflow.importers.catalog_importer import CatalogImporter
from partsflow.models import LineItem, Product
from partsflow.utils.helpers import product_label
from partsflow.utils.logger import setup_logging, get_logger
from partsflow.utils.report_generator import (
    REPORTS,
    build_report_frame,
    export_csv,
    generate_dashboard_report,
    render_dashboard,
    report_summary,
)

logger = get_logger(__name__)

PRODUCT_FIELDS = {
    "ID": "id",
    "Name": "name",
    "Brand": "brand",
    "Model": "model",
    "Category": "category",
    "Stock": "quantity",
    "Min": "min_stock",
    "Unit Cost": "unit_cost",
    "Price": "selling_price",
    "Status": lambda p: "Low Stock" if p.is_low_stock else "In Stock",
}

class PartsFlowApp:
    """Wires configuration, storage, session and services together."""

    def __init__(self, config: ApplicationConfig, repository: Optional[Repository] = None):
        self.config = config
        self.repository = repository or JsonFileRepository(config.storage.data_dir)
        self.store = RecordStore(self.repository)
        self.session = SessionGate(self.repository)
        self.service = InventoryService(self.store, config.catalog)

        logger.debug(f"PartsFlow Hub initialized with store at {config.storage.data_dir}")

    def parse_lines(self, specs: List[str], default_price: bool = False) -> List[LineItem]:
        """Parse ``ID:QTY:AMOUNT`` item arguments.

        For sales the amount may be left out and defaults to the product's
        catalog selling price.
        """
        lines = []
        for spec in specs or []:
            parts = spec.split(":")
            if len(parts) == 2 and default_price:
                parts.append(None)
            if len(parts) != 3:
                raise ValidationError(f"Item '{spec}' must look like PRODUCT_ID:QTY:AMOUNT")

            product_id, qty_raw, amount_raw = parts
            try:
                quantity = int(qty_raw.strip())
            except ValueError as e:
                raise ValidationError(f"Item '{spec}': quantity must be a whole number") from e

            if amount_raw is None:
                amount = self.service.default_price(product_id)
            else:
                try:
                    amount = float(amount_raw.strip())
                except ValueError as e:
                    raise ValidationError(f"Item '{spec}': amount must be a number") from e
                if not math.isfinite(amount):
                    raise ValidationError(f"Item '{spec}': amount must be a number")

            try:
                lines.append(LineItem(product_id=product_id.strip(), quantity=quantity, amount=amount))
            except ValueError as e:
                raise ValidationError(f"Item '{spec}': {e}") from e
        return lines

    @staticmethod
    def describe_items(transaction, products_by_id: Dict[str, Product]) -> str:
        return "; ".join(
            f"{product_label(products_by_id, item.product_id)} x{item.quantity}"
            for item in transaction.items
        )

    def report_records(self, kind: str, args) -> list:
        """Records selected by the report filters, in stored order."""
        filters = []
        if kind == "inventory":
            if args.category:
                filters.append({"field": "category", "value": args.category})
            return self.store.list_records(PRODUCTS, {"filters": filters})

        # Date bounds are inclusive
        if args.start:
            filters.append({"field": "date", "operator": "gte", "value": args.start})
        if args.end:
            filters.append({"field": "date", "operator": "lte", "value": args.end})
        if kind == "sales":
            collection, party_field, party = SALES, "customer", args.customer
        else:
            collection, party_field, party = PURCHASES, "supplier", args.supplier
        if party:
            filters.append({"field": party_field, "value": party})
        return self.store.list_records(collection, {"filters": filters})


def print_frame(df: pd.DataFrame, empty_message: str) -> None:
    if df.empty:
        print(empty_message)
    else:
        print(df.to_string(index=False))


def cmd_login(app: PartsFlowApp, args) -> int:
    app.session.login()
    print("Logged in.")
    return 0

def cmd_logout(app: PartsFlowApp, args) -> int:
    app.session.logout()
    print("Logged out.")
    return 0

def _product_form(args) -> Dict[str, object]:
    return {
        'name': args.name,
        'brand': args.brand,
        'model': args.model,
        'category': args.category,
        'quantity': args.quantity,
        'min_stock': args.min_stock,
        'unit_cost': args.unit_cost,
        'selling_price': args.selling_price,
        'specs': args.specs,
    }

def cmd_products(app: PartsFlowApp, args) -> int:
    service = app.service

    if args.action == "list":
        products = service.search_products(args.search, args.category)
        print_frame(build_report_frame(products, PRODUCT_FIELDS), "No products found.")

    elif args.action == "add":
        product = service.add_product(_product_form(args))
        print(f"Added {product.label} [{product.id}]")

    elif args.action == "edit":
        current = app.store.get_product(args.product_id)
        form = _product_form(args)
        if current is not None:
            # Unspecified options keep their current values
            defaults = current.__dict__
            form = {k: (v if v is not None else defaults[k]) for k, v in form.items()}
        product = service.update_product(args.product_id, form)
        print(f"Updated {product.label} [{product.id}]")

    elif args.action == "delete":
        def confirm() -> bool:
            if args.yes:
                return True
            answer = input(f"Are you sure you want to delete product {args.product_id}? [y/N] ")
            return answer.strip().lower() in ("y", "yes")

        product = service.delete_product(args.product_id, confirm)
        print(f"Deleted {product.label}")

    elif args.action == "import":
        stats = CatalogImporter(service).run_import(args.file)
        print(f"Imported {stats.successful_records:,} products "
              f"({stats.error_records:,} rejected, {stats.skipped_records:,} blank)")

    return 0

def _transaction_frame(app: PartsFlowApp, transactions, party_header: str, party_attr: str) -> pd.DataFrame:
    products_by_id = {p.id: p for p in app.store.products()}
    return build_report_frame(transactions, {
        "Date": lambda t: t.date.isoformat(),
        party_header: party_attr,
        "Items": lambda t: app.describe_items(t, products_by_id),
        "Total": lambda t: f"{t.total:.2f}",
    })

def cmd_purchases(app: PartsFlowApp, args) -> int:
    if args.action == "list":
        df = _transaction_frame(app, app.store.purchases(), "Supplier", "supplier")
        print_frame(df, "No purchases recorded.")
        return 0

    lines = app.parse_lines(args.item)
    purchase = app.service.record_purchase(args.date, args.supplier, lines)
    print(f"Recorded purchase {purchase.id}: total ${purchase.total:,.2f}")
    return 0

def cmd_sales(app: PartsFlowApp, args) -> int:
    if args.action == "list":
        df = _transaction_frame(app, app.store.sales(), "Customer", "customer")
        print_frame(df, "No sales recorded.")
        return 0

    lines = app.parse_lines(args.item, default_price=True)
    sale = app.service.record_sale(args.date, args.customer, lines)
    print(f"Recorded sale {sale.id}: total ${sale.total:,.2f}")
    return 0

def cmd_dashboard(app: PartsFlowApp, args) -> int:
    metrics = app.service.dashboard()
    print(render_dashboard(metrics), end="")
    if args.report:
        generate_dashboard_report(metrics, args.report)
    return 0

def cmd_report(app: PartsFlowApp, args) -> int:
    filename, field_map = REPORTS[args.kind]
    records = app.report_records(args.kind, args)
    output = args.output or str(Path(app.config.file_paths.export_dir) / f"{filename}.csv")
    path = export_csv(records, field_map, output)
    print(f"Wrote {len(records):,} rows to {path}")
    for label, value in report_summary(args.kind, records).items():
        print(f"{label}: {value}")
    return 0

COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "products": cmd_products,
    "purchases": cmd_purchases,
    "sales": cmd_sales,
    "dashboard": cmd_dashboard,
    "report": cmd_report,
}

def _add_product_options(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required)
    parser.add_argument("--brand", required=required)
    parser.add_argument("--model", required=required)
    parser.add_argument("--category", required=required)
    parser.add_argument("--quantity", type=int, default=0 if required else None)
    parser.add_argument("--min-stock", type=int, default=0 if required else None)
    parser.add_argument("--unit-cost", type=float, default=0.0 if required else None)
    parser.add_argument("--selling-price", type=float, default=0.0 if required else None)
    parser.add_argument("--specs", default="" if required else None)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="partsflow",
        description="PartsFlow Hub - Inventory management for industrial components",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  partsflow login
  partsflow products add --name "Servo 400W" --brand Yaskawa --model SGM7J-04A --category "Servo Motors" --min-stock 2
  partsflow purchases add --supplier "ABC Electronics" --item <product-id>:10:120.50
  partsflow sales add --customer "Acme Manufacturing" --item <product-id>:2
  partsflow report sales --start 2026-01-01 --end 2026-03-31
        """
    )

    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides configuration)"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("login", help="Start a session")
    sub.add_parser("logout", help="End the session")

    products = sub.add_parser("products", help="Manage the product catalog")
    product_actions = products.add_subparsers(dest="action", required=True)

    listing = product_actions.add_parser("list", help="List products")
    listing.add_argument("--search", help="Match name, brand or model")
    listing.add_argument("--category")

    _add_product_options(product_actions.add_parser("add", help="Add a product"), required=True)

    edit = product_actions.add_parser("edit", help="Edit a product")
    edit.add_argument("product_id")
    _add_product_options(edit, required=False)

    delete = product_actions.add_parser("delete", help="Delete a product")
    delete.add_argument("product_id")
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    importing = product_actions.add_parser("import", help="Import products from CSV or XLSX")
    importing.add_argument("file")

    purchases = sub.add_parser("purchases", help="Record and list purchases")
    purchase_actions = purchases.add_subparsers(dest="action", required=True)
    purchase_actions.add_parser("list", help="List purchases")
    add_purchase = purchase_actions.add_parser("add", help="Record a purchase")
    add_purchase.add_argument("--supplier", required=True)
    add_purchase.add_argument("--date", help="Purchase date (default: today)")
    add_purchase.add_argument("--item", action="append", metavar="ID:QTY:COST",
                              help="Line item, repeat for more lines")

    sales = sub.add_parser("sales", help="Record and list sales")
    sale_actions = sales.add_subparsers(dest="action", required=True)
    sale_actions.add_parser("list", help="List sales")
    add_sale = sale_actions.add_parser("add", help="Record a sale")
    add_sale.add_argument("--customer", required=True)
    add_sale.add_argument("--date", help="Sale date (default: today)")
    add_sale.add_argument("--item", action="append", metavar="ID:QTY[:PRICE]",
                          help="Line item, price defaults to the catalog selling price")

    dashboard = sub.add_parser("dashboard", help="Show dashboard figures")
    dashboard.add_argument("--report", help="Also write the dashboard to this file")

    report = sub.add_parser("report", help="Export a CSV report")
    report.add_argument("kind", choices=sorted(REPORTS))
    report.add_argument("--start", help="Start date (inclusive)")
    report.add_argument("--end", help="End date (inclusive)")
    report.add_argument("--category")
    report.add_argument("--customer")
    report.add_argument("--supplier")
    report.add_argument("--output", help="CSV path (default: export_dir/<kind>-report.csv)")

    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        setup_logging(
            config_path=config.logging.config_path,
            log_level=args.log_level or config.logging.level,
            log_dir=config.file_paths.log_dir
        )
        logger.debug(f"PartsFlow Hub starting at {datetime.now()}")

        app = PartsFlowApp(config)
        if args.command != "login":
            app.session.require()

        return COMMANDS[args.command](app, args)

    except PartsFlowError as e:
        logger.error(f"❌ {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

if __name__ == "__main__":
    sys.exit(main())
