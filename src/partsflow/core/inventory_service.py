from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence

from partsflow.config.settings import CatalogConfig
from partsflow.core import aggregation, ledger
from partsflow.core.exceptions import (
    ConfirmationDeclined,
    InsufficientStock,
    UnknownProductError,
    ValidationError,
)
from partsflow.db.core import PURCHASES, SALES, RecordStore
from partsflow.models import LineItem, Product, Purchase, Sale
from partsflow.utils.field_normalizer import FieldNormalizer
from partsflow.utils.helpers import generate_id, today
from partsflow.utils.logger import get_logger

PRODUCT_REQUIRED_FIELDS = ['name', 'brand', 'model', 'category']

class InventoryService:
    """
    Catalog edits and stock transactions over a record store.

    Every mutating call loads the current collections, applies the change in
    memory and saves before returning. A rejected call saves nothing.
    """

    def __init__(self, store: RecordStore, config: Optional[CatalogConfig] = None):
        self.store = store
        self.config = config or CatalogConfig()
        self.logger = get_logger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def product_from_form(self, product_id: str, form: Dict[str, Any]) -> Product:
        missing = [name for name in PRODUCT_REQUIRED_FIELDS
                   if not FieldNormalizer.normalize_string(form.get(name))]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

        category = FieldNormalizer.normalize_string(form.get('category'))
        if self.config.categories and category not in self.config.categories:
            raise ValidationError(
                f"Unknown category '{category}'. Choose one of: {', '.join(self.config.categories)}"
            )

        try:
            return Product(
                id=product_id,
                name=FieldNormalizer.normalize_string(form.get('name')),
                brand=FieldNormalizer.normalize_string(form.get('brand')),
                model=FieldNormalizer.normalize_string(form.get('model')),
                category=category,
                quantity=FieldNormalizer.parse_integer(form.get('quantity')),
                min_stock=FieldNormalizer.parse_integer(form.get('min_stock')),
                unit_cost=FieldNormalizer.parse_numeric(form.get('unit_cost')),
                selling_price=FieldNormalizer.parse_numeric(form.get('selling_price')),
                specs=FieldNormalizer.normalize_string(form.get('specs'))
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def add_product(self, form: Dict[str, Any]) -> Product:
        product = self.product_from_form(generate_id(), form)
        products = self.store.products()
        products.append(product)
        self.store.save_products(products)
        self.logger.info(f"➕ Added product {product.id}: {product.label}")
        return product

    def add_products(self, new_products: Sequence[Product]) -> int:
        """Append already-validated products in a single save."""
        if not new_products:
            return 0
        products = self.store.products()
        products.extend(new_products)
        self.store.save_products(products)
        self.logger.info(f"➕ Added {len(new_products):,} products")
        return len(new_products)

    def update_product(self, product_id: str, form: Dict[str, Any]) -> Product:
        """Replace every field of a product except its id."""
        products = self.store.products()
        index = next((i for i, p in enumerate(products) if p.id == product_id), None)
        if index is None:
            raise UnknownProductError([product_id])

        updated = self.product_from_form(product_id, form)
        products[index] = updated
        self.store.save_products(products)
        self.logger.info(f"✏️  Updated product {product_id}")
        return updated

    def delete_product(self, product_id: str, confirm: Callable[[], bool]) -> Product:
        """
        Remove a product after interactive confirmation.

        Historical purchases and sales keep their references to it.
        """
        products = self.store.products()
        product = next((p for p in products if p.id == product_id), None)
        if product is None:
            raise UnknownProductError([product_id])

        if not confirm():
            self.logger.info(f"Delete of {product_id} cancelled")
            raise ConfirmationDeclined(f"Delete of '{product.name}' was not confirmed")

        self.store.save_products([p for p in products if p.id != product_id])
        self.logger.info(f"🗑️  Deleted product {product_id}: {product.label}")
        return product

    def search_products(self, search: Optional[str] = None, category: Optional[str] = None) -> List[Product]:
        return aggregation.filter_products(self.store.products(), search, category)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def _validate_header(self, when: Any, party: str, party_label: str, choices: Sequence[str]) -> date:
        party = FieldNormalizer.normalize_string(party)
        if not party:
            raise ValidationError(f"{party_label} is required")
        if choices and party not in choices:
            raise ValidationError(
                f"Unknown {party_label.lower()} '{party}'. Choose one of: {', '.join(choices)}"
            )
        parsed = FieldNormalizer.parse_date(when, default_date=today() if when in (None, "") else None)
        if parsed is None:
            raise ValidationError(f"Invalid date: {when}")
        return parsed

    def record_purchase(self, when: Any, supplier: str, lines: Sequence[LineItem]) -> Purchase:
        """Add stock from a supplier invoice and store the purchase."""
        purchase_date = self._validate_header(when, supplier, "Supplier", self.config.suppliers)
        if not lines:
            raise ValidationError("Please add at least one item")

        products = self.store.products()
        purchases = self.store.purchases()
        updated = ledger.apply_purchase(products, lines, strict=self.config.strict_purchases)

        purchase = Purchase(
            id=generate_id(),
            date=purchase_date,
            supplier=supplier.strip(),
            items=tuple(lines),
            total=ledger.transaction_total(lines)
        )
        purchases.append(purchase)

        self.store.save_products(updated)
        self.store.save(PURCHASES, purchases)
        self.logger.info(f"📥 Purchase {purchase.id} from {purchase.supplier}: "
                         f"{len(lines)} line(s), total {purchase.total:.2f}")
        return purchase

    def record_sale(self, when: Any, customer: str, lines: Sequence[LineItem]) -> Sale:
        """Deduct sold stock and store the sale, or reject it whole."""
        sale_date = self._validate_header(when, customer, "Customer", self.config.customers)
        if not lines:
            raise ValidationError("Please add at least one item")

        products = self.store.products()
        sales = self.store.sales()
        try:
            updated = ledger.apply_sale(products, lines)
        except InsufficientStock as e:
            self.logger.warning(f"⚠️  Sale rejected: {e}")
            raise

        sale = Sale(
            id=generate_id(),
            date=sale_date,
            customer=customer.strip(),
            items=tuple(lines),
            total=ledger.transaction_total(lines)
        )
        sales.append(sale)

        self.store.save_products(updated)
        self.store.save(SALES, sales)
        self.logger.info(f"📤 Sale {sale.id} to {sale.customer}: "
                         f"{len(lines)} line(s), total {sale.total:.2f}")
        return sale

    def default_price(self, product_id: str) -> float:
        """Catalog selling price, used to pre-fill a sale line."""
        product = self.store.get_product(product_id)
        return product.selling_price if product else 0.0

    def dashboard(self, as_of: Optional[date] = None) -> aggregation.DashboardMetrics:
        return aggregation.dashboard_metrics(
            self.store.products(),
            self.store.purchases(),
            self.store.sales(),
            as_of or today(),
            limit=self.config.dashboard_limit
        )
