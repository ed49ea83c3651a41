from datetime import date
from typing import Any, Callable, Dict, List, Optional

from partsflow.core.exceptions import StoreError, ValidationError
from partsflow.db.repository import Repository
from partsflow.models import Product, Purchase, Sale
from partsflow.utils.field_normalizer import FieldNormalizer
from partsflow.utils.logger import get_logger

PRODUCTS = 'products'
PURCHASES = 'purchases'
SALES = 'sales'
SESSION_FLAG = 'isLoggedIn'

class RecordStore:
    """Typed access to the products, purchases and sales collections.

    All reads go to the repository, so every call sees the latest saved
    state; there is no caching layer in between.
    """

    MODEL_MAP = {
        PRODUCTS: Product,
        PURCHASES: Purchase,
        SALES: Sale,
    }

    OPERATOR_MAP: Dict[str, Callable[[Any, Any], bool]] = {
        "eq": lambda col, val: col == val,
        "ne": lambda col, val: col != val,
        "lt": lambda col, val: col < val,
        "lte": lambda col, val: col <= val,
        "gt": lambda col, val: col > val,
        "gte": lambda col, val: col >= val,
        "contains": lambda col, val: val in col,
        "icontains": lambda col, val: str(val).lower() in str(col).lower(),
        "in": lambda col, val: col in (val if isinstance(val, (list, tuple, set)) else [val]),
    }

    def __init__(self, repository: Repository):
        self.repository = repository
        self.logger = get_logger(self.__class__.__name__)

    def get_model(self, collection: str):
        if not collection:
            raise StoreError("Collection name must be provided.")

        model = self.MODEL_MAP.get(collection)
        if not model:
            raise StoreError(f"Collection '{collection}' not found.")

        return model

    def load(self, collection: str) -> list:
        """Load and deserialize every record of a collection."""
        model = self.get_model(collection)
        raw = self.repository.load(collection)
        try:
            return [model.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error(f"❌ Invalid record in '{collection}': {e}")
            raise StoreError(f"Invalid record in '{collection}': {e}") from e

    def save(self, collection: str, records: list) -> None:
        self.get_model(collection)
        self.repository.save(collection, [record.to_dict() for record in records])
        self.logger.debug(f"Saved {len(records):,} {collection}")

    def products(self) -> List[Product]:
        return self.load(PRODUCTS)

    def purchases(self) -> List[Purchase]:
        return self.load(PURCHASES)

    def sales(self) -> List[Sale]:
        return self.load(SALES)

    def save_products(self, products: List[Product]) -> None:
        self.save(PRODUCTS, products)

    def get_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products() if p.id == product_id), None)

    def _coerce(self, model, field: str, value: Any) -> Any:
        # Query values arrive as strings from the command line
        model_field = model.__dataclass_fields__.get(field)
        if model_field is not None and model_field.type is date and isinstance(value, str):
            parsed = FieldNormalizer.parse_date(value)
            if parsed is None:
                raise ValidationError(f"Invalid date: {value}")
            return parsed
        return value

    def apply_query_filters(self, records: list, model, query: dict) -> list:
        filters = query.get("filters", [])
        condition_type = query.get("condition", "and").lower()
        limit = query.get("limit")

        checks = []

        for f in filters:
            field = f.get("field")
            op = f.get("operator", "eq")
            val = f.get("value")

            if not field or (field not in model.__dataclass_fields__ and not hasattr(model, field)):
                raise StoreError(f"'{field}' is not a valid field in '{model.__name__}'")

            if op not in self.OPERATOR_MAP:
                raise StoreError(f"Unsupported operator '{op}'")

            checks.append((field, self.OPERATOR_MAP[op], self._coerce(model, field, val)))

        def matches(record) -> bool:
            results = []
            for field, fn, val in checks:
                results.append(fn(getattr(record, field), val))
            if not results:
                return True
            return any(results) if condition_type == "or" else all(results)

        selected = [record for record in records if matches(record)]

        # Apply sorting, first key is the primary order
        sort = query.get("sort", {})
        if isinstance(sort, dict):
            for field, direction in reversed(list(sort.items())):
                if field not in model.__dataclass_fields__:
                    raise StoreError(f"Invalid sort field '{field}' for '{model.__name__}'")
                selected.sort(key=lambda r: getattr(r, field), reverse=direction == -1)

        if limit:
            selected = selected[:limit]

        return selected

    def list_records(self, collection: str, query: Optional[dict] = None) -> list:
        model = self.get_model(collection)
        return self.apply_query_filters(self.load(collection), model, query or {})
