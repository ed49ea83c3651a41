from dataclasses import dataclass
from typing import Dict, Any

@dataclass
class Product:
    """Catalog product with stock levels and pricing."""

    id: str
    name: str
    brand: str
    model: str
    category: str
    quantity: int = 0
    min_stock: int = 0
    unit_cost: float = 0.0
    selling_price: float = 0.0
    specs: str = ""

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.id:
            raise ValueError("id is required")
        if self.quantity < 0:
            raise ValueError("Quantity cannot be negative")
        if self.min_stock < 0:
            raise ValueError("Min stock cannot be negative")
        if self.unit_cost < 0:
            raise ValueError("Unit cost cannot be negative")
        if self.selling_price < 0:
            raise ValueError("Selling price cannot be negative")

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock

    @property
    def stock_value(self) -> float:
        return self.quantity * self.unit_cost

    @property
    def label(self) -> str:
        return f"{self.name} ({self.brand} - {self.model})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored JSON shape."""
        return {
            'id': self.id,
            'name': self.name,
            'brand': self.brand,
            'model': self.model,
            'category': self.category,
            'quantity': self.quantity,
            'minStock': self.min_stock,
            'unitCost': self.unit_cost,
            'sellingPrice': self.selling_price,
            'specs': self.specs
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        """Build a product from its stored JSON shape."""
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            brand=data.get('brand', ''),
            model=data.get('model', ''),
            category=data.get('category', ''),
            quantity=int(data.get('quantity', 0)),
            min_stock=int(data.get('minStock', 0)),
            unit_cost=float(data.get('unitCost', 0)),
            selling_price=float(data.get('sellingPrice', 0)),
            specs=data.get('specs', '')
        )
