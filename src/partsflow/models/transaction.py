from dataclasses import dataclass
from datetime import date
from typing import Dict, Any, Tuple, ClassVar

@dataclass(frozen=True)
class LineItem:
    """One product, quantity and unit amount inside a purchase or sale.

    ``amount`` is the unit cost on purchases and the unit price on sales.
    """

    product_id: str
    quantity: int
    amount: float

    def __post_init__(self):
        if not self.product_id:
            raise ValueError("productId is required")
        if self.quantity < 1:
            raise ValueError("Quantity must be at least 1")
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")

    @property
    def line_total(self) -> float:
        return self.quantity * self.amount

    def to_dict(self, amount_key: str) -> Dict[str, Any]:
        return {'productId': self.product_id, 'quantity': self.quantity, amount_key: self.amount}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], amount_key: str) -> "LineItem":
        return cls(
            product_id=str(data['productId']),
            quantity=int(data['quantity']),
            amount=float(data.get(amount_key, 0))
        )


@dataclass(frozen=True)
class _Transaction:
    """Shared shape of purchases and sales.

    The total is fixed when the record is created and is read back as stored;
    it is never recomputed from the line items.
    """

    AMOUNT_KEY: ClassVar[str] = 'amount'
    PARTY_KEY: ClassVar[str] = 'party'

    id: str
    date: date
    items: Tuple[LineItem, ...]
    total: float

    @property
    def party(self) -> str:
        return getattr(self, self.PARTY_KEY)

    @property
    def items_count(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date.isoformat(),
            self.PARTY_KEY: self.party,
            'items': [item.to_dict(self.AMOUNT_KEY) for item in self.items],
            'total': self.total
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        return cls(
            id=str(data['id']),
            date=date.fromisoformat(str(data['date'])[:10]),
            items=tuple(LineItem.from_dict(item, cls.AMOUNT_KEY) for item in data.get('items', [])),
            total=float(data.get('total', 0)),
            **{cls.PARTY_KEY: data.get(cls.PARTY_KEY, '')}
        )


@dataclass(frozen=True)
class Purchase(_Transaction):
    """Supplier invoice that adds stock."""

    AMOUNT_KEY: ClassVar[str] = 'cost'
    PARTY_KEY: ClassVar[str] = 'supplier'

    supplier: str = ''


@dataclass(frozen=True)
class Sale(_Transaction):
    """Customer sale that removes stock."""

    AMOUNT_KEY: ClassVar[str] = 'price'
    PARTY_KEY: ClassVar[str] = 'customer'

    customer: str = ''
