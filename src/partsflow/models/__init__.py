from partsflow.models.product import Product
from partsflow.models.transaction import LineItem, Purchase, Sale

__all__ = ['Product', 'LineItem', 'Purchase', 'Sale']
