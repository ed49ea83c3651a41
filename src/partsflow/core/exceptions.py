from typing import Iterable


class PartsFlowError(Exception):
    """Base exception for PartsFlow Hub."""
    pass

class ValidationError(PartsFlowError):
    """Raised when form or transaction input fails validation."""
    pass

class InsufficientStock(PartsFlowError):
    """Raised when a sale asks for more units than a product has on hand."""

    def __init__(self, product_id: str, available: int, requested: int, product_name: str = None):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        self.product_name = product_name
        label = product_name or product_id
        super().__init__(
            f"Insufficient stock for {label}. Available: {available}, Required: {requested}"
        )

class UnknownProductError(PartsFlowError):
    """Raised when an operation references product ids that are not in the catalog."""

    def __init__(self, product_ids: Iterable[str]):
        self.product_ids = list(product_ids)
        super().__init__(f"Unknown product id(s): {', '.join(self.product_ids)}")

class ConfirmationDeclined(PartsFlowError):
    """Raised when a destructive operation is not confirmed."""
    pass

class SessionRequiredError(PartsFlowError):
    """Raised when a protected command runs without an active session."""
    pass

class StoreError(PartsFlowError):
    """Raised when the record store cannot be read or written."""
    pass

class ConfigError(PartsFlowError):
    """Raised when configuration is invalid."""
    pass

class FileProcessingError(PartsFlowError):
    """Raised when an import file cannot be processed."""
    pass
