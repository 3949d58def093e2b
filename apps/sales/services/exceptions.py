"""Domain-specific exceptions for sales services."""


class SalesServiceError(Exception):
    """Base exception for sales services."""
    pass


class SaleNotFoundError(SalesServiceError):
    """Raised when a sale does not exist in the user's branch."""
    pass


class InvalidSaleError(SalesServiceError):
    """Raised when items, quantities or discount are invalid."""
    pass


class SalePermissionError(SalesServiceError):
    """Raised when the user may not change a sale."""
    pass
