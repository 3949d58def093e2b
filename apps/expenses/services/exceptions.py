"""Domain-specific exceptions for expenses services."""


class ExpensesServiceError(Exception):
    """Base exception for expenses services."""
    pass


class ExpenseNotFoundError(ExpensesServiceError):
    """Raised when an expense does not exist in the user's branch."""
    pass


class InvalidExpenseError(ExpensesServiceError):
    """Raised when expense data is invalid."""
    pass


class ExpensePermissionError(ExpensesServiceError):
    """Raised when the user may not change an expense."""
    pass
