"""
Expenses app services layer.

Services contain business logic and orchestrate operations across models.
"""

from .exceptions import (
    ExpensesServiceError,
    ExpenseNotFoundError,
    InvalidExpenseError,
    ExpensePermissionError,
)

from .expense_management import (
    create_expense,
    get_expense,
    update_expense,
    delete_expense,
    expense_categories,
    filter_expenses,
    expense_summary,
)


__all__ = [
    # Exceptions
    'ExpensesServiceError',
    'ExpenseNotFoundError',
    'InvalidExpenseError',
    'ExpensePermissionError',

    # Expense Management
    'create_expense',
    'get_expense',
    'update_expense',
    'delete_expense',
    'expense_categories',
    'filter_expenses',
    'expense_summary',
]
