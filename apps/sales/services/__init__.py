"""
Sales app services layer.

Services contain business logic and orchestrate operations across models.
"""

from .exceptions import (
    SalesServiceError,
    SaleNotFoundError,
    InvalidSaleError,
    SalePermissionError,
)

from .sale_management import (
    create_sale,
    get_sale,
    delete_sale,
    filter_sales,
    sales_summary,
)


__all__ = [
    # Exceptions
    'SalesServiceError',
    'SaleNotFoundError',
    'InvalidSaleError',
    'SalePermissionError',

    # Sale Management
    'create_sale',
    'get_sale',
    'delete_sale',
    'filter_sales',
    'sales_summary',
]
