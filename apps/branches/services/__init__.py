"""
Branches app services layer.
"""

from .exceptions import (
    BranchServiceError,
    BranchNotFoundError,
    DuplicateBranchError,
    InvalidBusinessHoursError,
    BranchPermissionError,
    InvalidBranchSettingsError,
)

from .branch_management import (
    create_branch,
    update_branch,
    deactivate_branch,
    get_branch_by_id,
)

from .branch_settings import (
    get_branch_settings,
    receipt_settings,
    branch_currency,
    update_branch_settings,
)


__all__ = [
    # Exceptions
    'BranchServiceError',
    'BranchNotFoundError',
    'DuplicateBranchError',
    'InvalidBusinessHoursError',
    'BranchPermissionError',
    'InvalidBranchSettingsError',

    # Branch Management
    'create_branch',
    'update_branch',
    'deactivate_branch',
    'get_branch_by_id',

    # Branch Settings
    'get_branch_settings',
    'receipt_settings',
    'branch_currency',
    'update_branch_settings',
]
