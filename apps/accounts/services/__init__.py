"""Services for accounts business logic."""

from .exceptions import (
    AccountsServiceError,
    UserRegistrationError,
    InvalidCredentialsError,
    InactiveAccountError,
    UserNotFoundError,
    CannotDeactivateSelfError,
    NoBranchAssignedError,
)
from .user_authentication import authenticate_user, issue_tokens
from .user_management import (
    create_staff_user,
    update_user,
    deactivate_user,
    require_branch,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'UserRegistrationError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'UserNotFoundError',
    'CannotDeactivateSelfError',
    'NoBranchAssignedError',
    # Services
    'authenticate_user',
    'issue_tokens',
    'create_staff_user',
    'update_user',
    'deactivate_user',
    'require_branch',
]
