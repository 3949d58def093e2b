"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class UserRegistrationError(AccountsServiceError):
    """Raised when creating a user account fails."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class UserNotFoundError(AccountsServiceError):
    """Raised when user does not exist."""
    pass


class CannotDeactivateSelfError(AccountsServiceError):
    """Raised when an admin tries to deactivate their own account."""
    pass


class NoBranchAssignedError(AccountsServiceError):
    """Raised when a branch-scoped operation is attempted without a branch."""
    pass
