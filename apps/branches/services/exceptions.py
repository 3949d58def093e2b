"""
Domain exceptions for the branches service layer.
"""


class BranchServiceError(Exception):
    """Base exception for branch service errors."""
    pass


class BranchNotFoundError(BranchServiceError):
    """Branch does not exist."""
    pass


class DuplicateBranchError(BranchServiceError):
    """Another branch already uses this name."""
    pass


class InvalidBusinessHoursError(BranchServiceError):
    """Closing time is not after opening time."""
    pass


class BranchPermissionError(BranchServiceError):
    """User may not change this branch's settings."""
    pass


class InvalidBranchSettingsError(BranchServiceError):
    """Branch settings values are invalid."""
    pass
