"""Custom exceptions for drivelog"""

from typing import List, Optional


class DriveLogError(Exception):
    """Base exception for drivelog"""
    pass


class StorageError(DriveLogError):
    """I/O or encode/decode failure on a record that must not silently degrade"""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class ValidationError(DriveLogError):
    """Caller-supplied data rejected before it reaches storage"""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        self.errors = list(errors) if errors else [message]
        super().__init__(message)


class NotFoundError(DriveLogError):
    """Requested entity does not exist (service layer only; stores return None)"""
    pass


class AuthenticationError(DriveLogError):
    """Invalid credentials"""
    pass


class LastAdminError(DriveLogError):
    """Deleting the account would leave no administrator"""
    pass


class ConfigError(DriveLogError):
    """Configuration error"""
    pass
