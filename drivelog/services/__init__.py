from .admin_service import AdminService
from .auth_service import AuthService
from .bootstrap import InitResult, initialize
from .driving_log_service import DrivingLogService
from .profile_service import ProfileService

__all__ = [
    "AdminService",
    "AuthService",
    "DrivingLogService",
    "InitResult",
    "ProfileService",
    "initialize",
]
