from .config import Settings, get_settings, settings
from .error_handlers import AvailabilityConflictError, register_exception_handlers

__all__ = [
    "AvailabilityConflictError",
    "Settings",
    "get_settings",
    "register_exception_handlers",
    "settings",
]
