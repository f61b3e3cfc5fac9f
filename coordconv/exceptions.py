"""
Custom exception classes for the application.
"""

class BaseCustomException(Exception):
    """Base class for custom exceptions in this application."""
    pass

class ValidationError(BaseCustomException, ValueError):
    """Raised when a latitude/longitude is non-finite or out of range, or when batch inputs disagree in length."""
    pass

class ConfigError(BaseCustomException, ValueError):
    """Raised when an unrecognized coordinate system or map provider tag is supplied."""
    pass
