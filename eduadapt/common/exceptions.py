"""
Common Exception Classes

This module defines the exceptions raised by the adaptive assessment engine.
Every failure here is a caller-side data problem: the engine performs no I/O,
so nothing is retried internally and nothing is swallowed.
"""

from typing import Optional, Any


class BaseError(Exception):
    """Base class for all engine exceptions."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            original_exception: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception


class InvalidInputError(BaseError):
    """
    Raised when a caller supplies malformed input.

    Examples are an allocation fraction outside [0, 1], a negative
    requested count or an unknown difficulty tier.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize the invalid input error.

        Args:
            message: Error message
            field: Name of the offending argument or field
        """
        super().__init__(f"Invalid input: {message}")
        self.field = field


class NotFoundError(BaseError):
    """Raised when an id the caller was expected to resolve does not exist."""

    def __init__(self, resource_type: str, resource_id: Any):
        """
        Initialize the not found error.

        Args:
            resource_type: Type of resource that wasn't found
            resource_id: ID of the resource that wasn't found
        """
        super().__init__(f"{resource_type} with ID {resource_id} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConfigurationError(BaseError):
    """Raised when a configuration file or value is invalid."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: The configuration key that caused the error
        """
        super().__init__(f"Configuration error: {message}")
        self.config_key = config_key
