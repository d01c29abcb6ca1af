"""
Exception Definitions - Custom exceptions for Rule Agent
========================================================

This module defines the custom exceptions used throughout the application.
Soft failures of the responder itself (an unparseable calculation, a
division by zero) are ordinary replies and never show up here.
"""


class RuleAgentError(Exception):
    """
    Base exception for all Rule Agent errors.

    Attributes:
        message (str): Human-readable error description
        details (dict): Additional error details for debugging
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            details: Optional dictionary with additional error context
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return formatted error message with details if present."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigError(RuleAgentError):
    """
    Configuration-related errors.

    Raised when there are issues with:
    - Unreadable or unparseable configuration files
    - Invalid configuration values
    - Unknown timezone names
    """
    pass


class RuleError(RuleAgentError):
    """
    Rules engine errors.

    Raised when a rule set is assembled incorrectly, for example
    a duplicate rule name or a reference to a missing template.
    """
    pass


class TransportError(RuleAgentError):
    """
    Chat surface transport errors.

    Raised when the chat surface cannot obtain a reply from the
    endpoint: connection failures, non-success status codes or a
    payload without a ``response`` field.

    Attributes:
        status_code (int): HTTP status returned by the endpoint, if any
    """

    def __init__(self, message: str, status_code: int = 0, details: dict = None):
        self.status_code = status_code
        super().__init__(message, details)
