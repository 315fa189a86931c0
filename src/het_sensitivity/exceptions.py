"""
Custom exceptions for the het-sensitivity estimator.

Every error raised by the library derives from ``HetSensitivityError`` so
callers can catch the whole family at once.
"""


class HetSensitivityError(Exception):
    """Base exception for het-sensitivity errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


class InvalidInputError(HetSensitivityError):
    """Raised when a distribution, sample size or threshold list is malformed."""
    pass


class ConfigurationError(HetSensitivityError):
    """Raised when configuration is invalid."""
    pass


class EstimationCancelledError(HetSensitivityError):
    """Raised when an estimation is cancelled through its token."""
    pass
