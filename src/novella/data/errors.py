"""Custom exceptions for story loading."""


class DataError(Exception):
    """Base exception for the data layer."""


class DataLoadError(DataError):
    """Raised when a story module is missing or fails to import."""


class DataValidationError(DataError):
    """Raised when a story module does not expose a usable story document."""
