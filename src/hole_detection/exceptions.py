"""
Custom exceptions for the depth hole detection package.

Provides a hierarchy of exceptions for the different failure modes of a
single-frame hole detection run: bad configuration, malformed inputs,
out-of-range grid addressing and degenerate geometry.
"""

from typing import Optional, Any


class HoleDetectionError(Exception):
    """Base exception for all hole detection errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} (Details: {details_str})"
        return self.message


class ConfigurationError(HoleDetectionError):
    """Raised when there are configuration-related errors."""
    pass


class ValidationError(HoleDetectionError):
    """Raised when input validation fails."""
    pass


class InvalidCoordinateError(HoleDetectionError):
    """Raised when a grid index or (col, row) pair cannot be addressed."""

    def __init__(self, message: str, col: Optional[int] = None,
                 row: Optional[int] = None, index: Optional[int] = None,
                 **kwargs: Any) -> None:
        details = kwargs
        if col is not None:
            details["col"] = col
        if row is not None:
            details["row"] = row
        if index is not None:
            details["index"] = index
        super().__init__(message, details)


class DegenerateGeometryError(HoleDetectionError):
    """Raised when a hull or containment test has too little geometry to work with."""
    pass


class MissingInputError(HoleDetectionError):
    """Raised when the plane model or the table hull is absent for a frame."""

    def __init__(self, message: str, input_name: Optional[str] = None,
                 **kwargs: Any) -> None:
        details = kwargs
        if input_name:
            details["input"] = input_name
        super().__init__(message, details)
