"""
csgeom exceptions.

Error code ranges:
- C0xx: construction errors (bad parameters, bad boundary spelling)
- C1xx: point location errors
- C2xx: ray tracing errors
- C3xx: configuration errors

Construction errors are raised.  Location and tracing errors are normally
carried as values (``LocateResult.error``, ``TraceEvent.error``) and only
raised by the convenience wrappers that ask for it.

Copyright (c) 2025 Richard DeVaul
MIT License
"""

from typing import Optional


class CsgError(Exception):
    """Base exception for csgeom errors."""

    code: str = "C000"

    def __init__(self, message: str, code: Optional[str] = None):
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidParameterError(CsgError, ValueError):
    """Malformed surface, region, cell or box parameters (C001)."""
    code = "C001"


class UnresolvedBoundaryTagError(CsgError, ValueError):
    """Unrecognized boundary condition spelling (C002)."""
    code = "C002"


class CellNotFoundError(CsgError):
    """No cell contains the point (C101)."""
    code = "C101"


class AmbiguousCellError(CsgError):
    """More than one cell contains the point (C102)."""
    code = "C102"


class NoIntersectionError(CsgError):
    """No surface of the current cell is crossed by the ray (C201)."""
    code = "C201"


class SettingsError(CsgError, ValueError):
    """Invalid settings file or value (C301)."""
    code = "C301"


__all__ = [
    'CsgError',
    'InvalidParameterError',
    'UnresolvedBoundaryTagError',
    'CellNotFoundError',
    'AmbiguousCellError',
    'NoIntersectionError',
    'SettingsError',
]
