"""Boundary conditions applied when a ray crosses a surface.

Copyright (c) 2025 Richard DeVaul
MIT License
"""

from enum import Enum

from csgeom.errors import UnresolvedBoundaryTagError


class BoundaryCondition(Enum):
    """What happens to a ray crossing a surface."""
    TRANSMISSION = "transmission"
    VACUUM = "vacuum"
    REFLECTIVE = "reflective"

    @property
    def is_terminal(self) -> bool:
        return self is BoundaryCondition.VACUUM


def parse_boundary(text) -> BoundaryCondition:
    """Resolve a boundary condition spelling.

    Accepts ``"transmission"``, ``"vacuum"`` and ``"reflective"`` in any case
    (surrounding whitespace ignored), or an existing ``BoundaryCondition``.
    Anything else raises ``UnresolvedBoundaryTagError``; there is no default.
    """
    if isinstance(text, BoundaryCondition):
        return text
    if not isinstance(text, str):
        raise UnresolvedBoundaryTagError(
            f"boundary condition must be a string, got {type(text).__name__}")
    try:
        return BoundaryCondition(text.strip().lower())
    except ValueError:
        choices = ", ".join(repr(b.value) for b in BoundaryCondition)
        raise UnresolvedBoundaryTagError(
            f"unknown boundary condition {text!r} (expected one of {choices})") from None


__all__ = ['BoundaryCondition', 'parse_boundary']
