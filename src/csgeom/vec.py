"""Coordinate and ray value types for csgeom.

``Coord`` is an immutable XYZ triple and ``Ray`` an origin plus a unit
direction.  Vector operations are small free functions rather than
operator overloads.

Copyright (c) 2025 Richard DeVaul
MIT License
"""

from __future__ import annotations

from dataclasses import dataclass
from math import isfinite, sqrt
from typing import Iterator, Sequence

## constants
epsilon = 1e-9


@dataclass(frozen=True)
class Coord:
    """An ``{x, y, z}`` coordinate or direction."""

    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __getitem__(self, i: int) -> float:
        return (self.x, self.y, self.z)[i]

    def isfinite(self) -> bool:
        return isfinite(self.x) and isfinite(self.y) and isfinite(self.z)


@dataclass(frozen=True)
class Ray:
    """A ray defined by its origin and a unitized direction vector.

    The unit-length direction is a caller contract; use ``Ray.checked`` to
    have it verified.
    """

    origin: Coord
    direction: Coord

    @classmethod
    def checked(cls, origin: Coord, direction: Coord, tol: float = epsilon) -> "Ray":
        """Build a ray, raising ``InvalidParameterError`` on a non-unit direction."""
        from csgeom.errors import InvalidParameterError

        if not isunit(direction, tol):
            raise InvalidParameterError(
                f"ray direction must be unit length, got |d| = {mag(direction)!r}")
        return cls(origin, direction)

    def at(self, t: float) -> Coord:
        """Point reached after travelling distance ``t`` along the ray."""
        return add(self.origin, scale3(self.direction, t))


def coord(v: Sequence[float]) -> Coord:
    """Convenience function for making a ``Coord`` from any XYZ sequence."""
    if isinstance(v, Coord):
        return v
    if len(v) < 3:
        raise ValueError("coordinate needs three components")
    return Coord(float(v[0]), float(v[1]), float(v[2]))


## R^3 -> R^3 functions
## --------------------

def add(a: Coord, b: Coord) -> Coord:
    """``a + b``"""
    return Coord(a.x + b.x, a.y + b.y, a.z + b.z)


def sub(a: Coord, b: Coord) -> Coord:
    """``a - b``"""
    return Coord(a.x - b.x, a.y - b.y, a.z - b.z)


def scale3(a: Coord, c: float) -> Coord:
    """vector ``a`` times scalar ``c``"""
    return Coord(a.x * c, a.y * c, a.z * c)


def cross(a: Coord, b: Coord) -> Coord:
    """``a x b``"""
    return Coord(a.y * b.z - a.z * b.y,
                 a.z * b.x - a.x * b.z,
                 a.x * b.y - a.y * b.x)


def unitize(a: Coord) -> Coord:
    """Return ``a`` scaled to unit length.

    Raises ``ValueError`` for a zero-length vector.
    """
    m = mag(a)
    if m < epsilon:
        raise ValueError("cannot unitize a zero-length vector")
    return scale3(a, 1.0 / m)


def reject(a: Coord, n: Coord) -> Coord:
    """Component of ``a`` perpendicular to the unit vector ``n``."""
    return sub(a, scale3(n, dot(a, n)))


def reflect_direction(d: Coord, n: Coord) -> Coord:
    """Mirror direction ``d`` about the unit normal ``n``: ``d - 2(d.n)n``."""
    return sub(d, scale3(n, 2.0 * dot(d, n)))


## R^3 -> R functions
## ------------------

def dot(a: Coord, b: Coord) -> float:
    """``a . b``"""
    return a.x * b.x + a.y * b.y + a.z * b.z


def mag2(a: Coord) -> float:
    """squared magnitude of ``a``"""
    return a.x * a.x + a.y * a.y + a.z * a.z


def mag(a: Coord) -> float:
    """magnitude of ``a``"""
    return sqrt(mag2(a))


# alias kept for the original package's spelling
magnitude = mag


def dist(a: Coord, b: Coord) -> float:
    """euclidean distance between points ``a`` and ``b``"""
    return mag(sub(a, b))


## predicates
## ----------

def close(a: float, b: float, tol: float = epsilon) -> bool:
    """are two scalars the same within ``tol``"""
    return abs(a - b) < tol


def vclose(a: Coord, b: Coord, tol: float = epsilon) -> bool:
    """are two vectors the same within ``tol``"""
    return dist(a, b) < tol


def isunit(a: Coord, tol: float = epsilon) -> bool:
    """is ``a`` unit length within ``tol``"""
    return abs(mag(a) - 1.0) <= tol


ORIGIN = Coord(0.0, 0.0, 0.0)
XAXIS = Coord(1.0, 0.0, 0.0)
YAXIS = Coord(0.0, 1.0, 0.0)
ZAXIS = Coord(0.0, 0.0, 1.0)


__all__ = [
    'Coord', 'Ray', 'coord', 'epsilon',
    'add', 'sub', 'scale3', 'cross', 'unitize', 'reject', 'reflect_direction',
    'dot', 'mag2', 'mag', 'magnitude', 'dist',
    'close', 'vclose', 'isunit',
    'ORIGIN', 'XAXIS', 'YAXIS', 'ZAXIS',
]
