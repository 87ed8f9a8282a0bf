"""Implicit analytic surfaces for csgeom.

Each surface is the zero set of a scalar function of position.  The sign of
that function splits space into two halfspaces, which is what regions and
cells are built from.

Surface types:
- Plane: infinite plane defined by a point and unit normal
- Sphere: sphere defined by center and radius
- Cone: single-nappe cone defined by tip, unit axis and half-angle
- InfCylinder: infinite cylinder defined by an axis point, unit axis
  direction and radius

The set is closed: ``Surface`` is the union of these four types, and the
module-level dispatchers (``implicit``, ``intersect``, ``normal_at``,
``halfspace``) accept exactly these.  Every surface provides:

- ``implicit(p)``: signed value, zero on the surface
- ``intersect(ray)``: lazy ascending sequence of positive crossing distances
- ``normal_at(p)``: unit gradient of ``implicit``, pointing into the
  positive halfspace
- ``boundary``: the ``BoundaryCondition`` applied by the tracer

Copyright (c) 2025 Richard DeVaul
MIT License
"""

from __future__ import annotations

from dataclasses import dataclass, field
from math import copysign, cos, isfinite, pi, sqrt
from typing import ClassVar, Iterator, Tuple, Union

from csgeom.boundary import BoundaryCondition
from csgeom.errors import InvalidParameterError
from csgeom.settings import DEFAULT_SETTINGS
from csgeom.vec import (Coord, Ray, XAXIS, YAXIS, ZAXIS, coord, dot, mag,
                        mag2, reflect_direction, reject, scale3, sub, unitize)

# leading coefficients below this are treated as zero
_DEGENERATE = 1e-14


# -----------------------------------------------------------------------------
# Shared helpers
# -----------------------------------------------------------------------------

def _solve_quadratic(a: float, b: float, c: float) -> Tuple[float, ...]:
    """Real roots of ``a t^2 + b t + c = 0`` in ascending order.

    A zero leading coefficient falls back to the linear solution.  A double
    root is returned once.
    """
    if abs(a) < _DEGENERATE:
        if abs(b) < _DEGENERATE:
            return ()
        return (-c / b,)
    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        return ()
    if disc == 0.0:
        return (-b / (2.0 * a),)
    # avoid cancellation between -b and sqrt(disc)
    q = -0.5 * (b + copysign(sqrt(disc), b))
    t1 = q / a
    t2 = c / q
    return (t1, t2) if t1 <= t2 else (t2, t1)


def _positive(roots) -> Iterator[float]:
    for t in roots:
        if t > 0.0:
            yield t


def _unit_or(v: Coord, fallback: Coord) -> Coord:
    if mag(v) < _DEGENERATE:
        return fallback
    return unitize(v)


def _as_coord(name: str, value) -> Coord:
    try:
        c = coord(value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"{name} must be a 3-vector: {exc}") from exc
    if not c.isfinite():
        raise InvalidParameterError(f"{name} must be finite, got {c}")
    return c


def _as_unit(name: str, value) -> Coord:
    c = _as_coord(name, value)
    if abs(mag(c) - 1.0) > DEFAULT_SETTINGS.unit_tol:
        raise InvalidParameterError(
            f"{name} must be unit length, got |{name}| = {mag(c)!r}; "
            "use csgeom.vec.unitize() to normalize it")
    return c


def _as_positive(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidParameterError(f"{name} must be a number, got {value!r}")
    if not isfinite(value) or value <= 0.0:
        raise InvalidParameterError(f"{name} must be positive and finite, got {value!r}")
    return float(value)


def _check_boundary(value) -> BoundaryCondition:
    if not isinstance(value, BoundaryCondition):
        raise InvalidParameterError(
            f"boundary must be a BoundaryCondition, got {value!r}; "
            "resolve spellings with csgeom.boundary.parse_boundary()")
    return value


def _init(obj, name, value):
    object.__setattr__(obj, name, value)


# -----------------------------------------------------------------------------
# Plane
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Plane:
    """Plane through ``point`` with unit ``normal``.

    ``implicit`` is the signed distance ``dot(p - point, normal)``, positive
    on the side the normal points to.
    """

    point: Coord
    normal: Coord
    boundary: BoundaryCondition = BoundaryCondition.TRANSMISSION

    kind: ClassVar[str] = 'plane'

    def __post_init__(self):
        _init(self, 'point', _as_coord('point', self.point))
        _init(self, 'normal', _as_unit('normal', self.normal))
        _check_boundary(self.boundary)

    def implicit(self, p: Coord) -> float:
        return dot(sub(p, self.point), self.normal)

    def intersect(self, ray: Ray) -> Iterator[float]:
        denom = dot(ray.direction, self.normal)
        if abs(denom) < _DEGENERATE:
            return
        t = dot(sub(self.point, ray.origin), self.normal) / denom
        if t > 0.0:
            yield t

    def normal_at(self, p: Coord) -> Coord:
        return self.normal


def x_plane(x0: float, boundary: BoundaryCondition = BoundaryCondition.TRANSMISSION) -> Plane:
    """Plane ``x = x0`` with normal +x."""
    return Plane(Coord(float(x0), 0.0, 0.0), XAXIS, boundary)


def y_plane(y0: float, boundary: BoundaryCondition = BoundaryCondition.TRANSMISSION) -> Plane:
    """Plane ``y = y0`` with normal +y."""
    return Plane(Coord(0.0, float(y0), 0.0), YAXIS, boundary)


def z_plane(z0: float, boundary: BoundaryCondition = BoundaryCondition.TRANSMISSION) -> Plane:
    """Plane ``z = z0`` with normal +z."""
    return Plane(Coord(0.0, 0.0, float(z0)), ZAXIS, boundary)


# -----------------------------------------------------------------------------
# Sphere
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Sphere:
    """Sphere of ``radius`` about ``center``; negative inside."""

    center: Coord
    radius: float
    boundary: BoundaryCondition = BoundaryCondition.TRANSMISSION

    kind: ClassVar[str] = 'sphere'

    def __post_init__(self):
        _init(self, 'center', _as_coord('center', self.center))
        _init(self, 'radius', _as_positive('radius', self.radius))
        _check_boundary(self.boundary)

    def implicit(self, p: Coord) -> float:
        return mag2(sub(p, self.center)) - self.radius * self.radius

    def intersect(self, ray: Ray) -> Iterator[float]:
        v = sub(ray.origin, self.center)
        d = ray.direction
        yield from _positive(_solve_quadratic(mag2(d), 2.0 * dot(v, d),
                                              mag2(v) - self.radius * self.radius))

    def normal_at(self, p: Coord) -> Coord:
        return _unit_or(sub(p, self.center), XAXIS)


# -----------------------------------------------------------------------------
# Cone
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Cone:
    """Cone with vertex ``tip``, unit ``axis`` and half-angle ``theta``.

    The quadratic cone equation describes two mirrored nappes; ``axis``
    selects the real one (following the axis from the tip leads inside it).
    ``implicit`` is ``h^2 - |v|^2 cos^2(theta)`` with ``v = p - tip`` and
    ``h = dot(v, axis)``, which is positive inside the cone.  On the mirrored
    side (``h < 0``) the value is ``-(h^2 + |v|^2 cos^2(theta))`` instead, so
    the mirrored nappe and its interior read as outside.
    """

    tip: Coord
    axis: Coord
    theta: float
    boundary: BoundaryCondition = BoundaryCondition.TRANSMISSION
    cos2: float = field(init=False, repr=False, compare=False)

    kind: ClassVar[str] = 'cone'

    def __post_init__(self):
        _init(self, 'tip', _as_coord('tip', self.tip))
        _init(self, 'axis', _as_unit('axis', self.axis))
        theta = self.theta
        if isinstance(theta, bool) or not isinstance(theta, (int, float)):
            raise InvalidParameterError(f"theta must be a number, got {theta!r}")
        if not 0.0 < theta < pi / 2:
            raise InvalidParameterError(f"theta must be in (0, pi/2), got {theta!r}")
        _init(self, 'theta', float(theta))
        _init(self, 'cos2', cos(theta) ** 2)
        _check_boundary(self.boundary)

    def implicit(self, p: Coord) -> float:
        v = sub(p, self.tip)
        h = dot(v, self.axis)
        f = h * h - mag2(v) * self.cos2
        if h < 0.0:
            return f - 2.0 * h * h
        return f

    def intersect(self, ray: Ray) -> Iterator[float]:
        v = sub(ray.origin, self.tip)
        d = ray.direction
        hv = dot(v, self.axis)
        hd = dot(d, self.axis)
        a = hd * hd - self.cos2 * mag2(d)
        b = 2.0 * (hd * hv - self.cos2 * dot(d, v))
        c = hv * hv - self.cos2 * mag2(v)
        for t in _positive(_solve_quadratic(a, b, c)):
            # drop roots on the mirrored nappe
            if hv + t * hd >= 0.0:
                yield t

    def normal_at(self, p: Coord) -> Coord:
        v = sub(p, self.tip)
        h = dot(v, self.axis)
        grad = sub(scale3(self.axis, 2.0 * h), scale3(v, 2.0 * self.cos2))
        return _unit_or(grad, self.axis)


# -----------------------------------------------------------------------------
# Infinite cylinder
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class InfCylinder:
    """Infinite cylinder of ``radius`` around the line through ``center``
    along unit ``normal``; negative inside.

    A finite cylinder is the intersection of an infinite cylinder and two
    planes.
    """

    center: Coord
    normal: Coord
    radius: float
    boundary: BoundaryCondition = BoundaryCondition.TRANSMISSION

    kind: ClassVar[str] = 'infcylinder'

    def __post_init__(self):
        _init(self, 'center', _as_coord('center', self.center))
        _init(self, 'normal', _as_unit('normal', self.normal))
        _init(self, 'radius', _as_positive('radius', self.radius))
        _check_boundary(self.boundary)

    def implicit(self, p: Coord) -> float:
        w = reject(sub(p, self.center), self.normal)
        return mag2(w) - self.radius * self.radius

    def intersect(self, ray: Ray) -> Iterator[float]:
        vp = reject(sub(ray.origin, self.center), self.normal)
        dp = reject(ray.direction, self.normal)
        a = mag2(dp)
        if a < _DEGENERATE:
            # parallel to the axis: never crosses
            return
        yield from _positive(_solve_quadratic(a, 2.0 * dot(vp, dp),
                                              mag2(vp) - self.radius * self.radius))

    def normal_at(self, p: Coord) -> Coord:
        w = reject(sub(p, self.center), self.normal)
        fallback = reject(XAXIS, self.normal)
        if mag(fallback) < 0.5:
            fallback = reject(YAXIS, self.normal)
        return _unit_or(w, unitize(fallback))


# -----------------------------------------------------------------------------
# Generic surface operations
# -----------------------------------------------------------------------------

Surface = Union[Plane, Sphere, Cone, InfCylinder]
SURFACE_TYPES = (Plane, Sphere, Cone, InfCylinder)


def is_surface(obj) -> bool:
    """Return True if obj is one of the supported surface types."""
    return isinstance(obj, SURFACE_TYPES)


def _require_surface(surf):
    if not is_surface(surf):
        raise ValueError(f"not a surface: {surf!r}")


def implicit(surf: Surface, p: Coord) -> float:
    """Evaluate the implicit function of ``surf`` at ``p``."""
    _require_surface(surf)
    return surf.implicit(p)


def intersect(surf: Surface, ray: Ray) -> Iterator[float]:
    """Positive distances along ``ray`` at which it crosses ``surf``."""
    _require_surface(surf)
    return surf.intersect(ray)


def normal_at(surf: Surface, p: Coord) -> Coord:
    """Unit gradient of ``surf``'s implicit function at ``p``."""
    _require_surface(surf)
    return surf.normal_at(p)


def halfspace(surf: Surface, p: Coord, tol: float = DEFAULT_SETTINGS.surface_tol) -> int:
    """Return +1 if ``p`` lies in the positive halfspace of ``surf``, else -1.

    Values in ``[-tol, 0)`` count as positive, so every point has exactly one
    halfspace.
    """
    return 1 if implicit(surf, p) >= -tol else -1


def reflect(ray: Ray, surf: Surface, p: Coord) -> Ray:
    """Reflect ``ray`` off ``surf`` at ``p``; the new ray starts at ``p``."""
    n = normal_at(surf, p)
    return Ray(p, reflect_direction(ray.direction, n))


__all__ = [
    'Plane', 'Sphere', 'Cone', 'InfCylinder',
    'Surface', 'SURFACE_TYPES',
    'x_plane', 'y_plane', 'z_plane',
    'is_surface', 'implicit', 'intersect', 'normal_at', 'halfspace', 'reflect',
]
