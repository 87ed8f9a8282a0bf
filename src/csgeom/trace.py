"""Ray tracing through a CSG geometry.

Starting in the cell that contains the ray origin (for an origin on a
surface, the cell the ray is heading into), the tracer repeatedly
finds the nearest surface of the current cell crossed by the ray and applies
that surface's boundary condition:

- vacuum: the trace ends at the crossing
- reflective: the direction is mirrored about the surface normal and the
  ray continues from the crossing point in the same cell
- transmission: the ray steps ``settings.bump`` past the crossing, the cell
  there is located, and tracing continues in it

Each step produces a ``TraceEvent``.  The last event of every trace has a
terminal status: VACUUM, MAX_DISTANCE or MAX_CROSSINGS for ordinary ends,
NO_INTERSECTION / NOT_FOUND / AMBIGUOUS / OUTSIDE_BOX for geometry errors.
Errors are reported in the event (``event.error``), not raised.

``Trace`` objects are restartable: iterating one again replays the trace
from the original ray.

Copyright (c) 2025 Richard DeVaul
MIT License
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from math import inf, isnan
from typing import Iterator, List, Optional

from csgeom.boundary import BoundaryCondition
from csgeom.cell import Cell
from csgeom.errors import CsgError, InvalidParameterError, NoIntersectionError
from csgeom.geometry import Geometry, LocateResult, LocateStatus
from csgeom.surfaces import Surface, reflect
from csgeom.vec import Coord, Ray, add, isunit, mag, scale3

logger = logging.getLogger(__name__)


class TraceStatus(Enum):
    TRANSMITTED = "transmitted"
    REFLECTED = "reflected"
    VACUUM = "vacuum"
    MAX_DISTANCE = "max_distance"
    MAX_CROSSINGS = "max_crossings"
    NO_INTERSECTION = "no_intersection"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    OUTSIDE_BOX = "outside_box"

    @property
    def is_terminal(self) -> bool:
        return self not in (TraceStatus.TRANSMITTED, TraceStatus.REFLECTED)

    @property
    def is_error(self) -> bool:
        return self in _ERROR_STATUSES


_ERROR_STATUSES = frozenset((
    TraceStatus.NO_INTERSECTION,
    TraceStatus.NOT_FOUND,
    TraceStatus.AMBIGUOUS,
    TraceStatus.OUTSIDE_BOX,
))

_LOCATE_TO_TRACE = {
    LocateStatus.NOT_FOUND: TraceStatus.NOT_FOUND,
    LocateStatus.AMBIGUOUS: TraceStatus.AMBIGUOUS,
    LocateStatus.OUTSIDE_BOX: TraceStatus.OUTSIDE_BOX,
}


@dataclass(frozen=True)
class Crossing:
    """Nearest surface crossed by a ray, and the distance to it."""
    surface: Surface
    distance: float


@dataclass(frozen=True)
class TraceEvent:
    """One step of a trace.

    ``distance`` is the path length from the original ray origin to
    ``position``.  ``cell`` is the cell the ray continues in (the new cell for
    a transmission, the same cell for a reflection) and None once the ray has
    left through a vacuum boundary or location failed.  ``direction`` is the
    direction of travel after the event.
    """

    status: TraceStatus
    surface: Optional[Surface]
    distance: float
    cell: Optional[Cell]
    position: Coord
    direction: Coord
    error: Optional[CsgError] = field(default=None, compare=False)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


def find_intersection(geometry: Geometry, ray: Ray, cell: Cell) -> Optional[Crossing]:
    """Nearest crossing of ``ray`` with the surfaces of ``cell``.

    Distances at or below ``geometry.settings.min_distance`` are skipped.  On
    a tie the surface declared first in the cell wins.  Returns None when no
    surface is crossed.
    """
    min_distance = geometry.settings.min_distance
    best = None
    for surf in cell.surfaces():
        for t in surf.intersect(ray):
            if t <= min_distance:
                continue
            if best is None or t < best.distance:
                best = Crossing(surf, t)
            # distances arrive in ascending order
            break
    return best


class Trace:
    """The sequence of events produced by tracing ``ray`` through ``geometry``.

    Iterating runs the trace; every iteration starts over from ``ray``.
    """

    def __init__(self, geometry: Geometry, ray: Ray,
                 current_cell: Optional[Cell] = None, max_distance: float = inf):
        if not isinstance(geometry, Geometry):
            raise InvalidParameterError(f"expected a Geometry, got {geometry!r}")
        if not isunit(ray.direction, geometry.settings.unit_tol):
            raise InvalidParameterError(
                f"ray direction must be unit length, got |d| = {mag(ray.direction)!r}")
        if isnan(max_distance) or max_distance <= 0:
            raise InvalidParameterError(f"max_distance must be positive, got {max_distance!r}")
        if current_cell is not None:
            try:
                geometry.index_of(current_cell)
            except ValueError:
                raise InvalidParameterError("current_cell is not a cell of this geometry") from None
        self.geometry = geometry
        self.ray = ray
        self.current_cell = current_cell
        self.max_distance = max_distance

    def __iter__(self) -> Iterator[TraceEvent]:
        return self._run()

    def events(self) -> List[TraceEvent]:
        return list(self)

    @property
    def final(self) -> TraceEvent:
        """Terminal event of the trace."""
        last = None
        for last in self:
            pass
        return last

    def _run(self) -> Iterator[TraceEvent]:
        geometry = self.geometry
        settings = geometry.settings
        max_distance = self.max_distance
        ray = self.ray

        cell = self.current_cell
        if cell is None:
            result = self._locate_start(geometry, ray)
            if not result.found:
                yield self._locate_failure(result, None, 0.0, ray)
                return
            cell = result.cell

        travelled = 0.0
        crossings = 0
        while True:
            if crossings >= settings.max_crossings:
                logger.debug("trace: stopping after %d crossings", crossings)
                yield TraceEvent(TraceStatus.MAX_CROSSINGS, None, travelled, cell,
                                 ray.origin, ray.direction)
                return

            crossing = find_intersection(geometry, ray, cell)
            if crossing is None:
                err = NoIntersectionError(
                    f"ray from {ray.origin} along {ray.direction} leaves cell {cell.label} "
                    "without crossing any of its surfaces")
                logger.warning("trace: %s", err)
                yield TraceEvent(TraceStatus.NO_INTERSECTION, None, travelled, cell,
                                 ray.origin, ray.direction, err)
                return

            if travelled + crossing.distance > max_distance:
                position = ray.at(max_distance - travelled)
                logger.debug("trace: max distance %g reached at %s", max_distance, position)
                yield TraceEvent(TraceStatus.MAX_DISTANCE, None, max_distance, cell,
                                 position, ray.direction)
                return

            crossings += 1
            surf = crossing.surface
            hit = ray.at(crossing.distance)
            travelled += crossing.distance

            if surf.boundary is BoundaryCondition.VACUUM:
                logger.debug("trace: vacuum boundary %s at %s, distance %g", surf.kind, hit, travelled)
                yield TraceEvent(TraceStatus.VACUUM, surf, travelled, None, hit, ray.direction)
                return

            if surf.boundary is BoundaryCondition.REFLECTIVE:
                ray = reflect(ray, surf, hit)
                logger.debug("trace: reflected off %s at %s, distance %g", surf.kind, hit, travelled)
                yield TraceEvent(TraceStatus.REFLECTED, surf, travelled, cell, hit, ray.direction)
                continue

            probe = add(hit, scale3(ray.direction, settings.bump))
            result = geometry.locate(probe)
            if not result.found:
                yield self._locate_failure(result, surf, travelled, Ray(hit, ray.direction))
                return
            cell = result.cell
            logger.debug("trace: crossed %s at %s into cell %d, distance %g",
                         surf.kind, hit, result.index, travelled)
            yield TraceEvent(TraceStatus.TRANSMITTED, surf, travelled, cell, hit, ray.direction)
            travelled += settings.bump
            ray = Ray(probe, ray.direction)

    @staticmethod
    def _locate_start(geometry: Geometry, ray: Ray) -> LocateResult:
        """Locate the cell the ray sets off into.

        An origin on a surface of the cell found there may be heading into
        the neighbouring cell, so the cell is located again ``bump`` along
        the ray, as after a transmission crossing.
        """
        result = geometry.locate(ray.origin)
        if not result.found:
            return result
        settings = geometry.settings
        on_surface = any(abs(surf.implicit(ray.origin)) <= settings.surface_tol
                         for surf in result.cell.surfaces())
        if not on_surface:
            return result
        ahead = geometry.locate(add(ray.origin, scale3(ray.direction, settings.bump)))
        if not ahead.found:
            return result
        if ahead.cell is not result.cell:
            logger.debug("trace: origin %s is on a surface of cell %d, starting in cell %d",
                         ray.origin, result.index, ahead.index)
        return ahead

    @staticmethod
    def _locate_failure(result: LocateResult, surf, travelled: float, ray: Ray) -> TraceEvent:
        logger.warning("trace: %s", result.error)
        return TraceEvent(_LOCATE_TO_TRACE[result.status], surf, travelled, None,
                          ray.origin, ray.direction, result.error)


def trace(geometry: Geometry, ray: Ray, current_cell: Optional[Cell] = None,
          max_distance: float = inf) -> Trace:
    """Trace ``ray`` through ``geometry``; see ``Trace``."""
    return Trace(geometry, ray, current_cell, max_distance)


__all__ = [
    'TraceStatus', 'TraceEvent', 'Crossing', 'Trace',
    'find_intersection', 'trace',
]
