"""Top-level geometry: cells inside a bounding box, and point location.

The cells of a ``Geometry`` must combine to fill the bounding box without
overlapping.  That is the builder's responsibility; ``locate`` reports a gap
or an overlap it runs into rather than papering over it, and
``csgeom.sampling.check_partition`` can probe for both up front.

``locate`` returns a ``LocateResult`` value.  ``cell_of`` is the raising
variant for callers who prefer exceptions.

Copyright (c) 2025 Richard DeVaul
MIT License
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from csgeom.cell import Cell
from csgeom.errors import (AmbiguousCellError, CellNotFoundError, CsgError,
                           InvalidParameterError)
from csgeom.settings import DEFAULT_SETTINGS, TraceSettings
from csgeom.vec import Coord, coord, scale3, add, sub

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Box:
    """Axis aligned box given by its minimum and maximum corners.

    Only used for bounding purposes; it is not a surface and cannot bound a
    cell.  Define the six planes explicitly for that.
    """

    lower_left: Coord
    upper_right: Coord

    def __post_init__(self):
        lo = coord(self.lower_left)
        hi = coord(self.upper_right)
        if not (lo.isfinite() and hi.isfinite()):
            raise InvalidParameterError(f"box corners must be finite, got {lo}, {hi}")
        if lo.x > hi.x or lo.y > hi.y or lo.z > hi.z:
            raise InvalidParameterError(
                f"box lower_left {lo} must not exceed upper_right {hi} in any component")
        object.__setattr__(self, 'lower_left', lo)
        object.__setattr__(self, 'upper_right', hi)

    def contains(self, p: Coord, tol: float = 0.0) -> bool:
        lo, hi = self.lower_left, self.upper_right
        return (lo.x - tol <= p.x <= hi.x + tol and
                lo.y - tol <= p.y <= hi.y + tol and
                lo.z - tol <= p.z <= hi.z + tol)

    @property
    def center(self) -> Coord:
        return scale3(add(self.lower_left, self.upper_right), 0.5)

    @property
    def extent(self) -> Coord:
        return sub(self.upper_right, self.lower_left)


class LocateStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    OUTSIDE_BOX = "outside_box"


@dataclass(frozen=True)
class LocateResult:
    """Outcome of a point location.

    ``cell``/``index`` are set when ``status`` is FOUND.  For AMBIGUOUS,
    ``candidates`` lists every matching cell index.  ``error`` holds the
    exception describing a failure, without raising it.
    """

    status: LocateStatus
    point: Coord
    cell: Optional[Cell] = None
    index: Optional[int] = None
    candidates: Tuple[int, ...] = ()
    error: Optional[CsgError] = field(default=None, compare=False)

    @property
    def found(self) -> bool:
        return self.status is LocateStatus.FOUND

    def __bool__(self) -> bool:
        return self.found

    def unwrap(self) -> Cell:
        """Return the cell, or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.cell


@dataclass(frozen=True)
class Geometry:
    """All the cells of a problem and its bounding box."""

    cells: Tuple[Cell, ...]
    bounding_box: Box
    settings: TraceSettings = DEFAULT_SETTINGS

    def __post_init__(self):
        cells = tuple(self.cells)
        if not cells:
            raise InvalidParameterError("geometry needs at least one cell")
        for c in cells:
            if not isinstance(c, Cell):
                raise InvalidParameterError(f"geometry cells must be Cell objects, got {c!r}")
        if not isinstance(self.bounding_box, Box):
            raise InvalidParameterError(f"bounding_box must be a Box, got {self.bounding_box!r}")
        if not isinstance(self.settings, TraceSettings):
            raise InvalidParameterError(f"settings must be TraceSettings, got {self.settings!r}")
        object.__setattr__(self, 'cells', cells)

    def index_of(self, cell: Cell) -> int:
        """Position of ``cell`` (by identity) in this geometry."""
        for i, c in enumerate(self.cells):
            if c is cell:
                return i
        raise ValueError("cell does not belong to this geometry")

    def locate(self, p: Coord) -> LocateResult:
        """Find the cell containing ``p``.

        Scans every cell.  More than one match is AMBIGUOUS unless the
        geometry's settings enable ``lenient_locate``, in which case the first
        match wins.
        """
        p = coord(p)
        if not self.bounding_box.contains(p, self.settings.bump):
            err = CellNotFoundError(f"point {p} lies outside the bounding box")
            logger.debug("locate: %s", err)
            return LocateResult(LocateStatus.OUTSIDE_BOX, p, error=err)

        tol = self.settings.surface_tol
        matches = [i for i, c in enumerate(self.cells) if c.contains(p, tol)]

        if not matches:
            err = CellNotFoundError(f"no cell contains point {p}; the cells leave a gap")
            logger.debug("locate: %s", err)
            return LocateResult(LocateStatus.NOT_FOUND, p, error=err)
        if len(matches) > 1:
            if self.settings.lenient_locate:
                logger.debug("locate: point %s is in cells %s, taking the first", p, matches)
            else:
                labels = ", ".join(f"{i} {self.cells[i].label}" for i in matches)
                err = AmbiguousCellError(
                    f"point {p} is contained by {len(matches)} cells ({labels}); cells overlap")
                logger.debug("locate: %s", err)
                return LocateResult(LocateStatus.AMBIGUOUS, p,
                                    candidates=tuple(matches), error=err)

        i = matches[0]
        return LocateResult(LocateStatus.FOUND, p, cell=self.cells[i], index=i,
                            candidates=tuple(matches))

    def cell_of(self, p: Coord) -> Cell:
        """Like ``locate`` but returns the cell or raises the failure."""
        return self.locate(p).unwrap()

    def find_cell_index(self, p: Coord) -> Optional[int]:
        """Index of the cell containing ``p``, or None when location fails."""
        return self.locate(p).index

    def surfaces(self) -> List:
        """Distinct surfaces over all cells, in declaration order."""
        seen = set()
        result = []
        for c in self.cells:
            for s in c.surfaces():
                if id(s) not in seen:
                    seen.add(id(s))
                    result.append(s)
        return result


def locate(geometry: Geometry, p: Coord) -> LocateResult:
    """Functional spelling of ``Geometry.locate``."""
    return geometry.locate(p)


__all__ = [
    'Box', 'Geometry', 'LocateStatus', 'LocateResult', 'locate',
]
