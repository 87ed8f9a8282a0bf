"""Regions and cells.

A ``Region`` is one halfspace of a surface.  A ``Cell`` is an ordered list
of regions plus a boolean expression over their indices; a point is in the
cell when the expression evaluates true with each leaf replaced by the
corresponding region's membership.

Regions hold the surface by reference.  The same surface instance normally
appears in the regions of two neighbouring cells, once per halfspace.

Copyright (c) 2025 Richard DeVaul
MIT License
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from csgeom.errors import InvalidParameterError
from csgeom.expression import Expression, evaluate, referenced_indices, to_infix
from csgeom.settings import DEFAULT_SETTINGS
from csgeom.surfaces import Surface, halfspace, is_surface
from csgeom.vec import Coord


@dataclass(frozen=True)
class Region:
    """The volume on one side (``halfspace`` of +1 or -1) of ``surface``."""

    surface: Surface
    halfspace: int

    def __post_init__(self):
        if not is_surface(self.surface):
            raise InvalidParameterError(f"region surface must be a Surface, got {self.surface!r}")
        side = self.halfspace
        if isinstance(side, bool) or not isinstance(side, int) or side not in (1, -1):
            raise InvalidParameterError(f"halfspace must be +1 or -1, got {self.halfspace!r}")

    def contains(self, p: Coord, tol: float = DEFAULT_SETTINGS.surface_tol) -> bool:
        return halfspace(self.surface, p, tol) == self.halfspace

    def complement(self) -> "Region":
        """The other halfspace of the same surface instance."""
        return Region(self.surface, -self.halfspace)


@dataclass(frozen=True)
class Cell:
    """A volume defined by ``regions`` combined through ``definition``.

    ``regions`` is stored as a tuple.  Every index referenced by
    ``definition`` must be a valid position in it.
    """

    regions: Tuple[Region, ...]
    definition: Expression
    name: Optional[str] = None

    def __post_init__(self):
        regions = tuple(self.regions)
        for r in regions:
            if not isinstance(r, Region):
                raise InvalidParameterError(f"cell regions must be Region objects, got {r!r}")
        object.__setattr__(self, 'regions', regions)
        if not isinstance(self.definition, Expression):
            raise InvalidParameterError(
                f"cell definition must be an Expression, got {type(self.definition).__name__}")
        bad = sorted(i for i in referenced_indices(self.definition) if i >= len(regions))
        if bad:
            raise InvalidParameterError(
                f"cell {self.label} references region indices {bad} "
                f"but has only {len(regions)} regions")

    @property
    def label(self) -> str:
        return repr(self.name) if self.name else f"<{to_infix(self.definition)}>"

    def contains(self, p: Coord, tol: float = DEFAULT_SETTINGS.surface_tol) -> bool:
        regions = self.regions
        return evaluate(self.definition, lambda i: regions[i].contains(p, tol))

    def surfaces(self) -> List[Surface]:
        """Distinct surfaces bounding this cell, in region declaration order."""
        seen = set()
        result = []
        for r in self.regions:
            if id(r.surface) in seen:
                continue
            seen.add(id(r.surface))
            result.append(r.surface)
        return result


__all__ = ['Region', 'Cell']
