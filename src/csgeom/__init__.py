# -*- coding: utf-8 -*-
"""csgeom: constructive solid geometry point location and ray tracing."""

import logging
from importlib.metadata import PackageNotFoundError, version

from csgeom.boundary import BoundaryCondition, parse_boundary
from csgeom.cell import Cell, Region
from csgeom.errors import (AmbiguousCellError, CellNotFoundError, CsgError,
                           InvalidParameterError, NoIntersectionError,
                           SettingsError, UnresolvedBoundaryTagError)
from csgeom.expression import And, Expression, Leaf, Not, Or
from csgeom.geometry import Box, Geometry, LocateResult, LocateStatus, locate
from csgeom.settings import DEFAULT_SETTINGS, TraceSettings, load_settings
from csgeom.surfaces import (Cone, InfCylinder, Plane, Sphere, Surface,
                             intersect, x_plane, y_plane, z_plane)
from csgeom.trace import Trace, TraceEvent, TraceStatus, trace
from csgeom.vec import Coord, Ray, unitize

try:
    __version__ = version("csgeom")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

logging.getLogger(__name__).addHandler(logging.NullHandler())
