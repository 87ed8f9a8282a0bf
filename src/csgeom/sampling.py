"""Random sampling helpers and partition checks.

``random_points`` and ``generate_random_ray`` draw from a numpy
``Generator`` so that callers can seed them reproducibly.
``check_partition`` samples a geometry's bounding box and reports points
that no cell, or more than one cell, contains.

Copyright (c) 2025 Richard DeVaul
MIT License
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from csgeom.geometry import Box, Geometry, LocateStatus
from csgeom.vec import Coord, Ray

logger = logging.getLogger(__name__)


def _rng(rng) -> np.random.Generator:
    if rng is None or isinstance(rng, (int, np.integer)):
        return np.random.default_rng(rng)
    return rng


def random_points(box: Box, n: int, rng=None) -> np.ndarray:
    """Return an ``(n, 3)`` array of points uniform in ``box``.

    ``rng`` may be a numpy ``Generator``, a seed, or None.
    """
    gen = _rng(rng)
    lo = np.array(tuple(box.lower_left), dtype=float)
    hi = np.array(tuple(box.upper_right), dtype=float)
    return lo + gen.random((int(n), 3)) * (hi - lo)


def random_direction(rng=None) -> Coord:
    """Isotropic unit vector."""
    gen = _rng(rng)
    mu = gen.uniform(-1.0, 1.0)
    phi = gen.uniform(0.0, 2.0 * np.pi)
    s = np.sqrt(1.0 - mu * mu)
    return Coord(float(s * np.cos(phi)), float(s * np.sin(phi)), float(mu))


def generate_random_ray(box: Box, rng=None) -> Ray:
    """Ray with an origin uniform in ``box`` and an isotropic direction."""
    gen = _rng(rng)
    x, y, z = random_points(box, 1, gen)[0]
    return Ray(Coord(float(x), float(y), float(z)), random_direction(gen))


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str]

    def __bool__(self) -> bool:
        return self.ok


def check_partition(geometry: Geometry, samples: int = 1000, rng=None,
                    max_reports: int = 10) -> CheckResult:
    """Probe ``geometry`` for gaps and overlaps at random points in its box.

    Locating is always strict here, whatever ``lenient_locate`` says.  At
    most ``max_reports`` offending points are listed per kind.
    """
    strict = geometry
    if geometry.settings.lenient_locate:
        strict = Geometry(geometry.cells, geometry.bounding_box,
                          geometry.settings.replace(lenient_locate=False))

    gaps = []
    overlaps = []
    for x, y, z in random_points(geometry.bounding_box, samples, rng):
        result = strict.locate(Coord(float(x), float(y), float(z)))
        if result.status is LocateStatus.NOT_FOUND:
            gaps.append(result)
        elif result.status is LocateStatus.AMBIGUOUS:
            overlaps.append(result)

    warnings = []
    if gaps:
        warnings.append(f'{len(gaps)} of {samples} sample points lie in no cell')
        warnings.extend(f'gap at {r.point}' for r in gaps[:max_reports])
    if overlaps:
        warnings.append(f'{len(overlaps)} of {samples} sample points lie in several cells')
        warnings.extend(f'overlap at {r.point}: cells {list(r.candidates)}'
                        for r in overlaps[:max_reports])
    if warnings:
        logger.info("partition check failed: %s", warnings[0])
    return CheckResult(not warnings, warnings)


__all__ = [
    'random_points', 'random_direction', 'generate_random_ray',
    'CheckResult', 'check_partition',
]
