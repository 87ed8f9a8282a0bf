"""Tolerance and tracing settings.

A ``TraceSettings`` instance travels with each ``Geometry`` and fixes the
epsilon policy used by region membership and ray tracing:

- ``surface_tol``: a point is in the positive halfspace when
  ``implicit(p) >= -surface_tol``.  The band belongs to the positive side
  only, so complementary regions never both contain a point.
- ``min_distance``: intersection distances at or below this are ignored by
  the tracer (the surface the ray is leaving).
- ``bump``: distance stepped past a transmission crossing (or off the
  surface a trace starts on) before the next cell is located.  It must
  exceed ``min_distance``.
- ``unit_tol``: allowed deviation from unit length for the ray direction
  handed to ``trace``.  Surface normals and axes are checked when the
  surface is built, before it belongs to any geometry, so they always use
  the default ``unit_tol``.
- ``lenient_locate``: resolve an ambiguous locate by taking the first cell.
- ``max_crossings``: events after which a trace is cut off.

Settings can be loaded from YAML or JSON with ``load_settings``.

Copyright (c) 2025 Richard DeVaul
MIT License
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace as _replace
from pathlib import Path
from typing import Any, Dict, Mapping

from csgeom.errors import SettingsError

logger = logging.getLogger(__name__)

_FLOAT_FIELDS = ('surface_tol', 'min_distance', 'bump', 'unit_tol')


@dataclass(frozen=True)
class TraceSettings:
    surface_tol: float = 1e-12
    min_distance: float = 1e-10
    bump: float = 1e-8
    unit_tol: float = 1e-9
    lenient_locate: bool = False
    max_crossings: int = 100000

    def __post_init__(self):
        for name in _FLOAT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SettingsError(f"{name} must be a number, got {value!r}")
            if value < 0:
                raise SettingsError(f"{name} must be non-negative, got {value!r}")
        if self.bump <= self.min_distance:
            raise SettingsError(
                f"bump ({self.bump!r}) must be larger than min_distance ({self.min_distance!r})")
        if not isinstance(self.lenient_locate, bool):
            raise SettingsError(f"lenient_locate must be a boolean, got {self.lenient_locate!r}")
        if (isinstance(self.max_crossings, bool) or not isinstance(self.max_crossings, int)
                or self.max_crossings < 1):
            raise SettingsError(f"max_crossings must be a positive integer, got {self.max_crossings!r}")

    def replace(self, **changes: Any) -> "TraceSettings":
        """Return a copy with ``changes`` applied."""
        unknown = set(changes) - _field_names()
        if unknown:
            raise SettingsError(f"unknown settings: {sorted(unknown)}")
        return _replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_SETTINGS = TraceSettings()


def _field_names():
    return {f.name for f in fields(TraceSettings)}


def settings_from_mapping(data: Mapping[str, Any]) -> TraceSettings:
    """Build settings from a plain mapping, rejecting unknown keys."""
    if not isinstance(data, Mapping):
        raise SettingsError(f"settings must be a mapping, got {type(data).__name__}")
    unknown = set(data) - _field_names()
    if unknown:
        raise SettingsError(f"unknown settings: {sorted(unknown)}")
    values = dict(data)
    # YAML 1.1 reads exponent-only floats such as 1e-12 as strings
    for name in _FLOAT_FIELDS:
        if isinstance(values.get(name), str):
            try:
                values[name] = float(values[name])
            except ValueError:
                raise SettingsError(f"{name} must be a number, got {values[name]!r}") from None
    return TraceSettings(**values)


def load_settings(path: Path | str) -> TraceSettings:
    """Load settings from a ``.yaml``/``.yml`` or ``.json`` file.

    The file may hold the settings at top level or under a ``trace`` key.
    """
    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as fp:
        if settings_path.suffix.lower() in ('.yaml', '.yml'):
            import yaml

            try:
                data = yaml.safe_load(fp) or {}
            except yaml.YAMLError as exc:
                raise SettingsError(f"cannot parse {settings_path}: {exc}") from exc
        else:
            try:
                data = json.load(fp)
            except json.JSONDecodeError as exc:
                raise SettingsError(f"cannot parse {settings_path}: {exc}") from exc

    if isinstance(data, Mapping) and 'trace' in data and isinstance(data['trace'], Mapping):
        data = data['trace']
    settings = settings_from_mapping(data)
    logger.debug("loaded settings from %s: %s", settings_path, settings)
    return settings


__all__ = [
    'TraceSettings',
    'DEFAULT_SETTINGS',
    'settings_from_mapping',
    'load_settings',
]
