"""Select uninhabited systems holding a ringed, landable body with an atmosphere."""

import json
import math
from typing import Any, Dict, NamedTuple, Optional

COORD_AXES = ('x', 'y', 'z')


class PersistedRow(NamedTuple):
    system_name: Optional[str]
    x: float
    y: float
    z: float
    matched_body_name: Optional[str]
    matched_body: str
    system_data: str


def to_json(obj) -> str:
    return json.dumps(obj, separators=(',', ':'), ensure_ascii=False, allow_nan=False)


def is_qualifying_body(body: Dict[str, Any]) -> bool:
    """Ringed, landable and with some atmosphere."""
    if not isinstance(body, dict):
        return False
    rings = body.get('rings')
    return (
        isinstance(rings, list) and len(rings) > 0
        and body.get('isLandable') is True
        and bool(body.get('atmosphereType'))
    )


def is_coordinate(value) -> bool:
    """A finite real number; booleans and strings do not count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def has_coordinates(system: Dict[str, Any]) -> bool:
    coords = system.get('coords')
    if not isinstance(coords, dict):
        return False
    return all(is_coordinate(coords.get(axis)) for axis in COORD_AXES)


def find_matched_body(system: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Return the first qualifying body of ``system``, or None.

    Cheap checks run first: systems without bodies, with any population, or
    without coordinates are rejected before the body list is looked at.
    """
    bodies = system.get('bodies')
    if not bodies or not isinstance(bodies, list):
        return None
    population = system.get('population')
    # bool is an int subclass; False must not pass for zero
    if population != 0 or isinstance(population, bool):
        return None
    if not has_coordinates(system):
        return None

    for body in bodies:
        if is_qualifying_body(body):
            return body
    return None


def build_row(system: Dict[str, Any], body: Dict[str, Any]) -> PersistedRow:
    coords = system['coords']
    return PersistedRow(
        system_name=system.get('name'),
        x=float(coords['x']),
        y=float(coords['y']),
        z=float(coords['z']),
        matched_body_name=body.get('name'),
        matched_body=to_json(body),
        system_data=to_json(system),
    )


def match_system(system: Dict[str, Any]) -> Optional[PersistedRow]:
    """Row to persist for ``system``, or None when it does not qualify."""
    body = find_matched_body(system)
    if body is None:
        return None
    return build_row(system, body)
