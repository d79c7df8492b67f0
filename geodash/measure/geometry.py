"""
Geodesic distance and area on a spherical Earth.

distance(): haversine sum over consecutive segments, meters.
area(): spherical-excess line integral over the implicitly closed ring, square meters.
Both are pure; degenerate or non-finite input yields 0.0 rather than an error.
"""
import math
from typing import NamedTuple, Sequence

# WGS84 semi-major axis, the sphere used by web-map geodesy. Used for distance as well as
# area so that 0.01 deg of longitude at the equator reads 1113 m (see DESIGN.md, Earth radius).
EARTH_RADIUS_M = 6378137.0


class Point(NamedTuple):
    """Geographic coordinate in degrees."""
    lat: float
    lon: float


def _finite(points: Sequence[Point]) -> bool:
    return all(math.isfinite(p[0]) and math.isfinite(p[1]) for p in points)


def segment_distance(a: Point, b: Point, radius: float = EARTH_RADIUS_M) -> float:
    """Great-circle distance between two points (haversine), meters."""
    lat1, lat2 = math.radians(a[0]), math.radians(b[0])
    dlat = lat2 - lat1
    dlon = math.radians(b[1] - a[1])
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # clamp: rounding can push h slightly past 1 for antipodal points
    return 2 * radius * math.asin(math.sqrt(min(1.0, max(0.0, h))))


def distance(points: Sequence[Point], radius: float = EARTH_RADIUS_M) -> float:
    """Length of the path through points in order, meters. Fewer than 2 points -> 0."""
    if len(points) < 2 or not _finite(points):
        return 0.0
    return sum(segment_distance(points[i], points[i + 1], radius) for i in range(len(points) - 1))


def area(points: Sequence[Point], radius: float = EARTH_RADIUS_M) -> float:
    """
    Area enclosed by the ring through points, closed from last back to first, in square meters.
    Winding order does not matter. Fewer than 3 points -> 0. Self-crossing rings are not
    rejected; they give whatever the formula yields.
    """
    n = len(points)
    if n < 3 or not _finite(points):
        return 0.0
    total = 0.0
    for i in range(n):
        lower = points[i]
        middle = points[(i + 1) % n]
        upper = points[(i + 2) % n]
        total += (math.radians(upper[1]) - math.radians(lower[1])) * math.sin(math.radians(middle[0]))
    return abs(total * radius * radius / 2.0)


def parse_point(text: str) -> Point:
    """Parse 'lat,lon' into a Point. Raises ValueError on malformed input."""
    parts = [s.strip() for s in text.split(",")]
    if len(parts) != 2:
        raise ValueError(f"Expected 'lat,lon', got {text!r}")
    lat, lon = float(parts[0]), float(parts[1])
    if not (-90.0 <= lat <= 90.0):
        raise ValueError(f"Latitude out of range: {lat}")
    return Point(lat, lon)
