"""Vector and angle helpers shared by the projector, camera and sampler.

Coordinate convention (view and world frames):
    x = right, y = up, z = toward the viewer.
    lat=0, lon=0 lies on the positive z axis; lon=90 on positive x.

Angles exposed by the public API are in degrees.  Longitudes are kept in
``[-180, 180)`` by :func:`wrap_degrees`; latitudes are clamped to
``[-90, 90]`` by :func:`clamp_latitude`.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

Vec3 = Tuple[float, float, float]
ViewTrig = Tuple[float, float, float, float]

FULL_TURN = 360.0
HALF_TURN = 180.0


def _normalize(x: float, y: float, z: float) -> Vec3:
    """Normalize a 3D vector to unit length."""
    length = math.sqrt(x * x + y * y + z * z)
    if length < 1e-12:
        return (0.0, 0.0, 0.0)
    inv = 1.0 / length
    return (x * inv, y * inv, z * inv)


def _dot(a: Vec3, b: Vec3) -> float:
    """Dot product of two 3D vectors."""
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def wrap_degrees(angle: float) -> float:
    """Wrap an angle in degrees into ``[-180, 180)``."""
    wrapped = (angle + HALF_TURN) % FULL_TURN - HALF_TURN
    # float modulo can land exactly on the open upper bound
    if wrapped >= HALF_TURN:
        wrapped -= FULL_TURN
    return wrapped


def clamp_latitude(lat: float) -> float:
    """Clamp a latitude in degrees to ``[-90, 90]``."""
    return max(-90.0, min(90.0, lat))


def shortest_delta(current: float, target: float) -> float:
    """Signed angular step from *current* to *target* along the shorter arc.

    The result lies in ``[-180, 180)``; adding it to *current* reaches
    *target* (modulo a full turn) without travelling the long way round.
    """
    return wrap_degrees(target - current)


def angular_distance(a: float, b: float) -> float:
    """Unsigned angular distance in degrees between two longitudes (0..180)."""
    return abs(shortest_delta(a, b))


def xyz_to_latlon(x: float, y: float, z: float) -> Tuple[float, float]:
    """Convert a 3D unit-sphere point back to (lat, lon) in degrees.

    At the poles ``atan2(0, 0)`` yields longitude 0, so a pole always maps
    to one texture column instead of an undefined value.
    """
    lat = math.degrees(math.asin(max(-1.0, min(1.0, y))))
    lon = math.degrees(math.atan2(x, z))
    return (lat, lon)


def rotate_x(x: float, y: float, z: float, cos_a: float, sin_a: float) -> Vec3:
    """Rotate a 3D point around the X axis, given the angle's cosine and sine."""
    return (x, y * cos_a - z * sin_a, y * sin_a + z * cos_a)


def rotate_y(x: float, y: float, z: float, cos_a: float, sin_a: float) -> Vec3:
    """Rotate a 3D point around the Y axis, given the angle's cosine and sine."""
    return (x * cos_a + z * sin_a, y, -x * sin_a + z * cos_a)


def view_trig(lat: float, lon: float) -> ViewTrig:
    """Precompute ``(cos lat, sin lat, cos lon, sin lon)`` for :func:`view_to_world`."""
    lat_r = math.radians(lat)
    lon_r = math.radians(lon)
    return (math.cos(lat_r), math.sin(lat_r), math.cos(lon_r), math.sin(lon_r))


def view_to_world(x: float, y: float, z: float, trig: ViewTrig) -> Vec3:
    """Carry a view-frame point into the world frame.

    The view frame looks at the world point ``(lat, lon)`` along its
    negative z axis.  The forward transform (world -> view) is
    ``Rx(lat) * Ry(-lon)``; this applies its inverse, ``Ry(lon) * Rx(-lat)``.

    Args:
        x, y, z: Point in view space.
        trig: :func:`view_trig` of the focus latitude and the view
            longitude (focus longitude plus orbit).

    Returns:
        Point in world space.
    """
    cos_lat, sin_lat, cos_lon, sin_lon = trig
    x2, y2, z2 = rotate_x(x, y, z, cos_lat, -sin_lat)
    return rotate_y(x2, y2, z2, cos_lon, sin_lon)


def intersect_sphere(origin: Vec3, direction: Vec3, radius: float,
                     tangent_epsilon: float = 1e-9) -> Optional[float]:
    """Return the nearer positive ray parameter where a ray meets a sphere.

    The sphere is centred on the origin.  *direction* must be a unit vector,
    so the quadratic reduces to ``t^2 + 2bt + c = 0`` with ``b = u.o`` and
    ``c = o.o - r^2``.

    Tangent rays (discriminant within *tangent_epsilon* of zero) count as a
    miss, which keeps the limb sharp instead of flickering.  A ray starting
    inside or on the sphere (``c <= 0``) is also a miss.

    Returns:
        The ray parameter of the visible hit, or ``None``.
    """
    b = _dot(direction, origin)
    c = _dot(origin, origin) - radius * radius
    if c <= 0.0:
        return None
    discriminant = b * b - c
    if discriminant <= tangent_epsilon:
        return None
    t = -b - math.sqrt(discriminant)
    if t <= 0.0:
        return None
    return t
