"""Perspective ray casting from character cells onto the sphere.

For each character cell a ray leaves the camera through the centre of the
cell.  The camera sits at ``(0, 0, distance)`` in view space and looks at
the origin; x points right and y up.  Cell centres are measured in canvas
sub-pixels (4x8 per character by default) relative to the canvas centre and
divided by half of the smaller pixel dimension, so the sphere stays round
whatever the canvas shape and character aspect.

A ray that hits the sphere is carried back through the view rotation (focus
latitude, focus longitude plus orbit) into the world frame, and the globe's
spin is added on top to land in the body (texture) frame.  Spin and orbit
therefore compose additively and independently.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

from termglobe.geometry import (
    Vec3,
    _normalize,
    intersect_sphere,
    view_to_world,
    view_trig,
    wrap_degrees,
    xyz_to_latlon,
)

if TYPE_CHECKING:
    from termglobe.camera import Camera
    from termglobe.canvas import Canvas
    from termglobe.globe import Globe

# Tangent of half the field of view across the smaller canvas dimension.
FIELD_OF_VIEW = 1.0
# Discriminant at or below which a ray only grazes the sphere.
TANGENT_EPSILON = 1e-9


@dataclass(frozen=True)
class SurfaceHit:
    """Where a cell's ray meets the sphere.

    Attributes:
        latitude: Body latitude in degrees.
        longitude: Body (texture) longitude in degrees, spin applied.
        world_longitude: Longitude in the world frame, before spin; this is
            what the sun is compared against.
        normal: Unit surface normal in view space.
        distance: Ray parameter from the camera to the hit.
    """

    latitude: float
    longitude: float
    world_longitude: float
    normal: Vec3
    distance: float


CellHit = Optional[SurfaceHit]


class SphereProjector:
    """Cast one ray per character cell for a fixed camera pose.

    All trigonometry for the pose is computed once in the constructor;
    :meth:`cast` is then a pure function of the cell coordinate.

    Args:
        latitude: Focus latitude in degrees.
        longitude: View longitude in degrees (focus longitude plus orbit).
        distance: Camera distance from the sphere centre.
        radius: Sphere radius.
        spin: Globe spin in degrees, added to every sampled longitude.
        width: Canvas width in sub-pixels.
        height: Canvas height in sub-pixels.
        char_pix: Sub-pixels per character as ``(width, height)``.
    """

    def __init__(
        self,
        latitude: float,
        longitude: float,
        distance: float,
        radius: float = 1.0,
        spin: float = 0.0,
        width: int = 0,
        height: int = 0,
        char_pix: Tuple[int, int] = (4, 8),
    ) -> None:
        self.radius = radius
        self.distance = distance
        self.spin = wrap_degrees(spin)
        self.width = width
        self.height = height
        self.char_pix = char_pix
        self.columns = width // char_pix[0] if char_pix[0] > 0 else 0
        self.rows = height // char_pix[1] if char_pix[1] > 0 else 0

        half_min = min(width, height) * 0.5
        self._scale = FIELD_OF_VIEW / half_min if half_min > 0 else 0.0

        self._trig = view_trig(latitude, wrap_degrees(longitude))

    @classmethod
    def for_scene(cls, globe: "Globe", camera: "Camera", canvas: "Canvas") -> "SphereProjector":
        """Build a projector for the current globe spin, camera pose and canvas."""
        return cls(
            latitude=camera.latitude,
            longitude=camera.view_longitude,
            distance=camera.distance,
            radius=globe.radius,
            spin=globe.spin,
            width=canvas.width,
            height=canvas.height,
            char_pix=canvas.char_pix,
        )

    def ray_direction(self, column: int, row: int) -> Vec3:
        """Unit direction of the ray through the centre of a cell (view space)."""
        px = (column + 0.5) * self.char_pix[0] - self.width * 0.5
        py = (row + 0.5) * self.char_pix[1] - self.height * 0.5
        return _normalize(px * self._scale, -py * self._scale, -1.0)

    def cast(self, column: int, row: int) -> CellHit:
        """Return the visible surface point for a cell, or ``None`` on a miss."""
        if self._scale == 0.0:
            return None

        u = self.ray_direction(column, row)
        origin = (0.0, 0.0, self.distance)
        t = intersect_sphere(origin, u, self.radius, TANGENT_EPSILON)
        if t is None:
            return None

        inv_r = 1.0 / self.radius
        nx = u[0] * t * inv_r
        ny = u[1] * t * inv_r
        nz = (self.distance + u[2] * t) * inv_r

        lat, world_lon = xyz_to_latlon(*view_to_world(nx, ny, nz, self._trig))
        return SurfaceHit(
            latitude=lat,
            longitude=wrap_degrees(world_lon + self.spin),
            world_longitude=world_lon,
            normal=(nx, ny, nz),
            distance=t,
        )

    def project(self) -> List[List[CellHit]]:
        """Cast every cell, row-major: ``result[row][column]``."""
        return [
            [self.cast(column, row) for column in range(self.columns)]
            for row in range(self.rows)
        ]
