"""Day/night illumination and texture sampling.

The sun sits on the equatorial plane of the world frame at a configurable
*subsolar longitude*.  Illumination depends only on the angular distance
``d`` between a surface point's world longitude and that reference::

    light = (1 + cos d) / 2

which is 1.0 at the subsolar longitude, 0.0 at the antisolar longitude
(180 degrees away) and smooth in between, so there is no hard terminator
line to band across the character grid.
"""

from __future__ import annotations

import math
from typing import Optional

from termglobe.geometry import angular_distance
from termglobe.texture import Texture

# Brightness kept on the unlit side when there is no night texture.
DEFAULT_AMBIENT = 0.15


def illumination(longitude: float, subsolar_longitude: float = 0.0) -> float:
    """Return the illumination factor in ``[0, 1]`` for a world longitude."""
    distance = math.radians(angular_distance(longitude, subsolar_longitude))
    light = 0.5 * (1.0 + math.cos(distance))
    return max(0.0, min(1.0, light))


def blend(
    day: float,
    night: Optional[float],
    light: float,
    ambient: float = DEFAULT_AMBIENT,
) -> float:
    """Mix day and night brightness for an illumination factor.

    With a night sample the result is ``day * light + night * (1 - light)``.
    Without one the day sample is dimmed toward *ambient*, never to black:
    ``day * (ambient + (1 - ambient) * light)``.
    """
    if night is not None:
        value = day * light + night * (1.0 - light)
    else:
        value = day * (ambient + (1.0 - ambient) * light)
    return max(0.0, min(1.0, value))


class TextureSampler:
    """Resolve a brightness for a surface point from day/night textures.

    Args:
        day: The day texture (always present).
        night: Optional night texture; must match the day texture's size.
        subsolar_longitude: World longitude facing the sun, in degrees.
        ambient: Floor used on the unlit side when *night* is ``None``.
    """

    def __init__(
        self,
        day: Texture,
        night: Optional[Texture] = None,
        subsolar_longitude: float = 0.0,
        ambient: float = DEFAULT_AMBIENT,
    ) -> None:
        self.day = day
        self.night = night
        self.subsolar_longitude = subsolar_longitude
        self.ambient = ambient

    def sample(
        self,
        lat: float,
        lon: float,
        world_lon: Optional[float] = None,
        night_mode: bool = True,
    ) -> float:
        """Return the brightness at body coordinate ``(lat, lon)``.

        Args:
            lat: Body latitude in degrees.
            lon: Body (texture) longitude in degrees.
            world_lon: Longitude in the world frame, compared against the
                subsolar longitude.  Defaults to *lon*.
            night_mode: When ``False`` the day texture is returned unshaded.
        """
        day_value = self.day.sample(lat, lon)
        if not night_mode:
            return day_value

        light = illumination(lon if world_lon is None else world_lon,
                             self.subsolar_longitude)
        night_value = self.night.sample(lat, lon) if self.night is not None else None
        return blend(day_value, night_value, light, self.ambient)
