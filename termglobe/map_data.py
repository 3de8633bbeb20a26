"""Built-in Earth textures.

Holds a 360x180 one-bit land/ocean bitmap of the Earth, zlib-compressed and
base64-encoded in the source, and derives the day and night brightness
textures of the Earth template from it:

* day: dark oceans, bright land, brighter coastlines, brightest ice caps;
* night: black oceans, faint land and glowing coastlines (city lights).
"""

from __future__ import annotations

import base64
import enum
import functools
import logging
import zlib
from typing import Tuple

from termglobe.texture import Texture

logger = logging.getLogger(__name__)


class TerrainType(enum.Enum):
    """Classification of a bitmap cell."""

    OCEAN = 0
    LAND = 1
    COASTLINE = 2
    ICE = 3


# Grid dimensions: 1 degree per cell
MAP_WIDTH = 360
MAP_HEIGHT = 180

# Rows go from 90N (row 0) to 89S (row 179).
# Columns go from 180W (col 0) to 179E (col 359).
_MAP_DATA_B64 = (
    "eNrt2NFtgzAQANBD98HnbdCM4rX6B1UH6AhdJaO4ygDNJ5WQr5AEbGM7wdikVOI+8hEeKLbPdw4A"
    "eySFYDPkZjAy11vB6L9hEVbWbKDxgHpL2Bqbov5jCserWbDg77wY9VDmYeJITN7xJWCWQkIU7iMK"
    "V9lxc8shH679GNUmcKWEI4tobG+X7JjsjRmFPRswjIsxX30lOwoX9ndPxWohhjG99RpJmIs/HuPG"
    "xFac5FJcWROUE1+z7OjtdNalaEx2SzpcWqYuL1ULSzGaa+Li8rgYg7kmTr1dEU8OEVGYgvhdX1iI"
    "z/AawioFd8mjhhQlXSbXw9SfhBQk4QO3IVyLs4udmhrEIBpwmwYqSMfg7tcLpnRMx8kA+/3bBPFt"
    "f8/B2HoxMqRimPTMyyqr7hnpGG/axC8A3a9bA3cZprx/tlAXUnqISXeKZ2GfjsbDCBPwyfXrYTTa"
    "o4nh8Bg3Q0Hhz9kYSq5xA/h65R4mt+3Mxdh6d+wwux3+UU/AwtMqzD7N/HUfYwAje95gLMaC3zLj"
    "xsXI7FnPpbib55wYrMo44tJ3qErAOncyYDSPa23oVJuIS2OuMmDSO97EhXdRyHw7JdMwp+BQFaL+"
    "3r/H0OeMjYUKFk1aEwuZgO8W+41iGfOefRuY6k3gPf5h8B577LFHZPwC9Tmb3g=="
)

_map_bytes: bytes = zlib.decompress(base64.b64decode(_MAP_DATA_B64))

# Ice caps: rows poleward of these latitudes are ice wherever there is land.
ICE_NORTH = 75.0
ICE_SOUTH = -60.0

DAY_BRIGHTNESS = {
    TerrainType.OCEAN: 0.2,
    TerrainType.LAND: 0.65,
    TerrainType.COASTLINE: 0.8,
    TerrainType.ICE: 1.0,
}

NIGHT_BRIGHTNESS = {
    TerrainType.OCEAN: 0.0,
    TerrainType.LAND: 0.1,
    TerrainType.COASTLINE: 0.45,
    TerrainType.ICE: 0.05,
}


def _get_bit(row: int, col: int) -> int:
    """Return 1 for land and 0 for ocean at a grid position."""
    index = row * MAP_WIDTH + col
    return (_map_bytes[index // 8] >> (7 - index % 8)) & 1


def _is_coastline(row: int, col: int) -> bool:
    """A land cell with at least one 4-connected ocean neighbour."""
    for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1)):
        nr = row + dr
        nc = (col + dc) % MAP_WIDTH  # wrap longitude
        if 0 <= nr < MAP_HEIGHT and _get_bit(nr, nc) == 0:
            return True
    return False


def terrain_at(row: int, col: int) -> TerrainType:
    """Classify the bitmap cell at ``(row, col)``.

    Args:
        row: Grid row (0 = 90N, 179 = 89S).
        col: Grid column (0 = 180W, 359 = 179E); wraps.

    Returns:
        The :class:`TerrainType` of that cell.
    """
    col %= MAP_WIDTH
    if _get_bit(row, col) == 0:
        return TerrainType.OCEAN

    lat = 90.0 - row
    if lat > ICE_NORTH or lat < ICE_SOUTH:
        return TerrainType.ICE

    if _is_coastline(row, col):
        return TerrainType.COASTLINE

    return TerrainType.LAND


@functools.lru_cache(maxsize=1)
def earth_textures() -> Tuple[Texture, Texture]:
    """Return the ``(day, night)`` texture pair of the Earth template.

    Decoded once and cached; both textures are immutable.
    """
    terrain = [
        [terrain_at(row, col) for col in range(MAP_WIDTH)]
        for row in range(MAP_HEIGHT)
    ]
    day = Texture.from_rows([[DAY_BRIGHTNESS[t] for t in row] for row in terrain])
    night = Texture.from_rows([[NIGHT_BRIGHTNESS[t] for t in row] for row in terrain])
    logger.debug("Decoded Earth textures (%dx%d)", day.width, day.height)
    return day, night
