"""termglobe - a textured ASCII planet for the terminal.

The core renders a sphere onto a character grid: a :class:`Globe` carries
the textures and spin, a :class:`Camera` describes the view, and
:func:`rasterize` fills a :class:`Canvas` that the caller prints.
"""

from __future__ import annotations

__version__ = "0.3.0"

from termglobe.animation import AnimationController, ListingPlayback, parse_coordinate_list
from termglobe.camera import Camera, CameraConfig, CameraState
from termglobe.canvas import Canvas, rasterize
from termglobe.errors import ConfigError, CoordinateError, TermGlobeError
from termglobe.globe import Globe, GlobeConfig, SphereTemplate, build_globe
from termglobe.texture import Texture

__all__ = [
    "AnimationController",
    "Camera",
    "CameraConfig",
    "CameraState",
    "Canvas",
    "ConfigError",
    "CoordinateError",
    "Globe",
    "GlobeConfig",
    "ListingPlayback",
    "SphereTemplate",
    "TermGlobeError",
    "Texture",
    "build_globe",
    "parse_coordinate_list",
    "rasterize",
    "__version__",
]
