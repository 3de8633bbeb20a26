"""The renderable planet: textures, spin and day/night settings.

A :class:`Globe` is built once from a :class:`GlobeConfig` and then mutated
every frame by :meth:`Globe.advance`, which turns it by
``spin_speed * dt`` degrees.  The spin wraps modulo a full turn.

Textures are validated at construction so that rendering a built globe
never fails.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from termglobe.errors import ConfigError
from termglobe.geometry import wrap_degrees
from termglobe.projector import SurfaceHit
from termglobe.shading import DEFAULT_AMBIENT, TextureSampler
from termglobe.texture import Texture

logger = logging.getLogger(__name__)


class SphereTemplate(enum.Enum):
    """Built-in planets."""

    EARTH = "earth"

    @property
    def default_palette(self) -> str:
        """Name of the palette the template's textures were tuned for."""
        return "classic"

    def textures(self) -> tuple[Texture, Optional[Texture]]:
        """Return the template's ``(day, night)`` textures."""
        # Deferred so the bitmap is only decoded when a template is used.
        from termglobe.map_data import earth_textures

        return earth_textures()


@dataclass
class GlobeConfig:
    """Settings for :func:`build_globe`.

    Attributes:
        template: Built-in planet providing textures (default ``None``).
        day: Day texture; overrides the template's (default ``None``).
        night: Night texture; overrides the template's (default ``None``).
        radius: Sphere radius (default 1.0).
        spin: Starting spin angle in degrees (default 0).
        spin_speed: Spin speed in degrees per second (default 0).
        night_mode: Shade the night side (default ``False``).
        sun_longitude: Subsolar longitude in the world frame (default 0).
        ambient: Unlit brightness floor without a night texture (default 0.15).
    """

    template: Optional[SphereTemplate] = None
    day: Optional[Texture] = None
    night: Optional[Texture] = None
    radius: float = 1.0
    spin: float = 0.0
    spin_speed: float = 0.0
    night_mode: bool = False
    sun_longitude: float = 0.0
    ambient: float = DEFAULT_AMBIENT


class Globe:
    """Textured sphere with spin state.

    Args:
        day: Day texture.
        night: Optional night texture of the same size.
        template: The template the textures came from, if any.
        radius: Sphere radius.
        spin: Starting spin angle in degrees.
        spin_speed: Degrees per second added by :meth:`advance`.
        night_mode: Whether the night side is shaded.
        sun_longitude: Subsolar longitude in the world frame, in degrees.
        ambient: Brightness floor of the unlit side without a night texture.

    Raises:
        ConfigError: On a day/night size mismatch, a non-positive radius or
            an ambient floor outside ``[0, 1]``.
    """

    def __init__(
        self,
        day: Texture,
        night: Optional[Texture] = None,
        template: Optional[SphereTemplate] = None,
        radius: float = 1.0,
        spin: float = 0.0,
        spin_speed: float = 0.0,
        night_mode: bool = False,
        sun_longitude: float = 0.0,
        ambient: float = DEFAULT_AMBIENT,
    ) -> None:
        if night is not None and night.size != day.size:
            raise ConfigError(
                f"Night texture is {night.width}x{night.height} but the day "
                f"texture is {day.width}x{day.height}"
            )
        if radius <= 0.0:
            raise ConfigError(f"Globe radius must be positive, got {radius}")
        if not 0.0 <= ambient <= 1.0:
            raise ConfigError(f"Ambient floor must lie in [0, 1], got {ambient}")

        self.template = template
        self.radius = radius
        self.spin = wrap_degrees(spin)
        self.spin_speed = spin_speed
        self.night_mode = night_mode
        self.sampler = TextureSampler(day, night, wrap_degrees(sun_longitude), ambient)

    @property
    def day(self) -> Texture:
        return self.sampler.day

    @property
    def night(self) -> Optional[Texture]:
        return self.sampler.night

    @property
    def sun_longitude(self) -> float:
        return self.sampler.subsolar_longitude

    def advance(self, dt: float) -> None:
        """Turn the globe by ``spin_speed * dt`` degrees."""
        if dt <= 0.0 or not self.spin_speed:
            return
        self.spin = wrap_degrees(self.spin + self.spin_speed * dt)

    def adjust_spin_speed(self, delta: float) -> None:
        """Change the spin speed by *delta* degrees per second."""
        self.spin_speed += delta

    def toggle_night(self) -> bool:
        """Flip night shading; returns the new setting."""
        self.night_mode = not self.night_mode
        return self.night_mode

    def brightness(self, hit: SurfaceHit) -> float:
        """Resolve the brightness of a surface hit in ``[0, 1]``."""
        return self.sampler.sample(
            hit.latitude,
            hit.longitude,
            world_lon=hit.world_longitude,
            night_mode=self.night_mode,
        )

    def __repr__(self) -> str:
        name = self.template.value if self.template else "custom"
        return (
            f"Globe({name}, {self.day.width}x{self.day.height}, "
            f"spin={self.spin:.2f}, night_mode={self.night_mode})"
        )


def build_globe(config: GlobeConfig | None = None) -> Globe:
    """Assemble a :class:`Globe` from a :class:`GlobeConfig`.

    Explicit ``day``/``night`` textures take precedence over the template's.

    Raises:
        ConfigError: If neither a template nor a day texture is given, or
            the resulting globe is invalid.
    """
    if config is None:
        config = GlobeConfig(template=SphereTemplate.EARTH)

    day, night = config.day, config.night
    if config.template is not None:
        template_day, template_night = config.template.textures()
        if day is None:
            day = template_day
        if night is None:
            night = template_night

    if day is None:
        raise ConfigError("A day texture or a template is required to build a globe")

    globe = Globe(
        day,
        night,
        template=config.template,
        radius=config.radius,
        spin=config.spin,
        spin_speed=config.spin_speed,
        night_mode=config.night_mode,
        sun_longitude=config.sun_longitude,
        ambient=config.ambient,
    )
    logger.debug("Built %r", globe)
    return globe
