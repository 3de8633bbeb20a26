"""Camera model: focus point, distance and orbit with smooth transitions.

The camera sits on a ray from the globe centre through its *focus point*
(latitude, longitude) at a given *distance*.  An extra *orbit* angle is
added to the focus longitude so the camera can circle the globe on its own,
independently of the globe's spin.

Every adjustable quantity has a *current* and a *target* value.  Requests
only touch the targets (clamped on the spot); :meth:`Camera.advance` moves
the current values toward them a little every frame.  The camera is
``RESTING`` when all current values equal their targets and
``INTERPOLATING`` otherwise.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Tuple

from termglobe.errors import ConfigError
from termglobe.geometry import clamp_latitude, shortest_delta, wrap_degrees

# Distance bounds, in globe radii.
DEFAULT_DISTANCE = 2.0
MIN_DISTANCE = 1.1
MAX_DISTANCE = 10.0
# The camera must stay at least this far outside the sphere surface.
MIN_CLEARANCE = 1e-3

# Interpolation rates (multiplied by CameraConfig.focus_speed).
# Each step is (base + ease * remaining) * dt, never past the target.
FOCUS_BASE_RATE = 30.0  # degrees per second
FOCUS_EASE_RATE = 2.0   # per second
ZOOM_BASE_RATE = 0.5    # radii per second
ZOOM_EASE_RATE = 2.0
ORBIT_BASE_ACCEL = 20.0  # degrees per second, per second
ORBIT_EASE_RATE = 2.0

# Epsilon snap thresholds.
FOCUS_EPSILON = 0.01  # degrees
ZOOM_EPSILON = 1e-3
SPEED_EPSILON = 1e-3  # degrees per second


class CameraState(enum.Enum):
    """Whether the camera is still moving toward a requested target."""

    RESTING = "resting"
    INTERPOLATING = "interpolating"


@dataclass
class CameraConfig:
    """Initial camera settings.

    Attributes:
        latitude: Starting focus latitude in degrees (default 0).
        longitude: Starting focus longitude in degrees (default 0).
        distance: Starting distance from the globe centre (default 2.0).
        min_distance: Closest allowed distance (default 1.1).
        max_distance: Farthest allowed distance (default 10.0).
        orbit: Starting orbit angle in degrees (default 0).
        orbit_speed: Orbit speed in degrees per second (default 0).
        focus_speed: Multiplier for all transition rates (default 1.0).
    """

    latitude: float = 0.0
    longitude: float = 0.0
    distance: float = DEFAULT_DISTANCE
    min_distance: float = MIN_DISTANCE
    max_distance: float = MAX_DISTANCE
    orbit: float = 0.0
    orbit_speed: float = 0.0
    focus_speed: float = 1.0

    def validate(self, radius: float = 1.0) -> None:
        """Check the settings against a globe of the given *radius*.

        Raises:
            ConfigError: If the bounds are inconsistent or the focus speed
                is not positive.
        """
        if radius <= 0.0:
            raise ConfigError(f"Globe radius must be positive, got {radius}")
        if self.min_distance > self.max_distance:
            raise ConfigError(
                f"min_distance ({self.min_distance}) exceeds "
                f"max_distance ({self.max_distance})"
            )
        if self.max_distance <= radius:
            raise ConfigError(
                f"max_distance ({self.max_distance}) must lie outside the "
                f"globe (radius {radius})"
            )
        if self.focus_speed <= 0.0:
            raise ConfigError(f"focus_speed must be positive, got {self.focus_speed}")


def _approach(delta: float, base: float, ease: float, dt: float) -> float:
    """Signed step toward a target *delta* away, capped at *delta*."""
    remaining = abs(delta)
    step = min(remaining, (base + ease * remaining) * dt)
    return math.copysign(step, delta)


class Camera:
    """Orbiting camera with target interpolation.

    Args:
        config: Initial settings; defaults to :class:`CameraConfig`.
        radius: Radius of the globe being viewed.  ``min_distance`` is raised
            above it so the camera can never enter the sphere.

    Raises:
        ConfigError: If *config* fails validation.
    """

    def __init__(self, config: CameraConfig | None = None, radius: float = 1.0) -> None:
        if config is None:
            config = CameraConfig()
        config.validate(radius)

        self.min_distance = max(config.min_distance, radius * (1.0 + MIN_CLEARANCE))
        self.max_distance = max(config.max_distance, self.min_distance)
        self.focus_speed = config.focus_speed

        self.latitude = clamp_latitude(config.latitude)
        self.longitude = wrap_degrees(config.longitude)
        self.distance = self._clamp_distance(config.distance)
        self.orbit = wrap_degrees(config.orbit)
        self.orbit_speed = config.orbit_speed

        self.target_latitude = self.latitude
        self.target_longitude = self.longitude
        self.target_distance = self.distance
        self.target_orbit_speed = self.orbit_speed

    def _clamp_distance(self, distance: float) -> float:
        return max(self.min_distance, min(self.max_distance, distance))

    # -- Read-only views -------------------------------------------------------

    @property
    def focus(self) -> Tuple[float, float]:
        """Current focus as ``(latitude, longitude)``."""
        return (self.latitude, self.longitude)

    @property
    def target_focus(self) -> Tuple[float, float]:
        """Requested focus as ``(latitude, longitude)``."""
        return (self.target_latitude, self.target_longitude)

    @property
    def view_longitude(self) -> float:
        """Longitude the view is centred on: focus longitude plus orbit."""
        return wrap_degrees(self.longitude + self.orbit)

    @property
    def focus_reached(self) -> bool:
        """Whether the current focus equals the requested focus."""
        return (self.latitude == self.target_latitude
                and self.longitude == self.target_longitude)

    @property
    def state(self) -> CameraState:
        """:attr:`CameraState.RESTING` once every target has been reached."""
        if (self.focus_reached
                and self.distance == self.target_distance
                and self.orbit_speed == self.target_orbit_speed):
            return CameraState.RESTING
        return CameraState.INTERPOLATING

    # -- Requests --------------------------------------------------------------

    def request_focus(self, lat: float, lon: float) -> None:
        """Start a smooth transition toward ``(lat, lon)``.

        Replaces any transition already in flight.  Latitude is clamped to
        ``[-90, 90]`` and longitude wrapped.
        """
        self.target_latitude = clamp_latitude(lat)
        self.target_longitude = wrap_degrees(lon)

    def set_focus(self, lat: float, lon: float) -> None:
        """Jump to ``(lat, lon)`` immediately, cancelling any transition."""
        self.request_focus(lat, lon)
        self.latitude = self.target_latitude
        self.longitude = self.target_longitude

    def pan(self, d_lat: float, d_lon: float) -> None:
        """Shift the focus by a delta right away (direct panning)."""
        self.set_focus(self.latitude + d_lat, self.longitude + d_lon)

    def request_zoom(self, distance: float) -> None:
        """Request a new distance; out-of-range values saturate at the bounds."""
        self.target_distance = self._clamp_distance(distance)

    def adjust_zoom(self, delta: float) -> None:
        """Move the distance target by *delta* (positive moves away)."""
        self.request_zoom(self.target_distance + delta)

    def request_orbit_speed(self, speed: float) -> None:
        """Request a new orbit speed in degrees per second."""
        self.target_orbit_speed = speed

    def adjust_orbit_speed(self, delta: float) -> None:
        """Change the orbit speed target by *delta* degrees per second."""
        self.request_orbit_speed(self.target_orbit_speed + delta)

    # -- Time stepping ---------------------------------------------------------

    def advance(self, dt: float) -> None:
        """Advance the camera by *dt* seconds.

        The orbit angle moves by the current orbit speed; then focus,
        distance and orbit speed each step toward their targets.  Longitude
        always takes the shorter way round.  Remaining deltas below the
        epsilon thresholds snap straight to the target.
        """
        if dt <= 0.0:
            return
        rate = self.focus_speed

        if self.orbit_speed:
            self.orbit = wrap_degrees(self.orbit + self.orbit_speed * dt)

        d_lat = self.target_latitude - self.latitude
        if abs(d_lat) > FOCUS_EPSILON:
            self.latitude += _approach(d_lat, FOCUS_BASE_RATE * rate, FOCUS_EASE_RATE * rate, dt)
        if abs(self.target_latitude - self.latitude) <= FOCUS_EPSILON:
            self.latitude = self.target_latitude

        d_lon = shortest_delta(self.longitude, self.target_longitude)
        if abs(d_lon) > FOCUS_EPSILON:
            self.longitude = wrap_degrees(
                self.longitude
                + _approach(d_lon, FOCUS_BASE_RATE * rate, FOCUS_EASE_RATE * rate, dt)
            )
        if abs(shortest_delta(self.longitude, self.target_longitude)) <= FOCUS_EPSILON:
            self.longitude = self.target_longitude

        d_dist = self.target_distance - self.distance
        if abs(d_dist) > ZOOM_EPSILON:
            self.distance += _approach(d_dist, ZOOM_BASE_RATE * rate, ZOOM_EASE_RATE * rate, dt)
        if abs(self.target_distance - self.distance) <= ZOOM_EPSILON:
            self.distance = self.target_distance

        d_speed = self.target_orbit_speed - self.orbit_speed
        if abs(d_speed) > SPEED_EPSILON:
            self.orbit_speed += _approach(d_speed, ORBIT_BASE_ACCEL * rate, ORBIT_EASE_RATE * rate, dt)
        if abs(self.target_orbit_speed - self.orbit_speed) <= SPEED_EPSILON:
            self.orbit_speed = self.target_orbit_speed

    def __repr__(self) -> str:
        return (
            f"Camera(lat={self.latitude:.3f}, lon={self.longitude:.3f}, "
            f"distance={self.distance:.3f}, orbit={self.orbit:.3f}, "
            f"state={self.state.value})"
        )
