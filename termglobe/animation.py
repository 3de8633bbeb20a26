"""Time-driven control of the globe and camera.

:class:`AnimationController` is the one place the surrounding application
talks to between frames: it forwards speed, zoom, night and focus requests
to the :class:`Globe` and :class:`Camera`, and :meth:`AnimationController.tick`
advances both by the elapsed time the caller measured.  Nothing here reads
the clock.

:class:`ListingPlayback` walks a list of focus targets ("listing" mode):
each target is requested in turn and the next one only once the camera has
reached the current one.

Focus targets are places on the globe, not directions in space.  The camera
flies in the world frame, so a target is turned into a world longitude by
subtracting the current spin, and the controller re-aims at it every tick
while the globe turns.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from termglobe.camera import Camera
from termglobe.canvas import Canvas, rasterize
from termglobe.errors import CoordinateError
from termglobe.geometry import wrap_degrees
from termglobe.globe import Globe

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]


# ---------------------------------------------------------------------------
# Coordinate lists
# ---------------------------------------------------------------------------

def normalized_to_latlon(x: float, y: float, signed: bool = False) -> LatLon:
    """Convert a normalized ``(x, y)`` pair to ``(latitude, longitude)``.

    With ``signed=False`` both values lie in ``[0, 1]``: x=0 is longitude
    -180 and x=1 is +180; y=0 is the south pole and y=1 the north pole.
    With ``signed=True`` both lie in ``[-1, 1]`` and scale to +/-180 and
    +/-90.

    Raises:
        CoordinateError: If a value is outside its range.
    """
    low = -1.0 if signed else 0.0
    for name, value in (("x", x), ("y", y)):
        if not low <= value <= 1.0:
            raise CoordinateError(
                f"Coordinate {name}={value} outside [{low:g}, 1]"
            )
    if signed:
        return (y * 90.0, x * 180.0)
    return (y * 180.0 - 90.0, x * 360.0 - 180.0)


def parse_coordinate_list(text: str, signed: bool = False) -> List[LatLon]:
    """Parse ``"x,y;x,y;..."`` into a list of ``(latitude, longitude)``.

    Whitespace around values is ignored and empty records (a trailing
    semicolon, a final newline) are skipped.

    Raises:
        CoordinateError: If a record is not two comma-separated numbers or a
            value is out of range.
    """
    targets: List[LatLon] = []
    for index, record in enumerate(text.split(";")):
        record = record.strip()
        if not record:
            continue
        parts = record.split(",")
        if len(parts) != 2:
            raise CoordinateError(
                f"Record {index} {record!r}: expected 'x,y'"
            )
        try:
            x, y = float(parts[0]), float(parts[1])
        except ValueError:
            raise CoordinateError(
                f"Record {index} {record!r}: values must be numbers"
            ) from None
        targets.append(normalized_to_latlon(x, y, signed))
    return targets


# ---------------------------------------------------------------------------
# Listing playback
# ---------------------------------------------------------------------------

class ListingPlayback:
    """Sequential focus targets.

    Args:
        targets: ``(latitude, longitude)`` pairs, visited in order.
        dwell: Seconds to hold on a reached target before requesting the
            next one.
    """

    def __init__(self, targets: Sequence[LatLon], dwell: float = 0.0) -> None:
        self.targets: List[LatLon] = list(targets)
        self.dwell = max(0.0, dwell)
        self.index = -1
        self._held = 0.0

    @property
    def current(self) -> Optional[LatLon]:
        """The target in flight (or being held), ``None`` before :meth:`start`."""
        if 0 <= self.index < len(self.targets):
            return self.targets[self.index]
        return None

    @property
    def remaining(self) -> int:
        """Targets not yet requested."""
        return max(0, len(self.targets) - self.index - 1)

    @property
    def finished(self) -> bool:
        """Whether the last target is the current one."""
        return self.remaining == 0 and self.index >= 0

    def start(self, camera: Camera, spin: float = 0.0) -> None:
        """Request the first target."""
        self.index = -1
        self._request_next(camera, spin)

    def skip(self, camera: Camera, spin: float = 0.0) -> bool:
        """Request the next target right away.

        Returns:
            ``False`` when there is no next target (nothing changes).
        """
        return self._request_next(camera, spin)

    def update(self, camera: Camera, dt: float, spin: float = 0.0) -> None:
        """Request the next target once the current one has been reached.

        Call after :meth:`Camera.advance` each frame.  Holds on the last
        target.
        """
        if self.current is None or not camera.focus_reached:
            return
        self._held += max(0.0, dt)
        if self._held >= self.dwell:
            self._request_next(camera, spin)

    def _request_next(self, camera: Camera, spin: float) -> bool:
        if self.index + 1 >= len(self.targets):
            return False
        self.index += 1
        self._held = 0.0
        lat, lon = self.targets[self.index]
        camera.request_focus(lat, wrap_degrees(lon - spin))
        logger.debug("Listing target %d/%d: lat=%.2f lon=%.2f",
                     self.index + 1, len(self.targets), lat, lon)
        return True


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class AnimationController:
    """Route requests to the globe and camera and advance them over time.

    Args:
        globe: The globe to spin.
        camera: The camera to move.
    """

    def __init__(self, globe: Globe, camera: Camera) -> None:
        self.globe = globe
        self.camera = camera
        self.playback: Optional[ListingPlayback] = None
        self.anchor: Optional[LatLon] = None

    # -- Requests --------------------------------------------------------------

    def adjust_spin_speed(self, delta: float) -> None:
        """Change the globe's spin speed by *delta* degrees per second."""
        self.globe.adjust_spin_speed(delta)

    def adjust_orbit_speed(self, delta: float) -> None:
        """Change the camera's orbit speed target by *delta* degrees per second."""
        self.camera.adjust_orbit_speed(delta)

    def adjust_zoom(self, delta: float) -> None:
        """Move the camera distance target by *delta* (clamped)."""
        self.camera.adjust_zoom(delta)

    def toggle_night(self) -> bool:
        """Flip night shading; returns the new setting."""
        return self.globe.toggle_night()

    def pan(self, d_lat: float, d_lon: float) -> None:
        """Shift the camera focus immediately, releasing any focused place."""
        self.anchor = None
        self.camera.pan(d_lat, d_lon)

    def focus_on(self, lat: float, lon: float) -> None:
        """Start a smooth transition to the place ``(lat, lon)`` on the globe.

        The camera keeps that place centred while the globe spins, until the
        next pan or focus request.
        """
        self.anchor = (lat, lon)
        self._aim()

    def play(self, targets: Sequence[LatLon], dwell: float = 0.0) -> ListingPlayback:
        """Start listing playback over *targets* and return the playback."""
        self.anchor = None
        self.playback = ListingPlayback(targets, dwell)
        self.playback.start(self.camera, self.globe.spin)
        return self.playback

    def next_target(self) -> bool:
        """Skip to the next listed target; ``False`` when there is none."""
        if self.playback is None:
            return False
        return self.playback.skip(self.camera, self.globe.spin)

    # -- Frame stepping --------------------------------------------------------

    def _aim(self) -> None:
        target = self.anchor
        if target is None and self.playback is not None:
            target = self.playback.current
        if target is not None:
            lat, lon = target
            self.camera.request_focus(lat, wrap_degrees(lon - self.globe.spin))

    def tick(self, dt: float) -> None:
        """Advance globe, camera and playback by *dt* seconds."""
        self.globe.advance(dt)
        self._aim()
        self.camera.advance(dt)
        if self.playback is not None:
            self.playback.update(self.camera, dt, self.globe.spin)

    def render(self, canvas: Canvas, ramp: Optional[str] = None) -> Canvas:
        """Rasterize the current state into *canvas*."""
        return rasterize(self.globe, self.camera, canvas, ramp)
