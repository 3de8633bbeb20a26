"""CLI argument parsing and entry point.

Builds a globe and camera from the command line, then runs one of three
curses loops around :class:`AnimationController`:

* ``--screensaver``: the globe turns on its own; any key exits.
* ``--interactive``: keys and mouse steer the camera.
* ``--pipe``: reads ``x,y;x,y;...`` from stdin and flies to each location
  in turn; any key skips ahead, ``q`` exits.
"""

from __future__ import annotations

import argparse
import curses
import enum
import logging
import os
import sys
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from termglobe import __version__
from termglobe.animation import AnimationController, LatLon, parse_coordinate_list
from termglobe.camera import Camera, CameraConfig
from termglobe.canvas import BLANK
from termglobe.errors import TermGlobeError
from termglobe.globe import GlobeConfig, SphereTemplate, build_globe
from termglobe.input import MouseAction, MouseTracker
from termglobe.palettes import get_palette, list_palettes
from termglobe.screen import Screen
from termglobe.texture import Texture
from termglobe.utils import ResizeDebouncer, detect_unicode_support, is_terminal

logger = logging.getLogger(__name__)

LOG_ENV = "TERMGLOBE_LOG"


class Mode(enum.Enum):
    """Which display loop to run."""

    SCREENSAVER = "screensaver"
    INTERACTIVE = "interactive"
    LISTING = "listing"


# ---------------------------------------------------------------------------
# Defaults and control steps
# ---------------------------------------------------------------------------

DEFAULT_REFRESH_RATE = 60
DEFAULT_ZOOM = 1.7
DEFAULT_LOCATION = "0.4,0.6"

# Degrees per second added per key press.
SPIN_STEP = 5.0
ORBIT_STEP = 5.0
# Degrees per pan key press / per cell of mouse drag.
PAN_STEP = 6.0
DRAG_SENSITIVITY = 6.0
# Distance change per zoom key press or wheel notch.
ZOOM_STEP = 0.1

_QUIT_KEYS = (ord("q"), ord("Q"), 27)  # 27 = Esc
_ENTER_KEYS = (curses.KEY_ENTER, 10, 13)


@dataclass
class CLIConfig:
    """Parsed CLI configuration passed to the display loop."""

    mode: Mode = Mode.SCREENSAVER
    refresh_rate: int = DEFAULT_REFRESH_RATE
    globe_rotation: float = 0.0
    cam_rotation: float = 0.0
    cam_zoom: float = DEFAULT_ZOOM
    focus_speed: float = 1.0
    location: LatLon = (0.0, 0.0)
    night: bool = False
    template: str = SphereTemplate.EARTH.value
    texture: Optional[str] = None
    texture_night: Optional[str] = None
    palette: Optional[str] = None
    verbose: bool = False
    log_file: Optional[str] = None


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def _configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure logging (level from --verbose or TERMGLOBE_LOG).

    Records go to *log_file* when given, since curses owns the terminal
    while the globe is on screen; otherwise to stderr.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    env_level = os.environ.get(LOG_ENV, "").upper()
    if env_level in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = getattr(logging, env_level)
    handler_args: dict[str, Any] = {"filename": log_file} if log_file else {"stream": sys.stderr}
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s: %(name)s: %(message)s",
        **handler_args,
    )


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _validate_palette(name: str) -> str:
    """Exit with a helpful message if *name* is not a known palette."""
    available = list_palettes()
    if name not in available:
        print(
            f"Error: Unknown palette '{name}'. "
            f"Available palettes: {', '.join(available) or '(none)'}",
            file=sys.stderr,
        )
        sys.exit(2)
    return name


def parse_args(argv: Optional[Sequence[str]] = None) -> CLIConfig:
    """Parse CLI arguments and return a :class:`CLIConfig`.

    Parameters
    ----------
    argv : sequence of str or None
        Arguments to parse; ``None`` reads ``sys.argv[1:]``.
    """
    parser = argparse.ArgumentParser(
        prog="termglobe",
        description="Render an ASCII globe in your terminal.",
    )

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument("-i", "--interactive", action="store_true",
                       help="Interactive mode (keyboard and mouse input)")
    modes.add_argument("-s", "--screensaver", action="store_true",
                       help="Screensaver mode (default; any key exits)")
    modes.add_argument("-p", "--pipe", action="store_true",
                       help="Read 'x,y;x,y;...' locations from stdin and visit them")

    parser.add_argument("-r", "--refresh-rate", type=int, default=DEFAULT_REFRESH_RATE,
                        metavar="FPS", help="Frames per second (default: 60)")
    parser.add_argument("-g", "--globe-rotation", type=float, default=0.0,
                        metavar="DEG_PER_S", help="Starting globe spin speed (default: 0)")
    parser.add_argument("-c", "--cam-rotation", type=float, default=0.0,
                        metavar="DEG_PER_S", help="Starting camera orbit speed (default: 0)")
    parser.add_argument("-z", "--cam-zoom", type=float, default=DEFAULT_ZOOM,
                        metavar="DISTANCE", help="Starting camera distance (default: 1.7)")
    parser.add_argument("-f", "--focus-speed", type=float, default=1.0,
                        metavar="MULTIPLIER", help="Focus animation speed (default: 1)")
    parser.add_argument("-l", "--location", default=DEFAULT_LOCATION, metavar="X,Y",
                        help="Starting location, normalized lon,lat (default: 0.4,0.6)")
    parser.add_argument("-n", "--night", action="store_true",
                        help="Shade the night side of the globe")
    parser.add_argument("-t", "--template", default=SphereTemplate.EARTH.value,
                        choices=[t.value for t in SphereTemplate],
                        help="Built-in globe template (default: earth)")
    parser.add_argument("--texture", metavar="PATH",
                        help="Day texture file (ASCII art in the palette's characters)")
    parser.add_argument("--texture-night", metavar="PATH",
                        help="Night texture file")
    parser.add_argument("--palette", metavar="NAME",
                        help="Character ramp (default: the template's)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log debug messages")
    parser.add_argument("--log-file", metavar="PATH",
                        help="Write log records to PATH instead of stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(argv)

    if args.refresh_rate <= 0:
        parser.error("--refresh-rate must be positive")
    if args.focus_speed <= 0:
        parser.error("--focus-speed must be positive")
    try:
        locations = parse_coordinate_list(args.location)
    except TermGlobeError as exc:
        parser.error(f"--location: {exc}")
    if len(locations) != 1:
        parser.error("--location expects a single 'x,y' pair")
    if args.palette is not None:
        _validate_palette(args.palette)

    if args.interactive:
        mode = Mode.INTERACTIVE
    elif args.pipe:
        mode = Mode.LISTING
    else:
        mode = Mode.SCREENSAVER

    return CLIConfig(
        mode=mode,
        refresh_rate=args.refresh_rate,
        globe_rotation=args.globe_rotation,
        cam_rotation=args.cam_rotation,
        cam_zoom=args.cam_zoom,
        focus_speed=args.focus_speed,
        location=locations[0],
        night=args.night,
        template=args.template,
        texture=args.texture,
        texture_night=args.texture_night,
        palette=args.palette,
        verbose=args.verbose,
        log_file=args.log_file,
    )


# ---------------------------------------------------------------------------
# Scene construction
# ---------------------------------------------------------------------------

def choose_palette(config: CLIConfig) -> str:
    """Return the palette name to render with.

    Falls back to the plain ASCII ramp when the chosen one needs Unicode
    and the terminal does not look Unicode-capable.
    """
    name = config.palette or SphereTemplate(config.template).default_palette
    if get_palette(name).use_unicode and not detect_unicode_support():
        logger.warning("Palette %s needs Unicode; falling back to ascii", name)
        return "ascii"
    return name


def _load_texture(path: str, ramp: str) -> Texture:
    with open(path, encoding="utf-8") as fh:
        return Texture.from_text(fh.read(), ramp)


def build_controller(config: CLIConfig, ramp: str) -> AnimationController:
    """Build the globe, camera and controller described by *config*.

    Raises:
        TermGlobeError: On invalid textures or camera settings.
        OSError: If a texture file cannot be read.
    """
    day = _load_texture(config.texture, ramp) if config.texture else None
    night = _load_texture(config.texture_night, ramp) if config.texture_night else None
    # custom day texture without a night one: do not mix in the template's
    template = None if day is not None else SphereTemplate(config.template)

    globe = build_globe(GlobeConfig(
        template=template,
        day=day,
        night=night,
        spin_speed=config.globe_rotation,
        night_mode=config.night,
    ))
    lat, lon = config.location
    camera = Camera(
        CameraConfig(
            latitude=lat,
            longitude=lon,
            distance=config.cam_zoom,
            orbit_speed=config.cam_rotation,
            focus_speed=config.focus_speed,
        ),
        radius=globe.radius,
    )
    return AnimationController(globe, camera)


# ---------------------------------------------------------------------------
# Input dispatch
# ---------------------------------------------------------------------------

def handle_key(key: int, mode: Mode, controller: AnimationController,
               home: LatLon = (0.0, 0.0)) -> bool:
    """Apply one key press.  Returns ``False`` when the program should exit."""
    if key == -1 or key in (curses.KEY_RESIZE, curses.KEY_MOUSE):
        return True
    if mode is Mode.SCREENSAVER:
        return False
    if key in _QUIT_KEYS:
        return False
    if mode is Mode.LISTING:
        return controller.next_target()

    if key == ord("+"):
        controller.adjust_spin_speed(SPIN_STEP)
    elif key == ord("-"):
        controller.adjust_spin_speed(-SPIN_STEP)
    elif key == ord("."):
        controller.adjust_orbit_speed(ORBIT_STEP)
    elif key == ord(","):
        controller.adjust_orbit_speed(-ORBIT_STEP)
    elif key == ord("n"):
        controller.toggle_night()
    elif key in (ord("h"), curses.KEY_LEFT):
        controller.pan(0.0, -PAN_STEP)
    elif key in (ord("l"), curses.KEY_RIGHT):
        controller.pan(0.0, PAN_STEP)
    elif key in (ord("k"), curses.KEY_UP):
        controller.pan(PAN_STEP, 0.0)
    elif key in (ord("j"), curses.KEY_DOWN):
        controller.pan(-PAN_STEP, 0.0)
    elif key == curses.KEY_PPAGE:
        controller.adjust_zoom(-ZOOM_STEP)
    elif key == curses.KEY_NPAGE:
        controller.adjust_zoom(ZOOM_STEP)
    elif key in _ENTER_KEYS:
        controller.focus_on(*home)
    return True


def handle_mouse(action: MouseAction, dx: int, dy: int, controller: AnimationController) -> None:
    """Drag pans the camera with the pointer; the wheel zooms."""
    if action in (MouseAction.DRAG_START, MouseAction.DRAG_MOVE):
        controller.pan(dy * DRAG_SENSITIVITY, -dx * DRAG_SENSITIVITY)
    elif action is MouseAction.SCROLL_UP:
        controller.adjust_zoom(-ZOOM_STEP)
    elif action is MouseAction.SCROLL_DOWN:
        controller.adjust_zoom(ZOOM_STEP)


# ---------------------------------------------------------------------------
# Display loop
# ---------------------------------------------------------------------------

def compute_frame_sleep(frame_start: float, target: float) -> float:
    """Seconds left to sleep to hit a *target* frame time (never negative)."""
    return max(0.0, target - (time.monotonic() - frame_start))


def _display_loop(
    stdscr: Any,
    config: CLIConfig,
    controller: AnimationController,
    ramp: str,
    targets: Optional[List[LatLon]] = None,
    blank: str = BLANK,
) -> None:
    """Run the curses frame loop until the user exits.

    *blank* fills every cell the globe does not cover.
    """
    screen = Screen(stdscr, blank)
    canvas = screen.make_canvas()
    debouncer = ResizeDebouncer(interval=0.1)
    mouse = MouseTracker(stdscr) if config.mode is Mode.INTERACTIVE else None
    frame_time = 1.0 / config.refresh_rate

    if targets:
        controller.play(targets)

    prev_frame = time.monotonic()
    try:
        while True:
            frame_start = time.monotonic()
            dt = frame_start - prev_frame
            prev_frame = frame_start

            try:
                key = stdscr.getch()
            except curses.error:
                key = -1

            if key == curses.KEY_RESIZE:
                if debouncer.should_handle():
                    screen.handle_resize()
                    canvas = screen.make_canvas()
            elif not handle_key(key, config.mode, controller, config.location):
                break

            if mouse is not None:
                event = mouse.feed(key)
                if event is not None:
                    handle_mouse(event.action, event.dx, event.dy, controller)

            if debouncer.flush():
                screen.handle_resize()
                canvas = screen.make_canvas()

            controller.tick(dt)
            controller.render(canvas, ramp)
            screen.show(canvas)

            sleep_time = compute_frame_sleep(frame_start, frame_time)
            if sleep_time > 0.001:
                time.sleep(sleep_time)
    finally:
        if mouse is not None:
            mouse.disable_mouse()


def _reattach_tty() -> None:
    """Point stdin back at the terminal after the coordinate list was read."""
    fd = os.open("/dev/tty", os.O_RDONLY)
    os.dup2(fd, 0)
    os.close(fd)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point for termglobe.

    Parses arguments, builds the scene, and runs the display loop inside
    ``curses.wrapper`` so the terminal is restored even on errors.
    """
    config = parse_args(argv)
    _configure_logging(config.verbose, config.log_file)

    if not is_terminal():
        print(
            "Error: termglobe requires an interactive terminal. "
            "Output appears to be piped or redirected.",
            file=sys.stderr,
        )
        sys.exit(1)

    try:
        palette = choose_palette(config)
        chosen = get_palette(palette)
        ramp = chosen.ramp
        controller = build_controller(config, ramp)
        targets = None
        if config.mode is Mode.LISTING:
            targets = parse_coordinate_list(sys.stdin.read())
            if not targets:
                raise TermGlobeError("No coordinates on stdin")
            _reattach_tty()
    except (TermGlobeError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    logger.info("Starting %s mode with palette %s", config.mode.value, palette)
    try:
        curses.wrapper(lambda stdscr: _display_loop(
            stdscr, config, controller, ramp, targets, chosen.background_char
        ))
    except KeyboardInterrupt:
        pass  # clean exit on Ctrl-C
