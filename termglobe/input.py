"""Pointer tracking for interactive mode.

Curses reports the mouse as ``KEY_MOUSE`` key codes plus a button bitmask.
:class:`MouseTracker` folds those reports into drags (left button held and
moved) and wheel notches; the CLI turns drags into camera pans and the
wheel into zoom.  Every ``getch()`` result can be fed in; non-mouse keys
yield ``None``.
"""

from __future__ import annotations

import curses
import enum
import sys
from dataclasses import dataclass
from typing import Any, Optional


class MouseAction(enum.Enum):
    """High-level mouse actions."""

    DRAG_START = "drag_start"
    DRAG_MOVE = "drag_move"
    DRAG_END = "drag_end"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"


@dataclass(frozen=True)
class MouseEvent:
    """A processed mouse event.

    Attributes:
        action: The high-level action type.
        x: Screen column of the event.
        y: Screen row of the event.
        dx: Columns moved since the previous drag event.
        dy: Rows moved since the previous drag event.
    """

    action: MouseAction
    x: int = 0
    y: int = 0
    dx: int = 0
    dy: int = 0


# Cells the pointer must travel while pressed before a press becomes a drag.
_DRAG_THRESHOLD = 2

# xterm mouse tracking: 1002 = motion while pressed, 1006 = SGR coordinates.
_ENABLE_TRACKING = "\033[?1002h\033[?1006h"
_DISABLE_TRACKING = "\033[?1006l\033[?1002l"


class MouseTracker:
    """Left-button drag and wheel tracker.

    A press only becomes a drag once the pointer has travelled
    ``_DRAG_THRESHOLD`` cells, so a plain click never nudges the camera.

    Attributes:
        mouse_supported: Whether curses accepted mouse reporting.
    """

    def __init__(self, stdscr: Any | None = None) -> None:
        self._stdscr = stdscr
        self._pressed = False
        self._dragging = False
        self._press_x = 0
        self._press_y = 0
        self._last_x = 0
        self._last_y = 0
        self.mouse_supported = False

        if stdscr is not None:
            self.enable_mouse()

    def enable_mouse(self) -> bool:
        """Request mouse reporting from curses and the terminal.

        Returns:
            ``True`` if curses accepted mouse events.
        """
        try:
            available, _ = curses.mousemask(
                curses.ALL_MOUSE_EVENTS | curses.REPORT_MOUSE_POSITION
            )
            self.mouse_supported = available != 0
        except curses.error:
            self.mouse_supported = False

        if self.mouse_supported:
            # the mask alone does not make most terminals report motion
            try:
                sys.stdout.write(_ENABLE_TRACKING)
                sys.stdout.flush()
            except OSError:
                pass
        return self.mouse_supported

    def disable_mouse(self) -> None:
        """Turn terminal mouse tracking back off."""
        if not self.mouse_supported:
            return
        try:
            sys.stdout.write(_DISABLE_TRACKING)
            sys.stdout.flush()
        except OSError:
            pass

    def feed(self, key: int) -> Optional[MouseEvent]:
        """Translate a key code into an :class:`MouseEvent`.

        Only ``curses.KEY_MOUSE`` is handled; anything else returns ``None``.
        """
        if key != curses.KEY_MOUSE:
            return None
        try:
            _id, mx, my, _mz, bstate = curses.getmouse()
        except curses.error:
            return None
        return self._handle_mouse(mx, my, bstate)

    def _handle_mouse(self, mx: int, my: int, bstate: int) -> Optional[MouseEvent]:
        if bstate & _scroll_up_mask():
            return MouseEvent(MouseAction.SCROLL_UP, mx, my)
        if bstate & _scroll_down_mask():
            return MouseEvent(MouseAction.SCROLL_DOWN, mx, my)

        if bstate & _button1_pressed_mask():
            self._pressed = True
            self._dragging = False
            self._press_x = self._last_x = mx
            self._press_y = self._last_y = my
            return None

        released = bool(bstate & _button1_released_mask())
        moved = mx != self._last_x or my != self._last_y
        if self._pressed and not released and moved:
            if not self._dragging:
                total_dx = mx - self._press_x
                total_dy = my - self._press_y
                if abs(total_dx) + abs(total_dy) < _DRAG_THRESHOLD:
                    return None
                self._dragging = True
                self._last_x, self._last_y = mx, my
                return MouseEvent(MouseAction.DRAG_START, mx, my, total_dx, total_dy)
            dx, dy = mx - self._last_x, my - self._last_y
            self._last_x, self._last_y = mx, my
            return MouseEvent(MouseAction.DRAG_MOVE, mx, my, dx, dy)

        if released:
            was_dragging = self._dragging
            self._pressed = False
            self._dragging = False
            dx, dy = mx - self._last_x, my - self._last_y
            self._last_x, self._last_y = mx, my
            if was_dragging:
                return MouseEvent(MouseAction.DRAG_END, mx, my, dx, dy)
        return None


# Curses bitmask lookups, with fallbacks for builds lacking the constants.

def _button1_pressed_mask() -> int:
    return getattr(curses, "BUTTON1_PRESSED", 0x2)


def _button1_released_mask() -> int:
    return getattr(curses, "BUTTON1_RELEASED", 0x1)


def _scroll_up_mask() -> int:
    return getattr(curses, "BUTTON4_PRESSED", 0x10000) | getattr(curses, "BUTTON4_CLICKED", 0x20000)


def _scroll_down_mask() -> int:
    return getattr(curses, "BUTTON5_PRESSED", 0x200000) | getattr(curses, "BUTTON5_CLICKED", 0x400000)
