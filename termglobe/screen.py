"""Curses output of finished canvases, with double-buffering.

The :class:`Screen` keeps two character buffers the size of the terminal.
Each frame is copied from a :class:`Canvas` into the back buffer (centred),
diffed against the front buffer, and only the changed cells are written to
the curses window before the buffers are swapped.
"""

from __future__ import annotations

import curses
from typing import Any, List, Optional, Tuple

from termglobe.canvas import BLANK, Canvas

# Minimum terminal size to render a useful globe.
MIN_TERM_COLS = 20
MIN_TERM_ROWS = 10
SIZE_WARNING = "Terminal too small!"

Buffer = List[List[str]]


# ---------------------------------------------------------------------------
# Buffer helpers
# ---------------------------------------------------------------------------

def make_buffer(rows: int, cols: int, fill: str = BLANK) -> Buffer:
    """Create a 2D buffer of *rows* x *cols* filled with *fill*."""
    return [[fill for _ in range(cols)] for _ in range(rows)]


def diff_buffers(front: Buffer, back: Buffer) -> List[Tuple[int, int, str]]:
    """Return ``(row, col, char)`` for every cell of *back* that differs from *front*.

    Buffers of different sizes are compared over their overlapping region.
    """
    changes: List[Tuple[int, int, str]] = []
    rows = min(len(front), len(back))
    for r in range(rows):
        cols = min(len(front[r]), len(back[r]))
        for c in range(cols):
            if front[r][c] != back[r][c]:
                changes.append((r, c, back[r][c]))
    return changes


def blit(buffer: Buffer, canvas: Canvas) -> None:
    """Copy *canvas* into *buffer*, centred; parts that do not fit are cut off."""
    rows = len(buffer)
    cols = len(buffer[0]) if rows else 0
    top = max(0, (rows - canvas.rows) // 2)
    left = max(0, (cols - canvas.columns) // 2)
    for r, line in enumerate(canvas):
        if top + r >= rows:
            break
        target = buffer[top + r]
        for c, ch in enumerate(line):
            if left + c >= cols:
                break
            target[left + c] = ch


# ---------------------------------------------------------------------------
# Screen
# ---------------------------------------------------------------------------

class Screen:
    """Curses-backed display of :class:`Canvas` frames.

    Cells outside the canvas, and canvases made by :meth:`make_canvas`, are
    filled with *blank* (the palette's background character).

    Usage (inside a curses wrapper)::

        def main(stdscr):
            screen = Screen(stdscr)
            canvas = screen.make_canvas()
            while True:
                controller.render(canvas)
                screen.show(canvas)
    """

    def __init__(self, stdscr: Any, blank: str = BLANK) -> None:
        self._stdscr = stdscr
        self.blank = blank
        self._setup_curses()

        self._rows: int = 0
        self._cols: int = 0
        self._front: Buffer = []
        self._back: Buffer = []
        self._resize_buffers()

    def _setup_curses(self) -> None:
        try:
            curses.curs_set(0)  # hide cursor
        except curses.error:
            pass  # some terminals cannot hide the cursor
        self._stdscr.nodelay(True)  # non-blocking getch
        self._stdscr.keypad(True)

    def _resize_buffers(self) -> None:
        try:
            max_y, max_x = self._stdscr.getmaxyx()
        except curses.error:
            max_y, max_x = 24, 80
        self._rows = max_y
        self._cols = max_x
        # the front buffer mirrors a freshly cleared terminal
        self._front = make_buffer(self._rows, self._cols)
        self._back = make_buffer(self._rows, self._cols, self.blank)

    @property
    def rows(self) -> int:
        """Number of rows in the current terminal."""
        return self._rows

    @property
    def cols(self) -> int:
        """Number of columns in the current terminal."""
        return self._cols

    def is_terminal_too_small(self) -> bool:
        """Return ``True`` when the terminal is below minimum usable size."""
        return self._rows < MIN_TERM_ROWS or self._cols < MIN_TERM_COLS

    def make_canvas(self, char_pix: Optional[Tuple[int, int]] = None) -> Canvas:
        """Return a canvas covering the whole terminal.

        The bottom-right cell is left out since curses cannot write there.
        """
        return Canvas.from_cells(max(0, self._cols - 1), self._rows, char_pix, self.blank)

    def show(self, canvas: Canvas) -> int:
        """Display *canvas*; returns the number of cells written."""
        if self.is_terminal_too_small():
            return self._show_size_warning()

        for row in self._back:
            for c in range(len(row)):
                row[c] = self.blank
        blit(self._back, canvas)
        return self._swap()

    def _show_size_warning(self) -> int:
        for row in self._back:
            for c in range(len(row)):
                row[c] = self.blank
        if self._rows and self._cols:
            msg = SIZE_WARNING[: self._cols]
            row = self._rows // 2
            col = max(0, (self._cols - len(msg)) // 2)
            for i, ch in enumerate(msg):
                self._back[row][col + i] = ch
        return self._swap()

    def _swap(self) -> int:
        changes = diff_buffers(self._front, self._back)
        self._flush_changes(changes)
        self._front, self._back = self._back, self._front
        return len(changes)

    def _flush_changes(self, changes: List[Tuple[int, int, str]]) -> None:
        for row, col, ch in changes:
            try:
                self._stdscr.addstr(row, col, ch)
            except curses.error:
                # curses refuses the bottom-right corner
                pass
        try:
            self._stdscr.noutrefresh()
            curses.doupdate()
        except curses.error:
            pass

    def clear(self) -> None:
        """Clear both buffers and the screen."""
        self._front = make_buffer(self._rows, self._cols)
        self._back = make_buffer(self._rows, self._cols, self.blank)
        try:
            self._stdscr.clear()
            self._stdscr.noutrefresh()
            curses.doupdate()
        except curses.error:
            pass

    def handle_resize(self) -> None:
        """Call after receiving a ``curses.KEY_RESIZE`` event."""
        try:
            curses.update_lines_cols()
        except (curses.error, AttributeError):
            pass
        self._resize_buffers()
        self.clear()
