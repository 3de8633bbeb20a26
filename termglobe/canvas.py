"""Character canvas and the rasterizer that fills it.

A :class:`Canvas` is sized in sub-pixels and divided into character cells
of ``char_pix`` sub-pixels each (4 wide by 8 tall by default, roughly the
aspect of a monospace glyph).  Its logical grid is therefore
``width // 4`` columns by ``height // 8`` rows.

:func:`rasterize` clears the canvas and writes every cell from
:func:`shade_cell`, a pure function of the globe, the cell's surface hit and
the ramp.  Cells share no state, so the order they are written in does not
matter; rows are filled top to bottom.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

from termglobe.errors import ConfigError
from termglobe.projector import CellHit, SphereProjector

if TYPE_CHECKING:
    from termglobe.camera import Camera
    from termglobe.globe import Globe

DEFAULT_CHAR_PIX = (4, 8)
BLANK = " "
# Used when neither the caller nor the globe's template names a palette.
DEFAULT_RAMP = " .:-=+*#%@"


class Canvas:
    """Fixed-size grid of characters.

    Args:
        width: Width in sub-pixels.
        height: Height in sub-pixels.
        char_pix: Sub-pixels per character as ``(width, height)``.
        blank: Character used for empty cells.

    Raises:
        ConfigError: If a dimension is negative or ``char_pix`` is not
            positive.
    """

    def __init__(
        self,
        width: int,
        height: int,
        char_pix: Optional[Tuple[int, int]] = None,
        blank: str = BLANK,
    ) -> None:
        char_pix = char_pix or DEFAULT_CHAR_PIX
        if width < 0 or height < 0:
            raise ConfigError(f"Canvas size must not be negative, got {width}x{height}")
        if char_pix[0] <= 0 or char_pix[1] <= 0:
            raise ConfigError(f"char_pix must be positive, got {char_pix}")

        self.width = width
        self.height = height
        self.char_pix = (char_pix[0], char_pix[1])
        self.blank = blank
        self.columns = width // self.char_pix[0]
        self.rows = height // self.char_pix[1]
        self.matrix: List[List[str]] = [[blank] * self.columns for _ in range(self.rows)]

    @classmethod
    def from_cells(
        cls,
        columns: int,
        rows: int,
        char_pix: Optional[Tuple[int, int]] = None,
        blank: str = BLANK,
    ) -> "Canvas":
        """Build a canvas holding exactly ``columns`` x ``rows`` characters."""
        cw, ch = char_pix or DEFAULT_CHAR_PIX
        return cls(columns * cw, rows * ch, (cw, ch), blank)

    @property
    def size(self) -> Tuple[int, int]:
        """``(columns, rows)`` in characters."""
        return (self.columns, self.rows)

    def clear(self) -> None:
        """Reset every cell to the blank character."""
        for row in self.matrix:
            for col in range(self.columns):
                row[col] = self.blank

    def draw_point(self, column: int, row: int, char: str) -> None:
        """Write *char* at a cell; positions outside the grid are ignored."""
        if 0 <= column < self.columns and 0 <= row < self.rows:
            self.matrix[row][column] = char

    def cell(self, column: int, row: int) -> str:
        """Return the character at a cell."""
        return self.matrix[row][column]

    def lines(self) -> List[str]:
        """Return the grid as one string per row."""
        return ["".join(row) for row in self.matrix]

    def __iter__(self) -> Iterator[List[str]]:
        return iter(self.matrix)

    def __str__(self) -> str:
        return "\n".join(self.lines())

    def __repr__(self) -> str:
        return f"Canvas({self.columns}x{self.rows} cells, char_pix={self.char_pix})"


def select_character(brightness: float, ramp: str) -> str:
    """Choose the ramp character for a brightness in ``[0, 1]``.

    Args:
        brightness: 0 is darkest, 1 brightest; values outside are clamped.
        ramp: Characters ordered from darkest to brightest.

    Returns:
        A single character string (a space for an empty ramp).
    """
    if not ramp:
        return BLANK
    brightness = max(0.0, min(1.0, brightness))
    idx = int(brightness * (len(ramp) - 1))
    return ramp[max(0, min(idx, len(ramp) - 1))]


def shade_cell(globe: "Globe", hit: CellHit, ramp: str, blank: str = BLANK) -> str:
    """Resolve the character of one cell from its surface hit."""
    if hit is None:
        return blank
    return select_character(globe.brightness(hit), ramp)


def resolve_ramp(globe: "Globe", ramp: Optional[str] = None) -> str:
    """Pick the ramp: explicit, else the template's palette, else the default."""
    if ramp:
        return ramp
    if globe.template is not None:
        from termglobe.palettes import get_palette

        return get_palette(globe.template.default_palette).ramp
    return DEFAULT_RAMP


def rasterize(
    globe: "Globe",
    camera: "Camera",
    canvas: Canvas,
    ramp: Optional[str] = None,
) -> Canvas:
    """Render one frame of *globe* seen by *camera* into *canvas*.

    The canvas is cleared first and every cell is overwritten.  Rendering is
    total: a validly built globe and camera always yield a full grid.

    Returns:
        The same *canvas*, for chaining.
    """
    chars = resolve_ramp(globe, ramp)
    projector = SphereProjector.for_scene(globe, camera, canvas)

    canvas.clear()
    for row in range(canvas.rows):
        for column in range(canvas.columns):
            hit = projector.cast(column, row)
            if hit is not None:
                canvas.draw_point(column, row, shade_cell(globe, hit, chars, canvas.blank))
    return canvas
