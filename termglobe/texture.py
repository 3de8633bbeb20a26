"""Texture grids and latitude/longitude lookup.

A :class:`Texture` is an immutable grid of brightness samples in
``[0.0, 1.0]``.  Row 0 is the north pole and the last row the south pole;
column 0 is longitude -180 and columns run eastward.  Lookups wrap around on
longitude and clamp on latitude, so the poles are single rows and the
antimeridian has no seam.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from termglobe.errors import ConfigError


@dataclass(frozen=True)
class Texture:
    """Immutable brightness grid.

    Attributes:
        rows: Tuple of rows, each a tuple of floats in ``[0, 1]``.
        width: Number of columns (pixels per row).
        height: Number of rows.
    """

    rows: Tuple[Tuple[float, ...], ...]
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.height <= 0 or self.width <= 0:
            raise ConfigError(
                f"Texture dimensions must be positive, got {self.width}x{self.height}"
            )
        if len(self.rows) != self.height:
            raise ConfigError(
                f"Texture declares {self.height} rows but holds {len(self.rows)}"
            )
        for index, row in enumerate(self.rows):
            if len(row) != self.width:
                raise ConfigError(
                    f"Texture row {index} has {len(row)} samples, expected {self.width}"
                )

    # -- Constructors ----------------------------------------------------------

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[float]]) -> "Texture":
        """Build a texture from nested sequences of brightness values.

        Values are clamped to ``[0, 1]``.

        Raises:
            ConfigError: If the grid is empty or ragged.
        """
        grid = tuple(
            tuple(max(0.0, min(1.0, float(value))) for value in row)
            for row in rows
        )
        height = len(grid)
        width = len(grid[0]) if grid else 0
        return cls(rows=grid, width=width, height=height)

    @classmethod
    def from_text(cls, text: str, palette: str) -> "Texture":
        """Build a texture from ASCII art.

        Each character's position in *palette* (darkest first) gives its
        brightness: the first character maps to 0.0 and the last to 1.0.
        Lines are read like a map: the first line is the north pole and
        each line runs west to east, starting at longitude -180.  Only empty
        lines are ignored.  A line of spaces is a row of the darkest value,
        and trailing whitespace is kept.

        Raises:
            ConfigError: If the palette is too short, the art is empty or
                ragged, or a character is missing from the palette.
        """
        if len(palette) < 2:
            raise ConfigError("Texture palette needs at least 2 characters")
        scale = 1.0 / (len(palette) - 1)
        lookup = {ch: index * scale for index, ch in enumerate(palette)}

        rows = []
        for line_no, line in enumerate(text.splitlines(), start=1):
            if line == "":
                continue
            try:
                rows.append([lookup[ch] for ch in line])
            except KeyError as exc:
                raise ConfigError(
                    f"Texture line {line_no}: character {exc.args[0]!r} "
                    f"is not in the palette {palette!r}"
                ) from None
        return cls.from_rows(rows)

    @classmethod
    def uniform(cls, value: float, width: int = 1, height: int = 1) -> "Texture":
        """Build a texture where every sample equals *value*."""
        return cls.from_rows([[value] * width for _ in range(height)])

    # -- Lookup ----------------------------------------------------------------

    @property
    def size(self) -> Tuple[int, int]:
        """``(width, height)`` in pixels."""
        return (self.width, self.height)

    def pixel_for(self, lat: float, lon: float) -> Tuple[int, int]:
        """Map a coordinate to ``(column, row)``.

        Longitude wraps (any value is accepted); latitude is clamped, so
        values beyond the poles land on the first or last row.
        """
        u = ((lon + 180.0) / 360.0) % 1.0
        col = int(u * self.width) % self.width

        v = (90.0 - lat) / 180.0
        row = int(v * self.height)
        row = max(0, min(self.height - 1, row))
        return col, row

    def sample(self, lat: float, lon: float) -> float:
        """Return the brightness at ``(lat, lon)`` using nearest-neighbour lookup."""
        col, row = self.pixel_for(lat, lon)
        return self.rows[row][col]
