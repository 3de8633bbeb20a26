"""Plain punctuation ramp that renders on any terminal."""

from __future__ import annotations

from termglobe.palettes.base import Palette

ASCII_PALETTE = Palette(
    name="ascii",
    description="Ten-step punctuation gradient",
    ramp=" .:-=+*#%@",
)
