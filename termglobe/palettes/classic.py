"""The ramp the Earth template ships with: an 18-step letter gradient."""

from __future__ import annotations

from termglobe.palettes.base import Palette

CLASSIC_PALETTE = Palette(
    name="classic",
    description="Letter gradient of the Earth template",
    ramp=" .:;',wiogOLXHWYV@",
)
