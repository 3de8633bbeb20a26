"""Unicode shade-block ramp.

Only five steps, but the blocks fill the whole cell, which reads well on
terminals with tall fonts.
"""

from __future__ import annotations

from termglobe.palettes.base import Palette

#: Light, medium and dark shade followed by the full block.
BLOCKS_PALETTE = Palette(
    name="blocks",
    description="Unicode shade blocks",
    ramp=" ░▒▓█",
    use_unicode=True,
)
