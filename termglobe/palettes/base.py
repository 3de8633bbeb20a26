"""Palette dataclass definition.

A palette is the ordered brightness-to-character ramp the rasterizer uses,
plus the character written where a ray misses the globe.
"""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class Palette:
    """Declarative character ramp.

    Palettes are immutable (frozen) so a ramp cannot change mid-render.

    Attributes:
        name: Unique palette identifier used for lookup (e.g. ``"classic"``).
        description: Human-readable description.
        ramp: Characters ordered from darkest to brightest.
        background_char: Character for cells that miss the globe.
        use_unicode: Whether the ramp needs a Unicode-capable terminal.
    """

    name: str
    description: str = ""
    ramp: str = " .:-=+*#%@"
    background_char: str = " "
    use_unicode: bool = False

    def __post_init__(self) -> None:
        """Validate field types after initialization."""
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, _resolve_type(f.type)):
                raise TypeError(
                    f"Palette field '{f.name}' expects {f.type}, "
                    f"got {type(value).__name__}"
                )

    def __len__(self) -> int:
        return len(self.ramp)


def _resolve_type(annotation: str | type) -> type:
    """Resolve a type annotation string to a type object.

    Handles the ``from __future__ import annotations`` case where all
    annotations are stored as strings.
    """
    type_map = {"str": str, "int": int, "bool": bool, "float": float}
    if isinstance(annotation, str):
        return type_map.get(annotation, str)
    return annotation  # type: ignore[return-value]
