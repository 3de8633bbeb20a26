"""Palette registry, discovery, and loading.

Provides the :class:`PaletteRegistry` class plus the module-level
convenience functions :func:`get_palette` and :func:`list_palettes`.

Built-in palettes are auto-discovered from the modules of the
``termglobe.palettes`` package: any module-level :class:`Palette` instance
is registered under its ``name``.  To add one, drop a module next to
``classic.py`` defining e.g.::

    from termglobe.palettes.base import Palette

    DOTS_PALETTE = Palette(name="dots", ramp=" .o0@")
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from typing import Iterator

from termglobe.palettes.base import Palette

logger = logging.getLogger(__name__)

DEFAULT_PALETTE = "classic"


class PaletteRegistry:
    """Registry that discovers, validates, and serves palettes.

    Parameters
    ----------
    auto_discover : bool
        If ``True`` (default), built-in palettes are discovered from the
        ``termglobe.palettes`` package on first access.
    """

    def __init__(self, *, auto_discover: bool = True) -> None:
        self._palettes: dict[str, Palette] = {}
        self._auto_discover = auto_discover
        self._discovered = False

    def register(self, palette: Palette) -> None:
        """Register a palette instance.

        Raises
        ------
        TypeError
            If *palette* is not a :class:`Palette` instance.
        ValueError
            If the palette fails validation.
        """
        if not isinstance(palette, Palette):
            raise TypeError(
                f"Expected a Palette instance, got {type(palette).__name__}"
            )
        self._validate(palette)
        self._palettes[palette.name] = palette

    def get(self, name: str) -> Palette:
        """Return a palette by name.

        Raises
        ------
        KeyError
            If no palette with the given name is registered.  The message
            lists the available names.
        """
        self._ensure_discovered()
        try:
            return self._palettes[name]
        except KeyError:
            available = ", ".join(sorted(self._palettes))
            raise KeyError(
                f"Unknown palette '{name}'. Available palettes: {available}"
            ) from None

    def list_palettes(self) -> list[str]:
        """Return a sorted list of all registered palette names."""
        self._ensure_discovered()
        return sorted(self._palettes)

    def __len__(self) -> int:
        self._ensure_discovered()
        return len(self._palettes)

    def __iter__(self) -> Iterator[str]:
        self._ensure_discovered()
        return iter(sorted(self._palettes))

    def __contains__(self, name: str) -> bool:
        self._ensure_discovered()
        return name in self._palettes

    def discover_builtin(self) -> None:
        """Scan ``termglobe.palettes`` for modules exporting Palette instances.

        A module that fails to import is logged and skipped so that one
        broken palette file does not take the others down.
        """
        import termglobe.palettes as _pkg

        for module_info in pkgutil.iter_modules(_pkg.__path__):
            if module_info.name == "base":
                continue
            try:
                mod = importlib.import_module(
                    f"termglobe.palettes.{module_info.name}"
                )
            except Exception:  # noqa: BLE001
                logger.warning("Skipping palette module %s", module_info.name, exc_info=True)
                continue

            for attr_name in dir(mod):
                attr = getattr(mod, attr_name)
                if isinstance(attr, Palette):
                    self._validate(attr)
                    self._palettes[attr.name] = attr

        self._discovered = True

    @staticmethod
    def _validate(palette: Palette) -> None:
        """Check that a palette can drive the rasterizer.

        Raises
        ------
        ValueError
            If the name is blank, the ramp has fewer than 2 characters, or
            the background is not a single character.
        """
        if not palette.name or not palette.name.strip():
            raise ValueError("Palette 'name' must be a non-empty string")

        if len(palette.ramp) < 2:
            raise ValueError(
                "Palette 'ramp' must contain at least 2 characters "
                f"for a visible gradient, got {len(palette.ramp)!r}"
            )

        if len(palette.background_char) != 1:
            raise ValueError(
                "Palette 'background_char' must be a single character, "
                f"got {palette.background_char!r}"
            )

    def _ensure_discovered(self) -> None:
        if self._auto_discover and not self._discovered:
            self.discover_builtin()


_registry = PaletteRegistry()


def get_palette(name: str) -> Palette:
    """Return a built-in palette by name.

    Raises
    ------
    KeyError
        If no palette with the given name is registered.
    """
    return _registry.get(name)


def list_palettes() -> list[str]:
    """Return a sorted list of all available palette names."""
    return _registry.list_palettes()
