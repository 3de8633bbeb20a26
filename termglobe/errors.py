"""Exception types raised by termglobe.

Errors are only raised while building things (textures, globes, cameras,
coordinate lists).  Rendering a validly constructed globe never raises.
"""

from __future__ import annotations


class TermGlobeError(Exception):
    """Base class for all termglobe errors."""


class ConfigError(TermGlobeError, ValueError):
    """Invalid construction input: empty or ragged textures, mismatched
    day/night sizes, inconsistent distance bounds and similar."""


class CoordinateError(TermGlobeError, ValueError):
    """A coordinate list record could not be parsed."""
