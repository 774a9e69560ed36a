"""
Color assignment for queries and duplicate groups.

One ``ColorAssigner`` is owned per session so that color state is explicit
and can be reset together with the session.
"""

from typing import Dict, List, Optional, Sequence

from copysift.core.models import validate_color

PRESET_COLORS = [
    "#ff6b6b", "#ffa94d", "#ffd43b", "#69db7c", "#38d9a9",
    "#4dabf7", "#748ffc", "#da77f2", "#f783ac", "#e599f7",
    "#ff8787", "#ffc078", "#ffe066", "#8ce99a", "#63e6be",
    "#74c0fc", "#91a7ff", "#e599f7", "#faa2c1", "#c0eb75",
]

DARK_TEXT = "#18181b"
LIGHT_TEXT = "#ffffff"


def contrast_color(background: str) -> str:
    """Text color readable on ``background`` (``#rrggbb``)."""
    r = int(background[1:3], 16)
    g = int(background[3:5], 16)
    b = int(background[5:7], 16)
    luminance = (r * 299 + g * 587 + b * 114) / 1000
    return DARK_TEXT if luminance > 128 else LIGHT_TEXT


class ColorAssigner:
    """Hands out palette colors to owners (query ids) and duplicate groups."""

    def __init__(self, palette: Optional[Sequence[str]] = None):
        palette = list(palette) if palette else list(PRESET_COLORS)
        for color in palette:
            validate_color(color)
        self.palette: List[str] = palette
        self._assigned: Dict[str, str] = {}

    def assign(self, key: str) -> str:
        """Color for ``key``. New keys get the first color no other key holds,
        or cycle through the palette once every color is taken."""
        if key in self._assigned:
            return self._assigned[key]
        used = set(self._assigned.values())
        color = next(
            (c for c in self.palette if c not in used),
            self.palette[len(self._assigned) % len(self.palette)],
        )
        self._assigned[key] = color
        return color

    def claim(self, key: str, color: str) -> str:
        """Record an explicitly chosen color for ``key``."""
        self._assigned[key] = validate_color(color)
        return color

    def release(self, key: str) -> None:
        self._assigned.pop(key, None)

    def group_color(self, index: int) -> str:
        return self.palette[index % len(self.palette)]

    def reset(self) -> None:
        self._assigned.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._assigned
