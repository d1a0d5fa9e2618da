"""
Gemstone palette.

Fixed, named accent colours shared by the background passes and the
verse overlay. Random draws go through an injected numpy Generator so
a seeded run picks the same colours every time.
"""

from dataclasses import dataclass, field

import numpy as np


def hex_to_rgb01(hex_color: str) -> tuple[float, float, float]:
    """Convert '#RRGGBB' to an (r, g, b) tuple in [0, 1]."""
    h = hex_color.strip().lstrip("#")
    if len(h) != 6:
        raise ValueError(f"Expected a #RRGGBB colour, got {hex_color!r}")
    n = int(h, 16)
    return (
        ((n >> 16) & 255) / 255.0,
        ((n >> 8) & 255) / 255.0,
        (n & 255) / 255.0,
    )


@dataclass(frozen=True)
class PaletteColor:
    """A named palette entry."""

    name: str
    hex: str
    rgb: tuple[float, float, float] = field(init=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "rgb", hex_to_rgb01(self.hex))

    @property
    def rgb255(self) -> tuple[int, int, int]:
        return tuple(int(round(c * 255)) for c in self.rgb)


class Palette:
    """Immutable ordered collection of palette colours."""

    def __init__(self, colors):
        self.colors: tuple[PaletteColor, ...] = tuple(colors)
        if not self.colors:
            raise ValueError("Palette needs at least one colour")

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return iter(self.colors)

    def __getitem__(self, index: int) -> PaletteColor:
        return self.colors[index]

    def pick(self, rng: np.random.Generator) -> PaletteColor:
        """Draw one colour uniformly at random."""
        return self.colors[int(rng.integers(len(self.colors)))]

    @classmethod
    def from_dicts(cls, entries) -> "Palette":
        """Build a palette from [{"name": ..., "hex": ...}, ...]."""
        return cls(PaletteColor(name=e["name"], hex=e["hex"]) for e in entries)


GEMSTONE_PALETTE = Palette([
    PaletteColor("Sardius", "#A81919"),
    PaletteColor("Vermilion", "#894014"),
    PaletteColor("Amber", "#675210"),
    PaletteColor("Topaz", "#50590D"),
    PaletteColor("Chrysolyte", "#365E0E"),
    PaletteColor("Emerald", "#19620F"),
    PaletteColor("Chrysoprasus", "#0F6224"),
    PaletteColor("Beryl", "#0E6042"),
    PaletteColor("Crystal", "#0E5E5E"),
    PaletteColor("Chalcedony", "#145A83"),
    PaletteColor("Sapphire", "#1E48C7"),
    PaletteColor("Jacinth", "#3F25F6"),
    PaletteColor("Purple", "#751ECB"),
    PaletteColor("Amethyst", "#8F18A0"),
    PaletteColor("Scarlet", "#9C177A"),
    PaletteColor("Crimson", "#A3194D"),
])
