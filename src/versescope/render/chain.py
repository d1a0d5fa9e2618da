"""
Render-pass description.

A PassChain is an immutable, fluent description of one generative
background pass: a source (osc, noise, voronoi, shape, solid) followed
by coordinate and colour stages. Stage arguments are either plain
numbers, fixed when the chain is built, or zero-argument callables that
the render target samples again on every frame.
"""

from dataclasses import dataclass
from typing import Any, Callable, Union

Param = Union[float, int, Callable[[], float]]

SOURCES = ("osc", "noise", "voronoi", "shape", "solid")
COORD_STAGES = ("rotate", "repeat", "kaleid", "modulate", "modulate_rotate", "pixelate")
COLOR_STAGES = ("thresh", "luma", "posterize", "contrast", "brightness", "color")


def resolve(value: Any) -> Any:
    """Sample a stage argument: call it if callable, otherwise return as-is."""
    if isinstance(value, PassChain):
        return value
    if callable(value):
        return float(value())
    return value


@dataclass(frozen=True)
class Op:
    """One source or stage with its (possibly dynamic) arguments."""

    name: str
    args: tuple

    @property
    def is_source(self) -> bool:
        return self.name in SOURCES

    @property
    def is_coord(self) -> bool:
        return self.name in COORD_STAGES

    def resolved(self) -> tuple:
        """Arguments sampled now; nested chains are resolved recursively."""
        out = []
        for arg in self.args:
            value = resolve(arg)
            if isinstance(value, PassChain):
                value = value.resolved()
            out.append(value)
        return tuple(out)


class PassChain:
    """Fluent builder for a generative pass. Every stage returns a new chain."""

    def __init__(self, ops: tuple[Op, ...]):
        if not ops or not ops[0].is_source:
            raise ValueError("A pass chain must start with a source")
        self.ops = ops

    def __repr__(self) -> str:
        return "PassChain(" + " -> ".join(op.name for op in self.ops) + ")"

    def __len__(self) -> int:
        return len(self.ops)

    @property
    def source(self) -> Op:
        return self.ops[0]

    @property
    def stages(self) -> tuple[Op, ...]:
        return self.ops[1:]

    def names(self) -> list[str]:
        return [op.name for op in self.ops]

    def resolved(self) -> list[tuple[str, tuple]]:
        """Snapshot of the whole chain with every dynamic argument sampled."""
        return [(op.name, op.resolved()) for op in self.ops]

    def _then(self, name: str, *args) -> "PassChain":
        return PassChain(self.ops + (Op(name, args),))

    # Coordinate stages

    def rotate(self, angle: Param = 10.0, speed: Param = 0.0) -> "PassChain":
        return self._then("rotate", angle, speed)

    def repeat(self, repeat_x: Param = 3.0, repeat_y: Param = 3.0) -> "PassChain":
        return self._then("repeat", repeat_x, repeat_y)

    def kaleid(self, sides: Param = 4) -> "PassChain":
        return self._then("kaleid", sides)

    def modulate(self, texture: "PassChain", amount: Param = 0.1) -> "PassChain":
        return self._then("modulate", texture, amount)

    def modulate_rotate(self, texture: "PassChain", multiple: Param = 1.0) -> "PassChain":
        return self._then("modulate_rotate", texture, multiple)

    def pixelate(self, pixel_x: Param = 20, pixel_y: Param = 20) -> "PassChain":
        return self._then("pixelate", pixel_x, pixel_y)

    # Colour stages

    def thresh(self, threshold: Param = 0.5, tolerance: Param = 0.04) -> "PassChain":
        return self._then("thresh", threshold, tolerance)

    def luma(self, threshold: Param = 0.5, tolerance: Param = 0.1) -> "PassChain":
        return self._then("luma", threshold, tolerance)

    def posterize(self, bins: Param = 3, gamma: Param = 0.6) -> "PassChain":
        return self._then("posterize", bins, gamma)

    def contrast(self, amount: Param = 1.6) -> "PassChain":
        return self._then("contrast", amount)

    def brightness(self, amount: Param = 0.4) -> "PassChain":
        return self._then("brightness", amount)

    def color(self, r: Param = 1.0, g: Param = 1.0, b: Param = 1.0) -> "PassChain":
        return self._then("color", r, g, b)


def osc(frequency: Param = 60.0, sync: Param = 0.1, offset: Param = 0.0) -> PassChain:
    """Horizontal sine stripes, per-channel phase offset."""
    return PassChain((Op("osc", (frequency, sync, offset)),))


def noise(scale: Param = 10.0, offset: Param = 0.1) -> PassChain:
    """Smooth animated value noise."""
    return PassChain((Op("noise", (scale, offset)),))


def voronoi(scale: Param = 5.0, speed: Param = 0.3, blending: Param = 0.3) -> PassChain:
    """Animated cellular pattern."""
    return PassChain((Op("voronoi", (scale, speed, blending)),))


def shape(sides: Param = 3, radius: Param = 0.3, smoothing: Param = 0.01) -> PassChain:
    """Centered regular polygon."""
    return PassChain((Op("shape", (sides, radius, smoothing)),))


def solid(r: Param = 0.0, g: Param = 0.0, b: Param = 0.0, a: Param = 1.0) -> PassChain:
    """Flat colour."""
    return PassChain((Op("solid", (r, g, b, a)),))


NEUTRAL_CLEAR = solid(0.0, 0.0, 0.0, 1.0)
