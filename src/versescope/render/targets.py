"""
Render targets.

A render target accepts a neutral clear followed by the pass chain a
preset produced. The recording target only remembers what it was
given; the field target keeps the active chain and synthesizes pixels
from it on demand, once per displayed frame.
"""

import abc

import numpy as np
from PIL import Image

from versescope.render.chain import NEUTRAL_CLEAR, PassChain
from versescope.render.field import FieldSynth


class RenderTarget(abc.ABC):
    """Consumer of pass chains."""

    @abc.abstractmethod
    def clear(self):
        """Neutral clear to opaque black between passes."""
        pass

    @abc.abstractmethod
    def out(self, chain: PassChain):
        """Make chain the active pass."""
        pass


class RecordingTarget(RenderTarget):
    """Keeps a log of every call; used headless and in tests."""

    def __init__(self):
        self.calls: list[tuple[str, PassChain | None]] = []
        self.active: PassChain | None = None

    def clear(self):
        self.calls.append(("clear", None))
        self.active = NEUTRAL_CLEAR

    def out(self, chain: PassChain):
        self.calls.append(("out", chain))
        self.active = chain

    @property
    def chains(self) -> list[PassChain]:
        return [chain for kind, chain in self.calls if kind == "out"]


class FieldTarget(RenderTarget):
    """
    Synthesizes the active chain into RGB frames.

    The chain is evaluated on a coarse grid and scaled up with
    nearest-neighbour sampling, which keeps the frame cost low and the
    blocky look intact.
    """

    def __init__(self, width: int = 360, height: int = 640, synth_scale: float = 0.5):
        """
        Initialize the target.

        Args:
            width: Output frame width.
            height: Output frame height.
            synth_scale: Fraction of the output size the chain is evaluated at.
        """
        self.width = width
        self.height = height
        self.synth = FieldSynth(
            max(1, int(width * synth_scale)),
            max(1, int(height * synth_scale)),
        )
        self.active: PassChain = NEUTRAL_CLEAR

    def clear(self):
        self.active = NEUTRAL_CLEAR

    def out(self, chain: PassChain):
        self.active = chain

    def render(self, time: float) -> np.ndarray:
        """Render the active chain at `time` seconds as (H, W, 3) uint8."""
        frame = self.synth.render(self.active, time)
        if frame.shape[1] != self.width or frame.shape[0] != self.height:
            img = Image.fromarray(frame)
            img = img.resize((self.width, self.height), Image.NEAREST)
            frame = np.array(img)
        return frame
