"""
Preset rotation.

Cycles through a fixed sequence of render-pass presets on a periodic
timer. A preset that throws is logged and skipped; the rotation keeps
its schedule.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

import numpy as np

from versescope.core.features import FeatureGains, FeatureVector, GainedFeatures
from versescope.core.palette import Palette, PaletteColor
from versescope.core.timers import TimerHandle, TimerLoop
from versescope.render.chain import PassChain

logger = logging.getLogger(__name__)


class RenderPassFault(RuntimeError):
    """A single preset invocation failed."""

    def __init__(self, index: int, name: str):
        super().__init__(f"Preset {index} ({name}) failed")
        self.index = index
        self.name = name


@dataclass
class PassContext:
    """Everything a preset may read: live audio, palette, randomness."""

    features: FeatureVector
    palette: Palette
    gains: FeatureGains = field(default_factory=FeatureGains)
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    def __post_init__(self):
        self._gained = GainedFeatures(self.features, self.gains)

    def level(self) -> float:
        return self._gained.level()

    def bass(self) -> float:
        return self._gained.bass()

    def mid(self) -> float:
        return self._gained.mid()

    def treble(self) -> float:
        return self._gained.treble()

    def pick_color(self) -> PaletteColor:
        return self.palette.pick(self.rng)


Preset = Callable[[PassContext], PassChain]


class PresetScheduler:
    """
    Runs presets on a render target and rotates them on a timer.

    Only one rotation timer exists at a time; start() replaces any
    previous one.
    """

    def __init__(
        self,
        presets: Sequence[Preset],
        target,
        context: PassContext,
        timers: TimerLoop,
    ):
        """
        Initialize the scheduler.

        Args:
            presets: Ordered preset functions; must not be empty.
            target: Render target with clear() and out(chain).
            context: Passed to every preset invocation.
            timers: Loop the rotation timer is registered on.
        """
        if not presets:
            raise ValueError("PresetScheduler needs at least one preset")
        self.presets = list(presets)
        self.target = target
        self.context = context
        self.timers = timers
        self.current_index = 0
        self.rotation_timer: TimerHandle | None = None
        self.fault_count = 0

    def __len__(self) -> int:
        return len(self.presets)

    def get_current_index(self) -> int:
        return self.current_index

    def run(self, i: int):
        """
        Select preset i (floor-mod preset count), clear, and invoke it.

        Raises:
            RenderPassFault: If the preset or the target raises.
        """
        self.current_index = i % len(self.presets)
        preset = self.presets[self.current_index]
        try:
            self.target.clear()
            chain = preset(self.context)
            self.target.out(chain)
        except Exception as e:
            name = getattr(preset, "__name__", repr(preset))
            raise RenderPassFault(self.current_index, name) from e
        logger.debug("Running preset %d (%s)", self.current_index, getattr(preset, "__name__", "?"))

    def _run_guarded(self, i: int):
        try:
            self.run(i)
        except RenderPassFault as fault:
            self.fault_count += 1
            logger.exception("%s; rotation continues", fault)

    def _advance(self, now_ms: float):
        self._run_guarded(self.current_index + 1)

    def start(self, period_ms: float, now_ms: float = 0.0):
        """
        (Re)start the rotation: run preset 0 now, then advance every period_ms.
        """
        self.stop()
        self._run_guarded(0)
        self.rotation_timer = self.timers.call_every(period_ms, self._advance, now_ms)
        logger.info("Preset rotation started: %d presets every %.0f ms", len(self.presets), period_ms)

    def stop(self):
        if self.rotation_timer is not None:
            self.rotation_timer.cancel()
            self.rotation_timer = None
