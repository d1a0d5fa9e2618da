"""
Installation orchestrator.

Owns every moving part of the piece (audio source, feature extractor,
preset rotation, verse cycle) on a single cooperative timer loop, and
turns a timestamp into a complete description of the frame to draw.
Any frame driver can call tick(now); nothing here depends on a
windowing or drawing library.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from versescope.audio.sources import AudioSource, DeviceUnavailable
from versescope.config import InstallationConfig
from versescope.core.features import AudioFeatureExtractor, FeatureVector
from versescope.core.palette import GEMSTONE_PALETTE, Palette, PaletteColor
from versescope.core.scheduler import PassContext, Preset, PresetScheduler
from versescope.core.timers import TimerHandle, TimerLoop
from versescope.core.verse import VerseFrame, VerseRecord, VerseTimingStateMachine, wrap_lines
from versescope.render.chain import PassChain
from versescope.render.presets import PRESETS
from versescope.render.targets import RecordingTarget, RenderTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderInstructions:
    """Everything a frame driver needs to draw one frame."""

    time_ms: float
    preset_index: int
    chain: PassChain | None
    verse: VerseFrame
    lines: tuple[str, ...]
    alpha: float
    plate_alpha: float
    accent: PaletteColor
    offset: tuple[float, float]
    features: dict[str, float]
    audio_live: bool


class Installation:
    """
    Lifecycle: init(now) once, tick(now) every frame, teardown() at exit.
    """

    def __init__(
        self,
        config: InstallationConfig,
        verses: Sequence[VerseRecord],
        measure: Callable[[str], float],
        source: AudioSource | None = None,
        target: RenderTarget | None = None,
        presets: Sequence[Preset] = PRESETS,
        palette: Palette = GEMSTONE_PALETTE,
        seed: int | None = None,
    ):
        """
        Initialize the installation.

        Args:
            config: Timings, layout and audio settings.
            verses: Verse collection, cycled in order.
            measure: Rendered width of a string in the overlay font.
            source: Audio input; None runs without audio reactivity.
            target: Receives preset passes (a RecordingTarget if None).
            presets: Preset rotation order.
            palette: Accent colours.
            seed: Overrides config.seed; fixes every random draw.
        """
        self.cfg = config
        self.measure = measure
        self.source = source
        self.target = target if target is not None else RecordingTarget()

        seed = config.seed if seed is None else seed
        preset_seq, verse_seq, jitter_seq = np.random.SeedSequence(seed).spawn(3)
        self._jitter_rng = np.random.default_rng(jitter_seq)

        self.features = FeatureVector()
        self.extractor = AudioFeatureExtractor(
            self.features,
            smoothing=config.audio.smoothing_coefficient,
            level_scale=config.audio.level_scale,
        )
        self.timers = TimerLoop()
        self.scheduler = PresetScheduler(
            presets,
            self.target,
            PassContext(self.features, palette, config.gains, np.random.default_rng(preset_seq)),
            self.timers,
        )
        self.verse_machine = VerseTimingStateMachine(
            verses, config.verse, palette, np.random.default_rng(verse_seq),
        )

        self.audio_live = False
        self._audio_timer: TimerHandle | None = None
        self._log_timer: TimerHandle | None = None
        self._started = False

    def init(self, now_ms: float):
        """Acquire audio (once), start the preset rotation and the verse cycle."""
        if self._started:
            return
        self._started = True

        if self.source is not None:
            try:
                self.source.start()
                self.audio_live = True
            except DeviceUnavailable as e:
                logger.warning("Continuing without audio: %s", e)

        self.scheduler.start(self.cfg.rotation_period_ms, now_ms)
        self.verse_machine.start(now_ms)

        if self.audio_live:
            self._audio_timer = self.timers.call_every(self.cfg.frame_ms, self._audio_tick, now_ms)
            if self.cfg.level_log_ms > 0:
                self._log_timer = self.timers.call_every(self.cfg.level_log_ms, self._log_levels, now_ms)

    def _audio_tick(self, now_ms: float):
        try:
            buffers = self.source.read(now_ms)
            if buffers is not None:
                self.extractor.update(*buffers)
        except Exception:
            logger.exception("Audio input failed; continuing without audio")
            self._stop_audio()
            self.features.level = self.features.bass = 0.0
            self.features.mid = self.features.treble = 0.0

    def _log_levels(self, now_ms: float):
        fv = self.features
        logger.info(
            "[mic] level=%.3f bass=%.3f mid=%.3f treble=%.3f",
            fv.level, fv.bass, fv.mid, fv.treble,
        )

    def _jitter(self) -> tuple[float, float]:
        j = math.floor(self.features.level * self.cfg.overlay.jitter_scale + 0.5)
        if j <= 0:
            return (0.0, 0.0)
        return (
            float(self._jitter_rng.uniform(-j, j)),
            float(self._jitter_rng.uniform(-j, j)),
        )

    def tick(self, now_ms: float) -> RenderInstructions:
        """Run due timers, advance the verse cycle, and describe the frame."""
        self.timers.run_due(now_ms)
        frame = self.verse_machine.tick(now_ms)
        lines = wrap_lines(frame.visible_text, self.cfg.max_line_width, self.measure)

        return RenderInstructions(
            time_ms=now_ms,
            preset_index=self.scheduler.get_current_index(),
            chain=getattr(self.target, "active", None),
            verse=frame,
            lines=tuple(lines),
            alpha=frame.alpha,
            plate_alpha=self.cfg.overlay.plate_opacity * frame.alpha,
            accent=frame.accent,
            offset=self._jitter(),
            features=self.features.as_dict(),
            audio_live=self.audio_live,
        )

    def _stop_audio(self):
        for handle in (self._audio_timer, self._log_timer):
            if handle is not None:
                handle.cancel()
        self._audio_timer = None
        self._log_timer = None
        was_live, self.audio_live = self.audio_live, False
        if was_live and self.source is not None:
            try:
                self.source.stop()
            except Exception:
                logger.exception("Audio input did not release cleanly")

    def teardown(self):
        """Cancel every timer and release the audio device. Idempotent."""
        self.scheduler.stop()
        self._stop_audio()
        self.timers.cancel_all()
        self._started = False
