"""
Verse reveal/hold/fade/gap cycle.

A pure function of wall-clock time and configuration: each verse is
typed out one character at a time, held, faded to transparent, followed
by a short blank gap, and then the next verse in the collection begins
with a fresh accent colour. The cycle never ends.
"""

import enum
import math
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from versescope.core.features import clamp01
from versescope.core.palette import GEMSTONE_PALETTE, Palette, PaletteColor


@dataclass(frozen=True)
class VerseRecord:
    """A quotation and its citation."""

    reference: str
    text: str


@dataclass
class VerseConfig:
    """Verse timings, all in milliseconds."""

    ms_per_char: float = 28.0  # typing speed
    hold_ms: float = 9000.0  # dwell after full reveal
    fade_ms: float = 1000.0
    gap_ms: float = 600.0  # blank pause before next verse


class VersePhase(enum.Enum):
    REVEALING = "revealing"
    HOLDING = "holding"
    FADING = "fading"
    GAP = "gap"


@dataclass
class VerseState:
    """Mutable cycle state; reset in full on every advance."""

    active_index: int
    phase_start_ms: float
    accent: PaletteColor
    reveal_complete_ms: float | None = None
    fade_start_ms: float | None = None
    cycle_complete_ms: float | None = None


@dataclass(frozen=True)
class VerseFrame:
    """What the overlay should show at one instant."""

    verse: VerseRecord
    index: int
    full_text: str
    visible_text: str
    chars_visible: int
    total_chars: int
    alpha: float
    phase: VersePhase
    accent: PaletteColor
    advanced: bool = False


def compose_verse_text(verse: VerseRecord) -> str:
    """Quoted body, a paragraph break, then an em-dash citation."""
    return f"“{verse.text}”\n\n— {verse.reference}"


def wrap_lines(text: str, max_width: float, measure: Callable[[str], float]) -> list[str]:
    """
    Greedy word wrap that only breaks at whitespace.

    Args:
        text: Text to wrap; newlines separate paragraphs.
        max_width: Maximum rendered line width.
        measure: Returns the rendered width of a string.

    Returns:
        Lines, with empty strings where blank paragraphs were.
    """
    lines = []
    for para in text.split("\n"):
        if para.strip() == "":
            lines.append("")
            continue
        line = ""
        for word in para.split():
            candidate = f"{line} {word}" if line else word
            if measure(candidate) <= max_width:
                line = candidate
            else:
                # An over-wide single word still gets its own line
                if line:
                    lines.append(line)
                line = word
        if line:
            lines.append(line)
    return lines


class VerseTimingStateMachine:
    """
    Drives the reveal/hold/fade/gap cycle over a fixed verse collection.

    Timestamps are latched on the first tick where the reveal is
    complete, so a slow frame rate shifts the hold/fade schedule by at
    most one frame and never recomputes it mid-cycle.
    """

    def __init__(
        self,
        verses: Sequence[VerseRecord],
        config: VerseConfig | None = None,
        palette: Palette | None = None,
        rng: np.random.Generator | None = None,
    ):
        if not verses:
            raise ValueError("At least one verse is required")
        self.verses = tuple(verses)
        self.cfg = config or VerseConfig()
        self.palette = palette or GEMSTONE_PALETTE
        self.rng = rng if rng is not None else np.random.default_rng()
        self.state = VerseState(
            active_index=0,
            phase_start_ms=0.0,
            accent=self.palette.pick(self.rng),
        )
        self._full_text = compose_verse_text(self.verses[0])

    @property
    def verse(self) -> VerseRecord:
        return self.verses[self.state.active_index]

    @property
    def full_text(self) -> str:
        return self._full_text

    def start(self, now_ms: float):
        """Begin revealing the current verse at now_ms."""
        self._reset(now_ms)

    def _reset(self, now_ms: float):
        s = self.state
        s.phase_start_ms = now_ms
        s.reveal_complete_ms = None
        s.fade_start_ms = None
        s.cycle_complete_ms = None

    def advance(self, now_ms: float):
        """Move to the next verse, draw a new accent, restart the reveal."""
        s = self.state
        s.active_index = (s.active_index + 1) % len(self.verses)
        s.accent = self.palette.pick(self.rng)
        self._full_text = compose_verse_text(self.verses[s.active_index])
        self._reset(now_ms)

    def chars_visible(self, now_ms: float) -> int:
        elapsed = now_ms - self.state.phase_start_ms
        if self.cfg.ms_per_char <= 0:
            return len(self._full_text) if elapsed >= 0 else 0
        return max(0, math.floor(elapsed / self.cfg.ms_per_char))

    def alpha(self, now_ms: float) -> float:
        """1 until the fade starts, linear down to 0 over fade_ms, then 0."""
        fade_start = self.state.fade_start_ms
        if fade_start is None or now_ms < fade_start:
            return 1.0
        if self.cfg.fade_ms <= 0:
            return 0.0
        return 1.0 - clamp01((now_ms - fade_start) / self.cfg.fade_ms)

    def phase_boundaries(self) -> tuple[tuple[VersePhase, float | None], ...]:
        """Ordered (phase, start time) table; None until the reveal latches."""
        s = self.state
        fade_end = None if s.fade_start_ms is None else s.fade_start_ms + self.cfg.fade_ms
        return (
            (VersePhase.HOLDING, s.reveal_complete_ms),
            (VersePhase.FADING, s.fade_start_ms),
            (VersePhase.GAP, fade_end),
        )

    def phase_at(self, now_ms: float) -> VersePhase:
        phase = VersePhase.REVEALING
        for candidate, boundary in self.phase_boundaries():
            if boundary is None or now_ms < boundary:
                break
            phase = candidate
        return phase

    def _latch(self, now_ms: float):
        s = self.state
        s.reveal_complete_ms = now_ms
        s.fade_start_ms = now_ms + self.cfg.hold_ms
        s.cycle_complete_ms = s.fade_start_ms + self.cfg.fade_ms + self.cfg.gap_ms

    def tick(self, now_ms: float) -> VerseFrame:
        """
        Advance the cycle to now_ms and describe what is visible.

        Latches the reveal-complete timestamp the first time every
        character is visible, advances to the next verse once the
        cycle is complete, then renders the (possibly new) verse.
        """
        s = self.state
        total = len(self._full_text)

        if s.reveal_complete_ms is None and self.chars_visible(now_ms) >= total:
            self._latch(now_ms)

        advanced = False
        if s.cycle_complete_ms is not None and now_ms >= s.cycle_complete_ms:
            self.advance(now_ms)
            advanced = True
            total = len(self._full_text)

        shown = min(total, self.chars_visible(now_ms))
        return VerseFrame(
            verse=self.verse,
            index=s.active_index,
            full_text=self._full_text,
            visible_text=self._full_text[:shown],
            chars_visible=shown,
            total_chars=total,
            alpha=self.alpha(now_ms),
            phase=self.phase_at(now_ms),
            accent=s.accent,
            advanced=advanced,
        )
