"""
Installation configuration.

Dataclass defaults reproduce the installation as shipped; a JSON file
with the same field names (nested objects for verse, audio and gains)
overrides any subset of them.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Union

from versescope.core.features import FeatureGains
from versescope.core.verse import VerseConfig


@dataclass
class AudioConfig:
    """Microphone analysis settings."""

    smoothing_coefficient: float = 0.85  # EMA k for level/bass/mid/treble
    level_scale: float = 2.0
    fft_size: int = 1024
    analyser_smoothing: float = 0.75
    min_db: float = -100.0
    max_db: float = -30.0
    sample_rate: int | None = None  # None = device default
    device: Union[int, str, None] = None


@dataclass
class OverlayConfig:
    """Verse overlay layout, in internal pixels."""

    margin_x: int = 34
    margin_y: int = 92
    text_size: int = 18
    leading: int = 24
    plate_opacity: float = 0.22
    jitter_scale: float = 1.25  # max jitter in px per unit of raw level


@dataclass
class InstallationConfig:
    """Top-level configuration."""

    fps: int = 24

    # Internal render size; the window shows it pixel-doubled
    internal_width: int = 360
    internal_height: int = 640
    target_width: int = 720
    target_height: int = 1280
    synth_scale: float = 0.5

    rotation_period_ms: float = 22000.0
    level_log_ms: float = 1000.0  # 0 disables the periodic audio log line
    seed: int | None = None

    verse: VerseConfig = field(default_factory=VerseConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    gains: FeatureGains = field(default_factory=FeatureGains)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)

    @property
    def frame_ms(self) -> float:
        return 1000.0 / self.fps

    @property
    def max_line_width(self) -> int:
        return self.internal_width - 2 * self.overlay.margin_x

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def validate(self):
        """
        Check values the installation cannot run with.

        Raises:
            ValueError: If a rate or period is not positive.
        """
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")
        if self.rotation_period_ms <= 0:
            raise ValueError(f"rotation_period_ms must be positive, got {self.rotation_period_ms}")
        if self.level_log_ms < 0:
            raise ValueError(f"level_log_ms must not be negative, got {self.level_log_ms}")


_NESTED = {
    "verse": VerseConfig,
    "audio": AudioConfig,
    "gains": FeatureGains,
    "overlay": OverlayConfig,
}


def _build(cls, data: dict[str, Any], where: str):
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in data.items():
        if key not in known:
            raise ValueError(f"Unknown config key: {where}{key}")
        if where == "" and key in _NESTED:
            if not isinstance(value, dict):
                raise ValueError(f"Config key '{key}' must be an object")
            value = _build(_NESTED[key], value, f"{key}.")
        kwargs[key] = value
    return cls(**kwargs)


def config_from_dict(data: dict[str, Any]) -> InstallationConfig:
    """Build a config from a (partial) dict; unknown or invalid values raise ValueError."""
    config = _build(InstallationConfig, data, "")
    config.validate()
    return config


def load_config(path: Union[str, Path]) -> InstallationConfig:
    """Load an InstallationConfig from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return config_from_dict(data)
