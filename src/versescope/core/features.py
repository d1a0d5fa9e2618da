"""
Live audio feature extraction.

Turns raw analyser buffers into four smoothed perceptual signals
(level, bass, mid, treble) and provides the gain/clamp mapping that
render passes apply on top of them.
"""

import math
from dataclasses import asdict, dataclass

import numpy as np

# Bin-count fractions separating bass | mid | treble
BASS_FRACTION = 0.15
MID_FRACTION = 0.55


def clamp01(x: float) -> float:
    """Clamp a scalar to [0.0, 1.0]. NaN maps to 0.0."""
    if math.isnan(x):
        return 0.0
    return max(0.0, min(1.0, x))


def gain(x: float, k: float) -> float:
    """Amplify a feature and clamp the result to [0.0, 1.0]."""
    return clamp01(x * k)


@dataclass
class FeatureVector:
    """Smoothed audio features, each in [0.0, 1.0]."""

    level: float = 0.0
    bass: float = 0.0
    mid: float = 0.0
    treble: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class FeatureGains:
    """Per-feature multipliers; raw features rarely get near 1.0."""

    level: float = 3.2
    bass: float = 2.0
    mid: float = 2.5
    treble: float = 3.0


class GainedFeatures:
    """
    Live, amplified view of a shared FeatureVector.

    The accessors read the vector at call time, so a render pass holding
    on to them keeps reacting to audio after it was built.
    """

    def __init__(self, features: FeatureVector, gains: FeatureGains | None = None):
        self.features = features
        self.gains = gains or FeatureGains()

    def level(self) -> float:
        return gain(self.features.level, self.gains.level)

    def bass(self) -> float:
        return gain(self.features.bass, self.gains.bass)

    def mid(self) -> float:
        return gain(self.features.mid, self.gains.mid)

    def treble(self) -> float:
        return gain(self.features.treble, self.gains.treble)


def band_edges(n_bins: int) -> tuple[int, int]:
    """Return the (bass_end, mid_end) bin indices for a spectrum of n_bins."""
    return int(math.floor(n_bins * BASS_FRACTION)), int(math.floor(n_bins * MID_FRACTION))


def band_average(spectrum: np.ndarray, start: int, stop: int, max_magnitude: float) -> float:
    """
    Mean magnitude of spectrum[start:stop], normalized by max_magnitude.

    The divisor is floored at one bin so an empty band reads as 0.0.
    """
    total = float(np.sum(spectrum[start:stop], dtype=np.float64))
    return (total / max(1, stop - start)) / max_magnitude


class AudioFeatureExtractor:
    """
    Converts analyser buffers into a smoothed FeatureVector.

    Each call to update() computes raw level/band values from the current
    buffers and folds them into the vector with an exponential moving
    average, damping transients while converging on sustained input.
    """

    def __init__(
        self,
        features: FeatureVector | None = None,
        smoothing: float = 0.85,
        level_scale: float = 2.0,
        center: float = 128.0,
        max_magnitude: float = 255.0,
    ):
        """
        Initialize the extractor.

        Args:
            features: Vector to mutate in place (a new zeroed one if None).
            smoothing: EMA coefficient k; new = old * k + raw * (1 - k).
            level_scale: Multiplier applied to the RMS before clamping.
            center: Value of a silent time-domain sample.
            max_magnitude: Largest possible frequency magnitude.
        """
        self.features = features if features is not None else FeatureVector()
        self.smoothing = smoothing
        self.level_scale = level_scale
        self.center = center
        self.max_magnitude = max_magnitude

    def raw_level(self, time_domain: np.ndarray) -> float:
        """Scaled RMS of the centered, normalized time-domain samples."""
        if len(time_domain) == 0:
            return 0.0
        v = (np.asarray(time_domain, dtype=np.float64) - self.center) / self.center
        rms = float(np.sqrt(np.mean(v * v)))
        return min(1.0, rms * self.level_scale)

    def raw_bands(self, frequency: np.ndarray) -> tuple[float, float, float]:
        """Average (bass, mid, treble) magnitudes, normalized to [0, 1]."""
        spectrum = np.asarray(frequency, dtype=np.float64)
        n = len(spectrum)
        b1, m1 = band_edges(n)
        return (
            band_average(spectrum, 0, b1, self.max_magnitude),
            band_average(spectrum, b1, m1, self.max_magnitude),
            band_average(spectrum, m1, n, self.max_magnitude),
        )

    def _smooth(self, current: float, target: float) -> float:
        k = self.smoothing
        return current * k + target * (1.0 - k)

    def update(self, time_domain: np.ndarray, frequency: np.ndarray) -> FeatureVector:
        """
        Fold one pair of analyser buffers into the feature vector.

        Args:
            time_domain: Samples centered at `center`.
            frequency: One magnitude per bin, in [0, max_magnitude].

        Returns:
            The (mutated) feature vector.
        """
        next_level = self.raw_level(time_domain)
        next_bass, next_mid, next_treble = self.raw_bands(frequency)

        fv = self.features
        fv.level = self._smooth(fv.level, next_level)
        fv.bass = self._smooth(fv.bass, next_bass)
        fv.mid = self._smooth(fv.mid, next_mid)
        fv.treble = self._smooth(fv.treble, next_treble)
        return fv
