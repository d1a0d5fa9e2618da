"""
Byte-valued analyser buffers.

Reduces a window of float samples to the two fixed-size buffers the
feature extractor consumes: time-domain bytes centered at 128 and
per-bin frequency magnitudes scaled onto 0-255 across a decibel range.
Magnitudes are averaged over successive calls, so the spectrum itself
is already slightly smoothed before feature extraction.
"""

import numpy as np
from scipy import signal as scipy_signal


class SpectrumAnalyser:
    """Windowed FFT analyser with temporal magnitude smoothing."""

    def __init__(
        self,
        fft_size: int = 1024,
        smoothing: float = 0.75,
        min_db: float = -100.0,
        max_db: float = -30.0,
    ):
        """
        Initialize the analyser.

        Args:
            fft_size: Samples per analysis window (power of two).
            smoothing: Weight of the previous magnitude in [0, 1).
            min_db: Decibel level mapped to byte 0.
            max_db: Decibel level mapped to byte 255.
        """
        if fft_size < 2 or fft_size & (fft_size - 1):
            raise ValueError(f"fft_size must be a power of two, got {fft_size}")
        if max_db <= min_db:
            raise ValueError("max_db must be greater than min_db")

        self.fft_size = fft_size
        self.smoothing = smoothing
        self.min_db = min_db
        self.max_db = max_db
        self.window = scipy_signal.get_window("blackman", fft_size)
        self._magnitudes = np.zeros(self.frequency_bin_count, dtype=np.float64)

    @property
    def frequency_bin_count(self) -> int:
        return self.fft_size // 2

    def _frame(self, samples: np.ndarray) -> np.ndarray:
        """Most recent fft_size samples, zero-padded at the front if short."""
        samples = np.asarray(samples, dtype=np.float64).ravel()
        if len(samples) >= self.fft_size:
            return samples[-self.fft_size:]
        out = np.zeros(self.fft_size, dtype=np.float64)
        if len(samples):
            out[-len(samples):] = samples
        return out

    def time_domain_bytes(self, samples: np.ndarray) -> np.ndarray:
        frame = self._frame(samples)
        return np.clip(np.floor(128.0 * (1.0 + frame)), 0, 255).astype(np.uint8)

    def frequency_bytes(self, samples: np.ndarray) -> np.ndarray:
        frame = self._frame(samples) * self.window
        spectrum = np.fft.rfft(frame)[: self.frequency_bin_count]
        magnitudes = np.abs(spectrum) / self.fft_size

        k = self.smoothing
        self._magnitudes = k * self._magnitudes + (1.0 - k) * magnitudes

        db = 20.0 * np.log10(np.maximum(self._magnitudes, 1e-12))
        scaled = (db - self.min_db) * (255.0 / (self.max_db - self.min_db))
        return np.clip(np.floor(scaled), 0, 255).astype(np.uint8)

    def analyse(self, samples: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Return (time_domain_bytes, frequency_bytes) for the latest samples."""
        return self.time_domain_bytes(samples), self.frequency_bytes(samples)

    def reset(self):
        self._magnitudes[:] = 0.0
