"""
Audio device sources.

A source is acquired once at startup and then polled by the audio
tick for the latest analyser buffers. The microphone source fills a
ring buffer from the PortAudio callback thread; the file source loops
a recording against wall-clock time.
"""

import abc
import logging
import threading
from pathlib import Path
from typing import Any, Union

import librosa
import numpy as np

from versescope.audio.analyser import SpectrumAnalyser

logger = logging.getLogger(__name__)

Buffers = tuple[np.ndarray, np.ndarray]


class DeviceUnavailable(RuntimeError):
    """The audio input could not be acquired (denied, absent, or unreadable)."""


class AudioSource(abc.ABC):
    """Provides analyser buffers on demand once started."""

    def __init__(self, analyser: SpectrumAnalyser | None = None):
        self.analyser = analyser or SpectrumAnalyser()
        self.active = False

    @abc.abstractmethod
    def start(self):
        """
        Acquire the device. Called once; never retried.

        Raises:
            DeviceUnavailable: If the input cannot be opened.
        """
        pass

    @abc.abstractmethod
    def samples(self, now_ms: float) -> np.ndarray:
        """Most recent float samples in [-1, 1]."""
        pass

    def read(self, now_ms: float) -> Buffers | None:
        """Current (time_domain, frequency) buffers, or None if not started."""
        if not self.active:
            return None
        return self.analyser.analyse(self.samples(now_ms))

    def stop(self):
        self.active = False


class MicrophoneSource(AudioSource):
    """Live input through sounddevice."""

    def __init__(
        self,
        analyser: SpectrumAnalyser | None = None,
        sample_rate: int | None = None,
        device: Union[int, str, None] = None,
    ):
        super().__init__(analyser)
        self.sample_rate = sample_rate
        self.device = device
        self.stream: Any = None
        self._lock = threading.Lock()
        self._ring = np.zeros(self.analyser.fft_size, dtype=np.float32)

    def _callback(self, indata: np.ndarray, frames: int, time_info: Any, status: Any):
        """PortAudio thread: keep only the latest fft_size samples."""
        if status:
            logger.debug("Audio callback status: %s", status)
        data = indata[:, 0] if indata.ndim > 1 else indata
        n = len(self._ring)
        with self._lock:
            if len(data) >= n:
                self._ring[:] = data[-n:]
            else:
                self._ring = np.concatenate([self._ring[len(data):], data]).astype(np.float32)

    def start(self):
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            raise DeviceUnavailable(f"Audio backend unavailable: {e}") from e

        try:
            self.stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                device=self.device,
                callback=self._callback,
            )
            self.stream.start()
        except Exception as e:
            if self.stream is not None:
                self.stream.close()
                self.stream = None
            raise DeviceUnavailable(f"Could not open microphone: {e}") from e

        self.active = True
        logger.info(
            "Microphone started: %s @ %s Hz",
            self.device if self.device is not None else "system default",
            int(self.stream.samplerate),
        )

    def samples(self, now_ms: float) -> np.ndarray:
        with self._lock:
            return self._ring.copy()

    def stop(self):
        super().stop()
        if self.stream is not None:
            try:
                self.stream.stop()
                self.stream.close()
                logger.info("Microphone stopped")
            except Exception as e:
                logger.warning("Could not close microphone stream: %s", e)
            finally:
                self.stream = None


class FileAudioSource(AudioSource):
    """Loops a recording, positioned by elapsed wall-clock time."""

    def __init__(
        self,
        path: Union[str, Path],
        analyser: SpectrumAnalyser | None = None,
        sample_rate: int = 22050,
    ):
        super().__init__(analyser)
        self.path = Path(path)
        self.sample_rate = sample_rate
        self.y: np.ndarray | None = None
        self._start_ms: float | None = None

    def start(self):
        try:
            y, sr = librosa.load(self.path, sr=self.sample_rate, mono=True)
        except Exception as e:
            raise DeviceUnavailable(f"Could not load {self.path}: {e}") from e
        if len(y) == 0:
            raise DeviceUnavailable(f"{self.path} contains no audio")

        self.y = y.astype(np.float32)
        self.sample_rate = sr
        self._start_ms = None
        self.active = True
        logger.info("Looping %s (%.1fs @ %d Hz)", self.path.name, len(y) / sr, sr)

    def samples(self, now_ms: float) -> np.ndarray:
        if self._start_ms is None:
            self._start_ms = now_ms
        position = int((now_ms - self._start_ms) / 1000.0 * self.sample_rate)
        indices = np.arange(position - self.analyser.fft_size, position)
        return np.take(self.y, indices, mode="wrap")
