"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from versescope.core.verse import VerseRecord

# Default sample rate for test audio
TEST_SR = 22050

# Monospace stand-in for a font: every character is 8px wide
CHAR_WIDTH = 8


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def pure_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a pure 440Hz sine wave (A4 note).

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 2.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def white_noise(sample_rate: int) -> tuple[np.ndarray, int]:
    """Reproducible white noise."""
    rng = np.random.default_rng(42)
    y = rng.standard_normal(int(sample_rate * 2.0)).astype(np.float32) * 0.3
    return y, sample_rate


@pytest.fixture
def silent_buffers() -> tuple[np.ndarray, np.ndarray]:
    """Analyser buffers for silence: time domain at 128, empty spectrum."""
    return np.full(1024, 128, dtype=np.uint8), np.zeros(512, dtype=np.uint8)


@pytest.fixture
def loud_buffers() -> tuple[np.ndarray, np.ndarray]:
    """Analyser buffers for a loud full-band signal."""
    time_domain = np.tile(np.array([32, 224], dtype=np.uint8), 512)
    return time_domain, np.full(512, 200, dtype=np.uint8)


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def monospace():
    """Width-measuring service: 8px per character."""
    return lambda text: float(len(text) * CHAR_WIDTH)


@pytest.fixture
def fifty_char_verse() -> VerseRecord:
    """A verse whose composed display text is exactly 50 characters."""
    return VerseRecord(reference="Psalm 46:10", text="Be still, and know that I am God.")


@pytest.fixture
def verses(fifty_char_verse) -> tuple[VerseRecord, ...]:
    return (
        fifty_char_verse,
        VerseRecord(reference="John 11:35", text="Jesus wept."),
        VerseRecord(reference="Psalm 23:1", text="The LORD is my shepherd; I shall not want."),
    )


@pytest.fixture
def temp_audio_file(tmp_path, pure_sine):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = pure_sine
    audio_path = tmp_path / "test_audio.wav"
    sf.write(audio_path, y, sr)
    return audio_path
