"""Tests for audio sources."""

import sys
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from versescope.audio.sources import DeviceUnavailable, FileAudioSource, MicrophoneSource


def fake_sounddevice(fail: bool = False) -> MagicMock:
    sd = MagicMock()
    if fail:
        sd.InputStream.side_effect = RuntimeError("no input device")
    else:
        sd.InputStream.return_value.samplerate = 48000
    return sd


class TestMicrophoneSource:
    """Tests for MicrophoneSource with a mocked PortAudio backend."""

    def test_start_opens_mono_stream(self):
        sd = fake_sounddevice()
        source = MicrophoneSource(device=2)
        with patch.dict(sys.modules, {"sounddevice": sd}):
            source.start()

        assert source.active
        kwargs = sd.InputStream.call_args.kwargs
        assert kwargs["channels"] == 1
        assert kwargs["device"] == 2
        assert kwargs["callback"] == source._callback
        sd.InputStream.return_value.start.assert_called_once()

    def test_open_failure(self):
        source = MicrophoneSource()
        with patch.dict(sys.modules, {"sounddevice": fake_sounddevice(fail=True)}):
            with pytest.raises(DeviceUnavailable):
                source.start()
        assert not source.active
        assert source.stream is None

    def test_missing_backend(self):
        source = MicrophoneSource()
        with patch.dict(sys.modules, {"sounddevice": None}):
            with pytest.raises(DeviceUnavailable):
                source.start()

    def test_read_before_start(self):
        assert MicrophoneSource().read(0) is None

    def test_callback_fills_ring(self):
        """The newest samples land at the end of the analysis window."""
        sd = fake_sounddevice()
        source = MicrophoneSource()
        with patch.dict(sys.modules, {"sounddevice": sd}):
            source.start()

        source._callback(np.full((256, 1), 0.5, dtype=np.float32), 256, None, None)
        time_domain, _ = source.read(0)

        assert np.all(time_domain[-256:] == 192)
        assert np.all(time_domain[:-256] == 128)

    def test_long_callback_keeps_latest(self):
        source = MicrophoneSource()
        block = np.zeros((4096, 1), dtype=np.float32)
        block[-1024:] = 0.25
        source._callback(block, 4096, None, None)
        assert np.all(source.samples(0) == 0.25)

    def test_stop_closes_stream(self):
        sd = fake_sounddevice()
        source = MicrophoneSource()
        with patch.dict(sys.modules, {"sounddevice": sd}):
            source.start()
        source.stop()

        stream = sd.InputStream.return_value
        stream.stop.assert_called_once()
        stream.close.assert_called_once()
        assert source.stream is None
        assert not source.active

    def test_stop_tolerates_stream_error(self, caplog):
        """A stream that errors on close is logged and dropped."""
        sd = fake_sounddevice()
        sd.InputStream.return_value.stop.side_effect = RuntimeError("PortAudio: device unavailable")
        source = MicrophoneSource()
        with patch.dict(sys.modules, {"sounddevice": sd}):
            source.start()

        source.stop()

        assert source.stream is None
        assert not source.active
        assert "device unavailable" in caplog.text


class TestFileAudioSource:
    """Tests for FileAudioSource."""

    def test_loads_and_reads(self, temp_audio_file):
        source = FileAudioSource(temp_audio_file)
        source.start()

        time_domain, frequency = source.read(0)
        assert source.active
        assert time_domain.shape == (1024,)
        assert frequency.shape == (512,)

    def test_position_follows_clock(self, temp_audio_file):
        """Samples are taken from elapsed time since the first read."""
        source = FileAudioSource(temp_audio_file)
        source.start()
        source.samples(5000)

        window = source.samples(6000)
        np.testing.assert_array_equal(window, source.y[22050 - 1024:22050])

    def test_loops(self, temp_audio_file):
        """Reading past the end wraps around."""
        source = FileAudioSource(temp_audio_file)
        source.start()
        source.samples(0)
        duration_ms = len(source.y) / source.sample_rate * 1000

        np.testing.assert_array_equal(source.samples(duration_ms), source.samples(0))

    def test_restart_resets_clock(self, temp_audio_file):
        """After stop and start, playback restarts from the next read."""
        source = FileAudioSource(temp_audio_file)
        source.start()
        first = source.samples(0)
        source.samples(700)
        source.stop()

        source.start()
        np.testing.assert_array_equal(source.samples(5000), first)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DeviceUnavailable):
            FileAudioSource(tmp_path / "missing.wav").start()
