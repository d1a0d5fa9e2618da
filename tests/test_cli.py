"""Tests for the command-line entry point."""

import json
import os
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from versescope.audio.sources import FileAudioSource, MicrophoneSource
from versescope.cli import build_parser, build_source, main
from versescope.config import InstallationConfig


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert not args.no_audio
        assert args.audio_file is None
        assert args.fps is None
        assert args.log_level == "INFO"

    def test_audio_options_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--no-audio", "--audio-file", "x.wav"])


class TestBuildSource:
    """Tests for choosing the audio source."""

    def test_no_audio(self):
        args = build_parser().parse_args(["--no-audio"])
        assert build_source(args, InstallationConfig()) is None

    def test_audio_file(self, tmp_path):
        args = build_parser().parse_args(["--audio-file", str(tmp_path / "a.wav")])
        source = build_source(args, InstallationConfig())
        assert isinstance(source, FileAudioSource)

    def test_microphone_device_index(self):
        args = build_parser().parse_args(["--device", "3"])
        source = build_source(args, InstallationConfig())
        assert isinstance(source, MicrophoneSource)
        assert source.device == 3

    def test_analyser_follows_config(self):
        config = InstallationConfig()
        config.audio.fft_size = 2048
        args = SimpleNamespace(no_audio=False, audio_file=None, device=None)
        source = build_source(args, config)
        assert source.analyser.fft_size == 2048


class TestMain:
    """Tests for main()."""

    def test_missing_config(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--config", str(tmp_path / "nope.json")])
        assert excinfo.value.code == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"speed": 2}))
        with pytest.raises(SystemExit) as excinfo:
            main(["--config", str(path)])
        assert excinfo.value.code == 1
        assert "Unknown config key" in capsys.readouterr().err

    def test_invalid_verses(self, tmp_path, capsys):
        path = tmp_path / "verses.json"
        path.write_text("[]")
        with pytest.raises(SystemExit) as excinfo:
            main(["--verses", str(path)])
        assert excinfo.value.code == 1

    @pytest.mark.parametrize("argv, message", [
        (["--rotation-period", "0"], "rotation_period_ms must be positive"),
        (["--fps", "0"], "fps must be positive"),
        (["--fps", "-5"], "fps must be positive"),
    ])
    def test_non_positive_overrides(self, argv, message, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(["--no-audio"] + argv)
        assert excinfo.value.code == 1
        assert message in capsys.readouterr().err

    def test_config_file_zero_fps(self, tmp_path, capsys):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"fps": 0}))
        with pytest.raises(SystemExit) as excinfo:
            main(["--config", str(path)])
        assert excinfo.value.code == 1
        assert "fps must be positive" in capsys.readouterr().err

    def test_missing_audio_file(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main(["--audio-file", str(tmp_path / "missing.wav")])
        assert excinfo.value.code == 1

    def test_require_audio_fails_without_device(self, capsys, monkeypatch):
        monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
        monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
        sd = MagicMock()
        sd.InputStream.side_effect = RuntimeError("no input device")

        with patch.dict(sys.modules, {"sounddevice": sd}):
            with pytest.raises(SystemExit) as excinfo:
                main(["--headless", "--require-audio", "--max-duration", "0"])
        assert excinfo.value.code == 1
        assert "Could not start audio" in capsys.readouterr().err

    def test_headless_run(self, monkeypatch):
        monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
        monkeypatch.setenv("SDL_AUDIODRIVER", "dummy")
        main(["--headless", "--no-audio", "--seed", "1", "--max-duration", "0.1"])
        assert os.environ["SDL_VIDEODRIVER"] == "dummy"
