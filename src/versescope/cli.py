"""
CLI entry point for the installation.

Usage:
    versescope [options]
    python -m versescope [options]
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from versescope.audio.analyser import SpectrumAnalyser
from versescope.audio.sources import AudioSource, FileAudioSource, MicrophoneSource
from versescope.config import InstallationConfig, load_config
from versescope.verses import DEFAULT_VERSES, load_verses


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="versescope",
        description="Audio-reactive generative background with a slow verse overlay",
    )

    parser.add_argument("--config", type=Path, default=None, help="JSON config file")
    parser.add_argument(
        "--verses", type=Path, default=None,
        help="JSON list of {\"reference\", \"text\"} objects (default: built-in verses)",
    )

    # Audio
    audio = parser.add_mutually_exclusive_group()
    audio.add_argument("--no-audio", action="store_true", help="Run without audio input")
    audio.add_argument(
        "--audio-file", type=Path, default=None,
        help="Loop an audio file instead of the microphone (wav, mp3, flac)",
    )
    parser.add_argument("--device", type=str, default=None, help="Input device name or index")
    parser.add_argument(
        "--require-audio", action="store_true",
        help="Exit with an error if the audio input cannot be opened",
    )

    # Display
    parser.add_argument("-f", "--fps", type=int, default=None, help="Frames per second (overrides config)")
    parser.add_argument("--fullscreen", action="store_true", help="Open a fullscreen window")
    parser.add_argument("--headless", action="store_true", help="Render without a visible window")
    parser.add_argument(
        "--rotation-period", type=float, default=None,
        help="Milliseconds between background presets (overrides config)",
    )

    # Runtime
    parser.add_argument("--seed", type=int, default=None, help="Seed for palette and preset draws")
    parser.add_argument("--max-duration", type=float, default=None, help="Stop after N seconds")
    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    return parser


def _device_arg(value: str | None):
    if value is None:
        return None
    return int(value) if value.isdigit() else value


def build_source(args: argparse.Namespace, config: InstallationConfig) -> AudioSource | None:
    if args.no_audio:
        return None

    ac = config.audio
    analyser = SpectrumAnalyser(
        fft_size=ac.fft_size,
        smoothing=ac.analyser_smoothing,
        min_db=ac.min_db,
        max_db=ac.max_db,
    )
    if args.audio_file is not None:
        return FileAudioSource(args.audio_file, analyser)

    device = _device_arg(args.device) if args.device is not None else ac.device
    return MicrophoneSource(analyser, sample_rate=ac.sample_rate, device=device)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = InstallationConfig()
    if args.config is not None:
        if not args.config.exists():
            print(f"Error: Config file not found: {args.config}", file=sys.stderr)
            sys.exit(1)
        try:
            config = load_config(args.config)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    if args.fps is not None:
        config.fps = args.fps
    if args.rotation_period is not None:
        config.rotation_period_ms = args.rotation_period
    if args.seed is not None:
        config.seed = args.seed
    try:
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    verses = DEFAULT_VERSES
    if args.verses is not None:
        if not args.verses.exists():
            print(f"Error: Verses file not found: {args.verses}", file=sys.stderr)
            sys.exit(1)
        try:
            verses = load_verses(args.verses)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

    if args.audio_file is not None and not args.audio_file.exists():
        print(f"Error: Audio file not found: {args.audio_file}", file=sys.stderr)
        sys.exit(1)

    if args.headless:
        os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

    # pygame is only needed once we are actually going to draw
    from versescope.display import PygameDisplay
    from versescope.installation import Installation

    display = PygameDisplay(config, fullscreen=args.fullscreen)
    installation = Installation(
        config,
        verses,
        measure=display.measure,
        source=build_source(args, config),
        target=display.target,
    )

    try:
        installation.init(display.now_ms())
        if args.require_audio and not installation.audio_live:
            print(
                "Error: Could not start audio. Check microphone permissions and the selected device.",
                file=sys.stderr,
            )
            sys.exit(1)
        display.run(installation, max_duration=args.max_duration)
    except KeyboardInterrupt:
        pass
    finally:
        installation.teardown()
        display.close()


if __name__ == "__main__":
    main()
