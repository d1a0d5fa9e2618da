"""Tests for the pygame frame driver (SDL dummy drivers, no window)."""

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pygame  # noqa: E402
import pytest  # noqa: E402

from versescope.config import InstallationConfig  # noqa: E402
from versescope.display import FontMeasurer, OverlayPainter, PygameDisplay, load_font  # noqa: E402
from versescope.installation import Installation  # noqa: E402


@pytest.fixture
def config():
    return InstallationConfig(seed=3)


@pytest.fixture
def font(config):
    return load_font(config.overlay.text_size)


class TestFontMeasurer:
    def test_wider_text_measures_wider(self, font):
        measure = FontMeasurer(font)
        assert measure("ab") < measure("abcdef")
        assert measure("abc") == float(font.size("abc")[0])


class TestOverlayPainter:
    """Tests for the overlay drawing."""

    def test_paints_accent_border(self, config, font, verses):
        inst = Installation(config, verses, FontMeasurer(font))
        inst.init(0)
        instr = inst.tick(3000)

        canvas = pygame.Surface((config.internal_width, config.internal_height))
        OverlayPainter(config, font).paint(canvas, instr)

        assert tuple(canvas.get_at((14, 300)))[:3] == instr.accent.rgb255

    def test_draws_text(self, config, font, verses):
        inst = Installation(config, verses, FontMeasurer(font))
        inst.init(0)
        instr = inst.tick(3000)

        canvas = pygame.Surface((config.internal_width, config.internal_height))
        OverlayPainter(config, font).paint(canvas, instr)

        ov = config.overlay
        text_area = canvas.subsurface(pygame.Rect(ov.margin_x, ov.margin_y, 200, ov.leading))
        assert pygame.transform.average_color(text_area)[:3] != (0, 0, 0)


class TestPygameDisplay:
    def test_runs_headless(self, config, verses):
        display = PygameDisplay(config)
        inst = Installation(config, verses, display.measure, target=display.target)
        try:
            inst.init(display.now_ms())
            display.run(inst, max_duration=0.1)
            assert display.window.get_size() == (config.target_width, config.target_height)
        finally:
            inst.teardown()
            display.close()
