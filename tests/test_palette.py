"""Tests for the gemstone palette."""

import numpy as np
import pytest

from versescope.core.palette import GEMSTONE_PALETTE, Palette, PaletteColor, hex_to_rgb01


class TestHexConversion:
    """Tests for hex_to_rgb01."""

    def test_converts_channels(self):
        assert hex_to_rgb01("#FF8000") == pytest.approx((1.0, 128 / 255, 0.0))

    def test_without_hash(self):
        assert hex_to_rgb01("000000") == (0.0, 0.0, 0.0)

    @pytest.mark.parametrize("bad", ["#FFF", "#GGGGGG", ""])
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValueError):
            hex_to_rgb01(bad)


class TestPalette:
    """Tests for Palette."""

    def test_gemstone_has_sixteen_colours(self):
        assert len(GEMSTONE_PALETTE) == 16
        assert GEMSTONE_PALETTE[0].name == "Sardius"
        assert GEMSTONE_PALETTE[-1].name == "Crimson"

    def test_rgb255_round_trips_hex(self):
        """The 8-bit colour matches the hex string."""
        color = PaletteColor("Sapphire", "#1E48C7")
        assert color.rgb255 == (0x1E, 0x48, 0xC7)

    def test_pick_is_reproducible(self):
        """Equal seeds draw equal colour sequences."""
        a = [GEMSTONE_PALETTE.pick(np.random.default_rng(7)) for _ in range(3)]
        b = [GEMSTONE_PALETTE.pick(np.random.default_rng(7)) for _ in range(3)]
        assert a == b

    def test_pick_covers_palette(self, rng):
        """Uniform draws eventually reach every colour."""
        drawn = {GEMSTONE_PALETTE.pick(rng).name for _ in range(2000)}
        assert drawn == {c.name for c in GEMSTONE_PALETTE}

    def test_empty_palette_rejected(self):
        with pytest.raises(ValueError):
            Palette([])

    def test_from_dicts(self):
        palette = Palette.from_dicts([{"name": "Ink", "hex": "#101010"}])
        assert len(palette) == 1
        assert palette[0].rgb255 == (16, 16, 16)
