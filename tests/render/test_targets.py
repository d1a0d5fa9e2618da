"""Tests for render targets."""

import numpy as np

from versescope.render.chain import NEUTRAL_CLEAR, osc, solid
from versescope.render.targets import FieldTarget, RecordingTarget


class TestRecordingTarget:
    def test_records_calls(self):
        target = RecordingTarget()
        chain = solid(1, 0, 0)
        target.clear()
        target.out(chain)

        assert target.calls == [("clear", None), ("out", chain)]
        assert target.chains == [chain]
        assert target.active is chain

    def test_clear_sets_neutral(self):
        target = RecordingTarget()
        target.out(solid(1, 1, 1))
        target.clear()
        assert target.active is NEUTRAL_CLEAR


class TestFieldTarget:
    """Tests for FieldTarget."""

    def test_upscales_to_output_size(self):
        target = FieldTarget(36, 64, synth_scale=0.5)
        target.out(solid(1, 1, 1))
        frame = target.render(0.0)

        assert frame.shape == (64, 36, 3)
        assert np.all(frame == 255)

    def test_nearest_neighbour_blocks(self):
        """Each synthesized pixel becomes a 2x2 block."""
        target = FieldTarget(36, 64, synth_scale=0.5)
        target.out(osc(30, 0.2).rotate(0.1))
        frame = target.render(1.0)
        np.testing.assert_array_equal(frame[0::2, 0::2], frame[1::2, 1::2])

    def test_starts_and_clears_black(self):
        target = FieldTarget(20, 20, synth_scale=1.0)
        assert not target.render(0.0).any()

        target.out(solid(1, 1, 1))
        target.clear()
        assert not target.render(0.0).any()
