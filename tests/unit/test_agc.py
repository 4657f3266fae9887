"""Tests for AGCEffect: envelope follower, silence relaxation, gain bounds."""

from __future__ import annotations

import numpy as np
import pytest

from micpipe.config.effects import AGCConfig
from micpipe.effects.agc import AGCEffect
from tests.helpers import make_constant, make_sine


def _enabled(target_level: int = 32000) -> AGCEffect:
    return AGCEffect(AGCConfig(enabled=True, target_level=target_level))


class TestAGCPassThrough:
    def test_name(self) -> None:
        assert AGCEffect().name == "agc"

    def test_disabled_by_default(self) -> None:
        block = make_constant(1000)
        original = block.copy()
        effect = AGCEffect()
        assert effect.process(block, 1) is block
        np.testing.assert_array_equal(block, original)
        assert effect.envelope == 0.0

    def test_non_positive_target_passes_through(self) -> None:
        block = make_constant(1000)
        effect = _enabled(target_level=0)
        result = effect.process(block, 1)
        np.testing.assert_array_equal(result, make_constant(1000))
        assert effect.envelope == 0.0


class TestAGCEnvelope:
    def test_first_active_block_seeds_envelope_and_attacks(self) -> None:
        # rms ~0.03 -> desired gain clamps to 5.0 (above the seeded 1.0): attack factor 0.01
        effect = _enabled()
        result = effect.process(make_constant(1000), 1)
        assert effect.envelope == pytest.approx(0.99 + 5.0 * 0.01)
        np.testing.assert_allclose(result, 1040, atol=1)

    def test_loud_block_releases_slowly(self) -> None:
        # rms 0.9155 above target 0.9 -> desired < 1.0: release factor 0.005
        effect = _enabled()
        effect.process(make_constant(30000), 1)
        desired = 0.9 / (30000 / 32768 + 1e-6)
        assert effect.envelope == pytest.approx(0.995 + desired * 0.005)

    def test_silence_relaxes_toward_unity(self) -> None:
        effect = _enabled()
        effect.process(make_constant(1000), 1)
        before = effect.envelope
        effect.process(make_constant(0), 1)
        assert effect.envelope == pytest.approx(before * 0.999 + 0.001)

    def test_silence_from_fresh_state_does_not_seed(self) -> None:
        effect = _enabled()
        result = effect.process(make_constant(0), 1)
        assert effect.envelope == pytest.approx(0.001)
        # Applied gain is clamped to the lower bound.
        assert effect.applied_gain == pytest.approx(0.8)
        np.testing.assert_array_equal(result, 0)

    def test_envelope_is_double_precision(self) -> None:
        effect = _enabled()
        effect.process(make_constant(30000), 1)
        desired = 0.9 / (30000 / 32768 + 1e-6)
        assert type(effect.envelope) is float
        assert effect.envelope == pytest.approx(0.995 + desired * 0.005, rel=1e-12)
        # Within float32 rounding of the all-single-precision value.
        single = np.float32(1.0) * np.float32(0.995) + np.float32(desired) * np.float32(0.005)
        assert effect.envelope == pytest.approx(float(single), abs=1e-6)

    def test_target_rms_clamped_low(self) -> None:
        # target 1 -> 0.00003 clamps to 0.01 -> desired gain clamps to 0.5
        effect = _enabled(target_level=1)
        effect.process(make_constant(10000), 1)
        assert effect.envelope == pytest.approx(0.995 + 0.5 * 0.005)


class TestAGCConvergence:
    def test_loud_signal_converges_without_oscillation(self) -> None:
        effect = _enabled()
        envelopes = []
        for _ in range(3000):
            effect.process(make_constant(30000), 1)
            envelopes.append(effect.envelope)

        desired = 0.9 / (30000 / 32768 + 1e-6)
        diffs = np.diff(envelopes)
        assert np.all(diffs <= 1e-12)  # monotonic descent, no overshoot
        assert envelopes[-1] == pytest.approx(desired, abs=1e-3)
        assert 0.8 <= effect.applied_gain <= 5.0

    def test_quiet_signal_gain_capped_at_five(self) -> None:
        effect = _enabled()
        result = None
        for _ in range(1500):
            result = effect.process(make_constant(1000), 1)
        assert effect.applied_gain == pytest.approx(5.0, abs=1e-3)
        assert effect.applied_gain <= 5.0
        assert result is not None
        np.testing.assert_allclose(result, 5000, atol=2)

    def test_output_always_in_int16_range(self) -> None:
        effect = _enabled()
        for _ in range(500):
            result = effect.process(make_sine(2000.0), 1)
        peak = make_sine(32767.0)
        result = effect.process(peak, 1)
        assert result.dtype == np.int16
        assert result.max() <= 32767
        assert result.min() >= -32768


class TestAGCReset:
    def test_reset_zeroes_envelope(self) -> None:
        effect = _enabled()
        effect.process(make_constant(1000), 1)
        effect.reset()
        assert effect.envelope == 0.0
        assert effect.applied_gain == 1.0

    def test_reset_behaves_like_fresh_instance(self) -> None:
        used = _enabled()
        for _ in range(50):
            used.process(make_constant(2000), 1)
        used.reset()

        fresh = _enabled()
        for amplitude in (500, 3000, 0, 12000):
            np.testing.assert_array_equal(
                used.process(make_constant(amplitude), 1),
                fresh.process(make_constant(amplitude), 1),
            )

    def test_release_is_reset_and_idempotent(self) -> None:
        effect = _enabled()
        effect.process(make_constant(1000), 1)
        effect.release()
        effect.release()
        assert effect.envelope == 0.0

    def test_empty_block(self) -> None:
        effect = _enabled()
        result = effect.process(np.zeros(0, dtype=np.int16), 1)
        assert len(result) == 0
