"""Tests for micpipe.effects.blocks: block coercion, RMS, gain and scratch buffers."""

from __future__ import annotations

import numpy as np

from micpipe.effects.blocks import (
    ScratchBuffer,
    apply_gain,
    as_block,
    block_rms,
    frame_count,
    write_saturated,
)


class TestAsBlock:
    def test_int16_array_is_returned_as_is(self) -> None:
        block = np.array([1, 2, 3], dtype=np.int16)
        assert as_block(block) is block

    def test_list_is_converted(self) -> None:
        result = as_block([100, -100])
        assert result.dtype == np.int16
        np.testing.assert_array_equal(result, [100, -100])

    def test_out_of_range_values_saturate(self) -> None:
        result = as_block(np.array([40000, -40000, 5], dtype=np.int32))
        np.testing.assert_array_equal(result, [32767, -32768, 5])

    def test_empty_input(self) -> None:
        result = as_block([])
        assert result.dtype == np.int16
        assert len(result) == 0

    def test_two_dimensional_input_is_flattened(self) -> None:
        result = as_block(np.array([[1, 2], [3, 4]], dtype=np.int16))
        np.testing.assert_array_equal(result, [1, 2, 3, 4])


class TestFrameCount:
    def test_stereo(self) -> None:
        assert frame_count(np.zeros(10, dtype=np.int16), 2) == 5

    def test_partial_frame_ignored(self) -> None:
        assert frame_count(np.zeros(7, dtype=np.int16), 2) == 3

    def test_non_positive_channel_count(self) -> None:
        assert frame_count(np.zeros(10, dtype=np.int16), 0) == 0
        assert frame_count(np.zeros(10, dtype=np.int16), -1) == 0


class TestBlockRms:
    def test_empty_is_zero(self) -> None:
        assert block_rms(np.zeros(0, dtype=np.int16)) == 0.0

    def test_silence_is_zero(self) -> None:
        assert block_rms(np.zeros(64, dtype=np.int16)) == 0.0

    def test_constant_block(self) -> None:
        block = np.full(64, 16384, dtype=np.int16)
        assert abs(block_rms(block) - 0.5) < 1e-9

    def test_full_scale_negative(self) -> None:
        block = np.full(8, -32768, dtype=np.int16)
        assert abs(block_rms(block) - 1.0) < 1e-9


class TestApplyGain:
    def test_in_place(self) -> None:
        block = np.array([100, -100], dtype=np.int16)
        result = apply_gain(block, 2.0)
        assert result is block
        np.testing.assert_array_equal(block, [200, -200])

    def test_saturates(self) -> None:
        block = np.array([20000, -20000], dtype=np.int16)
        apply_gain(block, 2.0)
        np.testing.assert_array_equal(block, [32767, -32768])

    def test_truncates_toward_zero(self) -> None:
        block = np.array([3, -3], dtype=np.int16)
        apply_gain(block, 0.5)
        np.testing.assert_array_equal(block, [1, -1])

    def test_empty(self) -> None:
        block = np.zeros(0, dtype=np.int16)
        assert len(apply_gain(block, 3.0)) == 0


class TestWriteSaturated:
    def test_clips_and_truncates(self) -> None:
        block = np.zeros(3, dtype=np.int16)
        write_saturated(block, np.array([1e6, -1e6, 12.9]))
        np.testing.assert_array_equal(block, [32767, -32768, 12])


class TestScratchBuffer:
    def test_first_reserve_allocates_requested_size(self) -> None:
        buf = ScratchBuffer()
        buf.reserve(100)
        assert buf.capacity == 100

    def test_smaller_reserve_does_not_reallocate(self) -> None:
        buf = ScratchBuffer()
        data = buf.reserve(100)
        assert buf.reserve(50) is data
        assert buf.capacity == 100

    def test_growth_doubles(self) -> None:
        buf = ScratchBuffer()
        buf.reserve(100)
        buf.reserve(101)
        assert buf.capacity == 200

    def test_growth_to_required_when_larger_than_double(self) -> None:
        buf = ScratchBuffer()
        buf.reserve(10)
        buf.reserve(500)
        assert buf.capacity == 500

    def test_growth_keeps_contents(self) -> None:
        buf = ScratchBuffer()
        data = buf.reserve(3)
        data[:3] = [7, 8, 9]
        grown = buf.reserve(10)
        np.testing.assert_array_equal(grown[:3], [7, 8, 9])
