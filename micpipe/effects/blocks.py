"""Helpers for interleaved PCM int16 sample blocks."""

from __future__ import annotations

from typing import Any

import numpy as np

from micpipe._audio_constants import PCM_INT16_MAX, PCM_INT16_MIN, PCM_INT16_SCALE


def as_block(samples: Any) -> np.ndarray:
    """Return ``samples`` as a 1-D int16 block.

    An int16 ndarray is returned as-is (same object). Anything else is
    saturated into the int16 range and converted, producing a new array.
    """
    if isinstance(samples, np.ndarray) and samples.dtype == np.int16 and samples.ndim == 1:
        return samples
    arr = np.asarray(samples)
    if arr.size == 0:
        return np.zeros(0, dtype=np.int16)
    return np.clip(arr.ravel(), PCM_INT16_MIN, PCM_INT16_MAX).astype(np.int16)


def frame_count(block: np.ndarray, channel_count: int) -> int:
    """Number of whole frames in the block (0 for a non-positive channel count)."""
    if channel_count <= 0:
        return 0
    return len(block) // channel_count


def block_rms(block: np.ndarray) -> float:
    """RMS of the block normalized to [-1.0, 1.0]. Empty blocks return 0.0."""
    if len(block) == 0:
        return 0.0
    normalized = block.astype(np.float64) / PCM_INT16_SCALE
    # np.dot returns the sum of squares without allocating normalized**2.
    return float(np.sqrt(np.dot(normalized, normalized) / len(normalized)))


def apply_gain(block: np.ndarray, gain: float) -> np.ndarray:
    """Multiply every sample by ``gain`` in place, saturating to int16.

    Products are computed in single precision and truncated toward zero.
    """
    if len(block) == 0:
        return block
    scaled = block.astype(np.float32) * np.float32(gain)
    np.clip(scaled, PCM_INT16_MIN, PCM_INT16_MAX, out=scaled)
    block[:] = scaled.astype(np.int16)
    return block


def write_saturated(block: np.ndarray, values: np.ndarray) -> np.ndarray:
    """Write float ``values`` into ``block`` in place, truncated and saturated."""
    np.clip(values, PCM_INT16_MIN, PCM_INT16_MAX, out=values)
    block[:] = values.astype(np.int16)
    return block


class ScratchBuffer:
    """Grow-only int16 buffer reused across calls.

    ``reserve()`` reallocates only when the requested size exceeds the
    current capacity, growing to max(2 * capacity, requested) and keeping
    the existing contents.
    """

    __slots__ = ("_data",)

    def __init__(self, capacity: int = 0) -> None:
        self._data = np.zeros(max(0, capacity), dtype=np.int16)

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def data(self) -> np.ndarray:
        return self._data

    def reserve(self, size: int) -> np.ndarray:
        """Ensure room for ``size`` samples and return the backing array."""
        if size > len(self._data):
            grown = np.zeros(max(len(self._data) * 2, size), dtype=np.int16)
            grown[: len(self._data)] = self._data
            self._data = grown
        return self._data
