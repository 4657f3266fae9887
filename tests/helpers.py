"""Shared test helpers for building PCM int16 blocks.

Usage:
    from tests.helpers import make_constant, make_interleaved, make_noise, make_sine
"""

from __future__ import annotations

import numpy as np

SAMPLE_RATE = 48000


def make_constant(value: int, n_samples: int = 480) -> np.ndarray:
    """Block of ``n_samples`` identical samples."""
    return np.full(n_samples, value, dtype=np.int16)


def make_sine(
    amplitude: float,
    n_frames: int = 480,
    frequency: float = 1000.0,
    sample_rate: int = SAMPLE_RATE,
) -> np.ndarray:
    """Mono sine block."""
    t = np.arange(n_frames, dtype=np.float64) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.int16)


def make_noise(amplitude: float, n_samples: int = 480, seed: int = 0) -> np.ndarray:
    """Uniform white noise block in [-amplitude, amplitude]."""
    rng = np.random.default_rng(seed)
    return rng.uniform(-amplitude, amplitude, n_samples).astype(np.int16)


def make_interleaved(*channels: np.ndarray) -> np.ndarray:
    """Interleave equally long mono channels into one block."""
    return np.stack(channels, axis=1).reshape(-1).astype(np.int16)


def block_rms_int16(block: np.ndarray) -> float:
    """RMS of a block in raw sample units."""
    if len(block) == 0:
        return 0.0
    samples = block.astype(np.float64)
    return float(np.sqrt(np.mean(samples * samples)))
