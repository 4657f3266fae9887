"""Late-reverberation suppression.

Under an exponential-decay room model the late reverberant energy of a
block is predicted from the previous block, attenuated by the decay over
one block duration:

    late = |X_prev| * exp(-6.908 * block_seconds / t60)

and removed by spectral subtraction with a gain floor. Direct sound is
not delayed, so only the decaying tail is attenuated.
"""

from __future__ import annotations

import math

import numpy as np
from scipy import fft

from micpipe._audio_constants import SPECTRAL_EPSILON, T60_DECAY_EXPONENT
from micpipe.config.effects import DereverbConfig
from micpipe.effects.blocks import frame_count, write_saturated
from micpipe.effects.interface import AudioEffect

_MIN_FRAMES = 16


class DereverbEffect(AudioEffect):
    """Spectral late-reverb suppressor. Disabled by default.

    Args:
        config: Dereverberation configuration (sample rate, T60, gain floor).
    """

    def __init__(self, config: DereverbConfig | None = None) -> None:
        self._config = config if config is not None else DereverbConfig()
        self._tail: np.ndarray | None = None

    @property
    def name(self) -> str:
        return "dereverb"

    @property
    def config(self) -> DereverbConfig:
        return self._config

    def configure(self, config: DereverbConfig) -> None:
        self._config = config

    def decay_factor(self, n_frames: int) -> float:
        """Magnitude decay across one block of ``n_frames`` frames."""
        block_seconds = n_frames / self._config.sample_rate
        return math.exp(-T60_DECAY_EXPONENT * block_seconds / self._config.t60_s)

    def process(self, block: np.ndarray, channel_count: int) -> np.ndarray:
        config = self._config
        if not config.enabled:
            return block

        n_frames = frame_count(block, channel_count)
        if n_frames < _MIN_FRAMES:
            return block

        n_samples = n_frames * channel_count
        frames = block[:n_samples].reshape(n_frames, channel_count).astype(np.float64)
        spectrum = fft.rfft(frames, axis=0)
        magnitude = np.abs(spectrum)

        tail = self._tail
        self._tail = magnitude
        if tail is None or tail.shape != magnitude.shape:
            return block

        late = tail * self.decay_factor(n_frames)
        gain = 1.0 - late / (magnitude + SPECTRAL_EPSILON)
        np.clip(gain, config.floor, 1.0, out=gain)

        cleaned = fft.irfft(spectrum * gain, n=n_frames, axis=0)
        write_saturated(block[:n_samples], cleaned.reshape(-1))
        return block

    def reset(self) -> None:
        """Drop the reverb tail estimate."""
        self._tail = None
