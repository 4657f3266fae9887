"""Noise reduction via block spectral subtraction.

Each channel of a block is transformed with a real FFT and its magnitude
is reduced by an adaptive estimate of the stationary noise magnitude:

    gain = max(1 - strength * noise / (|X| + eps), floor)

Only quiet blocks feed the noise estimate: a block must sit at or below
-26 dBFS RMS to seed the profile, and to update it its mean magnitude must
also stay below 1.5x the profile mean. A steady tone or sustained voice
present from the first block is therefore never learned as noise. Phase is
kept; the gain floor limits musical-noise artifacts.
"""

from __future__ import annotations

import numpy as np
from scipy import fft

from micpipe._audio_constants import (
    NOISE_PROFILE_MAX_RMS,
    NOISE_PROFILE_UPDATE_RATIO,
    SPECTRAL_EPSILON,
)
from micpipe.config.effects import NoiseReductionConfig
from micpipe.effects.blocks import block_rms, frame_count, write_saturated
from micpipe.effects.interface import AudioEffect
from micpipe.logging import get_logger

logger = get_logger("effects.noise_reduction")

# Blocks shorter than this are passed through; the spectrum is too coarse.
_MIN_FRAMES = 16


class NoiseReductionEffect(AudioEffect):
    """Adaptive spectral-subtraction noise suppressor.

    Disabled by default (pass-through). The profile is per channel and is
    dropped whenever the block shape changes. Until a quiet block has
    seeded a profile, blocks pass through unchanged.

    Args:
        config: Noise reduction configuration.
    """

    def __init__(self, config: NoiseReductionConfig | None = None) -> None:
        self._config = config if config is not None else NoiseReductionConfig()
        self._noise_profile: np.ndarray | None = None

    @property
    def name(self) -> str:
        return "noise_reduction"

    @property
    def config(self) -> NoiseReductionConfig:
        return self._config

    def configure(self, config: NoiseReductionConfig) -> None:
        self._config = config

    @property
    def noise_profile(self) -> np.ndarray | None:
        """Noise magnitude estimate, shape (bins, channels), or None until seeded."""
        return self._noise_profile

    def process(self, block: np.ndarray, channel_count: int) -> np.ndarray:
        config = self._config
        if not config.enabled:
            return block

        n_frames = frame_count(block, channel_count)
        if n_frames < _MIN_FRAMES:
            return block

        n_samples = n_frames * channel_count
        quiet = block_rms(block[:n_samples]) <= NOISE_PROFILE_MAX_RMS
        frames = block[:n_samples].reshape(n_frames, channel_count).astype(np.float64)
        spectrum = fft.rfft(frames, axis=0)
        magnitude = np.abs(spectrum)

        profile = self._noise_profile
        if profile is not None and profile.shape != magnitude.shape:
            logger.debug("noise_profile_dropped", frames=n_frames, channels=channel_count)
            self._noise_profile = profile = None

        if profile is None:
            if quiet:
                self._noise_profile = magnitude.copy()
                logger.debug("noise_profile_seeded", frames=n_frames, channels=channel_count)
            return block

        if quiet and float(magnitude.mean()) < float(profile.mean()) * NOISE_PROFILE_UPDATE_RATIO:
            rate = config.adaptation_rate
            profile *= 1.0 - rate
            profile += rate * magnitude

        gain = 1.0 - config.strength * profile / (magnitude + SPECTRAL_EPSILON)
        np.maximum(gain, config.floor, out=gain)

        cleaned = fft.irfft(spectrum * gain, n=n_frames, axis=0)
        write_saturated(block[:n_samples], cleaned.reshape(-1))
        return block

    def reset(self) -> None:
        """Forget the noise profile; the next quiet block seeds a new one."""
        self._noise_profile = None
