"""Automatic gain control driven by block RMS.

The gain follows an envelope updated once per block with an asymmetric
exponential moving average: gain reductions blend in slowly (0.005 per
block) and gain increases faster (0.01 per block). During near-silence
the envelope relaxes toward unity instead of chasing the noise floor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from micpipe import metrics
from micpipe._audio_constants import (
    AGC_APPLIED_GAIN_MAX,
    AGC_APPLIED_GAIN_MIN,
    AGC_ATTACK_SMOOTHING,
    AGC_DESIRED_GAIN_MAX,
    AGC_DESIRED_GAIN_MIN,
    AGC_RELEASE_SMOOTHING,
    AGC_RMS_EPSILON,
    AGC_SILENCE_RMS,
    AGC_SILENCE_SMOOTHING,
    AGC_TARGET_RMS_MAX,
    AGC_TARGET_RMS_MIN,
    PCM_INT16_SCALE,
)
from micpipe.config.effects import AGCConfig
from micpipe.effects.blocks import apply_gain, block_rms
from micpipe.effects.interface import AudioEffect
from micpipe.logging import get_logger

if TYPE_CHECKING:
    import numpy as np

logger = get_logger("effects.agc")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class AGCEffect(AudioEffect):
    """RMS-driven automatic gain controller.

    The envelope starts at 0.0 and is seeded to 1.0 on the first block
    with signal. The applied gain is the envelope clamped to [0.8, 5.0].

    Envelope, RMS and gain arithmetic run in double precision (Python
    float); only the per-sample multiply is float32. Envelope values can
    therefore differ in the last few bits from an all-float32 follower,
    which is well below one int16 step at the output.

    Args:
        config: AGC configuration. Defaults to disabled, target 32000.
    """

    def __init__(self, config: AGCConfig | None = None) -> None:
        self._config = config if config is not None else AGCConfig()
        self._envelope = 0.0
        self._applied_gain = 1.0

    @property
    def name(self) -> str:
        return "agc"

    @property
    def config(self) -> AGCConfig:
        return self._config

    def configure(self, config: AGCConfig) -> None:
        self._config = config

    @property
    def envelope(self) -> float:
        """Current envelope value (0.0 until the first block with signal)."""
        return self._envelope

    @property
    def applied_gain(self) -> float:
        """Gain multiplied into the last processed block."""
        return self._applied_gain

    def process(self, block: np.ndarray, channel_count: int) -> np.ndarray:
        config = self._config
        if not config.enabled or config.target_level <= 0:
            return block

        rms = block_rms(block)
        target_rms = _clamp(
            config.target_level / PCM_INT16_SCALE, AGC_TARGET_RMS_MIN, AGC_TARGET_RMS_MAX
        )

        if rms > AGC_SILENCE_RMS:
            desired = _clamp(
                target_rms / (rms + AGC_RMS_EPSILON), AGC_DESIRED_GAIN_MIN, AGC_DESIRED_GAIN_MAX
            )
            if self._envelope == 0.0:
                self._envelope = 1.0
                logger.debug("agc_envelope_seeded", rms=round(rms, 5), desired_gain=desired)
            smoothing = AGC_RELEASE_SMOOTHING if desired < self._envelope else AGC_ATTACK_SMOOTHING
            self._envelope = self._envelope * (1.0 - smoothing) + desired * smoothing
        else:
            self._envelope = (
                self._envelope * (1.0 - AGC_SILENCE_SMOOTHING) + 1.0 * AGC_SILENCE_SMOOTHING
            )

        gain = _clamp(self._envelope, AGC_APPLIED_GAIN_MIN, AGC_APPLIED_GAIN_MAX)
        self._applied_gain = gain
        metrics.agc_gain.set(gain)
        return apply_gain(block, gain)

    def reset(self) -> None:
        """Zero the envelope so the next active block reseeds it."""
        self._envelope = 0.0
        self._applied_gain = 1.0
