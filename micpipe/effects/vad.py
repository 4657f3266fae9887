"""Voice-activity gate.

Hard gate: blocks judged as non-speech are zeroed, with no fade. The
decision uses an externally supplied speech probability when one is
available and falls back to block energy otherwise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from micpipe import metrics
from micpipe._audio_constants import VAD_ENERGY_CALIBRATION
from micpipe._types import GateDecision
from micpipe.config.effects import VADConfig
from micpipe.effects.blocks import block_rms
from micpipe.effects.interface import AudioEffect
from micpipe.logging import get_logger

if TYPE_CHECKING:
    import numpy as np

logger = get_logger("effects.vad")


class VADEffect(AudioEffect):
    """Energy/probability-driven voice-activity gate.

    sensitivity = clamp(threshold, 0, 100) / 100 and the confidence a
    block needs is 1 - sensitivity. With a probability hint, the block is
    speech when hint >= required confidence; without one, when its RMS is
    at least required confidence * 0.12.

    Args:
        config: Gate configuration. Defaults to disabled, threshold 10.
    """

    def __init__(self, config: VADConfig | None = None) -> None:
        self._config = config if config is not None else VADConfig()
        self._speech_probability: float | None = None
        self._last_decision = GateDecision.UNKNOWN

    @property
    def name(self) -> str:
        return "vad"

    @property
    def config(self) -> VADConfig:
        return self._config

    def configure(self, config: VADConfig) -> None:
        self._config = config

    @property
    def speech_probability(self) -> float | None:
        return self._speech_probability

    def set_speech_probability(self, probability: float | None) -> None:
        """Supply (or clear, with None) an external speech-probability hint."""
        self._speech_probability = probability

    @property
    def last_decision(self) -> GateDecision:
        """Decision taken for the last block processed while enabled."""
        return self._last_decision

    def required_confidence(self) -> float:
        sensitivity = max(0, min(100, self._config.threshold)) / 100.0
        return 1.0 - sensitivity

    def is_speech(self, block: np.ndarray) -> bool:
        required = self.required_confidence()
        if self._speech_probability is not None:
            return self._speech_probability >= required
        return block_rms(block) >= required * VAD_ENERGY_CALIBRATION

    def process(self, block: np.ndarray, channel_count: int) -> np.ndarray:
        if not self._config.enabled:
            return block

        decision = GateDecision.SPEECH if self.is_speech(block) else GateDecision.SILENCE
        if decision is not self._last_decision:
            logger.debug("vad_gate_changed", decision=decision.value)
        self._last_decision = decision

        if decision is GateDecision.SILENCE:
            block[:] = 0
            metrics.gated_blocks_total.inc()
        return block

    def reset(self) -> None:
        """Clear the probability hint and the last decision."""
        self._speech_probability = None
        self._last_decision = GateDecision.UNKNOWN
