"""Linear gain stage."""

from __future__ import annotations

from typing import TYPE_CHECKING

from micpipe.config.effects import AmplifierConfig
from micpipe.effects.blocks import apply_gain
from micpipe.effects.interface import AudioEffect

if TYPE_CHECKING:
    import numpy as np


class AmplifierEffect(AudioEffect):
    """Multiply every sample by a fixed gain, saturating to int16.

    A gain of exactly 1.0 returns the input block untouched (no copy,
    no iteration). Stateless, so reset() and release() are no-ops.
    """

    def __init__(self, config: AmplifierConfig | None = None) -> None:
        self._config = config if config is not None else AmplifierConfig()

    @property
    def name(self) -> str:
        return "amplifier"

    @property
    def config(self) -> AmplifierConfig:
        return self._config

    def configure(self, config: AmplifierConfig) -> None:
        self._config = config

    def process(self, block: np.ndarray, channel_count: int) -> np.ndarray:
        gain = self._config.amplification
        if gain == 1.0:
            return block
        return apply_gain(block, gain)
