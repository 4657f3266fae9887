"""Base interface for conditioning pipeline effects."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np


class AudioEffect(ABC):
    """Individual stage of the conditioning pipeline.

    Each effect receives an interleaved int16 block and the channel count,
    and returns the processed block. The returned array may be the input
    mutated in place or a new array of a different length, so callers must
    always continue with the returned value.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier name for the effect (e.g. 'agc', 'resampler')."""
        ...

    @abstractmethod
    def process(self, block: np.ndarray, channel_count: int) -> np.ndarray:
        """Process one audio block.

        Args:
            block: 1-D int16 array of interleaved samples.
            channel_count: Number of interleaved channels.

        Returns:
            Processed int16 block.
        """
        ...

    def reset(self) -> None:  # noqa: B027
        """Clear transient state (history, envelopes, phase).

        Safe to call at any time and idempotent. Default is a no-op.
        """

    def release(self) -> None:
        """Free held resources. Terminal; safe to call more than once.

        Default delegates to reset().
        """
        self.reset()
