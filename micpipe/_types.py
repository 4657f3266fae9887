"""Core types for micpipe.

Enums and frozen dataclasses shared by the effects, the pipeline,
metrics and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class GateDecision(Enum):
    """Outcome of the voice-activity gate for the last processed block."""

    UNKNOWN = "unknown"  # disabled, or no block seen since reset
    SPEECH = "speech"
    SILENCE = "silence"


class DriftMode(Enum):
    """How the drift controller produced the current playback ratio.

    - PI: steady-state proportional-integral control
    - FAST: queue far above target, hard override to speed up consumption
    - SLOW: queue far below target, hard override to slow consumption
    """

    PI = "pi"
    FAST = "fast"
    SLOW = "slow"


@dataclass(frozen=True, slots=True)
class DriftUpdate:
    """Result of one drift controller update."""

    mode: DriftMode
    queued_ms: float
    error_ms: float
    ratio: float
    integral: float
