"""Prometheus metrics for the conditioning pipeline.

Defined metrics:
- micpipe_playback_ratio: Current resampling ratio from the drift controller
- micpipe_drift_integral: PI controller integral accumulator
- micpipe_drift_updates_total: Drift controller updates by mode (pi, fast, slow)
- micpipe_gated_blocks_total: Blocks silenced by the voice-activity gate
- micpipe_agc_gain: Gain applied by the AGC to the last block
- micpipe_stage_failures_total: Stage failures during reset/release fan-out
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

playback_ratio = Gauge(
    "micpipe_playback_ratio",
    "Current resampling ratio derived from downstream queue depth",
)

drift_integral = Gauge(
    "micpipe_drift_integral",
    "Integral accumulator of the drift PI controller (queue-ms)",
)

drift_updates_total = Counter(
    "micpipe_drift_updates_total",
    "Drift controller updates by mode",
    ["mode"],
)

gated_blocks_total = Counter(
    "micpipe_gated_blocks_total",
    "Blocks zeroed by the voice-activity gate",
)

agc_gain = Gauge(
    "micpipe_agc_gain",
    "Gain applied by the AGC to the last processed block",
)

stage_failures_total = Counter(
    "micpipe_stage_failures_total",
    "Stage failures while fanning out reset/release",
    ["stage", "operation"],
)
