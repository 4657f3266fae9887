"""Drift-compensating resampler.

Capture and consumption clocks never run at exactly the same rate, so a
downstream send/playback queue slowly fills up or drains. The
DriftController turns the observed queue depth into a playback ratio
with a PI controller; the ResamplerEffect applies that ratio by linear
interpolation, carrying its phase and the previous block's last frame
across calls so block boundaries stay continuous.

Ratio > 1 consumes input faster (fewer output frames), ratio < 1
stretches it (more output frames).
"""

from __future__ import annotations

import math
import threading

import numpy as np

from micpipe import metrics
from micpipe._audio_constants import (
    DRIFT_FAST_RATIO,
    DRIFT_INTEGRAL_LIMIT,
    DRIFT_KI,
    DRIFT_KP,
    DRIFT_MAX_ADJUST,
    DRIFT_OVERRIDE_ERROR_MS,
    DRIFT_SLOW_RATIO,
    DRIFT_TARGET_QUEUE_MS,
    PCM_INT16_MAX,
    PCM_INT16_MIN,
    RESAMPLER_IDENTITY_TOLERANCE,
)
from micpipe._types import DriftMode, DriftUpdate
from micpipe.effects.blocks import ScratchBuffer, frame_count
from micpipe.effects.interface import AudioEffect
from micpipe.logging import get_logger

logger = get_logger("effects.resampler")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class DriftController:
    """PI controller deriving the playback ratio from downstream queue depth.

    error = queued_ms - target_queue_ms. Errors beyond +/-100 ms switch to
    fixed override ratios (1.10 to drain, 0.95 to refill) without touching
    the integral. Inside the band:

        integral   = clamp(integral + error, -10000, 10000)
        adjustment = clamp(error * kP + integral * kI, -0.10, 0.10)
        ratio      = clamp(1.0 + adjustment, 0.9, 1.1)

    Updates are serialized with a lock so the transport layer may report
    queue depth from its own thread; readers get the ratio as a single
    float.

    Args:
        target_queue_ms: Queue depth the controller steers toward.
    """

    def __init__(self, target_queue_ms: float = DRIFT_TARGET_QUEUE_MS) -> None:
        self._target_queue_ms = target_queue_ms
        self._lock = threading.Lock()
        self._ratio = 1.0
        self._integral = 0.0
        self._last_update: DriftUpdate | None = None

    @property
    def target_queue_ms(self) -> float:
        return self._target_queue_ms

    @property
    def ratio(self) -> float:
        return self._ratio

    @property
    def integral(self) -> float:
        return self._integral

    @property
    def last_update(self) -> DriftUpdate | None:
        return self._last_update

    def update_playback_ratio(self, queued_ms: float) -> float:
        """Feed one queue-depth observation and return the new ratio."""
        with self._lock:
            error = float(queued_ms) - self._target_queue_ms

            if error > DRIFT_OVERRIDE_ERROR_MS:
                mode = DriftMode.FAST
                ratio = DRIFT_FAST_RATIO
            elif error < -DRIFT_OVERRIDE_ERROR_MS:
                mode = DriftMode.SLOW
                ratio = DRIFT_SLOW_RATIO
            else:
                mode = DriftMode.PI
                self._integral = _clamp(
                    self._integral + error, -DRIFT_INTEGRAL_LIMIT, DRIFT_INTEGRAL_LIMIT
                )
                adjustment = _clamp(
                    error * DRIFT_KP + self._integral * DRIFT_KI,
                    -DRIFT_MAX_ADJUST,
                    DRIFT_MAX_ADJUST,
                )
                ratio = _clamp(1.0 + adjustment, 1.0 - DRIFT_MAX_ADJUST, 1.0 + DRIFT_MAX_ADJUST)

            previous = self._last_update
            self._ratio = ratio
            update = DriftUpdate(
                mode=mode,
                queued_ms=float(queued_ms),
                error_ms=error,
                ratio=ratio,
                integral=self._integral,
            )
            self._last_update = update

        if previous is None or previous.mode is not mode:
            logger.info(
                "drift_mode_changed",
                mode=mode.value,
                queued_ms=queued_ms,
                ratio=ratio,
            )
        metrics.drift_updates_total.labels(mode=mode.value).inc()
        metrics.playback_ratio.set(ratio)
        metrics.drift_integral.set(update.integral)
        return ratio

    def force_ratio(self, ratio: float) -> None:
        """Pin the ratio to a fixed value until the next update or reset.

        Used when the clock ratio is known up front rather than observed.
        """
        if ratio <= 0.0 or not math.isfinite(ratio):
            msg = f"ratio must be a positive finite number, got {ratio!r}"
            raise ValueError(msg)
        with self._lock:
            self._ratio = float(ratio)
        metrics.playback_ratio.set(ratio)

    def reset(self) -> None:
        """Clear the integral and return the ratio to 1.0."""
        with self._lock:
            self._ratio = 1.0
            self._integral = 0.0
            self._last_update = None
        metrics.playback_ratio.set(1.0)
        metrics.drift_integral.set(0.0)


class ResamplerEffect(AudioEffect):
    """Linear-interpolation resampler driven by a DriftController.

    The previous block's last frame acts as a virtual frame 0 preceding
    the current block, so interpolation runs across block boundaries.
    The fractional read position left over at the end of a block carries
    into the next one. Output and virtual-frame scratch buffers only grow
    (geometrically), so steady-state calls do not reallocate them.

    Args:
        drift: Controller supplying the ratio. A fresh one is created if None.
    """

    def __init__(self, drift: DriftController | None = None) -> None:
        self._drift = drift if drift is not None else DriftController()
        self._phase = 0.0
        self._prev_frame: np.ndarray | None = None
        self._output = ScratchBuffer()
        self._virtual = ScratchBuffer()

    @property
    def name(self) -> str:
        return "resampler"

    @property
    def drift(self) -> DriftController:
        return self._drift

    @property
    def playback_ratio(self) -> float:
        return self._drift.ratio

    @playback_ratio.setter
    def playback_ratio(self, ratio: float) -> None:
        self._drift.force_ratio(ratio)

    @property
    def phase(self) -> float:
        """Fractional read position carried into the next block, in frames."""
        return self._phase

    @property
    def output_capacity(self) -> int:
        return self._output.capacity

    def update_playback_ratio(self, queued_ms: float) -> float:
        return self._drift.update_playback_ratio(queued_ms)

    def process(self, block: np.ndarray, channel_count: int) -> np.ndarray:
        ratio = self._drift.ratio
        if abs(ratio - 1.0) < RESAMPLER_IDENTITY_TOLERANCE:
            return block
        if channel_count <= 0:
            return np.zeros(0, dtype=np.int16)

        n_frames = frame_count(block, channel_count)
        if n_frames <= 1:
            # Not enough frames to interpolate.
            return block.copy()

        if self._prev_frame is None or len(self._prev_frame) != channel_count:
            self._prev_frame = block[:channel_count].copy()
            self._phase = 1.0

        n_samples = n_frames * channel_count
        virtual = self._virtual.reserve(n_samples + channel_count)
        virtual[:channel_count] = self._prev_frame
        virtual[channel_count : n_samples + channel_count] = block[:n_samples]
        frames = virtual[: n_samples + channel_count].reshape(n_frames + 1, channel_count)

        positions = self._read_positions(self._phase, ratio, n_frames)
        # The first position at or past n_frames is where the next block resumes.
        count = int(np.searchsorted(positions, n_frames, side="left"))
        next_pos = float(positions[count])
        positions = positions[:count]

        base = positions.astype(np.int64)
        frac = (positions - base)[:, np.newaxis]
        s0 = frames[base].astype(np.float64)
        s1 = frames[base + 1].astype(np.float64)
        values = s0 + (s1 - s0) * frac
        np.clip(values, PCM_INT16_MIN, PCM_INT16_MAX, out=values)

        out_samples = count * channel_count
        out = self._output.reserve(out_samples)
        out[:out_samples] = values.reshape(-1).astype(np.int16)

        self._prev_frame[:] = block[n_samples - channel_count : n_samples]
        self._phase = next_pos - n_frames

        return out[:out_samples].copy()

    @staticmethod
    def _read_positions(start: float, ratio: float, n_frames: int) -> np.ndarray:
        """Read positions start, start + ratio, ... accumulated one step at a time.

        A position p is usable while floor(p) + 1 <= n_frames, i.e. p < n_frames.
        The array always extends past the last usable position, so the first
        unusable one (the carried phase plus n_frames) is included.
        """
        # Slack covers rounding in the estimate; np.cumsum adds strictly left to right.
        steps = max(math.ceil((n_frames - start) / ratio), 0) + 3
        increments = np.full(steps, ratio, dtype=np.float64)
        increments[0] = start
        return np.cumsum(increments)

    def reset(self) -> None:
        """Clear phase, the previous-frame cache and the drift controller."""
        self._phase = 0.0
        self._prev_frame = None
        self._drift.reset()
