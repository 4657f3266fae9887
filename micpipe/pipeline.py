"""Audio conditioning pipeline.

Owns one instance of every stage and applies them in a fixed order:

    noise reduction -> dereverb -> AGC -> VAD -> amplifier -> resampler

Level-dependent stages (AGC, VAD) see the denoised signal, gated silence
is never amplified, and the resampler, the only stage that changes the
block length, runs last on the final leveled signal.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from micpipe import metrics
from micpipe.config.effects import PipelineConfig
from micpipe.effects.agc import AGCEffect
from micpipe.effects.amplifier import AmplifierEffect
from micpipe.effects.blocks import as_block
from micpipe.effects.dereverb import DereverbEffect
from micpipe.effects.noise_reduction import NoiseReductionEffect
from micpipe.effects.resampler import DriftController, ResamplerEffect
from micpipe.effects.vad import VADEffect
from micpipe.exceptions import EffectFanOutError, OwnershipError, PipelineClosedError
from micpipe.logging import get_logger

if TYPE_CHECKING:
    import numpy as np

    from micpipe.config.settings import MicpipeSettings
    from micpipe.effects.interface import AudioEffect

logger = get_logger("pipeline")


class OwnerGuard:
    """Binds an object to the first thread that uses it.

    Later calls from any other thread raise OwnershipError instead of
    racing on unlocked state. Binding happens under a lock, so two threads
    calling ``check()`` at once cannot both become the owner.
    ``release_ownership()`` unbinds, so a pipeline can be handed to a new
    audio thread between sessions.
    """

    __slots__ = ("_lock", "_owner")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner: threading.Thread | None = None

    @property
    def owner(self) -> threading.Thread | None:
        return self._owner

    def check(self, operation: str) -> None:
        current = threading.current_thread()
        if self._owner is current:
            return
        with self._lock:
            if self._owner is None:
                self._owner = current
                return
            owner = self._owner
        if owner is not current:
            raise OwnershipError(operation, owner.name, current.name)

    def release_ownership(self) -> None:
        with self._lock:
            self._owner = None


class AudioProcessorPipeline:
    """Fixed-order conditioning pipeline for interleaved int16 blocks.

    Single-owner: process(), reset() and configure() must come from one
    thread (enforced by OwnerGuard). update_playback_ratio() may be called
    from the transport thread. release() may be called from any thread,
    typically at teardown after the audio thread has stopped or under the
    caller's own lock.

    Args:
        config: Per-stage configuration. Defaults to all stages disabled
            and unity gain.
        drift: Drift controller for the resampler. A fresh one if None.
        noise_reducer: Replacement noise-reduction stage (any AudioEffect).
        dereverb: Replacement dereverberation stage (any AudioEffect).
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        drift: DriftController | None = None,
        noise_reducer: AudioEffect | None = None,
        dereverb: AudioEffect | None = None,
    ) -> None:
        config = config if config is not None else PipelineConfig()
        self.noise_reducer: AudioEffect = (
            noise_reducer
            if noise_reducer is not None
            else NoiseReductionEffect(config.noise_reduction)
        )
        self.dereverb: AudioEffect = (
            dereverb if dereverb is not None else DereverbEffect(config.dereverb)
        )
        self.agc = AGCEffect(config.agc)
        self.vad = VADEffect(config.vad)
        self.amplifier = AmplifierEffect(config.amplifier)
        self.resampler = ResamplerEffect(drift)
        self._effects: tuple[AudioEffect, ...] = (
            self.noise_reducer,
            self.dereverb,
            self.agc,
            self.vad,
            self.amplifier,
            self.resampler,
        )
        self._config = config
        self._guard = OwnerGuard()
        self._release_lock = threading.Lock()
        self._released = False
        logger.info("pipeline_created", stages=[effect.name for effect in self._effects])

    @classmethod
    def from_settings(cls, settings: MicpipeSettings) -> AudioProcessorPipeline:
        """Build a pipeline from ``MICPIPE_*`` environment settings."""
        return cls(
            settings.to_pipeline_config(),
            drift=DriftController(target_queue_ms=settings.drift.target_queue_ms),
        )

    @property
    def effects(self) -> tuple[AudioEffect, ...]:
        """Stages in processing order."""
        return self._effects

    @property
    def config(self) -> PipelineConfig:
        return self._config

    @property
    def released(self) -> bool:
        return self._released

    @property
    def playback_ratio(self) -> float:
        return self.resampler.playback_ratio

    def configure(self, config: PipelineConfig) -> None:
        """Swap every stage's configuration value object.

        Replacement noise-reduction/dereverb stages without a
        ``configure`` method keep their own configuration.
        """
        self._guard.check("configure")
        for stage, stage_config in (
            (self.noise_reducer, config.noise_reduction),
            (self.dereverb, config.dereverb),
        ):
            configure = getattr(stage, "configure", None)
            if configure is not None:
                configure(stage_config)
        self.agc.configure(config.agc)
        self.vad.configure(config.vad)
        self.amplifier.configure(config.amplifier)
        self._config = config
        logger.info("pipeline_configured", config=config.model_dump())

    def process(self, block: Any, channel_count: int) -> np.ndarray:
        """Run one block through all six stages.

        Args:
            block: Interleaved samples (int16 ndarray, or any array-like
                that will be saturated into int16).
            channel_count: Number of interleaved channels.

        Returns:
            Processed int16 block. It may be a different object and length
            than the input; always continue with the returned value.

        Raises:
            PipelineClosedError: If called after release().
            OwnershipError: If called from a thread other than the owner.
        """
        if self._released:
            raise PipelineClosedError("process")
        self._guard.check("process")

        current = as_block(block)
        for effect in self._effects:
            current = effect.process(current, channel_count)
        return current

    def update_playback_ratio(self, queued_ms: float) -> float:
        """Report downstream queue depth; returns the new playback ratio."""
        return self.resampler.update_playback_ratio(queued_ms)

    def reset(self) -> None:
        """Reset every stage, in order, even if some of them fail.

        Raises:
            EffectFanOutError: After all stages were visited, if any failed.
        """
        self._guard.check("reset")
        self._fan_out("reset")
        logger.info("pipeline_reset")

    def release(self) -> None:
        """Release every stage. Terminal; further calls are no-ops.

        Not bound to the owner thread. The caller must still keep it from
        overlapping a process() call, either by stopping the audio thread
        first or by holding the lock that serializes process().

        Raises:
            EffectFanOutError: After all stages were visited, if any failed.
        """
        with self._release_lock:
            if self._released:
                return
            self._released = True
        try:
            self._fan_out("release")
        finally:
            self._guard.release_ownership()
            logger.info("pipeline_released")

    def _fan_out(self, operation: str) -> None:
        failures: list[tuple[str, BaseException]] = []
        for effect in self._effects:
            try:
                getattr(effect, operation)()
            except Exception as exc:
                logger.error(
                    "stage_fan_out_failed",
                    stage=effect.name,
                    operation=operation,
                    exc_info=True,
                )
                metrics.stage_failures_total.labels(stage=effect.name, operation=operation).inc()
                failures.append((effect.name, exc))
        if failures:
            raise EffectFanOutError(operation, failures)
