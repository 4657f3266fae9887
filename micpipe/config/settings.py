"""Centralized configuration via pydantic-settings.

All ``MICPIPE_*`` environment variables are read, validated, and exposed here.
Logging env vars (``MICPIPE_LOG_FORMAT``, ``MICPIPE_LOG_LEVEL``) are intentionally
excluded; they stay in ``micpipe.logging`` for bootstrap-safety.

Usage::

    from micpipe.config.settings import get_settings

    settings = get_settings()
    print(settings.agc.target_level)   # int, validated
    pipeline_config = settings.to_pipeline_config()

``.env`` files in the working directory are loaded automatically.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from micpipe._audio_constants import (
    DEFAULT_AGC_TARGET_LEVEL,
    DEFAULT_AMPLIFICATION,
    DEFAULT_DEREVERB_FLOOR,
    DEFAULT_DEREVERB_T60_S,
    DEFAULT_NOISE_ADAPTATION_RATE,
    DEFAULT_NOISE_FLOOR,
    DEFAULT_NOISE_STRENGTH,
    DEFAULT_SAMPLE_RATE,
    DEFAULT_VAD_THRESHOLD,
    DRIFT_TARGET_QUEUE_MS,
)
from micpipe.config.effects import (
    AGCConfig,
    AmplifierConfig,
    DereverbConfig,
    NoiseReductionConfig,
    PipelineConfig,
    VADConfig,
)


class AmplifierSettings(BaseSettings):
    """Linear output gain."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    amplification: float = Field(
        default=DEFAULT_AMPLIFICATION, ge=0.0, le=100.0, validation_alias="MICPIPE_AMPLIFICATION"
    )


class AGCSettings(BaseSettings):
    """Automatic gain control."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    enabled: bool = Field(default=False, validation_alias="MICPIPE_AGC_ENABLED")
    target_level: int = Field(
        default=DEFAULT_AGC_TARGET_LEVEL,
        ge=0,
        le=32768,
        validation_alias="MICPIPE_AGC_TARGET_LEVEL",
    )


class VADSettings(BaseSettings):
    """Voice-activity gate."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    enabled: bool = Field(default=False, validation_alias="MICPIPE_VAD_ENABLED")
    threshold: int = Field(
        default=DEFAULT_VAD_THRESHOLD, ge=0, le=100, validation_alias="MICPIPE_VAD_THRESHOLD"
    )


class NoiseReductionSettings(BaseSettings):
    """Spectral-subtraction noise reduction."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    enabled: bool = Field(default=False, validation_alias="MICPIPE_NOISE_REDUCTION_ENABLED")
    strength: float = Field(
        default=DEFAULT_NOISE_STRENGTH,
        ge=0.0,
        le=4.0,
        validation_alias="MICPIPE_NOISE_REDUCTION_STRENGTH",
    )
    floor: float = Field(
        default=DEFAULT_NOISE_FLOOR,
        ge=0.0,
        le=1.0,
        validation_alias="MICPIPE_NOISE_REDUCTION_FLOOR",
    )
    adaptation_rate: float = Field(
        default=DEFAULT_NOISE_ADAPTATION_RATE,
        gt=0.0,
        le=1.0,
        validation_alias="MICPIPE_NOISE_REDUCTION_ADAPTATION_RATE",
    )


class DereverbSettings(BaseSettings):
    """Late-reverberation suppression."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    enabled: bool = Field(default=False, validation_alias="MICPIPE_DEREVERB_ENABLED")
    sample_rate: int = Field(
        default=DEFAULT_SAMPLE_RATE,
        ge=8000,
        le=384000,
        validation_alias="MICPIPE_SAMPLE_RATE",
    )
    t60_s: float = Field(
        default=DEFAULT_DEREVERB_T60_S, gt=0.0, le=10.0, validation_alias="MICPIPE_DEREVERB_T60_S"
    )
    floor: float = Field(
        default=DEFAULT_DEREVERB_FLOOR, ge=0.0, le=1.0, validation_alias="MICPIPE_DEREVERB_FLOOR"
    )


class DriftSettings(BaseSettings):
    """Drift controller tuning."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    target_queue_ms: float = Field(
        default=DRIFT_TARGET_QUEUE_MS,
        gt=0.0,
        le=2000.0,
        validation_alias="MICPIPE_DRIFT_TARGET_QUEUE_MS",
    )


class MicpipeSettings(BaseSettings):
    """Root settings: aggregates all stage settings.

    Loads ``.env`` from the current directory when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    amplifier: AmplifierSettings = Field(default_factory=AmplifierSettings)
    agc: AGCSettings = Field(default_factory=AGCSettings)
    vad: VADSettings = Field(default_factory=VADSettings)
    noise_reduction: NoiseReductionSettings = Field(default_factory=NoiseReductionSettings)
    dereverb: DereverbSettings = Field(default_factory=DereverbSettings)
    drift: DriftSettings = Field(default_factory=DriftSettings)

    def to_pipeline_config(self) -> PipelineConfig:
        """Build the per-stage config value objects from these settings."""
        return PipelineConfig(
            noise_reduction=NoiseReductionConfig(
                enabled=self.noise_reduction.enabled,
                strength=self.noise_reduction.strength,
                floor=self.noise_reduction.floor,
                adaptation_rate=self.noise_reduction.adaptation_rate,
            ),
            dereverb=DereverbConfig(
                enabled=self.dereverb.enabled,
                sample_rate=self.dereverb.sample_rate,
                t60_s=self.dereverb.t60_s,
                floor=self.dereverb.floor,
            ),
            agc=AGCConfig(enabled=self.agc.enabled, target_level=self.agc.target_level),
            vad=VADConfig(enabled=self.vad.enabled, threshold=self.vad.threshold),
            amplifier=AmplifierConfig(amplification=self.amplifier.amplification),
        )


@lru_cache(maxsize=1)
def get_settings() -> MicpipeSettings:
    """Return the singleton ``MicpipeSettings`` instance.

    The result is cached: subsequent calls return the same object.
    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    return MicpipeSettings()
