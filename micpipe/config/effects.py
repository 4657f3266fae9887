"""Per-stage configuration value objects.

Each stage holds one immutable config object. Changing a setting means
building a new object and handing it to ``stage.configure()``, so a
stage never observes a half-updated configuration. Defaults come from
``_audio_constants`` (single source of truth shared with
``micpipe.config.settings``).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

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
)


class AmplifierConfig(BaseModel):
    """Linear gain stage configuration."""

    model_config = ConfigDict(frozen=True)

    amplification: float = Field(default=DEFAULT_AMPLIFICATION, ge=0.0)


class AGCConfig(BaseModel):
    """Automatic gain control configuration.

    ``target_level`` is in absolute sample units; values <= 0 disable the
    stage just like ``enabled=False``.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    target_level: int = DEFAULT_AGC_TARGET_LEVEL


class VADConfig(BaseModel):
    """Voice-activity gate configuration.

    ``threshold`` is a sensitivity in 0-100. Higher is more permissive:
    100 lets everything through, 0 requires full confidence.
    Out-of-range values are clamped by the stage.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    threshold: int = DEFAULT_VAD_THRESHOLD


class NoiseReductionConfig(BaseModel):
    """Spectral-subtraction noise reduction configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    strength: float = Field(default=DEFAULT_NOISE_STRENGTH, ge=0.0, le=4.0)
    floor: float = Field(default=DEFAULT_NOISE_FLOOR, ge=0.0, le=1.0)
    adaptation_rate: float = Field(default=DEFAULT_NOISE_ADAPTATION_RATE, gt=0.0, le=1.0)


class DereverbConfig(BaseModel):
    """Late-reverberation suppression configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    sample_rate: int = Field(default=DEFAULT_SAMPLE_RATE, ge=8000, le=384000)
    t60_s: float = Field(default=DEFAULT_DEREVERB_T60_S, gt=0.0, le=10.0)
    floor: float = Field(default=DEFAULT_DEREVERB_FLOOR, ge=0.0, le=1.0)


class PipelineConfig(BaseModel):
    """Configuration for every configurable stage of the pipeline."""

    model_config = ConfigDict(frozen=True)

    noise_reduction: NoiseReductionConfig = Field(default_factory=NoiseReductionConfig)
    dereverb: DereverbConfig = Field(default_factory=DereverbConfig)
    agc: AGCConfig = Field(default_factory=AGCConfig)
    vad: VADConfig = Field(default_factory=VADConfig)
    amplifier: AmplifierConfig = Field(default_factory=AmplifierConfig)
