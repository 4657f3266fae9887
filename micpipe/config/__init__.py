"""Configuration for micpipe: per-stage value objects and environment settings."""

from __future__ import annotations

from micpipe.config.effects import (
    AGCConfig,
    AmplifierConfig,
    DereverbConfig,
    NoiseReductionConfig,
    PipelineConfig,
    VADConfig,
)

__all__ = [
    "AGCConfig",
    "AmplifierConfig",
    "DereverbConfig",
    "NoiseReductionConfig",
    "PipelineConfig",
    "VADConfig",
]
