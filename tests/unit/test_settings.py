"""Tests for micpipe.config.settings: MICPIPE_* environment settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from micpipe.config.effects import PipelineConfig
from micpipe.config.settings import (
    AGCSettings,
    AmplifierSettings,
    DereverbSettings,
    DriftSettings,
    MicpipeSettings,
    NoiseReductionSettings,
    VADSettings,
    get_settings,
)


class TestSettingsDefaults:
    """Defaults match the stage defaults in _audio_constants."""

    def test_amplifier(self) -> None:
        assert AmplifierSettings().amplification == 1.0

    def test_agc(self) -> None:
        s = AGCSettings()
        assert s.enabled is False
        assert s.target_level == 32000

    def test_vad(self) -> None:
        s = VADSettings()
        assert s.enabled is False
        assert s.threshold == 10

    def test_noise_reduction(self) -> None:
        s = NoiseReductionSettings()
        assert s.enabled is False
        assert s.strength == 1.0
        assert s.floor == 0.1

    def test_dereverb(self) -> None:
        s = DereverbSettings()
        assert s.enabled is False
        assert s.sample_rate == 48000
        assert s.t60_s == 0.5

    def test_drift(self) -> None:
        assert DriftSettings().target_queue_ms == 60.0

    def test_default_pipeline_config_matches_config_defaults(self) -> None:
        assert MicpipeSettings().to_pipeline_config() == PipelineConfig()


class TestSettingsEnvironment:
    def test_agc_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MICPIPE_AGC_ENABLED", "1")
        monkeypatch.setenv("MICPIPE_AGC_TARGET_LEVEL", "24000")
        s = AGCSettings()
        assert s.enabled is True
        assert s.target_level == 24000

    def test_vad_threshold_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MICPIPE_VAD_THRESHOLD", "35")
        assert VADSettings().threshold == 35

    def test_vad_threshold_out_of_range(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MICPIPE_VAD_THRESHOLD", "150")
        with pytest.raises(ValidationError):
            VADSettings()

    def test_negative_amplification_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MICPIPE_AMPLIFICATION", "-2")
        with pytest.raises(ValidationError):
            AmplifierSettings()

    def test_sample_rate_shared_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MICPIPE_SAMPLE_RATE", "16000")
        assert DereverbSettings().sample_rate == 16000

    def test_to_pipeline_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MICPIPE_VAD_ENABLED", "true")
        monkeypatch.setenv("MICPIPE_VAD_THRESHOLD", "40")
        monkeypatch.setenv("MICPIPE_NOISE_REDUCTION_ENABLED", "true")
        monkeypatch.setenv("MICPIPE_NOISE_REDUCTION_STRENGTH", "1.5")
        config = MicpipeSettings().to_pipeline_config()
        assert config.vad.enabled is True
        assert config.vad.threshold == 40
        assert config.noise_reduction.enabled is True
        assert config.noise_reduction.strength == 1.5
        assert config.agc.enabled is False


class TestGetSettings:
    def test_cached_singleton(self) -> None:
        assert get_settings() is get_settings()

    def test_cache_clear_rereads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("MICPIPE_AMPLIFICATION", "3.0")
        get_settings.cache_clear()
        second = get_settings()
        assert second is not first
        assert second.amplifier.amplification == 3.0
