"""Conditioning pipeline effects.

Provides the AudioEffect ABC and the concrete stages, in pipeline order:
NoiseReductionEffect, DereverbEffect, AGCEffect, VADEffect,
AmplifierEffect, ResamplerEffect (with its DriftController).
"""

from __future__ import annotations

from micpipe.effects.agc import AGCEffect
from micpipe.effects.amplifier import AmplifierEffect
from micpipe.effects.dereverb import DereverbEffect
from micpipe.effects.interface import AudioEffect
from micpipe.effects.noise_reduction import NoiseReductionEffect
from micpipe.effects.resampler import DriftController, ResamplerEffect
from micpipe.effects.vad import VADEffect

__all__ = [
    "AGCEffect",
    "AmplifierEffect",
    "AudioEffect",
    "DereverbEffect",
    "DriftController",
    "NoiseReductionEffect",
    "ResamplerEffect",
    "VADEffect",
]
