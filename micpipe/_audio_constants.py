"""Centralized audio constants for micpipe.

Single source of truth for PCM format limits, stage defaults, and the
tuning constants of the AGC, VAD and drift control loops.
"""

from __future__ import annotations

# --- PCM 16-bit format ---
# Signed 16-bit integer range: [-32768, 32767]
PCM_INT16_MAX: int = 32767
PCM_INT16_MIN: int = -32768
# int16 / 32768.0 maps to [-1.0, ~0.99997].
PCM_INT16_SCALE: float = 32768.0

# --- Amplifier ---
DEFAULT_AMPLIFICATION: float = 1.0

# --- AGC ---
DEFAULT_AGC_TARGET_LEVEL: int = 32000
AGC_TARGET_RMS_MIN: float = 0.01
AGC_TARGET_RMS_MAX: float = 0.9
# Blocks at or below this RMS are treated as silence.
AGC_SILENCE_RMS: float = 0.001
AGC_RMS_EPSILON: float = 1e-6
AGC_DESIRED_GAIN_MIN: float = 0.5
AGC_DESIRED_GAIN_MAX: float = 5.0
AGC_APPLIED_GAIN_MIN: float = 0.8
AGC_APPLIED_GAIN_MAX: float = 5.0
# Envelope blend factors: slow release (gain going down), faster attack.
AGC_RELEASE_SMOOTHING: float = 0.005
AGC_ATTACK_SMOOTHING: float = 0.01
AGC_SILENCE_SMOOTHING: float = 0.001

# --- VAD ---
DEFAULT_VAD_THRESHOLD: int = 10
# Maps required confidence to an RMS energy floor.
VAD_ENERGY_CALIBRATION: float = 0.12

# --- Resampler / drift control ---
RESAMPLER_IDENTITY_TOLERANCE: float = 0.00005
DRIFT_TARGET_QUEUE_MS: float = 60.0
DRIFT_OVERRIDE_ERROR_MS: float = 100.0
DRIFT_FAST_RATIO: float = 1.10
DRIFT_SLOW_RATIO: float = 0.95
DRIFT_KP: float = 0.0002
DRIFT_KI: float = 0.000002
DRIFT_MAX_ADJUST: float = 0.10
DRIFT_INTEGRAL_LIMIT: float = 10000.0

# --- Noise reduction / dereverberation ---
DEFAULT_SAMPLE_RATE: int = 48000
DEFAULT_NOISE_STRENGTH: float = 1.0
DEFAULT_NOISE_FLOOR: float = 0.1
DEFAULT_NOISE_ADAPTATION_RATE: float = 0.05
# Blocks whose mean magnitude stays below this multiple of the profile update it.
NOISE_PROFILE_UPDATE_RATIO: float = 1.5
# Only blocks at or below this normalized RMS (about -26 dBFS) seed or update the profile.
NOISE_PROFILE_MAX_RMS: float = 0.05
DEFAULT_DEREVERB_T60_S: float = 0.5
DEFAULT_DEREVERB_FLOOR: float = 0.15
# ln(1000): a 60 dB magnitude decay as a natural-log exponent.
T60_DECAY_EXPONENT: float = 6.908
SPECTRAL_EPSILON: float = 1e-10
