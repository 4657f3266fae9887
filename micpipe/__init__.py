"""micpipe: real-time microphone conditioning pipeline.

Turns raw captured PCM int16 blocks into a cleaned, leveled,
drift-corrected stream before they reach a downstream sink.
"""

from __future__ import annotations

__version__ = "0.1.0"

from micpipe.effects.interface import AudioEffect  # noqa: E402
from micpipe.pipeline import AudioProcessorPipeline  # noqa: E402

__all__ = ["AudioEffect", "AudioProcessorPipeline", "__version__"]
