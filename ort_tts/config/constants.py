"""Synthesis Constants - Authoritative thresholds and contracts.

These constants define the input limits, tensor contracts and audio
formats every component must honor.
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Constants:
    """Immutable synthesis contract thresholds."""

    # Text input
    MAX_TEXT_CHARS: Final[int] = 1000

    # Tensor contract
    MAX_TOKENS: Final[int] = 512
    MAX_TOKEN_ID: Final[int] = 100_000
    STYLE_DIM: Final[int] = 256
    MAX_SPEED: Final[float] = 3.0

    # Post-processing
    MODIFICATION_EPSILON: Final[float] = 0.01  # Smaller changes are ignored

    # Output format (mono, 16-bit PCM)
    NATIVE_SAMPLE_RATE: Final[int] = 24000
    FALLBACK_SAMPLE_RATE: Final[int] = 22050
    WAV_SUBTYPE: Final[str] = "PCM_16"

    # Model loading
    NETWORK_LOAD_TIMEOUT_S: Final[float] = 60.0


# Singleton instance for import convenience
TTS = Constants()

# Conventional waveform output names, in lookup order
OUTPUT_NAME_PRIORITY: Final[tuple[str, ...]] = (
    "audio",
    "output",
    "waveform",
    "mel",
    "logits",
)

# Progress milestones emitted while fetching model assets
PROGRESS_START: Final[float] = 0.0
PROGRESS_DONE: Final[float] = 100.0
