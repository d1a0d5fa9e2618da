"""Audio-reactive generative background with a timed verse overlay."""

from versescope.core.features import AudioFeatureExtractor, FeatureVector
from versescope.core.scheduler import PresetScheduler
from versescope.core.verse import VerseRecord, VerseTimingStateMachine
from versescope.config import InstallationConfig
from versescope.installation import Installation

__version__ = "0.1.0"
__all__ = [
    "AudioFeatureExtractor",
    "FeatureVector",
    "PresetScheduler",
    "VerseRecord",
    "VerseTimingStateMachine",
    "InstallationConfig",
    "Installation",
]
