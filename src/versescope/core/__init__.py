"""Core signal and timing modules."""

from versescope.core.features import AudioFeatureExtractor, FeatureVector
from versescope.core.palette import Palette
from versescope.core.scheduler import PresetScheduler
from versescope.core.verse import VerseTimingStateMachine

__all__ = ["AudioFeatureExtractor", "FeatureVector", "Palette", "PresetScheduler", "VerseTimingStateMachine"]
