"""Training loop, configuration and sample handling."""

from .configs import Criterion, LearningRate, LogConfig, MentorConfig, Scheduling, StopReason
from .deviation import Deviation
from .mentor import Mentor, MentorState, TrainingResult
from .samples import Sample, SampleCollection, SampleScheduler

__all__ = [
    "Criterion",
    "Deviation",
    "LearningRate",
    "LogConfig",
    "Mentor",
    "MentorConfig",
    "MentorState",
    "Sample",
    "SampleCollection",
    "SampleScheduler",
    "Scheduling",
    "StopReason",
    "TrainingResult",
]
