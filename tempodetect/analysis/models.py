"""Core data models for tempo estimation."""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

MIN_BPM = 60
MAX_BPM = 200


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +inf (2.5 -> 3, -2.5 -> -2)."""
    return int(np.floor(value + 0.5))


def in_tempo_range(bpm: float | None, min_bpm: float = MIN_BPM, max_bpm: float = MAX_BPM) -> bool:
    return bpm is not None and min_bpm <= bpm <= max_bpm


class TempoMethod(str, Enum):
    """Available estimation strategies."""
    AUTOCORRELATION = "autocorrelation"
    SPECTRAL_FLUX = "spectral-flux"
    PEAK_PICKING = "peak-picking"
    COMBINED = "combined"

    @classmethod
    def parse(cls, value: "str | TempoMethod | None") -> "TempoMethod":
        """Resolve a method name, defaulting to autocorrelation for unknown names."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.AUTOCORRELATION


@dataclass(frozen=True)
class AudioSignal:
    """Decoded mono audio handed to the estimators."""
    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        samples = np.asarray(self.samples, dtype=np.float64).ravel()
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True)
class TempoEstimate:
    """A BPM estimate and its confidence (0.0-1.0).

    ``bpm=None`` means no usable estimate and always pairs with
    ``confidence=0.0``. A BPM outside MIN_BPM..MAX_BPM raises ``ValueError``.
    """
    bpm: int | None
    confidence: float = 0.0

    def __post_init__(self):
        if self.bpm is None:
            object.__setattr__(self, "confidence", 0.0)
        else:
            bpm = int(self.bpm)
            if not in_tempo_range(bpm):
                raise ValueError(f"bpm {bpm} outside {MIN_BPM}-{MAX_BPM}")
            object.__setattr__(self, "bpm", bpm)
            object.__setattr__(self, "confidence", min(1.0, max(0.0, float(self.confidence))))

    @classmethod
    def none(cls) -> "TempoEstimate":
        return cls(bpm=None, confidence=0.0)

    @property
    def is_valid(self) -> bool:
        """True if this estimate can take part in consensus."""
        return self.bpm is not None and self.confidence > 0


@dataclass
class CorrelationSample:
    """Autocorrelation strength at one lag."""
    period: int  # samples
    value: float  # mean |x[i] * x[i+p]| / sqrt(p)
    strength: float = 0.0  # mean |x[i] * x[i+p]| relative to zero-lag energy


@dataclass
class ConsensusGroup:
    """Estimates from different methods that agree within a tolerance."""
    anchor_bpm: int
    members: list[TempoEstimate] = field(default_factory=list)

    @property
    def total_confidence(self) -> float:
        return sum(m.confidence for m in self.members)

    @property
    def mean_confidence(self) -> float:
        if not self.members:
            return 0.0
        return self.total_confidence / len(self.members)

    @property
    def weighted_bpm(self) -> int | None:
        """Confidence-weighted mean BPM, rounded half up."""
        total = self.total_confidence
        if total <= 0:
            return None
        weighted = sum(m.bpm * m.confidence for m in self.members) / total
        return round_half_up(weighted)
