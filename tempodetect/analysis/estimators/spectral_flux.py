"""Spectral-flux tempo estimator.

Detects onsets as peaks in a frame-to-frame magnitude increase curve and
reads the tempo off the most common peak-to-peak interval.
"""

import logging

import numpy as np

from tempodetect.analysis.histogram import build_histogram, histogram_mode
from tempodetect.analysis.models import (
    MAX_BPM,
    MIN_BPM,
    TempoEstimate,
    in_tempo_range,
    round_half_up,
)
from tempodetect.analysis.peaks import find_peaks
from tempodetect.audio.preprocessing import high_pass_filter, truncate

logger = logging.getLogger(__name__)

MIN_FLUX_FRAMES = 10


def frame_flux(frame: np.ndarray) -> float:
    """Mean half-wave rectified increase of |x| across one frame."""
    magnitude = np.abs(frame)
    increases = np.diff(magnitude, prepend=0.0)
    return float(np.sum(increases[increases > 0])) / len(frame)


def flux_curve(
    samples: np.ndarray,
    window_size: int = 2048,
    hop_size: int = 512,
) -> np.ndarray:
    """Flux value for each window start ``0, hop, 2*hop, ... < len - window``."""
    x = np.asarray(samples, dtype=np.float64).ravel()
    starts = range(0, len(x) - window_size, hop_size)
    return np.array([frame_flux(x[s:s + window_size]) for s in starts], dtype=np.float64)


def estimate_spectral_flux(
    samples: np.ndarray,
    sr: int,
    analysis_seconds: float = 30.0,
    cutoff: float = 40.0,
    window_size: int = 2048,
    hop_size: int = 512,
    min_bpm: int = MIN_BPM,
    max_bpm: int = MAX_BPM,
) -> TempoEstimate:
    """Estimate tempo from the dominant interval between flux peaks.

    No octave correction: a modal interval outside the BPM range is
    rejected. Confidence is the share of intervals that fall in the mode.
    """
    x = truncate(samples, sr, analysis_seconds)
    filtered = high_pass_filter(x, sr, cutoff)

    flux = flux_curve(filtered, window_size, hop_size)
    if len(flux) < MIN_FLUX_FRAMES:
        logger.debug(f"spectral-flux: only {len(flux)} flux frames")
        return TempoEstimate.none()

    peaks = find_peaks(flux)
    if len(peaks) < 2:
        logger.debug(f"spectral-flux: {len(peaks)} flux peaks")
        return TempoEstimate.none()

    intervals = np.diff(peaks)
    histogram = build_histogram(round_half_up(i) for i in intervals)
    best_interval, count = histogram_mode(histogram)
    if best_interval == 0:
        return TempoEstimate.none()

    seconds = best_interval * hop_size / sr
    bpm = round_half_up(60 / seconds)
    if not in_tempo_range(bpm, min_bpm, max_bpm):
        logger.debug(f"spectral-flux: {bpm} BPM out of range")
        return TempoEstimate.none()

    confidence = count / len(intervals)
    logger.debug(f"spectral-flux: interval={best_interval} frames bpm={bpm} "
                 f"confidence={confidence:.3f}")
    return TempoEstimate(bpm=bpm, confidence=confidence)
