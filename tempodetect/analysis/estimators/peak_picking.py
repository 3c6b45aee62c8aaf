"""Peak-picking tempo estimator (inter-onset interval histogram)."""

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
from tempodetect.analysis.peaks import detect_onset_peaks
from tempodetect.audio.preprocessing import high_pass_filter, truncate

logger = logging.getLogger(__name__)

IOI_BIN_SECONDS = 0.01


def quantize_ioi(ioi: float, sr: int, bin_seconds: float = IOI_BIN_SECONDS) -> float:
    """Snap an interval (in samples) to the nearest *bin_seconds* bin."""
    bin_width = sr * bin_seconds
    return round_half_up(ioi / bin_width) * bin_width


def estimate_peak_picking(
    samples: np.ndarray,
    sr: int,
    analysis_seconds: float = 30.0,
    cutoff: float = 40.0,
    energy_threshold: float = 0.1,
    min_bpm: int = MIN_BPM,
    max_bpm: int = MAX_BPM,
) -> TempoEstimate:
    """Estimate tempo from the modal inter-onset interval.

    A result below *min_bpm* is doubled and one above *max_bpm* is halved
    once before the range check.
    """
    x = truncate(samples, sr, analysis_seconds)
    filtered = high_pass_filter(x, sr, cutoff)

    onsets = detect_onset_peaks(filtered, sr, threshold=energy_threshold)
    if len(onsets) < 2:
        logger.debug(f"peak-picking: {len(onsets)} onsets")
        return TempoEstimate.none()

    iois = np.diff(onsets)
    histogram = build_histogram(quantize_ioi(ioi, sr) for ioi in iois)
    best_ioi, count = histogram_mode(histogram)
    if best_ioi == 0:
        return TempoEstimate.none()

    bpm = round_half_up(60 / (best_ioi / sr))
    if bpm < min_bpm:
        bpm *= 2
    elif bpm > max_bpm:
        bpm = round_half_up(bpm / 2)

    if not in_tempo_range(bpm, min_bpm, max_bpm):
        logger.debug(f"peak-picking: {bpm} BPM out of range after octave fold")
        return TempoEstimate.none()

    confidence = count / len(iois)
    logger.debug(f"peak-picking: {len(onsets)} onsets ioi={best_ioi:.0f} bpm={bpm} "
                 f"confidence={confidence:.3f}")
    return TempoEstimate(bpm=bpm, confidence=confidence)
