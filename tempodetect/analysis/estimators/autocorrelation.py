"""Autocorrelation tempo estimator.

Finds the lag at which the (downsampled) signal best matches itself, scoring
every lag that corresponds to a tempo between 60 and 200 BPM.
"""

import logging
import math

import numpy as np

from tempodetect.analysis.models import (
    MAX_BPM,
    MIN_BPM,
    CorrelationSample,
    TempoEstimate,
    in_tempo_range,
    round_half_up,
)
from tempodetect.audio.preprocessing import downsample, truncate

logger = logging.getLogger(__name__)


def correlation_profile(
    samples: np.ndarray,
    rate: float,
    window_seconds: float = 2.0,
    min_bpm: int = MIN_BPM,
    max_bpm: int = MAX_BPM,
) -> list[CorrelationSample]:
    """Score each candidate period by mean absolute lagged product.

    ``value`` for period ``p`` is ``mean(|x[i] * x[i + p]|) / sqrt(p)`` over
    the first *window_seconds* of signal; the ``sqrt(p)`` term offsets the
    bias towards short lags, which have more overlapping sample pairs.
    ``strength`` is the same mean product divided by the zero-lag energy
    ``mean(x[i]**2)``, so it is independent of level and lag scaling.

    A silent window yields an empty profile.
    """
    x = np.asarray(samples, dtype=np.float64).ravel()
    min_period = int(math.floor(rate * 60 / max_bpm))
    max_period = int(math.floor(rate * 60 / min_bpm))
    length = int(min(len(x), rate * window_seconds))
    magnitude = np.abs(x[:length])

    energy = float(np.mean(magnitude ** 2)) if length else 0.0
    if energy <= 0:
        return []

    profile: list[CorrelationSample] = []
    for period in range(max(min_period, 1), max_period + 1):
        if period >= length:
            break
        lagged = float(np.mean(magnitude[:length - period] * magnitude[period:]))
        profile.append(CorrelationSample(
            period=period,
            value=lagged / math.sqrt(period),
            strength=lagged / energy,
        ))
    return profile


def periodicity_contrast(profile: list[CorrelationSample], best: CorrelationSample) -> float:
    """How far *best* rises above the typical lag, as a fraction of its strength.

    ``(best.strength - median(strength)) / best.strength``. Dense aperiodic
    signals score near 0 since every lag correlates equally; a clean pulse
    train scores near 1. A lag with no strength at all scores 0.
    """
    if best.strength <= 0:
        return 0.0
    baseline = float(np.median([c.strength for c in profile]))
    return (best.strength - baseline) / best.strength


def correct_octave(bpm: int, min_bpm: int = MIN_BPM, max_bpm: int = MAX_BPM) -> float | None:
    """Fold an out-of-range BPM by trying double, then half.

    Returns the in-range value, or ``None`` if neither lands in range.
    Halving an odd BPM yields a fractional value.
    """
    if in_tempo_range(bpm, min_bpm, max_bpm):
        return bpm
    doubled = bpm * 2
    halved = bpm / 2
    if in_tempo_range(doubled, min_bpm, max_bpm):
        return doubled
    if in_tempo_range(halved, min_bpm, max_bpm):
        return halved
    return None


def estimate_autocorrelation(
    samples: np.ndarray,
    sr: int,
    analysis_seconds: float = 30.0,
    target_rate: int = 8000,
    window_seconds: float = 2.0,
    min_contrast: float = 0.1,
    min_bpm: int = MIN_BPM,
    max_bpm: int = MAX_BPM,
) -> TempoEstimate:
    """Estimate tempo from the strongest self-similarity lag.

    The winning lag must stand out from the rest of the profile: its
    contrast (see ``periodicity_contrast``) has to reach *min_contrast*,
    otherwise there is no usable periodicity.

    Confidence is ``best / (best + runner_up)`` over the ranked ``value``
    scores, so a single dominant lag scores close to 1.
    """
    x = truncate(samples, sr, analysis_seconds)
    x, rate = downsample(x, sr, target_rate)

    profile = correlation_profile(x, rate, window_seconds, min_bpm, max_bpm)
    if not profile:
        logger.debug("autocorrelation: no candidate periods")
        return TempoEstimate.none()

    ranked = sorted(profile, key=lambda c: c.value, reverse=True)
    best = ranked[0]
    second_value = ranked[1].value if len(ranked) > 1 else 0.0

    contrast = periodicity_contrast(profile, best)
    if contrast < min_contrast:
        logger.debug(f"autocorrelation: periodicity contrast {contrast:.3f} below {min_contrast}")
        return TempoEstimate.none()

    bpm = correct_octave(round_half_up(rate * 60 / best.period), min_bpm, max_bpm)
    if bpm is None:
        return TempoEstimate.none()

    if second_value > 0:
        confidence = min(1.0, best.value / (best.value + second_value))
    else:
        confidence = best.value

    logger.debug(f"autocorrelation: period={best.period} rate={rate:.1f} bpm={bpm} "
                 f"confidence={confidence:.3f}")
    return TempoEstimate(bpm=round_half_up(bpm), confidence=confidence)
