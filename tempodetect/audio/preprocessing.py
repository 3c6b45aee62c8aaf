"""Audio preprocessing utilities."""

from __future__ import annotations

import math

import numpy as np
from scipy.signal import lfilter


def truncate(
    samples: np.ndarray,
    sr: int,
    seconds: float = 30.0,
) -> np.ndarray:
    """Keep at most the first *seconds* of audio.

    Tempo is assumed stationary, so a short analysis window is enough and
    bounds the cost of every estimator.
    """
    samples = np.asarray(samples, dtype=np.float64).ravel()
    max_samples = int(min(len(samples), sr * seconds))
    return samples[:max_samples]


def downsample_factor(sr: int, target_rate: int = 8000) -> int:
    """Integer decimation step that brings *sr* close to *target_rate*."""
    return max(1, int(math.floor(sr / target_rate)))


def downsample(
    samples: np.ndarray,
    sr: int,
    target_rate: int = 8000,
) -> tuple[np.ndarray, float]:
    """Point-decimate the signal towards *target_rate*.

    Keeps every Nth sample with ``N = max(1, floor(sr / target_rate))``.
    No anti-aliasing filter is applied before decimation.

    Returns
    -------
    tuple[np.ndarray, float]
        The decimated samples and the resulting sample rate ``sr / N``.
    """
    factor = downsample_factor(sr, target_rate)
    samples = np.asarray(samples, dtype=np.float64).ravel()
    return samples[::factor], sr / factor


def high_pass_filter(
    samples: np.ndarray,
    sr: int,
    cutoff: float = 40.0,
) -> np.ndarray:
    """Apply a single-pole high-pass filter.

    Computes ``y[i] = alpha * (y[i-1] + x[i] - x[i-1])`` with ``y[0] = x[0]``
    and ``alpha = RC / (RC + dt)``.

    Parameters
    ----------
    samples:
        Input audio signal.
    sr:
        Sample rate in Hz.
    cutoff:
        High-pass cutoff frequency in Hz. Defaults to 40 Hz.
    """
    x = np.asarray(samples, dtype=np.float64).ravel()
    if len(x) == 0:
        return x.copy()

    rc = 1.0 / (2.0 * np.pi * cutoff)
    dt = 1.0 / sr
    alpha = rc / (rc + dt)

    # Initial state chosen so the first output equals the first input.
    zi = np.array([(1.0 - alpha) * x[0]])
    y, _ = lfilter([alpha, -alpha], [1.0, -alpha], x, zi=zi)
    return y
