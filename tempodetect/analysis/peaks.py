"""Peak and onset detection shared by the estimators."""

import numpy as np


def find_peaks(signal: np.ndarray, min_height: float = 0.1) -> np.ndarray:
    """Return indices of strict local maxima above a relative threshold.

    A point ``i`` (endpoints excluded) is a peak when
    ``signal[i] > min_height * max(signal)`` and it is strictly greater than
    both neighbours.
    """
    signal = np.asarray(signal, dtype=np.float64).ravel()
    if len(signal) < 3:
        return np.array([], dtype=int)

    threshold = float(np.max(signal)) * min_height
    middle = signal[1:-1]
    mask = (middle > threshold) & (middle > signal[:-2]) & (middle > signal[2:])
    return np.flatnonzero(mask) + 1


def detect_onset_peaks(
    samples: np.ndarray,
    sr: int,
    threshold: float = 0.1,
    window_seconds: float = 0.1,
) -> list[int]:
    """Detect transient onsets from windowed amplitude energy.

    Window centres step by ``W = floor(sr * window_seconds)`` samples. Each
    centre ``i`` looks at ``samples[i - W:i + W]``; if the mean absolute
    amplitude there exceeds *threshold*, the loudest sample in that span is
    an onset, unless it is within ``sr * window_seconds`` samples of the
    previous onset.

    Returns absolute sample positions in ascending order.
    """
    samples = np.asarray(samples, dtype=np.float64).ravel()
    window = int(np.floor(sr * window_seconds))
    if window <= 0:
        return []

    magnitude = np.abs(samples)
    min_gap = sr * window_seconds
    n = len(samples)

    peaks: list[int] = []
    for i in range(window, n - window, window):
        span = magnitude[i - window:i + window]
        energy = float(np.mean(span))
        if energy <= threshold:
            continue

        # The centre sample wins ties; otherwise the earliest maximum does.
        local = int(np.argmax(span))
        max_idx = i - window + local
        if span[local] <= magnitude[i]:
            max_idx = i

        if not peaks or max_idx - peaks[-1] > min_gap:
            peaks.append(max_idx)

    return peaks
