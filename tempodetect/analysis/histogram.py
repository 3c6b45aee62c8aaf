"""Interval histograms for modal-period estimation."""

from collections import Counter
from collections.abc import Iterable


def build_histogram(values: Iterable) -> Counter:
    """Count occurrences of each (already quantized) interval value."""
    return Counter(values)


def histogram_mode(histogram: Counter) -> tuple[float, int]:
    """Return ``(value, count)`` of the most common interval.

    Ties go to the value inserted first. An empty histogram yields ``(0, 0)``.
    """
    best_value, best_count = 0, 0
    for value, count in histogram.items():
        if count > best_count:
            best_value, best_count = value, count
    return best_value, best_count
