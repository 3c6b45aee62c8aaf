"""Analysis orchestrator - dispatches a request to one estimation method."""

import logging
from collections.abc import Callable

import numpy as np

from tempodetect.analysis.consensus import estimate_combined
from tempodetect.analysis.estimators import (
    estimate_autocorrelation,
    estimate_peak_picking,
    estimate_spectral_flux,
)
from tempodetect.analysis.models import AudioSignal, TempoEstimate, TempoMethod
from tempodetect.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

Estimator = Callable[[np.ndarray, int], TempoEstimate]


class TempoEngine:
    """Runs a single tempo estimation per call.

    The engine keeps no state between calls; it only reads tuning values
    from the settings it was built with.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings
        s = self.settings
        self._methods: dict[TempoMethod, Estimator] = {
            TempoMethod.AUTOCORRELATION: lambda x, sr: estimate_autocorrelation(
                x, sr,
                analysis_seconds=s.analysis_seconds,
                target_rate=s.autocorrelation_target_rate,
                window_seconds=s.autocorrelation_window_seconds,
                min_contrast=s.autocorrelation_min_contrast,
                min_bpm=s.min_bpm,
                max_bpm=s.max_bpm,
            ),
            TempoMethod.SPECTRAL_FLUX: lambda x, sr: estimate_spectral_flux(
                x, sr,
                analysis_seconds=s.analysis_seconds,
                cutoff=s.highpass_cutoff,
                window_size=s.flux_window_size,
                hop_size=s.flux_hop_size,
                min_bpm=s.min_bpm,
                max_bpm=s.max_bpm,
            ),
            TempoMethod.PEAK_PICKING: lambda x, sr: estimate_peak_picking(
                x, sr,
                analysis_seconds=s.analysis_seconds,
                cutoff=s.highpass_cutoff,
                energy_threshold=s.onset_energy_threshold,
                min_bpm=s.min_bpm,
                max_bpm=s.max_bpm,
            ),
            TempoMethod.COMBINED: lambda x, sr: estimate_combined(
                x, sr,
                analysis_seconds=s.analysis_seconds,
                tolerance=s.consensus_tolerance,
                strategy=s.consensus_strategy,
                target_rate=s.autocorrelation_target_rate,
                window_seconds=s.autocorrelation_window_seconds,
                min_contrast=s.autocorrelation_min_contrast,
                cutoff=s.highpass_cutoff,
                window_size=s.flux_window_size,
                hop_size=s.flux_hop_size,
                energy_threshold=s.onset_energy_threshold,
                min_bpm=s.min_bpm,
                max_bpm=s.max_bpm,
            ),
        }

    def estimate(
        self,
        signal: AudioSignal,
        method: "TempoMethod | str | None" = TempoMethod.AUTOCORRELATION,
    ) -> TempoEstimate:
        """Estimate the tempo of *signal* with *method*.

        Unknown method names fall back to autocorrelation.
        """
        resolved = TempoMethod.parse(method)
        if signal.sample_rate <= 0 or len(signal.samples) == 0:
            logger.info(f"Skipping {resolved.value}: empty signal")
            return TempoEstimate.none()
        if not np.all(np.isfinite(signal.samples)):
            logger.info(f"Skipping {resolved.value}: non-finite samples")
            return TempoEstimate.none()

        logger.info(f"Estimating tempo of {signal.duration:.1f}s of audio at "
                    f"{signal.sample_rate}Hz ({resolved.value})")
        result = self._methods[resolved](signal.samples, signal.sample_rate)
        logger.info(f"  Tempo: {result.bpm} BPM (confidence: {result.confidence:.2f})")
        return result

    def estimate_all(self, signal: AudioSignal) -> dict[TempoMethod, TempoEstimate]:
        """Run every method on *signal*, one after another."""
        return {method: self.estimate(signal, method) for method in TempoMethod}
