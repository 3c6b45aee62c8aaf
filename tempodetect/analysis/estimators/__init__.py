"""Tempo estimator subpackage - each strategy in its own module."""

from tempodetect.analysis.estimators.autocorrelation import estimate_autocorrelation
from tempodetect.analysis.estimators.spectral_flux import estimate_spectral_flux
from tempodetect.analysis.estimators.peak_picking import estimate_peak_picking

__all__ = [
    "estimate_autocorrelation",
    "estimate_spectral_flux",
    "estimate_peak_picking",
]
