"""Multi-method tempo estimation with consensus."""

import logging

import numpy as np

from tempodetect.analysis.estimators import (
    estimate_autocorrelation,
    estimate_peak_picking,
    estimate_spectral_flux,
)
from tempodetect.analysis.models import (
    MAX_BPM,
    MIN_BPM,
    ConsensusGroup,
    TempoEstimate,
    in_tempo_range,
)

logger = logging.getLogger(__name__)

AGREEMENT_WEIGHT = 0.2


def _cluster_greedy(estimates: list[TempoEstimate], tolerance: int) -> list[ConsensusGroup]:
    # First fit against each group's anchor (its first member), in input order.
    groups: list[ConsensusGroup] = []
    for est in estimates:
        for group in groups:
            if abs(est.bpm - group.anchor_bpm) <= tolerance:
                group.members.append(est)
                break
        else:
            groups.append(ConsensusGroup(anchor_bpm=est.bpm, members=[est]))
    return groups


def _cluster_sorted(estimates: list[TempoEstimate], tolerance: int) -> list[ConsensusGroup]:
    # Same anchor rule applied to BPM-sorted input, so the result does not
    # depend on the order the estimators ran in.
    ordered = sorted(estimates, key=lambda e: (e.bpm, -e.confidence))
    groups: list[ConsensusGroup] = []
    for est in ordered:
        if groups and est.bpm - groups[-1].anchor_bpm <= tolerance:
            groups[-1].members.append(est)
        else:
            groups.append(ConsensusGroup(anchor_bpm=est.bpm, members=[est]))
    return groups


def cluster_estimates(
    estimates: list[TempoEstimate],
    tolerance: int = 2,
    strategy: str = "greedy",
) -> list[ConsensusGroup]:
    """Group estimates whose BPM lies within *tolerance* of a group anchor.

    ``greedy`` walks the estimates in the given order and joins the first
    existing group that fits; ``sorted`` walks them in BPM order instead.
    Estimates without a BPM are ignored.
    """
    valid = [e for e in estimates if e.bpm is not None]
    if strategy == "greedy":
        return _cluster_greedy(valid, tolerance)
    if strategy == "sorted":
        return _cluster_sorted(valid, tolerance)
    raise ValueError(f"Unknown clustering strategy: {strategy!r}")


def combine_estimates(
    estimates: list[TempoEstimate],
    n_methods: int | None = None,
    tolerance: int = 2,
    strategy: str = "greedy",
    min_bpm: int = MIN_BPM,
    max_bpm: int = MAX_BPM,
) -> TempoEstimate:
    """Build consensus from per-method estimates.

    The group with the highest summed confidence wins. Its BPM is the
    confidence-weighted mean of its members; its confidence is the mean
    member confidence boosted by the fraction of methods that agreed.

    If no estimate is usable the highest-confidence raw estimate with a BPM
    is returned, or no estimate at all.
    """
    if n_methods is None:
        n_methods = len(estimates)

    valid = [e for e in estimates if e.is_valid]
    if not valid:
        best = TempoEstimate.none()
        for est in estimates:
            if est.bpm is not None and est.confidence > best.confidence:
                best = est
        return best

    groups = cluster_estimates(valid, tolerance, strategy)

    best_group = None
    best_total = 0.0
    for group in groups:
        if group.total_confidence > best_total:
            best_total = group.total_confidence
            best_group = group

    if best_group is None:
        return TempoEstimate.none()

    bpm = best_group.weighted_bpm
    agreement = len(best_group.members) / max(n_methods, 1)
    confidence = min(1.0, best_group.mean_confidence * (1 + agreement * AGREEMENT_WEIGHT))

    logger.debug(f"consensus: {len(groups)} groups, winner anchor={best_group.anchor_bpm} "
                 f"size={len(best_group.members)} bpm={bpm} confidence={confidence:.3f}")

    if not in_tempo_range(bpm, min_bpm, max_bpm):
        return TempoEstimate.none()
    return TempoEstimate(bpm=bpm, confidence=confidence)


def estimate_combined(
    samples: np.ndarray,
    sr: int,
    analysis_seconds: float = 30.0,
    tolerance: int = 2,
    strategy: str = "greedy",
    min_bpm: int = MIN_BPM,
    max_bpm: int = MAX_BPM,
    **estimator_kwargs,
) -> TempoEstimate:
    """Run autocorrelation, spectral flux and peak picking, then combine.

    The estimators run one after another. Extra keyword arguments are
    forwarded by name to the estimators that accept them.
    """
    bounds = {"min_bpm": min_bpm, "max_bpm": max_bpm}
    results = [
        estimate_autocorrelation(samples, sr, analysis_seconds=analysis_seconds, **bounds,
                                 **_pick(estimator_kwargs, "target_rate", "window_seconds",
                                         "min_contrast")),
        estimate_spectral_flux(samples, sr, analysis_seconds=analysis_seconds, **bounds,
                               **_pick(estimator_kwargs, "cutoff", "window_size", "hop_size")),
        estimate_peak_picking(samples, sr, analysis_seconds=analysis_seconds, **bounds,
                              **_pick(estimator_kwargs, "cutoff", "energy_threshold")),
    ]
    for name, est in zip(("autocorrelation", "spectral-flux", "peak-picking"), results):
        logger.debug(f"  {name}: bpm={est.bpm} confidence={est.confidence:.3f}")
    return combine_estimates(results, n_methods=len(results), tolerance=tolerance,
                             strategy=strategy, min_bpm=min_bpm, max_bpm=max_bpm)


def _pick(kwargs: dict, *names: str) -> dict:
    return {k: kwargs[k] for k in names if k in kwargs}
