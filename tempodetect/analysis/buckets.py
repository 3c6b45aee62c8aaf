"""Coarse tempo buckets used when presenting a BPM."""

BUCKET_RANGES: dict[str, tuple[int, int]] = {
    "slow": (60, 89),
    "medium": (90, 139),
    "fast": (140, 200),
}


def tempo_bucket(bpm: float | None) -> str | None:
    """Return "slow", "medium" or "fast", or None if *bpm* is missing or out of range."""
    if bpm is None:
        return None
    for name, (low, high) in BUCKET_RANGES.items():
        if low <= bpm <= high:
            return name
    return None
