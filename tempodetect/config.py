"""Application configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings

from tempodetect.analysis.models import MAX_BPM, MIN_BPM


class Settings(BaseSettings):
    """App settings with env var overrides."""

    # Analysis window
    analysis_seconds: float = 30.0
    min_bpm: int = Field(default=MIN_BPM, ge=MIN_BPM, le=MAX_BPM)
    max_bpm: int = Field(default=MAX_BPM, ge=MIN_BPM, le=MAX_BPM)

    # Autocorrelation
    autocorrelation_target_rate: int = 8000
    autocorrelation_window_seconds: float = 2.0
    autocorrelation_min_contrast: float = 0.1  # best lag above the median lag

    # Onset paths (spectral flux / peak picking)
    highpass_cutoff: float = 40.0  # Hz, kick/bass transients
    flux_window_size: int = 2048
    flux_hop_size: int = 512
    onset_energy_threshold: float = 0.1

    # Consensus
    consensus_tolerance: int = 2  # BPM
    consensus_strategy: str = "greedy"  # "greedy" | "sorted"

    # Decoding
    decode_fallback: bool = True
    max_transcode_mb: int = 50

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    max_upload_mb: int = 50

    model_config = {"env_prefix": "TEMPODETECT_"}


settings = Settings()
