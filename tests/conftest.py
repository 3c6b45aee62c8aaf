"""Shared test fixtures for tempo estimation tests."""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from tempodetect.main import app


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


def generate_impulse_train(
    bpm: float,
    duration_seconds: float = 10.0,
    sr: int = 44100,
) -> np.ndarray:
    """Unit impulses every ``sr * 60 / bpm`` samples, starting at sample 0."""
    n_samples = int(duration_seconds * sr)
    audio = np.zeros(n_samples, dtype=np.float32)
    interval = sr * 60.0 / bpm
    positions = np.round(np.arange(0, n_samples, interval)).astype(int)
    audio[positions[positions < n_samples]] = 1.0
    return audio


def generate_click_track(
    bpm: float,
    duration_seconds: float = 10.0,
    sr: int = 44100,
    freq: float = 1000.0,
    click_seconds: float = 0.15,
    decay: float = 1 / 0.06,
) -> np.ndarray:
    """Generate a click track of decaying sine bursts.

    Each click is a *freq* Hz sine with an exponential envelope (time
    constant ``1 / decay`` seconds), long enough to span several flux
    frames. Returns mono audio peak-normalized to 1.
    """
    n_samples = int(duration_seconds * sr)
    audio = np.zeros(n_samples, dtype=np.float32)

    click_samples = int(click_seconds * sr)
    t_click = np.arange(click_samples) / sr
    click = np.sin(2 * np.pi * freq * t_click) * np.exp(-t_click * decay)

    interval = sr * 60.0 / bpm
    for start in np.arange(0, n_samples, interval):
        pos = int(round(start))
        end = min(pos + click_samples, n_samples)
        if end > pos:
            audio[pos:end] += click[:end - pos]

    peak = np.max(np.abs(audio))
    if peak > 0:
        audio = audio / peak
    return audio


def write_wav(path, audio: np.ndarray, sr: int) -> None:
    import soundfile as sf
    sf.write(str(path), audio, sr)


@pytest.fixture
def click_120():
    """Decaying-sine click track at 120 BPM, 44.1 kHz."""
    return generate_click_track(bpm=120, duration_seconds=10)


@pytest.fixture
def impulses_120():
    """Unit impulse train at 120 BPM, 44.1 kHz."""
    return generate_impulse_train(bpm=120, duration_seconds=10)


@pytest.fixture
def silence():
    """Five seconds of digital silence at 44.1 kHz."""
    return np.zeros(5 * 44100, dtype=np.float32)
