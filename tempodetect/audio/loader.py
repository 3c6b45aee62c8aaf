"""Audio decoding: container bytes to mono samples.

soundfile handles WAV/FLAC/OGG/MP3 directly. Anything it cannot read is
handed to librosa, which falls back to the audioread backends (ffmpeg,
gstreamer, ...) when they are installed.
"""

from __future__ import annotations

import logging
import os
import tempfile
from io import BytesIO
from pathlib import Path
from typing import Union

import audioread
from audioread import rawread
import librosa
import numpy as np
import soundfile as sf

from tempodetect.analysis.models import AudioSignal
from tempodetect.config import settings
from tempodetect.errors import DecodeError, EncodingError, EnvironmentUnavailableError

logger = logging.getLogger(__name__)


def _first_channel(audio: np.ndarray) -> np.ndarray:
    audio = np.asarray(audio, dtype=np.float32)
    if audio.ndim == 1:
        return audio
    return audio[0]


def _decode_soundfile(data: bytes, max_seconds: float) -> AudioSignal:
    with sf.SoundFile(BytesIO(data)) as f:
        sr = f.samplerate
        frames = int(min(f.frames, sr * max_seconds)) if f.frames > 0 else -1
        audio = f.read(frames=frames, dtype="float32", always_2d=True)
    # soundfile returns (frames, channels)
    return AudioSignal(samples=_first_channel(audio.T), sample_rate=sr)


def _transcoding_backends() -> list:
    # rawread is always present and only reads WAV/AIFF/AU.
    return [b for b in audioread.available_backends() if b is not rawread.RawAudioFile]


def _decode_fallback(data: bytes, suffix: str, max_seconds: float) -> AudioSignal:
    if not _transcoding_backends():
        raise EnvironmentUnavailableError("No fallback audio decoder available (install ffmpeg)")

    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as tmp:
            tmp.write(data)
            tmp_path = tmp.name

        audio, sr = librosa.load(tmp_path, sr=None, mono=False, duration=max_seconds)
    except (audioread.NoBackendError, audioread.DecodeError, sf.LibsndfileError) as exc:
        raise EncodingError() from exc
    except (OSError, EOFError, ValueError) as exc:
        raise DecodeError(f"Audio decoding failed: {exc}") from exc
    finally:
        if tmp_path:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass

    return AudioSignal(samples=_first_channel(audio), sample_rate=int(sr))


def decode_audio(
    data: bytes,
    filename: str | None = None,
    max_seconds: float | None = None,
    fallback: bool | None = None,
) -> AudioSignal:
    """Decode an audio container into a mono ``AudioSignal``.

    Parameters
    ----------
    data:
        Raw bytes of the audio file.
    filename:
        Original file name, used only for its extension.
    max_seconds:
        Decode at most this many seconds. Defaults to ``settings.analysis_seconds``.
    fallback:
        Retry through librosa/audioread when soundfile cannot read the data.
        Defaults to ``settings.decode_fallback``.

    Raises
    ------
    EncodingError
        The data is empty, malformed, or in an unsupported format.
    EnvironmentUnavailableError
        A fallback decode is required but no backend is installed.
    DecodeError
        Any other decoding failure.
    """
    if max_seconds is None:
        max_seconds = settings.analysis_seconds
    if fallback is None:
        fallback = settings.decode_fallback

    if not data:
        raise EncodingError()

    try:
        return _decode_soundfile(data, max_seconds)
    except sf.LibsndfileError as exc:
        if not fallback:
            raise EncodingError() from exc
        logger.info(f"soundfile could not decode {filename or 'audio'} ({exc}); trying fallback")

    max_bytes = settings.max_transcode_mb * 1024 * 1024
    if len(data) > max_bytes:
        raise DecodeError(f"File too large for fallback decode ({len(data)} > {max_bytes} bytes)")

    suffix = Path(filename).suffix.lower() if filename else ""
    return _decode_fallback(data, suffix, max_seconds)


def load_audio(
    file_path_or_buffer: Union[str, Path, BytesIO],
    max_seconds: float | None = None,
) -> AudioSignal:
    """Load an audio file or buffer as a mono ``AudioSignal``."""
    if isinstance(file_path_or_buffer, BytesIO):
        return decode_audio(file_path_or_buffer.getvalue(), max_seconds=max_seconds)
    path = Path(file_path_or_buffer)
    return decode_audio(path.read_bytes(), filename=path.name, max_seconds=max_seconds)
