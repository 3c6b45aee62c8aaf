"""Request/response boundary around the tempo engine.

Every call returns exactly one response message. Decode failures, invalid
requests and unexpected estimator faults all come back as structured
failure responses instead of exceptions.
"""

import logging

import numpy as np
from pydantic import ValidationError

from tempodetect.analysis.buckets import tempo_bucket
from tempodetect.analysis.engine import TempoEngine
from tempodetect.analysis.models import AudioSignal, TempoEstimate, TempoMethod
from tempodetect.api.schemas import TempoRequest, TempoResponse
from tempodetect.audio.loader import decode_audio
from tempodetect.errors import EncodingError, TempoDetectError

logger = logging.getLogger(__name__)


def success_response(estimate: TempoEstimate, method: TempoMethod) -> dict:
    return TempoResponse(
        bpm=estimate.bpm,
        confidence=estimate.confidence,
        method=method.value,
        bucket=tempo_bucket(estimate.bpm),
    ).to_message()


def error_response(error: Exception | str, method: TempoMethod | str) -> dict:
    """Failure message; ``encodingError`` is set only for bad audio data."""
    method_name = method.value if isinstance(method, TempoMethod) else str(method)
    return TempoResponse(
        bpm=None,
        confidence=0.0,
        method=method_name,
        error=str(error),
        encoding_error=True if isinstance(error, EncodingError) else None,
    ).to_message()


def _run(engine: TempoEngine, signal: AudioSignal, method: TempoMethod) -> dict:
    try:
        estimate = engine.estimate(signal, method)
    except Exception as e:
        logger.exception(f"Tempo estimation failed ({method.value})")
        return error_response(f"Tempo estimation failed: {e}", method)
    return success_response(estimate, method)


def handle_message(message: dict, engine: TempoEngine | None = None) -> dict:
    """Estimate tempo for a ``{method, channelData, sampleRate}`` message."""
    engine = engine or TempoEngine()
    method = TempoMethod.parse(message.get("method") if isinstance(message, dict) else None)

    try:
        request = TempoRequest.model_validate(message)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        logger.info(f"Rejected tempo request: invalid {fields}")
        return error_response(f"Invalid request: {fields}", method)

    signal = AudioSignal(
        samples=np.asarray(request.channel_data, dtype=np.float32),
        sample_rate=request.sample_rate,
    )
    return _run(engine, signal, request.method)


def handle_file(
    data: bytes,
    method: "TempoMethod | str | None" = None,
    filename: str | None = None,
    engine: TempoEngine | None = None,
) -> dict:
    """Decode an audio container and estimate its tempo."""
    engine = engine or TempoEngine()
    resolved = TempoMethod.parse(method)

    try:
        signal = decode_audio(data, filename=filename)
    except TempoDetectError as e:
        logger.info(f"Could not decode {filename or 'upload'}: {e}")
        return error_response(e, resolved)
    except Exception as e:
        logger.exception(f"Unexpected decode failure for {filename or 'upload'}")
        return error_response(f"Audio decoding failed: {e}", resolved)

    return _run(engine, signal, resolved)
