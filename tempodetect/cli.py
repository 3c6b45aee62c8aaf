"""Command-line tempo estimation for audio files."""

import argparse
import json
import logging
import sys
from pathlib import Path

from tempodetect.analysis.engine import TempoEngine
from tempodetect.analysis.models import TempoMethod
from tempodetect.api.worker import error_response, handle_file, success_response
from tempodetect.audio.loader import decode_audio
from tempodetect.errors import TempoDetectError


def _estimate_all(path: Path, engine: TempoEngine) -> list[dict]:
    try:
        signal = decode_audio(path.read_bytes(), filename=path.name)
    except (TempoDetectError, OSError) as e:
        return [error_response(e, method) for method in TempoMethod]
    return [success_response(est, method) for method, est in engine.estimate_all(signal).items()]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Estimate the tempo (BPM) of audio files"
    )
    parser.add_argument("files", nargs="+", type=Path, help="Audio files to analyse")
    parser.add_argument(
        "--method",
        default=TempoMethod.AUTOCORRELATION.value,
        choices=[m.value for m in TempoMethod],
        help="Estimation method (default: autocorrelation)",
    )
    parser.add_argument("--all", action="store_true",
                        help="Run every method and print one line per method")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    engine = TempoEngine()
    for path in args.files:
        if args.all:
            responses = _estimate_all(path, engine)
        else:
            try:
                data = path.read_bytes()
            except OSError as e:
                responses = [error_response(e, TempoMethod.parse(args.method))]
            else:
                responses = [handle_file(data, args.method, path.name, engine=engine)]
        for response in responses:
            print(json.dumps({"file": str(path), **response}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
