from __future__ import annotations

import argparse
from pathlib import Path

from .config import settings
from .engines import AudioGenerationEngine, MaskingSound
from .logging_utils import get_logger


logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="dream-audio offline renderer")
    parser.add_argument(
        "--sample-rate",
        type=int,
        default=settings.sample_rate_hz,
        help="Sample rate in Hz",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    binaural = sub.add_parser("binaural", help="Render a stereo binaural beat")
    binaural.add_argument("--carrier", type=float, required=True, help="Carrier frequency in Hz")
    binaural.add_argument("--beat", type=float, required=True, help="Beat frequency in Hz")
    binaural.add_argument("--minutes", type=float, required=True, help="Duration in minutes")
    binaural.add_argument("--volume", type=float, default=-6.0, help="Gain in dBFS")
    binaural.add_argument("--out", required=True, help="Output file path (.wav)")

    subliminal = sub.add_parser("subliminal", help="Render mono subliminal audio")
    subliminal.add_argument("--text", required=True, help="Affirmation text")
    subliminal.add_argument(
        "--masking",
        default=MaskingSound.WHITE_NOISE.value,
        choices=[m.value for m in MaskingSound],
        help="Masking sound",
    )
    subliminal.add_argument("--minutes", type=float, required=True, help="Duration in minutes")
    subliminal.add_argument("--subliminal-volume", type=float, default=-30.0, help="Carrier gain in dBFS")
    subliminal.add_argument("--masking-volume", type=float, default=-10.0, help="Masking gain in dBFS")
    subliminal.add_argument("--out", required=True, help="Output file path (.wav)")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    engine = AudioGenerationEngine(sample_rate=args.sample_rate)

    if args.command == "binaural":
        audio_bytes = engine.generate_binaural_beat(
            args.carrier, args.beat, args.minutes, args.volume
        )
    else:
        audio_bytes = engine.generate_subliminal_audio(
            args.text,
            args.masking,
            args.minutes,
            args.subliminal_volume,
            args.masking_volume,
        )

    out_path = Path(args.out)
    out_path.write_bytes(audio_bytes)
    logger.info("Wrote %s (%d bytes, audio/wav)", out_path, len(audio_bytes))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
