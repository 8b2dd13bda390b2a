"""CLI entry point for the Play.ht client."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger("playht_client")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="playht",
        description="Play.ht text-to-speech API client",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every request (DEBUG level)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load PLAYHT_SECRET_KEY / PLAYHT_USER_ID from this file (default: .env)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    voices = commands.add_parser("voices", help="List voices")
    voices.add_argument("--cloned", action="store_true", help="List cloned voices instead of stock")

    clone = commands.add_parser("clone", help="Create an instant voice clone")
    clone.add_argument("sample", help="Sample audio file, or URL with --url")
    clone.add_argument("mime_type", nargs="?", default="audio/mpeg", help="Sample media type (default: audio/mpeg)")
    clone.add_argument("--name", default="playht-clone", help="Name of the cloned voice")
    clone.add_argument("--url", action="store_true", help="Treat SAMPLE as a URL the API downloads")

    delete = commands.add_parser("delete-clone", help="Delete a cloned voice")
    delete.add_argument("voice_id")

    speak = commands.add_parser("speak", help="Stream synthesized audio to a file")
    speak.add_argument("text")
    speak.add_argument("--voice", required=True, help="Voice ID (see `playht voices`)")
    speak.add_argument("--out", type=Path, default=None, help="Output file (default: stdout)")
    speak.add_argument("--quality", default="draft")
    speak.add_argument("--format", dest="output_format", default="mp3")
    speak.add_argument("--speed", type=float, default=None)
    speak.add_argument("--sample-rate", type=int, default=None)

    job = commands.add_parser("job", help="Create a TTS job and print its progress events")
    job.add_argument("text")
    job.add_argument("--voice", required=True)
    job.add_argument("--quality", default="draft")

    status = commands.add_parser("job-status", help="Show a TTS job")
    status.add_argument("job_id")

    return parser


async def _run(args: argparse.Namespace) -> None:
    from .api import PlayHTClient
    from .models import (
        CloneVoiceFileRequest,
        CloneVoiceURLRequest,
        DeleteClonedVoiceRequest,
        TTSJobRequest,
        TTSStreamRequest,
    )

    async with PlayHTClient() as client:
        if args.command == "voices":
            voices = await (client.get_cloned_voices() if args.cloned else client.get_stock_voices())
            for voice in voices:
                print(f"{voice.id}\t{voice.name}")
            print(f"Got {len(voices)} voices", file=sys.stderr)

        elif args.command == "clone":
            if args.url:
                req = CloneVoiceURLRequest(sample_file_url=args.sample, voice_name=args.name)
                voice = await client.clone_voice_from_url(req)
            else:
                req = CloneVoiceFileRequest(
                    sample_file=args.sample, voice_name=args.name, mime_type=args.mime_type
                )
                voice = await client.clone_voice_from_file(req)
            print(voice.model_dump_json(indent=2))

        elif args.command == "delete-clone":
            resp = await client.delete_cloned_voice(DeleteClonedVoiceRequest(voice_id=args.voice_id))
            print(resp.model_dump_json(indent=2))

        elif args.command == "speak":
            req = TTSStreamRequest(
                text=args.text,
                voice=args.voice,
                quality=args.quality,
                output_format=args.output_format,
                speed=args.speed,
                sample_rate=args.sample_rate,
            )
            if args.out is None:
                await client.stream_audio(sys.stdout.buffer, req)
                sys.stdout.buffer.flush()
            else:
                with args.out.open("wb") as f:
                    await client.stream_audio(f, req)
                print(f"Audio written to {args.out}", file=sys.stderr)

        elif args.command == "job":
            req = TTSJobRequest(text=args.text, voice=args.voice, quality=args.quality)
            stream_url = await client.create_tts_job_with_progress_stream(sys.stdout.buffer, req)
            sys.stdout.buffer.flush()
            if stream_url:
                print(f"Progress stream: {stream_url}", file=sys.stderr)

        elif args.command == "job-status":
            job = await client.get_tts_job(args.job_id)
            print(job.model_dump_json(indent=2, by_alias=True))


def main() -> None:
    """Run the Play.ht CLI."""
    args = _build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Import here to avoid slow startup for --help
    from dotenv import load_dotenv

    from .errors import PlayHTError

    load_dotenv(args.env_file)

    try:
        asyncio.run(_run(args))
    except PlayHTError as e:
        logger.error(str(e))
        sys.exit(1)
    except OSError as e:
        # Unreadable clone sample or unwritable --out file
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
