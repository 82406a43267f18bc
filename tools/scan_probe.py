"""
Live scan probe against the real providers.

    OPENAI_API_KEY=... python tools/scan_probe.py photo.jpg --voice male --lat 14.5995 --lon 120.9842

Writes the spoken description to scan_probe.wav.
"""
import argparse
import asyncio
import base64
import mimetypes
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "backend"))

from dotenv import load_dotenv  # pylint: disable=wrong-import-position

from config import AppConfig  # pylint: disable=wrong-import-position
from history.memory import InMemoryHistoryStore  # pylint: disable=wrong-import-position
from orchestrator.errors import DescriptionUnavailable  # pylint: disable=wrong-import-position
from orchestrator.models import (  # pylint: disable=wrong-import-position
    GeoLocation,
    SceneDescriptionRequest,
    SceneImage,
)
from server.app import build_orchestrator  # pylint: disable=wrong-import-position

OUTPUT_FILE = "scan_probe.wav"
PREFIX = "data:audio/wav;base64,"


async def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("image", type=Path)
    parser.add_argument("--voice", choices=["male", "female"], default="female")
    parser.add_argument("--lat", type=float)
    parser.add_argument("--lon", type=float)
    args = parser.parse_args()

    load_dotenv()
    config = AppConfig.load_from_env()
    orchestrator = build_orchestrator(config, history=InMemoryHistoryStore())

    mime_type = mimetypes.guess_type(args.image.name)[0] or "image/jpeg"
    location = None
    if args.lat is not None and args.lon is not None:
        location = GeoLocation(latitude=args.lat, longitude=args.lon)

    request = SceneDescriptionRequest(
        image=SceneImage(data=args.image.read_bytes(), mime_type=mime_type),
        location=location,
        voice=args.voice,
    )

    print("Starting scan probe")
    print("Image:", args.image, f"({mime_type})")
    print("TTS provider:", config.tts_provider)

    t0 = time.time()
    try:
        result = await orchestrator.scan(request)
    except DescriptionUnavailable as exc:
        print("ERROR:", exc)
        sys.exit(1)
    dt = time.time() - t0

    print("Description:", result.scene_description)
    print("Location:", result.location)
    print("Elapsed wall time (s):", round(dt, 2))

    if not result.tts_audio_data_uri:
        print("ERROR: No audio returned")
        return

    wav_bytes = base64.b64decode(result.tts_audio_data_uri[len(PREFIX):])
    Path(OUTPUT_FILE).write_bytes(wav_bytes)
    print("Wrote", len(wav_bytes), "bytes to", OUTPUT_FILE)


if __name__ == "__main__":
    asyncio.run(main())
