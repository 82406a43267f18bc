"""
Print the header of a WAV file or of a saved ttsAudioDataUri.

    python tools/wav_info.py hello.wav
    python tools/wav_info.py scan_response_audio.txt
"""
import argparse
import base64
import io
import wave
from pathlib import Path

PREFIX = b"data:audio/wav;base64,"


def load_wav_bytes(path: Path) -> bytes:
    raw = path.read_bytes().strip()
    if raw.startswith(PREFIX):
        return base64.b64decode(raw[len(PREFIX):])
    return raw


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("path", type=Path)
    args = parser.parse_args()

    data = load_wav_bytes(args.path)
    with wave.open(io.BytesIO(data), "rb") as wf:
        print("sample_rate:", wf.getframerate())
        print("channels:", wf.getnchannels())
        print("sample_width_bytes:", wf.getsampwidth())
        print("frames:", wf.getnframes())
        print("duration_s:", round(wf.getnframes() / wf.getframerate(), 3))


if __name__ == "__main__":
    main()
