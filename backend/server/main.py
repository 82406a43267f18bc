"""
Development entry point.

    python backend/server/main.py

Runs the ASGI app under uvicorn (reload when ENV=dev). Production deployments point
uvicorn/gunicorn at server.asgi:app directly.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

BACKEND_DIR = Path(__file__).resolve().parents[1]


def main() -> None:
    # Script execution puts server/ on sys.path; the app imports from backend/
    if str(BACKEND_DIR) not in sys.path:
        sys.path.insert(0, str(BACKEND_DIR))

    from config import AppConfig  # pylint: disable=import-outside-toplevel

    load_dotenv()
    config = AppConfig.load_from_env()

    uvicorn.run(
        "server.asgi:app",
        app_dir=str(BACKEND_DIR),
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
        log_level=config.log_level.lower(),
        reload=config.env == "dev",
    )


if __name__ == "__main__":
    main()
