#!/usr/bin/env python3
"""
Entrypoint of the Courier Tracker API for containers.

Run:
    python entrypoints/entrypoint_api.py

Default port: 3000 (PORT overrides it)
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from courier_tracker.config import settings


def main() -> None:
    """Runs the API without auto-reload."""
    uvicorn.run(
        "courier_tracker.app:app",
        host=settings.deployment.API_HOST,
        port=settings.deployment.API_PORT,
        log_level=settings.system.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
