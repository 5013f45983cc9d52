#!/usr/bin/env python3
# main.py
"""
Entry point of the Courier Tracker API.

    python main.py
"""

import uvicorn

from courier_tracker.config import settings


def main() -> None:
    uvicorn.run(
        "courier_tracker.app:app",
        host=settings.deployment.API_HOST,
        port=settings.deployment.API_PORT,
        reload=settings.system.DEBUG,
        log_level=settings.system.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
