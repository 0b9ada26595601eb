"""
Scribe - main entry point.

Runs the API under uvicorn using host/port from settings.
"""

from __future__ import annotations

import uvicorn

from scribe.api import create_app
from scribe.config import get_settings


def main():
    """Main entry point."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
