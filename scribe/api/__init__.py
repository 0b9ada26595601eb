"""HTTP API for the scribe service."""

from scribe.api.app import create_app

__all__ = ["create_app"]
