"""Scribe - a small blog service with token auth, posts and comments."""

__version__ = "0.1.0"
