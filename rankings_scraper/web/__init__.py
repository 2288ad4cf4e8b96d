"""HTTP API over the rankings pipeline."""

from .server import create_app, start_web_server

__all__ = ["create_app", "start_web_server"]
