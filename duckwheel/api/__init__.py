"""HTTP API for DuckWheel."""

from .app import build_router, create_app

__all__ = ["build_router", "create_app"]
