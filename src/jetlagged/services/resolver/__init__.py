"""Flight resolver HTTP service."""

from .app import build_app

__all__ = ["build_app"]
