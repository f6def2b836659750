"""Command line interface for attrmap."""

from .app import app

__all__ = ["app"]
