"""Command-line interface for forcedel."""

from forcedel.cli.main import app

__all__ = ["app"]
