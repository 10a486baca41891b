"""Command line interface for lifepulse."""

from lifepulse.cli.main import lifepulse, main

__all__ = ["lifepulse", "main"]
