"""CLI package for picoprep.

This package contains the Typer application.
"""

from picoprep.cli.main import app

__all__ = ["app"]
