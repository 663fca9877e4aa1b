"""
CLI module for csa-scan.

Provides command-line interface components with a thin CLI layer.
"""
from csascan.cli.app import app as _app

# Export app function for pyproject.toml entry point
def app():
    """Entry point function for pyproject.toml scripts."""
    _app()

__all__ = ['app']
