"""Command-line interface for ghrest.

This module provides the CLI front-end over the REST access layer.
"""

from .main import main

__all__ = ["main"]
