"""
Courier CLI Module

Send HTTP requests from the command line.
"""

from .main import build_request, cli, main

__all__ = [
    "build_request",
    "cli",
    "main",
]
