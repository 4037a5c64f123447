"""Command-line front-end for the HipChat REST API v2."""

__version__ = "0.1.0"
