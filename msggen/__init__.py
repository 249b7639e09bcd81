"""Resolve message and service definitions and generate interfaces."""

__version__ = "0.1.0"
