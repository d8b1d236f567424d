"""Flatten a project tree into a single text summary."""

__version__ = "0.1.0"
