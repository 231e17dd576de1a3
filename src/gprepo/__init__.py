"""Flatten a git working tree into a single framed text stream."""

__version__ = "0.1.0"
