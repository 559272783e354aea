"""Clip generator for YouTube videos and channels."""

__version__ = "0.1.0"

__all__ = ["__version__"]
