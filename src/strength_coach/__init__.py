"""Strength training analysis and pre-workout coaching."""

__version__ = "0.1.0"
