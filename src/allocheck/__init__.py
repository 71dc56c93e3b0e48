"""Consistency checks for client / worker / task allocation datasets."""

__version__ = "0.1.0"
