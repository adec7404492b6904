"""Procedural fantasy map rendering with pan/zoom."""

__version__ = "0.1.0"
