"""Exceptions raised by map generation and its hosts."""


class MapCanvasError(Exception):
    """Base class for all py_mapcanvas errors."""


class InvalidMapSizeError(MapCanvasError, ValueError):
    """Requested map size is not a positive integer pair within limits."""

    def __init__(self, width, height, reason: str):
        self.width = width
        self.height = height
        self.reason = reason
        super().__init__(f"Invalid map size {width!r}x{height!r}: {reason}")


class HostUnavailableError(MapCanvasError, RuntimeError):
    """A drawing surface or interactive backend the host needs is missing."""
