"""Exceptions for cube map container decoding."""


class DirectDrawSurfaceError(Exception):
    """Raised when a DirectDraw Surface file cannot be decoded."""

    pass
