from __future__ import annotations


class MeshtoneError(ValueError):
    """Base class for every failure raised by the gradient core."""


class InvalidColorFormat(MeshtoneError):
    pass


class InvalidParameter(MeshtoneError):
    pass


class UnsupportedMode(MeshtoneError):
    pass


class RasterExportError(MeshtoneError):
    """Raised when an asynchronous raster export cannot produce an image."""


__all__ = [
    "MeshtoneError",
    "InvalidColorFormat",
    "InvalidParameter",
    "UnsupportedMode",
    "RasterExportError",
]
