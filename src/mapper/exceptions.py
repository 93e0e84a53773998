"""Custom exceptions for world-map generation."""


class MapperError(Exception):
    """Base exception for mapper errors."""

    pass


class InvalidDimensionsError(MapperError, ValueError):
    """Raised when a requested map width or height is negative."""

    pass


class ConfigNotFoundError(MapperError, FileNotFoundError):
    """Raised when a named generator config cannot be located."""

    pass
