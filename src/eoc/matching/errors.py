from __future__ import annotations


class MatchingError(Exception):
    """
    Base class for failures raised by the matching pipeline.
    """


class ConfigurationError(MatchingError, ValueError):
    """
    Search rectangle is empty or would place the object outside the field.
    """


class DegenerateRangeError(MatchingError):
    """
    Raw score grid has no spread (max <= min), so it cannot be normalized.
    """

    def __init__(self, minimum: float, maximum: float) -> None:
        super().__init__(f"score range is degenerate: min={minimum!r}, max={maximum!r}")
        self.minimum = minimum
        self.maximum = maximum


__all__ = ["ConfigurationError", "DegenerateRangeError", "MatchingError"]
