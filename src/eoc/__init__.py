"""
Core package for locating a small object image inside a larger field image.
"""

from .matching.engine import MatchResult, TemplateMatcher
from .matching.errors import ConfigurationError, DegenerateRangeError, MatchingError
from .matching.geometry import Hit, SearchRectangle

__all__ = [
    "ConfigurationError",
    "DegenerateRangeError",
    "Hit",
    "MatchResult",
    "MatchingError",
    "SearchRectangle",
    "TemplateMatcher",
]
