"""
Matching subpackage exposes the SAD correlation engine, score normalization
and hit selection.
"""

from .correlation import CorrelationEngine, grid_to_heatmap, validate_search_rectangle
from .engine import MatchResult, TemplateMatcher
from .errors import ConfigurationError, DegenerateRangeError, MatchingError
from .geometry import Hit, SearchRectangle, apply_offset, coords, offset
from .hits import iter_candidates, select, suppress
from .normalize import normalize

__all__ = [
    "ConfigurationError",
    "CorrelationEngine",
    "DegenerateRangeError",
    "Hit",
    "MatchResult",
    "MatchingError",
    "SearchRectangle",
    "TemplateMatcher",
    "apply_offset",
    "coords",
    "grid_to_heatmap",
    "iter_candidates",
    "normalize",
    "offset",
    "select",
    "suppress",
    "validate_search_rectangle",
]
