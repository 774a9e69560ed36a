from .clustering import DuplicateClusterer
from .colors import PRESET_COLORS, ColorAssigner, contrast_color
from .matching import HighlightAggregator, MatchEngine, row_summary

__all__ = [
    "PRESET_COLORS",
    "ColorAssigner",
    "DuplicateClusterer",
    "HighlightAggregator",
    "MatchEngine",
    "contrast_color",
    "row_summary",
]
