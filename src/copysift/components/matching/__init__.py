from .aggregator import HighlightAggregator, manual_note, match_summary, matched_rows, row_summary
from .engine import MatchEngine, append_note, build_note, collect_candidates

__all__ = [
    "HighlightAggregator",
    "MatchEngine",
    "append_note",
    "build_note",
    "collect_candidates",
    "manual_note",
    "match_summary",
    "matched_rows",
    "row_summary",
]
