from .dedup import DuplicateClusterer

__all__ = ["DuplicateClusterer"]
