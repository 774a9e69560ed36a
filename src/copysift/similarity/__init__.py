"""
Similarity primitives: normalization, shingling, Jaccard and the shingle cache.
"""

from copysift.similarity.cache import CacheKey, CellKey, ShingleCache, TextKey
from copysift.similarity.jaccard import jaccard, to_percent
from copysift.similarity.text_processing import DEFAULT_SHINGLE_SIZE, normalize, shingles
from copysift.similarity.union_find import UnionFind

__all__ = [
    "CacheKey",
    "CellKey",
    "DEFAULT_SHINGLE_SIZE",
    "ShingleCache",
    "TextKey",
    "UnionFind",
    "jaccard",
    "normalize",
    "shingles",
    "to_percent",
]
