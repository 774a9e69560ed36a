"""
Duplicate clustering module.

Compares every pair of non-empty values in one column, joins pairs whose
shingle Jaccard similarity reaches the threshold with Union-Find, and
marks each resulting group of two or more rows with its own color.

Pairwise comparison is O(k^2) in the number of non-empty rows, which is
fine for pasted tables of a few thousand rows.
"""

import time
from typing import List, Optional

from loguru import logger

from ...core.interfaces import IClusterer
from ...core.models import DuplicateGroup, Highlight, Table
from ...similarity.cache import ShingleCache
from ...similarity.jaccard import jaccard
from ...similarity.union_find import UnionFind
from ..colors import ColorAssigner


class DuplicateClusterer(IClusterer):
    """Group near-duplicate rows of a single column.

    Features:
    - Exact Jaccard over character shingles for every row pair
    - Transitive grouping (A~B and B~C put A, B, C together)
    - Group colors taken from the session palette in discovery order
    """

    def __init__(
        self,
        cache: Optional[ShingleCache] = None,
        colors: Optional[ColorAssigner] = None,
    ):
        self.cache = cache if cache is not None else ShingleCache()
        self.colors = colors if colors is not None else ColorAssigner()

    def cluster(self, table: Table, column: int, threshold: float) -> List[DuplicateGroup]:
        """Find duplicate groups without touching the table."""
        start = time.perf_counter()

        entries = []
        for ri, row in enumerate(table.rows):
            if column >= len(row):
                continue
            value = row[column].value
            if value.strip():
                entries.append((ri, self.cache.for_cell(ri, column, value)))

        uf = UnionFind()
        # touch rows in order so groups come out in discovery order
        for row_index, _ in entries:
            uf.find(row_index)

        comparisons = 0
        for i in range(len(entries)):
            row_i, shingles_i = entries[i]
            for j in range(i + 1, len(entries)):
                row_j, shingles_j = entries[j]
                comparisons += 1
                if jaccard(shingles_i, shingles_j) >= threshold:
                    uf.union(row_i, row_j)

        groups = [
            DuplicateGroup(
                index=gi,
                rows=tuple(members),
                column=column,
                color=self.colors.group_color(gi),
            )
            for gi, members in enumerate(m for m in uf.groups() if len(m) > 1)
        ]

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"Clustered {len(entries)} rows in column {column} "
            f"({comparisons} comparisons, {elapsed_ms:.0f}ms)"
        )
        return groups

    def auto_dedup(self, table: Table, column: int, threshold: float) -> List[DuplicateGroup]:
        groups = self.cluster(table, column, threshold)
        if not groups:
            logger.info("No duplicates found")
            return groups

        table.clear_highlights()
        for group in groups:
            for row_index in group.rows:
                cell = table.rows[row_index][column]
                cell.highlights = [Highlight(
                    query_id=group.query_id,
                    color=group.color,
                    similarity=100,
                    query_text=group.label,
                )]
                cell.note = group.note

        total = sum(g.size for g in groups)
        logger.info(f"Found {len(groups)} duplicate groups, {total} rows")
        return groups
