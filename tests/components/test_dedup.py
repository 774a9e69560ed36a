"""
Unit tests for duplicate clustering.
"""

import pytest

from copysift.components.clustering.dedup import DuplicateClusterer
from copysift.components.colors import ColorAssigner, PRESET_COLORS
from copysift.core.models import Highlight, Table
from copysift.similarity.cache import CellKey, ShingleCache, TextKey


class TestDuplicateClusterer:
    """Tests for DuplicateClusterer."""

    @pytest.fixture
    def clusterer(self):
        """Create a clusterer with the preset palette."""
        return DuplicateClusterer(ShingleCache(), ColorAssigner())

    def test_groups_fox_rows(self, clusterer, fox_table):
        """Test the three normalized-identical rows form one group."""
        groups = clusterer.cluster(fox_table, 0, 0.5)

        assert len(groups) == 1
        group = groups[0]
        assert group.rows == (0, 1, 3)
        assert group.index == 0
        assert group.column == 0
        assert group.color == PRESET_COLORS[0]
        assert group.size == 3

    def test_cluster_does_not_mutate(self, clusterer, fox_table):
        """Test cluster() only reports groups."""
        clusterer.cluster(fox_table, 0, 0.5)
        assert all(not cell.highlights for row in fox_table.rows for cell in row)

    def test_transitive_grouping(self, clusterer):
        """Test A~B and B~C group A with C even though A and C differ."""
        table = Table.from_values([["abcdefgh"], ["defghijk"], ["ghijklmn"]])
        # a-b and b-c share 3 of 9 shingles, a-c share none
        groups = clusterer.cluster(table, 0, 0.3)
        assert [g.rows for g in groups] == [(0, 1, 2)]

    def test_no_duplicates(self, clusterer):
        """Test distinct values produce no groups."""
        table = Table.from_values([["alpha"], ["bravo"], ["charlie"]])
        assert clusterer.cluster(table, 0, 0.5) == []

    def test_blank_values_skipped(self, clusterer):
        """Test empty cells never join a group."""
        table = Table.from_values([[""], ["  "], ["same text"], ["same text"]])
        groups = clusterer.cluster(table, 0, 0.0)
        assert [g.rows for g in groups] == [(2, 3)]

    def test_group_order_and_colors(self):
        """Test groups are numbered in discovery order and colors cycle."""
        clusterer = DuplicateClusterer(ShingleCache(), ColorAssigner(["#111111", "#222222"]))
        table = Table.from_values([
            ["apple pie recipe"],
            ["zebra crossing sign"],
            ["apple pie recipe!"],
            ["mountain bike tour"],
            ["Zebra crossing sign"],
            ["mountain bike tour."],
        ])

        groups = clusterer.cluster(table, 0, 0.9)

        assert [g.rows for g in groups] == [(0, 2), (1, 4), (3, 5)]
        assert [g.color for g in groups] == ["#111111", "#222222", "#111111"]

    def test_groups_follow_row_order(self, clusterer):
        """Test a late row linked early does not reorder groups or members."""
        table = Table.from_values([
            ["alpha beta gamma"],
            ["delta epsilon"],
            ["unrelated words"],
            ["Delta epsilon!"],
            ["alpha beta gamma."],
        ])
        groups = clusterer.cluster(table, 0, 0.9)
        assert [g.rows for g in groups] == [(0, 4), (1, 3)]
        assert [g.index for g in groups] == [0, 1]

    def test_uses_cell_keys(self, clusterer, fox_table):
        """Test clustering caches shingles by cell position, not by text."""
        clusterer.cluster(fox_table, 0, 0.5)
        assert CellKey(0, 0) in clusterer.cache
        assert TextKey("The quick brown fox") not in clusterer.cache

    def test_auto_dedup_writes_groups(self, clusterer, fox_table):
        """Test group members get a 100% highlight and a group note."""
        fox_table.rows[2][1].highlights.append(
            Highlight(query_id="q1", color="#4dabf7", similarity=80, query_text="old")
        )
        fox_table.rows[2][1].note = "old note"

        groups = clusterer.auto_dedup(fox_table, 0, 0.5)

        assert len(groups) == 1
        for ri in (0, 1, 3):
            cell = fox_table.rows[ri][0]
            assert len(cell.highlights) == 1
            h = cell.highlights[0]
            assert h.query_id == "auto_group_0"
            assert h.similarity == 100
            assert h.color == PRESET_COLORS[0]
            assert h.query_text == "duplicate group 1"
            assert cell.note == "duplicate group 1 (3 items)"
        # previous highlights are cleared everywhere
        assert fox_table.rows[2][1].highlights == []
        assert fox_table.rows[2][1].note == ""

    def test_auto_dedup_without_groups_leaves_table(self, clusterer):
        """Test nothing is cleared when no duplicates are found."""
        table = Table.from_values([["alpha"], ["bravo"]])
        table.rows[0][0].note = "keep me"
        assert clusterer.auto_dedup(table, 0, 0.5) == []
        assert table.rows[0][0].note == "keep me"

    def test_group_json(self, clusterer, fox_table):
        """Test the JSON form of a group."""
        group = clusterer.cluster(fox_table, 0, 0.5)[0]
        assert group.to_json() == {
            "group": 1,
            "rows": [0, 1, 3],
            "column": 0,
            "color": PRESET_COLORS[0],
            "size": 3,
        }
