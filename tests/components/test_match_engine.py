"""
Unit tests for the single-query match engine.
"""

import pytest

from copysift.components.matching.engine import (
    MatchEngine,
    append_note,
    build_note,
    collect_candidates,
)
from copysift.core.models import Cell, Highlight, Query, SearchMode, Table
from copysift.similarity.cache import ShingleCache, TextKey


class TestCollectCandidates:
    """Tests for collect_candidates()."""

    def test_single_column(self, fox_table):
        """Test only the selected column is collected."""
        candidates = collect_candidates(fox_table, 1)
        assert [c.column for c in candidates] == [1, 1, 1, 1]
        assert candidates[0].text == "A-1"

    def test_all_columns(self, fox_table):
        """Test "all" collects every non-empty cell in row-major order."""
        candidates = collect_candidates(fox_table, "all")
        assert len(candidates) == 8
        assert (candidates[0].row, candidates[0].column) == (0, 0)
        assert (candidates[1].row, candidates[1].column) == (0, 1)

    def test_skips_blank_cells_and_trims(self):
        """Test whitespace-only cells are skipped and text is trimmed."""
        table = Table.from_values([["  padded  "], ["   "], [""]])
        candidates = collect_candidates(table, 0)
        assert len(candidates) == 1
        assert candidates[0].text == "padded"


class TestNotes:
    """Tests for note fragments."""

    def test_build_note_contains(self):
        """Test contains mode notes name the query."""
        assert build_note(Query(text="fox"), SearchMode.CONTAINS, 100) == "matched fox"

    def test_build_note_similar(self):
        """Test similar mode notes carry the percentage."""
        assert build_note(Query(text="fox"), SearchMode.SIMILAR, 41) == "similar 41% - fox"

    def test_build_note_uses_label(self):
        """Test the label combines query text and note text."""
        query = Query(text="fox", note_text="animal")
        assert build_note(query, SearchMode.CONTAINS) == "matched EN:fox | NOTE:animal"

    def test_append_note(self):
        """Test fragments are joined and repeated labels skipped."""
        cell = Cell(value="x")
        append_note(cell, "matched fox", "fox")
        append_note(cell, "matched dog", "dog")
        append_note(cell, "matched fox", "fox")
        assert cell.note == "matched fox | matched dog"


class TestMatchEngine:
    """Tests for MatchEngine."""

    @pytest.fixture
    def engine(self):
        """Create an engine with a fresh cache."""
        return MatchEngine(ShingleCache())

    def test_similar_mode(self, engine, fox_table):
        """Test shingle Jaccard search finds the three fox rows."""
        query = Query(text="brown fox", color="#4dabf7")
        result = engine.match(fox_table, query, 0, SearchMode.SIMILAR, 0.3)

        assert result.matched_row_count == 3
        assert result.query_id == query.id
        for ri in (0, 1, 3):
            cell = result.table.rows[ri][0]
            assert len(cell.highlights) == 1
            h = cell.highlights[0]
            assert h.query_id == query.id
            assert h.color == "#4dabf7"
            assert h.similarity == 41
            assert h.query_text == "brown fox"
            assert cell.note == "similar 41% - brown fox"
        assert result.table.rows[2][0].highlights == []

    def test_similar_threshold_excludes(self, engine, fox_table):
        """Test a threshold above the similarity matches nothing."""
        result = engine.match(fox_table, Query(text="brown fox"), 0, SearchMode.SIMILAR, 0.5)
        assert result.matched_row_count == 0

    def test_threshold_is_inclusive(self, engine):
        """Test a similarity exactly at the threshold matches."""
        table = Table.from_values([["abce"]])
        result = engine.match(table, Query(text="abcd"), 0, SearchMode.SIMILAR, 1 / 3)
        assert result.matched_row_count == 1
        assert result.table.rows[0][0].highlights[0].similarity == 33

    def test_per_query_threshold_overrides(self, engine, fox_table):
        """Test a query's own threshold wins over the global one."""
        query = Query(text="brown fox", threshold=0.3)
        result = engine.match(fox_table, query, 0, SearchMode.SIMILAR, 0.9)
        assert result.matched_row_count == 3

    def test_contains_mode(self, engine, fox_table):
        """Test case-insensitive substring search scores 100."""
        query = Query(text="QUICK")
        result = engine.match(fox_table, query, 0, SearchMode.CONTAINS)

        assert result.matched_row_count == 3
        cell = result.table.rows[3][0]
        assert cell.highlights[0].similarity == 100
        assert cell.note == "matched QUICK"

    def test_mode_accepts_string(self, engine, fox_table):
        """Test the mode may be given by value."""
        result = engine.match(fox_table, Query(text="fox"), 0, "contains")
        assert result.matched_row_count == 3

    def test_all_columns_counts_rows_once(self, engine):
        """Test a row with several matching cells counts once."""
        table = Table.from_values([["fox one", "fox two"], ["dog", "cat"]])
        result = engine.match(table, Query(text="fox"), "all", SearchMode.CONTAINS)
        assert result.matched_row_count == 1
        assert len(result.table.rows[0][0].highlights) == 1
        assert len(result.table.rows[0][1].highlights) == 1

    def test_input_table_untouched(self, engine, fox_table):
        """Test matching works on a copy."""
        engine.match(fox_table, Query(text="brown fox"), 0, SearchMode.SIMILAR, 0.3)
        assert all(not cell.highlights for row in fox_table.rows for cell in row)

    def test_rerun_replaces_own_highlights(self, engine, fox_table):
        """Test re-running a query does not stack highlights or notes."""
        query = Query(text="fox")
        first = engine.match(fox_table, query, 0, SearchMode.CONTAINS)
        second = engine.match(first.table, query, 0, SearchMode.CONTAINS)

        cell = second.table.rows[0][0]
        assert len(cell.highlights) == 1
        assert cell.note == "matched fox"

    def test_keeps_other_query_highlights(self, engine, fox_table):
        """Test a query's run leaves other queries' highlights in place."""
        first = engine.match(fox_table, Query(text="quick"), 0, SearchMode.CONTAINS)
        second = engine.match(first.table, Query(text="fox"), 0, SearchMode.CONTAINS)

        cell = second.table.rows[0][0]
        assert [h.query_text for h in cell.highlights] == ["quick", "fox"]
        assert cell.note == "matched quick | matched fox"

    def test_empty_query_is_noop(self, engine, fox_table):
        """Test a blank query returns the table unchanged."""
        result = engine.match(fox_table, Query(text="   "), 0, SearchMode.CONTAINS)
        assert result.table is fox_table
        assert result.matched_row_count == 0

    def test_empty_table_is_noop(self, engine):
        """Test an empty table matches nothing."""
        table = Table()
        result = engine.match(table, Query(text="fox"))
        assert result.table is table
        assert result.matched_row_count == 0

    def test_uses_cache(self, engine, fox_table):
        """Test query and cell shingles are memoized by text."""
        engine.match(fox_table, Query(text="brown fox"), 0, SearchMode.SIMILAR, 0.3)
        assert TextKey("brown fox") in engine.cache
        assert TextKey("The quick brown fox") in engine.cache

    def test_deterministic(self, engine, fox_table):
        """Test two runs with identical inputs give identical highlights."""
        query = Query(text="brown fox")
        a = engine.match(fox_table, query, "all", SearchMode.SIMILAR, 0.3)
        b = engine.match(fox_table, query, "all", SearchMode.SIMILAR, 0.3)
        assert a.table == b.table

    def test_does_not_touch_duplicate_group_highlights(self, engine, fox_table):
        """Test highlights from other sources survive a query run."""
        fox_table.rows[2][0].highlights.append(
            Highlight(query_id="auto_group_0", color="#ff6b6b", similarity=100, query_text="duplicate group 1")
        )
        result = engine.match(fox_table, Query(text="fox"), 0, SearchMode.CONTAINS)
        assert result.table.rows[2][0].highlights[0].query_id == "auto_group_0"
