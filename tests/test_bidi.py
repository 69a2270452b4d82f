"""Unit tests for unitext2path.shaping.bidi.

Tests cover run resolution with a fixed left-to-right paragraph, run
partitioning, visual ordering (rule L2 at run granularity) and per-cluster
reversal inside rtl runs.
"""

import pytest

from unitext2path.shaping.bidi import (
    BidiRun,
    Direction,
    embedding_levels,
    resolve,
    runs_from_levels,
    visual_clusters,
    visual_order,
)


class TestResolve:
    """Tests for resolve() and embedding_levels()."""

    def test_empty_text_has_no_runs(self) -> None:
        assert resolve("") == []
        assert embedding_levels("") == []

    def test_latin_is_one_ltr_run(self) -> None:
        runs = resolve("Hello world")
        assert len(runs) == 1
        assert runs[0].direction is Direction.LTR
        assert runs[0].level == 0

    def test_hebrew_is_one_rtl_run(self) -> None:
        """Paragraph stays ltr; the Hebrew word is embedded at level 1."""
        runs = resolve("שלום")
        assert len(runs) == 1
        assert runs[0].is_rtl
        assert runs[0].level == 1

    def test_mixed_text_splits_by_direction(self) -> None:
        runs = resolve("abc שלום def")
        assert [r.text for r in runs] == ["abc ", "שלום", " def"]
        assert [r.direction for r in runs] == [Direction.LTR, Direction.RTL, Direction.LTR]

    def test_neutral_between_rtl_letters_is_rtl(self) -> None:
        """Punctuation between two rtl letters joins the rtl run."""
        runs = resolve("ab מ!ש")
        assert runs[-1].text == "מ!ש"
        assert runs[-1].is_rtl

    @pytest.mark.parametrize("text", ["abc שלום def", "مرحبا 123 world", "a\u202bb\u202cc", ""])
    def test_runs_partition_the_text(self, text: str) -> None:
        """Concatenating the runs gives back the input, with contiguous offsets."""
        runs = resolve(text)
        assert "".join(r.text for r in runs) == text
        offset = 0
        for run in runs:
            assert run.start == offset
            offset = run.end

    def test_levels_cover_explicit_formatting_characters(self) -> None:
        """Characters removed by rule X9 still get a level."""
        levels = embedding_levels("a\u202bb\u202cc")
        assert len(levels) == 5
        assert levels[0] == 0
        assert levels[-1] == 0
        assert levels[2] >= 1


class TestRunsFromLevels:
    """Tests for runs_from_levels()."""

    def test_same_parity_levels_merge(self) -> None:
        """Levels 1 and 3 are both rtl; the run keeps the lowest level."""
        runs = runs_from_levels("abcd", [0, 1, 3, 0])
        assert [r.text for r in runs] == ["a", "bc", "d"]
        assert runs[1].level == 1

    def test_length_mismatch_raises(self) -> None:
        with pytest.raises(ValueError):
            runs_from_levels("abc", [0, 0])


class TestVisualOrder:
    """Tests for visual_order() and visual_clusters()."""

    @staticmethod
    def _run(name: str, level: int) -> BidiRun:
        return BidiRun(name, Direction.from_level(level), 0, level)

    def test_all_ltr_keeps_logical_order(self) -> None:
        runs = [self._run("a", 0), self._run("b", 0)]
        assert visual_order(runs) == runs

    def test_single_rtl_run_stays_in_place(self) -> None:
        runs = [self._run("a", 0), self._run("b", 1), self._run("c", 0)]
        assert [r.text for r in visual_order(runs)] == ["a", "b", "c"]

    def test_adjacent_rtl_runs_swap(self) -> None:
        runs = [self._run("a", 0), self._run("b", 1), self._run("c", 2), self._run("d", 1), self._run("e", 0)]
        assert [r.text for r in visual_order(runs)] == ["a", "d", "c", "b", "e"]

    def test_visual_clusters_reverses_rtl(self) -> None:
        clusters = ["a", "b\u0301", "c"]
        assert visual_clusters(clusters, Direction.RTL) == ["c", "b\u0301", "a"]
        assert visual_clusters(clusters, Direction.LTR) == clusters

    def test_direction_from_level(self) -> None:
        assert Direction.from_level(0) is Direction.LTR
        assert Direction.from_level(1) is Direction.RTL
        assert Direction.from_level(2) is Direction.LTR
