import pytest

from repl_console.history import HistoryBuffer
from repl_console.types import MatchMode


def make_history(*entries, length=20, match=MatchMode.PREFIX):
    history = HistoryBuffer(length, match)
    for entry in entries:
        history.add_entry(entry)
    return history


class TestConstruction:
    def test_capacity_reserves_scratch_slot(self):
        history = HistoryBuffer(3)
        assert history.capacity == 4
        assert history.history_length == 3

    def test_starts_empty(self):
        history = HistoryBuffer()
        assert len(history) == 0
        assert history.entries() == []
        assert history.current_string == ""
        assert not history.is_recalling

    @pytest.mark.parametrize("length", [0, -1, True, "3", 2.5])
    def test_invalid_length_rejected(self, length):
        with pytest.raises(ValueError):
            HistoryBuffer(length)

    def test_invalid_match_mode_rejected(self):
        with pytest.raises(ValueError):
            HistoryBuffer(5, "fuzzy")

    def test_match_mode_from_string(self):
        assert HistoryBuffer(5, "substring").match is MatchMode.SUBSTRING


class TestAddEntry:
    def test_active_index_tracks_number_of_adds(self):
        history = HistoryBuffer(3)
        for n in range(1, 12):
            history.add_entry(f"cmd{n}")
            assert history.active_index == n % history.capacity
            assert len(history) <= history.capacity - 1

    def test_duplicates_are_kept(self):
        history = make_history("x", "x")
        assert history.entries() == ["x", "x"]
        assert len(history) == 2

    def test_add_resets_scratch_and_recall(self):
        history = make_history("abc")
        history.set_current_string("a")
        history.previous_history()
        assert history.is_recalling
        history.add_entry("def")
        assert history.current_string == ""
        assert not history.is_recalling

    def test_oldest_entry_dropped_on_wrap(self):
        history = make_history("one", "two", "three", length=2)
        assert history.entries() == ["two", "three"]
        assert len(history) == 2

    def test_empty_entries_are_stored(self):
        history = make_history("")
        assert history.entries() == [""]


class TestSetCurrentString:
    def test_mirrors_live_line(self):
        history = HistoryBuffer()
        history.set_current_string("pri")
        assert history.current_string == "pri"
        assert history.displayed_index == history.active_index

    def test_cancels_recall(self):
        history = make_history("abc")
        assert history.previous_history() == "abc"
        assert history.is_recalling
        history.set_current_string("ab")
        assert not history.is_recalling
        assert history.displayed_string == "ab"

    def test_no_match_for_unrelated_filter(self):
        history = make_history("foo", "bar")
        history.set_current_string("zz")
        assert history.previous_history() is None

    def test_no_match_for_unrelated_filter_substring(self):
        history = make_history("foo", "bar", match=MatchMode.SUBSTRING)
        history.set_current_string("zz")
        assert history.previous_history() is None


class TestUnfilteredRecall:
    def test_previous_steps_back_one_at_a_time(self):
        history = make_history("x", "y")
        assert history.previous_history() == "y"
        assert history.previous_history() == "x"
        assert history.previous_history() is None

    def test_previous_on_empty_history(self):
        history = HistoryBuffer()
        assert history.previous_history() is None
        assert history.displayed_index == history.active_index

    def test_next_returns_to_live_line(self):
        history = make_history("x", "y")
        history.previous_history()
        history.previous_history()
        assert history.next_history() == "y"
        assert history.next_history() == ""
        assert history.next_history() is None

    def test_next_without_recall(self):
        history = make_history("x")
        assert history.next_history() is None

    def test_stops_at_oldest_after_wrap(self):
        history = make_history("one", "two", "three", length=2)
        assert history.previous_history() == "three"
        assert history.previous_history() == "two"
        assert history.previous_history() is None
        assert history.displayed_string == "two"


class TestFilteredRecall:
    def test_nearest_prefix_match_first(self):
        history = make_history("aa", "ab", "ba", length=3)
        history.set_current_string("a")
        assert history.previous_history() == "ab"
        assert history.previous_history() == "aa"
        assert history.previous_history() is None

    def test_substring_mode_matches_anywhere(self):
        history = make_history("aa", "ab", "ba", length=3, match=MatchMode.SUBSTRING)
        history.set_current_string("a")
        assert history.previous_history() == "ba"
        assert history.previous_history() == "ab"
        assert history.previous_history() == "aa"
        assert history.previous_history() is None

    def test_match_is_case_sensitive(self):
        history = make_history("Print", "print")
        history.set_current_string("P")
        assert history.previous_history() == "Print"
        assert history.previous_history() is None

    def test_unoccupied_slot_ends_scan(self):
        history = make_history("ab", length=5)
        history.set_current_string("a")
        assert history.previous_history() == "ab"
        assert history.previous_history() is None

    def test_next_skips_non_matching(self):
        history = make_history("ab", "zz", "ac")
        history.set_current_string("a")
        assert history.previous_history() == "ac"
        assert history.previous_history() == "ab"
        assert history.next_history() == "ac"
        assert history.next_history() == "a"
        assert history.next_history() is None

    def test_filter_survives_recall(self):
        history = make_history("ab", "ac")
        history.set_current_string("a")
        history.previous_history()
        assert history.current_string == "a"

    def test_filtered_recall_after_wrap(self):
        history = make_history("a1", "b2", "a3", "a4", length=3)
        history.set_current_string("a")
        assert history.previous_history() == "a4"
        assert history.previous_history() == "a3"
        assert history.previous_history() is None


class TestRecallSymmetry:
    @pytest.mark.parametrize("n", [1, 2, 3, 5])
    def test_filtered_round_trip(self, n):
        history = make_history("a1", "b2", "a3")
        history.set_current_string("a")
        before = history.displayed_string
        for _ in range(n):
            history.previous_history()
        for _ in range(n):
            history.next_history()
        assert history.displayed_string == before

    @pytest.mark.parametrize("n", [1, 2, 4])
    def test_unfiltered_round_trip(self, n):
        history = make_history("x", "y", "z", length=3)
        before = history.displayed_string
        for _ in range(n):
            history.previous_history()
        for _ in range(n):
            history.next_history()
        assert history.displayed_string == before
