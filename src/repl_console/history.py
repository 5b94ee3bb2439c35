from __future__ import annotations

from repl_console.types import MatchMode


class HistoryBuffer:
    """Fixed-size ring of input lines with filtered up/down recall.

    The ring holds ``length + 1`` slots. The slot at ``active_index`` is a
    scratch copy of the line being typed; the others hold committed entries,
    overwritten oldest first once the ring wraps. ``displayed_index`` points at
    whatever recall is currently showing and falls back to ``active_index``
    whenever the live line is edited.

    Recall is filtered by the scratch text: while browsing, only entries that
    match what was typed before browsing started are offered.

    ``match`` defaults to ``MatchMode.PREFIX`` (entries starting with the
    filter); ``MatchMode.SUBSTRING`` offers any entry containing it.
    """

    def __init__(self, length: int = 20, match: MatchMode | str = MatchMode.PREFIX):
        if isinstance(length, bool) or not isinstance(length, int) or length < 1:
            raise ValueError(f"History length must be a positive integer, got {length!r}")
        self._capacity = length + 1
        self._slots: list[str] = [""] * self._capacity
        self._occupied: list[bool] = [False] * self._capacity
        self._active = 0
        self._displayed = 0
        self._match = MatchMode(match)
        self.set_current_string("")

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def history_length(self) -> int:
        return self._capacity - 1

    @property
    def match(self) -> MatchMode:
        return self._match

    @property
    def active_index(self) -> int:
        return self._active

    @property
    def displayed_index(self) -> int:
        return self._displayed

    @property
    def current_string(self) -> str:
        """The scratch copy of the live line (also the recall filter)."""
        return self._slots[self._active]

    @property
    def displayed_string(self) -> str:
        return self._slots[self._displayed]

    @property
    def is_recalling(self) -> bool:
        return self._displayed != self._active

    def __len__(self) -> int:
        # The scratch slot is always occupied and is not a committed entry
        return sum(self._occupied) - 1

    def entries(self) -> list[str]:
        """Committed entries, oldest first."""
        result = []
        i = (self._active + 1) % self._capacity
        while i != self._active:
            if self._occupied[i]:
                result.append(self._slots[i])
            i = (i + 1) % self._capacity
        return result

    def add_entry(self, text: str):
        """Commit `text` and open a fresh scratch slot after it.

        Duplicates are kept; once the ring is full the oldest entry is
        overwritten by the new scratch slot.
        """
        self._slots[self._active] = text
        self._occupied[self._active] = True
        self._active = (self._active + 1) % self._capacity
        self.set_current_string("")

    def set_current_string(self, text: str):
        """Mirror the live line into the scratch slot and end any recall."""
        self._slots[self._active] = text
        self._occupied[self._active] = True
        self._displayed = self._active

    def _matches(self, entry: str, pattern: str) -> bool:
        if not pattern:
            return True
        if self._match is MatchMode.PREFIX:
            return entry.startswith(pattern)
        return pattern in entry

    def previous_history(self) -> str | None:
        """Step to an older entry. Returns None when there is none to show."""
        oldest = (self._active + 1) % self._capacity
        if self._displayed == oldest:
            return None
        pattern = self._slots[self._active]
        i = (self._displayed - 1) % self._capacity
        if not pattern:
            if not self._occupied[i]:
                return None
            self._displayed = i
            return self._slots[i]
        while self._occupied[i]:
            entry = self._slots[i]
            if self._matches(entry, pattern):
                self._displayed = i
                return entry
            if i == oldest:
                break
            i = (i - 1) % self._capacity
        return None

    def next_history(self) -> str | None:
        """Step to a newer entry.

        Walking past the newest match lands back on the live line, whose
        text is returned. Returns None when already at the live line.
        """
        if self._displayed == self._active:
            return None
        pattern = self._slots[self._active]
        i = (self._displayed + 1) % self._capacity
        if not pattern:
            if not self._occupied[i]:
                return None
            self._displayed = i
            return self._slots[i]
        while i != self._active:
            if self._occupied[i] and self._matches(self._slots[i], pattern):
                self._displayed = i
                return self._slots[i]
            i = (i + 1) % self._capacity
        self._displayed = self._active
        return pattern
