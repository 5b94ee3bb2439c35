import time
from dataclasses import dataclass
from enum import Enum

PRIMARY_PROMPT = ">>> "
CONTINUATION_PROMPT = "... "

# A line whose last character is one of these opens a multi-line block
CONTINUATION_MARKERS = (":", "\\")


class EditKind(Enum):
    INSERTION = "insertion"
    DELETION = "deletion"
    REPLACEMENT = "replacement"


class EditOutcome(Enum):
    """What the session controller did with an edit request."""

    ACCEPTED = "accepted"  # applied in place
    CLIPPED = "clipped"  # range truncated to start at the boundary
    REDIRECTED = "redirected"  # insertion moved to the end of the transcript
    REPLAYED = "replayed"  # multi-line text fed through line by line
    EXECUTED = "executed"  # newline processed
    COMPLETED = "completed"  # tab completion ran
    REJECTED = "rejected"  # nothing to do
    BUSY = "busy"  # a dispatch is still running


class NavigationCommand(Enum):
    RECALL_PREVIOUS = "recall_previous"
    RECALL_NEXT = "recall_next"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    MOVE_TO_START = "move_to_start"


class MatchMode(Enum):
    PREFIX = "prefix"
    SUBSTRING = "substring"


@dataclass(frozen=True)
class Edit:
    """A request to replace `length` characters at `start` with `text`."""

    start: int
    length: int
    text: str

    @property
    def kind(self) -> EditKind:
        if self.length == 0:
            return EditKind.INSERTION
        if not self.text:
            return EditKind.DELETION
        return EditKind.REPLACEMENT

    @property
    def end(self) -> int:
        return self.start + self.length


def is_continuation(line: str) -> bool:
    return bool(line) and line[-1] in CONTINUATION_MARKERS


def ts_str(t: float) -> str:
    lt = time.localtime(t)
    return time.strftime("%H:%M:%S", lt)


def safe_text_preview(s: str, max_len: int = 120) -> str:
    # Keep control characters visible in single-line log entries
    s = s.replace("\r", "\\r").replace("\n", "\\n").replace("\t", "\\t")
    if len(s) > max_len:
        s = s[:max_len] + "\u2026"
    return s
