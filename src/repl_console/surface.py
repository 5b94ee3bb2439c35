class TextSurface:
    """Plain-text transcript with a caret.

    The session controller decides which edits are allowed; this class only
    stores the text and applies what it is told. All offsets are clamped to
    the current text so out-of-range requests never raise.
    """

    def __init__(self, text: str = ""):
        self._text = text
        self._caret = len(text)

    @property
    def text(self) -> str:
        return self._text

    @property
    def caret(self) -> int:
        return self._caret

    def __len__(self) -> int:
        return len(self._text)

    def _clamp(self, pos: int) -> int:
        return max(0, min(pos, len(self._text)))

    def substring(self, start: int, length: int) -> str:
        start = self._clamp(start)
        return self._text[start : self._clamp(start + max(0, length))]

    def text_from(self, pos: int) -> str:
        return self._text[self._clamp(pos) :]

    def append(self, text: str):
        """Append text at the end. The caret stays where it was."""
        self._text += text

    def replace_range(self, start: int, length: int, text: str):
        """Replace `length` characters at `start` and leave the caret after `text`."""
        start = self._clamp(start)
        end = self._clamp(start + max(0, length))
        self._text = self._text[:start] + text + self._text[end:]
        self._caret = start + len(text)

    def set_caret(self, pos: int):
        self._caret = self._clamp(pos)

    def move_left(self):
        if self._caret > 0:
            self._caret -= 1

    def move_right(self):
        if self._caret < len(self._text):
            self._caret += 1

    def move_end(self):
        self._caret = len(self._text)

    def line_start(self, pos: int) -> int:
        return self._text.rfind("\n", 0, self._clamp(pos)) + 1

    def move_line_up(self):
        """Move the caret to the same column on the previous line."""
        start = self.line_start(self._caret)
        if start == 0:
            self._caret = 0
            return
        column = self._caret - start
        prev_start = self.line_start(start - 1)
        self._caret = min(prev_start + column, start - 1)

    def move_line_down(self):
        """Move the caret to the same column on the next line."""
        start = self.line_start(self._caret)
        next_start = self._text.find("\n", self._caret)
        if next_start == -1:
            self._caret = len(self._text)
            return
        next_start += 1
        next_end = self._text.find("\n", next_start)
        if next_end == -1:
            next_end = len(self._text)
        self._caret = min(next_start + (self._caret - start), next_end)

    def word_start_before(self, pos: int) -> int:
        """Offset of the start of the word before `pos` (Ctrl+W semantics)."""
        pos = self._clamp(pos)
        # Skip separators going left
        while pos > 0 and not self._text[pos - 1].isalnum():
            pos -= 1
        # Skip word characters going left
        while pos > 0 and self._text[pos - 1].isalnum():
            pos -= 1
        return pos

    def word_end_after(self, pos: int) -> int:
        """Offset of the end of the word after `pos`."""
        pos = self._clamp(pos)
        length = len(self._text)
        while pos < length and not self._text[pos].isalnum():
            pos += 1
        while pos < length and self._text[pos].isalnum():
            pos += 1
        return pos

    def lines(self) -> list[str]:
        return self._text.split("\n")
