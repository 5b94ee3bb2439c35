from __future__ import annotations

import curses
from typing import TYPE_CHECKING

from repl_console.debug_log import DebugLogger
from repl_console.session import SessionController
from repl_console.types import Edit, NavigationCommand

if TYPE_CHECKING:
    from repl_console.config import Config

PROMPT_PAIR = 1
STATUS_PAIR = 2

_ENTER_KEYS = (curses.KEY_ENTER, 10, 13)
_BACKSPACE_KEYS = (curses.KEY_BACKSPACE, 127, 8)


def wrap_rows(lines: list[str], width: int) -> list[tuple[int, int, str]]:
    """Split logical lines into screen rows of at most `width` characters.

    Returns (line index, column offset, text) for each row; empty lines
    still take one row.
    """
    width = max(1, width)
    rows = []
    for idx, line in enumerate(lines):
        if not line:
            rows.append((idx, 0, ""))
            continue
        for col in range(0, len(line), width):
            rows.append((idx, col, line[col : col + width]))
    return rows


def caret_row_col(text: str, caret: int, width: int) -> tuple[int, int]:
    """Screen (row, col) of `caret` once `text` is wrapped to `width`."""
    width = max(1, width)
    row = 0
    line_start = 0
    for line in text[:caret].split("\n")[:-1]:
        row += max(1, -(-len(line) // width))
        line_start += len(line) + 1
    col = caret - line_start
    return row + col // width, col % width


class ConsoleUI:
    """curses front-end: draws the transcript and turns keys into session input."""

    def __init__(self, stdscr, controller: SessionController,
                 debug_logger: DebugLogger | None = None,
                 config: "Config | None" = None, color: bool = True):
        self.stdscr = stdscr
        self.controller = controller
        self.surface = controller.surface
        self.debug_logger = debug_logger
        self.config = config
        self.color_enabled = color and (config.ui.color if config else True)
        self.max_completions = config.ui.max_completions if config else 40
        self.prompts = (controller.primary_prompt, controller.continuation_prompt)

        self.status = "Tab complete | Up/Down history | Ctrl+C cancel | Ctrl+D quit | F2 debug"
        self.completion_hint = ""

        curses.curs_set(1)
        if self.color_enabled:
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(PROMPT_PAIR, curses.COLOR_CYAN, -1)
            curses.init_pair(STATUS_PAIR, curses.COLOR_BLACK, curses.COLOR_WHITE)
        self.stdscr.keypad(True)

    # --- Drawing ---

    def _prompt_len(self, line: str) -> int:
        for prompt in self.prompts:
            if line.startswith(prompt):
                return len(prompt)
        return 0

    def draw(self):
        self.stdscr.erase()
        h, w = self.stdscr.getmaxyx()
        out_h = max(1, h - 1)
        width = max(1, w - 1)

        rows = wrap_rows(self.surface.lines(), width)
        caret_row, caret_col = caret_row_col(self.surface.text, self.surface.caret, width)

        # Pin to the bottom unless the caret has moved above the visible rows
        top = max(0, len(rows) - out_h)
        if caret_row < top:
            top = caret_row
        elif caret_row >= top + out_h:
            top = caret_row - out_h + 1

        for y, (_, col, text) in enumerate(rows[top : top + out_h]):
            try:
                plen = self._prompt_len(text) if col == 0 and self.color_enabled else 0
                if plen:
                    self.stdscr.addnstr(y, 0, text[:plen], width, curses.color_pair(PROMPT_PAIR))
                    self.stdscr.addnstr(y, plen, text[plen:], max(0, width - plen))
                else:
                    self.stdscr.addnstr(y, 0, text, width)
            except curses.error:
                pass

        status_text = self.completion_hint or self.status
        if self.controller.pending_block:
            status_text += " | BLOCK"
        if self.controller.history.is_recalling:
            status_text += " | HIST"
        if self.debug_logger and self.debug_logger.enabled:
            status_text += " | DBG"
        attr = curses.color_pair(STATUS_PAIR) if self.color_enabled else curses.A_REVERSE
        try:
            self.stdscr.addnstr(h - 1, 0, status_text.ljust(width), width, attr)
        except curses.error:
            pass

        try:
            self.stdscr.move(caret_row - top, caret_col)
        except curses.error:
            pass
        self.stdscr.refresh()

    # --- Input ---

    def _edit(self, start: int, length: int, text: str):
        self.controller.handle_edit(Edit(start, length, text))

    def _navigate(self, command: NavigationCommand, fallback):
        # Outside the live line the keys just move the caret
        if not self.controller.handle_command(command):
            fallback()

    def _show_completions(self, matches: list[str]):
        if len(matches) > 1:
            shown = matches[: self.max_completions]
            more = len(matches) - len(shown)
            self.completion_hint = "  ".join(shown) + (f"  (+{more})" if more > 0 else "")

    def handle_key(self, ch: int) -> bool:
        """Process one key. Returns True when the session should end."""
        if ch == -1:
            return False
        self.completion_hint = ""
        surface = self.surface
        caret = surface.caret

        if ch == curses.KEY_F2 and self.debug_logger:
            self.debug_logger.toggle()
            return False

        if ch in _ENTER_KEYS:
            self._edit(caret, 0, "\n")
        elif ch == 9:  # Tab
            if caret < self.controller.boundary:
                self._edit(caret, 0, "\t")
            else:
                self._show_completions(self.controller.complete())
        elif ch == curses.KEY_UP:
            self._navigate(NavigationCommand.RECALL_PREVIOUS, surface.move_line_up)
        elif ch == curses.KEY_DOWN:
            self._navigate(NavigationCommand.RECALL_NEXT, surface.move_line_down)
        elif ch == curses.KEY_PPAGE:
            self._navigate(NavigationCommand.PAGE_UP, surface.move_line_up)
        elif ch == curses.KEY_NPAGE:
            self._navigate(NavigationCommand.PAGE_DOWN, surface.move_line_down)
        elif ch in (curses.KEY_HOME, 1):  # Home / Ctrl+A
            self._navigate(NavigationCommand.MOVE_TO_START,
                           lambda: surface.set_caret(surface.line_start(caret)))
        elif ch in (curses.KEY_END, 5):  # End / Ctrl+E
            surface.move_end()
        elif ch == curses.KEY_LEFT:
            surface.move_left()
        elif ch == curses.KEY_RIGHT:
            surface.move_right()
        elif ch in _BACKSPACE_KEYS:
            if caret > 0:
                self._edit(caret - 1, 1, "")
        elif ch == curses.KEY_DC:
            self._edit(caret, 1, "")
        elif ch == 4:  # Ctrl+D
            if not self.controller.live_line and not self.controller.pending_block:
                return True
            self._edit(caret, 1, "")
        elif ch == 3:  # Ctrl+C when the terminal is in raw mode
            self.controller.interrupt()
        elif ch == 23:  # Ctrl+W
            start = surface.word_start_before(caret)
            self._edit(start, caret - start, "")
        elif ch == 21:  # Ctrl+U
            start = self.controller.boundary
            if caret > start:
                self._edit(start, caret - start, "")
        elif ch == 11:  # Ctrl+K
            self._edit(caret, len(surface) - caret, "")
        elif ch >= 256:
            # Ctrl+Left/Right key codes vary by terminal; check keyname
            try:
                kn = curses.keyname(ch).decode("ascii", errors="ignore")
            except (ValueError, AttributeError):
                kn = ""
            if kn == "kLFT5":
                surface.set_caret(surface.word_start_before(caret))
            elif kn == "kRIT5":
                surface.set_caret(surface.word_end_after(caret))
        elif 0 <= ch < 256:
            c = chr(ch)
            if c.isprintable():
                self._edit(caret, 0, c)
        return False
