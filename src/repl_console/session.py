from __future__ import annotations

import os
import re
from typing import Iterable

from repl_console.debug_log import DebugLogger
from repl_console.evaluator import Evaluator
from repl_console.history import HistoryBuffer
from repl_console.surface import TextSurface
from repl_console.types import (
    CONTINUATION_PROMPT,
    PRIMARY_PROMPT,
    Edit,
    EditKind,
    EditOutcome,
    MatchMode,
    NavigationCommand,
    is_continuation,
)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_NEWLINES = ("\n", "\r", "\r\n")
_INDENT = "    "


def _is_identifier_char(c: str) -> bool:
    return c.isalnum() or c == "_"


class SessionController:
    """Input state machine for one console session.

    Everything before ``boundary`` is transcript and never changes; the text
    after it is the live line. Edits are routed through ``handle_edit``, which
    clips or redirects anything aimed at the transcript, turns newlines into
    dispatches and keeps the history scratch slot in sync with the live line.
    Lines ending in a continuation marker are collected into a pending block
    that is executed when an empty line is entered.
    """

    def __init__(
        self,
        surface: TextSurface,
        evaluator: Evaluator,
        history_length: int = 20,
        *,
        match: MatchMode | str = MatchMode.PREFIX,
        primary_prompt: str = PRIMARY_PROMPT,
        continuation_prompt: str = CONTINUATION_PROMPT,
        logger: DebugLogger | None = None,
    ):
        self.history = HistoryBuffer(history_length, match)
        self.surface = surface
        self.evaluator = evaluator
        self.primary_prompt = primary_prompt
        self.continuation_prompt = continuation_prompt
        self.logger = logger or DebugLogger()
        self._boundary = len(surface)
        self._pending = ""
        self._dispatching = False

    @property
    def boundary(self) -> int:
        return self._boundary

    @property
    def pending_block(self) -> str:
        return self._pending

    @property
    def dispatching(self) -> bool:
        return self._dispatching

    @property
    def live_line(self) -> str:
        return self.surface.text_from(self._boundary)

    # --- Prompt ---

    def start(self, banner: str = ""):
        """Write the optional banner and the first prompt."""
        if banner:
            self.surface.append(banner if banner.endswith("\n") else banner + "\n")
        self._set_prompt_at_end(self.primary_prompt)

    def _set_prompt_at_end(self, prompt: str):
        self.surface.append(prompt)
        self._boundary = len(self.surface)
        self.surface.set_caret(self._boundary)

    def interrupt(self):
        """Abandon the live line and any pending block (Ctrl+C)."""
        if self._dispatching:
            return
        self.logger.log_input("INTERRUPT", self._pending + self.live_line)
        self._pending = ""
        self.surface.append("\nKeyboardInterrupt\n")
        self.history.set_current_string("")
        self._set_prompt_at_end(self.primary_prompt)

    # --- Edits ---

    def handle_edit(self, edit: Edit) -> EditOutcome:
        """Apply an edit request to the surface, or decide what to do instead."""
        if self._dispatching:
            self.logger.log_warning(f"Edit refused during dispatch: {edit}")
            return EditOutcome.BUSY

        size = len(self.surface)
        start = max(0, min(edit.start, size))
        edit = Edit(start, max(0, min(edit.length, size - start)), edit.text)

        if edit.kind is EditKind.INSERTION:
            return self._process_insertion(edit.text, edit.start)

        start, length = edit.start, edit.length
        outcome = EditOutcome.ACCEPTED
        if start < self._boundary:
            length = max(0, edit.end - self._boundary)
            self.logger.log_input("CLIP", f"{start}..{edit.end} -> {self._boundary}")
            start = self._boundary
            outcome = EditOutcome.CLIPPED

        if edit.kind is EditKind.REPLACEMENT and _LINE_BREAK.search(edit.text):
            self._replace(start, length, "")
            if edit.text in _NEWLINES:
                # Enter over a selection is one newline, not a one-line paste
                return self._process_insertion(edit.text, start)
            self._replay_lines(edit.text, start)
            return EditOutcome.REPLAYED

        if length or edit.text:
            self._replace(start, length, edit.text)
        return outcome

    def _process_insertion(self, text: str, location: int) -> EditOutcome:
        if not text:
            return EditOutcome.REJECTED
        if location < self._boundary:
            # Typing into the transcript goes to the end of the live line instead
            self.logger.log_input("REDIRECT", text)
            self._process_insertion(text, len(self.surface))
            return EditOutcome.REDIRECTED
        if text in _NEWLINES:
            self._process_newline()
            return EditOutcome.EXECUTED
        if text == "\t":
            self.complete()
            return EditOutcome.COMPLETED
        if _LINE_BREAK.search(text):
            self._replay_lines(text, location)
            return EditOutcome.REPLAYED
        self._replace(location, 0, text)
        return EditOutcome.ACCEPTED

    def _replay_lines(self, text: str, location: int):
        """Feed pasted text through one line and one newline at a time."""
        self.surface.set_caret(location)
        for line in _LINE_BREAK.split(text):
            if line:
                self._process_insertion(line, self.surface.caret)
            self._process_insertion("\n", self.surface.caret)

    def _replace(self, start: int, length: int, text: str):
        self.surface.replace_range(start, length, text)
        self.history.set_current_string(self.live_line)

    # --- Execution ---

    def _process_newline(self):
        input_string = self.live_line
        output = "\n"
        prompt = self.primary_prompt
        self.logger.log_input("NEWLINE", input_string)

        if not input_string:
            if self._pending:
                block = self._pending
                self._pending = ""
                output += self._dispatch(block)
        elif is_continuation(input_string) or self._pending:
            self._pending += input_string + "\n"
            self.history.add_entry(input_string)
            prompt = self.continuation_prompt
        else:
            output += self._dispatch(input_string)
            self.history.add_entry(input_string)

        self.surface.append(output)
        self._set_prompt_at_end(prompt)

    def _dispatch(self, statement: str) -> str:
        self._dispatching = True
        try:
            output = self.evaluator.execute(statement)
        except Exception as e:
            # The evaluator reports errors as text; anything that escapes it is
            # still shown in the transcript rather than ending the session
            self.logger.log_warning(f"Evaluator raised {type(e).__name__}: {e}")
            output = f"{type(e).__name__}: {e}\n"
        finally:
            self._dispatching = False
        self.logger.log_eval(statement, output)
        return output

    def run_statements(self, statements: Iterable[str]) -> str:
        """Execute statements without touching the prompt or history."""
        return "".join(self._dispatch(s) for s in statements if s)

    # --- Navigation ---

    def handle_command(self, command: NavigationCommand) -> bool:
        """Run a navigation command. Returns False if it was not handled."""
        if self._dispatching or self.surface.caret < self._boundary:
            return False
        if command is NavigationCommand.RECALL_PREVIOUS:
            self._show_recalled(self.history.previous_history())
        elif command is NavigationCommand.RECALL_NEXT:
            self._show_recalled(self.history.next_history())
        elif command is NavigationCommand.PAGE_UP:
            self.surface.move_line_up()
        elif command is NavigationCommand.PAGE_DOWN:
            self.surface.move_line_down()
        elif command is NavigationCommand.MOVE_TO_START:
            self.surface.set_caret(self._boundary)
        else:
            return False
        return True

    def _show_recalled(self, text: str | None):
        if text is None:
            return
        # Bypasses _replace: the scratch slot must keep the pre-recall text
        self.surface.replace_range(self._boundary, len(self.surface) - self._boundary, text)

    # --- Completion ---

    def completions(self, start: int, length: int) -> list[str]:
        """Identifiers that start with the text in the given range, ignoring case."""
        partial = self.surface.substring(start, length)
        wanted = partial.lower()
        matches = []
        for idx, name in enumerate(self.evaluator.list_identifiers()):
            if not isinstance(name, str):
                self.logger.log_warning(
                    f"Could not get item {idx} from identifier list ({type(name).__name__})"
                )
                continue
            if len(name) >= len(partial) and name[: len(partial)].lower() == wanted:
                matches.append(name)
        return sorted(matches, key=lambda s: (s.lower(), s))

    def complete(self) -> list[str]:
        """Complete the identifier before the caret.

        A single match replaces the partial word; several matches extend it to
        their common prefix. With no partial word, indentation is inserted.
        Returns the matches for the front-end to show.
        """
        caret = self.surface.caret
        if caret < self._boundary:
            return []
        text = self.surface.text
        start = caret
        while start > self._boundary and _is_identifier_char(text[start - 1]):
            start -= 1
        if start == caret:
            self._replace(caret, 0, _INDENT)
            return []

        matches = self.completions(start, caret - start)
        if len(matches) == 1:
            replacement = matches[0]
        else:
            replacement = os.path.commonprefix(matches)
        if len(replacement) > caret - start:
            self._replace(start, caret - start, replacement)
        return matches

    def close(self):
        self.evaluator.close()
