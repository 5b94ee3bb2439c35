from __future__ import annotations

import builtins
import io
import sys
import traceback
from contextlib import redirect_stderr, redirect_stdout


class Evaluator:
    """Runs console statements in a namespace owned by this instance.

    Each statement is compiled in interactive ("single") mode, so bare
    expressions echo their repr the way the standard interpreter does.
    Everything written to stdout or stderr during the call is returned as
    text; errors come back as formatted tracebacks rather than exceptions.
    """

    def __init__(self, namespace: dict | None = None, filename: str = "<console>"):
        self.filename = filename
        self.namespace: dict = {"__name__": "__console__", "__doc__": None, "__builtins__": builtins}
        if namespace:
            self.namespace.update(namespace)
        self.closed = False

    def execute(self, statement: str) -> str:
        """Execute `statement` and return the output it produced."""
        if self.closed:
            raise RuntimeError("Evaluator has been closed")
        if not statement:
            return ""
        buf = io.StringIO()
        with redirect_stdout(buf), redirect_stderr(buf):
            # sys.displayhook writes through sys.stdout, which is redirected above
            try:
                code = compile(statement, self.filename, "single")
            except (SyntaxError, OverflowError, ValueError):
                self._show_syntax_error(buf)
            else:
                try:
                    exec(code, self.namespace)
                except SystemExit as e:
                    buf.write(f"SystemExit: {e.code}\n")
                except BaseException:
                    self._show_traceback(buf)
        return buf.getvalue()

    def _show_syntax_error(self, buf: io.StringIO):
        exc_type, value, _ = sys.exc_info()
        buf.write("".join(traceback.format_exception_only(exc_type, value)))

    def _show_traceback(self, buf: io.StringIO):
        exc_type, value, tb = sys.exc_info()
        # Drop our own frame so the trace starts at the user's code
        tb = tb.tb_next if tb is not None else None
        buf.write("".join(traceback.format_exception(exc_type, value, tb)))

    def list_identifiers(self) -> list:
        """Names currently bound in the session namespace."""
        return list(self.namespace.keys())

    def close(self):
        self.namespace.clear()
        self.closed = True
