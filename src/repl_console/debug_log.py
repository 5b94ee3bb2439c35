import time
from pathlib import Path

from repl_console.types import safe_text_preview, ts_str


class DebugLogger:
    """Manages optional debug log files for input events and evaluation."""

    def __init__(self, log_dir: str | Path = "."):
        self.enabled = False
        self.log_dir = Path(log_dir)
        self._input_fh = None
        self._eval_fh = None

    def start(self):
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._input_fh = open(self.log_dir / "console_input.log", "a", encoding="utf-8")
        self._eval_fh = open(self.log_dir / "console_eval.log", "a", encoding="utf-8")
        self.enabled = True
        sep = f"\n{'='*60}\n  Session started: {time.strftime('%Y-%m-%d %H:%M:%S')}\n{'='*60}\n"
        for fh in (self._input_fh, self._eval_fh):
            fh.write(sep)
            fh.flush()

    def stop(self):
        self.enabled = False
        for fh in (self._input_fh, self._eval_fh):
            if fh:
                try:
                    fh.close()
                except OSError:
                    pass
        self._input_fh = self._eval_fh = None

    def toggle(self) -> bool:
        if self.enabled:
            self.stop()
        else:
            self.start()
        return self.enabled

    def log_input(self, event: str, detail: str = ""):
        if not self.enabled or not self._input_fh:
            return
        line = f"{ts_str(time.time())} {event:>10}"
        if detail:
            line += f" | {safe_text_preview(detail)}"
        self._input_fh.write(line + "\n")
        self._input_fh.flush()

    def log_warning(self, message: str):
        self.log_input("WARN", message)

    def log_eval(self, statement: str, output: str):
        if not self.enabled or not self._eval_fh:
            return
        stamp = ts_str(time.time())
        for line in statement.rstrip("\n").split("\n"):
            self._eval_fh.write(f"{stamp} IN  | {line}\n")
        for line in output.rstrip("\n").split("\n") if output else ():
            self._eval_fh.write(f"{stamp} OUT | {line}\n")
        self._eval_fh.flush()
