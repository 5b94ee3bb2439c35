"""Configuration system with a minimal YAML parser.

Configuration files live in a configs/ directory and are parsed without any
external dependency. The supported YAML subset is:
- Scalars (strings, numbers, booleans, null)
- Lists of scalars (- item syntax)
- Nested dictionaries (key: value syntax)
- Comments (# ...)
- Quoted strings (single and double)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib.resources import as_file, files
from pathlib import Path

from repl_console.types import CONTINUATION_PROMPT, PRIMARY_PROMPT, MatchMode

# --- Minimal YAML Parser ---


def parse_simple_yaml(text: str) -> dict:
    """Parse a simple YAML document into a Python dict."""
    lines = [line.rstrip("\r") for line in text.split("\n")]
    result, _ = _parse_block(lines, 0, 0)
    return result if isinstance(result, dict) else {}


def _next_content_line(lines: list[str], i: int) -> int:
    """Index of the next line that is neither blank nor a comment."""
    while i < len(lines):
        stripped = lines[i].strip()
        if stripped and not stripped.startswith("#"):
            return i
        i += 1
    return i


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def _parse_block(lines: list[str], start: int, indent: int) -> tuple[dict | list, int]:
    """Parse lines at exactly `indent` into a dict or a list."""
    i = _next_content_line(lines, start)
    is_list = i < len(lines) and lines[i].lstrip().startswith("- ")
    result: dict | list = [] if is_list else {}

    while True:
        i = _next_content_line(lines, i)
        if i >= len(lines) or _indent_of(lines[i]) < indent:
            break
        stripped = lines[i].strip()

        if is_list:
            if not stripped.startswith("- "):
                break
            result.append(_parse_value(_remove_inline_comment(stripped[2:])))
            i += 1
            continue

        colon = _find_unquoted_colon(stripped)
        if colon <= 0:
            # Not a key; skip it rather than fail the whole file
            i += 1
            continue
        key = stripped[:colon].strip()
        value = _remove_inline_comment(stripped[colon + 1 :].strip())
        i += 1
        if value:
            result[key] = _parse_value(value)
            continue

        j = _next_content_line(lines, i)
        if j < len(lines) and _indent_of(lines[j]) > _indent_of(lines[i - 1]):
            result[key], i = _parse_block(lines, j, _indent_of(lines[j]))
        else:
            result[key] = None

    return result, i


def _find_unquoted_colon(s: str) -> int:
    """Position of the first ':' outside quotes that ends a key, or -1."""
    quote = None
    for i, c in enumerate(s):
        if quote:
            if c == quote:
                quote = None
        elif c in ("'", '"'):
            quote = c
        elif c == ":" and (i + 1 == len(s) or s[i + 1] == " "):
            return i
    return -1


def _remove_inline_comment(s: str) -> str:
    """Strip a trailing ' # comment' that is not inside quotes."""
    quote = None
    for i, c in enumerate(s):
        if quote:
            if c == quote:
                quote = None
        elif c in ("'", '"'):
            quote = c
        elif c == "#" and (i == 0 or s[i - 1] == " "):
            return s[:i].rstrip()
    return s


_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "0": "\0"}


def _parse_value(s: str) -> str | int | float | bool | None:
    """Parse a scalar YAML value."""
    s = s.strip()
    if not s or s.lower() in ("null", "~"):
        return None
    if s.lower() in ("true", "yes", "on"):
        return True
    if s.lower() in ("false", "no", "off"):
        return False
    if len(s) >= 2 and s[0] == s[-1] == '"':
        return _unescape_double_quoted(s[1:-1])
    if len(s) >= 2 and s[0] == s[-1] == "'":
        return s[1:-1].replace("''", "'")
    try:
        return float(s) if "." in s else int(s)
    except ValueError:
        return s


def _unescape_double_quoted(s: str) -> str:
    out = []
    i = 0
    while i < len(s):
        if s[i] == "\\" and i + 1 < len(s):
            out.append(_ESCAPES.get(s[i + 1], s[i : i + 2]))
            i += 2
        else:
            out.append(s[i])
            i += 1
    return "".join(out)


# --- Configuration Dataclasses ---


@dataclass
class HistoryConfig:
    """Input history settings."""

    length: int = 20
    match: str = MatchMode.PREFIX.value


@dataclass
class PromptConfig:
    primary: str = PRIMARY_PROMPT
    continuation: str = CONTINUATION_PROMPT


@dataclass
class UIConfig:
    """Terminal front-end settings."""

    color: bool = True
    max_completions: int = 40


@dataclass
class HooksConfig:
    """Statements run at session start and before teardown."""

    startup: list[str] = field(default_factory=list)
    on_exit: list[str] = field(default_factory=list)


@dataclass
class Config:
    """Complete application configuration."""

    banner: str = "Python console. Ctrl+D on an empty line to exit."
    history: HistoryConfig = field(default_factory=HistoryConfig)
    prompts: PromptConfig = field(default_factory=PromptConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    hooks: HooksConfig = field(default_factory=HooksConfig)

    def validate(self):
        """Raise ValueError for settings a session cannot be built from."""
        length = self.history.length
        if isinstance(length, bool) or not isinstance(length, int) or length < 1:
            raise ValueError(f"history.length must be a positive integer, got {length!r}")
        try:
            MatchMode(self.history.match)
        except ValueError:
            valid = ", ".join(m.value for m in MatchMode)
            raise ValueError(
                f"history.match must be one of: {valid}, got {self.history.match!r}"
            ) from None
        if not self.prompts.primary or not self.prompts.continuation:
            raise ValueError("prompts must not be empty")
        limit = self.ui.max_completions
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"ui.max_completions must be a positive integer, got {limit!r}")


# --- Config Loading ---


def _get_user_data_dir() -> Path:
    """Get the user's data directory ($HOME/.repl-console)."""
    return Path.home() / ".repl-console"


def _looks_like_path(name: str) -> bool:
    return "/" in name or "\\" in name or name.endswith(".yml")


def _find_config_file(config_name_or_path: str) -> Path | None:
    """Find a config file by name or path.

    Search order:
    1. If it looks like a path (contains / or \\ or ends in .yml), treat as path
    2. $HOME/.repl-console/configs/<name>.yml
    3. Current working directory configs/<name>.yml
    4. Bundled repl_console/configs/<name>.yml
    """
    if _looks_like_path(config_name_or_path):
        path = Path(config_name_or_path).expanduser()
        return path if path.is_file() else None

    config_filename = f"{config_name_or_path}.yml"
    for candidate in (
        _get_user_data_dir() / "configs" / config_filename,
        Path.cwd() / "configs" / config_filename,
    ):
        if candidate.is_file():
            return candidate

    try:
        config_ref = files("repl_console.configs").joinpath(config_filename)
        with as_file(config_ref) as p:
            if p.is_file():
                return Path(p)
    except (ModuleNotFoundError, FileNotFoundError, TypeError):
        pass
    return None


def _get_config_search_paths(config_name: str) -> list[str]:
    config_filename = f"{config_name}.yml"
    return [
        str(_get_user_data_dir() / "configs" / config_filename),
        str(Path.cwd() / "configs" / config_filename),
        f"repl_console.configs/{config_filename} (bundled)",
    ]


def load_config(config_name_or_path: str | None = None) -> Config:
    """Load configuration from a YAML file merged over the defaults.

    Raises:
        FileNotFoundError: If a non-default config is named but not found.
        ValueError: If the merged configuration is invalid.
    """
    if not config_name_or_path:
        config_name_or_path = "default"

    config = Config()
    config_path = _find_config_file(config_name_or_path)

    if config_path is None and config_name_or_path != "default":
        if _looks_like_path(config_name_or_path):
            raise FileNotFoundError(f"Config file not found: {config_name_or_path}")
        paths_str = "\n  - ".join(_get_config_search_paths(config_name_or_path))
        raise FileNotFoundError(
            f"Config '{config_name_or_path}' not found. Searched:\n  - {paths_str}"
        )

    if config_path is not None:
        with open(config_path, encoding="utf-8") as f:
            _merge_config(config, parse_simple_yaml(f.read()))

    config.validate()
    return config


def _merge_config(config: Config, data: dict):
    """Merge parsed YAML data into a Config object."""
    if not isinstance(data, dict):
        return

    if "banner" in data:
        config.banner = "" if data["banner"] is None else str(data["banner"])

    if isinstance(data.get("history"), dict):
        h = data["history"]
        if "length" in h:
            config.history.length = h["length"]
        if "match" in h:
            config.history.match = str(h["match"]).lower()

    if isinstance(data.get("prompts"), dict):
        p = data["prompts"]
        if "primary" in p:
            config.prompts.primary = str(p["primary"])
        if "continuation" in p:
            config.prompts.continuation = str(p["continuation"])

    if isinstance(data.get("ui"), dict):
        ui = data["ui"]
        if "color" in ui:
            config.ui.color = bool(ui["color"])
        if "max_completions" in ui:
            config.ui.max_completions = ui["max_completions"]

    if isinstance(data.get("hooks"), dict):
        hooks = data["hooks"]
        if isinstance(hooks.get("startup"), list):
            config.hooks.startup = [str(s) for s in hooks["startup"]]
        if isinstance(hooks.get("on_exit"), list):
            config.hooks.on_exit = [str(s) for s in hooks["on_exit"]]


def get_default_config() -> Config:
    """Return a Config with all default values."""
    return Config()
