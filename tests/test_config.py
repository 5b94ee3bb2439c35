"""Tests for configuration loading and YAML parsing."""

import pytest

from repl_console.config import (
    Config,
    _merge_config,
    get_default_config,
    load_config,
    parse_simple_yaml,
)


class TestParseSimpleYaml:
    """Tests for the minimal YAML parser."""

    def test_empty_document(self):
        assert parse_simple_yaml("") == {}

    def test_simple_key_value(self):
        assert parse_simple_yaml("key: value") == {"key": "value"}

    def test_scalars(self):
        yaml = """
length: 20
ratio: 0.5
color: true
quiet: off
banner: null
"""
        assert parse_simple_yaml(yaml) == {
            "length": 20,
            "ratio": 0.5,
            "color": True,
            "quiet": False,
            "banner": None,
        }

    def test_quoted_strings_keep_spaces(self):
        yaml = """
primary: ">>> "
continuation: '... '
"""
        assert parse_simple_yaml(yaml) == {"primary": ">>> ", "continuation": "... "}

    def test_double_quoted_escapes(self):
        assert parse_simple_yaml(r'banner: "a\tb\n"') == {"banner": "a\tb\n"}

    def test_single_quoted_doubled_quote(self):
        assert parse_simple_yaml("msg: 'it''s'") == {"msg": "it's"}

    def test_comments_ignored(self):
        yaml = """
# This is a comment
key: value  # inline comment
other: "a # not a comment"
"""
        assert parse_simple_yaml(yaml) == {"key": "value", "other": "a # not a comment"}

    def test_colon_inside_value(self):
        assert parse_simple_yaml("hook: print('a:b')") == {"hook": "print('a:b')"}

    def test_nested_dict(self):
        yaml = """
history:
  length: 5
  match: substring
prompts:
  primary: "In: "
"""
        assert parse_simple_yaml(yaml) == {
            "history": {"length": 5, "match": "substring"},
            "prompts": {"primary": "In: "},
        }

    def test_simple_list(self):
        yaml = """
startup:
  - import math
  - x = 1
"""
        assert parse_simple_yaml(yaml) == {"startup": ["import math", "x = 1"]}

    def test_comments_before_nested_content(self):
        yaml = """
hooks:
  # This is a comment
  startup:
    - import os
  on_exit:
"""
        assert parse_simple_yaml(yaml) == {
            "hooks": {"startup": ["import os"], "on_exit": None}
        }

    def test_windows_line_endings(self):
        assert parse_simple_yaml("a: 1\r\nb: 2\r\n") == {"a": 1, "b": 2}


class TestLoadConfig:
    """Tests for config loading."""

    def test_default_config(self):
        config = get_default_config()
        assert config.history.length == 20
        assert config.history.match == "prefix"
        assert config.prompts.primary == ">>> "
        assert config.prompts.continuation == "... "
        assert config.ui.color is True
        assert config.hooks.startup == []

    def test_bundled_default_matches_defaults(self):
        config = load_config("default")
        assert config.history.length == 20
        assert config.prompts.primary == ">>> "
        assert config.hooks.startup == []
        assert config.hooks.on_exit == []

    def test_none_means_default(self):
        assert load_config(None).history.length == 20

    def test_missing_named_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(FileNotFoundError, match="Searched"):
            load_config("does-not-exist")

    def test_missing_config_path(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(str(tmp_path / "nope.yml"))

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "mine.yml"
        path.write_text("history:\n  length: 7\n  match: substring\n", encoding="utf-8")
        config = load_config(str(path))
        assert config.history.length == 7
        assert config.history.match == "substring"
        assert config.prompts.primary == ">>> "

    def test_load_from_cwd_configs(self, tmp_path, monkeypatch):
        (tmp_path / "configs").mkdir()
        (tmp_path / "configs" / "local.yml").write_text("banner: hi\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("repl_console.config._get_user_data_dir", lambda: tmp_path / "home")
        assert load_config("local").banner == "hi"

    def test_invalid_history_length_rejected(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("history:\n  length: 0\n", encoding="utf-8")
        with pytest.raises(ValueError, match="history.length"):
            load_config(str(path))

    @pytest.mark.parametrize("value", ["", "yes", "three", "2.5"])
    def test_non_integer_history_length_rejected(self, tmp_path, value):
        path = tmp_path / "bad.yml"
        path.write_text(f"history:\n  length: {value}\n", encoding="utf-8")
        with pytest.raises(ValueError, match="history.length"):
            load_config(str(path))

    def test_non_integer_max_completions_rejected(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("ui:\n  max_completions: on\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ui.max_completions"):
            load_config(str(path))

    def test_unknown_match_mode_rejected(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("history:\n  match: fuzzy\n", encoding="utf-8")
        with pytest.raises(ValueError, match="history.match"):
            load_config(str(path))


class TestConfigMerging:
    def test_merge_all_sections(self):
        yaml = """
banner: ""
history:
  length: 3
prompts:
  primary: "$ "
  continuation: "> "
ui:
  color: false
  max_completions: 5
hooks:
  startup:
    - import math
  on_exit:
    - print('bye')
"""
        config = get_default_config()
        _merge_config(config, parse_simple_yaml(yaml))
        assert config.banner == ""
        assert config.history.length == 3
        assert config.prompts.primary == "$ "
        assert config.prompts.continuation == "> "
        assert config.ui.color is False
        assert config.ui.max_completions == 5
        assert config.hooks.startup == ["import math"]
        assert config.hooks.on_exit == ["print('bye')"]

    def test_non_dict_ignored(self):
        config = get_default_config()
        _merge_config(config, ["not", "a", "dict"])
        assert config == Config()

    def test_validate_rejects_empty_prompt(self):
        config = get_default_config()
        config.prompts.primary = ""
        with pytest.raises(ValueError):
            config.validate()
