"""Tests for manifest parsing and JSON-ish preprocessing."""

import json
from pathlib import Path

import pytest

from batchinstall.config import (
    ConfigError,
    is_safe_name,
    is_safe_version,
    load_config,
    parse_yaml,
    preprocess_jsonish,
)


class TestPreprocessJsonish:
    """Tests for the JSON-ish preprocessor."""

    def test_strict_json_unchanged(self):
        text = '{"name": "test", "version": "1.0.0"}'
        assert preprocess_jsonish(text) == text

    def test_trailing_comma_in_array(self):
        result = preprocess_jsonish("[1, 2, 3,]")
        assert result == "[1, 2, 3 ]"
        assert json.loads(result) == [1, 2, 3]

    def test_nested_trailing_commas(self):
        result = preprocess_jsonish('{"a": [1,], "b": {"c": 2,},}')
        assert result == '{"a": [1 ], "b": {"c": 2 } }'

    def test_comment_preserves_positions(self):
        text = '{"a": 1, // note\n"b": 2}'
        result = preprocess_jsonish(text)
        assert len(result) == len(text)
        assert result.split("\n")[0] == '{"a": 1,        '
        assert json.loads(result) == {"a": 1, "b": 2}

    def test_trailing_comma_before_comment(self):
        text = '{"a": 1, // last\n}'
        assert json.loads(preprocess_jsonish(text)) == {"a": 1}

    def test_slashes_inside_strings_kept(self):
        text = '{"url": "https://example.com//x"}'
        assert preprocess_jsonish(text) == text

    def test_escaped_quote_inside_string(self):
        text = '{"a": "say \\"hi\\", // not a comment",}'
        assert json.loads(preprocess_jsonish(text)) == {"a": 'say "hi", // not a comment'}


class TestLoadConfig:
    def test_load_from_text(self):
        assert load_config('{"services": {},}') == {"services": {}}

    def test_load_json_file(self, temp_dir: Path):
        path = temp_dir / "manifest.json"
        path.write_text('// header\n{"services": {}}\n')

        assert load_config(path) == {"services": {}}

    def test_load_yaml_file(self, temp_dir: Path):
        path = temp_dir / "manifest.yaml"
        path.write_text("services:\n  tools:\n    modules:\n      Toolkit: latest\n")

        data = load_config(path)

        assert data["services"]["tools"]["modules"] == {"Toolkit": "latest"}

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(temp_dir / "absent.json")

    def test_directory_is_rejected(self, temp_dir: Path):
        with pytest.raises(ConfigError):
            load_config(temp_dir)

    def test_syntax_error_has_position_and_caret(self):
        with pytest.raises(ConfigError) as exc_info:
            load_config('{\n  "services": {\n    "a" 1\n  }\n}')

        message = str(exc_info.value)
        assert "line 3" in message
        assert '"a" 1' in message
        assert "^" in message

    def test_non_object_top_level(self):
        with pytest.raises(ConfigError, match="must be an object"):
            load_config("[1, 2]")

    def test_yaml_syntax_error(self):
        with pytest.raises(ConfigError, match="syntax error"):
            parse_yaml("services: [unclosed\n")

    def test_yaml_non_mapping(self):
        with pytest.raises(ConfigError, match="must be a mapping"):
            parse_yaml("- a\n- b\n")

    def test_wrong_type(self):
        with pytest.raises(TypeError):
            load_config(42)  # type: ignore[arg-type]


class TestSafeValues:
    def test_names(self):
        assert is_safe_name("Microsoft.Graph.Users")
        assert is_safe_name("pnp_powershell-2")
        assert not is_safe_name("")
        assert not is_safe_name("bad name")
        assert not is_safe_name("x'; rm -rf /")
        assert not is_safe_name("$(whoami)")

    def test_versions(self):
        assert is_safe_version("latest")
        assert is_safe_version("1.2.3-preview1")
        assert is_safe_version("2.0.0+build.5")
        assert not is_safe_version("1.0 ; echo")
