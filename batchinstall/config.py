"""Manifest file parsing: JSON-ish and YAML sources."""

import json
import re
from pathlib import Path

import yaml


class ConfigError(Exception):
    """Raised when a manifest cannot be read or parsed.

    Syntax errors in JSON-ish files carry the line, column and a caret
    pointing at the offending character.
    """
    pass


YAML_SUFFIXES = {".yaml", ".yml"}

# Names and versions end up inside registry shell commands.
SAFE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.\-]+$")
SAFE_VERSION_PATTERN = re.compile(r"^[A-Za-z0-9_.+\-]+$")


def is_safe_name(value: str) -> bool:
    """Check that a service or module name has no shell metacharacters."""
    return bool(value) and SAFE_NAME_PATTERN.match(value) is not None


def is_safe_version(value: str) -> bool:
    """Check that a version constraint has no shell metacharacters."""
    return bool(value) and SAFE_VERSION_PATTERN.match(value) is not None


def preprocess_jsonish(text: str) -> str:
    """
    Turn JSON-ish text into strict JSON.

    Strips ``//`` line comments and trailing commas before ``]`` or ``}``.
    Removed characters are replaced with spaces so that line and column
    numbers in parse errors still point into the original text.

    Args:
        text: JSON text, optionally with comments and trailing commas

    Returns:
        Strict JSON text ready for json.loads()
    """
    out = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        char = text[i]

        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            out.append(char)
            i += 1
        elif char == "/" and i + 1 < n and text[i + 1] == "/":
            # Blank out the comment up to (not including) the newline
            while i < n and text[i] != "\n":
                out.append(" ")
                i += 1
        elif char == "," and _closes_after(text, i + 1):
            out.append(" ")
            i += 1
        else:
            out.append(char)
            i += 1

    return "".join(out)


def _closes_after(text: str, start: int) -> bool:
    """True if only whitespace and comments separate ``start`` from ] or }."""
    j = start
    n = len(text)
    while j < n:
        if text[j] in " \t\r\n":
            j += 1
        elif text.startswith("//", j):
            while j < n and text[j] != "\n":
                j += 1
        else:
            return text[j] in "]}"
    return False


def _format_syntax_error(original_text: str, error: json.JSONDecodeError) -> str:
    lines = original_text.split("\n")
    parts = [f"Manifest syntax error at line {error.lineno}, col {error.colno}: {error.msg}"]
    if 1 <= error.lineno <= len(lines):
        parts.append(lines[error.lineno - 1])
        parts.append(" " * (error.colno - 1) + "^")
    return "\n".join(parts)


def parse_jsonish(text: str) -> dict:
    """Parse JSON-ish text into a dict.

    Raises:
        ConfigError: On syntax errors or a non-object top level.
    """
    try:
        data = json.loads(preprocess_jsonish(text))
    except json.JSONDecodeError as e:
        raise ConfigError(_format_syntax_error(text, e)) from e
    if not isinstance(data, dict):
        raise ConfigError(f"Manifest must be an object, got {type(data).__name__}")
    return data


def parse_yaml(text: str) -> dict:
    """Parse YAML text into a dict.

    Raises:
        ConfigError: On syntax errors or a non-mapping top level.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            raise ConfigError(
                f"Manifest syntax error at line {mark.line + 1}, col {mark.column + 1}: "
                f"{getattr(e, 'problem', e)}"
            ) from e
        raise ConfigError(f"Manifest syntax error: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Manifest must be a mapping, got {type(data).__name__}")
    return data


def load_config(path_or_text: Path | str) -> dict:
    """Load a manifest file (or raw JSON-ish text) into a dict.

    Files with a ``.yaml``/``.yml`` suffix are parsed as YAML, anything
    else as JSON-ish (trailing commas and // comments are tolerated).

    Args:
        path_or_text: Path to a manifest file, or manifest text

    Returns:
        The parsed top-level mapping

    Raises:
        ConfigError: If the file cannot be read or does not parse.
        TypeError: If path_or_text is neither Path nor str.
    """
    if isinstance(path_or_text, str):
        return parse_jsonish(path_or_text)
    if not isinstance(path_or_text, Path):
        raise TypeError(
            f"path_or_text must be Path or str, got {type(path_or_text).__name__}"
        )

    path = path_or_text
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Manifest file not found: {path}")
    except IsADirectoryError:
        raise ConfigError(f"Manifest path is not a file: {path}")
    except PermissionError:
        raise ConfigError(f"Permission denied reading manifest: {path}")
    except UnicodeDecodeError:
        raise ConfigError(f"Manifest is not valid UTF-8: {path}")
    except OSError as e:
        raise ConfigError(f"Error reading manifest {path}: {e}")

    if path.suffix.lower() in YAML_SUFFIXES:
        return parse_yaml(text)
    return parse_jsonish(text)


__all__ = [
    "ConfigError",
    "is_safe_name",
    "is_safe_version",
    "preprocess_jsonish",
    "parse_jsonish",
    "parse_yaml",
    "load_config",
]
