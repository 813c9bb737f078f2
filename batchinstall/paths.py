"""Manifest path helpers for batchinstall."""

import os
import shutil
from pathlib import Path

from batchinstall.config import ConfigError

CONFIG_ENV_VAR = "BATCHINSTALL_CONFIG"
MANIFEST_FILENAME = "manifest.json"


def get_config_dir() -> Path:
    """Return XDG-compliant config directory: ~/.config/batchinstall"""
    return Path.home() / ".config" / "batchinstall"


def get_packaged_manifest_path() -> Path:
    """Return path to the packaged default manifest (read-only fallback)"""
    return Path(__file__).parent / "data" / MANIFEST_FILENAME


def get_user_manifest_path() -> Path:
    return get_config_dir() / MANIFEST_FILENAME


def get_config_path(explicit: str | Path | None = None) -> Path:
    """Return the manifest to load for this run.

    Priority:
    1. ``explicit`` path (the --config option)
    2. BATCHINSTALL_CONFIG environment variable
    3. ~/.config/batchinstall/manifest.json, if it exists
    4. The packaged default manifest

    An explicit path is returned as-is even if missing; loading it then
    fails with ConfigError.
    """
    if explicit:
        return Path(explicit)

    if os.environ.get(CONFIG_ENV_VAR):
        return Path(os.environ[CONFIG_ENV_VAR])

    user_path = get_user_manifest_path()
    if user_path.exists():
        return user_path
    return get_packaged_manifest_path()


def ensure_user_config(config_path: Path | None = None) -> Path:
    """Seed the user manifest from the packaged default if it is missing.

    Raises:
        ConfigError: If the packaged manifest is missing or the copy fails
    """
    config_path = config_path or get_user_manifest_path()
    if config_path.exists():
        return config_path

    packaged = get_packaged_manifest_path()
    if not packaged.exists():
        raise ConfigError(f"Packaged manifest not found: {packaged}")

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(packaged, config_path)
    except OSError as e:
        raise ConfigError(f"Could not create {config_path}: {e}") from e
    return config_path
