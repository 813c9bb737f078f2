"""Manifest-driven batched package installer."""

import logging
import sys

from batchinstall.config import ConfigError
from batchinstall.data_loader import load_manifest
from batchinstall.errors import format_error, format_suggestion
from batchinstall.paths import (
    ensure_user_config,
    get_config_dir,
    get_config_path,
    get_packaged_manifest_path,
)

__version__ = "0.3.0"

_FMT_MINIMAL = "%(message)s"
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d - %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"


def setup_logging(debug: bool = False) -> None:
    """Configure logging for a CLI run.

    WARNING and above with a bare message format by default; DEBUG with
    timestamps and source locations when ``debug`` is set.
    """
    handler = logging.StreamHandler(sys.stderr)
    if debug:
        handler.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_DEBUG))
    else:
        handler.setFormatter(logging.Formatter(_FMT_MINIMAL))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if debug else logging.WARNING)


__all__ = [
    "__version__",
    "ConfigError",
    "load_manifest",
    "format_error",
    "format_suggestion",
    "ensure_user_config",
    "get_config_dir",
    "get_config_path",
    "get_packaged_manifest_path",
    "setup_logging",
]
