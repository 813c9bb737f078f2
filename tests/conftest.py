"""Pytest fixtures and utilities for batchinstall tests."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from batchinstall.adapter import RegistryInstallError, RegistryQueryError, classify_error


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class FakeRegistry:
    """In-memory RegistryClient that records every call.

    Args:
        installed: module name -> installed version
        latest: module name -> newest registry version, or an error
            message string prefixed with "!" to make the lookup fail
        install_errors: module name -> error text the install raises
        loaded: names reported as loaded into the runtime
        unload_fails: names whose unload reports failure
    """

    def __init__(
        self,
        installed: dict[str, str] | None = None,
        latest: dict[str, str] | None = None,
        install_errors: dict[str, str] | None = None,
        loaded: set[str] | None = None,
        unload_fails: set[str] | None = None,
    ):
        self.installed = dict(installed or {})
        self.latest = dict(latest or {})
        self.install_errors = dict(install_errors or {})
        self.loaded = set(loaded or set())
        self.unload_fails = set(unload_fails or set())
        self.calls: list[tuple] = []

    @property
    def install_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "install"]

    async def installed_version(self, name):
        self.calls.append(("installed_version", name))
        return self.installed.get(name)

    async def is_loaded(self, name):
        self.calls.append(("is_loaded", name))
        return name in self.loaded

    async def unload(self, name):
        self.calls.append(("unload", name))
        if name in self.unload_fails:
            return False
        self.loaded.discard(name)
        return True

    async def find_latest(self, name):
        self.calls.append(("find_latest", name))
        value = self.latest.get(name)
        if value is None or value.startswith("!"):
            message = value[1:] if value else f"{name} not found in registry"
            raise RegistryQueryError(message)
        return value

    async def install(self, name, *, scope, version=None, allow_clobber=True):
        self.calls.append(("install", name, scope, version, allow_clobber))
        if name in self.install_errors:
            message = self.install_errors[name]
            raise RegistryInstallError(message, classify_error(message))
        self.installed[name] = version or self.latest.get(name) or "1.0.0"


@pytest.fixture
def fake_registry():
    """Factory for FakeRegistry instances."""

    def _create(**kwargs):
        return FakeRegistry(**kwargs)

    return _create


@pytest.fixture
def manifest_data() -> dict:
    """Raw manifest with two prioritized services and one profile."""
    return {
        "services": {
            "auth": {
                "description": "Authentication",
                "enabled": True,
                "priority": 1,
                "modules": {
                    "Core.Auth": {"version": "2.0.0", "description": "Auth core"},
                },
            },
            "reports": {
                "description": "Reporting",
                "enabled": True,
                "priority": 2,
                "modules": {
                    "Core.Reports": {"version": "1.5.0"},
                    "Core.Reports.Legacy": {"version": "1.0.0", "enabled": False},
                },
            },
        },
        "profiles": {
            "basic": {"description": "Basic", "services": ["reports", "auth"]},
        },
    }


@pytest.fixture
def bulk_manifest_data() -> dict:
    """Raw manifest exercising every batch class."""
    return {
        "batching": {
            "bulk_prefixes": ["Bulk."],
            "essential": ["Bulk.Authentication"],
            "service_specific": ["ServiceConnector"],
            "capacity": 1,
        },
        "services": {
            "tools": {
                "priority": 0,
                "modules": {"Toolkit": "latest", "Editor": "2.3.4"},
            },
            "bulk": {
                "priority": 1,
                "modules": {
                    "Bulk.Authentication": "latest",
                    "Bulk.Users": "latest",
                    "Bulk.Groups": "latest",
                },
            },
            "connectors": {
                "priority": 5,
                "modules": {"ServiceConnector": "3.4.0"},
            },
        },
        "profiles": {
            "small": ["tools"],
            "everything": ["tools", "bulk", "connectors"],
        },
    }
