"""Registry client adapter.

The installer talks to the package registry only through the
``RegistryClient`` protocol defined here. Failures cross this boundary
as ``RegistryError`` exceptions carrying a structured ``ErrorKind``; the
free-text messages produced by the underlying package manager are
classified once, in ``classify_error``, and never parsed by callers.

``ShellRegistryClient`` is the default implementation. It formats a set
of command templates and runs them through the shell, so the same
engine can drive PowerShellGet, pip, or any other command-line registry
client by swapping templates in the manifest's ``registry`` section.

Template placeholders:

- ``{name}``     module name
- ``{version}``  pinned version (``install_pinned`` only)
- ``{scope}``    install scope, e.g. ``CurrentUser`` (install templates only)
- ``{clobber}``  the ``clobber_flag`` when overwriting commands is allowed
  (install templates only)

Literal braces, such as a PowerShell script block, are written ``{{`` and
``}}``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from batchinstall.execution import DEFAULT_TIMEOUT, INSTALL_TIMEOUT, run_command_async
from batchinstall.versions import extract_version_number

_logging = logging.getLogger(__name__)


class ErrorKind(Enum):
    LOCKED = "locked"
    UNTRUSTED = "untrusted"
    OTHER = "other"


class RegistryError(Exception):
    """A registry operation failed."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.OTHER):
        self.kind = kind
        super().__init__(message)


class RegistryQueryError(RegistryError):
    """Looking up versions in the remote registry failed."""


class RegistryInstallError(RegistryError):
    """Installing a package failed."""


LOCKED_PATTERNS = [
    re.compile(r"currently in use", re.IGNORECASE),
    re.compile(r"being used by another process", re.IGNORECASE),
    re.compile(r"\bin use by\b", re.IGNORECASE),
    re.compile(r"file is locked", re.IGNORECASE),
]

UNTRUSTED_PATTERNS = [
    re.compile(r"untrusted repository", re.IGNORECASE),
    re.compile(r"not trusted", re.IGNORECASE),
    re.compile(r"InstallationPolicy", re.IGNORECASE),
]


def classify_error(message: str) -> ErrorKind:
    """Map a registry client's error text to an ErrorKind."""
    if not message:
        return ErrorKind.OTHER
    if any(p.search(message) for p in LOCKED_PATTERNS):
        return ErrorKind.LOCKED
    if any(p.search(message) for p in UNTRUSTED_PATTERNS):
        return ErrorKind.UNTRUSTED
    return ErrorKind.OTHER


class RegistryClient(Protocol):
    """Operations the installer needs from a package registry client."""

    async def installed_version(self, name: str) -> str | None:
        """Return the highest installed version of ``name``, or None."""
        ...

    async def is_loaded(self, name: str) -> bool:
        """Return True if ``name`` is loaded into the running runtime."""
        ...

    async def unload(self, name: str) -> bool:
        """Unload ``name`` from the runtime. Best-effort; never raises."""
        ...

    async def find_latest(self, name: str) -> str:
        """Return the newest version available in the registry.

        Raises:
            RegistryQueryError: If the registry cannot be queried
        """
        ...

    async def install(
        self,
        name: str,
        *,
        scope: str,
        version: str | None = None,
        allow_clobber: bool = True,
    ) -> None:
        """Install ``name``, pinned to ``version`` when given.

        Raises:
            RegistryInstallError: If the install fails
        """
        ...


def _pwsh(script: str) -> str:
    return f'pwsh -NoProfile -NonInteractive -Command "{script}"'


DEFAULT_COMMANDS = {
    "installed_version": _pwsh(
        "Get-Module -ListAvailable -Name '{name}' | Sort-Object Version -Descending"
        " | Select-Object -First 1 -ExpandProperty Version"
    ),
    "is_loaded": "",
    "find_latest": _pwsh(
        "Find-Module -Name '{name}' -ErrorAction Stop | Select-Object -ExpandProperty Version"
    ),
    "install": _pwsh(
        "Install-Module -Name '{name}' -Scope {scope} -Force{clobber} -ErrorAction Stop"
    ),
    "install_pinned": _pwsh(
        "Install-Module -Name '{name}' -RequiredVersion '{version}' -Scope {scope}"
        " -Force{clobber} -ErrorAction Stop"
    ),
    "unload": "",
}

# Placeholders each template may use. Literal braces are written `{{` and `}}`.
TEMPLATE_FIELDS = {
    "installed_version": {"name"},
    "is_loaded": {"name"},
    "find_latest": {"name"},
    "install": {"name", "scope", "clobber"},
    "install_pinned": {"name", "version", "scope", "clobber"},
    "unload": {"name"},
}


@dataclass
class RegistryCommands:
    installed_version: str
    is_loaded: str
    find_latest: str
    install: str
    install_pinned: str
    unload: str
    clobber_flag: str = " -AllowClobber"

    @classmethod
    def from_templates(cls, templates: dict[str, str] | None = None) -> RegistryCommands:
        """Build commands from manifest templates, defaulting missing ones."""
        merged = dict(DEFAULT_COMMANDS)
        merged.update(templates or {})
        return cls(**merged)


class ShellRegistryClient:
    """RegistryClient backed by shell command templates."""

    def __init__(
        self,
        commands: RegistryCommands | None = None,
        query_timeout: int = DEFAULT_TIMEOUT,
        install_timeout: int = INSTALL_TIMEOUT,
    ):
        self.commands = commands or RegistryCommands.from_templates()
        self.query_timeout = query_timeout
        self.install_timeout = install_timeout

    def _format(self, template: str, **values: str) -> str:
        try:
            return template.format(**values)
        except (KeyError, IndexError, ValueError) as e:
            raise RegistryError(f"invalid command template {template!r}: {e}") from e

    async def installed_version(self, name: str) -> str | None:
        command = self._format(self.commands.installed_version, name=name)
        output, returncode = await run_command_async(command, timeout=self.query_timeout)
        if returncode != 0:
            _logging.debug(f"{name}: installed version query failed: {output}")
            return None
        return extract_version_number(output) or None

    async def is_loaded(self, name: str) -> bool:
        if not self.commands.is_loaded:
            return False
        command = self._format(self.commands.is_loaded, name=name)
        output, returncode = await run_command_async(command, timeout=self.query_timeout)
        return returncode == 0 and bool(output.strip())

    async def unload(self, name: str) -> bool:
        if not self.commands.unload:
            return True
        command = self._format(self.commands.unload, name=name)
        output, returncode = await run_command_async(command, timeout=self.query_timeout)
        if returncode != 0:
            _logging.debug(f"{name}: unload failed: {output}")
        return returncode == 0

    async def find_latest(self, name: str) -> str:
        command = self._format(self.commands.find_latest, name=name)
        output, returncode = await run_command_async(command, timeout=self.query_timeout)
        if returncode != 0:
            raise RegistryQueryError(
                output or f"Version lookup for {name} failed", classify_error(output)
            )
        latest = extract_version_number(output)
        if not latest:
            raise RegistryQueryError(f"No version found for {name} in registry output")
        return latest

    async def install(
        self,
        name: str,
        *,
        scope: str,
        version: str | None = None,
        allow_clobber: bool = True,
    ) -> None:
        template = self.commands.install_pinned if version else self.commands.install
        command = self._format(
            template,
            name=name,
            version=version or "",
            scope=scope,
            clobber=self.commands.clobber_flag if allow_clobber else "",
        )
        output, returncode = await run_command_async(command, timeout=self.install_timeout)
        if returncode != 0:
            message = output or f"Install of {name} exited with code {returncode}"
            raise RegistryInstallError(message, classify_error(message))


__all__ = [
    "ErrorKind",
    "RegistryError",
    "RegistryQueryError",
    "RegistryInstallError",
    "RegistryClient",
    "RegistryCommands",
    "ShellRegistryClient",
    "DEFAULT_COMMANDS",
    "TEMPLATE_FIELDS",
    "classify_error",
]
