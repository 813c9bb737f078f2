"""Runtime availability checks for the registry client shell."""

import shutil

PREFERRED_RUNTIME = "pwsh"


def is_preferred_runtime_available(binary: str = PREFERRED_RUNTIME) -> bool:
    """Check whether the registry client's runtime binary is on PATH."""
    return shutil.which(binary) is not None


def runtime_binary(command_template: str) -> str | None:
    """Return the executable a registry command template invokes."""
    parts = command_template.split()
    return parts[0] if parts else None
