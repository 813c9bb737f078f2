"""Async command execution utilities."""

import asyncio
import logging

DEFAULT_TIMEOUT = 60
INSTALL_TIMEOUT = 900

_logging = logging.getLogger(__name__)


async def run_command_async(
    command: str, timeout: float = DEFAULT_TIMEOUT
) -> tuple[str, int]:
    """Run a shell command and return its combined output and return code.

    stderr is appended to stdout so that registry error text (which most
    package managers write to stderr) reaches the caller.
    """
    process = None
    try:
        _logging.debug(f"Running command: {command}")
        process = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            _ = await process.wait()
            _logging.error(f"Command timed out after {timeout} seconds: {command}")
            return f"Command timed out after {timeout} seconds", 1

        output = stdout.decode(errors="replace").strip()
        error_text = stderr.decode(errors="replace").strip()
        if error_text:
            _logging.debug(f"stderr: {error_text}")
            output = f"{output}\n{error_text}" if output else error_text
        return output, process.returncode if process.returncode is not None else 1
    except OSError as e:
        _logging.error(f"Command execution failed: {type(e).__name__}: {e} | Command: {command}")
        return f"Error: {e}", 1
    finally:
        if process:
            transport = getattr(process, "_transport", None)
            if transport:
                transport.close()
