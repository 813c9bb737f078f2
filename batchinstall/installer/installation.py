"""Installation execution and confirmation."""

import inspect
import logging
from collections.abc import Awaitable, Callable

import click

from batchinstall.adapter import ErrorKind, RegistryClient, RegistryError
from batchinstall.versions import is_version_satisfied

from .models import LATEST, Batch, InstallOptions, StepResult, VersionCheckPolicy

_logging = logging.getLogger(__name__)

# Returning False from either hook stops the run before the next group.
BetweenBatches = Callable[[Batch, Batch], Awaitable[bool | None] | bool | None]
BetweenGroups = Callable[[Batch, int], Awaitable[bool | None] | bool | None]


def confirm_installation(batches: list[Batch], title: str) -> bool:
    total = sum(len(batch) for batch in batches)
    click.echo("")
    click.echo("=" * 60)
    click.echo(f"Installation Summary: {title}")
    click.echo("=" * 60)
    click.echo("")
    click.echo(f"  Modules to process: {total}")
    click.echo(f"  Batches: {sum(1 for b in batches if b.members)}")
    click.echo("")
    click.echo("=" * 60)
    return click.confirm("\nContinue with installation?", default=False)


async def _unload_if_loaded(client: RegistryClient, module: str) -> None:
    try:
        if not await client.is_loaded(module):
            return
        if await client.unload(module):
            _logging.debug(f"{module}: unloaded before install")
        else:
            _logging.warning(f"{module}: could not unload, installing anyway")
    except RegistryError as e:
        _logging.warning(f"{module}: unload check failed ({e}), installing anyway")


async def _skip_reason(
    client: RegistryClient,
    module: str,
    requested: str,
    installed: str | None,
    options: InstallOptions,
) -> str | StepResult | None:
    """Decide whether an install can be skipped.

    Returns a skip message, a final StepResult when the decision itself
    fails the module, or None when the install should go ahead.
    """
    if options.force or installed is None:
        return None

    if options.skip_version_check:
        return f"already installed ({installed})"

    if requested.lower() != LATEST:
        if is_version_satisfied(installed, requested):
            return f"installed {installed} satisfies {requested}"
        return None

    try:
        latest = await client.find_latest(module)
    except RegistryError as e:
        if options.on_version_check_failure == VersionCheckPolicy.ABORT:
            return StepResult(module, "failed", f"latest version check failed: {e}")
        _logging.warning(
            f"{module}: latest version check failed ({e}); keeping installed {installed}"
        )
        return f"kept installed {installed} (latest version unknown)"

    if is_version_satisfied(installed, latest):
        return f"installed {installed} is up to date"
    _logging.info(f"{module}: {installed} installed, {latest} available")
    return None


async def install_module(
    client: RegistryClient,
    module: str,
    requested: str,
    options: InstallOptions,
) -> StepResult:
    """Install one module unless a satisfying version is already present.

    A single attempt is made. Registry failures are classified into a
    StepResult and never raised.
    """
    await _unload_if_loaded(client, module)

    try:
        installed = await client.installed_version(module)
    except RegistryError as e:
        return StepResult(module, "failed", f"installed version check failed: {e}")

    decision = await _skip_reason(client, module, requested, installed, options)
    if isinstance(decision, StepResult):
        return decision
    if decision is not None:
        _logging.debug(f"{module}: skipped, {decision}")
        return StepResult(module, "skipped", decision)

    pin = None
    if requested.lower() != LATEST and not options.skip_version_check:
        pin = requested

    try:
        await client.install(
            module,
            scope=options.scope,
            version=pin,
            allow_clobber=options.allow_clobber,
        )
    except RegistryError as e:
        message = str(e)
        if e.kind == ErrorKind.LOCKED:
            _logging.warning(f"{module}: in use, keeping existing version")
            return StepResult(
                module, "locked", f"in use, existing version kept: {message}"
            )
        spurious = e.kind == ErrorKind.UNTRUSTED and options.automated
        return StepResult(module, "failed", message, possibly_spurious=spurious)

    return StepResult(module, "installed", f"installed {pin or 'latest'}")


async def install_batch(
    client: RegistryClient,
    members: dict[str, str],
    options: InstallOptions,
) -> dict[str, StepResult]:
    results = {}
    for module, version in members.items():
        result = await install_module(client, module, version, options)
        if result.success:
            click.echo(f"  ✅ {module}: {result.message}")
        else:
            click.echo(f"  ❌ {module}: {result.message}")
        results[module] = result
    return results


async def _call_hook(hook, *args) -> bool:
    outcome = hook(*args)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome is not False


async def run_batches(
    batches: list[Batch],
    client: RegistryClient,
    options: InstallOptions,
    between_batches: BetweenBatches | None = None,
    between_groups: BetweenGroups | None = None,
) -> dict[str, dict[str, StepResult]]:
    """Install batches strictly in order, one module at a time.

    Returns results keyed by batch name, then module name. Empty batches
    are skipped and do not trigger ``between_batches``. When a batch is
    split into sub-batches, ``between_groups(batch, index)`` runs before
    every sub-batch after the first. If either hook returns False the run
    stops and the results gathered so far are returned.
    """
    results: dict[str, dict[str, StepResult]] = {}
    previous = None

    for batch in batches:
        if not batch.members:
            continue

        if previous is not None and between_batches is not None:
            if not await _call_hook(between_batches, previous, batch):
                click.echo(f"\nStopped before {batch.name}; remaining batches skipped.")
                return results

        click.echo(f"\n[{batch.name}] {len(batch)} module(s)")
        batch_results: dict[str, StepResult] = {}
        results[batch.name] = batch_results
        groups = batch.groups
        for index, group in enumerate(groups, 1):
            if index > 1 and between_groups is not None:
                if not await _call_hook(between_groups, batch, index):
                    click.echo(
                        f"\nStopped in {batch.name} before sub-batch {index}/{len(groups)}."
                    )
                    return results
            if len(groups) > 1:
                _logging.info(f"{batch.name}: sub-batch {index}/{len(groups)}")
            batch_results.update(await install_batch(client, group, options))

        previous = batch

    return results



__all__ = [
    "confirm_installation",
    "install_module",
    "install_batch",
    "run_batches",
]
