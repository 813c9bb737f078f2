"""Service selection and module resolution."""

import logging

from .models import UNSET_PRIORITY, Manifest, Profile, Service

_logging = logging.getLogger(__name__)


class ProfileNotFoundError(LookupError):
    """Raised when a requested profile is not defined in the manifest."""

    def __init__(self, profile: str, available: list[str]):
        self.profile = profile
        self.available = available
        names = ", ".join(sorted(available)) or "none"
        super().__init__(f"Profile '{profile}' not found. Available: {names}")


def parse_service_list(value: str | list[str] | tuple[str, ...] | None) -> list[str]:
    """Split a comma-separated service list, dropping blanks and duplicates."""
    if not value:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    names = []
    for item in items:
        name = item.strip()
        if name and name not in names:
            names.append(name)
    return names


def broadest_profile(manifest: Manifest) -> Profile | None:
    """Return the profile listing the most services (first wins ties)."""
    best = None
    for profile in manifest.profiles.values():
        if best is None or len(profile.services) > len(best.services):
            best = profile
    return best


def select_services(
    manifest: Manifest,
    profile: str | None = None,
    services: str | list[str] | None = None,
) -> list[str]:
    """Decide which services a run targets.

    Precedence is profile, then an explicit service list, then the
    services enabled in the manifest.

    Raises:
        ProfileNotFoundError: If ``profile`` is not in the manifest
    """
    override = parse_service_list(services)

    if profile:
        if profile not in manifest.profiles:
            raise ProfileNotFoundError(profile, list(manifest.profiles))
        if override:
            _logging.warning(
                f"Both profile '{profile}' and a service list were given; "
                "using the profile"
            )
        _logging.info(f"Using profile '{profile}'")
        return list(manifest.profiles[profile].services)

    if override:
        _logging.info(f"Using service list: {', '.join(override)}")
        return override

    return [name for name, service in manifest.services.items() if service.enabled]


def order_services(manifest: Manifest, names: list[str]) -> list[Service]:
    """Return known services sorted by ascending priority.

    Unknown names are dropped with a warning. The sort is stable, so
    services sharing a priority keep their selection order.
    """
    found = []
    for name in names:
        service = manifest.services.get(name)
        if service is None:
            _logging.warning(f"Service '{name}' is not defined in the manifest, skipping")
            continue
        if service not in found:
            found.append(service)

    return sorted(
        found,
        key=lambda s: UNSET_PRIORITY if s.priority is None else s.priority,
    )


def resolve_modules(
    manifest: Manifest,
    profile: str | None = None,
    services: str | list[str] | None = None,
) -> dict[str, str]:
    """Resolve a selection into a {module name: version constraint} map.

    Services are applied in priority order and a later service's entry
    for a module replaces an earlier one, so the highest-numbered
    priority defining a module decides its version.

    Raises:
        ProfileNotFoundError: If ``profile`` is not in the manifest
    """
    resolved: dict[str, str] = {}

    for service in order_services(manifest, select_services(manifest, profile, services)):
        if not service.enabled:
            _logging.info(f"Service '{service.name}' is disabled, skipping")
            continue

        for module in service.enabled_modules():
            previous = resolved.get(module.name)
            if previous is not None and previous != module.version:
                _logging.info(
                    f"{module.name}: '{service.name}' overrides version "
                    f"{previous} with {module.version}"
                )
            resolved[module.name] = module.version

    return resolved


__all__ = [
    "ProfileNotFoundError",
    "parse_service_list",
    "broadest_profile",
    "select_services",
    "order_services",
    "resolve_modules",
]
