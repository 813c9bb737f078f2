"""Manifest loader: builds the in-memory Manifest from a config source.

Validation is structural only. Known fields must have the right JSON
type, names must be safe to splice into registry commands, and absent
optional fields fall back to their defaults:

- ``enabled`` defaults to true for services and modules
- ``priority`` defaults to lowest precedence (sorted last)
- a module's ``version`` defaults to ``"latest"``

A manifest is read fresh on every call; nothing is cached between runs.
"""

import logging
import string
from pathlib import Path

from batchinstall.adapter import TEMPLATE_FIELDS
from batchinstall.config import ConfigError, is_safe_name, is_safe_version, load_config
from batchinstall.installer.models import (
    LATEST,
    BatchRules,
    Manifest,
    ModuleSpec,
    Profile,
    Service,
)

_logging = logging.getLogger(__name__)

REGISTRY_TEMPLATE_KEYS = set(TEMPLATE_FIELDS)


def _optional_field(data: dict, field: str, entity: str, field_type: type) -> None:
    """Validate optional field with type check.

    Raises:
        ConfigError: If field present, not None, and wrong type
    """
    if field in data and data[field] is not None:
        # bool is a subclass of int; a priority of `true` is a mistake
        if field_type is int and isinstance(data[field], bool):
            raise ConfigError(f"{entity} field '{field}' must be a int or null")
        if not isinstance(data[field], field_type):
            raise ConfigError(
                f"{entity} field '{field}' must be a {field_type.__name__} or null"
            )


def _require_dict_field(data: dict, field: str, entity: str) -> None:
    if field not in data:
        raise ConfigError(f"{entity} missing required field: {field}")
    if not isinstance(data[field], dict):
        raise ConfigError(f"{entity} field '{field}' must be an object")


def _validate_string_list(data: dict, field: str, entity: str) -> list[str]:
    """Validate an optional list of non-empty strings and return it."""
    value = data.get(field)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{entity} field '{field}' must be an array")
    for i, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            raise ConfigError(f"{entity} {field}[{i}] must be a non-empty string")
    return [item.strip() for item in value]


def _check_name(name: object, entity: str) -> str:
    if not isinstance(name, str) or not is_safe_name(name):
        raise ConfigError(
            f"{entity} has an invalid name {name!r}: "
            "only letters, digits, '.', '_' and '-' are allowed"
        )
    return name


def _parse_module(name: str, data: object, service_name: str) -> ModuleSpec:
    entity = f"Module '{service_name}.{name}'"
    _check_name(name, entity)

    if isinstance(data, (str, int, float)) and not isinstance(data, bool):
        data = {"version": data}
    if not isinstance(data, dict):
        raise ConfigError(f"{entity} must be an object or a version string")

    version = data.get("version")
    if isinstance(version, (int, float)) and not isinstance(version, bool):
        # YAML reads 2.10 as the float 2.1
        raise ConfigError(
            f"{entity} version {version!r} was read as a number; "
            f"quote it as a string, e.g. \"{version}\""
        )

    for field in ("version", "description"):
        _optional_field(data, field, entity, str)
    for field in ("enabled", "required"):
        _optional_field(data, field, entity, bool)
    _optional_field(data, "priority", entity, int)

    version = (data.get("version") or LATEST).strip()
    if not is_safe_version(version):
        raise ConfigError(f"{entity} has an invalid version {version!r}")

    return ModuleSpec(
        name=name,
        version=version,
        description=data.get("description") or "",
        enabled=data.get("enabled", True) is not False,
        required=bool(data.get("required", False)),
        priority=data.get("priority"),
    )


def _parse_service(name: str, data: object) -> Service:
    entity = f"Service '{name}'"
    _check_name(name, entity)
    if not isinstance(data, dict):
        raise ConfigError(f"{entity} must be an object")

    _optional_field(data, "description", entity, str)
    _optional_field(data, "enabled", entity, bool)
    _optional_field(data, "priority", entity, int)
    _require_dict_field(data, "modules", entity)

    modules = {
        module_name: _parse_module(module_name, module_data, name)
        for module_name, module_data in data["modules"].items()
    }

    return Service(
        name=name,
        description=data.get("description") or "",
        enabled=data.get("enabled", True) is not False,
        priority=data.get("priority"),
        modules=modules,
    )


def _parse_profile(name: str, data: object) -> Profile:
    entity = f"Profile '{name}'"
    if isinstance(data, list):
        data = {"services": data}
    if not isinstance(data, dict):
        raise ConfigError(f"{entity} must be an object or a list of services")

    _optional_field(data, "description", entity, str)
    if "services" not in data:
        raise ConfigError(f"{entity} missing required field: services")

    return Profile(
        name=name,
        description=data.get("description") or "",
        services=_validate_string_list(data, "services", entity),
    )


def _parse_rules(data: object) -> BatchRules:
    entity = "Batching rules"
    if data is None:
        return BatchRules()
    if not isinstance(data, dict):
        raise ConfigError(f"{entity} must be an object")

    _optional_field(data, "capacity", entity, int)
    capacity = data.get("capacity")
    if capacity is None:
        capacity = 1
    elif capacity < 1:
        raise ConfigError(f"{entity} field 'capacity' must be a positive integer")

    return BatchRules(
        bulk_prefixes=_validate_string_list(data, "bulk_prefixes", entity),
        essential=_validate_string_list(data, "essential", entity),
        service_specific=_validate_string_list(data, "service_specific", entity),
        capacity=capacity,
    )


def _check_template(key: str, template: str, entity: str) -> None:
    """Reject templates that would fail to format at install time."""
    allowed = TEMPLATE_FIELDS[key]
    try:
        fields = [field for _, field, _, _ in string.Formatter().parse(template)]
    except ValueError as e:
        raise ConfigError(
            f"{entity} command '{key}' is not a valid template ({e}); "
            "write literal braces as {{ and }}"
        ) from e

    for field in fields:
        if field is not None and field not in allowed:
            names = ", ".join("{" + name + "}" for name in sorted(allowed))
            raise ConfigError(
                f"{entity} command '{key}' uses unknown placeholder {{{field}}}. "
                f"Must be one of: {names}"
            )


def _parse_registry(data: object) -> dict[str, str]:
    entity = "Registry"
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{entity} must be an object")

    templates = {}
    for key, value in data.items():
        if key not in REGISTRY_TEMPLATE_KEYS:
            allowed = ", ".join(sorted(REGISTRY_TEMPLATE_KEYS))
            raise ConfigError(f"{entity} has unknown command '{key}'. Must be one of: {allowed}")
        if not isinstance(value, str):
            raise ConfigError(f"{entity} field '{key}' must be a string")
        _check_template(key, value, entity)
        templates[key] = value
    return templates


def build_manifest(raw_data: dict, source: str | None = None) -> Manifest:
    """Convert parsed manifest data into a Manifest.

    Raises:
        ConfigError: If the data does not have the manifest shape
    """
    _require_dict_field(raw_data, "services", "Manifest")
    profiles_data = raw_data.get("profiles")
    if profiles_data is None:
        profiles_data = {}
    elif not isinstance(profiles_data, dict):
        raise ConfigError("Manifest field 'profiles' must be an object")

    services = {
        name: _parse_service(name, data) for name, data in raw_data["services"].items()
    }
    profiles = {
        name: _parse_profile(name, data) for name, data in profiles_data.items()
    }

    manifest = Manifest(
        services=services,
        profiles=profiles,
        rules=_parse_rules(raw_data.get("batching")),
        registry=_parse_registry(raw_data.get("registry")),
        source=source,
    )
    _logging.debug(
        f"Loaded manifest with {len(services)} services and {len(profiles)} profiles"
        + (f" from {source}" if source else "")
    )
    return manifest


def load_manifest(source: Path | str) -> Manifest:
    """Load a manifest from a file path or from JSON-ish text.

    Args:
        source: Path to a manifest file, or manifest text

    Returns:
        The loaded Manifest

    Raises:
        ConfigError: If the source is missing, unreadable or malformed
    """
    raw_data = load_config(source)
    label = str(source) if isinstance(source, Path) else None
    return build_manifest(raw_data, source=label)


__all__ = [
    "build_manifest",
    "load_manifest",
]
