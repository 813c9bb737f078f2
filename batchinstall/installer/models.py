"""Data models for the manifest and installation runs."""

from dataclasses import dataclass, field
from enum import Enum

LATEST = "latest"

# Sorts services and modules without an explicit priority after all others.
UNSET_PRIORITY = float("inf")


class VersionCheckPolicy(Enum):
    KEEP_EXISTING = "keep_existing"
    ABORT = "abort"


@dataclass
class ModuleSpec:
    name: str
    version: str = LATEST
    description: str = ""
    enabled: bool = True
    required: bool = False
    priority: int | None = None

    @property
    def is_latest(self) -> bool:
        return self.version.lower() == LATEST


@dataclass
class Service:
    name: str
    description: str = ""
    enabled: bool = True
    priority: int | None = None
    modules: dict[str, ModuleSpec] = field(default_factory=dict)

    def enabled_modules(self) -> list[ModuleSpec]:
        modules = [m for m in self.modules.values() if m.enabled]
        return sorted(modules, key=lambda m: _sort_priority(m.priority))


@dataclass
class Profile:
    name: str
    description: str = ""
    services: list[str] = field(default_factory=list)


@dataclass
class BatchRules:
    """Name-based rules used to partition a resolved module set."""

    bulk_prefixes: list[str] = field(default_factory=list)
    essential: list[str] = field(default_factory=list)
    service_specific: list[str] = field(default_factory=list)
    capacity: int = 1

    def is_bulk(self, module: str) -> bool:
        lowered = module.lower()
        return any(lowered.startswith(p.lower()) for p in self.bulk_prefixes)

    def is_essential(self, module: str) -> bool:
        return module.lower() in {name.lower() for name in self.essential}

    def is_service_specific(self, module: str) -> bool:
        return module.lower() in {name.lower() for name in self.service_specific}


@dataclass
class Manifest:
    services: dict[str, Service] = field(default_factory=dict)
    profiles: dict[str, Profile] = field(default_factory=dict)
    rules: BatchRules = field(default_factory=BatchRules)
    registry: dict[str, str] = field(default_factory=dict)
    source: str | None = None


@dataclass
class Batch:
    """An ordered group of modules installed as a unit.

    When ``chunk_size`` is set the members are installed in consecutive
    sub-batches of at most that many modules. The runner can pause or stop
    between sub-batches the same way it does between batches.
    """

    name: str
    members: dict[str, str] = field(default_factory=dict)
    chunk_size: int | None = None

    @property
    def groups(self) -> list[dict[str, str]]:
        if not self.members:
            return []
        if not self.chunk_size:
            return [dict(self.members)]
        items = list(self.members.items())
        return [
            dict(items[i : i + self.chunk_size])
            for i in range(0, len(items), self.chunk_size)
        ]

    def __len__(self) -> int:
        return len(self.members)


@dataclass
class InstallOptions:
    force: bool = False
    automated: bool = False
    skip_version_check: bool = False
    scope: str = "CurrentUser"
    allow_clobber: bool = True
    on_version_check_failure: VersionCheckPolicy = VersionCheckPolicy.KEEP_EXISTING


@dataclass
class StepResult:
    module: str
    status: str
    message: str = ""
    possibly_spurious: bool = False

    @property
    def success(self) -> bool:
        return self.status != "failed"


@dataclass
class Summary:
    count: int
    success_count: int
    fail_count: int
    failed_names: list[str] = field(default_factory=list)


def _sort_priority(priority: int | None) -> float:
    return UNSET_PRIORITY if priority is None else priority


__all__ = [
    "LATEST",
    "UNSET_PRIORITY",
    "VersionCheckPolicy",
    "ModuleSpec",
    "Service",
    "Profile",
    "BatchRules",
    "Manifest",
    "Batch",
    "InstallOptions",
    "StepResult",
    "Summary",
]
