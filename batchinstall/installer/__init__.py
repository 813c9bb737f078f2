"""Installer engine: resolution, batch planning, installation and reporting."""

from .installation import (
    confirm_installation,
    install_batch,
    install_module,
    run_batches,
)
from .models import (
    LATEST,
    Batch,
    BatchRules,
    InstallOptions,
    Manifest,
    ModuleSpec,
    Profile,
    Service,
    StepResult,
    Summary,
    VersionCheckPolicy,
)
from .planning import BATCH_ORDER, classify_module, plan_batches, render_plan
from .resolution import (
    ProfileNotFoundError,
    broadest_profile,
    order_services,
    parse_service_list,
    resolve_modules,
    select_services,
)
from .summary import merge_results, render_report, summarize

__all__ = [
    "LATEST",
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
    "ProfileNotFoundError",
    "parse_service_list",
    "broadest_profile",
    "select_services",
    "order_services",
    "resolve_modules",
    "BATCH_ORDER",
    "classify_module",
    "plan_batches",
    "render_plan",
    "confirm_installation",
    "install_module",
    "install_batch",
    "run_batches",
    "summarize",
    "merge_results",
    "render_report",
]
