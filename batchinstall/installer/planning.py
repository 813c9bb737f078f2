"""Batch planning and rendering."""

from .models import Batch, BatchRules

CORE = "core"
BULK_ESSENTIAL = "bulk-essential"
BULK_REMAINDER = "bulk-remainder"
SERVICE = "service"

BATCH_ORDER = [CORE, BULK_ESSENTIAL, BULK_REMAINDER, SERVICE]


def classify_module(module: str, rules: BatchRules) -> str:
    """Return the name of the batch a module belongs to."""
    if rules.is_service_specific(module):
        return SERVICE
    if rules.is_bulk(module):
        return BULK_ESSENTIAL if rules.is_essential(module) else BULK_REMAINDER
    return CORE


def plan_batches(resolved: dict[str, str], rules: BatchRules) -> list[Batch]:
    """Partition a resolved module set into ordered batches.

    Always returns the four batches in install order, some possibly
    empty: core modules, the essential part of the bulk namespace, the
    rest of the bulk namespace in sub-batches of at most
    ``rules.capacity`` modules, then service-specific modules. Every
    resolved module lands in exactly one batch.
    """
    batches = {
        CORE: Batch(CORE),
        BULK_ESSENTIAL: Batch(BULK_ESSENTIAL),
        BULK_REMAINDER: Batch(BULK_REMAINDER, chunk_size=max(1, rules.capacity)),
        SERVICE: Batch(SERVICE),
    }

    for module, version in resolved.items():
        batches[classify_module(module, rules)].members[module] = version

    return [batches[name] for name in BATCH_ORDER]


def render_plan(batches: list[Batch], title: str = "Installation Plan") -> str:
    lines = [title, ""]
    total = sum(len(batch) for batch in batches)

    for i, batch in enumerate(batches, 1):
        if not batch.members:
            lines.append(f"  {i}. {batch.name}: (empty)")
            continue

        if batch.chunk_size:
            detail = f"{len(batch.groups)} sub-batch(es) of up to {batch.chunk_size}"
        else:
            detail = "installed together"
        lines.append(f"  {i}. {batch.name}: {len(batch)} module(s), {detail}")
        for module, version in batch.members.items():
            lines.append(f"     • {module} ({version})")

    lines.append("")
    lines.append(f"Total modules: {total}")
    return "\n".join(lines)


__all__ = [
    "CORE",
    "BULK_ESSENTIAL",
    "BULK_REMAINDER",
    "SERVICE",
    "BATCH_ORDER",
    "classify_module",
    "plan_batches",
    "render_plan",
]
