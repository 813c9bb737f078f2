"""Outcome aggregation and reporting."""

from .models import StepResult, Summary


def summarize(results: dict[str, StepResult]) -> Summary:
    failed = [name for name, result in results.items() if not result.success]
    return Summary(
        count=len(results),
        success_count=len(results) - len(failed),
        fail_count=len(failed),
        failed_names=failed,
    )


def merge_results(per_batch: dict[str, dict[str, StepResult]]) -> dict[str, StepResult]:
    """Flatten per-batch results into one run-level map."""
    merged: dict[str, StepResult] = {}
    for results in per_batch.values():
        merged.update(results)
    return merged


def render_report(per_batch: dict[str, dict[str, StepResult]]) -> str:
    """Render per-batch and run-level summaries with failure details."""
    lines = ["Installation Report", ""]

    for batch_name, results in per_batch.items():
        summary = summarize(results)
        lines.append(
            f"  {batch_name}: {summary.success_count}/{summary.count} succeeded"
            + (f", {summary.fail_count} failed" if summary.fail_count else "")
        )

    merged = merge_results(per_batch)
    total = summarize(merged)
    soft = [r.module for r in merged.values() if r.status == "locked"]

    lines.append("")
    lines.append(
        f"Total: {total.count} module(s), {total.success_count} succeeded, "
        f"{total.fail_count} failed"
    )

    if soft:
        lines.append("")
        lines.append("Kept existing version (module in use):")
        for name in soft:
            lines.append(f"   • {name}")

    if total.failed_names:
        lines.append("")
        lines.append("Failed modules:")
        for name in total.failed_names:
            result = merged[name]
            note = " (may be a false failure)" if result.possibly_spurious else ""
            lines.append(f"   • {name}{note}: {result.message}")
        lines.append("")
        lines.append(
            "Re-run the same command to retry; satisfied modules are skipped."
        )

    return "\n".join(lines)


__all__ = [
    "summarize",
    "merge_results",
    "render_report",
]
