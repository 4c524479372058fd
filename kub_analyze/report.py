# SPDX-License-Identifier: MIT

from __future__ import annotations

from typing import Any

from kub_analyze.filters import FilterCatalog, FilterSelection
from kub_analyze.runner import STATUS_ISSUES_FOUND, STATUS_NOTHING_CHECKED, AnalysisRun


def _filter_line(name: str, catalog: FilterCatalog) -> str:
    if name in catalog.integration:
        return f"> {name} (integration)"
    return f"> {name}"


def filter_listing_text(selection: FilterSelection, catalog: FilterCatalog) -> str:
    lines = ["Active:"]
    lines.extend(_filter_line(name, catalog) for name in selection.active)
    if selection.inactive:
        lines.append("Unused:")
        lines.extend(_filter_line(name, catalog) for name in selection.inactive)
    return "\n".join(lines)


def build_summary(run: AnalysisRun) -> dict[str, Any]:
    return {
        "status": run.status,
        "active_filters": list(run.selection.active),
        "checked_count": len(run.checked),
        "result_count": len(run.results),
        "failure_count": sum(len(r.error) for r in run.results),
        "failed_analyzers": [e.name for e in run.errors],
        "unknown_filters": list(run.selection.unknown),
        "cancelled": run.cancelled,
        "duration_ms": run.rounded_durations(),
    }


def generate_report_text(run: AnalysisRun, anonymize: bool = False) -> str:
    lines = [f"# Analysis: {len(run.checked)} analyzers checked"]

    if run.status == STATUS_NOTHING_CHECKED:
        lines.append("Nothing was checked: no active filter matched an analyzer.")
    elif run.status == STATUS_ISSUES_FOUND:
        total = sum(len(r.error) for r in run.results)
        lines.append(f"Found {total} issue(s) across {len(run.results)} object(s).")
    else:
        lines.append("No issues found.")

    if run.errors:
        lines.append("\n## Failed analyzers")
        for err in run.errors:
            lines.append(f"- {err.name}: {err.error}")

    for i, result in enumerate(run.results):
        data = result.to_dict(anonymize=anonymize)
        lines.append(f"\n{i}: {data['kind']} {data['name']}")
        for failure in data["error"]:
            lines.append(f"- Error: {failure['text']}")

    return "\n".join(lines)
