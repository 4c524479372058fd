# SPDX-License-Identifier: MIT

"""Run the active analyzers and merge their results.

Each analyzer builds its own result list; the runner is the single merge
point into ``ExecutionContext.results``. A failing analyzer is recorded and
never stops the others.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable

from kub_analyze.analyzers.base import Analyzer
from kub_analyze.errors import AnalysisCancelled, AnalyzerError
from kub_analyze.filters import FilterRegistry, FilterSelection, default_registry, resolve_filters
from kub_analyze.models import ExecutionContext, Result

logger = logging.getLogger(__name__)

STATUS_NOTHING_CHECKED = "nothing_checked"
STATUS_NO_ISSUES = "no_issues"
STATUS_ISSUES_FOUND = "issues_found"


@dataclass
class FailedAnalyzer:
    name: str
    kind: str
    error: BaseException

    @property
    def cancelled(self) -> bool:
        return isinstance(self.error, AnalysisCancelled)

    def to_dict(self) -> dict[str, Any]:
        data = {"analyzer": self.name, "kind": self.kind, "error": str(self.error), "cancelled": self.cancelled}
        if isinstance(self.error, AnalyzerError):
            data.update({k: v for k, v in self.error.to_dict().items() if k not in ("kind", "message")})
        return data


@dataclass
class AnalysisRun:
    selection: FilterSelection
    checked: list[str] = field(default_factory=list)
    results: list[Result] = field(default_factory=list)
    errors: list[FailedAnalyzer] = field(default_factory=list)
    duration_ms: dict[str, float] = field(default_factory=dict)

    @property
    def status(self) -> str:
        if not self.checked:
            return STATUS_NOTHING_CHECKED
        if self.results:
            return STATUS_ISSUES_FOUND
        return STATUS_NO_ISSUES

    @property
    def cancelled(self) -> bool:
        return any(e.cancelled for e in self.errors)

    def rounded_durations(self) -> dict[str, float]:
        return {name: round(ms, 1) for name, ms in self.duration_ms.items()}

    def to_dict(self, anonymize: bool = False) -> dict[str, Any]:
        return {
            "status": self.status,
            "active_filters": list(self.selection.active),
            "unknown_filters": list(self.selection.unknown),
            "checked": list(self.checked),
            "results": [r.to_dict(anonymize=anonymize) for r in self.results],
            "errors": [e.to_dict() for e in self.errors],
            "duration_ms": self.rounded_durations(),
        }


def _run_one(name: str, analyzer: Analyzer, ctx: ExecutionContext) -> tuple[list[Result], BaseException | None, float]:
    start = time.monotonic()
    try:
        results = analyzer.analyze(ctx)
        error = None
    except AnalyzerError as exc:
        results, error = [], exc
    except Exception as exc:
        logger.exception("Analyzer %s raised unexpectedly", name)
        results, error = [], exc
    return results, error, (time.monotonic() - start) * 1000


def run_analysis(
    ctx: ExecutionContext,
    active_filters: Iterable[str] | None = None,
    registry: FilterRegistry | None = None,
    max_workers: int = 1,
) -> AnalysisRun:
    registry = registry or default_registry()
    selection = resolve_filters(active_filters, registry.list_filters())
    run = AnalysisRun(selection=selection)

    for name in selection.unknown:
        logger.debug("Filter %s has no analyzer; skipping", name)

    dispatch: list[tuple[str, Analyzer]] = []
    for name in selection.active:
        analyzer = registry.get(name)
        if analyzer is not None:
            dispatch.append((name, analyzer))
    run.checked = [name for name, _ in dispatch]

    merge_lock = threading.Lock()

    def merge(name: str, analyzer: Analyzer, outcome) -> None:
        results, error, elapsed = outcome
        with merge_lock:
            run.duration_ms[name] = elapsed
            if error is not None:
                run.errors.append(FailedAnalyzer(name=name, kind=analyzer.kind, error=error))
                return
            ctx.results.extend(results)
            run.results.extend(results)

    if max_workers <= 1 or len(dispatch) <= 1:
        for name, analyzer in dispatch:
            merge(name, analyzer, _run_one(name, analyzer, ctx))
    else:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="kub-analyze") as pool:
            futures = [(name, analyzer, pool.submit(_run_one, name, analyzer, ctx)) for name, analyzer in dispatch]
            for name, analyzer, future in futures:
                merge(name, analyzer, future.result())

    logger.debug("Analysis finished: %d checked, %d results, %d errors",
                 len(run.checked), len(run.results), len(run.errors))
    return run
