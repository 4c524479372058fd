# SPDX-License-Identifier: MIT

"""Process-wide failure-count gauge.

Every analyzer clears the series for its own kind before a run and then sets
one series per failing object. Both steps happen while holding the kind's lock
from ``exclusive``.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import REGISTRY, CollectorRegistry, Gauge

logger = logging.getLogger(__name__)

METRIC_NAME = "kub_analyze_analyzer_errors"
LABELS = ("analyzer_name", "object_name", "namespace")


class MetricsReporter:
    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry if registry is not None else REGISTRY
        self.errors = Gauge(
            METRIC_NAME,
            "Number of analyzer failures per object",
            LABELS,
            registry=self.registry,
        )
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def set(self, kind: str, name: str, namespace: str, value: int) -> None:
        self.errors.labels(kind, name, namespace or "").set(float(value))

    def delete_partial_match(self, kind: str) -> int:
        stale = set()
        for metric in self.errors.collect():
            for sample in metric.samples:
                if sample.labels.get("analyzer_name") == kind:
                    stale.add(tuple(sample.labels[label] for label in LABELS))
        for labels in stale:
            self.errors.remove(*labels)
        if stale:
            logger.debug("Cleared %d stale %s series", len(stale), kind)
        return len(stale)

    def value(self, kind: str, name: str, namespace: str = "") -> float | None:
        return self.registry.get_sample_value(
            METRIC_NAME, {"analyzer_name": kind, "object_name": name, "namespace": namespace or ""},
        )

    @contextmanager
    def exclusive(self, kind: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(kind, threading.Lock())
        with lock:
            yield


_reporter: MetricsReporter | None = None
_reporter_lock = threading.Lock()


def get_reporter() -> MetricsReporter:
    global _reporter
    with _reporter_lock:
        if _reporter is None:
            _reporter = MetricsReporter()
        return _reporter
