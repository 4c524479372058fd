# SPDX-License-Identifier: MIT

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any

from kub_analyze.errors import AnalysisCancelled
from kub_analyze.masking import Masker, run_masker
from kub_analyze.metrics import MetricsReporter, get_reporter


def object_key(namespace: str | None, name: str) -> str:
    if namespace:
        return f"{namespace}/{name}"
    return name


@dataclass(frozen=True)
class Sensitive:
    unmasked: str
    masked: str

    def to_dict(self) -> dict[str, str]:
        return {"unmasked": self.unmasked, "masked": self.masked}


@dataclass(frozen=True)
class Failure:
    text: str
    sensitive: tuple[Sensitive, ...] = ()

    def masked_text(self) -> str:
        # Longest first so a name containing its namespace is replaced whole.
        text = self.text
        for pair in sorted(self.sensitive, key=lambda s: -len(s.unmasked)):
            if pair.unmasked:
                text = text.replace(pair.unmasked, pair.masked)
        return text

    def unmask_text(self, text: str) -> str:
        for pair in self.sensitive:
            if pair.masked:
                text = text.replace(pair.masked, pair.unmasked)
        return text

    def to_dict(self, anonymize: bool = False) -> dict[str, Any]:
        # Anonymized output never carries the unmasked values.
        if anonymize:
            return {"text": self.masked_text(), "sensitive": []}
        return {"text": self.text, "sensitive": [s.to_dict() for s in self.sensitive]}


@dataclass(frozen=True)
class Result:
    kind: str
    name: str
    error: tuple[Failure, ...]
    parent_object: str = ""

    def __post_init__(self) -> None:
        if not self.error:
            raise ValueError(f"{self.kind} {self.name}: a Result needs at least one Failure")

    def to_dict(self, anonymize: bool = False) -> dict[str, Any]:
        name = self.name
        parent = self.parent_object
        if anonymize:
            masked = {s.unmasked: s.masked for f in self.error for s in f.sensitive}
            name = "/".join(masked.get(part, part) for part in name.split("/"))
            if parent:
                parent_kind, _, owner = parent.partition("/")
                parent = f"{parent_kind}/{masked.get(owner, owner)}"
        return {
            "kind": self.kind,
            "name": name,
            "error": [f.to_dict(anonymize=anonymize) for f in self.error],
            "parent_object": parent,
        }


class PreAnalysis:
    """Per-analyzer working set of object key -> failures, in listing order."""

    def __init__(self) -> None:
        self._failures: dict[str, list[Failure]] = {}
        self._parents: dict[str, str] = {}

    def add(self, key: str, failures: list[Failure], parent_object: str = "") -> None:
        if failures:
            self._failures.setdefault(key, []).extend(failures)
            if parent_object:
                self._parents.setdefault(key, parent_object)

    def items(self):
        return self._failures.items()

    def __len__(self) -> int:
        return len(self._failures)

    def to_results(self, kind: str) -> list[Result]:
        return [
            Result(kind=kind, name=key, error=tuple(failures), parent_object=self._parents.get(key, ""))
            for key, failures in self._failures.items()
        ]


@dataclass
class ExecutionContext:
    client: Any
    namespace: str = ""
    results: list[Result] = field(default_factory=list)
    metrics: MetricsReporter = field(default_factory=get_reporter)
    masker: Masker = field(default_factory=run_masker)
    timeout: float | None = None
    _cancel: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _deadline: float | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.namespace is None:
            self.namespace = ""
        if self.timeout is not None:
            self._deadline = time.monotonic() + self.timeout

    def cancel(self) -> None:
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def raise_if_cancelled(self, kind: str) -> None:
        if self.cancelled:
            raise AnalysisCancelled(kind, "cancelled")
        if self.expired:
            raise AnalysisCancelled(kind, "timeout")

    def request_timeout(self) -> float | None:
        if self._deadline is None:
            return None
        return max(self._deadline - time.monotonic(), 0.0)
