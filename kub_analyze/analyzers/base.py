# SPDX-License-Identifier: MIT

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from kub_analyze.models import ExecutionContext, Failure, PreAnalysis, Result, Sensitive, object_key

logger = logging.getLogger(__name__)


def parent_object(obj: Any) -> str:
    """``Kind/name`` of the controlling owner, or of the first owner if none controls."""
    owners = getattr(obj.metadata, "owner_references", None) or []
    if not owners:
        return ""
    owner = next((ref for ref in owners if getattr(ref, "controller", False)), owners[0])
    return f"{owner.kind}/{owner.name}"


class Analyzer(ABC):
    """One resource kind evaluated against a fixed, ordered rule set.

    Subclasses implement ``list_objects`` and ``evaluate``. Listing errors
    propagate as ``AnalyzerError``; rule violations are returned as failures.
    """

    kind: str = ""

    @abstractmethod
    def list_objects(self, ctx: ExecutionContext) -> list[Any]:
        ...

    @abstractmethod
    def evaluate(self, obj: Any, ctx: ExecutionContext, related: dict[str, Any]) -> list[Failure]:
        ...

    def related_objects(self, ctx: ExecutionContext) -> dict[str, Any]:
        """Lookups from other kinds needed by the rules. Listing errors here are fatal too."""
        return {}

    def analyze(self, ctx: ExecutionContext) -> list[Result]:
        start = time.monotonic()
        with ctx.metrics.exclusive(self.kind):
            ctx.metrics.delete_partial_match(self.kind)

            objects = self.list_objects(ctx)
            related = self.related_objects(ctx) if objects else {}
            pre = PreAnalysis()
            failing: list[tuple[str, str, int]] = []
            for obj in objects:
                failures = self.evaluate(obj, ctx, related)
                if failures:
                    meta = obj.metadata
                    pre.add(object_key(meta.namespace, meta.name), failures, parent_object(obj))
                    failing.append((meta.name, meta.namespace or "", len(failures)))

            for name, namespace, count in failing:
                ctx.metrics.set(self.kind, name, namespace, count)

        results = pre.to_results(self.kind)
        logger.debug("%s: %d objects, %d results in %.0fms",
                     self.kind, len(objects), len(results), (time.monotonic() - start) * 1000)
        return results

    def failure(self, ctx: ExecutionContext, obj: Any, text: str) -> Failure:
        meta = obj.metadata
        sensitive = []
        if meta.namespace:
            sensitive.append(Sensitive(meta.namespace, ctx.masker.mask(meta.namespace)))
        sensitive.append(Sensitive(meta.name, ctx.masker.mask(meta.name)))
        parent = parent_object(obj)
        if parent:
            owner = parent.split("/", 1)[1]
            if owner != meta.name:
                sensitive.append(Sensitive(owner, ctx.masker.mask(owner)))
        return Failure(text=text, sensitive=tuple(sensitive))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r})"
