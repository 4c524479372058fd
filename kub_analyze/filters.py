# SPDX-License-Identifier: MIT

"""Filter names and the analyzers behind them.

Names fall into exactly one of three groups. Core filters run when the user
configured nothing, additional filters are opt-in, and integration filters are
registered at runtime by external code.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Mapping

from kub_analyze.analyzers import ADDITIONAL_ANALYZERS, CORE_ANALYZERS, Analyzer
from kub_analyze.errors import FilterRegistrationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterCatalog:
    core: tuple[str, ...]
    additional: tuple[str, ...]
    integration: tuple[str, ...]

    @property
    def available(self) -> tuple[str, ...]:
        return self.core + self.additional + self.integration


@dataclass(frozen=True)
class FilterSelection:
    active: tuple[str, ...]
    inactive: tuple[str, ...]
    available: tuple[str, ...]
    unknown: tuple[str, ...]


class FilterRegistry:
    def __init__(self, core: Mapping[str, Analyzer], additional: Mapping[str, Analyzer] | None = None):
        self._core = dict(core)
        self._additional = dict(additional or {})
        self._integration: dict[str, Analyzer] = {}
        self._lock = threading.Lock()
        overlap = set(self._core) & set(self._additional)
        if overlap:
            raise FilterRegistrationError(f"filters registered as both core and additional: {sorted(overlap)}")

    def list_filters(self) -> FilterCatalog:
        with self._lock:
            return FilterCatalog(
                core=tuple(self._core),
                additional=tuple(self._additional),
                integration=tuple(self._integration),
            )

    def get(self, name: str) -> Analyzer | None:
        with self._lock:
            for group in (self._core, self._additional, self._integration):
                if name in group:
                    return group[name]
        return None

    def is_integration(self, name: str) -> bool:
        with self._lock:
            return name in self._integration

    def register_integration(self, name: str, analyzer: Analyzer) -> None:
        with self._lock:
            if name in self._core or name in self._additional or name in self._integration:
                raise FilterRegistrationError(f"filter {name!r} is already registered")
            self._integration[name] = analyzer
        logger.debug("Registered integration filter %s", name)

    def unregister_integration(self, name: str) -> None:
        with self._lock:
            if self._integration.pop(name, None) is None:
                raise FilterRegistrationError(f"filter {name!r} is not a registered integration")


def resolve_filters(configured: Iterable[str] | None, catalog: FilterCatalog) -> FilterSelection:
    active = tuple(dict.fromkeys(configured or ()))
    if not active:
        active = catalog.core
    available = catalog.available
    active_set = set(active)
    known = set(available)
    return FilterSelection(
        active=active,
        inactive=tuple(f for f in available if f not in active_set),
        available=available,
        unknown=tuple(f for f in active if f not in known),
    )


def build_default_registry() -> FilterRegistry:
    return FilterRegistry(
        core={cls.kind: cls() for cls in CORE_ANALYZERS},
        additional={cls.kind: cls() for cls in ADDITIONAL_ANALYZERS},
    )


_default_registry: FilterRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> FilterRegistry:
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = build_default_registry()
        return _default_registry


def list_filters() -> FilterCatalog:
    return default_registry().list_filters()
