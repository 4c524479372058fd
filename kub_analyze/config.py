# SPDX-License-Identifier: MIT

from __future__ import annotations

from typing import Any, Mapping

ACTIVE_FILTERS_KEY = "active_filters"


def active_filters_from(source: Mapping[str, Any] | None, key: str = ACTIVE_FILTERS_KEY) -> list[str]:
    """Read the configured filter names; a missing key means no selection."""
    value = (source or {}).get(key)
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(name).strip() for name in value if str(name).strip()]
