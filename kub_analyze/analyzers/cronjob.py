# SPDX-License-Identifier: MIT

from __future__ import annotations

import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter

from kub_analyze.analyzers.base import Analyzer
from kub_analyze.client import list_objects
from kub_analyze.errors import InvalidScheduleFormat

_TZ_PREFIXES = ("CRON_TZ=", "TZ=")

_DESCRIPTORS = frozenset(["@yearly", "@annually", "@monthly", "@weekly", "@daily", "@midnight", "@hourly"])

# Go duration syntax: "1h30m", "90s", "1.5h", "0".
_DURATION = re.compile(r"[-+]?(?:0|(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:ns|us|µs|μs|ms|s|m|h))+)")
_INTEGER = re.compile(r"[-+]?[0-9]+")

_MONTHS = {name: i for i, name in enumerate(
    ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"], start=1)}
_DAYS = {name: i for i, name in enumerate(["sun", "mon", "tue", "wed", "thu", "fri", "sat"])}

# (min, max, names) for minute, hour, day of month, month, day of week.
_FIELDS = (
    (0, 59, {}),
    (0, 23, {}),
    (1, 31, {}),
    (1, 12, _MONTHS),
    (0, 6, _DAYS),
)


def _parse_int(token: str) -> int:
    if not _INTEGER.fullmatch(token):
        raise ValueError(f"failed to parse int from {token}")
    value = int(token)
    if value < 0:
        raise ValueError(f"negative number ({value}) not allowed: {token}")
    return value


def _parse_value(token: str, names: dict[str, int]) -> int:
    if names and token.lower() in names:
        return names[token.lower()]
    return _parse_int(token)


def _normalize_range(expr: str, low: int, high: int, names: dict[str, int]) -> str:
    """Check one comma-separated part and return it in numeric form."""
    range_and_step = expr.split("/")
    bounds = range_and_step[0].split("-")
    single = len(bounds) == 1

    if bounds[0] in ("*", "?"):
        start, end = low, high
    else:
        start = _parse_value(bounds[0], names)
        if len(bounds) == 1:
            end = start
        elif len(bounds) == 2:
            end = _parse_value(bounds[1], names)
        else:
            raise ValueError(f"too many hyphens: {expr}")

    if len(range_and_step) == 1:
        step = 1
    elif len(range_and_step) == 2:
        step = _parse_int(range_and_step[1])
        if single:
            end = high
    else:
        raise ValueError(f"too many slashes: {expr}")

    if start < low:
        raise ValueError(f"beginning of range ({start}) below minimum ({low}): {expr}")
    if end > high:
        raise ValueError(f"end of range ({end}) above maximum ({high}): {expr}")
    if start > end:
        raise ValueError(f"beginning of range ({start}) beyond end of range ({end}): {expr}")
    if step == 0:
        raise ValueError(f"step of range should be a positive number: {expr}")
    if start == end:
        return str(start)
    if step == 1:
        return f"{start}-{end}"
    return f"{start}-{end}/{step}"


def _normalize_field(field: str, low: int, high: int, names: dict[str, int]) -> str:
    parts = [part for part in field.split(",") if part]
    if not parts:
        raise ValueError(f"empty field: {field}")
    return ",".join(_normalize_range(part, low, high, names) for part in parts)


def _check_location(prefix: str) -> None:
    _, _, zone = prefix.partition("=")
    if zone in ("", "UTC", "Local"):
        return
    try:
        ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"provided bad location {zone}: {exc}") from exc


def _check_descriptor(expr: str) -> None:
    if expr in _DESCRIPTORS:
        return
    if expr.startswith("@every "):
        duration = expr[len("@every "):]
        if not _DURATION.fullmatch(duration):
            raise ValueError(f"failed to parse duration {expr}: invalid duration {duration!r}")
        return
    raise ValueError(f"unrecognized descriptor: {expr}")


def check_cron_schedule(schedule: str | None) -> None:
    """Validate a standard five-field cron expression.

    Fields accept numbers, month and weekday names, ``*``, ``?``, ranges,
    lists and steps. Quartz extensions such as ``L``, ``W``, ``#`` and ``H``
    are rejected. An optional ``CRON_TZ=``/``TZ=`` prefix must name a known
    time zone. ``@`` descriptors such as ``@daily`` and ``@every 1h30m`` are
    accepted. Raises ``InvalidScheduleFormat`` otherwise.
    """
    raw = schedule or ""
    expr = raw.strip()
    if not expr:
        raise InvalidScheduleFormat(raw, "empty schedule")

    try:
        if expr.startswith(_TZ_PREFIXES):
            prefix, _, rest = expr.partition(" ")
            _check_location(prefix)
            expr = rest.strip()
            if not expr:
                raise ValueError("missing expression after time zone prefix")

        if expr.startswith("@"):
            _check_descriptor(expr)
            return

        fields = expr.split()
        if len(fields) != 5:
            raise ValueError(f"expected exactly 5 fields, found {len(fields)}: [{' '.join(fields)}]")

        normalized = " ".join(
            _normalize_field(field, low, high, names) for field, (low, high, names) in zip(fields, _FIELDS)
        )
        croniter(normalized)
    except (ValueError, KeyError) as exc:
        raise InvalidScheduleFormat(raw, str(exc) or f"invalid expression {expr!r}") from exc


class CronJobAnalyzer(Analyzer):
    """Suspension takes precedence: a suspended CronJob reports only that.

    Otherwise the schedule and starting-deadline rules are checked
    independently and may both fire.
    """

    kind = "CronJob"

    def list_objects(self, ctx):
        batch = ctx.client.batch
        return list_objects(ctx, self.kind, batch.list_namespaced_cron_job, batch.list_cron_job_for_all_namespaces)

    def evaluate(self, cron_job, ctx, related):
        name = cron_job.metadata.name
        spec = cron_job.spec
        failures = []

        if spec.suspend:
            failures.append(self.failure(ctx, cron_job, f"CronJob {name} is suspended"))
            return failures

        try:
            check_cron_schedule(spec.schedule)
        except InvalidScheduleFormat as exc:
            failures.append(self.failure(ctx, cron_job, f"CronJob {name} has an invalid schedule: {exc}"))

        deadline = spec.starting_deadline_seconds
        if deadline is not None and deadline < 0:
            failures.append(self.failure(ctx, cron_job, f"CronJob {name} has a negative starting deadline"))

        return failures
