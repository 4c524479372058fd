# SPDX-License-Identifier: MIT

"""Exception hierarchy.

Semantic findings are never raised; they become ``Failure`` entries. Only
conditions that stop an analyzer from evaluating anything are exceptions.
"""

from __future__ import annotations

from typing import Any


class KubAnalyzeError(Exception):
    pass


class AnalyzerError(KubAnalyzeError):
    """Fatal, per-analyzer error. The run continues with other analyzers."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class ListError(AnalyzerError):
    def __init__(self, kind: str, cause: BaseException):
        self.cause = cause
        self.status = getattr(cause, "status", None)
        reason = getattr(cause, "reason", None) or str(cause)
        if self.status:
            message = f"failed to list {kind}: {self.status} {reason}"
        else:
            message = f"failed to list {kind}: {reason}"
        super().__init__(kind, message)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status"] = self.status
        return data


class AnalysisCancelled(AnalyzerError):
    def __init__(self, kind: str, reason: str = "cancelled"):
        self.reason = reason
        super().__init__(kind, f"{kind} analysis {'timed out' if reason == 'timeout' else 'cancelled'}")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason
        return data


class InvalidScheduleFormat(KubAnalyzeError, ValueError):
    def __init__(self, raw: str, cause: str):
        super().__init__(cause)
        self.raw = raw
        self.cause = cause

    def __str__(self) -> str:
        return self.cause


class FilterRegistrationError(KubAnalyzeError):
    pass
