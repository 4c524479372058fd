# SPDX-License-Identifier: MIT

"""Rule-based analysis of Kubernetes resources with redacted findings."""

from kub_analyze.analyzers import Analyzer
from kub_analyze.client import ClusterClient, connect
from kub_analyze.errors import (
    AnalysisCancelled,
    AnalyzerError,
    FilterRegistrationError,
    InvalidScheduleFormat,
    KubAnalyzeError,
    ListError,
)
from kub_analyze.filters import FilterCatalog, FilterRegistry, FilterSelection, default_registry, list_filters, resolve_filters
from kub_analyze.masking import Masker, mask_string, run_masker
from kub_analyze.metrics import MetricsReporter, get_reporter
from kub_analyze.models import ExecutionContext, Failure, PreAnalysis, Result, Sensitive
from kub_analyze.runner import AnalysisRun, FailedAnalyzer, run_analysis

__version__ = "0.1.0"

__all__ = [
    "AnalysisCancelled",
    "AnalysisRun",
    "Analyzer",
    "AnalyzerError",
    "ClusterClient",
    "ExecutionContext",
    "FailedAnalyzer",
    "Failure",
    "FilterCatalog",
    "FilterRegistrationError",
    "FilterRegistry",
    "FilterSelection",
    "InvalidScheduleFormat",
    "KubAnalyzeError",
    "ListError",
    "Masker",
    "MetricsReporter",
    "PreAnalysis",
    "Result",
    "Sensitive",
    "connect",
    "default_registry",
    "get_reporter",
    "list_filters",
    "mask_string",
    "resolve_filters",
    "run_analysis",
    "run_masker",
]
