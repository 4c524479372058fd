# SPDX-License-Identifier: MIT

from kub_analyze.analyzers.base import Analyzer
from kub_analyze.analyzers.cronjob import CronJobAnalyzer, check_cron_schedule
from kub_analyze.analyzers.networking import IngressAnalyzer, NetworkPolicyAnalyzer, ServiceAnalyzer
from kub_analyze.analyzers.nodes import NodeAnalyzer
from kub_analyze.analyzers.pods import PodAnalyzer
from kub_analyze.analyzers.storage import PersistentVolumeClaimAnalyzer
from kub_analyze.analyzers.workloads import DaemonSetAnalyzer, DeploymentAnalyzer, StatefulSetAnalyzer

CORE_ANALYZERS = [
    PodAnalyzer,
    DeploymentAnalyzer,
    StatefulSetAnalyzer,
    ServiceAnalyzer,
    IngressAnalyzer,
    PersistentVolumeClaimAnalyzer,
    NodeAnalyzer,
    CronJobAnalyzer,
]

ADDITIONAL_ANALYZERS = [
    DaemonSetAnalyzer,
    NetworkPolicyAnalyzer,
]

__all__ = [
    "Analyzer",
    "CronJobAnalyzer",
    "DaemonSetAnalyzer",
    "DeploymentAnalyzer",
    "IngressAnalyzer",
    "NetworkPolicyAnalyzer",
    "NodeAnalyzer",
    "PersistentVolumeClaimAnalyzer",
    "PodAnalyzer",
    "ServiceAnalyzer",
    "StatefulSetAnalyzer",
    "check_cron_schedule",
    "CORE_ANALYZERS",
    "ADDITIONAL_ANALYZERS",
]
