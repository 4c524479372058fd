"""
Shared test fixtures.

The cluster client is a MagicMock; each test sets the return value of the
list call its analyzer uses. No network.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from kubernetes import client as k8s
from prometheus_client import CollectorRegistry

from kub_analyze.masking import Masker
from kub_analyze.metrics import MetricsReporter
from kub_analyze.models import ExecutionContext


@pytest.fixture
def reporter() -> MetricsReporter:
    """Reporter on its own registry so tests never share series."""
    return MetricsReporter(registry=CollectorRegistry())


@pytest.fixture
def masker() -> Masker:
    return Masker(salt=b"test-salt")


@pytest.fixture
def cluster() -> MagicMock:
    return MagicMock(name="cluster")


@pytest.fixture
def ctx(cluster, reporter, masker) -> ExecutionContext:
    return ExecutionContext(client=cluster, metrics=reporter, masker=masker)


@pytest.fixture
def make_cronjob():
    """Build a real V1CronJob."""
    def _make(name, namespace="default", schedule="*/5 * * * *", suspend=False, deadline=None):
        return k8s.V1CronJob(
            metadata=k8s.V1ObjectMeta(name=name, namespace=namespace),
            spec=k8s.V1CronJobSpec(
                schedule=schedule,
                suspend=suspend,
                starting_deadline_seconds=deadline,
                job_template=k8s.V1JobTemplateSpec(),
            ),
        )
    return _make


@pytest.fixture
def cronjob_list():
    def _list(*items):
        return k8s.V1CronJobList(items=list(items))
    return _list


@pytest.fixture
def obj():
    """Attribute bag standing in for API objects whose models need many fields."""
    def _obj(name, namespace="default", **fields):
        return SimpleNamespace(metadata=SimpleNamespace(name=name, namespace=namespace), **fields)
    return _obj


@pytest.fixture
def items():
    def _items(*objects):
        return SimpleNamespace(items=list(objects))
    return _items
