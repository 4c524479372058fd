# SPDX-License-Identifier: MIT

"""Thin wrapper over the Kubernetes Python client.

Analyzers never build API objects themselves; they go through ``list_objects``
so namespace scoping, request timeouts and error translation stay uniform.
"""

from __future__ import annotations

import logging
from functools import cached_property
from typing import Any, Callable

from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import HTTPError

from kub_analyze.errors import ListError

logger = logging.getLogger(__name__)


class ClusterClient:
    def __init__(self, api_client: Any):
        self.api_client = api_client

    @cached_property
    def core(self):
        from kubernetes.client import CoreV1Api
        return CoreV1Api(self.api_client)

    @cached_property
    def apps(self):
        from kubernetes.client import AppsV1Api
        return AppsV1Api(self.api_client)

    @cached_property
    def batch(self):
        from kubernetes.client import BatchV1Api
        return BatchV1Api(self.api_client)

    @cached_property
    def networking(self):
        from kubernetes.client import NetworkingV1Api
        return NetworkingV1Api(self.api_client)

    @cached_property
    def storage(self):
        from kubernetes.client import StorageV1Api
        return StorageV1Api(self.api_client)


def connect(kubeconfig: str | None = None, context: str | None = None) -> ClusterClient:
    """Load kubeconfig, falling back to the in-cluster service account."""
    from kubernetes import client, config
    from kubernetes.config.config_exception import ConfigException

    try:
        config.load_kube_config(config_file=kubeconfig, context=context)
    except ConfigException:
        config.load_incluster_config()
    return ClusterClient(client.ApiClient())


def _call(ctx, kind: str, fn: Callable[..., Any], *args: Any) -> list[Any]:
    ctx.raise_if_cancelled(kind)
    kwargs: dict[str, Any] = {}
    timeout = ctx.request_timeout()
    if timeout is not None:
        kwargs["_request_timeout"] = timeout
    try:
        response = fn(*args, **kwargs)
    except (ApiException, HTTPError) as exc:
        # A timeout or cancel that fired mid-request is reported as such.
        ctx.raise_if_cancelled(kind)
        logger.warning("Listing %s failed: %s", kind, exc)
        raise ListError(kind, exc) from exc
    # A cancel that arrived while the call was in flight discards its response.
    ctx.raise_if_cancelled(kind)
    return list(response.items or [])


def list_objects(ctx, kind: str, namespaced_fn: Callable[..., Any], all_namespaces_fn: Callable[..., Any]) -> list[Any]:
    if ctx.namespace:
        return _call(ctx, kind, namespaced_fn, ctx.namespace)
    return _call(ctx, kind, all_namespaces_fn)


def list_cluster_objects(ctx, kind: str, fn: Callable[..., Any]) -> list[Any]:
    return _call(ctx, kind, fn)
