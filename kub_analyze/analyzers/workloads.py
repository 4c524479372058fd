# SPDX-License-Identifier: MIT

"""Deployment, StatefulSet and DaemonSet replica checks.

A workload scaled to zero is never reported. A workload with no ready
replicas reports only that, without the degraded or rollout rules.
"""

from __future__ import annotations

from kub_analyze.analyzers.base import Analyzer
from kub_analyze.client import list_objects


def _desired(spec) -> int:
    return spec.replicas if spec.replicas is not None else 1


class DeploymentAnalyzer(Analyzer):
    kind = "Deployment"

    def list_objects(self, ctx):
        apps = ctx.client.apps
        return list_objects(ctx, self.kind, apps.list_namespaced_deployment, apps.list_deployment_for_all_namespaces)

    def evaluate(self, dep, ctx, related):
        name = dep.metadata.name
        status = dep.status
        desired = _desired(dep.spec)
        ready = status.ready_replicas or 0
        updated = status.updated_replicas or 0
        total = status.replicas or 0
        failures = []

        if desired == 0:
            return failures
        if ready == 0:
            failures.append(self.failure(ctx, dep, f"Deployment {name} has no ready replicas (0/{desired})"))
            return failures
        if ready < desired:
            failures.append(self.failure(ctx, dep, f"Deployment {name} is degraded: {ready}/{desired} replicas ready"))
        if updated < desired or total > desired:
            for cond in status.conditions or []:
                if cond.type == "Progressing" and cond.status == "False":
                    failures.append(self.failure(
                        ctx, dep,
                        f"Deployment {name} rollout is stuck: {cond.reason or 'unknown'} - {cond.message or ''}",
                    ))
                    break
        return failures


class StatefulSetAnalyzer(Analyzer):
    kind = "StatefulSet"

    def list_objects(self, ctx):
        apps = ctx.client.apps
        return list_objects(ctx, self.kind, apps.list_namespaced_stateful_set, apps.list_stateful_set_for_all_namespaces)

    def evaluate(self, sts, ctx, related):
        name = sts.metadata.name
        desired = _desired(sts.spec)
        ready = sts.status.ready_replicas or 0
        if desired == 0:
            return []
        if ready == 0:
            return [self.failure(ctx, sts, f"StatefulSet {name} has no ready replicas (0/{desired})")]
        if ready < desired:
            return [self.failure(ctx, sts, f"StatefulSet {name} is degraded: {ready}/{desired} replicas ready")]
        return []


class DaemonSetAnalyzer(Analyzer):
    kind = "DaemonSet"

    def list_objects(self, ctx):
        apps = ctx.client.apps
        return list_objects(ctx, self.kind, apps.list_namespaced_daemon_set, apps.list_daemon_set_for_all_namespaces)

    def evaluate(self, ds, ctx, related):
        name = ds.metadata.name
        status = ds.status
        desired = status.desired_number_scheduled or 0
        ready = status.number_ready or 0
        misscheduled = status.number_misscheduled or 0
        failures = []
        if desired == 0:
            return failures
        if ready < desired:
            failures.append(self.failure(
                ctx, ds, f"DaemonSet {name} is missing pods on {desired - ready}/{desired} nodes ({ready} ready)",
            ))
        if misscheduled > 0:
            failures.append(self.failure(ctx, ds, f"DaemonSet {name} has {misscheduled} mis-scheduled pods"))
        return failures
