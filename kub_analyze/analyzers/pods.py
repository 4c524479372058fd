# SPDX-License-Identifier: MIT

from __future__ import annotations

from kub_analyze.analyzers.base import Analyzer
from kub_analyze.client import list_objects

IMAGE_PULL_REASONS = ("ImagePullBackOff", "ErrImagePull", "InvalidImageName")
TRANSIENT_WAITING_REASONS = ("ContainerCreating", "PodInitializing")


class PodAnalyzer(Analyzer):
    """A Failed or unschedulable Pending pod reports only its phase.

    Container states are inspected for every other phase.
    """

    kind = "Pod"

    def list_objects(self, ctx):
        core = ctx.client.core
        return list_objects(ctx, self.kind, core.list_namespaced_pod, core.list_pod_for_all_namespaces)

    def evaluate(self, pod, ctx, related):
        name = pod.metadata.name
        status = pod.status
        phase = (status.phase if status else None) or "Unknown"
        failures = []

        if phase == "Failed":
            reason = status.reason or "Unknown"
            msg = status.message or "Pod failed"
            failures.append(self.failure(ctx, pod, f"Pod {name} is in Failed state: {reason} - {msg}"))
            return failures

        if phase == "Pending":
            for cond in status.conditions or []:
                if cond.type == "PodScheduled" and cond.status == "False":
                    reason = cond.reason or "Unknown"
                    detail = f": {cond.message}" if cond.message else ""
                    failures.append(self.failure(ctx, pod, f"Pod {name} is pending - {reason}{detail}"))
                    return failures

        statuses = [("container", cs) for cs in status.container_statuses or []]
        statuses += [("init-container", cs) for cs in status.init_container_statuses or []]
        for container_kind, cs in statuses:
            text = _container_problem(name, container_kind, cs)
            if text:
                failures.append(self.failure(ctx, pod, text))

        return failures


def _container_problem(pod_name, container_kind, cs):
    cname = cs.name
    if cs.state and cs.state.waiting:
        reason = cs.state.waiting.reason or ""
        wait_msg = cs.state.waiting.message or ""
        if reason == "CrashLoopBackOff":
            return (f"Pod {pod_name} {container_kind} '{cname}' is in CrashLoopBackOff "
                    f"({cs.restart_count} restarts)")
        if reason in IMAGE_PULL_REASONS:
            return f"Pod {pod_name} {container_kind} '{cname}' cannot pull image {cs.image}: {reason}"
        if reason == "CreateContainerConfigError":
            return f"Pod {pod_name} {container_kind} '{cname}' has a config error: {wait_msg}"
        if reason and reason not in TRANSIENT_WAITING_REASONS:
            return f"Pod {pod_name} {container_kind} '{cname}' is waiting: {reason} - {wait_msg}"

    if cs.last_state and cs.last_state.terminated and cs.last_state.terminated.reason == "OOMKilled":
        term = cs.last_state.terminated
        return (f"Pod {pod_name} {container_kind} '{cname}' was OOMKilled "
                f"(exit code {term.exit_code}, {cs.restart_count} restarts)")
    return None
