# SPDX-License-Identifier: MIT

from __future__ import annotations

from kub_analyze.analyzers.base import Analyzer
from kub_analyze.client import list_cluster_objects

PRESSURE_CONDITIONS = ("MemoryPressure", "DiskPressure", "PIDPressure")
# Taints the node lifecycle controller adds itself; NotReady already covers them.
CONTROLLER_TAINTS = ("node.kubernetes.io/not-ready", "node.kubernetes.io/unreachable")


class NodeAnalyzer(Analyzer):
    kind = "Node"

    def list_objects(self, ctx):
        return list_cluster_objects(ctx, self.kind, ctx.client.core.list_node)

    def evaluate(self, node, ctx, related):
        name = node.metadata.name
        failures = []

        has_ready = False
        for cond in (node.status.conditions if node.status else None) or []:
            if cond.type == "Ready":
                has_ready = True
                if cond.status != "True":
                    failures.append(self.failure(
                        ctx, node, f"Node {name} is not ready: {cond.reason or 'unknown'}",
                    ))
            elif cond.type in PRESSURE_CONDITIONS and cond.status == "True":
                failures.append(self.failure(
                    ctx, node, f"Node {name} has {cond.type}: {cond.message or cond.reason or ''}",
                ))
            elif cond.type == "NetworkUnavailable" and cond.status == "True":
                failures.append(self.failure(
                    ctx, node, f"Node {name} network is unavailable: {cond.message or cond.reason or ''}",
                ))
        if not has_ready:
            failures.append(self.failure(ctx, node, f"Node {name} has no Ready condition"))

        spec = node.spec
        if spec is not None:
            if spec.unschedulable:
                failures.append(self.failure(ctx, node, f"Node {name} is cordoned (unschedulable)"))
            for taint in spec.taints or []:
                if taint.effect == "NoExecute" and taint.key not in CONTROLLER_TAINTS:
                    failures.append(self.failure(
                        ctx, node, f"Node {name} has NoExecute taint {taint.key}={taint.value or ''}",
                    ))
        return failures
