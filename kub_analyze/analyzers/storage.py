# SPDX-License-Identifier: MIT

from __future__ import annotations

from kub_analyze.analyzers.base import Analyzer
from kub_analyze.client import list_cluster_objects, list_objects


class PersistentVolumeClaimAnalyzer(Analyzer):
    kind = "PersistentVolumeClaim"

    def list_objects(self, ctx):
        core = ctx.client.core
        return list_objects(ctx, self.kind, core.list_namespaced_persistent_volume_claim,
                            core.list_persistent_volume_claim_for_all_namespaces)

    def related_objects(self, ctx):
        classes = list_cluster_objects(ctx, "StorageClass", ctx.client.storage.list_storage_class)
        return {"storage_classes": {sc.metadata.name for sc in classes}}

    def evaluate(self, pvc, ctx, related):
        name = pvc.metadata.name
        phase = (pvc.status.phase if pvc.status else None) or "Unknown"
        if phase == "Pending":
            sc_name = pvc.spec.storage_class_name or ""
            storage_classes = related["storage_classes"]
            if sc_name and sc_name not in storage_classes:
                text = f"PersistentVolumeClaim {name} is pending: StorageClass {sc_name} does not exist"
            elif not sc_name and not storage_classes:
                text = (f"PersistentVolumeClaim {name} is pending: no StorageClass is specified "
                        f"and none exist in the cluster")
            else:
                text = f"PersistentVolumeClaim {name} is pending"
            return [self.failure(ctx, pvc, text)]
        if phase == "Lost":
            return [self.failure(ctx, pvc, f"PersistentVolumeClaim {name} is lost: its PersistentVolume was deleted")]
        return []
