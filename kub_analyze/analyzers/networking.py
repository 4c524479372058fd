# SPDX-License-Identifier: MIT

from __future__ import annotations

from kub_analyze.analyzers.base import Analyzer
from kub_analyze.client import list_objects
from kub_analyze.models import object_key


class ServiceAnalyzer(Analyzer):
    """Selector-based services must have at least one ready endpoint address.

    ExternalName and headless services are skipped.
    """

    kind = "Service"

    def list_objects(self, ctx):
        core = ctx.client.core
        return list_objects(ctx, self.kind, core.list_namespaced_service, core.list_service_for_all_namespaces)

    def related_objects(self, ctx):
        core = ctx.client.core
        endpoints = list_objects(ctx, "Endpoints", core.list_namespaced_endpoints, core.list_endpoints_for_all_namespaces)
        addresses = {}
        for ep in endpoints:
            ready = sum(len(subset.addresses or []) for subset in ep.subsets or [])
            not_ready = sum(len(subset.not_ready_addresses or []) for subset in ep.subsets or [])
            addresses[object_key(ep.metadata.namespace, ep.metadata.name)] = (ready, not_ready)
        return {"endpoints": addresses}

    def evaluate(self, svc, ctx, related):
        spec = svc.spec
        if spec.type == "ExternalName" or spec.cluster_ip == "None" or not spec.selector:
            return []
        meta = svc.metadata
        ready, not_ready = related["endpoints"].get(object_key(meta.namespace, meta.name), (0, 0))
        if ready:
            return []
        if not_ready:
            text = f"Service {meta.name} has no ready endpoints ({not_ready} not ready)"
        else:
            text = f"Service {meta.name} has no endpoints matching selector {_selector_str(spec.selector)}"
        return [self.failure(ctx, svc, text)]


class IngressAnalyzer(Analyzer):
    kind = "Ingress"

    def list_objects(self, ctx):
        net = ctx.client.networking
        return list_objects(ctx, self.kind, net.list_namespaced_ingress, net.list_ingress_for_all_namespaces)

    def related_objects(self, ctx):
        core = ctx.client.core
        services = list_objects(ctx, "Service", core.list_namespaced_service, core.list_service_for_all_namespaces)
        secrets = list_objects(ctx, "Secret", core.list_namespaced_secret, core.list_secret_for_all_namespaces)
        return {
            "services": {object_key(s.metadata.namespace, s.metadata.name) for s in services},
            "secrets": {object_key(s.metadata.namespace, s.metadata.name) for s in secrets},
        }

    def evaluate(self, ing, ctx, related):
        meta = ing.metadata
        failures = []
        seen = set()
        for rule in ing.spec.rules or []:
            if not rule.http:
                continue
            for path in rule.http.paths or []:
                backend = path.backend.service if path.backend else None
                if backend is None or backend.name in seen:
                    continue
                seen.add(backend.name)
                if object_key(meta.namespace, backend.name) not in related["services"]:
                    failures.append(self.failure(
                        ctx, ing, f"Ingress {meta.name} uses the service {backend.name} which does not exist",
                    ))
        for tls in ing.spec.tls or []:
            if tls.secret_name and object_key(meta.namespace, tls.secret_name) not in related["secrets"]:
                failures.append(self.failure(
                    ctx, ing, f"Ingress {meta.name} uses the TLS secret {tls.secret_name} which does not exist",
                ))
        return failures


class NetworkPolicyAnalyzer(Analyzer):
    kind = "NetworkPolicy"

    def list_objects(self, ctx):
        net = ctx.client.networking
        return list_objects(ctx, self.kind, net.list_namespaced_network_policy,
                            net.list_network_policy_for_all_namespaces)

    def evaluate(self, np, ctx, related):
        name = np.metadata.name
        spec = np.spec
        policy_types = spec.policy_types or []
        failures = []
        if "Ingress" in policy_types and not spec.ingress:
            failures.append(self.failure(
                ctx, np, f"NetworkPolicy {name} denies all ingress traffic to matched pods",
            ))
        if "Egress" in policy_types and not spec.egress:
            failures.append(self.failure(
                ctx, np, f"NetworkPolicy {name} denies all egress traffic from matched pods, including DNS",
            ))
        return failures


def _selector_str(selector: dict) -> str:
    return ",".join(f"{k}={v}" for k, v in selector.items())
