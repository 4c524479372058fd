#!/usr/bin/python
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MIT

"""Ansible module that runs the kub-analyze analyzers against a cluster.

The module connects to the K8s API from the Ansible control node, runs every
active analyzer and returns one result per failing object. All API calls are
read-only list operations.
"""

from __future__ import annotations

DOCUMENTATION = r"""
---
module: kub_analyze
short_description: Analyze Kubernetes resources and report redacted findings
version_added: "0.1.0"
description:
  - Connects to a Kubernetes cluster via kubeconfig and runs the selected
    analyzers, one per resource kind.
  - Each failing object yields one result with its failures; healthy objects
    yield nothing.
  - An analyzer whose list call fails is reported under C(errors) and does not
    stop the others.
  - Completely read-only.
options:
  kubeconfig:
    description: Path to the kubeconfig file.
    type: path
    default: ~/.kube/config
  context:
    description: Kubeconfig context to use. Defaults to current context.
    type: str
  namespace:
    description: Limit analysis to a single namespace. Omit for all namespaces.
    type: str
  active_filters:
    description:
      - Analyzer names to run. An empty list runs the core analyzers.
      - Names with no analyzer are reported in C(summary.unknown_filters).
    type: list
    elements: str
    default: []
  anonymize:
    description: Replace namespace and object names in result text with their masked form.
    type: bool
    default: false
  max_workers:
    description: Number of analyzers to run concurrently.
    type: int
    default: 1
  timeout:
    description: Seconds before in-flight list calls are abandoned for the whole run.
    type: float
requirements:
  - kubernetes
  - kub-analyze
author:
  - kub-analyze contributors
"""

EXAMPLES = r"""
- name: Run the core analyzers against the current context
  kub_analyze:
  register: analysis

- name: Only check CronJobs and Pods in one namespace
  kub_analyze:
    namespace: batch
    active_filters:
      - CronJob
      - Pod
  register: analysis

- name: Fail the play if any object has issues
  kub_analyze:
    anonymize: true
  register: analysis
  failed_when: analysis.summary.status == "issues_found"
"""

RETURN = r"""
results:
  description: One entry per failing object.
  type: list
  returned: always
  elements: dict
  sample:
    - kind: "CronJob"
      name: "ops/backup"
      error:
        - text: "CronJob backup has an invalid schedule: expected exactly 5 fields, found 3: [* * *]"
          sensitive:
            - unmasked: "ops"
              masked: "kQzbRwTp"
            - unmasked: "backup"
              masked: "XbnWqaLe"
      parent_object: ""
errors:
  description: Analyzers that could not run, with the reason.
  type: list
  returned: always
  elements: dict
summary:
  description: Run summary.
  type: dict
  returned: always
  sample:
    status: "issues_found"
    active_filters: ["Pod", "CronJob"]
    checked_count: 2
    result_count: 1
    failure_count: 1
    failed_analyzers: []
    unknown_filters: []
    cancelled: false
    duration_ms:
      Pod: 41.2
      CronJob: 8.7
report_text:
  description: Human-readable text report.
  type: str
  returned: always
"""


def run_module():
    from ansible.module_utils.basic import AnsibleModule

    module = AnsibleModule(
        argument_spec=dict(
            kubeconfig=dict(type="path", default="~/.kube/config"),
            context=dict(type="str", default=None),
            namespace=dict(type="str", default=None),
            active_filters=dict(type="list", elements="str", default=[]),
            anonymize=dict(type="bool", default=False),
            max_workers=dict(type="int", default=1),
            timeout=dict(type="float", default=None),
        ),
        supports_check_mode=True,
    )

    try:
        from kubernetes.config.config_exception import ConfigException
        from kub_analyze import ExecutionContext, connect, run_analysis
        from kub_analyze.config import active_filters_from
        from kub_analyze.report import build_summary, generate_report_text
    except ImportError as e:
        module.fail_json(msg=f"The 'kubernetes' and 'kub-analyze' Python packages are required: {e}")
        return

    anonymize = module.params["anonymize"]

    try:
        client = connect(kubeconfig=module.params["kubeconfig"], context=module.params["context"])
    except (ConfigException, OSError) as e:
        module.fail_json(msg=f"Failed to connect to Kubernetes cluster: {e}")
        return

    ctx = ExecutionContext(
        client=client,
        namespace=module.params["namespace"] or "",
        timeout=module.params["timeout"],
    )
    run = run_analysis(
        ctx,
        active_filters=active_filters_from(module.params),
        max_workers=module.params["max_workers"],
    )

    module.exit_json(
        changed=False,
        results=[r.to_dict(anonymize=anonymize) for r in run.results],
        errors=[e.to_dict() for e in run.errors],
        summary=build_summary(run),
        report_text=generate_report_text(run, anonymize=anonymize),
    )


def main():
    run_module()


if __name__ == "__main__":
    main()
