#!/usr/bin/python
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MIT

"""Ansible module listing which kub-analyze filters are active or unused."""

from __future__ import annotations

DOCUMENTATION = r"""
---
module: kub_analyze_filters
short_description: List kub-analyze filters
version_added: "0.1.0"
description:
  - Resolves the configured filter names against the known analyzers and
    returns the active and unused filters.
  - Does not contact the cluster.
options:
  active_filters:
    description: Configured filter names. An empty list means the core filters.
    type: list
    elements: str
    default: []
requirements:
  - kub-analyze
author:
  - kub-analyze contributors
"""

EXAMPLES = r"""
- name: Show which filters would run
  kub_analyze_filters:
    active_filters: "{{ kub_analyze_active_filters }}"
  register: filters

- debug:
    msg: "{{ filters.report_text }}"
"""

RETURN = r"""
active:
  description: Filters that will run.
  type: list
  returned: always
  elements: str
inactive:
  description: Known filters that will not run.
  type: list
  returned: always
  elements: str
integration:
  description: Filters contributed by integrations.
  type: list
  returned: always
  elements: str
unknown:
  description: Configured names that match no analyzer.
  type: list
  returned: always
  elements: str
report_text:
  description: Listing in text form, integrations marked as such.
  type: str
  returned: always
"""


def run_module():
    from ansible.module_utils.basic import AnsibleModule

    module = AnsibleModule(
        argument_spec=dict(
            active_filters=dict(type="list", elements="str", default=[]),
        ),
        supports_check_mode=True,
    )

    try:
        from kub_analyze import list_filters, resolve_filters
        from kub_analyze.config import active_filters_from
        from kub_analyze.report import filter_listing_text
    except ImportError as e:
        module.fail_json(msg=f"The 'kub-analyze' Python package is required: {e}")
        return

    catalog = list_filters()
    selection = resolve_filters(active_filters_from(module.params), catalog)

    module.exit_json(
        changed=False,
        active=list(selection.active),
        inactive=list(selection.inactive),
        integration=list(catalog.integration),
        unknown=list(selection.unknown),
        report_text=filter_listing_text(selection, catalog),
    )


def main():
    run_module()


if __name__ == "__main__":
    main()
