"""Prometheus instruments for manager workflows."""

from __future__ import annotations

from prometheus_client import Counter

PROVISIONING_OUTCOMES = Counter(
    "manager_provisioning_total",
    "Manager provisioning attempts by the stage the workflow finished in.",
    ["stage"],
)

COMPENSATING_DELETES = Counter(
    "manager_provisioning_compensations_total",
    "Domain records deleted because identity registration failed.",
    ["result"],
)
