# -*- coding: utf-8 -*-
"""
Prometheus Metrics - FoodSafe Traceability Core

Prometheus metrics for traceability and recall-risk monitoring.

Metrics:
    1.  fs_trace_genealogy_trees_built_total (Counter, labels: cycle_detected)
    2.  fs_trace_genealogy_tree_nodes (Histogram)
    3.  fs_trace_supply_chain_graphs_built_total (Counter)
    4.  fs_trace_lineage_queries_total (Counter, labels: direction)
    5.  fs_trace_recall_assessments_total (Counter, labels: tier)
    6.  fs_trace_compliance_validations_total (Counter, labels: passed)
    7.  fs_trace_compliance_score (Histogram, buckets: 10-100)
    8.  fs_trace_workflow_transitions_total (Counter, labels: to_state)
    9.  fs_trace_escalations_total (Counter, labels: level)
    10. fs_trace_processing_duration_seconds (Histogram, labels: operation)
    11. fs_trace_processing_errors_total (Counter, labels: error_type)
    12. fs_trace_recall_alerts_dispatched_total (Counter)
    13. fs_trace_scenario_runs_total (Counter, labels: match)

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# 1. Genealogy trees built
fs_genealogy_trees_built_total = Counter(
    "fs_trace_genealogy_trees_built_total",
    "Total genealogy trees built",
    labelnames=["cycle_detected"],
)

# 2. Genealogy tree size distribution
fs_genealogy_tree_nodes = Histogram(
    "fs_trace_genealogy_tree_nodes",
    "Number of nodes in built genealogy trees",
    buckets=(1, 5, 10, 25, 50, 100, 250, 500, 1000, 5000),
)

# 3. Supply chain graphs built
fs_supply_chain_graphs_built_total = Counter(
    "fs_trace_supply_chain_graphs_built_total",
    "Total supply chain graphs built",
)

# 4. Lineage queries by direction
fs_lineage_queries_total = Counter(
    "fs_trace_lineage_queries_total",
    "Total lineage traversal queries",
    labelnames=["direction"],
)

# 5. Recall assessments by tier
fs_recall_assessments_total = Counter(
    "fs_trace_recall_assessments_total",
    "Total recall risk assessments",
    labelnames=["tier"],
)

# 6. Compliance validations by outcome
fs_compliance_validations_total = Counter(
    "fs_trace_compliance_validations_total",
    "Total FSMA 204 compliance validations",
    labelnames=["passed"],
)

# 7. Compliance score distribution
fs_compliance_score = Histogram(
    "fs_trace_compliance_score",
    "FSMA 204 compliance score distribution",
    buckets=(10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
)

# 8. Approval workflow transitions by target state
fs_workflow_transitions_total = Counter(
    "fs_trace_workflow_transitions_total",
    "Total supplier approval workflow transitions",
    labelnames=["to_state"],
)

# 9. Non-conformance escalations by level
fs_escalations_total = Counter(
    "fs_trace_escalations_total",
    "Total non-conformance escalations raised",
    labelnames=["level"],
)

# 10. Processing duration by operation
fs_processing_duration_seconds = Histogram(
    "fs_trace_processing_duration_seconds",
    "Traceability processing duration in seconds",
    labelnames=["operation"],
    buckets=(
        0.001, 0.005, 0.01, 0.05, 0.1, 0.25,
        0.5, 1.0, 2.5, 5.0, 10.0, 30.0,
    ),
)

# 11. Processing errors by type
fs_processing_errors_total = Counter(
    "fs_trace_processing_errors_total",
    "Total traceability processing errors",
    labelnames=["error_type"],
)

# 12. Recall alerts handed to a dispatcher
fs_recall_alerts_dispatched_total = Counter(
    "fs_trace_recall_alerts_dispatched_total",
    "Total recall alerts dispatched",
)

# 13. Validation scenario runs by outcome
fs_scenario_runs_total = Counter(
    "fs_trace_scenario_runs_total",
    "Total validation scenario runs",
    labelnames=["match"],
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def record_tree_built(node_count: int, cycle_detected: bool) -> None:
    """Record a genealogy tree build.

    Args:
        node_count: Number of nodes in the tree.
        cycle_detected: Whether a cycle was skipped during the build.
    """
    fs_genealogy_trees_built_total.labels(
        cycle_detected=str(cycle_detected).lower(),
    ).inc()
    fs_genealogy_tree_nodes.observe(node_count)


def record_graph_built() -> None:
    """Record a supply chain graph build."""
    fs_supply_chain_graphs_built_total.inc()


def record_lineage_query(direction: str) -> None:
    """Record a lineage traversal.

    Args:
        direction: downstream, upstream, or partners.
    """
    fs_lineage_queries_total.labels(direction=direction).inc()


def record_assessment(tier: str) -> None:
    """Record a recall assessment.

    Args:
        tier: Risk tier (none, monitor, recall).
    """
    fs_recall_assessments_total.labels(tier=tier).inc()


def record_validation(passed: bool, score: float) -> None:
    """Record a compliance validation and its score."""
    fs_compliance_validations_total.labels(passed=str(passed).lower()).inc()
    fs_compliance_score.observe(score)


def record_transition(to_state: str) -> None:
    """Record an approval workflow transition."""
    fs_workflow_transitions_total.labels(to_state=to_state).inc()


def record_escalation(level: str) -> None:
    """Record a non-conformance escalation."""
    fs_escalations_total.labels(level=level).inc()


def observe_duration(operation: str, seconds: float) -> None:
    """Record processing duration for an operation.

    Args:
        operation: Operation name (build_tree, assess, validate, ...).
        seconds: Elapsed wall-clock seconds.
    """
    fs_processing_duration_seconds.labels(operation=operation).observe(seconds)


def record_error(error_type: str) -> None:
    """Record a processing error."""
    fs_processing_errors_total.labels(error_type=error_type).inc()


def record_alert_dispatched() -> None:
    """Record a recall alert handed to a dispatcher."""
    fs_recall_alerts_dispatched_total.inc()


def record_scenario_run(match: bool) -> None:
    """Record a validation scenario run and whether it matched."""
    fs_scenario_runs_total.labels(match=str(match).lower()).inc()


__all__ = [
    "fs_genealogy_trees_built_total",
    "fs_genealogy_tree_nodes",
    "fs_supply_chain_graphs_built_total",
    "fs_lineage_queries_total",
    "fs_recall_assessments_total",
    "fs_compliance_validations_total",
    "fs_compliance_score",
    "fs_workflow_transitions_total",
    "fs_escalations_total",
    "fs_processing_duration_seconds",
    "fs_processing_errors_total",
    "fs_recall_alerts_dispatched_total",
    "fs_scenario_runs_total",
    "record_tree_built",
    "record_graph_built",
    "record_lineage_query",
    "record_assessment",
    "record_validation",
    "record_transition",
    "record_escalation",
    "observe_duration",
    "record_error",
    "record_alert_dispatched",
    "record_scenario_run",
]
