# -*- coding: utf-8 -*-
"""
FoodSafe Traceability Core
==========================

Product traceability and recall-risk evaluation for food-safety quality
management. It supports:

- Genealogy trees from bill-of-materials edges, with cycle diagnostics
- Supply chain partner graphs with link deduplication
- Downstream and upstream lineage traversal by batch lot
- Recall risk tiering from HACCP failures, supplier audits and complaint trends
- FSMA 204 compliance validation with a scenario self test
- FDA 204 traceability reports and recall alert payloads
- Supplier approval workflow and non-conformance escalation rules
- Parallel batch evaluation
- SHA-256 provenance chain tracking
- Prometheus metrics
- FastAPI REST API
- Thread-safe configuration with FS_TRACEABILITY_ env prefix

Key Components:
    - config: TraceabilityConfig with FS_TRACEABILITY_ env prefix
    - models: Pydantic v2 models for all data structures
    - store: Async entity store interface and in-memory implementation
    - genealogy: Genealogy tree builder
    - supply_chain: Supply chain graph builder
    - lineage: Lineage traversal engine
    - recall_risk: Recall risk evaluator
    - compliance_rules: FSMA 204 rule catalogue and engine
    - scenarios: Validation scenario harness
    - approval_workflow: Supplier approval state machine and escalation
    - reporting: FDA 204 report and recall alert builders
    - provenance: SHA-256 chain-hashed audit trails
    - metrics: Prometheus metrics
    - api: FastAPI router
    - setup: TraceabilityService facade

Example:
    >>> from foodsafe.traceability import TraceabilityService
    >>> service = TraceabilityService()
    >>> assessment = service.evaluate_recall_need(batch)
    >>> print(assessment.tier.value)
    monitor
"""

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
from foodsafe.traceability.config import (
    TraceabilityConfig,
    get_config,
    set_config,
    reset_config,
)

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
from foodsafe.traceability.models import (
    # Enumerations
    EntityKind,
    PartnerType,
    LinkType,
    RecallType,
    RecallStatus,
    ImpactLevel,
    RiskTier,
    RiskFactorKind,
    ApprovalState,
    NonConformanceStatus,
    EscalationLevel,
    # Entity records
    Product,
    Component,
    GenealogyEdge,
    SupplyChainPartner,
    SupplyChainLink,
    HACCPCheck,
    SupplierRef,
    BatchTrace,
    Recall,
    TraceabilitySnapshot,
    # Derived structures
    TreeNode,
    CycleDiagnostic,
    GenealogyTree,
    GraphNode,
    GraphEdge,
    GraphData,
    RiskFactor,
    RecallAssessment,
    RiskBoard,
    ComplianceCheck,
    ComplianceReport,
    BatchEvaluation,
    ScenarioResult,
    ScenarioSummary,
    ScenarioReport,
    RecallScope,
    WorkflowTransition,
    ApprovalWorkflow,
    EscalationResult,
)

# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------
from foodsafe.traceability.store import (
    EntityStore,
    InMemoryEntityStore,
    fetch_snapshot,
    fetch_complaint_trends,
)
from foodsafe.traceability.genealogy import GenealogyTreeBuilder
from foodsafe.traceability.supply_chain import SupplyChainGraphBuilder
from foodsafe.traceability.lineage import LineageTraversalEngine
from foodsafe.traceability.recall_risk import RecallRiskEvaluator
from foodsafe.traceability.compliance_rules import (
    ValidationRule,
    ComplianceRuleEngine,
    build_rule_catalogue,
)
from foodsafe.traceability.scenarios import (
    ValidationScenario,
    ScenarioHarness,
    SCENARIOS,
)
from foodsafe.traceability.approval_workflow import (
    ApprovalWorkflowEngine,
    check_escalation,
)
from foodsafe.traceability.reporting import (
    FDA204Report,
    RecallAlert,
    ReportDispatcher,
    build_fda204_report,
    build_recall_alert,
)
from foodsafe.traceability.provenance import ProvenanceTracker

# ---------------------------------------------------------------------------
# Service setup facade
# ---------------------------------------------------------------------------
from foodsafe.traceability.setup import (
    TraceabilityService,
    configure_traceability,
    get_traceability,
    get_router,
)

__all__ = [
    "__version__",
    # Configuration
    "TraceabilityConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Enumerations
    "EntityKind",
    "PartnerType",
    "LinkType",
    "RecallType",
    "RecallStatus",
    "ImpactLevel",
    "RiskTier",
    "RiskFactorKind",
    "ApprovalState",
    "NonConformanceStatus",
    "EscalationLevel",
    # Entity records
    "Product",
    "Component",
    "GenealogyEdge",
    "SupplyChainPartner",
    "SupplyChainLink",
    "HACCPCheck",
    "SupplierRef",
    "BatchTrace",
    "Recall",
    "TraceabilitySnapshot",
    # Derived structures
    "TreeNode",
    "CycleDiagnostic",
    "GenealogyTree",
    "GraphNode",
    "GraphEdge",
    "GraphData",
    "RiskFactor",
    "RecallAssessment",
    "RiskBoard",
    "ComplianceCheck",
    "ComplianceReport",
    "BatchEvaluation",
    "ScenarioResult",
    "ScenarioSummary",
    "ScenarioReport",
    "RecallScope",
    "WorkflowTransition",
    "ApprovalWorkflow",
    "EscalationResult",
    # Engines
    "EntityStore",
    "InMemoryEntityStore",
    "fetch_snapshot",
    "fetch_complaint_trends",
    "GenealogyTreeBuilder",
    "SupplyChainGraphBuilder",
    "LineageTraversalEngine",
    "RecallRiskEvaluator",
    "ValidationRule",
    "ComplianceRuleEngine",
    "build_rule_catalogue",
    "ValidationScenario",
    "ScenarioHarness",
    "SCENARIOS",
    "ApprovalWorkflowEngine",
    "check_escalation",
    "FDA204Report",
    "RecallAlert",
    "ReportDispatcher",
    "build_fda204_report",
    "build_recall_alert",
    "ProvenanceTracker",
    # Service facade
    "TraceabilityService",
    "configure_traceability",
    "get_traceability",
    "get_router",
]
