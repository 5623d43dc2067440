# -*- coding: utf-8 -*-
"""
Traceability Data Models - FoodSafe Traceability Core

Pydantic v2 data models for product traceability and recall-risk
evaluation. Defines all enumerations, entity records supplied by the
entity store, and the derived graph and report structures returned by
the engines.

FSMA 204 (21 CFR Part 1, Subpart S) requires enhanced traceability records
(Key Data Elements for Critical Tracking Events) for foods on the Food
Traceability List, retrievable within 24 hours of an FDA request.

Models:
    - Enumerations: EntityKind, PartnerType, LinkType, RecallType,
        RecallStatus, ImpactLevel, RiskTier, RiskFactorKind, ApprovalState,
        NonConformanceStatus, EscalationLevel
    - Entity records: Product, Component, GenealogyEdge, SupplyChainPartner,
        SupplyChainLink, HACCPCheck, SupplierRef, BatchTrace, Recall
    - Snapshot: TraceabilitySnapshot
    - Derived structures: TreeNode, CycleDiagnostic, GenealogyTree,
        GraphNode, GraphEdge, GraphData, RiskFactor, RecallAssessment,
        RiskBoard, ComplianceCheck, ComplianceReport, BatchEvaluation,
        ScenarioResult,
        ScenarioSummary, ScenarioReport, RecallScope, WorkflowTransition,
        ApprovalWorkflow, EscalationResult

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from datetime import date as CalendarDate
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


# =============================================================================
# Enumerations
# =============================================================================


class EntityKind(str, Enum):
    """Kind of node in a product genealogy."""

    PRODUCT = "Product"
    COMPONENT = "Component"


class PartnerType(str, Enum):
    """Role of a supply chain partner."""

    SUPPLIER = "Supplier"
    MANUFACTURER = "Manufacturer"
    DISTRIBUTOR = "Distributor"
    RETAILER = "Retailer"


class LinkType(str, Enum):
    """Relationship carried by a supply chain link."""

    SUPPLIES = "Supplies"
    MANUFACTURES = "Manufactures"
    DISTRIBUTES = "Distributes"


class RecallType(str, Enum):
    """Mock recalls exercise the procedure; actual recalls remove product."""

    MOCK = "Mock"
    ACTUAL = "Actual"


class RecallStatus(str, Enum):
    """Recall lifecycle: Initiated -> Simulation/Notification -> Closed."""

    INITIATED = "Initiated"
    SIMULATION = "Simulation"
    NOTIFICATION = "Notification"
    CLOSED = "Closed"


class ImpactLevel(str, Enum):
    """Impact of a failed validation rule.

    Only CRITICAL failures flip a compliance report to not passed.
    """

    CRITICAL = "Critical"
    MAJOR = "Major"
    MINOR = "Minor"


class RiskTier(str, Enum):
    """Recall risk tier returned by the recall risk evaluator."""

    NONE = "none"
    MONITOR = "monitor"
    RECALL = "recall"


class RiskFactorKind(str, Enum):
    """Reason code attached to a recall risk factor."""

    CCP_FAILURE = "CCP_FAILURE"
    SUPPLIER_ISSUE = "SUPPLIER_ISSUE"
    COMPLAINT_TREND = "COMPLAINT_TREND"
    INCOMPLETE_RECORDS = "INCOMPLETE_RECORDS"


class ApprovalState(str, Enum):
    """Supplier approval workflow states."""

    INITIATED = "Initiated"
    DOCUMENT_REVIEW = "Document Review"
    RISK_ASSESSMENT = "Risk Assessment"
    AUDIT_SCHEDULED = "Audit Scheduled"
    AUDIT_COMPLETED = "Audit Completed"
    PENDING_APPROVAL = "Pending Approval"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class NonConformanceStatus(str, Enum):
    """Non-conformance item status."""

    ON_HOLD = "On Hold"
    UNDER_REVIEW = "Under Review"
    RELEASED = "Released"
    DISPOSED = "Disposed"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class EscalationLevel(str, Enum):
    """Escalation urgency for a stalled non-conformance."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# Entity Records
# =============================================================================


class Product(BaseModel):
    """Finished or intermediate product with a traceability lot code.

    Attributes:
        id: Unique product identifier.
        name: Product name.
        batch_lot_number: Traceability lot code of the production batch.
        description: Optional free-text description.
        category: Optional product category.
        sku: Optional stock keeping unit.
        manufacturing_date: Date the batch was produced.
        expiry_date: Optional expiry date.
        status: Optional lifecycle status.
        created_by: Creator identifier.
        created_at: Record creation timestamp.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(..., min_length=1, description="Unique product identifier")
    name: str = Field(..., description="Product name")
    batch_lot_number: str = Field(
        ..., min_length=1, description="Traceability lot code",
    )
    description: Optional[str] = Field(None, description="Product description")
    category: Optional[str] = Field(None, description="Product category")
    sku: Optional[str] = Field(None, description="Stock keeping unit")
    manufacturing_date: Optional[date] = Field(
        None, description="Date the batch was produced",
    )
    expiry_date: Optional[date] = Field(None, description="Expiry date")
    status: Optional[str] = Field(None, description="Lifecycle status")
    created_by: str = Field(default="system", description="Creator identifier")
    created_at: Optional[datetime] = Field(
        None, description="Record creation timestamp",
    )


class Component(BaseModel):
    """Ingredient or packaging component consumed by products.

    Attributes:
        id: Unique component identifier.
        name: Component name.
        batch_lot_number: Supplier lot code received.
        supplier_id: Supply chain partner that delivered the lot.
        audit_score: Latest supplier audit score (0-100), if known.
        received_date: Date the lot was received.
        expiry_date: Optional expiry date.
        status: Optional lifecycle status.
        created_at: Record creation timestamp.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(..., min_length=1, description="Unique component identifier")
    name: str = Field(..., description="Component name")
    batch_lot_number: str = Field(
        ..., min_length=1, description="Supplier lot code",
    )
    supplier_id: Optional[str] = Field(None, description="Supplier partner id")
    audit_score: Optional[float] = Field(
        None, ge=0.0, le=100.0, description="Supplier audit score",
    )
    received_date: Optional[date] = Field(None, description="Receipt date")
    expiry_date: Optional[date] = Field(None, description="Expiry date")
    status: Optional[str] = Field(None, description="Lifecycle status")
    created_at: Optional[datetime] = Field(
        None, description="Record creation timestamp",
    )


class GenealogyEdge(BaseModel):
    """Directed bill-of-materials relation: parent product consumed child.

    Attributes:
        id: Edge identifier.
        parent_product_id: Product that consumed the child.
        child_id: Component or sub-product consumed.
        quantity_used: Quantity of the child used.
        unit: Unit of measure for quantity_used.
        created_at: Record creation timestamp.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: Optional[str] = Field(None, description="Edge identifier")
    parent_product_id: str = Field(..., min_length=1, description="Parent product id")
    child_id: str = Field(..., min_length=1, description="Child component or product id")
    quantity_used: Optional[float] = Field(
        None, ge=0.0, description="Quantity of the child consumed",
    )
    unit: Optional[str] = Field(None, description="Unit of measure")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")


class SupplyChainPartner(BaseModel):
    """Supplier, manufacturer, distributor, or retailer facility."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(..., min_length=1, description="Partner identifier")
    name: str = Field(..., description="Partner name")
    partner_type: PartnerType = Field(..., description="Partner role")
    contact_name: Optional[str] = Field(None, description="Contact person")
    contact_email: Optional[str] = Field(None, description="Contact email")
    contact_phone: Optional[str] = Field(None, description="Contact phone")
    address: Optional[str] = Field(None, description="Facility address")
    status: Optional[str] = Field(None, description="Partner status")


class SupplyChainLink(BaseModel):
    """Directed relationship between two supply chain partners.

    The partner graph may contain cycles (return logistics); traversals
    over it are cycle-safe.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(..., min_length=1, description="Link identifier")
    source_id: str = Field(..., min_length=1, description="Upstream partner id")
    target_id: str = Field(..., min_length=1, description="Downstream partner id")
    product_id: Optional[str] = Field(None, description="Product carried")
    component_id: Optional[str] = Field(None, description="Component carried")
    link_type: LinkType = Field(..., description="Relationship type")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @property
    def timestamp(self) -> Optional[datetime]:
        """Most recent known timestamp for this link."""
        return self.updated_at or self.created_at


class HACCPCheck(BaseModel):
    """Monitoring record for one critical control point.

    Attributes:
        ccp_id: Critical control point identifier (e.g. "CCP1").
        name: Control point name (e.g. "Cooking temperature").
        passed: Whether the measurement met the critical limits.
        critical_limit_min: Lower critical limit, if any.
        critical_limit_max: Upper critical limit, if any.
        actual_value: Measured value.
        unit: Unit of the measurement.
        hazard_type: biological, chemical, or physical.
        checked_at: When the check was performed.
        verified_by: Person who verified the record.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    ccp_id: str = Field(..., min_length=1, description="Critical control point id")
    name: Optional[str] = Field(None, description="Control point name")
    passed: bool = Field(..., description="Whether the CCP met its limits")
    critical_limit_min: Optional[float] = Field(None, description="Lower limit")
    critical_limit_max: Optional[float] = Field(None, description="Upper limit")
    actual_value: Optional[float] = Field(None, description="Measured value")
    unit: Optional[str] = Field(None, description="Measurement unit")
    hazard_type: Optional[str] = Field(None, description="Hazard category")
    checked_at: Optional[datetime] = Field(None, description="Check timestamp")
    verified_by: Optional[str] = Field(None, description="Verifier")

    @property
    def has_limits(self) -> bool:
        """Whether at least one critical limit is recorded."""
        return (
            self.critical_limit_min is not None
            or self.critical_limit_max is not None
        )


class SupplierRef(BaseModel):
    """Supplier that delivered inputs to a batch (immediate previous source)."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    supplier_id: Optional[str] = Field(None, description="Supplier identifier")
    name: Optional[str] = Field(None, description="Supplier name")
    audit_score: Optional[float] = Field(
        None, ge=0.0, le=100.0, description="Latest audit score",
    )


class BatchTrace(BaseModel):
    """Point-in-time snapshot of one production batch.

    Immutable once assembled; engines only read it. Optional fields may be
    absent on incomplete records and are reported as findings rather than
    rejected.

    Attributes:
        id: Traceability lot code of the batch.
        product: Product description.
        product_id: Product identifier used for complaint-trend lookup.
        date: Production date.
        location: Location where the lot code was assigned.
        quantity: Quantity produced.
        unit: Unit of measure for quantity.
        haccp_checks: CCP monitoring records for the batch.
        suppliers: Immediate previous sources with audit scores.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(default="", description="Traceability lot code")
    product: Optional[str] = Field(None, description="Product description")
    product_id: Optional[str] = Field(None, description="Product identifier")
    date: Optional[CalendarDate] = Field(None, description="Production date")
    location: Optional[str] = Field(None, description="Lot code source location")
    quantity: Optional[float] = Field(None, ge=0.0, description="Quantity produced")
    unit: Optional[str] = Field(None, description="Unit of measure")
    haccp_checks: List[HACCPCheck] = Field(
        default_factory=list, description="CCP monitoring records",
    )
    suppliers: List[SupplierRef] = Field(
        default_factory=list, description="Immediate previous sources",
    )

    @field_validator("id", "product", "location", "unit")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        """Normalise whitespace-only text to empty."""
        if v is None:
            return v
        return v.strip()

    def failed_checks(self) -> List[HACCPCheck]:
        """Return HACCP checks that did not pass."""
        return [c for c in self.haccp_checks if not c.passed]


class Recall(BaseModel):
    """Declared recall event referencing one or more batch lots."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(..., min_length=1, description="Recall identifier")
    title: str = Field(..., description="Recall title")
    recall_type: RecallType = Field(default=RecallType.MOCK, description="Mock or actual")
    status: RecallStatus = Field(
        default=RecallStatus.INITIATED, description="Lifecycle status",
    )
    batch_ids: List[str] = Field(
        default_factory=list, description="Batch lot codes under recall",
    )
    recall_reason: str = Field(default="", description="Reason for the recall")
    initiated_by: str = Field(default="system", description="Initiator")
    initiated_at: Optional[datetime] = Field(None, description="Initiation time")
    closed_at: Optional[datetime] = Field(None, description="Closure time")

    @model_validator(mode="after")
    def validate_closed_at(self) -> Recall:
        """Only closed recalls carry a closure timestamp."""
        if self.closed_at is not None and self.status != RecallStatus.CLOSED:
            raise ValueError(
                f"closed_at set on recall {self.id} with status "
                f"{self.status.value}"
            )
        return self


TraceableItem = Union[Product, Component]


# =============================================================================
# Snapshot
# =============================================================================


@dataclass(frozen=True)
class TraceabilitySnapshot:
    """Read-only bundle of entity records for one build+traverse cycle.

    Indexes by id, batch lot, and edge direction are built once on
    construction. Callers re-fetch and rebuild when entities change.
    """

    products: Tuple[Product, ...] = ()
    components: Tuple[Component, ...] = ()
    edges: Tuple[GenealogyEdge, ...] = ()
    partners: Tuple[SupplyChainPartner, ...] = ()
    links: Tuple[SupplyChainLink, ...] = ()

    products_by_id: Mapping[str, Product] = field(init=False, repr=False)
    components_by_id: Mapping[str, Component] = field(init=False, repr=False)
    children_of: Mapping[str, Tuple[GenealogyEdge, ...]] = field(init=False, repr=False)
    parents_of: Mapping[str, Tuple[GenealogyEdge, ...]] = field(init=False, repr=False)
    ids_by_lot: Mapping[str, Tuple[str, ...]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        for name in ("products", "components", "edges", "partners", "links"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        products_by_id = {p.id: p for p in self.products}
        components_by_id = {c.id: c for c in self.components}

        children: Dict[str, List[GenealogyEdge]] = {}
        parents: Dict[str, List[GenealogyEdge]] = {}
        for edge in self.edges:
            children.setdefault(edge.parent_product_id, []).append(edge)
            parents.setdefault(edge.child_id, []).append(edge)

        lots: Dict[str, List[str]] = {}
        for item in (*self.products, *self.components):
            ids = lots.setdefault(item.batch_lot_number, [])
            if item.id not in ids:
                ids.append(item.id)

        object.__setattr__(self, "products_by_id", MappingProxyType(products_by_id))
        object.__setattr__(self, "components_by_id", MappingProxyType(components_by_id))
        object.__setattr__(self, "children_of", MappingProxyType(
            {k: tuple(v) for k, v in children.items()}
        ))
        object.__setattr__(self, "parents_of", MappingProxyType(
            {k: tuple(v) for k, v in parents.items()}
        ))
        object.__setattr__(self, "ids_by_lot", MappingProxyType(
            {k: tuple(v) for k, v in lots.items()}
        ))

    def get_item(self, item_id: str) -> Optional[TraceableItem]:
        """Return the product or component with this id, if known."""
        return self.products_by_id.get(item_id) or self.components_by_id.get(item_id)

    def kind_of(self, item_id: str) -> EntityKind:
        """Products are nodes with a product record or outgoing edges."""
        if item_id in self.products_by_id or item_id in self.children_of:
            return EntityKind.PRODUCT
        return EntityKind.COMPONENT

    def contains(self, item_id: str) -> bool:
        """Whether the id appears as an entity or on any genealogy edge."""
        return (
            item_id in self.products_by_id
            or item_id in self.components_by_id
            or item_id in self.children_of
            or item_id in self.parents_of
        )


# =============================================================================
# Genealogy Tree
# =============================================================================


class TreeNode(BaseModel):
    """Node of a genealogy tree.

    Attributes:
        id: Product or component id.
        kind: Product or Component.
        name: Display name when the entity record is known.
        batch_lot_number: Lot code when the entity record is known.
        quantity: Quantity used by the parent (None for the root).
        depth: Distance from the root.
        truncated: True when the node was not expanded (depth limit or
            already expanded through another path).
        children: Child nodes.
    """

    id: str
    kind: EntityKind
    name: Optional[str] = None
    batch_lot_number: Optional[str] = None
    quantity: Optional[float] = None
    depth: int = 0
    truncated: bool = False
    children: List[TreeNode] = Field(default_factory=list)

    def iter_nodes(self) -> List[TreeNode]:
        """Return this node and all descendants in BFS order."""
        ordered: List[TreeNode] = []
        frontier = [self]
        while frontier:
            ordered.extend(frontier)
            frontier = [child for node in frontier for child in node.children]
        return ordered


class CycleDiagnostic(BaseModel):
    """An edge skipped because it would revisit an ancestor."""

    parent_id: str = Field(..., description="Node whose edge closes the cycle")
    child_id: str = Field(..., description="Ancestor the edge points back to")
    path: List[str] = Field(
        default_factory=list, description="Root-to-parent path at detection",
    )


class GenealogyTree(BaseModel):
    """Result of a genealogy tree build."""

    root: TreeNode
    node_count: int = 0
    max_depth: Optional[int] = None
    cycle_detected: bool = False
    cycles: List[CycleDiagnostic] = Field(default_factory=list)


# =============================================================================
# Supply Chain Graph
# =============================================================================


class GraphNode(BaseModel):
    """Supply chain graph node for visualization."""

    id: str
    label: str
    type: PartnerType
    data: Optional[SupplyChainPartner] = None


class GraphEdge(BaseModel):
    """Supply chain graph edge for visualization."""

    id: str
    source: str
    target: str
    label: LinkType
    data: Optional[SupplyChainLink] = None


class GraphData(BaseModel):
    """Nodes and edges of the supply chain graph."""

    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)


# =============================================================================
# Recall Risk
# =============================================================================


class RiskFactor(BaseModel):
    """One recall risk signal with its reason code."""

    model_config = ConfigDict(frozen=True)

    kind: RiskFactorKind
    detail: str
    count: Optional[int] = None
    value: Optional[float] = None


class RecallAssessment(BaseModel):
    """Recall recommendation for one batch.

    ``recall_recommended`` is True only for the RECALL tier; MONITOR
    batches are elevated but not yet recall-worthy.
    """

    batch_id: str
    product_id: Optional[str] = None
    tier: RiskTier
    recall_recommended: bool
    risk_factors: List[RiskFactor] = Field(default_factory=list)

    def has_factor(self, kind: RiskFactorKind) -> bool:
        """Whether a factor of the given kind is present."""
        return any(f.kind == kind for f in self.risk_factors)


class RiskBoard(BaseModel):
    """Batches sorted by recall tier."""

    recall: List[RecallAssessment] = Field(default_factory=list)
    monitor: List[RecallAssessment] = Field(default_factory=list)
    clear: List[RecallAssessment] = Field(default_factory=list)


# =============================================================================
# Compliance
# =============================================================================


class ComplianceCheck(BaseModel):
    """Outcome of one validation rule against one batch."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Rule identifier, used as reason code")
    description: str
    category: str
    regulation_ref: str
    impact: ImpactLevel
    passed: bool
    detail: str = ""


class ComplianceReport(BaseModel):
    """FSMA 204 compliance report for one batch."""

    batch_id: str
    passed: bool
    score: float = Field(..., ge=0.0, le=100.0)
    passed_checks: List[ComplianceCheck] = Field(default_factory=list)
    failed_checks: List[ComplianceCheck] = Field(default_factory=list)
    missing_fields: List[str] = Field(default_factory=list)

    @property
    def critical_failures(self) -> List[ComplianceCheck]:
        """Failed checks with Critical impact."""
        return [c for c in self.failed_checks if c.impact == ImpactLevel.CRITICAL]


class BatchEvaluation(BaseModel):
    """Recall assessment and compliance report for one batch."""

    batch_id: str
    assessment: RecallAssessment
    compliance: ComplianceReport


class ScenarioResult(BaseModel):
    """Outcome of replaying one validation scenario."""

    scenario_id: str
    scenario: str
    expected: bool
    result: bool
    match: bool
    score: float
    failed_check_ids: List[str] = Field(default_factory=list)


class ScenarioSummary(BaseModel):
    """Aggregate of a scenario run."""

    total_tests: int
    passing_tests: int
    pass_rate: float


class ScenarioReport(BaseModel):
    """All scenario results plus summary."""

    results: List[ScenarioResult] = Field(default_factory=list)
    summary: ScenarioSummary


# =============================================================================
# Recall Scope
# =============================================================================


class RecallScope(BaseModel):
    """Products and components implicated by a recall's batch lots."""

    recall_id: str
    batch_ids: List[str] = Field(default_factory=list)
    affected_products: List[Product] = Field(default_factory=list)
    implicated_components: List[Component] = Field(default_factory=list)
    missing_batch_lots: List[str] = Field(default_factory=list)
    unresolved_product_ids: List[str] = Field(
        default_factory=list,
        description="Parent ids on genealogy edges with no product record",
    )


# =============================================================================
# Workflow
# =============================================================================


class WorkflowTransition(BaseModel):
    """History entry for one approval state change."""

    model_config = ConfigDict(frozen=True)

    from_state: ApprovalState
    to_state: ApprovalState
    actor: str = "system"
    notes: Optional[str] = None
    at: datetime = Field(default_factory=_utcnow)


class ApprovalWorkflow(BaseModel):
    """Supplier approval workflow record."""

    model_config = ConfigDict(frozen=True)

    id: str
    supplier_id: str
    state: ApprovalState = ApprovalState.INITIATED
    history: List[WorkflowTransition] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        """Whether the workflow reached Approved or Rejected."""
        return self.state in (ApprovalState.APPROVED, ApprovalState.REJECTED)


class EscalationResult(BaseModel):
    """Escalation decision for a non-conformance item."""

    requires_escalation: bool
    days_in_current_status: int
    escalation_level: EscalationLevel


__all__ = [
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
    "TraceableItem",
    # Snapshot
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
]
