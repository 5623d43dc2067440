# -*- coding: utf-8 -*-
"""
Traceability Service Facade - FoodSafe Traceability Core

Provides the main service class and FastAPI integration functions:
- TraceabilityService: Composes the store and all engines into one facade
- configure_traceability(app): Register service on FastAPI app
- get_traceability(app): Retrieve service from app state
- get_router(): Return FastAPI router for mounting

Operations that read graph data are ``async``: they fetch a snapshot from
the entity store, then run the pure engines on it. Callers that already
hold a snapshot can pass it in to skip the fetch. Batch-facing operations
(recall evaluation, compliance validation, reports) are synchronous.

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Sequence

from foodsafe.exceptions import NotFoundError, format_exception_chain
from foodsafe.traceability.approval_workflow import ApprovalWorkflowEngine
from foodsafe.traceability.compliance_rules import ComplianceRuleEngine
from foodsafe.traceability.config import get_cfg_value
from foodsafe.traceability.genealogy import GenealogyTreeBuilder
from foodsafe.traceability.lineage import LineageTraversalEngine
from foodsafe.traceability.metrics import (
    observe_duration,
    record_alert_dispatched,
    record_error,
)
from foodsafe.traceability.models import (
    ApprovalState,
    ApprovalWorkflow,
    BatchEvaluation,
    BatchTrace,
    Component,
    ComplianceReport,
    EscalationResult,
    GenealogyTree,
    GraphData,
    GraphNode,
    Product,
    Recall,
    RecallAssessment,
    RecallScope,
    ScenarioReport,
    ScenarioResult,
    TraceabilitySnapshot,
    TraceableItem,
)
from foodsafe.traceability.provenance import ProvenanceTracker
from foodsafe.traceability.recall_risk import ComplaintTrendLookup, RecallRiskEvaluator
from foodsafe.traceability.reporting import (
    FDA204Report,
    RecallAlert,
    ReportDispatcher,
    build_fda204_report,
    build_recall_alert,
)
from foodsafe.traceability.scenarios import ScenarioHarness, ValidationScenario
from foodsafe.traceability.store import (
    EntityStore,
    InMemoryEntityStore,
    fetch_complaint_trends,
    fetch_snapshot,
)
from foodsafe.traceability.supply_chain import SupplyChainGraphBuilder

logger = logging.getLogger(__name__)


class TraceabilityService:
    """Facade composing the traceability engines.

    Attributes:
        config: TraceabilityConfig instance.
        store: EntityStore the graph operations read from.
        provenance: ProvenanceTracker, or None when provenance is disabled.
        genealogy: GenealogyTreeBuilder instance.
        supply_chain: SupplyChainGraphBuilder instance.
        lineage: LineageTraversalEngine instance.
        recall_risk: RecallRiskEvaluator instance.
        compliance: ComplianceRuleEngine instance.
        scenarios: ScenarioHarness instance.
        workflow: ApprovalWorkflowEngine instance.
    """

    def __init__(
        self,
        config: Optional[Any] = None,
        store: Optional[EntityStore] = None,
    ):
        """Initialize the Traceability Service with all engines.

        Args:
            config: TraceabilityConfig instance. If None, loads from env.
            store: Entity store; an empty InMemoryEntityStore if None.
        """
        if config is None:
            from foodsafe.traceability.config import get_config
            config = get_config()

        self.config = config
        self.store = store if store is not None else InMemoryEntityStore()
        self.provenance = (
            ProvenanceTracker()
            if get_cfg_value(config, "enable_provenance", True) else None
        )

        self.genealogy = GenealogyTreeBuilder(config=config)
        self.supply_chain = SupplyChainGraphBuilder(config=config)
        self.lineage = LineageTraversalEngine(config=config)
        self.recall_risk = RecallRiskEvaluator(
            config=config, provenance=self.provenance,
        )
        self.compliance = ComplianceRuleEngine(
            config=config, provenance=self.provenance,
        )
        self.scenarios = ScenarioHarness(engine=self.compliance)
        self.workflow = ApprovalWorkflowEngine(
            config=config, provenance=self.provenance,
        )

        logger.info(
            "TraceabilityService initialized: store=%s, provenance=%s",
            type(self.store).__name__, self.provenance is not None,
        )

    # =========================================================================
    # Snapshot
    # =========================================================================

    async def snapshot(self) -> TraceabilitySnapshot:
        """Fetch a fresh snapshot from the entity store."""
        return await fetch_snapshot(self.store)

    async def _resolve(
        self, snapshot: Optional[TraceabilitySnapshot],
    ) -> TraceabilitySnapshot:
        return snapshot if snapshot is not None else await self.snapshot()

    def _record(self, entity_type: str, entity_id: str, action: str, data: Any) -> None:
        if self.provenance is None:
            return
        payload = data.model_dump(mode="json") if hasattr(data, "model_dump") else data
        self.provenance.record(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            data_hash=self.provenance.build_hash(payload),
        )

    # =========================================================================
    # Genealogy and Supply Chain
    # =========================================================================

    async def build_genealogy_tree(
        self,
        product_id: str,
        max_depth: Optional[int] = None,
        snapshot: Optional[TraceabilitySnapshot] = None,
    ) -> GenealogyTree:
        """Build the genealogy tree of a product. Delegates to GenealogyTreeBuilder."""
        snapshot = await self._resolve(snapshot)
        tree = self.genealogy.build_tree(snapshot, product_id, max_depth)
        self._record("genealogy_tree", product_id, "build", tree)
        return tree

    async def expand_genealogy_node(
        self,
        tree: GenealogyTree,
        node_id: str,
        max_depth: Optional[int] = None,
        snapshot: Optional[TraceabilitySnapshot] = None,
    ) -> GenealogyTree:
        """Expand a truncated node of a previously built tree."""
        snapshot = await self._resolve(snapshot)
        return self.genealogy.expand_node(snapshot, tree, node_id, max_depth)

    async def build_supply_chain_visualization(
        self,
        product_id: Optional[str] = None,
        snapshot: Optional[TraceabilitySnapshot] = None,
    ) -> GraphData:
        """Build the supply chain graph, optionally restricted to a product."""
        snapshot = await self._resolve(snapshot)
        return self.supply_chain.build(snapshot, product_id)

    async def find_upstream_partners(
        self,
        partner_id: str,
        snapshot: Optional[TraceabilitySnapshot] = None,
    ) -> List[GraphNode]:
        """List partners upstream of ``partner_id`` in the supply chain."""
        snapshot = await self._resolve(snapshot)
        graph = self.supply_chain.build(snapshot)
        return self.lineage.upstream_partners(graph, partner_id)

    # =========================================================================
    # Lineage
    # =========================================================================

    async def find_product_components(
        self,
        batch_lot: str,
        snapshot: Optional[TraceabilitySnapshot] = None,
    ) -> List[TraceableItem]:
        """Components and sub-products consumed by a product lot."""
        snapshot = await self._resolve(snapshot)
        return self.lineage.components_of(snapshot, batch_lot)

    async def find_affected_products_by_component(
        self,
        batch_lot: str,
        snapshot: Optional[TraceabilitySnapshot] = None,
    ) -> List[Product]:
        """Products that transitively consumed a component lot."""
        snapshot = await self._resolve(snapshot)
        return self.lineage.products_affected_by(snapshot, batch_lot)

    async def assess_recall_scope(
        self,
        recall: Recall,
        snapshot: Optional[TraceabilitySnapshot] = None,
    ) -> RecallScope:
        """Resolve a recall's batch lots to affected products and components.

        Lots absent from the snapshot are listed in ``missing_batch_lots``
        rather than aborting the analysis. Parent ids with no product record
        are listed in ``unresolved_product_ids``.
        """
        snapshot = await self._resolve(snapshot)
        products: Dict[str, Product] = {}
        components: Dict[str, Component] = {}
        missing: List[str] = []
        unresolved: Dict[str, None] = {}

        for lot in recall.batch_ids:
            try:
                affected, unresolved_ids = self.lineage.trace_affected_products(
                    snapshot, lot,
                )
                consumed = self.lineage.components_of(snapshot, lot)
            except NotFoundError:
                logger.warning(
                    "Recall %s references unknown batch lot %s", recall.id, lot,
                )
                missing.append(lot)
                continue
            for item_id in snapshot.ids_by_lot.get(lot, ()):
                if item_id in snapshot.products_by_id:
                    products.setdefault(item_id, snapshot.products_by_id[item_id])
                elif item_id in snapshot.components_by_id:
                    components.setdefault(item_id, snapshot.components_by_id[item_id])
            for product in affected:
                products.setdefault(product.id, product)
            for parent_id in unresolved_ids:
                unresolved.setdefault(parent_id)
            for item in consumed:
                if isinstance(item, Component):
                    components.setdefault(item.id, item)
                else:
                    products.setdefault(item.id, item)

        scope = RecallScope(
            recall_id=recall.id,
            batch_ids=list(recall.batch_ids),
            affected_products=list(products.values()),
            implicated_components=list(components.values()),
            missing_batch_lots=missing,
            unresolved_product_ids=list(unresolved),
        )
        self._record("recall_scope", recall.id, "assess_scope", scope)
        logger.info(
            "Recall %s scope: %d product(s), %d component(s), %d missing lot(s), "
            "%d unresolved product id(s)",
            recall.id, len(scope.affected_products),
            len(scope.implicated_components), len(missing), len(unresolved),
        )
        return scope

    async def assess_recall_scope_by_id(self, recall_id: str) -> RecallScope:
        """Fetch a recall from the store and assess its scope."""
        recall = await self.store.get_recall(recall_id)
        return await self.assess_recall_scope(recall)

    # =========================================================================
    # Recall Risk and Compliance
    # =========================================================================

    def evaluate_recall_need(
        self,
        batch: BatchTrace,
        complaint_trend: ComplaintTrendLookup = None,
    ) -> RecallAssessment:
        """Evaluate recall risk. Delegates to RecallRiskEvaluator."""
        return self.recall_risk.evaluate(batch, complaint_trend)

    def validate_fsma204_compliance(self, batch: BatchTrace) -> ComplianceReport:
        """Validate FSMA 204 records. Delegates to ComplianceRuleEngine."""
        return self.compliance.validate(batch)

    def validate_all_scenarios(
        self, extra: Sequence[ValidationScenario] = (),
    ) -> ScenarioReport:
        """Run the validation scenario catalogue. Delegates to ScenarioHarness."""
        return self.scenarios.validate_all_scenarios(extra)

    def run_validation_scenario(self, scenario_id: str) -> ScenarioResult:
        """Re-run one validation scenario by id."""
        return self.scenarios.run_validation_scenario(scenario_id)

    def generate_fda204_report(
        self,
        batch: BatchTrace,
        complaint_trend: ComplaintTrendLookup = None,
    ) -> FDA204Report:
        """Build the FDA 204 traceability record for a batch."""
        report = build_fda204_report(
            batch,
            self.evaluate_recall_need(batch, complaint_trend),
            self.validate_fsma204_compliance(batch),
        )
        if self.provenance is not None:
            self.provenance.record(
                entity_type="fda204_report",
                entity_id=batch.id or "<unidentified>",
                action="generate",
                data_hash=report.provenance_hash,
            )
        return report

    def evaluate_batch(
        self,
        batch: BatchTrace,
        complaint_trend: ComplaintTrendLookup = None,
    ) -> BatchEvaluation:
        """Recall assessment and compliance report for one batch."""
        return BatchEvaluation(
            batch_id=batch.id,
            assessment=self.evaluate_recall_need(batch, complaint_trend),
            compliance=self.validate_fsma204_compliance(batch),
        )

    def evaluate_batches(
        self,
        batches: Sequence[BatchTrace],
        complaint_trend: ComplaintTrendLookup = None,
    ) -> List[BatchEvaluation]:
        """Evaluate many batches in parallel, preserving input order.

        Args:
            batches: Batches to evaluate.
            complaint_trend: Complaint trend lookup shared by all batches.

        Returns:
            One BatchEvaluation per batch, in input order.

        Raises:
            ValueError: If more than ``batch_max_size`` batches are given.
        """
        max_size = get_cfg_value(self.config, "batch_max_size", 1000)
        if len(batches) > max_size:
            raise ValueError(
                f"Batch count {len(batches)} exceeds batch_max_size {max_size}"
            )
        if not batches:
            return []

        start = time.monotonic()
        results: List[Optional[BatchEvaluation]] = [None] * len(batches)
        workers = max(
            1, min(get_cfg_value(self.config, "batch_worker_count", 4), len(batches)),
        )

        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(self.evaluate_batch, batch, complaint_trend): index
                for index, batch in enumerate(batches)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except Exception as exc:
                    record_error(type(exc).__name__)
                    logger.error(
                        "Evaluation of batch %s failed:\n%s",
                        batches[index].id, format_exception_chain(exc),
                    )
                    raise

        elapsed = time.monotonic() - start
        observe_duration("evaluate_batches", elapsed)
        logger.info(
            "Evaluated %d batch(es) with %d worker(s) in %.1f ms",
            len(batches), workers, elapsed * 1000,
        )
        return [r for r in results if r is not None]

    async def evaluate_stored_batch(self, batch_id: str) -> BatchEvaluation:
        """Fetch a batch and its complaint trend from the store and evaluate it."""
        batch = await self.store.get_batch(batch_id)
        trends = await fetch_complaint_trends(self.store, [batch.product_id])
        return self.evaluate_batch(batch, trends)

    # =========================================================================
    # Notifications
    # =========================================================================

    def dispatch_recall_alerts(
        self,
        batches: Sequence[BatchTrace],
        dispatcher: ReportDispatcher,
        complaint_trend: ComplaintTrendLookup = None,
    ) -> List[RecallAlert]:
        """Evaluate batches and dispatch an alert for each non-clear one.

        Returns:
            The alerts handed to ``dispatcher``, in batch order.
        """
        alerts: List[RecallAlert] = []
        for batch in batches:
            assessment = self.evaluate_recall_need(batch, complaint_trend)
            alert = build_recall_alert(batch, assessment)
            if alert is None:
                continue
            dispatcher.dispatch(alert)
            record_alert_dispatched()
            alerts.append(alert)
        logger.info(
            "Dispatched %d recall alert(s) for %d batch(es)",
            len(alerts), len(batches),
        )
        return alerts

    # =========================================================================
    # Approval Workflow Delegation
    # =========================================================================

    def start_approval(self, supplier_id: str) -> ApprovalWorkflow:
        """Open a supplier approval workflow. Delegates to ApprovalWorkflowEngine."""
        return self.workflow.start(supplier_id)

    def advance_approval(
        self,
        workflow: ApprovalWorkflow,
        to_state: ApprovalState,
        actor: str = "system",
        notes: Optional[str] = None,
    ) -> ApprovalWorkflow:
        """Move a workflow to its next state. Delegates to ApprovalWorkflowEngine."""
        return self.workflow.transition(workflow, to_state, actor, notes)

    def decide_approval(
        self,
        workflow: ApprovalWorkflow,
        assessment: RecallAssessment,
        actor: str = "system",
    ) -> ApprovalWorkflow:
        """Approve or reject from a recall assessment."""
        return self.workflow.decide(workflow, assessment, actor)

    def check_escalation(self, status: Any, status_since: Any, now: Any = None) -> EscalationResult:
        """Non-conformance escalation check. Delegates to ApprovalWorkflowEngine."""
        return self.workflow.check_escalation(status, status_since, now)

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_statistics(self) -> Dict[str, Any]:
        """Get service statistics."""
        return {
            "service": "foodsafe-traceability",
            "version": "1.0.0",
            "rules": len(self.compliance.rules),
            "scenarios": len(self.scenarios.scenarios),
            "provenance_entries": (
                self.provenance.entry_count if self.provenance is not None else 0
            ),
        }


# =============================================================================
# FastAPI Integration
# =============================================================================

_SERVICE_KEY = "traceability_service"


def configure_traceability(
    app: Any,
    config: Optional[Any] = None,
    store: Optional[EntityStore] = None,
) -> TraceabilityService:
    """Register the Traceability Service on a FastAPI application.

    Creates the service, attaches it to app.state, and includes the
    API router.

    Args:
        app: FastAPI application instance.
        config: Optional TraceabilityConfig.
        store: Optional entity store.

    Returns:
        Configured TraceabilityService instance.
    """
    service = TraceabilityService(config=config, store=store)
    setattr(app.state, _SERVICE_KEY, service)

    from foodsafe.traceability.api.router import router
    app.include_router(router)

    logger.info("Traceability Service configured on FastAPI app")
    return service


def get_traceability(app: Any) -> TraceabilityService:
    """Retrieve the Traceability Service from a FastAPI application.

    Raises:
        RuntimeError: If service not configured.
    """
    service = getattr(app.state, _SERVICE_KEY, None)
    if service is None:
        raise RuntimeError(
            "Traceability Service not configured. "
            "Call configure_traceability(app) first."
        )
    return service


def get_router():
    """Return the FastAPI router for the Traceability Service."""
    from foodsafe.traceability.api.router import router
    return router


__all__ = [
    "TraceabilityService",
    "configure_traceability",
    "get_traceability",
    "get_router",
]
