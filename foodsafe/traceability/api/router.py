# -*- coding: utf-8 -*-
"""
Traceability REST API - FoodSafe Traceability Core

FastAPI router exposing the traceability service at prefix
``/api/v1/traceability``. The service is read from ``app.state`` (see
``configure_traceability``).

Error mapping:
    NotFoundError          -> 404
    InvalidTransitionError -> 409
    ValueError             -> 400

Author: FoodSafe Platform Team
Status: Production Ready
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from foodsafe.exceptions import InvalidTransitionError, NotFoundError
from foodsafe.traceability.models import (
    ApprovalState,
    ApprovalWorkflow,
    BatchEvaluation,
    BatchTrace,
    ComplianceReport,
    EscalationResult,
    GenealogyTree,
    GraphData,
    NonConformanceStatus,
    Product,
    RecallAssessment,
    RecallScope,
    ScenarioReport,
    ScenarioResult,
)
from foodsafe.traceability.reporting import FDA204Report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/traceability", tags=["traceability"])


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------


class BatchRequest(BaseModel):
    """Batch plus an optional complaint trend for its product."""

    batch: BatchTrace
    complaint_trend: Optional[float] = Field(
        None, description="Complaint increase in percent for the product",
    )

    def trend_lookup(self) -> Optional[Dict[str, float]]:
        if self.complaint_trend is None or not self.batch.product_id:
            return None
        return {self.batch.product_id: self.complaint_trend}


class TransitionRequest(BaseModel):
    """Approval workflow transition request."""

    workflow: ApprovalWorkflow
    to_state: ApprovalState
    actor: str = "system"
    notes: Optional[str] = None


class EscalationRequest(BaseModel):
    """Non-conformance escalation check request."""

    status: NonConformanceStatus
    status_since: datetime
    now: Optional[datetime] = None


def _svc(request: Request) -> Any:
    from foodsafe.traceability.setup import get_traceability
    return get_traceability(request.app)


def _not_found(exc: NotFoundError) -> HTTPException:
    logger.info("Not found: %s", exc)
    return HTTPException(status_code=404, detail=exc.to_dict())


# ------------------------------------------------------------------
# 1. GET /products/{product_id}/tree - Genealogy tree
# ------------------------------------------------------------------
@router.get("/products/{product_id}/tree", response_model=GenealogyTree)
async def get_genealogy_tree(
    request: Request,
    product_id: str,
    max_depth: Optional[int] = Query(None, ge=0),
) -> GenealogyTree:
    """Build the genealogy tree of a product."""
    try:
        return await _svc(request).build_genealogy_tree(product_id, max_depth)
    except NotFoundError as exc:
        raise _not_found(exc)


# ------------------------------------------------------------------
# 2. GET /supply-chain - Supply chain graph
# ------------------------------------------------------------------
@router.get("/supply-chain", response_model=GraphData)
async def get_supply_chain(
    request: Request,
    product_id: Optional[str] = None,
) -> GraphData:
    """Supply chain graph, optionally restricted to one product."""
    try:
        return await _svc(request).build_supply_chain_visualization(product_id)
    except NotFoundError as exc:
        raise _not_found(exc)


# ------------------------------------------------------------------
# 3. GET /lots/{batch_lot}/components - Downstream lineage
# ------------------------------------------------------------------
@router.get("/lots/{batch_lot}/components")
async def get_lot_components(request: Request, batch_lot: str) -> List[Dict[str, Any]]:
    """Components and sub-products consumed by a product lot."""
    try:
        items = await _svc(request).find_product_components(batch_lot)
    except NotFoundError as exc:
        raise _not_found(exc)
    return [
        {
            "kind": "Product" if isinstance(item, Product) else "Component",
            **item.model_dump(mode="json"),
        }
        for item in items
    ]


# ------------------------------------------------------------------
# 4. GET /lots/{batch_lot}/affected-products - Upstream lineage
# ------------------------------------------------------------------
@router.get("/lots/{batch_lot}/affected-products", response_model=List[Product])
async def get_affected_products(request: Request, batch_lot: str) -> List[Product]:
    """Products that transitively consumed a component lot."""
    try:
        return await _svc(request).find_affected_products_by_component(batch_lot)
    except NotFoundError as exc:
        raise _not_found(exc)


# ------------------------------------------------------------------
# 5. POST /recall/evaluate - Recall risk for a submitted batch
# ------------------------------------------------------------------
@router.post("/recall/evaluate", response_model=RecallAssessment)
async def post_evaluate_recall(
    request: Request, body: BatchRequest,
) -> RecallAssessment:
    """Evaluate recall need for a batch."""
    return _svc(request).evaluate_recall_need(body.batch, body.trend_lookup())


# ------------------------------------------------------------------
# 6. GET /batches/{batch_id}/evaluation - Evaluate a stored batch
# ------------------------------------------------------------------
@router.get("/batches/{batch_id}/evaluation", response_model=BatchEvaluation)
async def get_batch_evaluation(request: Request, batch_id: str) -> BatchEvaluation:
    """Recall assessment and compliance report for a stored batch."""
    try:
        return await _svc(request).evaluate_stored_batch(batch_id)
    except NotFoundError as exc:
        raise _not_found(exc)


# ------------------------------------------------------------------
# 7. POST /compliance/validate - FSMA 204 validation
# ------------------------------------------------------------------
@router.post("/compliance/validate", response_model=ComplianceReport)
async def post_validate_compliance(
    request: Request, batch: BatchTrace,
) -> ComplianceReport:
    """Validate a batch against the FSMA 204 rule catalogue."""
    return _svc(request).validate_fsma204_compliance(batch)


# ------------------------------------------------------------------
# 8. GET /compliance/scenarios - Scenario self test
# ------------------------------------------------------------------
@router.get("/compliance/scenarios", response_model=ScenarioReport)
async def get_scenarios(request: Request) -> ScenarioReport:
    """Run every validation scenario."""
    return _svc(request).validate_all_scenarios()


# ------------------------------------------------------------------
# 9. GET /compliance/scenarios/{scenario_id} - Single scenario
# ------------------------------------------------------------------
@router.get("/compliance/scenarios/{scenario_id}", response_model=ScenarioResult)
async def get_scenario(request: Request, scenario_id: str) -> ScenarioResult:
    """Re-run one validation scenario."""
    try:
        return _svc(request).run_validation_scenario(scenario_id)
    except NotFoundError as exc:
        raise _not_found(exc)


# ------------------------------------------------------------------
# 10. POST /reports/fda204 - FDA 204 traceability record
# ------------------------------------------------------------------
@router.post("/reports/fda204", response_model=FDA204Report)
async def post_fda204_report(request: Request, body: BatchRequest) -> FDA204Report:
    """Generate the FDA 204 report for a batch."""
    return _svc(request).generate_fda204_report(body.batch, body.trend_lookup())


# ------------------------------------------------------------------
# 11. GET /recalls/{recall_id}/scope - Recall scope analysis
# ------------------------------------------------------------------
@router.get("/recalls/{recall_id}/scope", response_model=RecallScope)
async def get_recall_scope(request: Request, recall_id: str) -> RecallScope:
    """Affected products and implicated components of a recall."""
    try:
        return await _svc(request).assess_recall_scope_by_id(recall_id)
    except NotFoundError as exc:
        raise _not_found(exc)


# ------------------------------------------------------------------
# 12. POST /workflows/transition - Supplier approval transition
# ------------------------------------------------------------------
@router.post("/workflows/transition", response_model=ApprovalWorkflow)
async def post_workflow_transition(
    request: Request, body: TransitionRequest,
) -> ApprovalWorkflow:
    """Move a supplier approval workflow to its next state."""
    try:
        return _svc(request).advance_approval(
            body.workflow, body.to_state, body.actor, body.notes,
        )
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=409, detail=exc.to_dict())


# ------------------------------------------------------------------
# 13. POST /non-conformance/escalation - Escalation check
# ------------------------------------------------------------------
@router.post("/non-conformance/escalation", response_model=EscalationResult)
async def post_escalation_check(
    request: Request, body: EscalationRequest,
) -> EscalationResult:
    """Check whether a non-conformance needs escalating."""
    try:
        return _svc(request).check_escalation(
            body.status, body.status_since, body.now,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


# ------------------------------------------------------------------
# 14. GET /health - Health check
# ------------------------------------------------------------------
@router.get("/health")
async def get_health_check(request: Request) -> Dict[str, Any]:
    """Health check with service statistics."""
    return {"status": "healthy", **_svc(request).get_statistics()}
