# -*- coding: utf-8 -*-
"""
Approval Workflow - FoodSafe Traceability Core

Supplier approval state machine and non-conformance escalation rules.

Supplier approval:
    Initiated -> Document Review -> Risk Assessment -> Audit Scheduled
    -> Audit Completed -> Pending Approval -> Approved | Rejected

Legal moves are a lookup table keyed by the current state. Any other
request raises ``InvalidTransitionError``; requests are never coerced to the
nearest legal state. Workflow records are immutable: every transition
returns a new record with one more history entry. The final decision
consults a recall risk assessment: a RECALL tier rejects the supplier.

Non-conformance escalation:
    On Hold      > 7 days -> medium, > 14 days -> high
    Under Review > 5 days -> medium, > 10 days -> high
Days in status are counted as started days (rounded up).

Example:
    >>> from foodsafe.traceability.approval_workflow import ApprovalWorkflowEngine
    >>> engine = ApprovalWorkflowEngine()
    >>> wf = engine.start("SUP-001")
    >>> wf = engine.transition(wf, ApprovalState.DOCUMENT_REVIEW)
    >>> wf.state.value
    'Document Review'

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, List, Optional, Union

from foodsafe.exceptions import InvalidTransitionError
from foodsafe.traceability.config import get_cfg_value
from foodsafe.traceability.metrics import record_escalation, record_transition
from foodsafe.traceability.models import (
    ApprovalState,
    ApprovalWorkflow,
    EscalationLevel,
    EscalationResult,
    NonConformanceStatus,
    RecallAssessment,
    RiskTier,
    WorkflowTransition,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------

ALLOWED_TRANSITIONS: Dict[ApprovalState, FrozenSet[ApprovalState]] = {
    ApprovalState.INITIATED: frozenset({ApprovalState.DOCUMENT_REVIEW}),
    ApprovalState.DOCUMENT_REVIEW: frozenset({ApprovalState.RISK_ASSESSMENT}),
    ApprovalState.RISK_ASSESSMENT: frozenset({ApprovalState.AUDIT_SCHEDULED}),
    ApprovalState.AUDIT_SCHEDULED: frozenset({ApprovalState.AUDIT_COMPLETED}),
    ApprovalState.AUDIT_COMPLETED: frozenset({ApprovalState.PENDING_APPROVAL}),
    ApprovalState.PENDING_APPROVAL: frozenset({
        ApprovalState.APPROVED,
        ApprovalState.REJECTED,
    }),
    ApprovalState.APPROVED: frozenset(),
    ApprovalState.REJECTED: frozenset(),
}


def allowed_transitions(state: ApprovalState) -> List[ApprovalState]:
    """Return the states reachable from ``state``, in declaration order."""
    targets = ALLOWED_TRANSITIONS.get(state, frozenset())
    return [s for s in ApprovalState if s in targets]


# ---------------------------------------------------------------------------
# Escalation
# ---------------------------------------------------------------------------


def days_in_status(status_since: datetime, now: Optional[datetime] = None) -> int:
    """Return started days between ``status_since`` and ``now`` (never negative)."""
    now = now or _utcnow()
    if status_since.tzinfo is None:
        status_since = status_since.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    seconds = (now - status_since).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def check_escalation(
    status: Union[NonConformanceStatus, str],
    status_since: datetime,
    now: Optional[datetime] = None,
    config: Any = None,
) -> EscalationResult:
    """Decide whether a non-conformance needs escalating.

    Args:
        status: Current non-conformance status.
        status_since: When the item entered ``status``.
        now: Evaluation time; defaults to the current UTC time.
        config: Optional TraceabilityConfig or dict with the escalation
            thresholds.

    Returns:
        EscalationResult with the days spent in status and the level.
    """
    status = NonConformanceStatus(status)
    days = days_in_status(status_since, now)

    if status == NonConformanceStatus.ON_HOLD:
        medium = get_cfg_value(config, "on_hold_escalation_days", 7)
        high = get_cfg_value(config, "on_hold_high_escalation_days", 14)
    elif status == NonConformanceStatus.UNDER_REVIEW:
        medium = get_cfg_value(config, "under_review_escalation_days", 5)
        high = get_cfg_value(config, "under_review_high_escalation_days", 10)
    else:
        return EscalationResult(
            requires_escalation=False,
            days_in_current_status=days,
            escalation_level=EscalationLevel.LOW,
        )

    if days > high:
        level = EscalationLevel.HIGH
    elif days > medium:
        level = EscalationLevel.MEDIUM
    else:
        level = EscalationLevel.LOW

    result = EscalationResult(
        requires_escalation=level != EscalationLevel.LOW,
        days_in_current_status=days,
        escalation_level=level,
    )
    if result.requires_escalation:
        record_escalation(level.value)
        logger.info(
            "Non-conformance %s for %d day(s): escalate (%s)",
            status.value, days, level.value,
        )
    return result


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class ApprovalWorkflowEngine:
    """Drives supplier approval workflows through the transition table."""

    def __init__(self, config: Any = None, provenance: Any = None) -> None:
        """Initialize ApprovalWorkflowEngine.

        Args:
            config: Optional TraceabilityConfig or dict.
            provenance: Optional ProvenanceTracker instance.
        """
        self._config = config
        self._provenance = provenance
        logger.info("ApprovalWorkflowEngine initialized")

    def start(
        self, supplier_id: str, workflow_id: Optional[str] = None,
    ) -> ApprovalWorkflow:
        """Open a new approval workflow in the Initiated state."""
        workflow = ApprovalWorkflow(
            id=workflow_id or f"WF-{uuid.uuid4().hex[:12]}",
            supplier_id=supplier_id,
        )
        logger.info(
            "Approval workflow %s started for supplier %s",
            workflow.id, supplier_id,
        )
        return workflow

    def transition(
        self,
        workflow: ApprovalWorkflow,
        to_state: Union[ApprovalState, str],
        actor: str = "system",
        notes: Optional[str] = None,
    ) -> ApprovalWorkflow:
        """Move a workflow to ``to_state``.

        Args:
            workflow: Current workflow record; not modified.
            to_state: Requested next state.
            actor: Who requested the move.
            notes: Optional free-text notes.

        Returns:
            New workflow record in ``to_state`` with the move in history.

        Raises:
            InvalidTransitionError: If ``to_state`` is not reachable from
                the current state.
        """
        to_state = ApprovalState(to_state)
        allowed = allowed_transitions(workflow.state)
        if to_state not in allowed:
            raise InvalidTransitionError(
                message=f"Cannot move workflow {workflow.id} from "
                        f"{workflow.state.value} to {to_state.value}",
                current_state=workflow.state.value,
                requested_state=to_state.value,
                allowed_states=[s.value for s in allowed],
            )

        entry = WorkflowTransition(
            from_state=workflow.state,
            to_state=to_state,
            actor=actor,
            notes=notes,
        )
        updated = workflow.model_copy(update={
            "state": to_state,
            "history": [*workflow.history, entry],
        })

        if self._provenance is not None:
            payload = json.dumps(
                entry.model_dump(mode="json"), sort_keys=True, default=str,
            )
            self._provenance.record(
                entity_type="approval_workflow",
                entity_id=workflow.id,
                action="transition",
                data_hash=hashlib.sha256(payload.encode("utf-8")).hexdigest(),
                user_id=actor,
            )

        record_transition(to_state.value)
        logger.info(
            "Workflow %s: %s -> %s by %s",
            workflow.id, workflow.state.value, to_state.value, actor,
        )
        return updated

    def decide(
        self,
        workflow: ApprovalWorkflow,
        assessment: RecallAssessment,
        actor: str = "system",
    ) -> ApprovalWorkflow:
        """Approve or reject a workflow in Pending Approval.

        A RECALL tier assessment rejects the supplier; any other tier
        approves it.

        Raises:
            InvalidTransitionError: If the workflow is not Pending Approval.
        """
        if assessment.tier == RiskTier.RECALL:
            target = ApprovalState.REJECTED
            notes = "Rejected: recall risk factors " + ", ".join(
                f.kind.value for f in assessment.risk_factors
            )
        else:
            target = ApprovalState.APPROVED
            notes = f"Approved: recall risk tier {assessment.tier.value}"
        return self.transition(workflow, target, actor=actor, notes=notes)

    def check_escalation(
        self,
        status: Union[NonConformanceStatus, str],
        status_since: datetime,
        now: Optional[datetime] = None,
    ) -> EscalationResult:
        """Escalation check using this engine's configuration."""
        return check_escalation(status, status_since, now, self._config)


__all__ = [
    "ALLOWED_TRANSITIONS",
    "allowed_transitions",
    "days_in_status",
    "check_escalation",
    "ApprovalWorkflowEngine",
]
