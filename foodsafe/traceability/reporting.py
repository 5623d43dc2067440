# -*- coding: utf-8 -*-
"""
Notification and Reporting - FoodSafe Traceability Core

Builds the payloads the traceability core hands to the outside world:

    - FDA204Report: the FSMA 204 traceability record for one batch (Key
      Data Elements, one Critical Tracking Event per CCP record, immediate
      previous sources), bundled with its recall assessment and compliance
      report and sealed with a SHA-256 content hash.
    - RecallAlert: notification payload for a batch whose recall tier is
      not NONE.

Delivery is not done here. Callers pass any object implementing the
``ReportDispatcher`` protocol (email, SMS, message bus, ...).

Example:
    >>> from foodsafe.traceability.reporting import build_fda204_report
    >>> report = build_fda204_report(batch, assessment, compliance)
    >>> len(report.provenance_hash)
    64

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from foodsafe.traceability.models import (
    BatchTrace,
    ComplianceReport,
    EscalationLevel,
    RecallAssessment,
    RiskFactor,
    RiskTier,
    SupplierRef,
)
from foodsafe.traceability.provenance import compute_hash

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


# =============================================================================
# Report models
# =============================================================================


class KeyDataElements(BaseModel):
    """FSMA 204 Key Data Elements of a production batch."""

    traceability_lot_code: str
    product_description: Optional[str] = None
    production_date: Optional[date] = None
    location: Optional[str] = None
    quantity: Optional[float] = None
    unit_of_measure: Optional[str] = None


class CriticalTrackingEvent(BaseModel):
    """One monitoring event derived from a HACCP check."""

    event_type: str = "transformation"
    ccp_id: str
    description: Optional[str] = None
    passed: bool
    critical_limit_min: Optional[float] = None
    critical_limit_max: Optional[float] = None
    actual_value: Optional[float] = None
    unit: Optional[str] = None
    occurred_at: Optional[datetime] = None
    verified_by: Optional[str] = None


class FDA204Report(BaseModel):
    """Traceability record for an FDA records request.

    ``provenance_hash`` covers every field except itself, ``report_id``
    and ``generated_at``, so the same inputs always seal to the same hash.
    """

    report_id: str = Field(default_factory=lambda: f"FDA204-{uuid.uuid4().hex[:12]}")
    batch_id: str
    key_data_elements: KeyDataElements
    critical_tracking_events: List[CriticalTrackingEvent] = Field(default_factory=list)
    immediate_previous_sources: List[SupplierRef] = Field(default_factory=list)
    recall_assessment: RecallAssessment
    compliance: ComplianceReport
    provenance_hash: str = ""
    generated_at: datetime = Field(default_factory=_utcnow)


class RecallAlert(BaseModel):
    """Notification payload for a batch at elevated recall risk."""

    alert_id: str = Field(default_factory=lambda: f"ALERT-{uuid.uuid4().hex[:12]}")
    batch_id: str
    product_id: Optional[str] = None
    product: Optional[str] = None
    tier: RiskTier
    severity: EscalationLevel
    recall_recommended: bool
    subject: str
    message: str
    risk_factors: List[RiskFactor] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


@runtime_checkable
class ReportDispatcher(Protocol):
    """Transport for recall alerts; implemented by the host application."""

    def dispatch(self, alert: RecallAlert) -> None:
        ...


# =============================================================================
# Builders
# =============================================================================


def build_fda204_report(
    batch: BatchTrace,
    assessment: RecallAssessment,
    compliance: ComplianceReport,
) -> FDA204Report:
    """Assemble and seal the FDA 204 traceability record for a batch.

    Args:
        batch: Batch the report covers.
        assessment: Recall assessment of the batch.
        compliance: FSMA 204 compliance report of the batch.

    Returns:
        FDA204Report with ``provenance_hash`` set.
    """
    kde = KeyDataElements(
        traceability_lot_code=batch.id,
        product_description=batch.product,
        production_date=batch.date,
        location=batch.location,
        quantity=batch.quantity,
        unit_of_measure=batch.unit,
    )
    events = [
        CriticalTrackingEvent(
            ccp_id=check.ccp_id,
            description=check.name,
            passed=check.passed,
            critical_limit_min=check.critical_limit_min,
            critical_limit_max=check.critical_limit_max,
            actual_value=check.actual_value,
            unit=check.unit,
            occurred_at=check.checked_at,
            verified_by=check.verified_by,
        )
        for check in batch.haccp_checks
    ]
    report = FDA204Report(
        batch_id=batch.id,
        key_data_elements=kde,
        critical_tracking_events=events,
        immediate_previous_sources=list(batch.suppliers),
        recall_assessment=assessment,
        compliance=compliance,
    )
    sealed: Dict[str, Any] = report.model_dump(
        mode="json", exclude={"report_id", "generated_at", "provenance_hash"},
    )
    report.provenance_hash = compute_hash(sealed)
    logger.info(
        "FDA 204 report %s for batch %s: %d CTE(s), hash=%s",
        report.report_id, batch.id, len(events), report.provenance_hash[:16],
    )
    return report


def build_recall_alert(
    batch: BatchTrace, assessment: RecallAssessment,
) -> Optional[RecallAlert]:
    """Build a recall alert for a batch; None when the tier is NONE."""
    if assessment.tier == RiskTier.NONE:
        return None

    label = batch.product or batch.product_id or "product"
    reasons = "; ".join(f.detail for f in assessment.risk_factors)
    if assessment.tier == RiskTier.RECALL:
        severity = EscalationLevel.HIGH
        subject = f"Recall recommended: {label} lot {batch.id}"
        message = (
            f"Batch {batch.id} of {label} meets recall criteria. {reasons}. "
            "Initiate recall procedure and notify affected customers."
        )
    else:
        severity = EscalationLevel.MEDIUM
        subject = f"Recall risk monitoring: {label} lot {batch.id}"
        message = (
            f"Batch {batch.id} of {label} shows elevated recall risk. "
            f"{reasons}. Continue monitoring."
        )

    return RecallAlert(
        batch_id=batch.id,
        product_id=batch.product_id,
        product=batch.product,
        tier=assessment.tier,
        severity=severity,
        recall_recommended=assessment.recall_recommended,
        subject=subject,
        message=message,
        risk_factors=list(assessment.risk_factors),
    )


__all__ = [
    "KeyDataElements",
    "CriticalTrackingEvent",
    "FDA204Report",
    "RecallAlert",
    "ReportDispatcher",
    "build_fda204_report",
    "build_recall_alert",
]
