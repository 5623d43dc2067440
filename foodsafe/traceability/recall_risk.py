# -*- coding: utf-8 -*-
"""
Recall Risk Evaluator - FoodSafe Traceability Core

Deterministic recall recommendation for a production batch from three
signals, checked in a fixed order:

    1. CCP_FAILURE      - any HACCP critical control point check failed.
    2. SUPPLIER_ISSUE   - any immediate supplier audited below the
                          supplier audit threshold (default 80). Suppliers
                          without an audit score are not counted.
    3. COMPLAINT_TREND  - the product's complaint increase exceeds the
                          complaint trend threshold (default 15 percent).

A batch without any HACCP records additionally gets INCOMPLETE_RECORDS.

Tiering:
    - CCP_FAILURE or SUPPLIER_ISSUE       -> RECALL (recall recommended)
    - otherwise any factor present        -> MONITOR
    - otherwise                           -> NONE

The same batch and trend value always produce the same assessment; no
timestamps or generated ids are embedded in the result.

Example:
    >>> from foodsafe.traceability.recall_risk import RecallRiskEvaluator
    >>> evaluator = RecallRiskEvaluator()
    >>> assessment = evaluator.evaluate(batch, complaint_trend={"PRD-1": 20.0})
    >>> assessment.tier
    <RiskTier.MONITOR: 'monitor'>

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from foodsafe.traceability.config import get_cfg_value
from foodsafe.traceability.metrics import observe_duration, record_assessment
from foodsafe.traceability.models import (
    BatchTrace,
    RecallAssessment,
    RiskBoard,
    RiskFactor,
    RiskFactorKind,
    RiskTier,
)
from foodsafe.traceability.provenance import compute_hash

logger = logging.getLogger(__name__)

ComplaintTrendLookup = Union[
    Callable[[str], Optional[float]],
    Mapping[str, float],
    None,
]

# Factors that on their own justify a recall recommendation.
HARD_TRIGGERS = frozenset({
    RiskFactorKind.CCP_FAILURE,
    RiskFactorKind.SUPPLIER_ISSUE,
})


def resolve_trend(lookup: ComplaintTrendLookup, product_id: Optional[str]) -> float:
    """Return the complaint trend for a product; unknown counts as 0."""
    if lookup is None or not product_id:
        return 0.0
    if callable(lookup):
        value = lookup(product_id)
    else:
        value = lookup.get(product_id)
    return float(value) if value is not None else 0.0


class RecallRiskEvaluator:
    """Scores batches into NONE, MONITOR and RECALL tiers.

    Attributes:
        supplier_audit_threshold: Audit score floor for suppliers.
        complaint_trend_threshold: Complaint increase ceiling (percent).
    """

    def __init__(self, config: Any = None, provenance: Any = None) -> None:
        """Initialize RecallRiskEvaluator.

        Args:
            config: Optional TraceabilityConfig or dict.
            provenance: Optional ProvenanceTracker instance.
        """
        self._config = config
        self._provenance = provenance
        self.supplier_audit_threshold = float(
            self._get_cfg("supplier_audit_threshold", 80.0)
        )
        self.complaint_trend_threshold = float(
            self._get_cfg("complaint_trend_threshold", 15.0)
        )
        logger.info(
            "RecallRiskEvaluator initialized: supplier_threshold=%.1f, "
            "complaint_threshold=%.1f",
            self.supplier_audit_threshold, self.complaint_trend_threshold,
        )

    def _get_cfg(self, key: str, default: Any) -> Any:
        return get_cfg_value(self._config, key, default)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def evaluate(
        self,
        batch: BatchTrace,
        complaint_trend: ComplaintTrendLookup = None,
    ) -> RecallAssessment:
        """Evaluate whether a batch should be recalled.

        Args:
            batch: Batch snapshot to evaluate; never modified.
            complaint_trend: Callable ``product_id -> percent`` or a mapping
                of product id to percent. Missing values count as 0.

        Returns:
            RecallAssessment with tier and reason-coded risk factors.
        """
        start = time.monotonic()
        factors: List[RiskFactor] = []

        failed = batch.failed_checks()
        if failed:
            factors.append(RiskFactor(
                kind=RiskFactorKind.CCP_FAILURE,
                detail=f"{len(failed)} critical control point failure(s): "
                       + ", ".join(c.ccp_id for c in failed),
                count=len(failed),
            ))

        low_suppliers = [
            s for s in batch.suppliers
            if s.audit_score is not None
            and s.audit_score < self.supplier_audit_threshold
        ]
        if low_suppliers:
            factors.append(RiskFactor(
                kind=RiskFactorKind.SUPPLIER_ISSUE,
                detail=f"{len(low_suppliers)} supplier(s) with audit score "
                       f"below {self.supplier_audit_threshold:g}",
                count=len(low_suppliers),
            ))

        trend = resolve_trend(complaint_trend, batch.product_id)
        if trend > self.complaint_trend_threshold:
            factors.append(RiskFactor(
                kind=RiskFactorKind.COMPLAINT_TREND,
                detail=f"Customer complaints increased by {trend:g}%",
                value=trend,
            ))

        if not batch.haccp_checks:
            factors.append(RiskFactor(
                kind=RiskFactorKind.INCOMPLETE_RECORDS,
                detail="No HACCP monitoring records for batch",
            ))

        tier = self._classify(factors)
        assessment = RecallAssessment(
            batch_id=batch.id,
            product_id=batch.product_id,
            tier=tier,
            recall_recommended=tier == RiskTier.RECALL,
            risk_factors=factors,
        )

        if self._provenance is not None:
            self._provenance.record(
                entity_type="recall_assessment",
                entity_id=batch.id or "<unidentified>",
                action="assess",
                data_hash=compute_hash(assessment),
            )

        record_assessment(tier.value)
        elapsed = time.monotonic() - start
        observe_duration("evaluate_recall", elapsed)
        logger.info(
            "Recall assessment %s: tier=%s, factors=[%s] (%.1f ms)",
            batch.id, tier.value,
            ",".join(f.kind.value for f in factors), elapsed * 1000,
        )
        return assessment

    def evaluate_many(
        self,
        batches: Iterable[BatchTrace],
        complaint_trend: ComplaintTrendLookup = None,
    ) -> RiskBoard:
        """Evaluate batches and sort them into recall, monitor and clear."""
        board = RiskBoard()
        for batch in batches:
            assessment = self.evaluate(batch, complaint_trend)
            if assessment.tier == RiskTier.RECALL:
                board.recall.append(assessment)
            elif assessment.tier == RiskTier.MONITOR:
                board.monitor.append(assessment)
            else:
                board.clear.append(assessment)
        logger.info(
            "Risk board: %d recall, %d monitor, %d clear",
            len(board.recall), len(board.monitor), len(board.clear),
        )
        return board

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _classify(factors: List[RiskFactor]) -> RiskTier:
        kinds = {f.kind for f in factors}
        if kinds & HARD_TRIGGERS:
            return RiskTier.RECALL
        if kinds:
            return RiskTier.MONITOR
        return RiskTier.NONE


__all__ = [
    "ComplaintTrendLookup",
    "HARD_TRIGGERS",
    "RecallRiskEvaluator",
    "resolve_trend",
]
