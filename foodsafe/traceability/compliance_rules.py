# -*- coding: utf-8 -*-
"""
Compliance Rule Engine - FoodSafe Traceability Core

Validates a batch's traceability records against the FSMA 204 rule
catalogue (21 CFR Part 1, Subpart S - Requirements for Additional
Traceability Records for Certain Foods).

Each rule is a pure predicate over a ``BatchTrace`` with an impact level:

    Critical - a missing Key Data Element or a failed critical control
               point; any Critical failure fails the batch.
    Major    - a significant gap that lowers the score.
    Minor    - a documentation gap that lowers the score.

Every rule runs on every batch. A predicate that needs a field the batch
does not have raises ``IncompleteBatchError``; the engine turns that into a
failed check naming the field, so a report is always produced.

Scoring:
    score  = round(100 * passed_rules / total_rules, 2)   (0.0 with no rules)
    passed = no failed rule has Critical impact

Example:
    >>> from foodsafe.traceability.compliance_rules import ComplianceRuleEngine
    >>> engine = ComplianceRuleEngine()
    >>> report = engine.validate(batch)
    >>> report.passed, report.score
    (True, 91.67)

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from foodsafe.exceptions import IncompleteBatchError, NotFoundError
from foodsafe.traceability.config import get_cfg_value
from foodsafe.traceability.metrics import observe_duration, record_validation
from foodsafe.traceability.models import (
    BatchTrace,
    ComplianceCheck,
    ComplianceReport,
    ImpactLevel,
)
from foodsafe.traceability.provenance import compute_hash

logger = logging.getLogger(__name__)

RuleOutcome = Tuple[bool, str]


# ---------------------------------------------------------------------------
# Rule definition
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationRule:
    """One FSMA 204 validation rule.

    Attributes:
        id: Stable rule identifier, used as the reason code of a check.
        description: Requirement in plain language.
        category: Rule group (Key Data Elements, Critical Tracking Events,
            Supplier Verification).
        regulation_ref: Citation in 21 CFR Part 1.
        impact: Impact level of a failure.
        predicate: Pure function ``batch -> (passed, detail)``. May raise
            IncompleteBatchError.
    """

    id: str
    description: str
    category: str
    regulation_ref: str
    impact: ImpactLevel
    predicate: Callable[[BatchTrace], RuleOutcome]

    def check(self, batch: BatchTrace) -> ComplianceCheck:
        """Run the predicate and wrap the outcome (IncompleteBatchError propagates)."""
        passed, detail = self.predicate(batch)
        return self.to_check(passed, detail)

    def to_check(self, passed: bool, detail: str) -> ComplianceCheck:
        return ComplianceCheck(
            id=self.id,
            description=self.description,
            category=self.category,
            regulation_ref=self.regulation_ref,
            impact=self.impact,
            passed=passed,
            detail=detail,
        )


def _require(batch: BatchTrace, *fields: str) -> None:
    """Raise IncompleteBatchError naming every empty field in ``fields``."""
    missing = [
        name for name in fields
        if getattr(batch, name) in (None, "", [])
    ]
    if missing:
        raise IncompleteBatchError(
            message=f"Batch {batch.id or '<unidentified>'} is missing "
                    f"{', '.join(missing)}",
            batch_id=batch.id or None,
            missing_fields=missing,
        )


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _has_lot_code(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "id")
    return True, f"Traceability lot code {batch.id}"


def _has_product_description(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "product")
    return True, f"Product: {batch.product}"


def _has_production_date(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "date")
    return True, f"Produced {batch.date.isoformat()}"


def _has_location(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "location")
    return True, f"Lot code source: {batch.location}"


def _has_quantity(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "quantity", "unit")
    return True, f"Quantity {batch.quantity:g} {batch.unit}"


def _has_ccp_records(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "haccp_checks")
    return True, f"{len(batch.haccp_checks)} CCP record(s)"


def _ccps_within_limits(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "haccp_checks")
    failed = batch.failed_checks()
    if failed:
        return False, "Failed CCP(s): " + ", ".join(c.ccp_id for c in failed)
    return True, "All CCPs within critical limits"


def _ccps_have_limits(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "haccp_checks")
    missing = [c.ccp_id for c in batch.haccp_checks if not c.has_limits]
    if missing:
        return False, "No critical limits recorded for " + ", ".join(missing)
    return True, "Critical limits recorded for every CCP"


def _ccps_verified(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "haccp_checks")
    unverified = [
        c.ccp_id for c in batch.haccp_checks
        if not c.verified_by or c.checked_at is None
    ]
    if unverified:
        return False, "Unverified or undated CCP record(s): " + ", ".join(unverified)
    return True, "Every CCP record verified and timestamped"


def _has_previous_source(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "suppliers")
    return True, f"{len(batch.suppliers)} immediate previous source(s)"


def _supplier_audits_documented(batch: BatchTrace) -> RuleOutcome:
    _require(batch, "suppliers")
    undocumented = [
        s.name or s.supplier_id or "<unnamed>"
        for s in batch.suppliers if s.audit_score is None
    ]
    if undocumented:
        return False, "No audit score for " + ", ".join(undocumented)
    return True, "Audit score documented for every supplier"


def _make_supplier_threshold_predicate(
    threshold: float,
) -> Callable[[BatchTrace], RuleOutcome]:
    def _suppliers_meet_threshold(batch: BatchTrace) -> RuleOutcome:
        _require(batch, "suppliers")
        below = [
            f"{s.name or s.supplier_id or '<unnamed>'} ({s.audit_score:g})"
            for s in batch.suppliers
            if s.audit_score is not None and s.audit_score < threshold
        ]
        if below:
            return False, f"Audit score below {threshold:g}: " + ", ".join(below)
        return True, f"Scored suppliers at or above {threshold:g}"
    return _suppliers_meet_threshold


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------

KDE = "Key Data Elements"
CTE = "Critical Tracking Events"
SUPPLIER = "Supplier Verification"


def build_rule_catalogue(
    supplier_audit_threshold: float = 80.0,
) -> Tuple[ValidationRule, ...]:
    """Return the FSMA 204 rule catalogue in evaluation order.

    Args:
        supplier_audit_threshold: Audit score floor used by FSMA-011.
    """
    return (
        ValidationRule(
            "FSMA-001", "Traceability lot code assigned", KDE,
            "21 CFR 1.1320", ImpactLevel.CRITICAL, _has_lot_code,
        ),
        ValidationRule(
            "FSMA-002", "Product description recorded", KDE,
            "21 CFR 1.1345(a)", ImpactLevel.CRITICAL, _has_product_description,
        ),
        ValidationRule(
            "FSMA-003", "Production date recorded", KDE,
            "21 CFR 1.1345(a)", ImpactLevel.CRITICAL, _has_production_date,
        ),
        ValidationRule(
            "FSMA-004", "Location of traceability lot code source recorded",
            KDE, "21 CFR 1.1345(a)", ImpactLevel.CRITICAL, _has_location,
        ),
        ValidationRule(
            "FSMA-005", "Quantity and unit of measure recorded", KDE,
            "21 CFR 1.1345(a)", ImpactLevel.MAJOR, _has_quantity,
        ),
        ValidationRule(
            "FSMA-006", "Critical control point monitoring records present",
            CTE, "21 CFR 1.1350", ImpactLevel.CRITICAL, _has_ccp_records,
        ),
        ValidationRule(
            "FSMA-007", "All critical control points within limits", CTE,
            "21 CFR 1.1350", ImpactLevel.CRITICAL, _ccps_within_limits,
        ),
        ValidationRule(
            "FSMA-008", "Critical limits documented for each CCP", CTE,
            "21 CFR 1.1350", ImpactLevel.MINOR, _ccps_have_limits,
        ),
        ValidationRule(
            "FSMA-009", "Immediate previous source identified", SUPPLIER,
            "21 CFR 1.1345(a)", ImpactLevel.MAJOR, _has_previous_source,
        ),
        ValidationRule(
            "FSMA-010", "Supplier audit scores documented", SUPPLIER,
            "21 CFR 1.1315", ImpactLevel.MINOR, _supplier_audits_documented,
        ),
        ValidationRule(
            "FSMA-011", "Supplier audit scores meet approval threshold",
            SUPPLIER, "21 CFR 1.1315", ImpactLevel.MAJOR,
            _make_supplier_threshold_predicate(supplier_audit_threshold),
        ),
        ValidationRule(
            "FSMA-012", "CCP records verified and timestamped", CTE,
            "21 CFR 1.1455", ImpactLevel.MINOR, _ccps_verified,
        ),
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class ComplianceRuleEngine:
    """Evaluates batches against a validation rule catalogue.

    Attributes:
        rules: Rule catalogue, evaluated in order.
    """

    def __init__(
        self,
        config: Any = None,
        provenance: Any = None,
        rules: Optional[Sequence[ValidationRule]] = None,
    ) -> None:
        """Initialize ComplianceRuleEngine.

        Args:
            config: Optional TraceabilityConfig or dict.
            provenance: Optional ProvenanceTracker instance.
            rules: Rule catalogue; defaults to the FSMA 204 catalogue built
                with the configured supplier audit threshold.
        """
        self._config = config
        self._provenance = provenance
        if rules is None:
            rules = build_rule_catalogue(
                float(get_cfg_value(config, "supplier_audit_threshold", 80.0)),
            )
        self.rules: Tuple[ValidationRule, ...] = tuple(rules)
        logger.info("ComplianceRuleEngine initialized: %d rules", len(self.rules))

    def get_rule(self, rule_id: str) -> ValidationRule:
        """Return a rule by id; NotFoundError if unknown."""
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        raise NotFoundError(
            message=f"Validation rule {rule_id} not found",
            entity_type="validation_rule",
            entity_id=rule_id,
        )

    def validate(self, batch: BatchTrace) -> ComplianceReport:
        """Evaluate every rule against a batch.

        Args:
            batch: Batch to validate; never modified.

        Returns:
            ComplianceReport with passed/failed checks, score and the
            fields the batch was missing.
        """
        start = time.monotonic()
        passed_checks: List[ComplianceCheck] = []
        failed_checks: List[ComplianceCheck] = []
        missing: Dict[str, None] = {}

        for rule in self.rules:
            try:
                check = rule.check(batch)
            except IncompleteBatchError as exc:
                for name in exc.missing_fields:
                    missing.setdefault(name, None)
                check = rule.to_check(
                    False,
                    "Missing required field(s): " + ", ".join(exc.missing_fields),
                )
                logger.debug(
                    "Rule %s on batch %s: incomplete record (%s)",
                    rule.id, batch.id, exc.missing_fields,
                )
            if check.passed:
                passed_checks.append(check)
            else:
                failed_checks.append(check)

        total = len(self.rules)
        score = round(100.0 * len(passed_checks) / total, 2) if total else 0.0
        passed = not any(c.impact == ImpactLevel.CRITICAL for c in failed_checks)

        report = ComplianceReport(
            batch_id=batch.id,
            passed=passed,
            score=score,
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            missing_fields=list(missing),
        )

        if self._provenance is not None:
            self._provenance.record(
                entity_type="compliance_report",
                entity_id=batch.id or "<unidentified>",
                action="validate",
                data_hash=compute_hash(report),
            )

        record_validation(passed, score)
        elapsed = time.monotonic() - start
        observe_duration("validate_compliance", elapsed)
        logger.info(
            "FSMA 204 validation %s: passed=%s, score=%.2f, failed=[%s] "
            "(%.1f ms)",
            batch.id, passed, score,
            ",".join(c.id for c in failed_checks), elapsed * 1000,
        )
        return report


__all__ = [
    "ValidationRule",
    "RuleOutcome",
    "build_rule_catalogue",
    "ComplianceRuleEngine",
]
