"""Tests for recall risk evaluation."""

import pytest

from foodsafe.traceability.models import (
    BatchTrace,
    RiskFactorKind,
    RiskTier,
    SupplierRef,
)
from foodsafe.traceability.provenance import ProvenanceTracker
from foodsafe.traceability.recall_risk import RecallRiskEvaluator, resolve_trend


@pytest.fixture
def evaluator():
    return RecallRiskEvaluator()


class TestTiers:
    """Tier classification."""

    def test_clean_batch(self, evaluator, compliant_batch):
        """No signals give tier NONE."""
        assessment = evaluator.evaluate(compliant_batch)

        assert assessment.tier == RiskTier.NONE
        assert assessment.recall_recommended is False
        assert assessment.risk_factors == []

    def test_ccp_failure_triggers_recall(self, evaluator, compliant_batch):
        """A failed CCP alone recommends recall."""
        checks = [compliant_batch.haccp_checks[0].model_copy(update={"passed": False}),
                  compliant_batch.haccp_checks[1]]
        batch = compliant_batch.model_copy(update={"haccp_checks": checks})

        assessment = evaluator.evaluate(batch)

        assert assessment.tier == RiskTier.RECALL
        assert assessment.recall_recommended is True
        factor = assessment.risk_factors[0]
        assert factor.kind == RiskFactorKind.CCP_FAILURE
        assert factor.count == 1
        assert "CCP1" in factor.detail

    def test_low_supplier_triggers_recall(self, evaluator, compliant_batch):
        """A supplier below 80 recommends recall."""
        batch = compliant_batch.model_copy(update={
            "suppliers": [SupplierRef(name="Spice Traders", audit_score=79.9)],
        })
        assessment = evaluator.evaluate(batch)

        assert assessment.tier == RiskTier.RECALL
        assert assessment.has_factor(RiskFactorKind.SUPPLIER_ISSUE)

    def test_supplier_at_threshold_is_fine(self, evaluator, compliant_batch):
        """An audit score of exactly 80 is not a finding."""
        batch = compliant_batch.model_copy(update={
            "suppliers": [SupplierRef(name="Spice Traders", audit_score=80)],
        })
        assert evaluator.evaluate(batch).tier == RiskTier.NONE

    def test_unscored_supplier_not_counted(self, evaluator, compliant_batch):
        """Suppliers without an audit score are ignored."""
        batch = compliant_batch.model_copy(update={
            "suppliers": [SupplierRef(name="Spice Traders")],
        })
        assert evaluator.evaluate(batch).tier == RiskTier.NONE

    def test_complaint_trend_alone_is_monitor(self, evaluator, compliant_batch):
        """A complaint spike alone puts the batch on watch."""
        assessment = evaluator.evaluate(compliant_batch, {"PRD-SOUP": 22.5})

        assert assessment.tier == RiskTier.MONITOR
        assert assessment.recall_recommended is False
        factor = assessment.risk_factors[0]
        assert factor.kind == RiskFactorKind.COMPLAINT_TREND
        assert factor.value == 22.5

    def test_trend_at_threshold_is_fine(self, evaluator, compliant_batch):
        """A trend of exactly 15 percent is not a finding."""
        assert evaluator.evaluate(compliant_batch, {"PRD-SOUP": 15}).tier == RiskTier.NONE

    def test_missing_haccp_records_is_monitor(self, evaluator):
        """No HACCP records at all flags incomplete records."""
        assessment = evaluator.evaluate(BatchTrace(id="LOT-9"))

        assert assessment.tier == RiskTier.MONITOR
        assert [f.kind for f in assessment.risk_factors] == [
            RiskFactorKind.INCOMPLETE_RECORDS,
        ]

    def test_failed_ccp_and_low_supplier_with_mild_trend(self, evaluator, risky_batch):
        """CCP1 failed, supplier 60 and trend 5 recall without a trend factor."""
        assessment = evaluator.evaluate(risky_batch, {"PRD-SOUP": 5.0})

        assert assessment.tier == RiskTier.RECALL
        assert assessment.has_factor(RiskFactorKind.CCP_FAILURE)
        assert assessment.has_factor(RiskFactorKind.SUPPLIER_ISSUE)
        assert not assessment.has_factor(RiskFactorKind.COMPLAINT_TREND)

    def test_factor_order(self, evaluator, risky_batch):
        """Factors are listed CCP, supplier, then complaint trend."""
        assessment = evaluator.evaluate(risky_batch, lambda pid: 40.0)
        assert [f.kind for f in assessment.risk_factors] == [
            RiskFactorKind.CCP_FAILURE,
            RiskFactorKind.SUPPLIER_ISSUE,
            RiskFactorKind.COMPLAINT_TREND,
        ]


class TestConfigurationAndDeterminism:
    """Thresholds and repeatability."""

    def test_custom_thresholds(self, compliant_batch):
        """Thresholds come from config."""
        evaluator = RecallRiskEvaluator({
            "supplier_audit_threshold": 90.0,
            "complaint_trend_threshold": 5.0,
        })
        assessment = evaluator.evaluate(compliant_batch, {"PRD-SOUP": 6.0})

        assert assessment.has_factor(RiskFactorKind.SUPPLIER_ISSUE)
        assert assessment.has_factor(RiskFactorKind.COMPLAINT_TREND)

    def test_same_input_same_output(self, evaluator, risky_batch):
        """Evaluation is deterministic."""
        first = evaluator.evaluate(risky_batch, {"PRD-SOUP": 30.0})
        second = evaluator.evaluate(risky_batch, {"PRD-SOUP": 30.0})
        assert first == second

    def test_provenance_recorded(self, compliant_batch):
        """Each assessment adds one provenance entry."""
        tracker = ProvenanceTracker()
        RecallRiskEvaluator(provenance=tracker).evaluate(compliant_batch)

        chain = tracker.get_chain("recall_assessment", "LOT-SOUP-01")
        assert len(chain) == 1
        assert chain[0]["action"] == "assess"


class TestEvaluateMany:
    """Risk board sorting."""

    def test_board(self, evaluator, compliant_batch, risky_batch):
        """Batches land in recall, monitor and clear lists."""
        monitored = compliant_batch.model_copy(update={
            "id": "LOT-STEW-01", "product_id": "PRD-STEW",
        })
        board = evaluator.evaluate_many(
            [compliant_batch, risky_batch, monitored], {"PRD-STEW": 20.0},
        )

        assert [a.batch_id for a in board.recall] == ["LOT-SOUP-02"]
        assert [a.batch_id for a in board.monitor] == ["LOT-STEW-01"]
        assert [a.batch_id for a in board.clear] == ["LOT-SOUP-01"]


class TestResolveTrend:
    """Complaint trend lookup."""

    @pytest.mark.parametrize("lookup,product_id,expected", [
        (None, "P1", 0.0),
        ({"P1": 12}, "P1", 12.0),
        ({"P1": 12}, "P2", 0.0),
        (lambda pid: None, "P1", 0.0),
        (lambda pid: 7.5, "P1", 7.5),
        ({"P1": 12}, None, 0.0),
    ])
    def test_lookup_kinds(self, lookup, product_id, expected):
        """Callables and mappings are supported; unknowns are zero."""
        assert resolve_trend(lookup, product_id) == expected
