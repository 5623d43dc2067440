"""Tests for traceability data models and the snapshot indexes."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from foodsafe.traceability.models import (
    BatchTrace,
    Component,
    EntityKind,
    GenealogyEdge,
    HACCPCheck,
    Recall,
    RecallStatus,
    SupplyChainLink,
    TraceabilitySnapshot,
)


class TestEntityRecords:
    """Validation rules on entity records."""

    def test_records_are_frozen(self, snapshot):
        """Entity records cannot be mutated."""
        product = snapshot.products_by_id["PRD-SOUP"]
        with pytest.raises(ValidationError):
            product.name = "Renamed"

    def test_audit_score_range(self):
        """Audit scores outside 0-100 are rejected."""
        with pytest.raises(ValidationError):
            Component(id="C1", name="Salt", batch_lot_number="L1", audit_score=120)

    def test_link_timestamp_prefers_updated_at(self):
        """timestamp is updated_at when set, else created_at."""
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        updated = datetime(2024, 2, 1, tzinfo=timezone.utc)
        link = SupplyChainLink(
            id="L1", source_id="A", target_id="B", link_type="Supplies",
            created_at=created, updated_at=updated,
        )
        assert link.timestamp == updated
        assert link.model_copy(update={"updated_at": None}).timestamp == created

    def test_haccp_has_limits(self):
        """has_limits is True when either limit is recorded."""
        assert HACCPCheck(ccp_id="CCP1", passed=True, critical_limit_max=5).has_limits
        assert not HACCPCheck(ccp_id="CCP1", passed=True).has_limits


class TestBatchTrace:
    """BatchTrace defaults and helpers."""

    def test_empty_batch_allowed(self):
        """An empty batch can be constructed for incomplete records."""
        batch = BatchTrace()
        assert batch.id == ""
        assert batch.haccp_checks == []
        assert batch.suppliers == []

    def test_text_fields_are_stripped(self):
        """Whitespace-only text collapses to empty."""
        batch = BatchTrace(id="  LOT-1 ", location="   ")
        assert batch.id == "LOT-1"
        assert batch.location == ""

    def test_failed_checks(self, risky_batch):
        """failed_checks returns only non-passing CCPs."""
        assert [c.ccp_id for c in risky_batch.failed_checks()] == ["CCP1"]


class TestRecall:
    """Recall closure invariant."""

    def test_closed_at_requires_closed_status(self):
        """closed_at on an open recall is rejected."""
        with pytest.raises(ValidationError):
            Recall(
                id="RC-1", title="t", status=RecallStatus.SIMULATION,
                closed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            )

    def test_closed_recall_accepts_closed_at(self):
        """A closed recall may carry closed_at."""
        recall = Recall(
            id="RC-1", title="t", status="Closed",
            closed_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        assert recall.status == RecallStatus.CLOSED


class TestTraceabilitySnapshot:
    """Snapshot indexes."""

    def test_indexes(self, snapshot):
        """Id, lot and edge indexes are built on construction."""
        assert set(snapshot.products_by_id) == {"PRD-SOUP", "PRD-STEW", "PRD-BROTH"}
        assert snapshot.ids_by_lot["LOT-CHK-7"] == ("CMP-CHICKEN",)
        assert [e.child_id for e in snapshot.children_of["PRD-SOUP"]] == [
            "PRD-BROTH", "CMP-NOODLE",
        ]
        assert {e.parent_product_id for e in snapshot.parents_of["PRD-BROTH"]} == {
            "PRD-SOUP", "PRD-STEW",
        }

    def test_indexes_are_read_only(self, snapshot):
        """Index mappings cannot be modified."""
        with pytest.raises(TypeError):
            snapshot.products_by_id["X"] = None

    def test_kind_of(self, snapshot):
        """Products are nodes with a product record or outgoing edges."""
        assert snapshot.kind_of("PRD-BROTH") == EntityKind.PRODUCT
        assert snapshot.kind_of("CMP-SALT") == EntityKind.COMPONENT

        edge_only = TraceabilitySnapshot(edges=[
            GenealogyEdge(parent_product_id="X", child_id="Y"),
        ])
        assert edge_only.kind_of("X") == EntityKind.PRODUCT
        assert edge_only.kind_of("Y") == EntityKind.COMPONENT
        assert edge_only.contains("Y")
        assert not edge_only.contains("Z")

    def test_lists_are_converted_to_tuples(self):
        """Sequences passed in are stored as tuples."""
        snap = TraceabilitySnapshot(products=[])
        assert snap.products == ()
