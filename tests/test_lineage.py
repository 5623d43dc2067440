"""Tests for lineage traversal over genealogy and supply chain graphs."""

import logging

import pytest

from foodsafe.exceptions import NotFoundError
from foodsafe.traceability.lineage import LineageTraversalEngine
from foodsafe.traceability.models import (
    Component,
    GenealogyEdge,
    Product,
    TraceabilitySnapshot,
)
from foodsafe.traceability.supply_chain import SupplyChainGraphBuilder


@pytest.fixture
def engine():
    return LineageTraversalEngine()


class TestComponentsOf:
    """Downstream traversal from a product lot."""

    def test_includes_sub_products_in_bfs_order(self, engine, snapshot):
        """Sub-products and their components are returned level by level."""
        items = engine.components_of(snapshot, "LOT-SOUP-01")

        assert [i.id for i in items] == [
            "PRD-BROTH", "CMP-NOODLE", "CMP-CHICKEN", "CMP-SALT",
        ]
        assert isinstance(items[0], Product)
        assert isinstance(items[1], Component)

    def test_leaf_lot_has_no_components(self, engine, snapshot):
        """A component lot consumes nothing."""
        assert engine.components_of(snapshot, "LOT-PEP-9") == []

    def test_unknown_lot(self, engine, snapshot):
        """Unknown lots raise NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            engine.components_of(snapshot, "LOT-404")
        assert exc_info.value.entity_type == "batch_lot"

    def test_unknown_items_omitted(self, engine):
        """Edges to ids without an entity record are skipped."""
        snap = TraceabilitySnapshot(
            products=[Product(id="P", name="P", batch_lot_number="LP")],
            edges=[GenealogyEdge(parent_product_id="P", child_id="GHOST")],
        )
        assert engine.components_of(snap, "LP") == []


class TestProductsAffectedBy:
    """Upstream traversal from a component lot."""

    def test_transitive_products(self, engine, snapshot):
        """Chicken reaches broth directly, then soup and stew."""
        products = engine.products_affected_by(snapshot, "LOT-CHK-7")
        assert [p.id for p in products] == ["PRD-BROTH", "PRD-SOUP", "PRD-STEW"]

    def test_top_level_product_lot(self, engine, snapshot):
        """Nothing consumes a finished product lot."""
        assert engine.products_affected_by(snapshot, "LOT-SOUP-01") == []

    def test_cycle_terminates(self, engine):
        """Cyclic genealogies are traversed once per node."""
        snap = TraceabilitySnapshot(
            products=[
                Product(id="A", name="A", batch_lot_number="LA"),
                Product(id="B", name="B", batch_lot_number="LB"),
            ],
            edges=[
                GenealogyEdge(parent_product_id="A", child_id="B"),
                GenealogyEdge(parent_product_id="B", child_id="A"),
            ],
        )
        assert [p.id for p in engine.products_affected_by(snap, "LA")] == ["B"]

    def test_parent_without_record_is_reported(self, engine, caplog):
        """A parent id with no product record is logged and returned as unresolved."""
        snap = TraceabilitySnapshot(
            components=[Component(id="C1", name="Flour", batch_lot_number="LC")],
            edges=[GenealogyEdge(parent_product_id="P-NO-RECORD", child_id="C1")],
        )

        with caplog.at_level(logging.WARNING, logger="foodsafe.traceability.lineage"):
            products, unresolved = engine.trace_affected_products(snap, "LC")

        assert products == []
        assert unresolved == ["P-NO-RECORD"]
        assert "P-NO-RECORD" in caplog.text
        assert engine.products_affected_by(snap, "LC") == []


class TestThreeNodeCycle:
    """Both traversals terminate on A -> B -> C -> A."""

    @pytest.fixture
    def cyclic_snapshot(self):
        return TraceabilitySnapshot(
            products=[
                Product(id="A", name="A", batch_lot_number="LA"),
                Product(id="B", name="B", batch_lot_number="LB"),
                Product(id="C", name="C", batch_lot_number="LC"),
            ],
            edges=[
                GenealogyEdge(parent_product_id="A", child_id="B"),
                GenealogyEdge(parent_product_id="B", child_id="C"),
                GenealogyEdge(parent_product_id="C", child_id="A"),
            ],
        )

    def test_downstream_order(self, engine, cyclic_snapshot):
        """Downstream from A visits B then C, each once."""
        items = engine.components_of(cyclic_snapshot, "LA")
        assert [i.id for i in items] == ["B", "C"]

    def test_upstream_order(self, engine, cyclic_snapshot):
        """Upstream from A visits C then B, each once."""
        products = engine.products_affected_by(cyclic_snapshot, "LA")
        assert [p.id for p in products] == ["C", "B"]


class TestUpstreamPartners:
    """Supply chain upstream walk."""

    def test_walks_incoming_edges(self, engine, snapshot):
        """Retailer is fed by distributor, plant and both suppliers."""
        graph = SupplyChainGraphBuilder().build(snapshot)

        upstream = engine.upstream_partners(graph, "RET-MART")

        assert [n.id for n in upstream] == [
            "DIST-EAST", "MFG-PLANT2", "SUP-POULTRY", "SUP-NOODLE",
        ]

    def test_supplier_has_no_upstream(self, engine, snapshot):
        """Suppliers are sources."""
        graph = SupplyChainGraphBuilder().build(snapshot)
        assert engine.upstream_partners(graph, "SUP-POULTRY") == []

    def test_unknown_partner(self, engine, snapshot):
        """Unknown partners raise NotFoundError."""
        graph = SupplyChainGraphBuilder().build(snapshot)
        with pytest.raises(NotFoundError):
            engine.upstream_partners(graph, "SUP-GHOST")
