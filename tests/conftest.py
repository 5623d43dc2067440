# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

from datetime import date, datetime, timezone

import pytest

from foodsafe.traceability.config import TraceabilityConfig, reset_config
from foodsafe.traceability.models import (
    BatchTrace,
    Component,
    GenealogyEdge,
    HACCPCheck,
    Product,
    SupplierRef,
    SupplyChainLink,
    SupplyChainPartner,
    TraceabilitySnapshot,
)
from foodsafe.traceability.store import InMemoryEntityStore


CHECKED_AT = datetime(2024, 3, 14, 9, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Raw records
# ---------------------------------------------------------------------------
#
# Genealogy:
#   PRD-SOUP  -> PRD-BROTH (50), CMP-NOODLE (20)
#   PRD-STEW  -> PRD-BROTH (40), CMP-CARROT (10)
#   PRD-BROTH -> CMP-CHICKEN (30), CMP-SALT (1)
#   CMP-PEPPER has no edges.
#
# Supply chain:
#   SUP-POULTRY -> MFG-PLANT2 (L1), SUP-NOODLE -> MFG-PLANT2 (L2)
#   MFG-PLANT2 -> DIST-EAST (L5 older, L3 newer), DIST-EAST -> RET-MART (L4)
#   SUP-GHOST -> MFG-PLANT2 (L6, unknown source partner)

PRODUCT_RECORDS = [
    {"id": "PRD-SOUP", "name": "Chicken noodle soup", "batch_lot_number": "LOT-SOUP-01",
     "manufacturing_date": "2024-03-14"},
    {"id": "PRD-STEW", "name": "Chicken stew", "batch_lot_number": "LOT-STEW-01"},
    {"id": "PRD-BROTH", "name": "Chicken broth", "batch_lot_number": "LOT-BROTH-01"},
]

COMPONENT_RECORDS = [
    {"id": "CMP-CHICKEN", "name": "Chicken thigh", "batch_lot_number": "LOT-CHK-7",
     "supplier_id": "SUP-POULTRY", "audit_score": 92},
    {"id": "CMP-NOODLE", "name": "Egg noodles", "batch_lot_number": "LOT-NDL-3",
     "supplier_id": "SUP-NOODLE", "audit_score": 85},
    {"id": "CMP-SALT", "name": "Sea salt", "batch_lot_number": "LOT-SALT-1"},
    {"id": "CMP-CARROT", "name": "Carrot dice", "batch_lot_number": "LOT-CAR-2"},
    {"id": "CMP-PEPPER", "name": "Black pepper", "batch_lot_number": "LOT-PEP-9"},
]

EDGE_RECORDS = [
    {"id": "E1", "parent_product_id": "PRD-SOUP", "child_id": "PRD-BROTH", "quantity_used": 50},
    {"id": "E2", "parent_product_id": "PRD-SOUP", "child_id": "CMP-NOODLE", "quantity_used": 20},
    {"id": "E3", "parent_product_id": "PRD-BROTH", "child_id": "CMP-CHICKEN", "quantity_used": 30},
    {"id": "E4", "parent_product_id": "PRD-BROTH", "child_id": "CMP-SALT", "quantity_used": 1},
    {"id": "E5", "parent_product_id": "PRD-STEW", "child_id": "PRD-BROTH", "quantity_used": 40},
    {"id": "E6", "parent_product_id": "PRD-STEW", "child_id": "CMP-CARROT", "quantity_used": 10},
]

PARTNER_RECORDS = [
    {"id": "SUP-POULTRY", "name": "Valley Poultry", "partner_type": "Supplier"},
    {"id": "SUP-NOODLE", "name": "Golden Noodle Co", "partner_type": "Supplier"},
    {"id": "MFG-PLANT2", "name": "Plant 2", "partner_type": "Manufacturer"},
    {"id": "DIST-EAST", "name": "East Distribution", "partner_type": "Distributor"},
    {"id": "RET-MART", "name": "FreshMart", "partner_type": "Retailer"},
]

LINK_RECORDS = [
    {"id": "L1", "source_id": "SUP-POULTRY", "target_id": "MFG-PLANT2",
     "component_id": "CMP-CHICKEN", "link_type": "Supplies",
     "created_at": "2024-01-01T00:00:00Z"},
    {"id": "L2", "source_id": "SUP-NOODLE", "target_id": "MFG-PLANT2",
     "component_id": "CMP-NOODLE", "link_type": "Supplies",
     "created_at": "2024-01-01T00:00:00Z"},
    {"id": "L5", "source_id": "MFG-PLANT2", "target_id": "DIST-EAST",
     "product_id": "PRD-SOUP", "link_type": "Distributes",
     "created_at": "2024-02-01T00:00:00Z"},
    {"id": "L3", "source_id": "MFG-PLANT2", "target_id": "DIST-EAST",
     "product_id": "PRD-SOUP", "link_type": "Manufactures",
     "created_at": "2024-01-01T00:00:00Z", "updated_at": "2024-03-01T00:00:00Z"},
    {"id": "L4", "source_id": "DIST-EAST", "target_id": "RET-MART",
     "product_id": "PRD-SOUP", "link_type": "Distributes",
     "created_at": "2024-01-01T00:00:00Z"},
    {"id": "L6", "source_id": "SUP-GHOST", "target_id": "MFG-PLANT2",
     "link_type": "Supplies", "created_at": "2024-01-01T00:00:00Z"},
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_config_singleton():
    """Keep the configuration singleton isolated between tests."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """Default traceability configuration."""
    return TraceabilityConfig()


@pytest.fixture
def snapshot():
    """Snapshot built from the raw records above."""
    return TraceabilitySnapshot(
        products=tuple(Product.model_validate(r) for r in PRODUCT_RECORDS),
        components=tuple(Component.model_validate(r) for r in COMPONENT_RECORDS),
        edges=tuple(GenealogyEdge.model_validate(r) for r in EDGE_RECORDS),
        partners=tuple(SupplyChainPartner.model_validate(r) for r in PARTNER_RECORDS),
        links=tuple(SupplyChainLink.model_validate(r) for r in LINK_RECORDS),
    )


@pytest.fixture
def compliant_batch():
    """Batch that passes every FSMA 204 rule and has no recall risk."""
    return BatchTrace(
        id="LOT-SOUP-01",
        product="Chicken noodle soup, 400g",
        product_id="PRD-SOUP",
        date=date(2024, 3, 14),
        location="Plant 2, Line A",
        quantity=1200,
        unit="cases",
        haccp_checks=[
            HACCPCheck(
                ccp_id="CCP1", name="Cooking temperature", passed=True,
                critical_limit_min=74.0, actual_value=78.5, unit="C",
                hazard_type="biological", checked_at=CHECKED_AT,
                verified_by="QA Lead",
            ),
            HACCPCheck(
                ccp_id="CCP2", name="Metal detection", passed=True,
                critical_limit_max=2.0, actual_value=0.0, unit="mm",
                hazard_type="physical", checked_at=CHECKED_AT,
                verified_by="QA Lead",
            ),
        ],
        suppliers=[
            SupplierRef(supplier_id="SUP-POULTRY", name="Valley Poultry", audit_score=92),
            SupplierRef(supplier_id="SUP-NOODLE", name="Golden Noodle Co", audit_score=85),
        ],
    )


@pytest.fixture
def risky_batch(compliant_batch):
    """Batch with a failed CCP1 and a supplier audited at 60."""
    checks = list(compliant_batch.haccp_checks)
    checks[0] = checks[0].model_copy(update={"passed": False, "actual_value": 65.0})
    return compliant_batch.model_copy(update={
        "id": "LOT-SOUP-02",
        "haccp_checks": checks,
        "suppliers": [
            SupplierRef(supplier_id="SUP-POULTRY", name="Valley Poultry", audit_score=60),
        ],
    })


@pytest.fixture
def store(compliant_batch, risky_batch):
    """In-memory entity store holding the raw records, two batches and a recall."""
    return InMemoryEntityStore(
        products=PRODUCT_RECORDS,
        components=COMPONENT_RECORDS,
        edges=EDGE_RECORDS,
        partners=PARTNER_RECORDS,
        links=LINK_RECORDS,
        batches=[compliant_batch, risky_batch],
        recalls=[{
            "id": "RC-001",
            "title": "Chicken lot LOT-CHK-7 recall",
            "recall_type": "Mock",
            "batch_ids": ["LOT-CHK-7", "LOT-UNKNOWN"],
            "recall_reason": "Salmonella positive on supplier CoA",
        }],
        complaint_trends={"PRD-SOUP": 5.0, "PRD-STEW": 20.0},
    )
