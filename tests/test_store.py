"""Tests for the async entity store and fetch helpers."""

import pytest
from pydantic import ValidationError

from foodsafe.exceptions import NotFoundError
from foodsafe.traceability.models import BatchTrace
from foodsafe.traceability.store import (
    InMemoryEntityStore,
    fetch_complaint_trends,
    fetch_snapshot,
)


class TestInMemoryEntityStore:
    """In-memory store behaviour."""

    def test_records_validated_on_load(self):
        """Malformed raw records fail at load time."""
        with pytest.raises(ValidationError):
            InMemoryEntityStore(products=[{"id": "P1", "name": "Soup"}])

    @pytest.mark.asyncio
    async def test_list_edges_filtered_by_parent(self, store):
        """list_genealogy_edges filters by parent product id."""
        edges = await store.list_genealogy_edges("PRD-BROTH")
        assert [e.child_id for e in edges] == ["CMP-CHICKEN", "CMP-SALT"]
        assert len(await store.list_genealogy_edges()) == 6

    @pytest.mark.asyncio
    async def test_get_batch(self, store):
        """Stored batches are returned by lot code."""
        batch = await store.get_batch("LOT-SOUP-02")
        assert batch.failed_checks()[0].ccp_id == "CCP1"

    @pytest.mark.asyncio
    async def test_get_batch_missing(self, store):
        """Unknown batches raise NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            await store.get_batch("LOT-404")
        assert exc_info.value.entity_type == "batch"

    @pytest.mark.asyncio
    async def test_get_recall_missing(self, store):
        """Unknown recalls raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await store.get_recall("RC-404")

    @pytest.mark.asyncio
    async def test_complaint_trend_defaults_to_zero(self, store):
        """Products without a trend report 0 percent."""
        assert await store.complaint_trend_percent("PRD-STEW") == 20.0
        assert await store.complaint_trend_percent("PRD-BROTH") == 0.0

    def test_add_batch_replaces(self, store):
        """add_batch validates and replaces by id."""
        stored = store.add_batch({"id": "LOT-SOUP-01", "product": "Relabelled"})
        assert isinstance(stored, BatchTrace)
        assert store.batches["LOT-SOUP-01"].product == "Relabelled"


class TestFetchHelpers:
    """fetch_snapshot and fetch_complaint_trends."""

    @pytest.mark.asyncio
    async def test_fetch_snapshot(self, store):
        """Snapshot contains every entity with indexes built."""
        snapshot = await fetch_snapshot(store)
        assert len(snapshot.products) == 3
        assert len(snapshot.components) == 5
        assert len(snapshot.links) == 6
        assert snapshot.ids_by_lot["LOT-SOUP-01"] == ("PRD-SOUP",)

    @pytest.mark.asyncio
    async def test_fetch_complaint_trends_dedups(self, store):
        """Duplicate and empty product ids are skipped."""
        trends = await fetch_complaint_trends(
            store, ["PRD-SOUP", None, "PRD-SOUP", "", "PRD-STEW"],
        )
        assert trends == {"PRD-SOUP": 5.0, "PRD-STEW": 20.0}
