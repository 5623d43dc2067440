# -*- coding: utf-8 -*-
"""
Entity Store Adapter - FoodSafe Traceability Core

Async repository interface through which the traceability engines obtain
their inputs, plus an in-memory implementation used by tests, tooling and
single-process deployments. Persistence is supplied by the host
application; this module only fixes the contract.

Raw records (dicts from a database driver or HTTP API) are validated into
the Pydantic entity models at this boundary so engines only ever see typed,
frozen records.

The fetch phase is kept apart from the compute phase: ``fetch_snapshot``
gathers all list calls concurrently and returns an immutable
``TraceabilitySnapshot`` that the pure engines operate on.

Example:
    >>> import asyncio
    >>> from foodsafe.traceability.store import InMemoryEntityStore, fetch_snapshot
    >>> store = InMemoryEntityStore(products=[{"id": "P1", "name": "Soup",
    ...                                        "batch_lot_number": "LOT-1"}])
    >>> snapshot = asyncio.run(fetch_snapshot(store))
    >>> snapshot.products_by_id["P1"].name
    'Soup'

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from foodsafe.exceptions import NotFoundError
from foodsafe.traceability.models import (
    BatchTrace,
    Component,
    GenealogyEdge,
    Product,
    Recall,
    SupplyChainLink,
    SupplyChainPartner,
    TraceabilitySnapshot,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _coerce(model: Type[ModelT], record: Any) -> ModelT:
    """Validate a raw record (dict or object) into ``model``."""
    if isinstance(record, model):
        return record
    return model.model_validate(record)


def _coerce_all(model: Type[ModelT], records: Optional[Iterable[Any]]) -> List[ModelT]:
    return [_coerce(model, r) for r in (records or [])]


# ---------------------------------------------------------------------------
# Repository interface
# ---------------------------------------------------------------------------


class EntityStore(ABC):
    """Async repository contract consumed by the traceability core."""

    @abstractmethod
    async def list_products(self) -> List[Product]:
        """Return all products."""

    @abstractmethod
    async def list_components(self) -> List[Component]:
        """Return all components."""

    @abstractmethod
    async def list_genealogy_edges(
        self, product_id: Optional[str] = None,
    ) -> List[GenealogyEdge]:
        """Return genealogy edges, all of them when ``product_id`` is None.

        With a product id only the edges whose parent is that product are
        returned.
        """

    @abstractmethod
    async def list_supply_chain_partners(self) -> List[SupplyChainPartner]:
        """Return all supply chain partners."""

    @abstractmethod
    async def list_supply_chain_links(self) -> List[SupplyChainLink]:
        """Return all supply chain links."""

    @abstractmethod
    async def get_batch(self, batch_id: str) -> BatchTrace:
        """Return the BatchTrace for a lot code; NotFoundError if absent."""

    @abstractmethod
    async def get_recall(self, recall_id: str) -> Recall:
        """Return a recall; NotFoundError if absent."""

    @abstractmethod
    async def complaint_trend_percent(self, product_id: str) -> float:
        """Return the complaint increase (percent) for a product."""


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


class InMemoryEntityStore(EntityStore):
    """Entity store backed by in-process lists.

    Every record is validated with ``model_validate`` on the way in, so
    malformed rows fail loudly at load time rather than inside an engine.

    Attributes:
        products: Validated products.
        components: Validated components.
        edges: Validated genealogy edges.
        partners: Validated supply chain partners.
        links: Validated supply chain links.
        batches: BatchTrace records keyed by lot code.
        recalls: Recalls keyed by id.
        complaint_trends: Complaint trend percent keyed by product id.
    """

    def __init__(
        self,
        products: Optional[Iterable[Any]] = None,
        components: Optional[Iterable[Any]] = None,
        edges: Optional[Iterable[Any]] = None,
        partners: Optional[Iterable[Any]] = None,
        links: Optional[Iterable[Any]] = None,
        batches: Optional[Iterable[Any]] = None,
        recalls: Optional[Iterable[Any]] = None,
        complaint_trends: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.products: List[Product] = _coerce_all(Product, products)
        self.components: List[Component] = _coerce_all(Component, components)
        self.edges: List[GenealogyEdge] = _coerce_all(GenealogyEdge, edges)
        self.partners: List[SupplyChainPartner] = _coerce_all(
            SupplyChainPartner, partners,
        )
        self.links: List[SupplyChainLink] = _coerce_all(SupplyChainLink, links)
        self.batches: Dict[str, BatchTrace] = {
            b.id: b for b in _coerce_all(BatchTrace, batches)
        }
        self.recalls: Dict[str, Recall] = {
            r.id: r for r in _coerce_all(Recall, recalls)
        }
        self.complaint_trends: Dict[str, float] = dict(complaint_trends or {})
        logger.info(
            "InMemoryEntityStore loaded: %d products, %d components, "
            "%d edges, %d partners, %d links, %d batches, %d recalls",
            len(self.products), len(self.components), len(self.edges),
            len(self.partners), len(self.links), len(self.batches),
            len(self.recalls),
        )

    async def list_products(self) -> List[Product]:
        return list(self.products)

    async def list_components(self) -> List[Component]:
        return list(self.components)

    async def list_genealogy_edges(
        self, product_id: Optional[str] = None,
    ) -> List[GenealogyEdge]:
        if product_id is None:
            return list(self.edges)
        return [e for e in self.edges if e.parent_product_id == product_id]

    async def list_supply_chain_partners(self) -> List[SupplyChainPartner]:
        return list(self.partners)

    async def list_supply_chain_links(self) -> List[SupplyChainLink]:
        return list(self.links)

    async def get_batch(self, batch_id: str) -> BatchTrace:
        batch = self.batches.get(batch_id)
        if batch is None:
            raise NotFoundError(
                message=f"Batch {batch_id} not found",
                entity_type="batch",
                entity_id=batch_id,
            )
        return batch

    async def get_recall(self, recall_id: str) -> Recall:
        recall = self.recalls.get(recall_id)
        if recall is None:
            raise NotFoundError(
                message=f"Recall {recall_id} not found",
                entity_type="recall",
                entity_id=recall_id,
            )
        return recall

    async def complaint_trend_percent(self, product_id: str) -> float:
        return float(self.complaint_trends.get(product_id, 0.0))

    # ------------------------------------------------------------------
    # Mutation helpers
    # ------------------------------------------------------------------

    def add_batch(self, batch: Any) -> BatchTrace:
        """Validate and store a BatchTrace, replacing any with the same id."""
        record = _coerce(BatchTrace, batch)
        self.batches[record.id] = record
        return record

    def set_complaint_trend(self, product_id: str, percent: float) -> None:
        """Set the complaint trend percent for a product."""
        self.complaint_trends[product_id] = float(percent)


# ---------------------------------------------------------------------------
# Fetch helpers
# ---------------------------------------------------------------------------


async def fetch_snapshot(store: EntityStore) -> TraceabilitySnapshot:
    """Fetch every traceability entity concurrently into a snapshot.

    Args:
        store: Entity store to read from.

    Returns:
        Immutable TraceabilitySnapshot with indexes built.
    """
    products, components, edges, partners, links = await asyncio.gather(
        store.list_products(),
        store.list_components(),
        store.list_genealogy_edges(),
        store.list_supply_chain_partners(),
        store.list_supply_chain_links(),
    )
    snapshot = TraceabilitySnapshot(
        products=tuple(products),
        components=tuple(components),
        edges=tuple(edges),
        partners=tuple(partners),
        links=tuple(links),
    )
    logger.debug(
        "Fetched snapshot: %d products, %d components, %d edges, "
        "%d partners, %d links",
        len(snapshot.products), len(snapshot.components), len(snapshot.edges),
        len(snapshot.partners), len(snapshot.links),
    )
    return snapshot


async def fetch_complaint_trends(
    store: EntityStore, product_ids: Sequence[Optional[str]],
) -> Dict[str, float]:
    """Fetch complaint trends for the distinct non-empty product ids."""
    unique_ids = list(dict.fromkeys(pid for pid in product_ids if pid))
    values = await asyncio.gather(
        *(store.complaint_trend_percent(pid) for pid in unique_ids)
    )
    return dict(zip(unique_ids, values))


__all__ = [
    "EntityStore",
    "InMemoryEntityStore",
    "fetch_snapshot",
    "fetch_complaint_trends",
]
