# -*- coding: utf-8 -*-
"""
Provenance Tracking - FoodSafe Traceability Core

SHA-256 chain-hashed audit trail for traceability operations (tree builds,
recall assessments, compliance validations, workflow transitions). Every
entry links to the previous one, so a recall investigation can show which
inputs produced which decision and that the log has not been altered.

Example:
    >>> from foodsafe.traceability.provenance import ProvenanceTracker
    >>> tracker = ProvenanceTracker()
    >>> chain_hash = tracker.record("recall_assessment", "LOT-001", "assess", "abc123")
    >>> tracker.verify_chain()
    True

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Return current UTC datetime with microseconds zeroed."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def compute_hash(data: Any) -> str:
    """Compute a deterministic SHA-256 hash of a Pydantic model or JSON data."""
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    raw = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class ProvenanceTracker:
    """Ordered, chain-hashed log of traceability operations.

    Entries are grouped by ``entity_type:entity_id`` for lookup and kept in
    a single global chain for integrity verification.

    Attributes:
        _chain_store: Entries grouped by entity key.
        _global_chain: All entries in record order.
        _last_chain_hash: Most recent chain hash for linking.
        _lock: Thread-safety lock.
    """

    GENESIS_HASH = hashlib.sha256(b"foodsafe-traceability-genesis").hexdigest()

    def __init__(self) -> None:
        self._chain_store: Dict[str, List[Dict[str, Any]]] = {}
        self._global_chain: List[Dict[str, Any]] = []
        self._last_chain_hash: str = self.GENESIS_HASH
        self._lock = threading.Lock()
        logger.info("ProvenanceTracker initialized")

    def record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        data_hash: str,
        user_id: str = "system",
    ) -> str:
        """Record a provenance entry for an entity operation.

        Args:
            entity_type: Type of entity (genealogy_tree, recall_assessment,
                compliance_report, approval_workflow, ...).
            entity_id: Entity identifier (batch lot, product id, ...).
            action: Action performed (build, assess, validate, transition).
            data_hash: SHA-256 hash of the operation output.
            user_id: Actor that performed the operation.

        Returns:
            Chain hash of the new entry.
        """
        timestamp = _utcnow().isoformat()
        store_key = f"{entity_type}:{entity_id}"

        with self._lock:
            previous_hash = self._last_chain_hash
            chain_hash = self._compute_chain_hash(
                previous_hash, data_hash, action, timestamp,
            )
            entry = {
                "entity_type": entity_type,
                "entity_id": entity_id,
                "action": action,
                "data_hash": data_hash,
                "user_id": user_id,
                "timestamp": timestamp,
                "previous_hash": previous_hash,
                "chain_hash": chain_hash,
            }
            self._chain_store.setdefault(store_key, []).append(entry)
            self._global_chain.append(entry)
            self._last_chain_hash = chain_hash

        logger.debug(
            "Recorded provenance: %s/%s action=%s hash=%s",
            entity_type, entity_id, action, chain_hash[:16],
        )
        return chain_hash

    def verify_chain(self) -> bool:
        """Recompute every chain hash and check the links are intact.

        Returns:
            True when every entry links to its predecessor and its stored
            chain hash matches the recomputed value.
        """
        with self._lock:
            chain = list(self._global_chain)

        previous = self.GENESIS_HASH
        for index, entry in enumerate(chain):
            expected = self._compute_chain_hash(
                previous, entry["data_hash"], entry["action"], entry["timestamp"],
            )
            if entry["previous_hash"] != previous or entry["chain_hash"] != expected:
                logger.warning(
                    "Provenance chain broken at entry %d (%s/%s)",
                    index, entry["entity_type"], entry["entity_id"],
                )
                return False
            previous = entry["chain_hash"]
        return True

    def get_chain(self, entity_type: str, entity_id: str) -> List[Dict[str, Any]]:
        """Return the entries recorded for one entity, oldest first."""
        store_key = f"{entity_type}:{entity_id}"
        with self._lock:
            return list(self._chain_store.get(store_key, []))

    def get_global_chain(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Return up to ``limit`` entries across all entities, newest first."""
        with self._lock:
            return list(reversed(self._global_chain[-limit:]))

    def _compute_chain_hash(
        self,
        previous_hash: str,
        data_hash: str,
        action: str,
        timestamp: str,
    ) -> str:
        combined = json.dumps({
            "previous": previous_hash,
            "data": data_hash,
            "action": action,
            "timestamp": timestamp,
        }, sort_keys=True)
        return hashlib.sha256(combined.encode("utf-8")).hexdigest()

    @property
    def entry_count(self) -> int:
        """Return the total number of provenance entries."""
        with self._lock:
            return len(self._global_chain)

    @property
    def last_hash(self) -> str:
        """Return the most recent chain hash."""
        with self._lock:
            return self._last_chain_hash

    def export_json(self) -> str:
        """Export all provenance entries as a JSON string."""
        with self._lock:
            data = list(self._global_chain)
        return json.dumps(data, indent=2, default=str)

    def build_hash(self, data: Any) -> str:
        """Build a SHA-256 hash for a Pydantic model or JSON-serializable data."""
        return compute_hash(data)


__all__ = [
    "ProvenanceTracker",
    "compute_hash",
]
