# -*- coding: utf-8 -*-
"""
Genealogy Tree Builder - FoodSafe Traceability Core

Turns the flat bill-of-materials edge list of a snapshot into a rooted tree
view for one product: which components and sub-products went into it, with
the quantities used.

Algorithm:
    Breadth-first expansion from the root following edges whose
    ``parent_product_id`` equals the current node. Each queue entry carries
    the root-to-node path so that an edge pointing back at an ancestor is
    recognised as a cycle; it is skipped and reported as a
    ``CycleDiagnostic``. An id reached a second time through a different
    branch is shown as a ``truncated`` leaf and not expanded again, so a
    build is O(V + E). Depth-limited builds mark cut-off nodes ``truncated``
    and ``expand_node`` continues from any of them later.

Example:
    >>> from foodsafe.traceability.genealogy import GenealogyTreeBuilder
    >>> builder = GenealogyTreeBuilder()
    >>> tree = builder.build_tree(snapshot, "PRD-001")
    >>> [child.id for child in tree.root.children]
    ['CMP-FLOUR', 'CMP-SALT']

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Any, Deque, List, Optional, Set, Tuple

from foodsafe.exceptions import NotFoundError
from foodsafe.traceability.config import get_cfg_value
from foodsafe.traceability.metrics import observe_duration, record_tree_built
from foodsafe.traceability.models import (
    CycleDiagnostic,
    GenealogyTree,
    TraceabilitySnapshot,
    TreeNode,
)

logger = logging.getLogger(__name__)

_DEFAULT_TREE_DEPTH = 25


class GenealogyTreeBuilder:
    """Builds genealogy trees from a traceability snapshot.

    The builder holds no per-snapshot state; every call takes the snapshot
    explicitly, so one builder can serve concurrent requests.

    Attributes:
        config: Optional TraceabilityConfig or dict.
    """

    def __init__(self, config: Any = None) -> None:
        self.config = config
        logger.info(
            "GenealogyTreeBuilder initialized: default_depth=%d",
            self._get_cfg("default_tree_depth", _DEFAULT_TREE_DEPTH),
        )

    def _get_cfg(self, key: str, default: Any) -> Any:
        return get_cfg_value(self.config, key, default)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_tree(
        self,
        snapshot: TraceabilitySnapshot,
        product_id: str,
        max_depth: Optional[int] = None,
    ) -> GenealogyTree:
        """Build the genealogy tree rooted at ``product_id``.

        Args:
            snapshot: Snapshot holding the edge set.
            product_id: Root product id.
            max_depth: Levels to expand below the root. ``None`` uses the
                configured ``default_tree_depth``.

        Returns:
            GenealogyTree with cycle diagnostics.

        Raises:
            NotFoundError: If ``product_id`` is not in the snapshot.
        """
        start = time.monotonic()

        if not snapshot.contains(product_id):
            raise NotFoundError(
                message=f"Product {product_id} not found in snapshot",
                entity_type="product",
                entity_id=product_id,
            )
        limit = self._resolve_depth(max_depth)

        root = self._make_node(snapshot, product_id, quantity=None, depth=0)
        cycles: List[CycleDiagnostic] = []
        self._expand(
            snapshot,
            start=root,
            ancestors=(),
            visited={product_id},
            limit=limit,
            cycles=cycles,
        )

        tree = GenealogyTree(
            root=root,
            node_count=len(root.iter_nodes()),
            max_depth=limit,
            cycle_detected=bool(cycles),
            cycles=cycles,
        )

        elapsed = time.monotonic() - start
        record_tree_built(tree.node_count, tree.cycle_detected)
        observe_duration("build_tree", elapsed)
        if cycles:
            logger.warning(
                "Genealogy of %s contains %d cycle edge(s); skipped",
                product_id, len(cycles),
            )
        logger.info(
            "Built genealogy tree for %s: %d nodes, depth_limit=%d, "
            "cycles=%d (%.1f ms)",
            product_id, tree.node_count, limit, len(cycles), elapsed * 1000,
        )
        return tree

    def expand_node(
        self,
        snapshot: TraceabilitySnapshot,
        tree: GenealogyTree,
        node_id: str,
        max_depth: Optional[int] = None,
    ) -> GenealogyTree:
        """Continue expansion below a truncated node.

        The input tree is not modified. Expanding a node that is not
        truncated returns an equal tree, so repeated calls are idempotent.

        Args:
            snapshot: The snapshot the tree was built from.
            tree: Previously built tree.
            node_id: Id of the truncated node to expand.
            max_depth: Levels to expand below the node. ``None`` uses the
                configured ``default_tree_depth``.

        Returns:
            New GenealogyTree with the node expanded.

        Raises:
            NotFoundError: If ``node_id`` does not appear in the tree.
        """
        result = tree.model_copy(deep=True)
        located = self._locate(result.root, node_id)
        if located is None:
            raise NotFoundError(
                message=f"Node {node_id} not found in genealogy tree "
                        f"of {tree.root.id}",
                entity_type="tree_node",
                entity_id=node_id,
            )
        node, ancestors = located
        if not node.truncated:
            logger.debug("Node %s already expanded; nothing to do", node_id)
            return result

        limit = node.depth + self._resolve_depth(max_depth)
        visited = {n.id for n in result.root.iter_nodes()}
        cycles = list(result.cycles)
        node.truncated = False
        self._expand(
            snapshot,
            start=node,
            ancestors=ancestors,
            visited=visited,
            limit=limit,
            cycles=cycles,
        )

        result.node_count = len(result.root.iter_nodes())
        result.cycles = cycles
        result.cycle_detected = bool(cycles)
        logger.info(
            "Expanded node %s in tree %s: %d nodes total",
            node_id, result.root.id, result.node_count,
        )
        return result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_depth(self, max_depth: Optional[int]) -> int:
        if max_depth is None:
            max_depth = self._get_cfg("default_tree_depth", _DEFAULT_TREE_DEPTH)
        if max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {max_depth}")
        return max_depth

    def _make_node(
        self,
        snapshot: TraceabilitySnapshot,
        item_id: str,
        quantity: Optional[float],
        depth: int,
    ) -> TreeNode:
        item = snapshot.get_item(item_id)
        return TreeNode(
            id=item_id,
            kind=snapshot.kind_of(item_id),
            name=item.name if item is not None else None,
            batch_lot_number=item.batch_lot_number if item is not None else None,
            quantity=quantity,
            depth=depth,
        )

    def _expand(
        self,
        snapshot: TraceabilitySnapshot,
        start: TreeNode,
        ancestors: Tuple[str, ...],
        visited: Set[str],
        limit: int,
        cycles: List[CycleDiagnostic],
    ) -> None:
        """BFS below ``start``; mutates the nodes, ``visited`` and ``cycles``."""
        queue: Deque[Tuple[TreeNode, Tuple[str, ...]]] = deque()
        queue.append((start, ancestors + (start.id,)))

        while queue:
            node, path = queue.popleft()
            edges = snapshot.children_of.get(node.id, ())
            if not edges:
                continue
            if node.depth >= limit:
                node.truncated = True
                continue

            on_path = set(path)
            for edge in edges:
                child_id = edge.child_id
                if child_id in on_path:
                    cycles.append(CycleDiagnostic(
                        parent_id=node.id,
                        child_id=child_id,
                        path=list(path),
                    ))
                    logger.debug(
                        "Cycle edge %s -> %s skipped (path %s)",
                        node.id, child_id, " > ".join(path),
                    )
                    continue

                child = self._make_node(
                    snapshot, child_id, edge.quantity_used, node.depth + 1,
                )
                node.children.append(child)

                if child_id in visited:
                    # Reached through another branch; shown but not re-expanded.
                    if snapshot.children_of.get(child_id):
                        child.truncated = True
                    continue

                visited.add(child_id)
                queue.append((child, path + (child_id,)))

    def _locate(
        self, root: TreeNode, node_id: str,
    ) -> Optional[Tuple[TreeNode, Tuple[str, ...]]]:
        """Find the first truncated node with ``node_id`` (else first match).

        Returns the node and the ids of its ancestors, root first.
        """
        first: Optional[Tuple[TreeNode, Tuple[str, ...]]] = None
        queue: Deque[Tuple[TreeNode, Tuple[str, ...]]] = deque([(root, ())])
        while queue:
            node, ancestors = queue.popleft()
            if node.id == node_id:
                if node.truncated:
                    return node, ancestors
                if first is None:
                    first = (node, ancestors)
            for child in node.children:
                queue.append((child, ancestors + (node.id,)))
        return first


__all__ = [
    "GenealogyTreeBuilder",
]
