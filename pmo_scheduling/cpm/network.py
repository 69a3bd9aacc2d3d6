"""
Dependency graph for CPM calculations.

Normalizes a snapshot of schedulable items and their declared predecessor
ids into predecessor/successor adjacency with positional indices, so that
traversals can keep their state in flat per-item arrays.
"""

import logging
from collections import defaultdict, deque
from typing import Iterable, Iterator, Optional

from .models import SchedulableItem

logger = logging.getLogger(__name__)


class DependencyGraph:
    """
    Precedence graph over schedulable items.

    An edge ``u -> v`` means ``v`` depends on ``u`` finishing. Edges come
    from ``SchedulableItem.dependencies``; ids that do not resolve to an item
    in the snapshot are dropped and counted in ``unknown_references``.
    Duplicate item ids keep the first occurrence.
    """

    def __init__(self, items: Iterable[SchedulableItem]):
        self.items: dict[str, SchedulableItem] = {}
        self.ids: list[str] = []
        self.index: dict[str, int] = {}
        self.duplicate_ids: list[str] = []
        self.unknown_references = 0

        for item in items:
            if item.id in self.items:
                self.duplicate_ids.append(item.id)
                continue
            self.index[item.id] = len(self.ids)
            self.ids.append(item.id)
            self.items[item.id] = item

        if self.duplicate_ids:
            logger.warning(f"Ignoring {len(self.duplicate_ids)} duplicate item ids: "
                           f"{self.duplicate_ids[:5]}")

        self._succ: list[list[int]] = [[] for _ in self.ids]
        self._pred: list[list[int]] = [[] for _ in self.ids]
        self._edge_count = 0

        for v, item_id in enumerate(self.ids):
            seen = set()
            for dep_id in self.items[item_id].dependencies:
                u = self.index.get(dep_id)
                if u is None:
                    self.unknown_references += 1
                    continue
                if u in seen:
                    continue
                seen.add(u)
                self._pred[v].append(u)
                self._succ[u].append(v)
                self._edge_count += 1

        if self.unknown_references:
            logger.debug(f"Dropped {self.unknown_references} dependency references "
                         f"to unknown items")

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_item(self, item_id: str) -> Optional[SchedulableItem]:
        """Get an item by ID."""
        return self.items.get(item_id)

    def successors(self, item_id: str) -> list[str]:
        """Ids of items that depend on ``item_id``."""
        i = self.index.get(item_id)
        if i is None:
            return []
        return [self.ids[j] for j in self._succ[i]]

    def predecessors(self, item_id: str) -> list[str]:
        """Ids of items that ``item_id`` depends on."""
        i = self.index.get(item_id)
        if i is None:
            return []
        return [self.ids[j] for j in self._pred[i]]

    def successor_indices(self, i: int) -> list[int]:
        return self._succ[i]

    def predecessor_indices(self, i: int) -> list[int]:
        return self._pred[i]

    def duration(self, item_id: str) -> int:
        """Duration in days, floored at 1."""
        return self.items[item_id].duration_days()

    def edges(self) -> Iterator[tuple[str, str]]:
        """Yield (from_id, to_id) pairs."""
        for u, targets in enumerate(self._succ):
            for v in targets:
                yield self.ids[u], self.ids[v]

    @property
    def edge_count(self) -> int:
        return self._edge_count

    def get_start_items(self) -> list[str]:
        """Get item IDs with no predecessors."""
        return [self.ids[i] for i, preds in enumerate(self._pred) if not preds]

    def get_end_items(self) -> list[str]:
        """Get item IDs with no successors."""
        return [self.ids[i] for i, succs in enumerate(self._succ) if not succs]

    # ------------------------------------------------------------------
    # Transitive closures
    # ------------------------------------------------------------------

    def _closure(self, item_id: str, adjacency: list[list[int]],
                 include_self: bool) -> set[str]:
        start = self.index.get(item_id)
        if start is None:
            return set()

        visited = [False] * len(self.ids)
        visited[start] = True
        queue = deque([start])
        result = set()

        while queue:
            current = queue.popleft()
            for nxt in adjacency[current]:
                result.add(self.ids[nxt])
                if not visited[nxt]:
                    visited[nxt] = True
                    queue.append(nxt)

        if include_self:
            result.add(item_id)
        else:
            result.discard(item_id)
        return result

    def get_all_predecessors(self, item_id: str, include_self: bool = False) -> set[str]:
        """Get all predecessor item IDs (transitive closure)."""
        return self._closure(item_id, self._pred, include_self)

    def get_all_successors(self, item_id: str, include_self: bool = False) -> set[str]:
        """Get all successor item IDs (transitive closure)."""
        return self._closure(item_id, self._succ, include_self)

    def get_statistics(self) -> dict:
        """Get graph statistics."""
        statuses = defaultdict(int)
        for item in self.items.values():
            statuses[item.status or 'unknown'] += 1

        return {
            'total_items': len(self.ids),
            'total_dependencies': self._edge_count,
            'start_items': len(self.get_start_items()),
            'end_items': len(self.get_end_items()),
            'unknown_references': self.unknown_references,
            'duplicate_ids': len(self.duplicate_ids),
            'statuses': dict(statuses),
        }

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self.index

    def __iter__(self) -> Iterator[SchedulableItem]:
        return (self.items[item_id] for item_id in self.ids)

    def __repr__(self) -> str:
        return f"DependencyGraph({len(self.ids)} items, {self._edge_count} dependencies)"
