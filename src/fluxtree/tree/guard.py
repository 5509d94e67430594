"""Cycle detection for the container parent relation."""

import logging

from fluxtree.core.types import PARENT_FIELD, Record, to_int
from fluxtree.persistence.adapter import RecordStore

logger = logging.getLogger(__name__)


class TreeGuard:
    """Walks ``tx_flux_parent`` chains to keep the container tree acyclic."""

    def __init__(self, store: RecordStore):
        self.store = store

    def would_create_cycle(self, table: str, record: Record, proposed_parent_id: int) -> bool:
        """True if giving ``record`` the parent ``proposed_parent_id`` makes it its own ancestor.

        The walk ends at the first parent that is 0 or has no row. A chain
        that revisits an ancestor, or outgrows the table, is already corrupt;
        the move is rejected rather than looping.
        """
        uid = to_int(record.get("uid"))
        parent_id = to_int(proposed_parent_id)
        visited: set[int] = set()
        limit: int | None = None

        while parent_id > 0:
            if parent_id == uid:
                return True
            if parent_id in visited:
                logger.error(
                    "Parent chain of %s:%d loops through %d without reaching the root",
                    table,
                    uid,
                    parent_id,
                )
                return True
            visited.add(parent_id)

            if limit is None:
                limit = self.store.count(table)
            if len(visited) > limit:
                logger.error(
                    "Parent chain of %s:%d is deeper than the table holds rows", table, uid
                )
                return True

            parent = self.store.get(table, parent_id, fields=("uid", PARENT_FIELD))
            if not parent:
                return False
            parent_id = to_int(parent.get(PARENT_FIELD))

        return False

    def find_cycles(self, table: str) -> list[list[int]]:
        """Report each distinct parent loop already present in ``table``.

        Each loop is listed once, starting at its smallest uid.
        """
        parents = {
            to_int(row["uid"]): to_int(row.get(PARENT_FIELD))
            for row in self.store.query(table, fields=("uid", PARENT_FIELD))
        }

        cycles: list[list[int]] = []
        settled: set[int] = set()
        for start in parents:
            path: list[int] = []
            position: dict[int, int] = {}
            node = start
            while node in parents and node not in settled and node not in position:
                position[node] = len(path)
                path.append(node)
                node = parents[node]
            if node in position:
                loop = path[position[node]:]
                pivot = loop.index(min(loop))
                cycles.append(loop[pivot:] + loop[:pivot])
            settled.update(path)

        return cycles
