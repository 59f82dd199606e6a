from __future__ import annotations

"""
Lazy Child Resolver.

Resolves one level of diff children on demand. Each request is addressed by
the node's root-to-node name path, so the backing data source never needs to
materialize a whole tree. Resolved levels are ordered by disk-size delta and
cached on the node exactly once.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from ncdudiff.core.analysis.aggregator import ensure_same_source
from ncdudiff.core.diff.engine import diff_children
from ncdudiff.domain.diff_models import DiffNode, PairedEntry, Path
from ncdudiff.domain.snapshot_models import Node, Snapshot

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# DATA SOURCES
# -----------------------------------------------------------------------------

class ChildEntrySource(ABC):
    """
    Path-addressed provider of one tree level for both snapshots.
    """

    @abstractmethod
    def fetch_child_lists(self, path: Path) -> Tuple[List[Node], List[Node]]:
        """
        Return the direct children found at `path` on each side.

        Args:
            path: Names from the root down; the empty path addresses the roots.

        Returns:
            Tuple[List[Node], List[Node]]: (left children, right children).
            A side where the path does not exist yields an empty list.
        """
        pass


class SnapshotPairSource(ChildEntrySource):
    """Serves levels out of two snapshots already held in memory."""

    def __init__(self, snapshot0: Snapshot, snapshot1: Snapshot) -> None:
        ensure_same_source(snapshot0, snapshot1)
        self.snapshot0 = snapshot0
        self.snapshot1 = snapshot1

    def fetch_child_lists(self, path: Path) -> Tuple[List[Node], List[Node]]:
        if not path:
            return list(self.snapshot0.roots), list(self.snapshot1.roots)
        return _children_at(self.snapshot0, path), _children_at(self.snapshot1, path)


def fetch_child_entries(source: ChildEntrySource, path: Path) -> List[PairedEntry]:
    """
    Return one level at `path` as flat paired records, in diff order.
    """
    nodes0, nodes1 = source.fetch_child_lists(path)
    return [
        PairedEntry(
            entry0=node.side0.entry if node.side0 is not None else None,
            entry1=node.side1.entry if node.side1 is not None else None,
            aggr0=node.aggr0,
            aggr1=node.aggr1,
        )
        for node in diff_children(nodes0, nodes1, recursive=False)
    ]

# -----------------------------------------------------------------------------
# RESOLUTION
# -----------------------------------------------------------------------------

def sort_by_delta(nodes: Sequence[DiffNode]) -> List[DiffNode]:
    """
    Order nodes by descending disk-size delta.

    Zero-delta nodes go after every non-zero one; ties, including the whole
    zero-delta tail, are broken by ascending name.
    """
    return sorted(nodes, key=lambda n: (n.dsize_delta() == 0, -n.dsize_delta(), n.name))


def resolve_roots(source: ChildEntrySource) -> List[DiffNode]:
    """Build the top level of a lazy diff forest."""
    nodes0, nodes1 = source.fetch_child_lists(())
    return sort_by_delta(diff_children(nodes0, nodes1, recursive=False))


def resolve_level(node: DiffNode, source: ChildEntrySource) -> List[DiffNode]:
    """
    Compute the direct children of `node` without caching them.
    """
    path = node.path()
    logger.debug(f"Resolving children of {'/'.join(path)}")
    nodes0, nodes1 = source.fetch_child_lists(path)
    return sort_by_delta(diff_children(nodes0, nodes1, parent=node, recursive=False))


def resolve_children(node: DiffNode, source: ChildEntrySource) -> List[DiffNode]:
    """
    Return the children of `node`, fetching them at most once.

    Repeated and concurrent calls return the identical cached list.
    """
    return node.ensure_children(lambda n: resolve_level(n, source))

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _children_at(snapshot: Snapshot, path: Path) -> List[Node]:
    node = snapshot.find_node(list(path))
    return list(node.children) if node is not None else []
