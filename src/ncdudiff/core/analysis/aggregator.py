from __future__ import annotations

"""
Subtree Aggregation Service.

Computes the per-node rollups (entry counts and sizes) of a canonical tree,
either bottom-up from the children or read from a pre-aggregated field that
some scanners store on directory heads. A snapshot uses exactly one source,
and both sides of a diff must agree on it.
"""

import logging
from typing import Any, Dict, List, Optional

from ncdudiff.domain.constants import STORED_AGGR_KEY
from ncdudiff.domain.errors import InvariantViolation, MalformedSnapshotError
from ncdudiff.domain.snapshot_models import (
    Aggregation,
    AggregationSource,
    Node,
    NodeKind,
    RawEntry,
    Snapshot,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def file_aggregation(entry: RawEntry) -> Aggregation:
    """A file rolls up to its own sizes with no children."""
    return Aggregation(children=0, files=0, dirs=0, asize=entry.asize, dsize=entry.dsize)


def compute_aggregation(entry: RawEntry, kind: NodeKind, children: List[Node]) -> Aggregation:
    """
    Roll up a node from its own entry and its already aggregated children.

    Args:
        entry: Raw descriptor of the node itself.
        kind: Node classification.
        children: Direct children, each carrying its final rollup.

    Returns:
        Aggregation: Own sizes plus every descendant's sizes and counts.
    """
    if kind is NodeKind.FILE:
        return file_aggregation(entry)

    files = dirs = 0
    asize, dsize = entry.asize, entry.dsize
    for child in children:
        if child.is_dir:
            dirs += 1
        else:
            files += 1
        files += child.aggr.files
        dirs += child.aggr.dirs
        asize += child.aggr.asize
        dsize += child.aggr.dsize

    return Aggregation(children=len(children), files=files, dirs=dirs, asize=asize, dsize=dsize)


def stored_aggregation(head: Dict[str, Any], path: str) -> Aggregation:
    """
    Read a pre-aggregated rollup from a directory head entry.

    Raises:
        MalformedSnapshotError: If the head lacks the rollup or it is not an object.
    """
    raw = head.get(STORED_AGGR_KEY)
    if not isinstance(raw, dict):
        raise MalformedSnapshotError(
            f"directory '{path}' lacks a '{STORED_AGGR_KEY}' object while the snapshot uses stored rollups"
        )
    try:
        return Aggregation.from_dict(raw)
    except (TypeError, ValueError) as e:
        raise MalformedSnapshotError(f"invalid '{STORED_AGGR_KEY}' on '{path}': {e}") from e


def detect_source(root_head: Optional[Dict[str, Any]]) -> AggregationSource:
    """Stored rollups are used iff the root directory head carries one."""
    if isinstance(root_head, dict) and STORED_AGGR_KEY in root_head:
        return AggregationSource.STORED
    return AggregationSource.COMPUTED


def ensure_same_source(snapshot0: Snapshot, snapshot1: Snapshot) -> AggregationSource:
    """
    Verify that both snapshots of a diff carry rollups from the same source.

    Raises:
        InvariantViolation: If one side is stored and the other computed.
    """
    if snapshot0.aggregation_source is not snapshot1.aggregation_source:
        raise InvariantViolation(
            f"mixed aggregation sources: '{snapshot0.source}' is {snapshot0.aggregation_source.value}, "
            f"'{snapshot1.source}' is {snapshot1.aggregation_source.value}"
        )
    return snapshot0.aggregation_source
