from __future__ import annotations

"""
Diff Engine.

Matches two canonical trees by sibling name and builds the paired diff tree.
Matching is exact name equality among direct siblings only: no rename or move
inference, and no identity carried across depth. A moved subtree therefore
shows up as one removed and one created node.

The full tree is built with an explicit work stack, so dump depth is not
bounded by the interpreter recursion limit.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ncdudiff.core.analysis.aggregator import ensure_same_source
from ncdudiff.domain.diff_models import DiffNode, DiffTree
from ncdudiff.domain.errors import DuplicateIdentityError
from ncdudiff.domain.snapshot_models import Node, Snapshot

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def diff_children(
        nodes0: Sequence[Node],
        nodes1: Sequence[Node],
        parent: Optional[DiffNode] = None,
        recursive: bool = True,
) -> List[DiffNode]:
    """
    Pair two sibling lists by name.

    Output order: every entry of `nodes0` in its original order (matched or
    removed), followed by the unmatched entries of `nodes1` in their original
    order (created). A name repeated on one side is paired once, using the
    later entry.

    Args:
        nodes0: Children on the left (older) side.
        nodes1: Children on the right (newer) side.
        parent: Diff node the results hang under, if any.
        recursive: Diff the whole subtree when True; otherwise stop after one
            level and leave expandable children unresolved.

    Returns:
        List[DiffNode]: One diff node per distinct name.
    """
    level = _pair_level(nodes0, nodes1, parent)

    if not recursive:
        for node in level:
            if not node.is_expandable():
                node.set_children([])
        return level

    built: List[DiffNode] = []
    pending = list(level)
    while pending:
        node = pending.pop()
        children = _pair_level(_children_of(node.side0), _children_of(node.side1), node)
        node.set_children(children)
        built.append(node)
        pending.extend(children)

    # Every node was appended before its descendants: walk backwards so each
    # child's answer is known when its parent is recorded
    for node in reversed(built):
        node.record_contents_changed(
            any(c.status() != "unchanged" for c in node.children)
        )
    return level


def calc_diff(snapshot0: Snapshot, snapshot1: Snapshot) -> DiffTree:
    """
    Compare two snapshots eagerly, materializing the full diff tree.

    Raises:
        InvariantViolation: If the snapshots use different rollup sources.
        DuplicateIdentityError: If two diff nodes share a composite identity.
    """
    ensure_same_source(snapshot0, snapshot1)
    logger.info(f"Computing full diff: {snapshot0.source} -> {snapshot1.source}")

    roots = diff_children(snapshot0.roots, snapshot1.roots)
    node_by_id = build_identity_index(roots)

    logger.debug(f"Full diff produced {len(node_by_id)} nodes under {len(roots)} root(s)")
    return DiffTree(roots=roots, node_by_id=node_by_id, snapshot0=snapshot0, snapshot1=snapshot1)


def build_identity_index(roots: Sequence[DiffNode]) -> Dict[str, DiffNode]:
    """
    Index every resolved diff node by its composite identity.

    Raises:
        DuplicateIdentityError: On the first colliding identity.
    """
    node_by_id: Dict[str, DiffNode] = {}
    for root in roots:
        for node in root.iter_resolved():
            if node.identity in node_by_id:
                raise DuplicateIdentityError(node.identity)
            node_by_id[node.identity] = node
    return node_by_id

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _pair_level(nodes0: Sequence[Node], nodes1: Sequence[Node], parent: Optional[DiffNode]) -> List[DiffNode]:
    res: List[DiffNode] = []
    node1_by_name = _make_node_by_name_map(nodes1)

    for node0 in _make_node_by_name_map(nodes0).values():
        node1 = node1_by_name.pop(node0.name, None)
        res.append(DiffNode(node0, node1, parent=parent))

    # Insertion order of the map is the original order of nodes1
    for node1 in node1_by_name.values():
        res.append(DiffNode(None, node1, parent=parent))

    return res


def _children_of(node: Optional[Node]) -> List[Node]:
    return node.children if node is not None else []


def _make_node_by_name_map(nodes: Sequence[Node]) -> Dict[str, Node]:
    res: Dict[str, Node] = {}
    for node in nodes:
        if node.name in res:
            logger.warning(f"Duplicate sibling name '{node.name}': keeping the later entry")
        res[node.name] = node
    return res
