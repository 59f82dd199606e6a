from __future__ import annotations

"""
Diff Tree Renderer.

Converts diff nodes into indented ASCII lines for the terminal and into
JSON-ready dictionaries. When given a resolver callback it expands lazily
resolved nodes on the way down; otherwise it only walks children that are
already resolved. Both walks use an explicit stack, so deep dumps render
without hitting the recursion limit.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ncdudiff.domain.constants import STATUS_MARKERS
from ncdudiff.domain.diff_models import DiffNode
from ncdudiff.domain.snapshot_models import Aggregation
from ncdudiff.utils.formatting import format_delta, format_size

Resolver = Callable[[DiffNode], List[DiffNode]]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_diff_lines(
        nodes: Sequence[DiffNode],
        lines: List[str],
        prefix: str = "",
        resolve: Optional[Resolver] = None,
        max_depth: int = -1,
        changed_only: bool = False,
        size_mode: str = "disk",
) -> None:
    """
    Append one line per diff node to `lines`, depth-first.

    Uses the standard connectors (├──, └──). Each line shows the change
    marker, the name (directories end in "/"), the newer size, the size
    delta and the item counts on both sides.

    Args:
        nodes: Sibling nodes to render.
        lines: Accumulator list for output strings.
        prefix: Indentation prefix for the first level.
        resolve: Callback expanding unresolved nodes; None renders only
            what is already resolved.
        max_depth: Levels below `nodes` to descend into; -1 is unlimited.
        changed_only: Skip nodes with nothing changed in their subtree.
            With a resolver, the subtree is resolved before a node is hidden.
        size_mode: "disk" or "apparent".
    """
    # Entries are (node, prefix, is_last, level)
    pending: List[Tuple[DiffNode, str, bool, int]] = []
    _push_siblings(pending, nodes, prefix, 0, resolve, changed_only)

    while pending:
        node, node_prefix, is_last, level = pending.pop()
        connector = "└── " if is_last else "├── "
        lines.append(f"{node_prefix}{connector}{format_node_line(node, size_mode)}")

        if not node.is_expandable() or (max_depth >= 0 and level >= max_depth):
            continue

        children = resolve(node) if resolve is not None else node.children_if_resolved()
        if not children:
            continue

        child_prefix = node_prefix + ("    " if is_last else "│   ")
        _push_siblings(pending, children, child_prefix, level + 1, resolve, changed_only)


def format_node_line(node: DiffNode, size_mode: str = "disk") -> str:
    """Single-line summary of one diff node."""
    marker = STATUS_MARKERS[node.status()]
    name = node.name + ("/" if node.is_expandable() else "")

    if size_mode == "apparent":
        size1 = node.aggr1.asize if node.aggr1 is not None else None
        delta = node.asize_delta()
    else:
        size1 = node.aggr1.dsize if node.aggr1 is not None else None
        delta = node.dsize_delta()

    line = f"{marker} {name}  {format_size(size1)} ({format_delta(delta)})"
    if node.is_expandable():
        line += f"  [{_items(node.aggr0)} -> {_items(node.aggr1)} items]"
    return line


def diff_node_to_dict(
        node: DiffNode,
        resolve: Optional[Resolver] = None,
        max_depth: int = -1,
) -> Dict[str, Any]:
    """
    Serialize a diff subtree into plain dictionaries.

    Children that are unresolved, or lie below `max_depth`, are emitted as
    None rather than as an empty list.
    """
    result = _node_to_dict(node)
    pending: List[Tuple[DiffNode, Dict[str, Any], int]] = [(node, result, max_depth)]

    while pending:
        current, data, depth_left = pending.pop()
        if depth_left == 0:
            continue

        if resolve is not None and current.is_expandable():
            children: Optional[List[DiffNode]] = resolve(current)
        else:
            children = current.children_if_resolved()
        if children is None:
            continue

        data["children"] = []
        for child in children:
            child_data = _node_to_dict(child)
            data["children"].append(child_data)
            pending.append((child, child_data, depth_left - 1))

    return result

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _push_siblings(
        pending: List[Tuple[DiffNode, str, bool, int]],
        nodes: Sequence[DiffNode],
        prefix: str,
        level: int,
        resolve: Optional[Resolver],
        changed_only: bool,
) -> None:
    visible = [n for n in nodes if not (changed_only and _is_unchanged(n, resolve))]
    last = len(visible) - 1
    # Reversed so the first sibling is popped first
    for i in range(last, -1, -1):
        pending.append((visible[i], prefix, i == last, level))


def _is_unchanged(node: DiffNode, resolve: Optional[Resolver]) -> bool:
    if node.status() != "unchanged":
        return False
    if resolve is not None and node.is_expandable():
        return not node.contents_changed(resolve)
    return True


def _node_to_dict(node: DiffNode) -> Dict[str, Any]:
    return {
        "name": node.name,
        "kind": node.kind.value,
        "status": node.status(),
        "identity": node.identity,
        "aggr0": _aggr_to_dict(node.aggr0),
        "aggr1": _aggr_to_dict(node.aggr1),
        "dsize_delta": node.dsize_delta(),
        "children": None,
    }


def _items(aggr: Optional[Aggregation]) -> str:
    return str(aggr.files + aggr.dirs) if aggr is not None else "-"


def _aggr_to_dict(aggr: Optional[Aggregation]) -> Optional[Dict[str, int]]:
    if aggr is None:
        return None
    return {
        "children": aggr.children,
        "files": aggr.files,
        "dirs": aggr.dirs,
        "asize": aggr.asize,
        "dsize": aggr.dsize,
    }
