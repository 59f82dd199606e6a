from __future__ import annotations

"""
Path Index.

Maps root-to-node name paths onto diff nodes held by a forest. Names are the
only identifier stable across snapshots; integer ids differ per dump.
"""

import threading
from typing import List, Optional, Sequence

from ncdudiff.domain.diff_models import DiffNode, DiffTree, Path
from ncdudiff.domain.errors import InvariantViolation, PathNotFoundError


class Forest:
    """
    Root diff nodes owned by one consuming session.

    Holding the roots keeps every resolved descendant alive, since children
    only point back to their parents weakly.
    """

    def __init__(self, roots: Optional[Sequence[DiffNode]] = None) -> None:
        self._lock = threading.Lock()
        self._roots: Optional[List[DiffNode]] = list(roots) if roots is not None else None

    @classmethod
    def from_tree(cls, tree: DiffTree) -> "Forest":
        return cls(tree.roots)

    @property
    def is_open(self) -> bool:
        return self._roots is not None

    @property
    def roots(self) -> List[DiffNode]:
        roots = self._roots
        if roots is None:
            raise InvariantViolation("forest roots are not resolved")
        return roots

    def set_roots(self, roots: Sequence[DiffNode]) -> List[DiffNode]:
        """Install the roots once; later calls return the existing roots."""
        with self._lock:
            if self._roots is None:
                self._roots = list(roots)
            return self._roots


def lookup(forest: Forest, path: Path) -> DiffNode:
    """
    Find the resolved diff node addressed by `path`.

    Args:
        forest: Forest whose roots the path starts from.
        path: Names from a root down to the target node.

    Returns:
        DiffNode: The exact node object held by the forest.

    Raises:
        PathNotFoundError: If a segment is absent, or an ancestor's children
            have not been resolved yet.
    """
    if not path:
        raise PathNotFoundError(path, "")

    candidates: Optional[List[DiffNode]] = forest.roots
    node: Optional[DiffNode] = None
    for segment in path:
        if candidates is None:
            raise PathNotFoundError(path, segment)
        node = _find_by_name(candidates, segment)
        if node is None:
            raise PathNotFoundError(path, segment)
        candidates = node.children_if_resolved()

    assert node is not None
    return node


def _find_by_name(nodes: Sequence[DiffNode], name: str) -> Optional[DiffNode]:
    for node in nodes:
        if node.name == name:
            return node
    return None
