from __future__ import annotations

"""
Diff Tree Data Models.

Defines the paired node produced by matching two snapshots, the eager diff
tree container and the flat paired record handed out by child-entry sources.
A DiffNode's children slot is either unresolved (None) or a fully built list;
the transition happens exactly once under the node's own lock.
"""

import threading
import weakref
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from ncdudiff.domain.constants import ABSENT_SIDE_MARK, IDENTITY_SEPARATOR
from ncdudiff.domain.errors import InvariantViolation
from ncdudiff.domain.snapshot_models import Aggregation, Node, NodeKind, RawEntry, Snapshot

Path = Tuple[str, ...]


class DiffNode:
    """
    Pairing of at most one node from each snapshot.

    Name, kind and depth come from side0 when present, else from side1.
    The parent link is a weak reference used only to rebuild paths.
    """

    def __init__(
            self,
            side0: Optional[Node],
            side1: Optional[Node],
            parent: Optional["DiffNode"] = None,
            children: Optional[List["DiffNode"]] = None,
    ) -> None:
        if side0 is None and side1 is None:
            raise InvariantViolation("DiffNode requires at least one side")
        self.side0 = side0
        self.side1 = side1
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self._children = children
        self._contents_changed: Optional[bool] = None
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"DiffNode({self.identity!r}, name={self.name!r})"

    # -------------------------------------------------------------------------
    # ACCESSORS
    # -------------------------------------------------------------------------

    @property
    def primary(self) -> Node:
        node = self.side0 if self.side0 is not None else self.side1
        if node is None:
            raise InvariantViolation("DiffNode lost both sides")
        return node

    @property
    def name(self) -> str:
        return self.primary.name

    @property
    def kind(self) -> NodeKind:
        return self.primary.kind

    @property
    def depth(self) -> int:
        return self.primary.depth

    @property
    def identity(self) -> str:
        id0 = str(self.side0.id) if self.side0 is not None else ABSENT_SIDE_MARK
        id1 = str(self.side1.id) if self.side1 is not None else ABSENT_SIDE_MARK
        return f"{id0}{IDENTITY_SEPARATOR}{id1}"

    @property
    def aggr0(self) -> Optional[Aggregation]:
        return self.side0.aggr if self.side0 is not None else None

    @property
    def aggr1(self) -> Optional[Aggregation]:
        return self.side1.aggr if self.side1 is not None else None

    @property
    def parent(self) -> Optional["DiffNode"]:
        return self._parent_ref() if self._parent_ref is not None else None

    def was_created(self) -> bool:
        return self.side0 is None

    def was_removed(self) -> bool:
        return self.side1 is None

    def sides_differ(self) -> bool:
        """True when both sides exist but their kind or totals differ."""
        if self.side0 is None or self.side1 is None:
            return False
        if self.side0.kind is not self.side1.kind:
            return True
        a0, a1 = self.side0.aggr, self.side1.aggr
        return (a0.asize, a0.dsize, a0.files, a0.dirs) != (a1.asize, a1.dsize, a1.files, a1.dirs)

    def was_changed(self) -> bool:
        """
        True when both sides exist and either their totals differ or some
        descendant was created, removed or changed.

        Only the resolved part of the subtree is inspected here; pass a
        resolver to `contents_changed` to look further down.
        """
        if self.side0 is None or self.side1 is None:
            return False
        return self.sides_differ() or self.contents_changed()

    def status(self) -> str:
        if self.was_created():
            return "created"
        if self.was_removed():
            return "removed"
        return "changed" if self.was_changed() else "unchanged"

    def is_expandable(self) -> bool:
        """A node can be expanded when either side is a directory."""
        return any(side is not None and side.is_dir for side in (self.side0, self.side1))

    def dsize_delta(self) -> int:
        d0 = self.aggr0.dsize if self.aggr0 is not None else 0
        d1 = self.aggr1.dsize if self.aggr1 is not None else 0
        return d1 - d0

    def asize_delta(self) -> int:
        a0 = self.aggr0.asize if self.aggr0 is not None else 0
        a1 = self.aggr1.asize if self.aggr1 is not None else 0
        return a1 - a0

    def path(self) -> Path:
        """Names from the forest root down to this node, root first."""
        names: List[str] = []
        node: Optional[DiffNode] = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        names.reverse()
        return tuple(names)

    # -------------------------------------------------------------------------
    # CHILDREN SLOT
    # -------------------------------------------------------------------------

    @property
    def is_resolved(self) -> bool:
        return self._children is not None

    @property
    def children(self) -> List["DiffNode"]:
        children = self._children
        if children is None:
            raise InvariantViolation(f"children of {self.path()} are not resolved")
        return children

    def children_if_resolved(self) -> Optional[List["DiffNode"]]:
        return self._children

    def ensure_children(self, compute: Callable[["DiffNode"], List["DiffNode"]]) -> List["DiffNode"]:
        """
        Resolve the children slot once and return the cached list afterwards.

        The check and the assignment happen under the node lock, so concurrent
        callers never run `compute` twice for the same node.
        """
        children = self._children
        if children is not None:
            return children
        with self._lock:
            if self._children is None:
                self._children = compute(self)
            return self._children

    def set_children(self, children: List["DiffNode"]) -> None:
        """Single-assignment setter used by the eager builder."""
        with self._lock:
            if self._children is not None:
                raise InvariantViolation(f"children of {self.path()} already resolved")
            self._children = children

    def record_contents_changed(self, changed: bool) -> None:
        """Store the outcome of a complete scan of the children."""
        self._contents_changed = changed

    def contents_changed(self, resolve: Optional[Callable[["DiffNode"], List["DiffNode"]]] = None) -> bool:
        """
        Whether any descendant differs between the two sides.

        Walks the subtree with an explicit stack. Unresolved nodes are
        expanded through `resolve` when given and skipped otherwise. The
        answer is cached once it is definitive: a hit anywhere, or a miss
        after the whole subtree was visited.
        """
        if self._contents_changed is not None:
            return self._contents_changed

        complete = True
        pending: List[DiffNode] = [self]
        while pending:
            node = pending.pop()
            if node is not self:
                if node.side0 is None or node.side1 is None or node.sides_differ():
                    self._contents_changed = True
                    return True
                if node._contents_changed is not None:
                    if node._contents_changed:
                        self._contents_changed = True
                        return True
                    continue
            if not node.is_expandable():
                continue

            children = node._children
            if children is None and resolve is not None:
                children = resolve(node)
            if children is None:
                complete = False
                continue
            pending.extend(children)

        if complete:
            self._contents_changed = False
        return False

    def iter_resolved(self) -> Iterator["DiffNode"]:
        """Yield this node and every resolved descendant in pre-order."""
        pending: List[DiffNode] = [self]
        while pending:
            node = pending.pop()
            yield node
            pending.extend(reversed(node._children or []))


@dataclass
class DiffTree:
    """
    Fully materialized comparison of two snapshots.

    Attributes:
        roots: Top-level diff nodes.
        node_by_id: Index of every diff node by composite identity.
        snapshot0: Left-hand (older) snapshot.
        snapshot1: Right-hand (newer) snapshot.
    """
    roots: List[DiffNode]
    node_by_id: Dict[str, DiffNode] = field(default_factory=dict)
    snapshot0: Optional[Snapshot] = None
    snapshot1: Optional[Snapshot] = None


@dataclass(frozen=True)
class PairedEntry:
    """One level entry as returned by a path-addressed data source."""
    entry0: Optional[RawEntry]
    entry1: Optional[RawEntry]
    aggr0: Optional[Aggregation]
    aggr1: Optional[Aggregation]

    @property
    def name(self) -> str:
        entry = self.entry0 if self.entry0 is not None else self.entry1
        if entry is None:
            raise InvariantViolation("PairedEntry requires at least one side")
        return entry.name
