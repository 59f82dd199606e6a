from __future__ import annotations

"""
Lazy Diff Session.

Owns the forest of a lazily resolved comparison together with its data
source and a small worker pool. Consumers resolve nodes level by level,
synchronously or through futures, and address nodes by name path.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Optional

from ncdudiff.core.diff.path_index import Forest, lookup
from ncdudiff.core.diff.resolver import ChildEntrySource, SnapshotPairSource, resolve_level, resolve_roots
from ncdudiff.core.services.loader import SnapshotLoader
from ncdudiff.domain.diff_models import DiffNode, Path
from ncdudiff.domain.errors import DuplicateIdentityError, PathNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


class DiffSession:
    """
    Context object holding one lazily resolved diff forest.

    Every node's children are fetched at most once; concurrent expansion
    requests for the same node share a single fetch.
    """

    def __init__(
            self,
            source: ChildEntrySource,
            executor: Optional[ThreadPoolExecutor] = None,
            max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.source = source
        self.forest = Forest()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="ncdudiff-resolve"
        )
        self._index_lock = threading.Lock()
        self._node_by_id: Dict[str, DiffNode] = {}

    @classmethod
    def from_reports(cls, loader: SnapshotLoader, source0: str, source1: str) -> "DiffSession":
        """
        Load two reports through `loader` (in parallel) and open a session on them.
        """
        future0, future1 = loader.load(source0), loader.load(source1)
        return cls(SnapshotPairSource(future0.result(), future1.result()))

    def __enter__(self) -> "DiffSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    # -------------------------------------------------------------------------
    # RESOLUTION
    # -------------------------------------------------------------------------

    def roots(self) -> List[DiffNode]:
        """Return the forest roots, building them on first use."""
        if self.forest.is_open:
            return self.forest.roots
        with self._index_lock:
            if not self.forest.is_open:
                roots = resolve_roots(self.source)
                self._register(roots)
                self.forest.set_roots(roots)
                logger.info(f"Diff session opened with {len(roots)} root(s)")
        return self.forest.roots

    def resolve(self, node: DiffNode) -> List[DiffNode]:
        """Return the children of `node`, fetching them at most once."""
        return node.ensure_children(self._compute_level)

    def resolve_async(self, node: DiffNode) -> "Future[List[DiffNode]]":
        """Schedule `resolve(node)` on the session's worker pool."""
        if node.is_resolved:
            done: "Future[List[DiffNode]]" = Future()
            done.set_result(node.children)
            return done
        return self._executor.submit(self.resolve, node)

    def lookup(self, path: Path) -> DiffNode:
        """Find an already resolved node; see `path_index.lookup`."""
        self.roots()
        return lookup(self.forest, path)

    def expand_path(self, path: Path) -> DiffNode:
        """
        Resolve every ancestor along `path` and return the addressed node.

        Raises:
            PathNotFoundError: If a segment does not exist on either side.
        """
        if not path:
            raise PathNotFoundError(path, "")
        candidates = self.roots()
        node: Optional[DiffNode] = None
        for i, segment in enumerate(path):
            node = next((c for c in candidates if c.name == segment), None)
            if node is None:
                raise PathNotFoundError(path, segment)
            if i < len(path) - 1:
                candidates = self.resolve(node)
        assert node is not None
        return node

    def node_count(self) -> int:
        with self._index_lock:
            return len(self._node_by_id)

    def get_by_identity(self, identity: str) -> Optional[DiffNode]:
        with self._index_lock:
            return self._node_by_id.get(identity)

    # -------------------------------------------------------------------------
    # INTERNAL HELPERS
    # -------------------------------------------------------------------------

    def _compute_level(self, node: DiffNode) -> List[DiffNode]:
        children = resolve_level(node, self.source)
        with self._index_lock:
            self._register(children)
        return children

    def _register(self, nodes: List[DiffNode]) -> None:
        """Add freshly built nodes to the identity index. Caller holds the lock."""
        for node in nodes:
            if node.identity in self._node_by_id:
                raise DuplicateIdentityError(node.identity)
            self._node_by_id[node.identity] = node
