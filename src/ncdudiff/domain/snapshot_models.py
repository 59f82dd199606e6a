from __future__ import annotations

"""
Snapshot Data Models.

Provides the canonical in-memory representation of a parsed ncdu dump:
the raw entry descriptors, the per-node rollups and the tree of owned nodes.
Parsed snapshots are treated as immutable once built.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ncdudiff.domain.errors import SchemaWarning

# -----------------------------------------------------------------------------
# RAW DUMP ENTRIES
# -----------------------------------------------------------------------------

class NodeKind(str, Enum):
    """Closed classification of a tree entry."""
    FILE = "file"
    DIR = "dir"


class AggregationSource(str, Enum):
    """Where the rollups of a snapshot come from."""
    COMPUTED = "computed"
    STORED = "stored"


@dataclass(frozen=True)
class RawEntry:
    """
    Leaf descriptor exactly as found in the dump.

    Attributes:
        name: Entry name (the root carries the scanned path).
        asize: Apparent size in bytes.
        dsize: Disk usage in bytes.
        ino: Inode number.
        dev: Device id, inherited from the parent directory when absent.
        notreg: Not a regular file or directory.
        hlnkc: Hard link counted elsewhere.
        read_error: The scanner failed to read the entry.
    """
    name: str
    asize: int = 0
    dsize: int = 0
    ino: int = 0
    dev: int = 0
    notreg: bool = False
    hlnkc: bool = False
    read_error: bool = False


@dataclass(frozen=True)
class Aggregation:
    """
    Rollup of one subtree.

    Attributes:
        children: Number of direct entries.
        files: Number of descendant files.
        dirs: Number of descendant directories.
        asize: Apparent size of the entry plus all descendants.
        dsize: Disk size of the entry plus all descendants.
    """
    children: int = 0
    files: int = 0
    dirs: int = 0
    asize: int = 0
    dsize: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Aggregation":
        return cls(
            children=int(data.get("children", 0)),
            files=int(data.get("files", 0)),
            dirs=int(data.get("dirs", 0)),
            asize=int(data.get("asize", 0)),
            dsize=int(data.get("dsize", 0)),
        )

# -----------------------------------------------------------------------------
# CANONICAL TREE
# -----------------------------------------------------------------------------

@dataclass
class Node:
    """
    Canonical tree element. Owned by its parent; holds no back-reference.

    Attributes:
        id: Pre-order identifier, unique within one snapshot.
        entry: Raw descriptor of the entry itself.
        kind: File or directory.
        depth: Distance from the snapshot root.
        aggr: Rollup of the subtree rooted here.
        children: Owned child nodes in dump order.
    """
    id: int
    entry: RawEntry
    kind: NodeKind
    depth: int
    aggr: Aggregation = field(default_factory=Aggregation)
    children: List["Node"] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIR

    def find_child(self, name: str) -> Optional["Node"]:
        """Last child called `name`; the diff engine pairs the same one."""
        for child in reversed(self.children):
            if child.name == name:
                return child
        return None


@dataclass
class Snapshot:
    """
    One fully parsed dump.

    Attributes:
        source: File path or URL the dump was read from.
        major_version: Dump format major version.
        minor_version: Dump format minor version.
        metadata: The dump info object (progname, progver, timestamp).
        root: Root node of the canonical tree.
        aggregation_source: Whether rollups were read or recomputed.
        node_by_id: Index of every node by its pre-order id.
        warnings: Non-fatal schema mismatches found while parsing.
    """
    source: str
    major_version: int
    minor_version: int
    metadata: Dict[str, Any]
    root: Node
    aggregation_source: AggregationSource = AggregationSource.COMPUTED
    node_by_id: Dict[int, Node] = field(default_factory=dict)
    warnings: List[SchemaWarning] = field(default_factory=list)

    @property
    def format_version(self) -> str:
        return f"{self.major_version}.{self.minor_version}"

    @property
    def progver(self) -> Optional[str]:
        value = self.metadata.get("progver")
        return str(value) if value is not None else None

    @property
    def roots(self) -> List[Node]:
        return [self.root]

    def find_node(self, path: List[str]) -> Optional[Node]:
        """
        Resolve a name path starting with the root's own name.

        Returns None when any segment is missing on this side.
        """
        if not path or path[0] != self.root.name:
            return None
        node: Optional[Node] = self.root
        for name in path[1:]:
            node = node.find_child(name) if node else None
            if node is None:
                return None
        return node
