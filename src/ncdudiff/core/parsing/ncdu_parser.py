from __future__ import annotations

"""
ncdu Dump Parser.

Converts the nested-array JSON export of ncdu into the canonical Snapshot
tree. Identifiers are assigned in pre-order starting at 1. Version and shape
mismatches are collected as warnings and logged; only input that cannot be
interpreted at all is rejected.

Format reference: https://dev.yorhel.nl/ncdu/jsonfmt
"""

import json
import logging
import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from ncdudiff.core.analysis.aggregator import (
    compute_aggregation,
    detect_source,
    stored_aggregation,
)
from ncdudiff.domain.constants import EXPECTED_FORMAT_VERSION, EXPECTED_PROGVER
from ncdudiff.domain.errors import DuplicateIdentityError, MalformedSnapshotError, SchemaWarning
from ncdudiff.domain.snapshot_models import (
    AggregationSource,
    Node,
    NodeKind,
    RawEntry,
    Snapshot,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParserConfig:
    """
    Parsing options.

    Attributes:
        ignore_paths: Full entry paths skipped together with their subtrees.
        expected_progver: ncdu version the dumps are expected to come from.
        expected_format: Expected "major.minor" dump format version.
    """
    ignore_paths: Tuple[str, ...] = ()
    expected_progver: str = EXPECTED_PROGVER
    expected_format: str = EXPECTED_FORMAT_VERSION

    def is_ignored(self, path: str) -> bool:
        return path in self.ignore_paths


class _SkipEntry(Exception):
    """Internal signal: the entry matched an ignore path."""


@dataclass
class _ParseState:
    config: ParserConfig
    source: AggregationSource
    last_id: int = 0
    node_by_id: Dict[int, Node] = field(default_factory=dict)

    def next_id(self) -> int:
        self.last_id += 1
        return self.last_id

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def parse_snapshot(data: Any, source: str, config: Optional[ParserConfig] = None) -> Snapshot:
    """
    Build a Snapshot from an already decoded ncdu export.

    Args:
        data: Decoded JSON document `[major, minor, info, root]`.
        source: File path or URL, kept for diagnostics.
        config: Parsing options; defaults apply when omitted.

    Returns:
        Snapshot: Canonical tree with rollups and collected warnings.

    Raises:
        MalformedSnapshotError: If the document is not an ncdu export, or a
            directory lists the same entry name twice.
        DuplicateIdentityError: If two nodes end up with the same id.
    """
    cfg = config or ParserConfig()

    if not isinstance(data, list) or len(data) != 4:
        count = len(data) if isinstance(data, list) else type(data).__name__
        raise MalformedSnapshotError(
            f"wrong ncdu data in {source}: expected 4-element array at top level, got {count}"
        )

    major, minor = _parse_version(data[0], "major", source), _parse_version(data[1], "minor", source)
    warnings: List[SchemaWarning] = []

    format_version = f"{major}.{minor}"
    if format_version != cfg.expected_format:
        warnings.append(SchemaWarning(
            f"{source}: expected format version {cfg.expected_format}, got {format_version}"
        ))

    info = data[2]
    metadata: Dict[str, Any] = info if isinstance(info, dict) else {}
    if "progver" not in metadata:
        warnings.append(SchemaWarning(
            f"strange report {source}: expected 3rd element to be object with 'progver' property"
        ))
    elif str(metadata["progver"]) != cfg.expected_progver:
        warnings.append(SchemaWarning(
            f"{source}: expected ncdu v{cfg.expected_progver}, got v{metadata['progver']}"
        ))

    for w in warnings:
        logger.warning(str(w))

    root_data = data[3]
    root_head = root_data[0] if isinstance(root_data, list) and root_data else None
    state = _ParseState(config=cfg, source=detect_source(root_head))

    try:
        root = _parse_entry(root_data, depth=0, cur_dev=0, cur_path="", state=state)
    except _SkipEntry:
        raise MalformedSnapshotError(f"{source}: the root entry itself is ignored") from None

    logger.debug(
        f"Parsed {source}: {len(state.node_by_id)} nodes, "
        f"format {format_version}, rollups {state.source.value}"
    )

    return Snapshot(
        source=source,
        major_version=major,
        minor_version=minor,
        metadata=metadata,
        root=root,
        aggregation_source=state.source,
        node_by_id=state.node_by_id,
        warnings=warnings,
    )


def parse_snapshot_text(text: str, source: str, config: Optional[ParserConfig] = None) -> Snapshot:
    """Decode a JSON document and parse it as an ncdu export."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedSnapshotError(f"{source} is not valid JSON: {e}") from e
    return parse_snapshot(data, source, config)


def parse_snapshot_file(path: str, config: Optional[ParserConfig] = None) -> Snapshot:
    """Read and parse an ncdu export from the local filesystem."""
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    return parse_snapshot_text(text, path, config)

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _parse_version(value: Any, label: str, source: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedSnapshotError(f"{source}: {label} version must be an integer, got {value!r}")
    return value


def _parse_raw_entry(obj: Any, cur_dev: int) -> RawEntry:
    if not isinstance(obj, dict) or "name" not in obj:
        raise MalformedSnapshotError(f"expected entry object with a 'name', got {type(obj).__name__}")
    try:
        dev = int(obj.get("dev") or 0)
        return RawEntry(
            name=str(obj["name"]),
            asize=int(obj.get("asize", 0)),
            dsize=int(obj.get("dsize", 0)),
            ino=int(obj.get("ino", 0)),
            # Absent dev means "same as the parent directory"
            dev=dev if dev else cur_dev,
            notreg=bool(obj.get("notreg", False)),
            hlnkc=bool(obj.get("hlnkc", False)),
            read_error=bool(obj.get("read_error", False)),
        )
    except (TypeError, ValueError) as e:
        raise MalformedSnapshotError(f"invalid field in entry '{obj.get('name')}': {e}") from e


def _parse_entry(data: Any, depth: int, cur_dev: int, cur_path: str, state: _ParseState) -> Node:
    """Recursively convert one raw entry (object = file, array = directory)."""
    if isinstance(data, list):
        if not data:
            raise MalformedSnapshotError(f"empty directory array under '{cur_path or '/'}'")
        head = data[0]
        if not isinstance(head, dict):
            raise MalformedSnapshotError(
                f"expected file as directory head, got {type(head).__name__}"
            )
        entry = _parse_raw_entry(head, cur_dev)
        path = posixpath.join(cur_path, entry.name) if cur_path else entry.name
        if state.config.is_ignored(path):
            raise _SkipEntry(path)

        node_id = state.next_id()
        children: List[Node] = []
        seen_names: Set[str] = set()
        for child_data in data[1:]:
            try:
                child = _parse_entry(child_data, depth + 1, entry.dev, path, state)
            except _SkipEntry as skipped:
                logger.debug(f"Ignoring entry: {skipped}")
                continue
            if child.name in seen_names:
                raise MalformedSnapshotError(f"duplicate entry name '{child.name}' under '{path}'")
            seen_names.add(child.name)
            children.append(child)

        if state.source is AggregationSource.STORED:
            aggr = stored_aggregation(head, path)
        else:
            aggr = compute_aggregation(entry, NodeKind.DIR, children)
        node = Node(id=node_id, entry=entry, kind=NodeKind.DIR, depth=depth, aggr=aggr, children=children)
    else:
        entry = _parse_raw_entry(data, cur_dev)
        path = posixpath.join(cur_path, entry.name) if cur_path else entry.name
        if state.config.is_ignored(path):
            raise _SkipEntry(path)
        node_id = state.next_id()
        node = Node(
            id=node_id,
            entry=entry,
            kind=NodeKind.FILE,
            depth=depth,
            aggr=compute_aggregation(entry, NodeKind.FILE, []),
        )

    if node.id in state.node_by_id:
        raise DuplicateIdentityError(node.id)
    state.node_by_id[node.id] = node
    return node
