from __future__ import annotations

"""
Unit tests for the Lazy Child Resolver.

Verifies:
1. Delta ordering of resolved levels.
2. At-most-once fetching per node, including under concurrency.
3. Paired-entry records returned by data sources.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Tuple

from ncdudiff.core.diff.resolver import (
    ChildEntrySource,
    SnapshotPairSource,
    fetch_child_entries,
    resolve_children,
    resolve_roots,
    sort_by_delta,
)
from ncdudiff.core.parsing.ncdu_parser import parse_snapshot
from ncdudiff.domain.diff_models import DiffNode, Path
from ncdudiff.domain.snapshot_models import Aggregation, Node, NodeKind, RawEntry


class CountingSource(ChildEntrySource):
    """Wraps a source and records every fetched path."""

    def __init__(self, inner: ChildEntrySource, delay: float = 0.0) -> None:
        self.inner = inner
        self.delay = delay
        self.calls: List[Path] = []
        self._lock = threading.Lock()

    def fetch_child_lists(self, path: Path) -> Tuple[List[Node], List[Node]]:
        with self._lock:
            self.calls.append(path)
        if self.delay:
            time.sleep(self.delay)
        return self.inner.fetch_child_lists(path)


def _pair_source(ncdu: Any) -> SnapshotPairSource:
    old = ncdu.export(ncdu.dir(
        "root",
        ncdu.file("same", 10),
        ncdu.file("shrunk", 100),
        ncdu.file("grown", 10),
        ncdu.dir("dir", ncdu.file("inner", 1)),
        ncdu.file("removed", 30),
    ))
    new = ncdu.export(ncdu.dir(
        "root",
        ncdu.file("same", 10),
        ncdu.file("shrunk", 40),
        ncdu.file("grown", 80),
        ncdu.dir("dir", ncdu.file("inner", 1)),
        ncdu.file("added", 5),
        ncdu.file("also-same", 0),
    ))
    return SnapshotPairSource(parse_snapshot(old, "old"), parse_snapshot(new, "new"))


def _leaf(name: str, d0: int, d1: int) -> DiffNode:
    side0 = Node(id=1, entry=RawEntry(name=name), kind=NodeKind.FILE, depth=0, aggr=Aggregation(dsize=d0))
    side1 = Node(id=2, entry=RawEntry(name=name), kind=NodeKind.FILE, depth=0, aggr=Aggregation(dsize=d1))
    return DiffNode(side0, side1)

# -----------------------------------------------------------------------------
# ORDERING
# -----------------------------------------------------------------------------

def test_sort_by_delta_puts_zero_delta_last_by_name() -> None:
    nodes = [_leaf("z0", 5, 5), _leaf("small", 0, 1), _leaf("a0", 3, 3), _leaf("neg", 9, 0), _leaf("big", 0, 90)]

    assert [n.name for n in sort_by_delta(nodes)] == ["big", "small", "neg", "a0", "z0"]


def test_sort_by_delta_breaks_ties_by_name() -> None:
    nodes = [_leaf("b", 0, 7), _leaf("a", 0, 7)]

    assert [n.name for n in sort_by_delta(nodes)] == ["a", "b"]


def test_resolved_level_is_delta_ordered(ncdu: Any) -> None:
    source = _pair_source(ncdu)
    root = resolve_roots(source)[0]

    children = resolve_children(root, source)
    deltas = [c.dsize_delta() for c in children]
    nonzero = [d for d in deltas if d != 0]
    zero_tail = [c.name for c in children if c.dsize_delta() == 0]

    assert [c.name for c in children] == ["grown", "added", "removed", "shrunk", "also-same", "dir", "same"]
    assert nonzero == sorted(nonzero, reverse=True)
    assert zero_tail == sorted(zero_tail)
    assert deltas[len(nonzero):] == [0] * len(zero_tail)

# -----------------------------------------------------------------------------
# CACHING
# -----------------------------------------------------------------------------

def test_roots_are_one_level_only(ncdu: Any) -> None:
    roots = resolve_roots(_pair_source(ncdu))

    assert len(roots) == 1
    assert roots[0].is_resolved is False


def test_resolution_is_idempotent_and_fetches_once(ncdu: Any) -> None:
    source = CountingSource(_pair_source(ncdu))
    root = resolve_roots(source)[0]

    first = resolve_children(root, source)
    second = resolve_children(root, source)

    assert first is second
    assert source.calls == [(), ("root",)]


def test_children_are_addressed_by_name_path(ncdu: Any) -> None:
    source = CountingSource(_pair_source(ncdu))
    root = resolve_roots(source)[0]
    folder = next(c for c in resolve_children(root, source) if c.name == "dir")

    inner = resolve_children(folder, source)

    assert source.calls[-1] == ("root", "dir")
    assert [c.name for c in inner] == ["inner"]
    assert inner[0].parent is folder
    assert inner[0].path() == ("root", "dir", "inner")


def test_concurrent_resolution_fetches_once(ncdu: Any) -> None:
    source = CountingSource(_pair_source(ncdu), delay=0.05)
    root = resolve_roots(source)[0]
    source.calls.clear()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: resolve_children(root, source), range(8)))

    assert source.calls == [("root",)]
    assert all(r is results[0] for r in results)


def test_file_children_resolve_to_empty_without_fetch(ncdu: Any) -> None:
    source = CountingSource(_pair_source(ncdu))
    root = resolve_roots(source)[0]
    same = next(c for c in resolve_children(root, source) if c.name == "same")
    calls_before = len(source.calls)

    assert resolve_children(same, source) == []
    assert len(source.calls) == calls_before


def test_missing_path_yields_empty_side(ncdu: Any) -> None:
    source = _pair_source(ncdu)

    left, right = source.fetch_child_lists(("root", "added"))
    assert left == [] and right == []

    left, right = source.fetch_child_lists(("elsewhere",))
    assert left == [] and right == []

# -----------------------------------------------------------------------------
# PAIRED ENTRIES
# -----------------------------------------------------------------------------

def test_fetch_child_entries_pairs_raw_records(ncdu: Any) -> None:
    entries = fetch_child_entries(_pair_source(ncdu), ("root",))
    by_name = {e.name: e for e in entries}

    grown = by_name["grown"]
    assert grown.entry0.dsize == 10 and grown.entry1.dsize == 80
    assert grown.aggr1.dsize == 80

    added = by_name["added"]
    assert added.entry0 is None and added.aggr0 is None

    removed = by_name["removed"]
    assert removed.entry1 is None and removed.aggr0.dsize == 30
