from __future__ import annotations

"""
Snapshot Loading Service.

Loads and parses ncdu reports from local files or URLs in background
threads. Each source is loaded at most once per loader: concurrent requests
for the same source share the single in-flight future, and the parsed
snapshot is reused afterwards. Failures stay attached to that future and are
re-raised to every caller; nothing is retried.
"""

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Optional

from ncdudiff.core.parsing.ncdu_parser import ParserConfig, parse_snapshot_text
from ncdudiff.domain.snapshot_models import Snapshot
from ncdudiff.infra.fs import is_url
from ncdudiff.infra.network import fetch_report_text

logger = logging.getLogger(__name__)


class SnapshotLoader:
    """
    Memoizing, thread-backed report loader keyed by source location.
    """

    def __init__(
            self,
            config: Optional[ParserConfig] = None,
            executor: Optional[ThreadPoolExecutor] = None,
            request_timeout: Optional[int] = None,
    ) -> None:
        """
        Args:
            config: Parsing options shared by every report.
            executor: Worker pool; a private two-worker pool is created if omitted.
            request_timeout: Timeout in seconds for URL sources.
        """
        self._config = config or ParserConfig()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="ncdudiff-load"
        )
        self._request_timeout = request_timeout
        self._lock = threading.Lock()
        self._futures: Dict[str, "Future[Snapshot]"] = {}

    def __enter__(self) -> "SnapshotLoader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def load(self, source: str) -> "Future[Snapshot]":
        """
        Start loading `source` unless a load is already pending or done.

        Returns:
            Future[Snapshot]: The future shared by every request for this source.
        """
        key = self._key(source)
        with self._lock:
            future = self._futures.get(key)
            if future is None:
                logger.info(f"Loading report {source}")
                future = self._executor.submit(self._load_now, source)
                self._futures[key] = future
            return future

    def get(self, source: str) -> Snapshot:
        """Block until `source` is parsed and return it."""
        return self.load(source).result()

    def get_if_loaded(self, source: str) -> Optional[Snapshot]:
        """Return the parsed snapshot if it finished loading successfully."""
        with self._lock:
            future = self._futures.get(self._key(source))
        if future is None or not future.done() or future.exception() is not None:
            return None
        return future.result()

    # -------------------------------------------------------------------------
    # INTERNAL HELPERS
    # -------------------------------------------------------------------------

    @staticmethod
    def _key(source: str) -> str:
        return source if is_url(source) else os.path.realpath(source)

    def _load_now(self, source: str) -> Snapshot:
        if is_url(source):
            text = fetch_report_text(source, timeout=self._request_timeout)
        else:
            with open(source, "r", encoding="utf-8") as f:
                text = f.read()
        snapshot = parse_snapshot_text(text, source, self._config)
        logger.debug(f"Report {source} parsed: {len(snapshot.node_by_id)} nodes")
        return snapshot
