from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Builders for ncdu export documents and report files.
3. Isolation of the user data directory.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# ncdu Export Builders
# -----------------------------------------------------------------------------
class NcduDump:
    """Tiny DSL producing ncdu JSON export structures."""

    @staticmethod
    def file(name: str, asize: int = 0, dsize: int | None = None, **extra: Any) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"name": name, "asize": asize, "dsize": asize if dsize is None else dsize}
        entry.update(extra)
        return entry

    @staticmethod
    def dir(name: str, *children: Any, asize: int = 0, dsize: int = 0, **extra: Any) -> List[Any]:
        head: Dict[str, Any] = {"name": name, "asize": asize, "dsize": dsize}
        head.update(extra)
        return [head, *children]

    @staticmethod
    def export(root: Any, progver: str = "1.14.2", major: int = 1, minor: int = 1) -> List[Any]:
        return [major, minor, {"progname": "ncdu", "progver": progver, "timestamp": 1500000000}, root]


@pytest.fixture
def ncdu() -> NcduDump:
    """Provide the ncdu export builder."""
    return NcduDump()


@pytest.fixture
def write_report(tmp_path: Path) -> Callable[[str, Any], Path]:
    """
    Return a helper that writes an export document to a JSON file.

    Returns:
        Callable[[str, Any], Path]: (file_name, document) -> written path.
    """
    def _write(file_name: str, document: Any) -> Path:
        path = tmp_path / file_name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def example_pair(ncdu: NcduDump) -> Dict[str, Any]:
    """
    The two-snapshot example: "a" grows by 50 bytes and "b" is created.

    Returns:
        Dict[str, Any]: {"old": document, "new": document}.
    """
    old = ncdu.export(ncdu.dir("root", ncdu.file("a", 100, 100)))
    new = ncdu.export(ncdu.dir("root", ncdu.file("a", 150, 150), ncdu.file("b", 50, 50)))
    return {"old": old, "new": new}


@pytest.fixture
def isolated_user_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the persisted configuration file into a temporary directory."""
    import ncdudiff.domain.config as config_module

    user_dir = tmp_path / "user_data"
    user_dir.mkdir()
    monkeypatch.setattr(config_module, "CONFIG_FILE", str(user_dir / "config.json"))
    return user_dir
