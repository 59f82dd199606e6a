from __future__ import annotations

"""
Unit tests for Configuration Domain persistence.

Verifies default generation, round-trip persistence and recovery from
corrupted or missing state files.
"""

import json
from pathlib import Path

from ncdudiff.domain.config import (
    get_default_app_state,
    get_default_config,
    load_app_state,
    load_config,
    save_config,
)
from ncdudiff.domain.constants import CURRENT_CONFIG_VERSION


def test_default_config_keys() -> None:
    cfg = get_default_config()

    assert set(cfg) == {
        "ignore_paths", "expected_progver", "expected_format", "lazy",
        "max_depth", "changed_only", "show_sizes", "request_timeout",
        "log_level", "save_log",
    }
    assert get_default_app_state()["version"] == CURRENT_CONFIG_VERSION


def test_missing_file_returns_defaults(isolated_user_dir: Path) -> None:
    assert load_config() == get_default_config()


def test_save_and_load_round_trip(isolated_user_dir: Path) -> None:
    cfg = get_default_config()
    cfg["changed_only"] = True
    cfg["ignore_paths"] = ["root/tmp"]

    save_config(cfg)
    loaded = load_config()

    assert loaded["changed_only"] is True
    assert loaded["ignore_paths"] == ["root/tmp"]
    assert (isolated_user_dir / "config.json").exists()


def test_partial_file_is_merged_over_defaults(isolated_user_dir: Path) -> None:
    (isolated_user_dir / "config.json").write_text(
        json.dumps({"version": "0.1", "last_session": {"max_depth": 2}}), encoding="utf-8"
    )

    state = load_app_state()

    assert state["version"] == CURRENT_CONFIG_VERSION
    assert state["last_session"]["max_depth"] == 2
    assert state["last_session"]["lazy"] is True


def test_corrupted_file_falls_back(isolated_user_dir: Path) -> None:
    (isolated_user_dir / "config.json").write_text("{not json", encoding="utf-8")
    assert load_app_state() == get_default_app_state()

    (isolated_user_dir / "config.json").write_text("[1, 2]", encoding="utf-8")
    assert load_app_state() == get_default_app_state()
