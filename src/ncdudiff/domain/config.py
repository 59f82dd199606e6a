from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of user preferences as JSON in the user data
directory, with default fallback when the file is missing or corrupted.
"""

import json
import logging
import os
from typing import Any, Dict

from ncdudiff.domain.constants import (
    CURRENT_CONFIG_VERSION,
    EXPECTED_FORMAT_VERSION,
    EXPECTED_PROGVER,
)
from ncdudiff.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")

SIZE_MODES = ("disk", "apparent")


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Parsing
        "ignore_paths": [],
        "expected_progver": EXPECTED_PROGVER,
        "expected_format": EXPECTED_FORMAT_VERSION,

        # Diff mode
        "lazy": True,

        # Rendering
        "max_depth": -1,
        "changed_only": False,
        "show_sizes": "disk",

        # Remote reports
        "request_timeout": 10,

        # Diagnostics
        "log_level": "WARNING",
        "save_log": False,
    }


def get_default_app_state() -> Dict[str, Any]:
    """Generate the complete persisted state structure."""
    return {
        "version": CURRENT_CONFIG_VERSION,
        "last_session": get_default_config(),
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_app_state() -> Dict[str, Any]:
    """
    Load application state from disk.

    Returns:
        Dict[str, Any]: The loaded state, or the default structure on failure.
    """
    default_state = get_default_app_state()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Returning defaults.")
        return default_state

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return default_state

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return default_state

    state = default_state
    if isinstance(data.get("last_session"), dict):
        state["last_session"].update(data["last_session"])
    state["version"] = CURRENT_CONFIG_VERSION
    return state


def save_app_state(state: Dict[str, Any]) -> None:
    """Persist application state to disk."""
    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        state["version"] = CURRENT_CONFIG_VERSION
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {CONFIG_FILE}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


# -----------------------------------------------------------------------------
# Facade API
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """Retrieve the active configuration (last session merged over defaults)."""
    state = load_app_state()
    defaults = get_default_config()
    defaults.update(state.get("last_session", {}))
    return defaults


def save_config(config: Dict[str, Any]) -> None:
    """Persist `config` as the last session."""
    state = load_app_state()
    state["last_session"] = config
    save_app_state(state)
