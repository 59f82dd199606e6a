from __future__ import annotations

"""
Domain Constants.

Centralizes versioning, the expected ncdu dump format and the display
markers shared by the engine and the terminal renderer.
"""

from typing import Dict

APP_NAME = "ncdudiff"
APP_VERSION = "0.3.0"
CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# NCDU DUMP FORMAT
# -----------------------------------------------------------------------------
# https://dev.yorhel.nl/ncdu/jsonfmt
EXPECTED_FORMAT_VERSION = "1.1"
EXPECTED_PROGVER = "1.14.2"
REPORT_FILE_EXTENSION = ".json"

# Key carrying a pre-aggregated rollup on a directory head entry
STORED_AGGR_KEY = "aggr"

# -----------------------------------------------------------------------------
# DIFF IDENTITY AND RENDERING
# -----------------------------------------------------------------------------
ABSENT_SIDE_MARK = "-"
IDENTITY_SEPARATOR = "|"
PATH_SEPARATOR = "/"

STATUS_MARKERS: Dict[str, str] = {
    "created": "+",
    "removed": "-",
    "changed": "~",
    "unchanged": " ",
}
