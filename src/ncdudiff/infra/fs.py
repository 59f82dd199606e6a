from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides the user data directory and discovery of ncdu report files given
on the command line (files, directories or URLs).
"""

import os
from typing import List

from ncdudiff.domain.constants import REPORT_FILE_EXTENSION

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "NcduDiff"
UNIX_APP_DIR_NAME = ".ncdudiff"
URL_SCHEMES = ("http://", "https://")

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the OS-specific directory for persistent application data.

    Standards:
    - Windows: %LOCALAPPDATA%/NcduDiff
    - Linux/Mac: ~/.ncdudiff

    Returns:
        str: Absolute path to the application data directory (created if missing).
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def is_url(source: str) -> bool:
    return source.lower().startswith(URL_SCHEMES)

# -----------------------------------------------------------------------------
# REPORT DISCOVERY API
# -----------------------------------------------------------------------------

def find_report_files(sources: List[str]) -> List[str]:
    """
    Expand command-line report arguments into a flat list of reports.

    URLs are kept verbatim. Local paths have their symlinks resolved;
    directories are walked recursively for `.json` files (sorted per directory).

    Args:
        sources: Raw report arguments.

    Returns:
        List[str]: Report locations in argument order.

    Raises:
        FileNotFoundError: If a local path does not exist.
    """
    res: List[str] = []
    for source in sources:
        if is_url(source):
            res.append(source)
            continue

        real = os.path.realpath(os.path.expanduser(source))
        if not os.path.exists(real):
            raise FileNotFoundError(f"report path does not exist: {source}")

        if os.path.isdir(real):
            res.extend(_collect_reports_from_dir(real))
        else:
            res.append(real)
    return res


def _collect_reports_from_dir(dirpath: str) -> List[str]:
    found: List[str] = []
    for root, dirs, files in os.walk(dirpath):
        dirs.sort()
        for file_name in sorted(files):
            if file_name.endswith(REPORT_FILE_EXTENSION):
                found.append(os.path.join(root, file_name))
    return found
