from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides understood by the validator.
"""

import argparse
from typing import Any, Dict, List, Optional

from ncdudiff.domain.constants import APP_NAME, APP_VERSION

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the ncdudiff CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        description=(
            "Compare two ncdu JSON exports and show what was created, removed "
            "or changed. With more than two reports, the first and the last are compared."
        ),
    )

    p.add_argument(
        "reports",
        nargs="+",
        help="ncdu export files, directories containing them, or http(s) URLs.",
    )

    # --- Parsing ---
    p.add_argument(
        "--ignore",
        dest="ignore_paths",
        default=None,
        help="Comma-separated full entry paths to skip while parsing.",
    )
    p.add_argument(
        "--timeout",
        dest="request_timeout",
        type=int,
        default=None,
        help="Timeout in seconds for reports fetched over HTTP.",
    )

    # --- Diff mode ---
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        "--lazy",
        action="store_true",
        help="Resolve the diff level by level, only where it is displayed.",
    )
    mode.add_argument(
        "--full",
        action="store_true",
        help="Materialize the whole diff tree up front.",
    )
    p.add_argument(
        "--expand",
        dest="expand_path",
        default=None,
        help="Show only the subtree at this path (root name first, '/'-separated).",
    )

    # --- Rendering ---
    p.add_argument(
        "--depth",
        dest="max_depth",
        type=int,
        default=None,
        help="Levels to display below the roots (-1 for unlimited).",
    )
    p.add_argument(
        "--changed-only",
        action="store_true",
        help="Hide entries whose sizes and counts did not change.",
    )
    p.add_argument(
        "--apparent",
        action="store_true",
        help="Show apparent sizes instead of disk usage.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the diff as JSON.",
    )

    # --- Configuration and diagnostics ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Persist the effective configuration for later runs.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--log-file",
        action="store_true",
        help="Also write logs to the user data directory.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration overrides subset.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Overrides; None values mean "keep the base value".
    """
    overrides: Dict[str, Any] = {}

    overrides["ignore_paths"] = _split_csv(args.ignore_paths)
    overrides["request_timeout"] = args.request_timeout
    overrides["max_depth"] = args.max_depth

    if args.lazy:
        overrides["lazy"] = True
    elif args.full:
        overrides["lazy"] = False

    if args.changed_only:
        overrides["changed_only"] = True
    if args.apparent:
        overrides["show_sizes"] = "apparent"
    if args.log_file:
        overrides["save_log"] = True
    if args.debug:
        overrides["log_level"] = "DEBUG"

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Convert a comma-separated string into a list of sanitized strings."""
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
